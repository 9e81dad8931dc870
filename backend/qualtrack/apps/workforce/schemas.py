from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class EmployeeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    job_title_id: Optional[str] = None
    department_id: Optional[str] = None
    supervisor_id: Optional[str] = None
    is_active: bool
    is_trainer: bool
