from __future__ import annotations

import calendar
from datetime import date


def add_months(base: date, months: int) -> date:
    """
    Shift `base` by whole calendar months, the unit validity periods and the
    expiring window are expressed in.

    A day that does not exist in the target month falls back to that month's
    last day, so a window opened on 31 January closes on 28/29 February and a
    29 February grant renewed for 12 months ends on 28 February.
    Negative values move backwards.
    """
    if months == 0:
        return base

    year, month_index = divmod(base.year * 12 + base.month - 1 + months, 12)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return base.replace(year=year, month=month, day=min(base.day, last_day))
