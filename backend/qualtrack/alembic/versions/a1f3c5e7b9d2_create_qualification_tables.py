"""create qualification, trainer, ledger and training tables

Revision ID: a1f3c5e7b9d2
Revises:
Create Date: 2025-01-06 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1f3c5e7b9d2'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ORIGIN = sa.Enum('MANDATORY', 'JOB_TITLE', 'ADDITIONAL_SKILL', name='qualification_origin_enum')
_TRAINING_STATUS = sa.Enum('PENDING', 'COMPLETED', name='training_status_enum')
_COMPLETION_STEP = sa.Enum('NOT_STARTED', 'STATUS_RECORDED', 'GRANTS_APPLIED', name='training_completion_step_enum')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'employees',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('job_title_id', sa.String(length=64), nullable=True),
        sa.Column('department_id', sa.String(length=64), nullable=True),
        sa.Column('supervisor_id', sa.String(length=36), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_trainer', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['supervisor_id'], ['employees.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_employees_full_name'), 'employees', ['full_name'], unique=False)
    op.create_index(op.f('ix_employees_job_title_id'), 'employees', ['job_title_id'], unique=False)
    op.create_index(op.f('ix_employees_department_id'), 'employees', ['department_id'], unique=False)
    op.create_index('idx_employees_department_active', 'employees', ['department_id', 'is_active'], unique=False)
    op.create_index('idx_employees_supervisor', 'employees', ['supervisor_id'], unique=False)

    op.create_table(
        'employee_skill_assignments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('additional_skill_id', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'additional_skill_id', name='uq_employee_skill_assignments_employee_skill'),
    )
    op.create_index(op.f('ix_employee_skill_assignments_employee_id'), 'employee_skill_assignments', ['employee_id'], unique=False)
    op.create_index(op.f('ix_employee_skill_assignments_additional_skill_id'), 'employee_skill_assignments', ['additional_skill_id'], unique=False)

    op.create_table(
        'qualifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('validity_months', sa.Integer(), nullable=False),
        sa.Column('origin', _ORIGIN, nullable=False),
        sa.Column('job_title_id', sa.String(length=64), nullable=True),
        sa.Column('additional_skill_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('validity_months > 0', name='ck_qualifications_validity_positive'),
        sa.CheckConstraint(
            "(origin = 'MANDATORY' AND job_title_id IS NULL AND additional_skill_id IS NULL)"
            " OR (origin = 'JOB_TITLE' AND job_title_id IS NOT NULL AND additional_skill_id IS NULL)"
            " OR (origin = 'ADDITIONAL_SKILL' AND additional_skill_id IS NOT NULL AND job_title_id IS NULL)",
            name='ck_qualifications_origin_target',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_qualifications_name'), 'qualifications', ['name'], unique=False)
    op.create_index(op.f('ix_qualifications_job_title_id'), 'qualifications', ['job_title_id'], unique=False)
    op.create_index(op.f('ix_qualifications_additional_skill_id'), 'qualifications', ['additional_skill_id'], unique=False)
    op.create_index('idx_qualifications_origin', 'qualifications', ['origin'], unique=False)

    op.create_table(
        'qualification_trainers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('qualification_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['qualification_id'], ['qualifications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'qualification_id', name='uq_qualification_trainers_employee_qualification'),
    )
    op.create_index(op.f('ix_qualification_trainers_employee_id'), 'qualification_trainers', ['employee_id'], unique=False)
    op.create_index(op.f('ix_qualification_trainers_qualification_id'), 'qualification_trainers', ['qualification_id'], unique=False)

    op.create_table(
        'trainings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('qualification_id', sa.String(length=36), nullable=True),
        sa.Column('trainer_assignment_id', sa.String(length=36), nullable=True),
        sa.Column('training_date', sa.Date(), nullable=False),
        sa.Column('status', _TRAINING_STATUS, nullable=False),
        sa.Column('completed_date', sa.Date(), nullable=True),
        sa.Column('document_count', sa.Integer(), nullable=False),
        sa.Column('completion_step', _COMPLETION_STEP, nullable=False),
        sa.Column('department_id', sa.String(length=64), nullable=True),
        sa.Column('is_for_entire_department', sa.Boolean(), nullable=False),
        sa.Column('created_by_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['qualification_id'], ['qualifications.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['trainer_assignment_id'], ['qualification_trainers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_trainings_qualification_id'), 'trainings', ['qualification_id'], unique=False)
    op.create_index(op.f('ix_trainings_trainer_assignment_id'), 'trainings', ['trainer_assignment_id'], unique=False)
    op.create_index(op.f('ix_trainings_status'), 'trainings', ['status'], unique=False)
    op.create_index(op.f('ix_trainings_department_id'), 'trainings', ['department_id'], unique=False)
    op.create_index('idx_trainings_qualification_status', 'trainings', ['qualification_id', 'status'], unique=False)
    op.create_index('idx_trainings_date', 'trainings', ['training_date'], unique=False)

    op.create_table(
        'training_participants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('training_id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['training_id'], ['trainings.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('training_id', 'employee_id', name='uq_training_participants_training_employee'),
    )
    op.create_index(op.f('ix_training_participants_training_id'), 'training_participants', ['training_id'], unique=False)
    op.create_index('idx_training_participants_employee', 'training_participants', ['employee_id'], unique=False)

    op.create_table(
        'employee_qualifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=36), nullable=False),
        sa.Column('qualification_id', sa.String(length=36), nullable=False),
        sa.Column('qualified_from', sa.Date(), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('is_provisional', sa.Boolean(), nullable=False),
        sa.Column('training_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['qualification_id'], ['qualifications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['training_id'], ['trainings.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_employee_qualifications_employee_id'), 'employee_qualifications', ['employee_id'], unique=False)
    op.create_index(op.f('ix_employee_qualifications_qualification_id'), 'employee_qualifications', ['qualification_id'], unique=False)
    op.create_index(op.f('ix_employee_qualifications_training_id'), 'employee_qualifications', ['training_id'], unique=False)
    op.create_index(
        'idx_employee_qualifications_latest',
        'employee_qualifications',
        ['employee_id', 'qualification_id', 'qualified_from'],
        unique=False,
    )
    op.create_index('idx_employee_qualifications_expiry', 'employee_qualifications', ['expiry_date'], unique=False)

    op.create_table(
        'audit_events',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('actor_id', sa.String(length=36), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('before', sa.JSON(), nullable=True),
        sa.Column('after', sa.JSON(), nullable=True),
        sa.Column('correlation_id', sa.String(length=64), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_events_entity_type'), 'audit_events', ['entity_type'], unique=False)
    op.create_index(op.f('ix_audit_events_entity_id'), 'audit_events', ['entity_id'], unique=False)
    op.create_index(op.f('ix_audit_events_action'), 'audit_events', ['action'], unique=False)
    op.create_index(op.f('ix_audit_events_actor_id'), 'audit_events', ['actor_id'], unique=False)
    op.create_index(op.f('ix_audit_events_occurred_at'), 'audit_events', ['occurred_at'], unique=False)
    op.create_index(op.f('ix_audit_events_correlation_id'), 'audit_events', ['correlation_id'], unique=False)
    op.create_index('ix_audit_events_entity', 'audit_events', ['entity_type', 'entity_id'], unique=False)
    op.create_index('ix_audit_events_time_desc', 'audit_events', [sa.text('occurred_at DESC')], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('audit_events')
    op.drop_table('employee_qualifications')
    op.drop_table('training_participants')
    op.drop_table('trainings')
    op.drop_table('qualification_trainers')
    op.drop_table('qualifications')
    op.drop_table('employee_skill_assignments')
    op.drop_table('employees')
    bind = op.get_bind()
    _COMPLETION_STEP.drop(bind, checkfirst=True)
    _TRAINING_STATUS.drop(bind, checkfirst=True)
    _ORIGIN.drop(bind, checkfirst=True)
