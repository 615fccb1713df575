"""Initial leave management schema

Revision ID: 001_initial_leave_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_leave_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def _balance_columns():
    columns = []
    for category in ('annual', 'casual', 'maternity', 'paternity', 'birthday'):
        for suffix in ('entitled', 'remaining', 'taken'):
            columns.append(
                sa.Column(f'{category}_leave_{suffix}', sa.Numeric(5, 2), nullable=False, server_default='0')
            )
    return columns


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='employee'),
        sa.Column('manager_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['manager_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_employee_id'), 'users', ['employee_id'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_manager_id'), 'users', ['manager_id'], unique=False)

    op.create_table(
        'employee_details',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('employment_type', sa.String(20), nullable=False, server_default='probation'),
        sa.Column('confirmation_date', sa.Date(), nullable=True),
        sa.Column('probation_start_date', sa.Date(), nullable=True),
        sa.Column('probation_end_date', sa.Date(), nullable=True),
        sa.Column('last_accrual_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_employee_details_id'), 'employee_details', ['id'], unique=False)

    op.create_table(
        'leave_entitlements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        *_balance_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'year', name='uq_leave_entitlements_user_year'),
    )
    op.create_index(op.f('ix_leave_entitlements_id'), 'leave_entitlements', ['id'], unique=False)
    op.create_index(op.f('ix_leave_entitlements_user_id'), 'leave_entitlements', ['user_id'], unique=False)
    op.create_index(op.f('ix_leave_entitlements_year'), 'leave_entitlements', ['year'], unique=False)

    op.create_table(
        'leaves',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column(
            'leave_type',
            sa.Enum('casual', 'annual', 'maternity', 'paternity', 'birthday', 'other', name='leave_type'),
            nullable=False,
        ),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('total_days', sa.Numeric(5, 2), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'approved', 'rejected', name='leave_status'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('is_non_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_days', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('non_paid_days', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('entitlement_year', sa.Integer(), nullable=False),
        sa.Column('manager_id', sa.Integer(), nullable=True),
        sa.Column('casual_leave_type', sa.String(50), nullable=True),
        sa.Column('which_half', sa.String(20), nullable=True),
        sa.Column('short_leave_out_time', sa.String(10), nullable=True),
        sa.Column('short_leave_in_time', sa.String(10), nullable=True),
        sa.Column('other_leave_type', sa.String(100), nullable=True),
        sa.Column('has_attended_bots', sa.Boolean(), nullable=True),
        sa.Column('attended_bots_count', sa.Integer(), nullable=True),
        sa.Column('bots_monitor', sa.String(255), nullable=True),
        sa.Column('email_autoforward', sa.String(255), nullable=True),
        sa.Column('has_client_calls', sa.Boolean(), nullable=True),
        sa.Column('call_leader', sa.String(255), nullable=True),
        sa.Column('passwords_on_lastpass', sa.Boolean(), nullable=True),
        sa.Column('passwords_shared', sa.Boolean(), nullable=True),
        sa.Column('projects', sa.Text(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('job_handover_person', sa.String(255), nullable=False),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['manager_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['reviewed_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_date <= end_date', name='check_start_date_le_end_date'),
        sa.CheckConstraint('total_days > 0', name='check_total_days_positive'),
    )
    op.create_index(op.f('ix_leaves_id'), 'leaves', ['id'], unique=False)
    op.create_index(op.f('ix_leaves_user_id'), 'leaves', ['user_id'], unique=False)
    op.create_index(op.f('ix_leaves_manager_id'), 'leaves', ['manager_id'], unique=False)
    op.create_index('ix_leaves_user_dates', 'leaves', ['user_id', 'start_date', 'end_date'], unique=False)

    op.create_table(
        'monthly_leave_accruals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('month', sa.Date(), nullable=False),
        sa.Column('casual_leave_earned', sa.Numeric(5, 2), nullable=False),
        sa.Column('casual_leave_balance', sa.Numeric(5, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'month', name='uq_monthly_leave_accruals_user_month'),
    )
    op.create_index(op.f('ix_monthly_leave_accruals_id'), 'monthly_leave_accruals', ['id'], unique=False)
    op.create_index(op.f('ix_monthly_leave_accruals_user_id'), 'monthly_leave_accruals', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_table('monthly_leave_accruals')
    op.drop_table('leaves')
    op.drop_table('leave_entitlements')
    op.drop_table('employee_details')
    op.drop_table('users')
    sa.Enum(name='leave_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='leave_type').drop(op.get_bind(), checkfirst=True)
