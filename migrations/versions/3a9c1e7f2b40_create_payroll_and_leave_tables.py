"""create payroll, leave and notification tables

Revision ID: 3a9c1e7f2b40
Revises:
Create Date: 2024-06-03 09:12:44.118203
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '3a9c1e7f2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        *_audit_columns(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('is_superuser', sa.Boolean(), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'roles',
        *_audit_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_system_role', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_roles_name', 'roles', ['name'], unique=True)

    op.create_table(
        'user_roles',
        *_audit_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id'), nullable=False),
        sa.Column('assigned_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )

    op.create_table(
        'employees',
        *_audit_columns(),
        sa.Column('employee_code', sa.String(length=20), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_employees_employee_code', 'employees', ['employee_code'], unique=True)

    op.create_table(
        'employee_profiles',
        *_audit_columns(),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False, unique=True),
        sa.Column('convention', sa.String(length=150), nullable=True),
        sa.Column('contract_status', sa.String(length=50), nullable=True),
        sa.Column('qualification', sa.String(length=150), nullable=True),
        sa.Column('tax_parts', sa.Integer(), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('employer_name', sa.String(length=200), nullable=True),
        sa.Column('site', sa.String(length=255), nullable=True),
    )

    op.create_table(
        'payroll_records',
        *_audit_columns(),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('period_year', sa.Integer(), nullable=False),
        sa.Column('period_month', sa.Integer(), nullable=False),
        sa.Column('base_salary', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('over_salary', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('displacement_allowance', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('transport_allowance', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('income_tax', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('pension_contribution', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('minimum_tax_levy', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('gross_total', sa.BigInteger(), nullable=False),
        sa.Column('total_deductions', sa.BigInteger(), nullable=False),
        sa.Column('net_payable', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'VALIDATED', 'PAID', name='payrollstatus'), nullable=False),
        sa.Column('payment_method', sa.Enum('BANK_TRANSFER', 'CASH', 'MOBILE_MONEY', name='paymentmethod'), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('payment_reference', sa.String(length=100), nullable=True),
        sa.Column('validated_by', sa.Integer(), nullable=True),
        sa.Column('validated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_by', sa.Integer(), nullable=True),
        sa.UniqueConstraint('employee_id', 'period_year', 'period_month', name='uq_payroll_employee_period'),
    )
    op.create_index('ix_payroll_records_employee_id', 'payroll_records', ['employee_id'])
    op.create_index('ix_payroll_records_status', 'payroll_records', ['status'])

    op.create_table(
        'leave_requests',
        *_audit_columns(),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('leave_type', sa.Enum('PAID', 'UNPAID', 'SICK', 'MATERNITY', 'PATERNITY', name='leavetype'), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='leavestatus'), nullable=False),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('review_comment', sa.Text(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_leave_requests_employee_id', 'leave_requests', ['employee_id'])
    op.create_index('ix_leave_requests_status', 'leave_requests', ['status'])

    op.create_table(
        'notifications',
        *_audit_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('notification_type', sa.String(length=50), nullable=True),
        sa.Column('related_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('leave_requests')
    op.drop_table('payroll_records')
    op.drop_table('employee_profiles')
    op.drop_table('employees')
    op.drop_table('user_roles')
    op.drop_table('roles')
    op.drop_table('users')
    sa.Enum(name='leavestatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='leavetype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='paymentmethod').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='payrollstatus').drop(op.get_bind(), checkfirst=True)
