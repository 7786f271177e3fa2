"""create_marketplace_tables

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-18 12:00:00.000000

마켓플레이스 초기 스키마: users, shifts, shift_assignments, shift_blocks,
applications, invoices, employee_week_payments, platform_configs.
Initial marketplace schema.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'a1c2e3f4b5d6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # users — 카페/직원/관리자 (cafés, employees, admins)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('shop_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('approval_status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
    )

    # shifts — 근무 게시물 (shift postings with stored cost fields)
    op.create_table(
        'shifts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('cafe_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('required_employees', sa.Integer(), server_default='1', nullable=False),
        sa.Column('accepted_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(30), server_default='pending_approval', nullable=False),
        sa.Column('base_hourly_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('employee_hourly_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('platform_fee', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('total_cost', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('penalty_applied', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('penalty_amount', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('employee_penalty_applied', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('employee_penalty_amount', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('place_id', sa.String(255), nullable=True),
        sa.Column('payment_proof', sa.String(500), nullable=True),
        sa.Column('visibility', sa.String(20), server_default='all', nullable=False),
        sa.Column('visible_to', sa.JSON(), server_default='[]', nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            'accepted_count >= 0 AND accepted_count <= required_employees',
            name='ck_shift_accepted_count',
        ),
        sa.CheckConstraint('required_employees >= 1', name='ck_shift_required_employees'),
    )
    op.create_index('ix_shifts_status_date', 'shifts', ['status', 'date'])
    op.create_index('ix_shifts_cafe', 'shifts', ['cafe_id'])

    # shift_assignments — 확정 직원 (accepted employees, one row per slot)
    op.create_table(
        'shift_assignments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('shift_id', 'employee_id', name='uq_shift_assignment'),
    )
    op.create_index('ix_shift_assignments_employee', 'shift_assignments', ['employee_id'])

    # shift_blocks — 차단 직원 (permanent per-shift exclusions)
    op.create_table(
        'shift_blocks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('shift_id', 'employee_id', name='uq_shift_block'),
    )

    # applications — 근무 지원서 (one per shift/employee)
    op.create_table(
        'applications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('reviewed_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('shift_id', 'employee_id', name='uq_application_shift_employee'),
    )
    op.create_index('ix_applications_employee', 'applications', ['employee_id'])

    # invoices — 카페 인보이스 (one per shift)
    op.create_table(
        'invoices',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('invoice_number', sa.String(64), nullable=False, unique=True),
        sa.Column('cafe_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('shift_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('hours', sa.Numeric(6, 2), nullable=False),
        sa.Column('employees_count', sa.Integer(), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('base_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('platform_fee', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('penalty_amount', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(30), server_default='draft', nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_proof', sa.String(500), nullable=True),
        sa.Column('payment_proof_submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_proof_notes', sa.Text(), nullable=True),
        sa.Column('payment_proof_rejection_reason', sa.Text(), nullable=True),
        sa.Column('payment_proof_rejected_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    # employee_week_payments — 직원 주간 지급 기록
    op.create_table(
        'employee_week_payments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('shift_ids', sa.JSON(), server_default='[]', nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('payment_proof', sa.String(500), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('employee_id', 'week_start', name='uq_week_payment_employee_week'),
    )

    # platform_configs — 플랫폼 설정 싱글턴 (key = 'platform')
    op.create_table(
        'platform_configs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('key', sa.String(50), nullable=False, unique=True),
        sa.Column('platform_fee_per_shift', sa.Numeric(10, 2), nullable=True),
        sa.Column('free_shifts_per_cafe', sa.Integer(), nullable=True),
        sa.Column('platform_fee_percentage', sa.Numeric(5, 2), nullable=True),
        sa.Column('minimum_hours_before_shift', sa.Integer(), nullable=True),
        sa.Column('tier_floor_under_12h', sa.Numeric(10, 2), nullable=True),
        sa.Column('tier_floor_12_to_24h', sa.Numeric(10, 2), nullable=True),
        sa.Column('tier_floor_24h_plus', sa.Numeric(10, 2), nullable=True),
        sa.Column('cafe_penalty_percentage', sa.Numeric(5, 2), nullable=True),
        sa.Column('employee_penalty_percentage', sa.Numeric(5, 2), nullable=True),
        sa.Column('employee_price_deduction_percentage', sa.Numeric(5, 2), nullable=True),
        sa.Column('bank_details', sa.JSON(), nullable=True),
        sa.Column('updated_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('platform_configs')
    op.drop_table('employee_week_payments')
    op.drop_table('invoices')
    op.drop_index('ix_applications_employee', table_name='applications')
    op.drop_table('applications')
    op.drop_table('shift_blocks')
    op.drop_index('ix_shift_assignments_employee', table_name='shift_assignments')
    op.drop_table('shift_assignments')
    op.drop_index('ix_shifts_cafe', table_name='shifts')
    op.drop_index('ix_shifts_status_date', table_name='shifts')
    op.drop_table('shifts')
    op.drop_table('users')
