"""initial_shiftledger_schema

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-19 09:00:00.000000

시프트 라이프사이클 및 타임시트 정산 테이블 생성.
Create shift lifecycle and timesheet reconciliation tables: organizations,
locations, users, members, shifts, shift_assignments,
time_correction_requests, audit_logs, assignment_audit_events,
scheduled_notifications.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = 'a0b1c2d3e4f5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # organizations — 조직 및 초과근무 정책
    # Organizations with their overtime policy
    op.create_table(
        'organizations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('overtime_policy', sa.String(20), server_default='weekly', nullable=False),
        sa.Column('daily_overtime_minutes', sa.Integer(), server_default='480', nullable=False),
        sa.Column('weekly_overtime_minutes', sa.Integer(), server_default='2400', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # locations — 근무지 (IANA 시간대 포함)
    # Work locations carrying an IANA timezone name
    op.create_table(
        'locations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('timezone', sa.String(64), server_default='UTC', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # members — 조직 멤버십 및 역할
    # Organization membership and role
    op.create_table(
        'members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(50), server_default='member', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_unique_constraint('uq_member_org_user', 'members', ['organization_id', 'user_id'])

    # shifts — 시프트 (상태 머신: draft → ... → approved)
    # Shifts with their lifecycle status
    op.create_table(
        'shifts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', UUID(as_uuid=True), sa.ForeignKey('locations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('capacity', sa.Integer(), server_default='1', nullable=False),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), server_default='draft', nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_shifts_org_start', 'shifts', ['organization_id', 'start_time'])
    op.create_index('ix_shifts_org_status', 'shifts', ['organization_id', 'status'])

    # shift_assignments — 근무자 배정 및 출퇴근/확정 시각
    # Worker assignments with raw, effective, and billed time
    op.create_table(
        'shift_assignments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('worker_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('actual_clock_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('clock_in_method', sa.String(30), nullable=True),
        sa.Column('clock_out_method', sa.String(30), nullable=True),
        sa.Column('clock_in_unverified', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('clock_out_unverified', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('effective_clock_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('effective_clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('break_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_duration_minutes', sa.Integer(), nullable=True),
        sa.Column('budget_rate_snapshot', sa.Integer(), nullable=True),
        sa.Column('estimated_cost_cents', sa.Integer(), server_default='0', nullable=False),
        sa.Column('needs_review', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('review_reason', sa.String(50), nullable=True),
        sa.Column('review_note', sa.Text(), nullable=True),
        sa.Column('adjusted_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('adjusted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('adjustment_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_shift_assignments_shift', 'shift_assignments', ['shift_id'])
    op.create_index('ix_shift_assignments_worker', 'shift_assignments', ['worker_id'])

    # time_correction_requests — 근무자 정정 요청
    # Worker correction requests
    op.create_table(
        'time_correction_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assignment_id', UUID(as_uuid=True), sa.ForeignKey('shift_assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('worker_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('requested_clock_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('requested_clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('requested_break_minutes', sa.Integer(), nullable=True),
        sa.Column('original_clock_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('original_clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('original_break_minutes', sa.Integer(), nullable=True),
        sa.Column('original_effective_clock_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('original_effective_clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('reviewed_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewer_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_time_corrections_org_status', 'time_correction_requests', ['organization_id', 'status'])
    op.create_index('ix_time_corrections_worker', 'time_correction_requests', ['worker_id'])

    # 배정당 대기 중 요청 1건 — At most one pending request per assignment
    op.create_index(
        'uq_time_correction_pending_assignment',
        'time_correction_requests',
        ['assignment_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    # audit_logs — 조직 단위 감사 로그 (append-only)
    # Organization-scoped append-only audit log
    op.create_table(
        'audit_logs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', UUID(as_uuid=True), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', UUID(as_uuid=True), nullable=False),
        sa.Column('metadata', JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_org_entity', 'audit_logs', ['organization_id', 'entity_type', 'entity_id'])

    # assignment_audit_events — 배정 상태 변경 이력
    # Assignment status change events
    op.create_table(
        'assignment_audit_events',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('assignment_id', UUID(as_uuid=True), sa.ForeignKey('shift_assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', UUID(as_uuid=True), nullable=True),
        sa.Column('previous_status', sa.String(20), nullable=True),
        sa.Column('new_status', sa.String(20), nullable=True),
        sa.Column('metadata', JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_assignment_audit_events_assignment', 'assignment_audit_events', ['assignment_id'])

    # scheduled_notifications — 시프트 리마인더 예약
    # Scheduled shift reminders
    op.create_table(
        'scheduled_notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('worker_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('notification_type', sa.String(30), nullable=False),
        sa.Column('scheduled_for', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        'ix_scheduled_notifications_shift_worker',
        'scheduled_notifications',
        ['shift_id', 'worker_id', 'status'],
    )


def downgrade() -> None:
    op.drop_index('ix_scheduled_notifications_shift_worker', table_name='scheduled_notifications')
    op.drop_table('scheduled_notifications')
    op.drop_index('ix_assignment_audit_events_assignment', table_name='assignment_audit_events')
    op.drop_table('assignment_audit_events')
    op.drop_index('ix_audit_logs_org_entity', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index('uq_time_correction_pending_assignment', table_name='time_correction_requests')
    op.drop_index('ix_time_corrections_worker', table_name='time_correction_requests')
    op.drop_index('ix_time_corrections_org_status', table_name='time_correction_requests')
    op.drop_table('time_correction_requests')
    op.drop_index('ix_shift_assignments_worker', table_name='shift_assignments')
    op.drop_index('ix_shift_assignments_shift', table_name='shift_assignments')
    op.drop_table('shift_assignments')
    op.drop_index('ix_shifts_org_status', table_name='shifts')
    op.drop_index('ix_shifts_org_start', table_name='shifts')
    op.drop_table('shifts')
    op.drop_constraint('uq_member_org_user', 'members', type_='unique')
    op.drop_table('members')
    op.drop_table('users')
    op.drop_table('locations')
    op.drop_table('organizations')
