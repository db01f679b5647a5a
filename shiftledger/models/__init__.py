"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
test schema creation.

Modules:
    organization: 조직, 근무지 (Organization with overtime policy, Location)
    user: 사용자 및 조직 멤버십 (User and Member)
    shift: 시프트 및 배정 (Shift and ShiftAssignment)
    correction: 근무시간 정정 요청 (Time correction requests)
    audit: 감사 로그 (Audit log and assignment audit events)
    notification: 예약 알림 (Scheduled reminders)
"""

from shiftledger.models.organization import Organization, Location
from shiftledger.models.user import User, Member
from shiftledger.models.shift import Shift, ShiftAssignment
from shiftledger.models.correction import TimeCorrectionRequest
from shiftledger.models.audit import AuditLog, AssignmentAuditEvent
from shiftledger.models.notification import ScheduledNotification

__all__ = [
    "Organization", "Location",
    "User", "Member",
    "Shift", "ShiftAssignment",
    "TimeCorrectionRequest",
    "AuditLog", "AssignmentAuditEvent",
    "ScheduledNotification",
]
