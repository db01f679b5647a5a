"""시프트 상태 머신 — 허용된 상태 전이 검증.

Shift state machine — Pure validation of legal shift status transitions.
Holds no state and touches no database; callers pair it with an
optimistic ``WHERE status = <current>`` update.

Transition Table:
    draft       → published, cancelled
    published   → assigned, cancelled
    assigned    → published, in-progress, cancelled
    in-progress → completed, cancelled
    completed   → approved, in-progress   (정정을 위한 재오픈, reopen for correction)
    approved    → completed               (승인 취소, un-approve)
    cancelled   → published               (재게시, re-list)

    draft로 들어오는 전이는 없으며, 자기 자신으로의 전이도 불가.
    Nothing transitions into draft; no status transitions to itself.
"""

from enum import Enum

from shiftledger.utils.exceptions import InvalidTransitionError


class ShiftStatus(str, Enum):
    """시프트 상태 (Shift lifecycle status)."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    APPROVED = "approved"
    CANCELLED = "cancelled"


VALID_TRANSITIONS: dict[ShiftStatus, frozenset[ShiftStatus]] = {
    ShiftStatus.DRAFT: frozenset({ShiftStatus.PUBLISHED, ShiftStatus.CANCELLED}),
    ShiftStatus.PUBLISHED: frozenset({ShiftStatus.ASSIGNED, ShiftStatus.CANCELLED}),
    ShiftStatus.ASSIGNED: frozenset({ShiftStatus.PUBLISHED, ShiftStatus.IN_PROGRESS, ShiftStatus.CANCELLED}),
    ShiftStatus.IN_PROGRESS: frozenset({ShiftStatus.COMPLETED, ShiftStatus.CANCELLED}),
    ShiftStatus.COMPLETED: frozenset({ShiftStatus.APPROVED, ShiftStatus.IN_PROGRESS}),
    ShiftStatus.APPROVED: frozenset({ShiftStatus.COMPLETED}),
    ShiftStatus.CANCELLED: frozenset({ShiftStatus.PUBLISHED}),
}

# 종료 상태 — 배정 해제/편집이 불가한 상태 (Statuses that block unassign)
TERMINAL_STATUSES: frozenset[str] = frozenset({
    ShiftStatus.COMPLETED.value,
    ShiftStatus.APPROVED.value,
    ShiftStatus.CANCELLED.value,
})

# 편집 가능한 상태 — Statuses in which shift details may be edited
EDITABLE_STATUSES: frozenset[str] = frozenset({
    ShiftStatus.DRAFT.value,
    ShiftStatus.PUBLISHED.value,
    ShiftStatus.ASSIGNED.value,
})


def can_transition(current: str, next_status: str) -> bool:
    """전이 가능 여부를 반환합니다. 알 수 없는 상태 문자열은 False."""
    try:
        current_status = ShiftStatus(current)
        target = ShiftStatus(next_status)
    except ValueError:
        return False
    return target in VALID_TRANSITIONS[current_status]


def validate_transition(current: str, next_status: str) -> None:
    """상태 전이를 검증합니다.

    Raise unless ``next_status`` is a legal next state of ``current``.

    Args:
        current: 현재 상태 (Current shift status)
        next_status: 목표 상태 (Requested next status)

    Raises:
        InvalidTransitionError: 허용되지 않는 전이 (Illegal transition)
    """
    if not can_transition(current, next_status):
        raise InvalidTransitionError(
            f"허용되지 않는 상태 전이입니다 (Invalid shift status transition: {current} -> {next_status})",
            current_status=current,
            requested_status=next_status,
        )
