"""권한 게이트 — 역할 해석 및 권한 확인.

Permission Gate — Resolves an actor's role in an organization and checks
it against a static permission catalog. Role strings stored on
memberships are parsed into a closed enumeration; anything unrecognized
becomes ``Role.UNKNOWN``, which holds no permissions. The ``owner``
role is stored by some memberships and is treated as ``admin``.

Role Hierarchy:
    admin = owner (최고 권한, 승인 가능) > manager > member > unknown
"""

from enum import Enum
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.repositories.member_repository import member_repository
from shiftledger.utils.exceptions import ForbiddenError


# 저장된 별칭 역할 — Stored role aliases
_ROLE_ALIASES: dict[str, str] = {"owner": "admin"}


class Role(str, Enum):
    """조직 내 역할 (Closed role enumeration)."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        """역할 문자열을 파싱합니다. owner는 admin, 알 수 없는 값은 UNKNOWN."""
        normalized = (value or "").strip().lower()
        try:
            role = cls(_ROLE_ALIASES.get(normalized, normalized))
        except ValueError:
            return cls.UNKNOWN
        return role


_MANAGER_PERMISSIONS: frozenset[str] = frozenset({
    "shifts:read",
    "shifts:write",
    "shifts:cancel",
    "timesheets:read",
    "timesheets:write",
    "timesheets:export",
    "adjustments:read",
    "adjustments:review",
})

ROLE_PERMISSIONS: dict[Role, frozenset[str]] = {
    Role.ADMIN: _MANAGER_PERMISSIONS | {"shifts:approve"},
    Role.MANAGER: _MANAGER_PERMISSIONS,
    Role.MEMBER: frozenset({
        "shifts:read:own",
        "timesheets:read:own",
        "adjustments:create",
        "adjustments:read:own",
    }),
    Role.UNKNOWN: frozenset(),
}


def authorize(role: Role, permission: str) -> bool:
    """역할이 권한을 가지는지 확인합니다.

    Check a permission. Holding ``x:y`` also grants ``x:y:own``.
    """
    granted = ROLE_PERMISSIONS.get(role, frozenset())
    if permission in granted:
        return True
    if permission.endswith(":own"):
        return permission[: -len(":own")] in granted
    return False


class PermissionService:
    """권한 게이트 서비스."""

    async def resolve_role(
        self,
        db: AsyncSession,
        actor_id: UUID,
        organization_id: UUID,
    ) -> Role | None:
        """조직 내 사용자 역할을 조회합니다. 멤버가 아니면 None."""
        membership = await member_repository.get_membership(db, organization_id, actor_id)
        if membership is None:
            return None
        return Role.parse(membership.role)

    async def require(
        self,
        db: AsyncSession,
        actor_id: UUID,
        organization_id: UUID,
        permission: str,
    ) -> Role:
        """권한이 없으면 ForbiddenError를 발생시킵니다.

        Resolve the actor's role and enforce ``permission``.

        Returns:
            Role: 확인된 역할 (The resolved role)

        Raises:
            ForbiddenError: 멤버가 아니거나 권한 부족 (Not a member, or lacking permission)
        """
        role = await self.resolve_role(db, actor_id, organization_id)
        if role is None:
            raise ForbiddenError("조직 멤버가 아닙니다 (Not a member of this organization)")
        if not authorize(role, permission):
            raise ForbiddenError(
                f"권한이 부족합니다 (Insufficient permissions: {permission})",
                required=permission,
                role=role.value,
            )
        return role


# 싱글턴 인스턴스 — Singleton instance
permission_service: PermissionService = PermissionService()
