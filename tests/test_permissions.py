"""권한 게이트 테스트 — 역할 파싱, 권한 카탈로그, 멤버십 확인."""

import pytest

from shiftledger.services.permission_service import ROLE_PERMISSIONS, Role, authorize, permission_service
from shiftledger.utils.exceptions import ForbiddenError


class TestRoleCatalog:
    """역할/권한 카탈로그 테스트."""

    @pytest.mark.parametrize("raw, expected", [
        ("admin", Role.ADMIN),
        (" Manager ", Role.MANAGER),
        ("member", Role.MEMBER),
        ("owner", Role.ADMIN),
        (" Owner", Role.ADMIN),
        ("superuser", Role.UNKNOWN),
        ("", Role.UNKNOWN),
        (None, Role.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert Role.parse(raw) is expected

    def test_only_admin_approves(self):
        assert authorize(Role.ADMIN, "shifts:approve")
        assert not authorize(Role.MANAGER, "shifts:approve")
        assert not authorize(Role.MEMBER, "shifts:approve")

    def test_full_permission_implies_own(self):
        assert authorize(Role.MANAGER, "adjustments:read:own")
        assert authorize(Role.MEMBER, "adjustments:read:own")
        assert not authorize(Role.MEMBER, "adjustments:read")

    def test_owner_can_approve(self):
        assert authorize(Role.parse("owner"), "shifts:approve")

    def test_admin_adds_only_approval(self):
        assert ROLE_PERMISSIONS[Role.ADMIN] - ROLE_PERMISSIONS[Role.MANAGER] == {"shifts:approve"}

    def test_unknown_role_has_nothing(self):
        assert not authorize(Role.UNKNOWN, "shifts:read:own")


class TestRequire:
    """멤버십 기반 권한 확인 테스트."""

    async def test_returns_role(self, db, org, manager_user):
        role = await permission_service.require(db, manager_user.id, org.id, "timesheets:write")
        assert role is Role.MANAGER

    async def test_missing_permission(self, db, org, worker):
        with pytest.raises(ForbiddenError) as exc_info:
            await permission_service.require(db, worker.id, org.id, "timesheets:write")
        assert exc_info.value.detail["required"] == "timesheets:write"

    async def test_not_a_member(self, db, org, outsider):
        with pytest.raises(ForbiddenError):
            await permission_service.require(db, outsider.id, org.id, "shifts:read:own")

    async def test_membership_is_per_organization(self, db, other_org, admin_user):
        with pytest.raises(ForbiddenError):
            await permission_service.require(db, admin_user.id, other_org.id, "shifts:approve")
