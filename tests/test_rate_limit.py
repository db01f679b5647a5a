"""요청 속도 제한 테스트.

Rate limiter tests — slowapi-backed fixed windows keyed per actor and
scope, plus the RATE_LIMITED response with Retry-After.
"""

from httpx import AsyncClient

from shiftledger.config import settings
from shiftledger.middleware.rate_limit import current_limit, limiter
from tests.conftest import auth_header


def approve_url(shift_id) -> str:
    return f"/api/v1/admin/shifts/{shift_id}/approve"


class TestCurrentLimit:
    """설정값 반영 테스트."""

    def test_reflects_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 7)
        monkeypatch.setattr(settings, "RATE_LIMIT_WINDOW_SECONDS", 30)

        item = current_limit()

        assert item.amount == 7
        assert item.get_expiry() == 30


class TestRateLimitedEndpoint:
    """RATE_LIMITED 응답 테스트."""

    async def test_returns_429_with_retry_after(
        self, client: AsyncClient, admin_token, make_shift, monkeypatch
    ):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 1)
        shift = await make_shift(status="draft")

        first = await client.post(approve_url(shift.id), headers=auth_header(admin_token))
        second = await client.post(approve_url(shift.id), headers=auth_header(admin_token))

        assert first.status_code == 400  # draft는 승인 불가, 카운터는 증가
        assert second.status_code == 429
        body = second.json()["detail"]
        assert body["code"] == "RATE_LIMITED"
        assert 1 <= body["retry_after_seconds"] <= settings.RATE_LIMIT_WINDOW_SECONDS
        assert second.headers["retry-after"] == str(body["retry_after_seconds"])

    async def test_rejected_requests_still_count(
        self, client: AsyncClient, manager_token, make_shift, monkeypatch
    ):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 2)
        shift = await make_shift()

        codes = [
            (await client.post(approve_url(shift.id), headers=auth_header(manager_token))).status_code
            for _ in range(3)
        ]

        # 매니저는 승인 권한이 없음 (Managers cannot approve)
        assert codes == [403, 403, 429]

    async def test_scopes_counted_separately(
        self, client: AsyncClient, admin_token, make_shift, monkeypatch
    ):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 1)
        shift = await make_shift(status="draft")

        await client.post(approve_url(shift.id), headers=auth_header(admin_token))
        res = await client.get(
            "/api/v1/admin/timesheets/export",
            params={"start": "2026-03-02", "end": "2026-03-08"},
            headers=auth_header(admin_token),
        )

        assert res.status_code == 200

    async def test_actors_counted_separately(
        self, client: AsyncClient, admin_token, manager_token, make_shift, monkeypatch
    ):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 1)
        shift = await make_shift(status="draft")

        await client.post(approve_url(shift.id), headers=auth_header(admin_token))
        res = await client.post(approve_url(shift.id), headers=auth_header(manager_token))

        assert res.status_code == 403

    async def test_reset_clears_counts(
        self, client: AsyncClient, admin_token, make_shift, monkeypatch
    ):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 1)
        shift = await make_shift(status="draft")
        await client.post(approve_url(shift.id), headers=auth_header(admin_token))

        limiter.reset()
        res = await client.post(approve_url(shift.id), headers=auth_header(admin_token))

        assert res.status_code == 400

    async def test_disabled(self, client: AsyncClient, admin_token, make_shift, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 1)
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
        shift = await make_shift(status="draft")

        for _ in range(3):
            res = await client.post(approve_url(shift.id), headers=auth_header(admin_token))
            assert res.status_code == 400
