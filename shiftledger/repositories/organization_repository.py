"""조직 및 근무지 레포지토리.

Organization Repository — Organization (overtime policy) and Location lookups.
"""

from shiftledger.models.organization import Location, Organization
from shiftledger.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """조직 레포지토리 — 초과근무 정책 조회 (Overtime policy lookups)."""

    def __init__(self) -> None:
        super().__init__(Organization)


class LocationRepository(BaseRepository[Location]):
    """근무지 레포지토리 — 조직 범위 조회 (Organization-scoped lookups)."""

    def __init__(self) -> None:
        super().__init__(Location)


# 싱글턴 인스턴스 — Singleton instances
organization_repository: OrganizationRepository = OrganizationRepository()
location_repository: LocationRepository = LocationRepository()
