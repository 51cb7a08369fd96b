"""
In-memory repository for service tests.

Behaves like the Supabase adapter: unique site URLs, one override per
(client, site), idempotent override delete.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from exceptions import SiteURLExistsError
from models.client import Client
from models.pricing import PriceOverride
from models.publisher import Publisher
from models.site import SiteCreate, SiteResponse, SiteStatus
from repositories.base import MarketplaceRepository


class InMemoryRepository(MarketplaceRepository):
    """
    Usage:
        repo = InMemoryRepository(publishers=[...], clients=[...])
        repo.fail_next_create = RuntimeError("boom")  # make next create_site fail
    """

    def __init__(
        self,
        publishers: Optional[list[Publisher]] = None,
        clients: Optional[list[Client]] = None,
        sites: Optional[list[SiteResponse]] = None,
    ):
        self.publishers = list(publishers or [])
        self.clients = {c.id: c for c in clients or []}
        self.sites: dict[str, SiteResponse] = {s.id: s for s in sites or []}
        self.overrides: dict[tuple[str, str], PriceOverride] = {}
        self.fail_next_create: Optional[Exception] = None
        self.hide_url_lookups = False
        self.create_calls = 0

    def list_publishers(self) -> list[Publisher]:
        return list(self.publishers)

    def get_client(self, client_id: str) -> Optional[Client]:
        return self.clients.get(client_id)

    def get_site(self, site_id: str) -> Optional[SiteResponse]:
        return self.sites.get(site_id)

    def get_site_by_url(self, site_url: str) -> Optional[SiteResponse]:
        # Simulates a concurrent insert landing between lookup and insert
        if self.hide_url_lookups:
            return None
        for site in self.sites.values():
            if site.site_url == site_url:
                return site
        return None

    def list_sites(self, active_only: bool = True) -> list[SiteResponse]:
        sites = sorted(self.sites.values(), key=lambda s: s.site_url)
        if active_only:
            sites = [s for s in sites if s.status == SiteStatus.ACTIVE]
        return sites

    def create_site(self, data: SiteCreate) -> SiteResponse:
        self.create_calls += 1
        if self.fail_next_create is not None:
            error, self.fail_next_create = self.fail_next_create, None
            raise error
        if any(s.site_url == data.site_url for s in self.sites.values()):
            raise SiteURLExistsError(data.site_url)

        site = SiteResponse(id=str(uuid4()), created_at=datetime.utcnow(), **data.model_dump())
        self.sites[site.id] = site
        return site

    def get_override(self, client_id: str, site_id: str) -> Optional[PriceOverride]:
        return self.overrides.get((client_id, site_id))

    def list_overrides(self, client_id: str) -> list[PriceOverride]:
        return [o for (cid, _), o in self.overrides.items() if cid == client_id]

    def create_override(self, client_id: str, site_id: str, price: Decimal) -> PriceOverride:
        override = PriceOverride(id=str(uuid4()), client_id=client_id, site_id=site_id, override_price=price)
        self.overrides[(client_id, site_id)] = override
        return override

    def update_override(self, client_id: str, site_id: str, price: Decimal) -> PriceOverride:
        override = self.overrides[(client_id, site_id)].model_copy(update={"override_price": price})
        self.overrides[(client_id, site_id)] = override
        return override

    def delete_override(self, client_id: str, site_id: str) -> None:
        self.overrides.pop((client_id, site_id), None)


class UniqueViolation(Exception):
    """Stand-in for a PostgREST error carrying a Postgres error code."""

    def __init__(self, message: str = "duplicate key value violates unique constraint"):
        super().__init__(message)
        self.code = "23505"
