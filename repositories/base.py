"""
Repository port for marketplace persistence.

Services receive a MarketplaceRepository instead of reaching for a
global database client, so tests can hand them an in-memory fake.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from models.client import Client
from models.pricing import PriceOverride
from models.publisher import Publisher
from models.site import SiteCreate, SiteResponse


class MarketplaceRepository(ABC):
    """Find/create/update/delete access to sites, publishers, clients and overrides."""

    # Publishers

    @abstractmethod
    def list_publishers(self) -> list[Publisher]:
        """Current publisher roster."""

    # Clients

    @abstractmethod
    def get_client(self, client_id: str) -> Optional[Client]:
        ...

    # Sites

    @abstractmethod
    def get_site(self, site_id: str) -> Optional[SiteResponse]:
        ...

    @abstractmethod
    def get_site_by_url(self, site_url: str) -> Optional[SiteResponse]:
        """Look up a site by its normalized URL."""

    @abstractmethod
    def list_sites(self, active_only: bool = True) -> list[SiteResponse]:
        ...

    @abstractmethod
    def create_site(self, data: SiteCreate) -> SiteResponse:
        """
        Persist a new site.

        Raises:
            SiteURLExistsError: If storage rejects a duplicate URL
            DatabaseError: On any other storage failure
        """

    # Price overrides

    @abstractmethod
    def get_override(self, client_id: str, site_id: str) -> Optional[PriceOverride]:
        ...

    @abstractmethod
    def list_overrides(self, client_id: str) -> list[PriceOverride]:
        ...

    @abstractmethod
    def create_override(self, client_id: str, site_id: str, price: Decimal) -> PriceOverride:
        ...

    @abstractmethod
    def update_override(self, client_id: str, site_id: str, price: Decimal) -> PriceOverride:
        ...

    @abstractmethod
    def delete_override(self, client_id: str, site_id: str) -> None:
        """Delete the override if present; no error when absent."""
