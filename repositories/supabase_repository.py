"""
Supabase implementation of the marketplace repository.
"""

from decimal import Decimal
from typing import Optional
import structlog

from supabase import Client as SupabaseClient

from exceptions import DatabaseError, SiteURLExistsError
from models.client import Client
from models.pricing import PriceOverride
from models.publisher import Publisher
from models.site import SiteCreate, SiteResponse, SiteStatus
from repositories.base import MarketplaceRepository

logger = structlog.get_logger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


class SupabaseRepository(MarketplaceRepository):
    """
    Marketplace persistence backed by Supabase tables.

    Tables:
        publishers, clients, guest_blog_sites, client_guest_blog_site_overrides
    """

    def __init__(self, client: SupabaseClient):
        self.db = client
        self.publishers_table = "publishers"
        self.clients_table = "clients"
        self.sites_table = "guest_blog_sites"
        self.overrides_table = "client_guest_blog_site_overrides"

    # ===================
    # PUBLISHERS
    # ===================

    def list_publishers(self) -> list[Publisher]:
        try:
            result = (
                self.db.table(self.publishers_table)
                .select("id, publisher_name, email")
                .execute()
            )
            return [Publisher(**row) for row in result.data]

        except Exception as e:
            logger.error("list_publishers_failed", error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # CLIENTS
    # ===================

    def get_client(self, client_id: str) -> Optional[Client]:
        try:
            result = (
                self.db.table(self.clients_table)
                .select("id, name, percentage")
                .eq("id", client_id)
                .execute()
            )
            if not result.data:
                return None
            return Client(**result.data[0])

        except Exception as e:
            logger.error("get_client_failed", client_id=client_id, error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # SITES
    # ===================

    def get_site(self, site_id: str) -> Optional[SiteResponse]:
        return self._get_site_where("id", site_id)

    def get_site_by_url(self, site_url: str) -> Optional[SiteResponse]:
        return self._get_site_where("site_url", site_url)

    def _get_site_where(self, column: str, value: str) -> Optional[SiteResponse]:
        try:
            result = (
                self.db.table(self.sites_table)
                .select("*")
                .eq(column, value)
                .execute()
            )
            if not result.data:
                return None
            return SiteResponse(**result.data[0])

        except Exception as e:
            logger.error("get_site_failed", column=column, value=value, error=str(e))
            raise DatabaseError("select", str(e))

    def list_sites(self, active_only: bool = True) -> list[SiteResponse]:
        try:
            query = self.db.table(self.sites_table).select("*")
            if active_only:
                query = query.eq("status", SiteStatus.ACTIVE.value)
            result = query.order("site_url").execute()
            return [SiteResponse(**row) for row in result.data]

        except Exception as e:
            logger.error("list_sites_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def create_site(self, data: SiteCreate) -> SiteResponse:
        try:
            result = (
                self.db.table(self.sites_table)
                .insert(data.model_dump(mode="json"))
                .execute()
            )

        except Exception as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION:
                logger.warning("site_url_conflict", site_url=data.site_url)
                raise SiteURLExistsError(data.site_url)
            logger.error("create_site_failed", site_url=data.site_url, error=str(e))
            raise DatabaseError("insert", str(e))

        if not result.data:
            raise DatabaseError("insert", "No data returned")

        logger.info("site_created", site_id=result.data[0]["id"], site_url=data.site_url)
        return SiteResponse(**result.data[0])

    # ===================
    # PRICE OVERRIDES
    # ===================

    def get_override(self, client_id: str, site_id: str) -> Optional[PriceOverride]:
        try:
            result = (
                self.db.table(self.overrides_table)
                .select("*")
                .eq("client_id", client_id)
                .eq("site_id", site_id)
                .execute()
            )
            if not result.data:
                return None
            return PriceOverride(**result.data[0])

        except Exception as e:
            logger.error("get_override_failed", client_id=client_id, site_id=site_id, error=str(e))
            raise DatabaseError("select", str(e))

    def list_overrides(self, client_id: str) -> list[PriceOverride]:
        try:
            result = (
                self.db.table(self.overrides_table)
                .select("*")
                .eq("client_id", client_id)
                .execute()
            )
            return [PriceOverride(**row) for row in result.data]

        except Exception as e:
            logger.error("list_overrides_failed", client_id=client_id, error=str(e))
            raise DatabaseError("select", str(e))

    def create_override(self, client_id: str, site_id: str, price: Decimal) -> PriceOverride:
        try:
            result = (
                self.db.table(self.overrides_table)
                .insert({
                    "client_id": client_id,
                    "site_id": site_id,
                    "override_price": str(price),
                })
                .execute()
            )

        except Exception as e:
            logger.error("create_override_failed", client_id=client_id, site_id=site_id, error=str(e))
            raise DatabaseError("insert", str(e))

        if not result.data:
            raise DatabaseError("insert", "No data returned")
        return PriceOverride(**result.data[0])

    def update_override(self, client_id: str, site_id: str, price: Decimal) -> PriceOverride:
        try:
            result = (
                self.db.table(self.overrides_table)
                .update({"override_price": str(price)})
                .eq("client_id", client_id)
                .eq("site_id", site_id)
                .execute()
            )

        except Exception as e:
            logger.error("update_override_failed", client_id=client_id, site_id=site_id, error=str(e))
            raise DatabaseError("update", str(e))

        if not result.data:
            raise DatabaseError("update", "No data returned")
        return PriceOverride(**result.data[0])

    def delete_override(self, client_id: str, site_id: str) -> None:
        try:
            (
                self.db.table(self.overrides_table)
                .delete()
                .eq("client_id", client_id)
                .eq("site_id", site_id)
                .execute()
            )

        except Exception as e:
            logger.error("delete_override_failed", client_id=client_id, site_id=site_id, error=str(e))
            raise DatabaseError("delete", str(e))
