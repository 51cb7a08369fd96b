"""
Client pricing for guest blog sites.

Formula:
    displayed_price = base_price + base_price * client.percentage / 100

unless a manual override exists for the (client, site) pair, in which case
the override is returned as-is (an override of 0 included).
"""

from decimal import Decimal
from typing import Optional, Union
import structlog

from config.settings import settings
from exceptions import ClientNotFoundError, InvalidOverridePriceError, SiteNotFoundError
from models.pricing import PriceOverride, SitePricing
from models.site import SiteResponse
from repositories.base import MarketplaceRepository

logger = structlog.get_logger(__name__)

Number = Union[int, float, Decimal, str]

DEFAULT_MARKUP_PERCENTAGE = Decimal("25")


def _decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_site_price(
    base_price: Number,
    client_percentage: Number = DEFAULT_MARKUP_PERCENTAGE,
    override_price: Optional[Number] = None,
) -> Decimal:
    """
    Price a site for one client.

    Args:
        base_price: Site base price (>= 0)
        client_percentage: Client markup percentage
        override_price: Fixed price for this client-site pair, if any

    Returns:
        Override when present, else base price plus markup
    """
    if override_price is not None:
        return _decimal(override_price)

    base = _decimal(base_price)
    return base + base * _decimal(client_percentage) / 100


class PricingService:
    """
    Client markup resolution and override storage.

    Overrides are keyed by (client, site): setting is an upsert,
    removing is idempotent.
    """

    def __init__(self, repository: MarketplaceRepository):
        self.repository = repository

    def get_client_percentage(self, client_id: Optional[str]) -> Decimal:
        """
        Markup percentage for a client.

        Falls back to the configured default when no client is given,
        the client is unknown, or it has no percentage set.
        """
        default = _decimal(settings.default_markup_percentage)
        if not client_id:
            return default

        client = self.repository.get_client(client_id)
        if client is None:
            logger.warning("client_not_found_using_default_markup", client_id=client_id)
            return default
        if client.percentage is None:
            return default
        return client.percentage

    def set_override(self, client_id: str, site_id: str, override_price: Number) -> PriceOverride:
        """
        Create or replace the override for a client-site pair.

        Raises:
            InvalidOverridePriceError: Negative or non-numeric price
            ClientNotFoundError: Unknown client
            SiteNotFoundError: Unknown site
        """
        try:
            price = _decimal(override_price)
        except ArithmeticError:
            raise InvalidOverridePriceError(override_price)
        if not price.is_finite() or price < 0:
            raise InvalidOverridePriceError(override_price)

        if self.repository.get_client(client_id) is None:
            raise ClientNotFoundError(client_id)
        if self.repository.get_site(site_id) is None:
            raise SiteNotFoundError(site_id)

        existing = self.repository.get_override(client_id, site_id)
        if existing is None:
            override = self.repository.create_override(client_id, site_id, price)
            logger.info("price_override_created", client_id=client_id, site_id=site_id, price=str(price))
        else:
            override = self.repository.update_override(client_id, site_id, price)
            logger.info(
                "price_override_updated",
                client_id=client_id,
                site_id=site_id,
                previous=str(existing.override_price),
                price=str(price)
            )
        return override

    def remove_override(self, client_id: str, site_id: str) -> None:
        """Delete the override for a client-site pair; no-op when absent."""
        self.repository.delete_override(client_id, site_id)
        logger.info("price_override_removed", client_id=client_id, site_id=site_id)

    def get_site_pricing(self, client_id: str, site_id: str) -> SitePricing:
        """
        Resolved price of one site for one client.

        Raises:
            ClientNotFoundError: Unknown client
            SiteNotFoundError: Unknown site
        """
        client = self.repository.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)

        site = self.repository.get_site(site_id)
        if site is None:
            raise SiteNotFoundError(site_id)

        override = self.repository.get_override(client_id, site_id)
        return self._build_pricing(site, self._percentage_of(client.percentage), override)

    def get_client_pricing(self, client_id: str) -> list[SitePricing]:
        """
        Resolved prices of all active sites for one client.

        Raises:
            ClientNotFoundError: Unknown client
        """
        client = self.repository.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)

        percentage = self._percentage_of(client.percentage)
        overrides = {o.site_id: o for o in self.repository.list_overrides(client_id)}
        sites = self.repository.list_sites(active_only=True)

        logger.info(
            "client_pricing_resolved",
            client_id=client_id,
            sites=len(sites),
            overrides=len(overrides)
        )
        return [self._build_pricing(site, percentage, overrides.get(site.id)) for site in sites]

    @staticmethod
    def _percentage_of(value: Optional[Decimal]) -> Decimal:
        if value is None:
            return _decimal(settings.default_markup_percentage)
        return value

    @staticmethod
    def _build_pricing(
        site: SiteResponse,
        percentage: Decimal,
        override: Optional[PriceOverride],
    ) -> SitePricing:
        override_price = override.override_price if override else None
        return SitePricing(
            site_id=site.id,
            base_price=site.base_price,
            client_price=calculate_site_price(site.base_price, percentage, override_price),
            has_override=override is not None,
            override_price=override_price,
        )


# Singleton instance
_service: Optional[PricingService] = None


def get_pricing_service() -> PricingService:
    """Get or create PricingService instance."""
    global _service
    if _service is None:
        from repositories import get_repository
        _service = PricingService(get_repository())
    return _service
