"""
Client pricing and price override schemas.
"""

from pydantic import Field
from typing import Optional
from decimal import Decimal

from models.base import BaseSchema, TimestampMixin


class PriceOverrideSet(BaseSchema):
    """Request body for setting a client-site price override."""
    override_price: Decimal = Field(
        ...,
        ge=0,
        description="Fixed price shown to this client for this site"
    )


class PriceOverride(TimestampMixin):
    """Stored override for a (client, site) pair."""
    id: Optional[str] = None
    client_id: str
    site_id: str
    override_price: Decimal = Field(..., ge=0)


class SitePricing(BaseSchema):
    """Resolved price of one site for one client."""
    site_id: str
    base_price: Decimal
    client_price: Decimal
    has_override: bool
    override_price: Optional[Decimal] = None
