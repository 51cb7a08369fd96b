"""
Client schemas.
"""

from pydantic import Field
from typing import Optional
from decimal import Decimal

from models.base import BaseSchema


class Client(BaseSchema):
    """Client with its markup percentage over site base prices."""
    id: str
    name: Optional[str] = None
    percentage: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Markup percentage applied to base prices"
    )
