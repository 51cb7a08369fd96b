"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from decimal import Decimal
from typing import Optional
from uuid import uuid4

from models.client import Client
from models.publisher import Publisher
from models.site import SiteResponse


class PublisherFactory:
    """
    Factory for creating test Publisher models.

    Usage:
        publisher = PublisherFactory.create()
        publisher = PublisherFactory.create(email="editor@techcrunch.com")
        publishers = PublisherFactory.create_batch(3)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        publisher_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Publisher:
        counter = cls._next_counter()
        return Publisher(
            id=id or str(uuid4()),
            publisher_name=publisher_name or f"Test Publisher {counter}",
            email=email or f"publisher{counter}@example.com",
        )

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list[Publisher]:
        return [cls.create(**overrides) for _ in range(count)]


class ClientFactory:
    """Factory for creating test Client models."""

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        name: str = "Acme Corp",
        percentage: Optional[Decimal] = Decimal("30"),
    ) -> Client:
        return Client(id=id or str(uuid4()), name=name, percentage=percentage)


class SiteFactory:
    """
    Factory for stored sites.

    row() builds the dict shape the guest_blog_sites table returns.
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def row(
        cls,
        id: Optional[str] = None,
        site_url: Optional[str] = None,
        publisher_id: Optional[str] = None,
        base_price: str = "100",
        status: str = "ACTIVE",
        category: str = "TECHNOLOGY_GADGETS",
    ) -> dict:
        counter = cls._next_counter()
        return {
            "id": id or str(uuid4()),
            "site_url": site_url or f"https://site{counter}.example.com/",
            "publisher_id": publisher_id or str(uuid4()),
            "da": 50,
            "dr": 45,
            "ahrefs_traffic": 10000,
            "ss": 2,
            "tat": "2-3 days",
            "category": category,
            "status": status,
            "base_price": base_price,
            "country": "US",
            "site_language": "en",
            "created_at": "2025-12-05T10:00:00Z",
            "updated_at": None,
        }

    @classmethod
    def create(cls, **kwargs) -> SiteResponse:
        return SiteResponse(**cls.row(**kwargs))


# ===================
# UPLOAD CONTENT
# ===================

CURRENT_HEADER = (
    "Site URL,Publisher Email,DA,DR,Traffic,SS,Category,Country,Language,TAT,Base Price,Status"
)


def csv_upload(*rows: str, header: str = CURRENT_HEADER) -> bytes:
    """Build CSV upload bytes from a header and raw data lines."""
    return "\n".join([header, *rows]).encode("utf-8")


def site_line(
    site_url: str = "techcrunch.com",
    publisher: str = "editor@techcrunch.com",
    category: str = "TECHNOLOGY_GADGETS",
    base_price: str = "500",
    status: str = "ACTIVE",
) -> str:
    """One data line in current template order."""
    return f"{site_url},{publisher},95,94,15000000,2,{category},US,en,2-3 days,{base_price},{status}"
