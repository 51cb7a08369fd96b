"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime
from decimal import Decimal
from typing import Generator, Optional
from uuid import uuid4

from tests.factories import ClientFactory, PublisherFactory
from tests.fakes import InMemoryRepository


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    eq() filters are applied on execute(); insert/update/delete write
    through to the owning table's rows.
    """

    def __init__(self, table: "MockSupabaseTable", action: str = "select", payload=None):
        self._table = table
        self._action = action
        self._payload = payload
        self._filters: list[tuple[str, object]] = []
        self._order: Optional[str] = None
        self._limit: Optional[int] = None

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, **kwargs):
        self._order = column
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self._filters)

    def execute(self) -> MockSupabaseResponse:
        table = self._table

        if self._action == "insert":
            if table.insert_error is not None:
                error, table.insert_error = table.insert_error, None
                raise error
            items = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for item in items:
                row = {**item}
                row.setdefault("id", str(uuid4()))
                row["created_at"] = datetime.utcnow().isoformat() + "Z"
                table.rows.append(row)
                inserted.append(row)
            return MockSupabaseResponse(data=inserted)

        matched = [row for row in table.rows if self._matches(row)]

        if self._action == "update":
            for row in matched:
                row.update(self._payload)
                row["updated_at"] = datetime.utcnow().isoformat() + "Z"
            return MockSupabaseResponse(data=[{**row} for row in matched])

        if self._action == "delete":
            table.rows[:] = [row for row in table.rows if not self._matches(row)]
            return MockSupabaseResponse(data=matched)

        if self._order:
            matched = sorted(matched, key=lambda row: row.get(self._order) or "")
        count = len(matched)
        if self._limit is not None:
            matched = matched[:self._limit]
        return MockSupabaseResponse(data=[{**row} for row in matched], count=count)


class MockSupabaseTable:
    """Mock Supabase table holding its rows in a list."""

    def __init__(self, rows: list = None):
        self.rows = rows if rows is not None else []
        self.insert_error: Optional[Exception] = None

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, "select")

    def insert(self, data):
        return MockSupabaseQuery(self, "insert", data)

    def update(self, data):
        return MockSupabaseQuery(self, "update", data)

    def delete(self):
        return MockSupabaseQuery(self, "delete")


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure mock rows for a table."""
        self._tables[table_name] = MockSupabaseTable([{**row} for row in data])

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table (created empty on first use)."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("publishers", [
                {"id": "1", "publisher_name": "TechCrunch", "email": "editor@techcrunch.com"}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture(autouse=True)
def clear_preview_cache() -> Generator:
    """Cached previews never leak between tests."""
    from services import preview_cache_service
    preview_cache_service.clear()
    yield
    preview_cache_service.clear()


@pytest.fixture
def techcrunch_publisher():
    return PublisherFactory.create(
        id="pub-techcrunch",
        publisher_name="TechCrunch Editor",
        email="editor@techcrunch.com",
    )


@pytest.fixture
def forbes_publisher():
    return PublisherFactory.create(
        id="pub-forbes",
        publisher_name="Forbes Business Team",
        email="business@forbes.com",
    )


@pytest.fixture
def acme_client():
    return ClientFactory.create(id="client-acme", name="Acme Corp", percentage=Decimal("30"))


@pytest.fixture
def repository(techcrunch_publisher, forbes_publisher, acme_client) -> InMemoryRepository:
    """In-memory repository seeded with two publishers and one 30% client."""
    return InMemoryRepository(
        publishers=[techcrunch_publisher, forbes_publisher],
        clients=[acme_client],
    )


@pytest.fixture
def pricing_service(repository):
    from services.pricing_service import PricingService
    return PricingService(repository)


@pytest.fixture
def bulk_service(repository, pricing_service):
    from services.bulk_upload_service import BulkUploadService
    return BulkUploadService(repository, pricing_service=pricing_service, preview_limit=20)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(bulk_service, pricing_service) -> Generator:
    """
    FastAPI test client wired to the in-memory repository.

    Usage:
        def test_endpoint(test_client, repository):
            response = test_client.get("/api/guest-sites/bulk-upload/template")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("routes.guest_sites.get_bulk_upload_service", return_value=bulk_service):
        with patch("routes.guest_sites.get_pricing_service", return_value=pricing_service):
            yield TestClient(app)
