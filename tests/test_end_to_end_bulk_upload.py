"""
End-to-end bulk upload tests.

Drives the HTTP API through template -> parse -> preview -> save against
the in-memory repository and checks what ends up stored.

Scenario "Three Sites": techcrunch and forbes have known publishers,
mashable names a publisher that is not on the roster.
"""

import json
from decimal import Decimal
import pytest

from services.bulk_upload_service import TEMPLATE_ROWS
from tests.factories import PublisherFactory, csv_upload, site_line

BASE = "/api/guest-sites/bulk-upload"

THREE_SITES = csv_upload(
    site_line("techcrunch.com", "editor@techcrunch.com"),
    site_line("mashable.com", "ghost@mashable.com"),
    site_line("forbes.com/business", "business@forbes.com", category="BUSINESS_ENTREPRENEURSHIP"),
)


def parse_and_preview(test_client, content: bytes, client_id=None) -> dict:
    """Parse, accept the suggested mappings, preview."""
    form = {"clientId": client_id} if client_id else {}
    parsed = test_client.post(
        f"{BASE}/parse",
        files={"file": ("sites.csv", content, "text/csv")},
        data=form,
    )
    assert parsed.status_code == 200

    preview = test_client.post(
        f"{BASE}/preview",
        files={"file": ("sites.csv", content, "text/csv")},
        data={**form, "mappings": json.dumps(parsed.json()["auto_mappings"])},
    )
    assert preview.status_code == 200
    return preview.json()


class TestThreeSitesScenario:

    @pytest.fixture
    def preview(self, test_client):
        return parse_and_preview(test_client, THREE_SITES)

    def test_preview_counts(self, preview):
        assert preview["total_rows"] == 3
        assert preview["valid_rows"] == 2
        assert preview["invalid_rows"] == 1

    def test_row_two_has_single_publisher_error(self, preview):
        row_two = preview["preview_data"][1]

        assert row_two["is_valid"] is False
        assert [e["field"] for e in row_two["errors"]] == ["publisher"]

    def test_save_all_rows(self, test_client, repository, preview):
        response = test_client.post(
            f"{BASE}/save",
            json={"preview_id": preview["preview_id"], "selected_rows": [1, 2, 3]},
        )

        result = response.json()
        assert result["saved"] == 2
        assert len(result["errors"]) == 1
        assert result["errors"][0].startswith("Row 2:")
        assert sorted(s.site_url for s in repository.sites.values()) == [
            "https://forbes.com/business",
            "https://techcrunch.com/",
        ]

    def test_preview_cannot_be_saved_twice(self, test_client, repository, preview):
        body = {"preview_id": preview["preview_id"], "selected_rows": [1]}

        first = test_client.post(f"{BASE}/save", json=body)
        second = test_client.post(f"{BASE}/save", json=body)

        assert first.json()["saved"] == 1
        assert second.status_code == 404
        assert len(repository.sites) == 1


class TestTemplateRoundTrip:

    def test_template_uploads_cleanly(self, test_client, repository, acme_client):
        """Every template row is valid once its publishers exist."""
        repository.publishers = [
            PublisherFactory.create(email=row[1]) for row in TEMPLATE_ROWS
        ]
        template = test_client.get(f"{BASE}/template").content

        preview = parse_and_preview(test_client, template, client_id=acme_client.id)
        saved = test_client.post(
            f"{BASE}/save",
            json={"preview_id": preview["preview_id"], "selected_rows": list(range(1, 11))},
        ).json()

        assert preview["valid_rows"] == 10
        assert Decimal(preview["preview_data"][0]["displayed_price"]) == Decimal("650")
        assert saved["saved"] == 10
        assert saved["errors"] == []


class TestDuplicateInBatch:

    def test_second_row_with_same_url_rejected(self, test_client, repository):
        content = csv_upload(
            site_line("techcrunch.com"),
            site_line("https://TECHCRUNCH.com/"),
        )
        preview = parse_and_preview(test_client, content)

        result = test_client.post(
            f"{BASE}/save",
            json={"preview_id": preview["preview_id"], "selected_rows": [1, 2]},
        ).json()

        assert result["saved"] == 1
        assert result["errors"] == ['Row 2: Site "https://techcrunch.com/" already exists']
        assert len(repository.sites) == 1
