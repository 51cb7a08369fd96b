"""
Unit tests for client pricing and price overrides.
"""

from decimal import Decimal
import pytest

from services.pricing_service import PricingService, calculate_site_price, get_pricing_service
from exceptions import ClientNotFoundError, InvalidOverridePriceError, SiteNotFoundError
from tests.factories import ClientFactory, SiteFactory


@pytest.fixture
def site(repository):
    site = SiteFactory.create(id="site-1", base_price="100")
    repository.sites[site.id] = site
    return site


# ===================
# PRICE FORMULA TESTS
# ===================

class TestCalculateSitePrice:

    @pytest.mark.parametrize("base,pct,override,expected", [
        (100, 25, None, Decimal("125")),
        (100, 30, None, Decimal("130")),
        (100, 25, 80, Decimal("80")),
        (100, 25, 0, Decimal("0")),
        (0, 25, None, Decimal("0")),
        (200, 0, None, Decimal("200")),
        (100, Decimal("12.5"), None, Decimal("112.5")),
    ])
    def test_formula(self, base, pct, override, expected):
        assert calculate_site_price(base, pct, override) == expected

    def test_default_markup_is_25(self):
        assert calculate_site_price(100) == Decimal("125")


# ===================
# CLIENT PERCENTAGE TESTS
# ===================

class TestGetClientPercentage:

    def test_no_client_uses_default(self, pricing_service):
        assert pricing_service.get_client_percentage(None) == Decimal("25")

    def test_known_client(self, pricing_service, acme_client):
        assert pricing_service.get_client_percentage(acme_client.id) == Decimal("30")

    def test_unknown_client_uses_default(self, pricing_service):
        assert pricing_service.get_client_percentage("missing") == Decimal("25")

    def test_client_without_percentage_uses_default(self, repository, pricing_service):
        client = ClientFactory.create(id="client-none", percentage=None)
        repository.clients[client.id] = client

        assert pricing_service.get_client_percentage(client.id) == Decimal("25")

    def test_zero_percentage_is_kept(self, repository, pricing_service):
        client = ClientFactory.create(id="client-zero", percentage=Decimal("0"))
        repository.clients[client.id] = client

        assert pricing_service.get_client_percentage(client.id) == Decimal("0")


# ===================
# OVERRIDE TESTS
# ===================

class TestOverrides:

    def test_set_creates(self, pricing_service, repository, acme_client, site):
        override = pricing_service.set_override(acme_client.id, site.id, Decimal("80"))

        assert override.override_price == Decimal("80")
        assert len(repository.overrides) == 1

    def test_set_twice_keeps_latest(self, pricing_service, repository, acme_client, site):
        pricing_service.set_override(acme_client.id, site.id, Decimal("80"))
        pricing_service.set_override(acme_client.id, site.id, Decimal("95"))

        assert len(repository.overrides) == 1
        assert repository.get_override(acme_client.id, site.id).override_price == Decimal("95")

    def test_negative_price_rejected(self, pricing_service, acme_client, site):
        with pytest.raises(InvalidOverridePriceError):
            pricing_service.set_override(acme_client.id, site.id, Decimal("-1"))

    def test_non_numeric_price_rejected(self, pricing_service, acme_client, site):
        with pytest.raises(InvalidOverridePriceError):
            pricing_service.set_override(acme_client.id, site.id, "cheap")

    def test_unknown_client(self, pricing_service, site):
        with pytest.raises(ClientNotFoundError):
            pricing_service.set_override("missing", site.id, Decimal("80"))

    def test_unknown_site(self, pricing_service, acme_client):
        with pytest.raises(SiteNotFoundError):
            pricing_service.set_override(acme_client.id, "missing", Decimal("80"))

    def test_remove(self, pricing_service, repository, acme_client, site):
        pricing_service.set_override(acme_client.id, site.id, Decimal("80"))

        pricing_service.remove_override(acme_client.id, site.id)

        assert repository.overrides == {}

    def test_remove_missing_is_noop(self, pricing_service, repository):
        pricing_service.remove_override("client-acme", "no-such-site")

        assert repository.overrides == {}


# ===================
# RESOLVED PRICING TESTS
# ===================

class TestSitePricing:

    def test_markup_applied(self, pricing_service, acme_client, site):
        pricing = pricing_service.get_site_pricing(acme_client.id, site.id)

        assert pricing.client_price == Decimal("130")
        assert pricing.has_override is False
        assert pricing.override_price is None

    def test_override_wins(self, pricing_service, acme_client, site):
        pricing_service.set_override(acme_client.id, site.id, Decimal("0"))

        pricing = pricing_service.get_site_pricing(acme_client.id, site.id)

        assert pricing.client_price == Decimal("0")
        assert pricing.has_override is True

    def test_unknown_client(self, pricing_service, site):
        with pytest.raises(ClientNotFoundError):
            pricing_service.get_site_pricing("missing", site.id)

    def test_unknown_site(self, pricing_service, acme_client):
        with pytest.raises(SiteNotFoundError):
            pricing_service.get_site_pricing(acme_client.id, "missing")

    def test_client_pricing_lists_active_sites(self, pricing_service, repository, acme_client, site):
        inactive = SiteFactory.create(id="site-2", status="INACTIVE")
        repository.sites[inactive.id] = inactive
        other = SiteFactory.create(id="site-3", base_price="200")
        repository.sites[other.id] = other
        pricing_service.set_override(acme_client.id, other.id, Decimal("150"))

        result = pricing_service.get_client_pricing(acme_client.id)
        by_site = {p.site_id: p for p in result}

        assert set(by_site) == {"site-1", "site-3"}
        assert by_site["site-1"].client_price == Decimal("130")
        assert by_site["site-3"].client_price == Decimal("150")

    def test_client_pricing_unknown_client(self, pricing_service):
        with pytest.raises(ClientNotFoundError):
            pricing_service.get_client_pricing("missing")


class TestSingleton:

    def test_get_pricing_service_uses_shared_repository(self, repository, monkeypatch):
        import services.pricing_service as module
        monkeypatch.setattr(module, "_service", None)
        monkeypatch.setattr("repositories.get_repository", lambda: repository)

        service = get_pricing_service()

        assert isinstance(service, PricingService)
        assert service.repository is repository
        assert get_pricing_service() is service
