"""Shared pytest fixtures for hotelfolio tests."""
import sys
sys.dont_write_bytecode = True

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from hotelfolio.domain.lifecycle import LifecyclePolicy  # noqa: E402
from hotelfolio.domain.loyalty import LoyaltyConfig  # noqa: E402
from hotelfolio.domain.pricing import PricingConfig  # noqa: E402
from hotelfolio.infra.repositories.memory import InMemoryReservationRepository  # noqa: E402
from hotelfolio.services.folio_service import FolioService  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_cached_settings():
    """Settings and the API service are cached per process; isolate each test."""
    from hotelfolio.api.dependencies import get_folio_service
    from hotelfolio.infra.settings import clear_settings_cache

    clear_settings_cache()
    get_folio_service.cache_clear()
    yield
    clear_settings_cache()
    get_folio_service.cache_clear()


@pytest.fixture
def pricing_config():
    """Default multipliers (1.0 / 1.2 / 1.5), 10% tax, July is the only peak month."""
    return PricingConfig(peak_months={7}, tax_rate=Decimal("0.10"))


@pytest.fixture
def loyalty_config():
    return LoyaltyConfig(earn_rate=Decimal("0.1"), redeem_cap=5000)


@pytest.fixture
def repository():
    return InMemoryReservationRepository()


@pytest.fixture
def service(repository, pricing_config, loyalty_config):
    return FolioService(
        repository,
        pricing_config=pricing_config,
        loyalty_config=loyalty_config,
        lifecycle_policy=LifecyclePolicy(),
    )
