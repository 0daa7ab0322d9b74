"""Billing configuration loaded from the environment.

Read once per process and cached; the resulting objects are frozen.
Malformed values raise BillingConfigError subclasses immediately instead of
falling back to defaults.

Environment variables:
    PRICING_WEEKDAY_MULTIPLIER, PRICING_WEEKEND_MULTIPLIER,
    PRICING_PEAK_MULTIPLIER, PRICING_TAX_RATE,
    PRICING_PEAK_MONTHS          comma separated month numbers, e.g. "6,7,8,12"
    PRICING_ADDON_CATALOG        JSON: {"Spa": {"unit_price": "100.00", "per_night": false}}
    PRICING_UNKNOWN_ADDONS       "reject" (default) or "skip"
    LOYALTY_EARN_RATE, LOYALTY_REDEEM_CAP, LOYALTY_POINTS_PER_UNIT,
    LOYALTY_MIN_REDEEM_POINTS
    LIFECYCLE_REQUIRE_FEEDBACK   "true"/"false"
    FOLIO_STORAGE                "memory" (default) or "postgres"
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Literal

from hotelfolio.domain.errors import BillingConfigError, InvalidLoyaltyConfig, InvalidPricingConfig
from hotelfolio.domain.lifecycle import LifecyclePolicy
from hotelfolio.domain.loyalty import LoyaltyConfig
from hotelfolio.domain.pricing import (
    DEFAULT_ADDON_CATALOG,
    DEFAULT_PEAK_MONTHS,
    AddOnPrice,
    PricingConfig,
)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    pricing: PricingConfig
    loyalty: LoyaltyConfig
    lifecycle: LifecyclePolicy
    storage: Literal["memory", "postgres"] = "memory"


def _env(name: str) -> str | None:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _decimal(name: str, default: str, error: type[BillingConfigError]) -> Decimal:
    raw = _env(name) or default
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise error(f"{name} is not a number: {raw!r}", {"variable": name})


def _int(name: str, default: int, error: type[BillingConfigError]) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise error(f"{name} is not an integer: {raw!r}", {"variable": name})


def _bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    if raw.lower() in _TRUE:
        return True
    if raw.lower() in _FALSE:
        return False
    raise BillingConfigError(f"{name} is not a boolean: {raw!r}", {"variable": name})


def _peak_months() -> frozenset[int]:
    raw = _env("PRICING_PEAK_MONTHS")
    if raw is None:
        return DEFAULT_PEAK_MONTHS
    try:
        return frozenset(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        raise InvalidPricingConfig(
            f"PRICING_PEAK_MONTHS must be a comma separated list of months: {raw!r}",
            {"variable": "PRICING_PEAK_MONTHS"},
        )


def parse_addon_catalog(raw: str) -> dict[str, AddOnPrice]:
    """Parse the JSON add-on catalog."""
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidPricingConfig(f"PRICING_ADDON_CATALOG is not valid JSON: {exc}")
    if not isinstance(data, dict):
        raise InvalidPricingConfig("PRICING_ADDON_CATALOG must be a JSON object")

    catalog: dict[str, AddOnPrice] = {}
    for name, entry in data.items():
        if not isinstance(entry, dict) or "unit_price" not in entry:
            raise InvalidPricingConfig(
                f"Add-on '{name}' needs a unit_price", {"addon": name}
            )
        try:
            unit_price = Decimal(str(entry["unit_price"]))
        except InvalidOperation:
            raise InvalidPricingConfig(f"Add-on '{name}' has an invalid unit_price", {"addon": name})
        catalog[name] = AddOnPrice(unit_price=unit_price, per_night=bool(entry.get("per_night", False)))
    return catalog


def load_pricing_config() -> PricingConfig:
    raw_catalog = _env("PRICING_ADDON_CATALOG")
    catalog = parse_addon_catalog(raw_catalog) if raw_catalog else dict(DEFAULT_ADDON_CATALOG)
    return PricingConfig(
        weekday_multiplier=_decimal("PRICING_WEEKDAY_MULTIPLIER", "1.0", InvalidPricingConfig),
        weekend_multiplier=_decimal("PRICING_WEEKEND_MULTIPLIER", "1.2", InvalidPricingConfig),
        peak_season_multiplier=_decimal("PRICING_PEAK_MULTIPLIER", "1.5", InvalidPricingConfig),
        tax_rate=_decimal("PRICING_TAX_RATE", "0.10", InvalidPricingConfig),
        peak_months=_peak_months(),
        addon_catalog=catalog,
        unknown_addons=(_env("PRICING_UNKNOWN_ADDONS") or "reject").lower(),  # type: ignore[arg-type]
    )


def load_loyalty_config() -> LoyaltyConfig:
    return LoyaltyConfig(
        earn_rate=_decimal("LOYALTY_EARN_RATE", "0.1", InvalidLoyaltyConfig),
        redeem_cap=_int("LOYALTY_REDEEM_CAP", 5000, InvalidLoyaltyConfig),
        points_per_currency_unit=_int("LOYALTY_POINTS_PER_UNIT", 100, InvalidLoyaltyConfig),
        minimum_redeem_points=_int("LOYALTY_MIN_REDEEM_POINTS", 0, InvalidLoyaltyConfig),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache all billing settings."""
    storage = (_env("FOLIO_STORAGE") or "memory").lower()
    if storage not in ("memory", "postgres"):
        raise BillingConfigError(f"FOLIO_STORAGE must be 'memory' or 'postgres', got {storage!r}")
    return Settings(
        pricing=load_pricing_config(),
        loyalty=load_loyalty_config(),
        lifecycle=LifecyclePolicy(
            require_feedback_for_completion=_bool("LIFECYCLE_REQUIRE_FEEDBACK", True),
        ),
        storage=storage,  # type: ignore[arg-type]
    )


def clear_settings_cache() -> None:
    get_settings.cache_clear()
