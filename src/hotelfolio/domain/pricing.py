"""Stay pricing engine.

Turns a stay (room lines, add-ons, date range) into a price breakdown:

- Each night in [check_in, check_out) is priced per room line at
  base_price x (weekend multiplier on Fri/Sat, weekday multiplier otherwise),
  then x peak multiplier when the night's month is flagged peak.
- Per-night add-ons contribute unit_price x nights, per-stay add-ons once.
- Accumulation is exact Decimal; rounding to cents happens only on the totals.

No I/O here; configuration is passed in by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Literal

from .errors import (
    InvalidDateRange,
    InvalidMultiplier,
    InvalidPricingConfig,
    InvalidStay,
    UnknownAddOn,
)
from .money import ZERO, to_decimal, to_money

logger = logging.getLogger(__name__)

# date.weekday(): Monday=0 ... Sunday=6
WEEKEND_WEEKDAYS = frozenset({4, 5})

UnknownAddOnPolicy = Literal["reject", "skip"]

DEFAULT_PEAK_MONTHS = frozenset({6, 7, 8, 12})


# ── Stay description ─────────────────────────────────────


@dataclass(frozen=True)
class RoomSelection:
    room_type: str
    base_price: Decimal
    capacity: int = 1
    quantity: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_price", to_decimal(self.base_price))
        if self.quantity < 1:
            raise InvalidStay(
                f"Room '{self.room_type}' quantity must be >= 1",
                {"room_type": self.room_type, "quantity": self.quantity},
            )
        if self.base_price < 0:
            raise InvalidStay(
                f"Room '{self.room_type}' base price must be >= 0",
                {"room_type": self.room_type},
            )


@dataclass(frozen=True)
class AddOnSelection:
    """An add-on on the stay.

    unit_price/per_night may be left as None to take them from the
    configured add-on catalog.
    """

    name: str
    unit_price: Decimal | None = None
    per_night: bool | None = None

    def __post_init__(self) -> None:
        if self.unit_price is not None:
            object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
            if self.unit_price < 0:
                raise InvalidStay(
                    f"Add-on '{self.name}' unit price must be >= 0",
                    {"addon": self.name},
                )


@dataclass(frozen=True)
class StayRequest:
    rooms: tuple[RoomSelection, ...]
    check_in: date
    check_out: date
    addons: frozenset[AddOnSelection] = frozenset()

    def __post_init__(self) -> None:
        if self.check_in is None or self.check_out is None:
            raise TypeError("check_in and check_out are required")
        object.__setattr__(self, "rooms", tuple(self.rooms))
        object.__setattr__(self, "addons", frozenset(self.addons))

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


# ── Configuration ────────────────────────────────────────


@dataclass(frozen=True)
class AddOnPrice:
    unit_price: Decimal
    per_night: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))


DEFAULT_ADDON_CATALOG: Mapping[str, AddOnPrice] = {
    "WiFi": AddOnPrice(Decimal("10.00"), per_night=True),
    "Breakfast": AddOnPrice(Decimal("25.00"), per_night=True),
    "Parking": AddOnPrice(Decimal("15.00"), per_night=True),
    "Spa": AddOnPrice(Decimal("100.00"), per_night=False),
}


def _peak_month_set(peak_months: Mapping[int, bool] | Iterable[int]) -> frozenset[int]:
    if isinstance(peak_months, Mapping):
        months = frozenset(m for m, flagged in peak_months.items() if flagged)
    else:
        months = frozenset(peak_months)
    bad = sorted(m for m in months if not 1 <= m <= 12)
    if bad:
        raise InvalidPricingConfig(f"Invalid peak months: {bad}", {"months": bad})
    return months


@dataclass(frozen=True)
class PricingConfig:
    """Multipliers, tax rate, peak calendar and add-on catalog.

    Validated on construction: weekday >= 0.5, weekend >= 1.0, peak >= 1.0,
    0 <= tax_rate <= 1.
    """

    weekday_multiplier: Decimal = Decimal("1.0")
    weekend_multiplier: Decimal = Decimal("1.2")
    peak_season_multiplier: Decimal = Decimal("1.5")
    tax_rate: Decimal = Decimal("0.10")
    peak_months: frozenset[int] = DEFAULT_PEAK_MONTHS
    addon_catalog: Mapping[str, AddOnPrice] = field(
        default_factory=lambda: dict(DEFAULT_ADDON_CATALOG)
    )
    unknown_addons: UnknownAddOnPolicy = "reject"

    def __post_init__(self) -> None:
        for name in (
            "weekday_multiplier",
            "weekend_multiplier",
            "peak_season_multiplier",
            "tax_rate",
        ):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        object.__setattr__(self, "peak_months", _peak_month_set(self.peak_months))

        validate_multipliers(
            weekday=self.weekday_multiplier,
            weekend=self.weekend_multiplier,
            peak=self.peak_season_multiplier,
        )
        if not ZERO <= self.tax_rate <= 1:
            raise InvalidPricingConfig(
                f"Tax rate must be within [0, 1], got {self.tax_rate}",
                {"tax_rate": str(self.tax_rate)},
            )
        if self.unknown_addons not in ("reject", "skip"):
            raise InvalidPricingConfig(
                f"unknown_addons must be 'reject' or 'skip', got {self.unknown_addons!r}"
            )

    def is_peak(self, night: date) -> bool:
        return night.month in self.peak_months

    def night_multiplier(self, night: date) -> Decimal:
        """Combined multiplier for one night."""
        if night.weekday() in WEEKEND_WEEKDAYS:
            multiplier = self.weekend_multiplier
        else:
            multiplier = self.weekday_multiplier
        if self.is_peak(night):
            multiplier *= self.peak_season_multiplier
        return multiplier


def validate_multipliers(
    *,
    weekday: Decimal | None = None,
    weekend: Decimal | None = None,
    peak: Decimal | None = None,
) -> None:
    """Raise InvalidMultiplier when a multiplier is below its floor."""
    floors = (
        ("weekday", weekday, Decimal("0.5")),
        ("weekend", weekend, Decimal("1.0")),
        ("peak", peak, Decimal("1.0")),
    )
    for label, value, floor in floors:
        if value is not None and value < floor:
            raise InvalidMultiplier(
                f"{label} multiplier must be >= {floor}, got {value}",
                {"multiplier": label, "value": str(value)},
            )


# ── Results ──────────────────────────────────────────────


@dataclass(frozen=True)
class PriceBreakdown:
    room_subtotal: Decimal
    addon_subtotal: Decimal
    subtotal: Decimal
    nights: int


@dataclass(frozen=True)
class Quote:
    breakdown: PriceBreakdown
    adjusted_subtotal: Decimal
    adjustment: Decimal
    tax: Decimal
    total: Decimal


# ── Engine ───────────────────────────────────────────────


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Yield each night of the half-open range [check_in, check_out)."""
    night = check_in
    while night < check_out:
        yield night
        night += timedelta(days=1)


def _resolve_addon(addon: AddOnSelection, config: PricingConfig) -> AddOnPrice | None:
    catalog_entry = config.addon_catalog.get(addon.name)
    unit_price = addon.unit_price
    per_night = addon.per_night

    if unit_price is None:
        if catalog_entry is None:
            if config.unknown_addons == "skip":
                logger.warning("skipping add-on with no configured price: %s", addon.name)
                return None
            raise UnknownAddOn(addon.name)
        unit_price = catalog_entry.unit_price
    if per_night is None:
        per_night = catalog_entry.per_night if catalog_entry is not None else False

    return AddOnPrice(unit_price=unit_price, per_night=per_night)


def room_charges(rooms: Sequence[RoomSelection], check_in: date, check_out: date, config: PricingConfig) -> Decimal:
    total = ZERO
    for night in iter_nights(check_in, check_out):
        multiplier = config.night_multiplier(night)
        for room in rooms:
            total += room.base_price * multiplier * room.quantity
    return total


def addon_charges(addons: Iterable[AddOnSelection], nights: int, config: PricingConfig) -> Decimal:
    total = ZERO
    # Sorted so that the skip warnings come out in a stable order.
    for addon in sorted(addons, key=lambda a: a.name):
        price = _resolve_addon(addon, config)
        if price is None:
            continue
        total += price.unit_price * nights if price.per_night else price.unit_price
    return total


def price(stay: StayRequest, config: PricingConfig) -> PriceBreakdown:
    """Compute the room/add-on breakdown for a stay.

    Raises:
        InvalidDateRange: check_out is not strictly after check_in.
        InvalidStay: no room lines.
        UnknownAddOn: add-on without a price while unknown_addons == "reject".
    """
    if stay is None or config is None:
        raise TypeError("stay and config are required")

    nights = stay.nights
    if nights < 1:
        raise InvalidDateRange(
            "Check-out must be after check-in",
            {"check_in": stay.check_in.isoformat(), "check_out": stay.check_out.isoformat()},
        )
    if not stay.rooms:
        raise InvalidStay("At least one room must be selected")

    rooms_total = to_money(room_charges(stay.rooms, stay.check_in, stay.check_out, config))
    addons_total = to_money(addon_charges(stay.addons, nights, config))

    breakdown = PriceBreakdown(
        room_subtotal=rooms_total,
        addon_subtotal=addons_total,
        subtotal=rooms_total + addons_total,
        nights=nights,
    )
    logger.debug(
        "priced stay: nights=%s rooms=%s addons=%s subtotal=%s",
        nights,
        rooms_total,
        addons_total,
        breakdown.subtotal,
    )
    return breakdown


def quote(stay: StayRequest, config: PricingConfig, steps: Sequence = ()) -> Quote:
    """Price a stay, run the adjustment steps left to right, then add tax."""
    from .billing import apply_steps

    breakdown = price(stay, config)
    adjusted = to_money(apply_steps(breakdown.subtotal, steps))
    tax = to_money(adjusted * config.tax_rate)
    return Quote(
        breakdown=breakdown,
        adjusted_subtotal=adjusted,
        adjustment=adjusted - breakdown.subtotal,
        tax=tax,
        total=adjusted + tax,
    )
