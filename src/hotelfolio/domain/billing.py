"""Billing adjustment steps applied on top of a raw subtotal.

Each step is a small frozen value with an ``adjust(amount) -> amount`` method.
A chain is just an ordered sequence of steps run left to right by
``apply_steps``; order is always given explicitly by the caller since
discount-then-loyalty and loyalty-then-discount give different totals.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Literal, Union

from .errors import NegativePoints
from .loyalty import redemption_credit
from .money import ZERO, to_decimal
from .pricing import PricingConfig, validate_multipliers

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class StandardStep:
    """Whole-stay multiplier for simplified single-rate quotes.

    Uses one weekend-or-weekday multiplier and, when ``peak`` is set, the
    peak multiplier on top, instead of the per-night detail of the pricing
    engine.
    """

    kind: ClassVar[Literal["standard"]] = "standard"

    weekday_multiplier: Decimal = Decimal("1.0")
    weekend_multiplier: Decimal = Decimal("1.2")
    peak_season_multiplier: Decimal = Decimal("1.5")
    weekend: bool = False
    peak: bool = False

    def __post_init__(self) -> None:
        for name in ("weekday_multiplier", "weekend_multiplier", "peak_season_multiplier"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        validate_multipliers(
            weekday=self.weekday_multiplier,
            weekend=self.weekend_multiplier,
            peak=self.peak_season_multiplier,
        )

    @classmethod
    def from_config(cls, config: PricingConfig, *, weekend: bool = False, peak: bool = False) -> "StandardStep":
        return cls(
            weekday_multiplier=config.weekday_multiplier,
            weekend_multiplier=config.weekend_multiplier,
            peak_season_multiplier=config.peak_season_multiplier,
            weekend=weekend,
            peak=peak,
        )

    @property
    def multiplier(self) -> Decimal:
        multiplier = self.weekend_multiplier if self.weekend else self.weekday_multiplier
        if self.peak:
            multiplier *= self.peak_season_multiplier
        return multiplier

    def adjust(self, amount: Decimal) -> Decimal:
        return amount * self.multiplier


@dataclass(frozen=True)
class DiscountStep:
    """Percentage discount. Out-of-range percents are clamped to [0, 100].

    Role caps are not checked here; see ``discounts.validate_discount``.
    """

    kind: ClassVar[Literal["discount"]] = "discount"

    percent: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", to_decimal(self.percent))

    @property
    def applied_percent(self) -> Decimal:
        return min(max(self.percent, ZERO), HUNDRED)

    def adjust(self, amount: Decimal) -> Decimal:
        return max(ZERO, amount * (1 - self.applied_percent / HUNDRED))


@dataclass(frozen=True)
class LoyaltyStep:
    """Subtract the redemption credit of min(points, redeem_cap) points."""

    kind: ClassVar[Literal["loyalty"]] = "loyalty"

    points: int
    redeem_cap: int
    points_per_unit: int = 100
    minimum_points: int = 0

    def __post_init__(self) -> None:
        if self.points < 0 or self.redeem_cap < 0:
            raise NegativePoints(
                "Loyalty points cannot be negative",
                {"points": self.points, "redeem_cap": self.redeem_cap},
            )
        if self.points_per_unit <= 0:
            raise ValueError("points_per_unit must be positive")

    @property
    def credit(self) -> Decimal:
        return redemption_credit(
            self.points,
            self.redeem_cap,
            points_per_unit=self.points_per_unit,
            minimum_points=self.minimum_points,
        )

    def adjust(self, amount: Decimal) -> Decimal:
        return max(ZERO, amount - self.credit)


BillingStep = Union[StandardStep, DiscountStep, LoyaltyStep]


def apply_steps(amount: Decimal | int | float | str, steps: Sequence[BillingStep]) -> Decimal:
    """Run ``steps`` over ``amount`` in order. No rounding is applied."""
    result = to_decimal(amount)
    for step in steps:
        result = step.adjust(result)
    return result
