"""Loyalty points: accrual on spend and redemption credit."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

from .errors import InsufficientPoints, InvalidLoyaltyConfig, NegativePoints
from .money import ZERO, to_decimal, to_money

# Method tag for payments settled with points; they do not earn points.
LOYALTY_POINTS_METHOD = "loyalty_points"


@dataclass(frozen=True)
class LoyaltyConfig:
    earn_rate: Decimal = Decimal("0.1")
    redeem_cap: int = 5000
    points_per_currency_unit: int = 100
    minimum_redeem_points: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "earn_rate", to_decimal(self.earn_rate))
        if self.earn_rate <= 0:
            raise InvalidLoyaltyConfig("Earn rate must be positive")
        if self.redeem_cap < 0:
            raise InvalidLoyaltyConfig("Redeem cap cannot be negative")
        if self.points_per_currency_unit <= 0:
            raise InvalidLoyaltyConfig("Points per currency unit must be positive")
        if self.minimum_redeem_points < 0:
            raise InvalidLoyaltyConfig("Minimum redeem points cannot be negative")


@dataclass(frozen=True)
class Redemption:
    points_used: int
    credit: Decimal
    remaining_points: int


def _check_points(**values: int) -> None:
    negative = {k: v for k, v in values.items() if v < 0}
    if negative:
        raise NegativePoints("Loyalty points cannot be negative", negative)


def earn_points(amount_spent: Decimal | int | float | str, earn_rate: Decimal) -> int:
    """Points for a spend, always truncated."""
    amount = to_decimal(amount_spent)
    if amount < 0:
        raise NegativePoints("Cannot earn points on a negative amount", {"amount": str(amount)})
    return math.floor(amount * earn_rate)


def redemption_credit(
    points_requested: int,
    cap: int,
    *,
    points_per_unit: int = 100,
    minimum_points: int = 0,
) -> Decimal:
    """Monetary credit for min(points_requested, cap) points.

    Requests below ``minimum_points`` yield no credit.
    """
    _check_points(points_requested=points_requested, cap=cap)
    if points_requested < minimum_points:
        return to_money(ZERO)
    return to_money(Decimal(min(points_requested, cap)) / Decimal(points_per_unit))


class LoyaltyAccount:
    """Point math bound to one LoyaltyConfig."""

    def __init__(self, config: LoyaltyConfig):
        self.config = config

    def earn(self, amount_spent: Decimal | int | float | str) -> int:
        return earn_points(amount_spent, self.config.earn_rate)

    def redemption_credit(self, points_requested: int, cap: int | None = None) -> Decimal:
        return redemption_credit(
            points_requested,
            self.config.redeem_cap if cap is None else cap,
            points_per_unit=self.config.points_per_currency_unit,
            minimum_points=self.config.minimum_redeem_points,
        )

    def redeem(self, available_points: int, points_requested: int) -> Redemption:
        """Spend points from a guest balance.

        Raises:
            NegativePoints: either input is negative.
            InsufficientPoints: the guest holds fewer points than requested.
        """
        _check_points(available_points=available_points, points_requested=points_requested)
        if points_requested > available_points:
            raise InsufficientPoints(
                "Guest does not have enough loyalty points",
                {"available": available_points, "requested": points_requested},
            )
        used = min(points_requested, self.config.redeem_cap)
        if points_requested < self.config.minimum_redeem_points:
            used = 0
        return Redemption(
            points_used=used,
            credit=self.redemption_credit(used),
            remaining_points=available_points - used,
        )

    def points_for_payment(self, amount: Decimal, method: str) -> int:
        if method == LOYALTY_POINTS_METHOD:
            return 0
        return self.earn(amount)
