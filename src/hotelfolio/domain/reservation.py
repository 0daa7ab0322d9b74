"""Reservation snapshot as seen by the billing engine.

The persistence collaborator owns the record; the engine only reads a
snapshot and hands back a replaced copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from .billing import BillingStep, DiscountStep, LoyaltyStep
from .ledger import Ledger, PaymentEvent, balance, total_paid
from .lifecycle import ReservationStatus
from .loyalty import LoyaltyConfig
from .money import ZERO, to_decimal

FEEDBACK_STATUSES = frozenset({ReservationStatus.CHECKED_OUT, ReservationStatus.COMPLETED})


@dataclass(frozen=True)
class Reservation:
    id: str
    status: ReservationStatus = ReservationStatus.BOOKED
    discount_percent: Decimal = ZERO
    total: Decimal | None = None
    payments: tuple[PaymentEvent, ...] = ()
    feedback_submitted: bool = False
    loyalty_points_redeemed: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", ReservationStatus(self.status))
        object.__setattr__(self, "discount_percent", to_decimal(self.discount_percent))
        if self.total is not None:
            object.__setattr__(self, "total", to_decimal(self.total))
        object.__setattr__(self, "payments", tuple(self.payments))

    @property
    def ledger(self) -> Ledger:
        return Ledger(self.id, self.payments)

    @property
    def total_paid(self) -> Decimal:
        return total_paid(self.payments)

    @property
    def balance(self) -> Decimal:
        return balance(self.total or ZERO, self.payments)

    def with_payment(self, event: PaymentEvent) -> "Reservation":
        return replace(self, payments=self.payments + (event,))


def is_feedback_eligible(status: ReservationStatus, outstanding: Decimal) -> bool:
    """Feedback opens once the guest has checked out and settled the bill."""
    return ReservationStatus(status) in FEEDBACK_STATUSES and outstanding <= 0


def adjustment_steps(
    discount_percent: Decimal,
    loyalty_points: int,
    loyalty_config: LoyaltyConfig,
) -> list[BillingStep]:
    """Canonical chain used for reservation totals: discount, then loyalty."""
    steps: list[BillingStep] = []
    if discount_percent:
        steps.append(DiscountStep(discount_percent))
    if loyalty_points:
        steps.append(
            LoyaltyStep(
                points=loyalty_points,
                redeem_cap=loyalty_config.redeem_cap,
                points_per_unit=loyalty_config.points_per_currency_unit,
                minimum_points=loyalty_config.minimum_redeem_points,
            )
        )
    return steps
