"""Payment ledger for a single reservation.

Append-only: corrections are REFUND events, history is never edited.
Paid-to-date is the signed sum of events; the balance never goes negative.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from hotelfolio.infra.time import as_utc, utc_now

from .errors import AmountExceedsBalance, NonPositiveAmount, RefundExceedsPaid
from .money import PAYMENT_TOLERANCE, ZERO, to_decimal, to_money


class PaymentKind(str, Enum):
    CHARGE = "CHARGE"
    REFUND = "REFUND"


@dataclass(frozen=True)
class PaymentEvent:
    reservation_id: str
    amount: Decimal
    kind: PaymentKind
    method: str
    recorded_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    recorded_by: str | None = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind is PaymentKind.CHARGE else -self.amount


def total_paid(events: Iterable[PaymentEvent]) -> Decimal:
    """CHARGE minus REFUND, rounded to cents."""
    return to_money(sum((e.signed_amount for e in events), ZERO))


def balance(total: Decimal | int | float | str, events: Iterable[PaymentEvent]) -> Decimal:
    """Outstanding amount, floored at zero."""
    return max(ZERO, to_money(to_decimal(total) - total_paid(events)))


def record_payment(
    reservation_id: str,
    amount: Decimal | int | float | str,
    kind: PaymentKind | str,
    method: str,
    *,
    recorded_at: datetime | None = None,
    recorded_by: str | None = None,
) -> PaymentEvent:
    """Build a new PaymentEvent.

    Raises:
        NonPositiveAmount: amount rounds to 0.00 or below (refunds are
            positive amounts too).
    """
    if reservation_id is None or method is None:
        raise TypeError("reservation_id and method are required")

    value = to_money(amount)
    if value <= 0:
        raise NonPositiveAmount(
            "Payment amount must be greater than zero",
            {"amount": str(value)},
        )
    return PaymentEvent(
        reservation_id=reservation_id,
        amount=value,
        kind=PaymentKind(kind),
        method=method,
        recorded_at=as_utc(recorded_at) if recorded_at is not None else utc_now(),
        recorded_by=recorded_by,
    )


def check_payment(
    total: Decimal,
    events: Iterable[PaymentEvent],
    amount: Decimal | int | float | str,
    kind: PaymentKind | str,
) -> None:
    """Reject charges beyond the balance and refunds beyond paid-to-date."""
    events = list(events)
    value = to_money(amount)
    if PaymentKind(kind) is PaymentKind.CHARGE:
        outstanding = balance(total, events)
        if value > outstanding + PAYMENT_TOLERANCE:
            raise AmountExceedsBalance(
                "Amount exceeds outstanding balance",
                {"amount": str(value), "balance": str(outstanding)},
            )
    else:
        paid = total_paid(events)
        if value > paid + PAYMENT_TOLERANCE:
            raise RefundExceedsPaid(
                "Cannot refund more than was paid",
                {"amount": str(value), "paid": str(paid)},
            )


@dataclass(frozen=True)
class Ledger:
    """Immutable view of one reservation's payment events."""

    reservation_id: str
    events: tuple[PaymentEvent, ...] = ()

    def __post_init__(self) -> None:
        events = tuple(self.events)
        foreign = [e.id for e in events if e.reservation_id != self.reservation_id]
        if foreign:
            raise ValueError(f"Events {foreign} belong to another reservation")
        object.__setattr__(self, "events", events)

    @property
    def total_paid(self) -> Decimal:
        return total_paid(self.events)

    def balance(self, total: Decimal) -> Decimal:
        return balance(total, self.events)

    def record(
        self,
        amount: Decimal | int | float | str,
        kind: PaymentKind | str,
        method: str,
        *,
        recorded_at: datetime | None = None,
        recorded_by: str | None = None,
    ) -> tuple["Ledger", PaymentEvent]:
        """Return (new ledger, new event). self is left untouched."""
        event = record_payment(
            self.reservation_id,
            amount,
            kind,
            method,
            recorded_at=recorded_at,
            recorded_by=recorded_by,
        )
        return Ledger(self.reservation_id, self.events + (event,)), event
