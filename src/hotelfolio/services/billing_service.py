"""Result-returning entry points over the billing engine.

Expected business conditions (BillingValidationError) come back as Err
values so callers never need try/except for them. Configuration defects
(BillingConfigError) and programmer misuse (TypeError/ValueError) still raise.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, Generic, TypeVar, Union

from hotelfolio.domain import discounts, ledger, lifecycle, pricing
from hotelfolio.domain.billing import BillingStep
from hotelfolio.domain.discounts import DiscountRequest
from hotelfolio.domain.errors import BillingValidationError
from hotelfolio.domain.ledger import PaymentEvent, PaymentKind
from hotelfolio.domain.lifecycle import LifecyclePolicy, ReservationStatus
from hotelfolio.domain.pricing import PriceBreakdown, PricingConfig, Quote, StayRequest

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Err:
    error: BillingValidationError
    ok: ClassVar[bool] = False

    @property
    def code(self) -> str:
        return self.error.reason_code

    @property
    def message(self) -> str:
        return self.error.message

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "meta": self.error.meta}


Result = Union[Ok[T], Err]


def guarded(fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Result[T]":
    """Call ``fn`` and wrap its outcome."""
    try:
        return Ok(fn(*args, **kwargs))
    except BillingValidationError as exc:
        return Err(exc)


def price(stay: StayRequest, config: PricingConfig) -> "Result[PriceBreakdown]":
    return guarded(pricing.price, stay, config)


def quote(stay: StayRequest, config: PricingConfig, steps: Sequence[BillingStep] = ()) -> "Result[Quote]":
    return guarded(pricing.quote, stay, config, steps)


def validate_discount(request: DiscountRequest) -> "Result[Decimal]":
    return guarded(discounts.validate_discount, request)


def total_paid(events: Iterable[PaymentEvent]) -> "Result[Decimal]":
    return guarded(ledger.total_paid, events)


def balance(total: Decimal, events: Iterable[PaymentEvent]) -> "Result[Decimal]":
    return guarded(ledger.balance, total, events)


def record_payment(
    reservation_id: str,
    amount: Decimal,
    kind: PaymentKind,
    method: str,
    *,
    recorded_by: str | None = None,
) -> "Result[PaymentEvent]":
    return guarded(
        ledger.record_payment,
        reservation_id,
        amount,
        kind,
        method,
        recorded_by=recorded_by,
    )


def attempt_transition(
    current: ReservationStatus,
    requested: ReservationStatus,
    *,
    balance: Decimal,
    feedback_submitted: bool = False,
    operator_override: bool = False,
    policy: LifecyclePolicy | None = None,
) -> "Result[ReservationStatus]":
    return guarded(
        lifecycle.attempt_transition,
        current,
        requested,
        balance=balance,
        feedback_submitted=feedback_submitted,
        operator_override=operator_override,
        policy=policy,
    )
