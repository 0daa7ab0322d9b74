"""Folio service: the reservation-level billing workflow.

Rules:
- The repository owns reservations; this service reads a snapshot, runs the
  engine, and saves the replaced snapshot.
- Calls for the same reservation id are serialised by a per-reservation lock
  so that record_payment/balance/transition see a consistent ledger.
- Every public method returns Ok/Err; configuration defects still raise.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from decimal import Decimal

from hotelfolio.domain import ledger
from hotelfolio.domain.discounts import DiscountRequest, validate_discount
from hotelfolio.domain.errors import (
    FeedbackNotEligible,
    ReservationNotFound,
    ReservationNotPayable,
    ReservationNotPriced,
)
from hotelfolio.domain.ledger import PaymentEvent, PaymentKind
from hotelfolio.domain.lifecycle import (
    TRANSITIONS,
    LifecyclePolicy,
    ReservationStatus,
    Rule,
    attempt_transition,
)
from hotelfolio.domain.loyalty import LoyaltyAccount, LoyaltyConfig
from hotelfolio.domain.pricing import PricingConfig, Quote, StayRequest, quote
from hotelfolio.domain.reservation import Reservation, adjustment_steps, is_feedback_eligible
from hotelfolio.infra.repositories.base import ReservationRepository
from hotelfolio.observability.logging import get_logger
from hotelfolio.observability.redaction import safe_log_context

from .billing_service import Result, guarded

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentReceipt:
    event: PaymentEvent
    balance: Decimal
    points_earned: int


@dataclass(frozen=True)
class FolioSummary:
    reservation_id: str
    status: ReservationStatus
    total: Decimal | None
    total_paid: Decimal
    balance: Decimal
    discount_percent: Decimal
    feedback_eligible: bool
    payments: tuple[PaymentEvent, ...]


@dataclass
class _ReservationLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class FolioService:
    def __init__(
        self,
        repository: ReservationRepository,
        *,
        pricing_config: PricingConfig,
        loyalty_config: LoyaltyConfig,
        lifecycle_policy: LifecyclePolicy | None = None,
    ):
        if pricing_config is None or loyalty_config is None:
            raise TypeError("pricing_config and loyalty_config are required")
        self.repository = repository
        self.pricing_config = pricing_config
        self.loyalty = LoyaltyAccount(loyalty_config)
        self.lifecycle_policy = lifecycle_policy or LifecyclePolicy()
        self._locks: dict[str, _ReservationLock] = {}
        self._locks_guard = threading.Lock()

    # ── internals ────────────────────────────────────────

    @contextmanager
    def _locked(self, reservation_id: str) -> Iterator[None]:
        # Entries live only while some call holds or waits on them.
        with self._locks_guard:
            entry = self._locks.get(reservation_id)
            if entry is None:
                entry = self._locks[reservation_id] = _ReservationLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[reservation_id]

    def _load(self, reservation_id: str) -> Reservation:
        reservation = self.repository.find_reservation(reservation_id)
        if reservation is None:
            raise ReservationNotFound(reservation_id)
        return replace(reservation, payments=tuple(self.repository.find_payments(reservation_id)))

    def _quote(self, stay: StayRequest, discount_percent: Decimal, loyalty_points: int) -> Quote:
        steps = adjustment_steps(discount_percent, loyalty_points, self.loyalty.config)
        return quote(stay, self.pricing_config, steps)

    # ── pricing ──────────────────────────────────────────

    def quote(
        self,
        stay: StayRequest,
        *,
        discount: DiscountRequest | None = None,
        loyalty_points: int = 0,
    ) -> Result[Quote]:
        """Price a stay without touching any reservation."""

        def _run() -> Quote:
            percent = validate_discount(discount) if discount is not None else Decimal("0")
            return self._quote(stay, percent, loyalty_points)

        return guarded(_run)

    def open_reservation(
        self,
        stay: StayRequest,
        *,
        discount: DiscountRequest | None = None,
        loyalty_points: int = 0,
    ) -> Result[Reservation]:
        """Create a BOOKED reservation with its total computed."""

        def _run() -> Reservation:
            percent = validate_discount(discount) if discount is not None else Decimal("0")
            priced = self._quote(stay, percent, loyalty_points)
            reservation = Reservation(
                id=str(uuid.uuid4()),
                status=ReservationStatus.BOOKED,
                discount_percent=percent,
                total=priced.total,
                loyalty_points_redeemed=loyalty_points,
            )
            saved = self.repository.save(reservation)
            logger.info(
                "reservation opened",
                extra={
                    "extra_fields": safe_log_context(
                        reservation_id=saved.id,
                        nights=priced.breakdown.nights,
                        total=saved.total,
                        discount_percent=percent,
                    )
                },
            )
            return saved

        return guarded(_run)

    def reprice(
        self,
        reservation_id: str,
        stay: StayRequest,
        *,
        loyalty_points: int | None = None,
    ) -> Result[Reservation]:
        """Recompute and cache the total using the stored discount.

        loyalty_points=None keeps the stored redemption.
        """

        def _run() -> Reservation:
            with self._locked(reservation_id):
                reservation = self._load(reservation_id)
                points = reservation.loyalty_points_redeemed if loyalty_points is None else loyalty_points
                priced = self._quote(stay, reservation.discount_percent, points)
                return self.repository.save(
                    replace(reservation, total=priced.total, loyalty_points_redeemed=points)
                )

        return guarded(_run)

    def apply_discount(
        self,
        reservation_id: str,
        request: DiscountRequest,
        *,
        stay: StayRequest | None = None,
    ) -> Result[Reservation]:
        """Validate the discount against the role cap and store it."""

        def _run() -> Reservation:
            percent = validate_discount(request)
            with self._locked(reservation_id):
                reservation = self._load(reservation_id)
                updated = replace(reservation, discount_percent=percent)
                if stay is not None:
                    priced = self._quote(stay, percent, reservation.loyalty_points_redeemed)
                    updated = replace(updated, total=priced.total)
                saved = self.repository.save(updated)

            logger.info(
                "discount applied",
                extra={
                    "extra_fields": safe_log_context(
                        reservation_id=reservation_id,
                        percent=percent,
                        role=request.role,
                        repriced=stay is not None,
                    )
                },
            )
            return saved

        return guarded(_run)

    # ── ledger ───────────────────────────────────────────

    def record_payment(
        self,
        reservation_id: str,
        amount: Decimal,
        kind: PaymentKind,
        method: str,
        *,
        recorded_by: str | None = None,
    ) -> Result[PaymentReceipt]:
        """Append a CHARGE or REFUND to the reservation's ledger.

        Charges are refused on cancelled reservations and beyond the
        outstanding balance; refunds may not exceed paid-to-date.
        """

        def _run() -> PaymentReceipt:
            with self._locked(reservation_id):
                reservation = self._load(reservation_id)
                kind_ = PaymentKind(kind)
                if kind_ is PaymentKind.CHARGE and reservation.status is ReservationStatus.CANCELLED:
                    raise ReservationNotPayable(
                        f"Reservation status '{reservation.status.value}' does not allow payments",
                        {"status": reservation.status.value},
                    )

                event = ledger.record_payment(
                    reservation_id, amount, kind_, method, recorded_by=recorded_by
                )
                ledger.check_payment(reservation.total or Decimal("0"), reservation.payments, event.amount, kind_)

                saved = self.repository.save(reservation.with_payment(event))
                points = self.loyalty.points_for_payment(event.amount, method) if kind_ is PaymentKind.CHARGE else 0

            logger.info(
                "payment recorded",
                extra={
                    "extra_fields": safe_log_context(
                        reservation_id=reservation_id,
                        payment_id=event.id,
                        amount=event.amount,
                        kind=event.kind,
                        method=method,
                        recorded_by=recorded_by,
                        balance=saved.balance,
                    )
                },
            )
            return PaymentReceipt(event=event, balance=saved.balance, points_earned=points)

        return guarded(_run)

    def get_folio(self, reservation_id: str) -> Result[FolioSummary]:
        def _run() -> FolioSummary:
            with self._locked(reservation_id):
                reservation = self._load(reservation_id)
            outstanding = reservation.balance
            return FolioSummary(
                reservation_id=reservation.id,
                status=reservation.status,
                total=reservation.total,
                total_paid=reservation.total_paid,
                balance=outstanding,
                discount_percent=reservation.discount_percent,
                feedback_eligible=is_feedback_eligible(reservation.status, outstanding),
                payments=reservation.payments,
            )

        return guarded(_run)

    # ── lifecycle ────────────────────────────────────────

    def transition(
        self,
        reservation_id: str,
        requested: ReservationStatus,
        *,
        operator_override: bool = False,
    ) -> Result[Reservation]:
        def _run() -> Reservation:
            with self._locked(reservation_id):
                reservation = self._load(reservation_id)
                rule = TRANSITIONS[(reservation.status, ReservationStatus(requested))]
                if rule is Rule.REQUIRE_ZERO_BALANCE and reservation.total is None:
                    # No total means the balance is unknown, not zero.
                    raise ReservationNotPriced(
                        "Reservation has no computed total",
                        {"reservation_id": reservation_id},
                    )
                new_status = attempt_transition(
                    reservation.status,
                    requested,
                    balance=reservation.balance,
                    feedback_submitted=reservation.feedback_submitted,
                    operator_override=operator_override,
                    policy=self.lifecycle_policy,
                )
                saved = self.repository.save(replace(reservation, status=new_status))

            logger.info(
                "reservation status changed",
                extra={
                    "extra_fields": safe_log_context(
                        reservation_id=reservation_id,
                        from_status=reservation.status,
                        to_status=new_status,
                        operator_override=operator_override,
                    )
                },
            )
            return saved

        return guarded(_run)

    def submit_feedback(self, reservation_id: str) -> Result[Reservation]:
        """Mark feedback as received; only after check-out with a settled bill."""

        def _run() -> Reservation:
            with self._locked(reservation_id):
                reservation = self._load(reservation_id)
                if not is_feedback_eligible(reservation.status, reservation.balance):
                    raise FeedbackNotEligible(
                        "Feedback opens after check-out once the balance is settled",
                        {"status": reservation.status.value, "balance": str(reservation.balance)},
                    )
                return self.repository.save(replace(reservation, feedback_submitted=True))

        return guarded(_run)
