"""Request/response models for the billing API (pydantic v2)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from hotelfolio.domain.discounts import DiscountRequest, StaffRole
from hotelfolio.domain.ledger import PaymentEvent, PaymentKind
from hotelfolio.domain.lifecycle import ReservationStatus
from hotelfolio.domain.pricing import AddOnSelection, Quote, RoomSelection, StayRequest
from hotelfolio.domain.reservation import Reservation
from hotelfolio.services.folio_service import FolioSummary, PaymentReceipt


# ── Requests ─────────────────────────────────────────────


class RoomPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room_type: str
    base_price: Decimal
    capacity: int = 1
    quantity: int = 1


class AddOnPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    unit_price: Decimal | None = None
    per_night: bool | None = None


class StayPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rooms: list[RoomPayload] = Field(..., min_length=1)
    check_in: date
    check_out: date
    addons: list[AddOnPayload] = Field(default_factory=list)

    def to_stay(self) -> StayRequest:
        """Build the domain value; may raise InvalidStay."""
        return StayRequest(
            rooms=tuple(RoomSelection(**room.model_dump()) for room in self.rooms),
            check_in=self.check_in,
            check_out=self.check_out,
            addons=frozenset(AddOnSelection(**addon.model_dump()) for addon in self.addons),
        )


class DiscountPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    percent: Decimal
    role: StaffRole

    def to_request(self) -> DiscountRequest:
        return DiscountRequest(percent=self.percent, role=self.role)


class QuoteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    stay: StayPayload
    discount: DiscountPayload | None = None
    loyalty_points: int = 0


class ApplyDiscountRequest(DiscountPayload):
    stay: StayPayload | None = None


class RecordPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Decimal
    kind: PaymentKind = PaymentKind.CHARGE
    method: str = Field(..., min_length=1)
    recorded_by: str | None = None


class TransitionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: ReservationStatus
    operator_override: bool = False


# ── Serialisers ──────────────────────────────────────────


def _money(value: Decimal | None) -> str | None:
    return None if value is None else f"{value:.2f}"


def quote_to_dict(quote: Quote) -> dict[str, Any]:
    return {
        "nights": quote.breakdown.nights,
        "room_subtotal": _money(quote.breakdown.room_subtotal),
        "addon_subtotal": _money(quote.breakdown.addon_subtotal),
        "subtotal": _money(quote.breakdown.subtotal),
        "adjustment": _money(quote.adjustment),
        "adjusted_subtotal": _money(quote.adjusted_subtotal),
        "tax": _money(quote.tax),
        "total": _money(quote.total),
    }


def payment_to_dict(event: PaymentEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "reservation_id": event.reservation_id,
        "amount": _money(event.amount),
        "kind": event.kind.value,
        "method": event.method,
        "recorded_at": event.recorded_at.isoformat(),
        "recorded_by": event.recorded_by,
    }


def reservation_to_dict(reservation: Reservation) -> dict[str, Any]:
    return {
        "id": reservation.id,
        "status": reservation.status.value,
        "discount_percent": str(reservation.discount_percent),
        "total": _money(reservation.total),
        "total_paid": _money(reservation.total_paid),
        "balance": _money(reservation.balance),
        "feedback_submitted": reservation.feedback_submitted,
        "loyalty_points_redeemed": reservation.loyalty_points_redeemed,
    }


def receipt_to_dict(receipt: PaymentReceipt) -> dict[str, Any]:
    return {
        "payment": payment_to_dict(receipt.event),
        "balance": _money(receipt.balance),
        "points_earned": receipt.points_earned,
    }


def folio_to_dict(folio: FolioSummary) -> dict[str, Any]:
    return {
        "reservation_id": folio.reservation_id,
        "status": folio.status.value,
        "total": _money(folio.total),
        "total_paid": _money(folio.total_paid),
        "balance": _money(folio.balance),
        "discount_percent": str(folio.discount_percent),
        "feedback_eligible": folio.feedback_eligible,
        "payments": [payment_to_dict(p) for p in folio.payments],
    }
