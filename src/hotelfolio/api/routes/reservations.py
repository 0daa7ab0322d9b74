"""Reservation folio endpoints: payments, discount, status and feedback."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from hotelfolio.api.dependencies import get_folio_service
from hotelfolio.api.errors import unwrap
from hotelfolio.api.schemas import (
    ApplyDiscountRequest,
    QuoteRequest,
    RecordPaymentRequest,
    TransitionRequest,
    folio_to_dict,
    receipt_to_dict,
    reservation_to_dict,
)
from hotelfolio.services.billing_service import guarded
from hotelfolio.services.folio_service import FolioService

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", status_code=201)
def open_reservation(
    body: QuoteRequest,
    service: FolioService = Depends(get_folio_service),
) -> dict:
    stay = unwrap(guarded(body.stay.to_stay))
    discount = body.discount.to_request() if body.discount else None
    reservation = unwrap(
        service.open_reservation(stay, discount=discount, loyalty_points=body.loyalty_points)
    )
    return reservation_to_dict(reservation)


@router.get("/{reservation_id}/folio")
def get_folio(
    reservation_id: str = Path(..., description="Reservation id"),
    service: FolioService = Depends(get_folio_service),
) -> dict:
    """Total, paid-to-date, balance and payment history."""
    return folio_to_dict(unwrap(service.get_folio(reservation_id)))


@router.post("/{reservation_id}/payments")
def record_payment(
    body: RecordPaymentRequest,
    reservation_id: str = Path(..., description="Reservation id"),
    service: FolioService = Depends(get_folio_service),
) -> dict:
    receipt = unwrap(
        service.record_payment(
            reservation_id,
            body.amount,
            body.kind,
            body.method,
            recorded_by=body.recorded_by,
        )
    )
    return receipt_to_dict(receipt)


@router.post("/{reservation_id}/discount")
def apply_discount(
    body: ApplyDiscountRequest,
    reservation_id: str = Path(..., description="Reservation id"),
    service: FolioService = Depends(get_folio_service),
) -> dict:
    """Apply a role-capped discount; reprices when the stay is included."""
    stay = unwrap(guarded(body.stay.to_stay)) if body.stay else None
    reservation = unwrap(service.apply_discount(reservation_id, body.to_request(), stay=stay))
    return reservation_to_dict(reservation)


@router.post("/{reservation_id}/transitions")
def transition(
    body: TransitionRequest,
    reservation_id: str = Path(..., description="Reservation id"),
    service: FolioService = Depends(get_folio_service),
) -> dict:
    reservation = unwrap(
        service.transition(reservation_id, body.status, operator_override=body.operator_override)
    )
    return reservation_to_dict(reservation)


@router.post("/{reservation_id}/feedback")
def submit_feedback(
    reservation_id: str = Path(..., description="Reservation id"),
    service: FolioService = Depends(get_folio_service),
) -> dict:
    return reservation_to_dict(unwrap(service.submit_feedback(reservation_id)))
