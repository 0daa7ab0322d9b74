"""Stay quotes: price a stay without creating a reservation."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hotelfolio.api.dependencies import get_folio_service
from hotelfolio.api.errors import unwrap
from hotelfolio.api.schemas import QuoteRequest, quote_to_dict
from hotelfolio.services.billing_service import guarded
from hotelfolio.services.folio_service import FolioService

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("")
def create_quote(
    body: QuoteRequest,
    service: FolioService = Depends(get_folio_service),
) -> dict:
    """Room/add-on breakdown, discount and loyalty adjustment, tax and total."""
    stay = unwrap(guarded(body.stay.to_stay))
    discount = body.discount.to_request() if body.discount else None
    quote = unwrap(service.quote(stay, discount=discount, loyalty_points=body.loyalty_points))
    return quote_to_dict(quote)
