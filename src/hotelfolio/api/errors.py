"""Translate billing results into HTTP responses."""

from __future__ import annotations

from typing import NoReturn, TypeVar

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from hotelfolio.domain.errors import BillingConfigError, UnknownAddOn
from hotelfolio.observability.logging import get_logger
from hotelfolio.observability.redaction import safe_log_context
from hotelfolio.services.billing_service import Err, Result

T = TypeVar("T")

logger = get_logger(__name__)

_NOT_FOUND = {"reservation_not_found"}

_CONFLICT = {
    "illegal_transition",
    "outstanding_balance",
    "feedback_pending",
    "already_checked_in",
    "reservation_not_payable",
    "feedback_not_eligible",
    "reservation_not_priced",
}


def status_code_for(code: str) -> int:
    if code in _NOT_FOUND:
        return 404
    if code in _CONFLICT:
        return 409
    return 422


def raise_for_err(err: Err) -> NoReturn:
    raise HTTPException(status_code=status_code_for(err.code), detail=err.as_dict())


def unwrap(result: Result[T]) -> T:
    """Return the Ok value or raise the matching HTTPException."""
    if isinstance(result, Err):
        raise_for_err(result)
    return result.value


async def billing_config_error_handler(request: Request, exc: BillingConfigError) -> JSONResponse:
    logger.error(
        "billing configuration error",
        extra={
            "extra_fields": safe_log_context(
                path=request.url.path,
                code=exc.reason_code,
                error=str(exc),
            )
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": exc.reason_code, "message": str(exc), "meta": exc.meta}},
    )


async def unknown_addon_handler(request: Request, exc: UnknownAddOn) -> JSONResponse:
    """422 for add-on names missing from the catalog."""
    logger.warning(
        "unknown add-on requested",
        extra={"extra_fields": safe_log_context(path=request.url.path, addon=exc.name)},
    )
    return JSONResponse(
        status_code=422,
        content={"detail": {"code": exc.reason_code, "message": str(exc), "meta": exc.meta}},
    )
