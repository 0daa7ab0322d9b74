"""FastAPI application factory."""

from fastapi import FastAPI, Request, Response

from hotelfolio.domain.errors import BillingConfigError, UnknownAddOn
from hotelfolio.observability.correlation import CORRELATION_ID_HEADER, correlation_scope

from .errors import billing_config_error_handler, unknown_addon_handler
from .routes import quotes, reservations


def create_app() -> FastAPI:
    """Build the billing API with correlation-id middleware and all routes."""
    app = FastAPI(
        title="Hotel Folio",
        docs_url=None,
        redoc_url=None,
    )

    app.add_exception_handler(BillingConfigError, billing_config_error_handler)
    app.add_exception_handler(UnknownAddOn, unknown_addon_handler)

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        with correlation_scope(request.headers.get(CORRELATION_ID_HEADER)) as cid:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(quotes.router)
    app.include_router(reservations.router)

    return app
