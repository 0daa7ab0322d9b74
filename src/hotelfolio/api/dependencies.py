"""FastAPI dependency wiring for the folio service."""

from __future__ import annotations

from functools import lru_cache

from hotelfolio.infra.repositories.base import ReservationRepository
from hotelfolio.infra.settings import get_settings
from hotelfolio.services.folio_service import FolioService


def _build_repository(storage: str) -> ReservationRepository:
    if storage == "postgres":
        from hotelfolio.infra.repositories.postgres import PostgresReservationRepository

        return PostgresReservationRepository()

    from hotelfolio.infra.repositories.memory import InMemoryReservationRepository

    return InMemoryReservationRepository()


@lru_cache(maxsize=1)
def get_folio_service() -> FolioService:
    """Process-wide service built from settings (FOLIO_STORAGE picks the store)."""
    settings = get_settings()
    return FolioService(
        _build_repository(settings.storage),
        pricing_config=settings.pricing,
        loyalty_config=settings.loyalty,
        lifecycle_policy=settings.lifecycle,
    )
