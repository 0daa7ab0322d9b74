"""Persistence contract consumed by the folio service."""

from __future__ import annotations

from typing import Protocol

from hotelfolio.domain.ledger import PaymentEvent
from hotelfolio.domain.reservation import Reservation


class ReservationRepository(Protocol):
    def find_reservation(self, reservation_id: str) -> Reservation | None:
        """Reservation snapshot with its payment events, or None."""

    def find_payments(self, reservation_id: str) -> list[PaymentEvent]:
        """Payment events in recording order."""

    def save(self, reservation: Reservation) -> Reservation:
        """Persist the snapshot. Payment events are insert-only."""
