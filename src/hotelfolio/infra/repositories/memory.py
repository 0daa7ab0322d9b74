"""Process-local reservation store, used by default and in tests."""

from __future__ import annotations

import threading
from dataclasses import replace

from hotelfolio.domain.ledger import PaymentEvent
from hotelfolio.domain.reservation import Reservation


class InMemoryReservationRepository:
    def __init__(self, reservations: list[Reservation] | None = None):
        self._lock = threading.Lock()
        self._reservations: dict[str, Reservation] = {}
        self._payments: dict[str, list[PaymentEvent]] = {}
        for reservation in reservations or []:
            self.save(reservation)

    def find_reservation(self, reservation_id: str) -> Reservation | None:
        with self._lock:
            reservation = self._reservations.get(reservation_id)
            if reservation is None:
                return None
            return replace(reservation, payments=tuple(self._payments.get(reservation_id, [])))

    def find_payments(self, reservation_id: str) -> list[PaymentEvent]:
        with self._lock:
            return list(self._payments.get(reservation_id, []))

    def save(self, reservation: Reservation) -> Reservation:
        with self._lock:
            stored = self._payments.setdefault(reservation.id, [])
            known = {event.id for event in stored}
            stored.extend(e for e in reservation.payments if e.id not in known)
            self._reservations[reservation.id] = replace(reservation, payments=())
            return replace(reservation, payments=tuple(stored))
