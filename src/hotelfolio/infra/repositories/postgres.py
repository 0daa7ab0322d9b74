"""Postgres reservation store.

Raw SQL with psycopg2 (no ORM). Tables come from the 001_folio_schema
migration. Payment rows are insert-only.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from hotelfolio.domain.ledger import PaymentEvent, PaymentKind
from hotelfolio.domain.reservation import Reservation
from hotelfolio.infra import db


def _row_to_payment(row: tuple[Any, ...]) -> PaymentEvent:
    return PaymentEvent(
        id=str(row[0]),
        reservation_id=str(row[1]),
        amount=Decimal(row[2]),
        kind=PaymentKind(row[3]),
        method=row[4],
        recorded_at=row[5],
        recorded_by=row[6],
    )


def select_payments(cur: PgCursor, *, reservation_id: str) -> list[PaymentEvent]:
    """Payment events for a reservation, oldest first."""
    cur.execute(
        """
        SELECT id, reservation_id, amount, kind, method, recorded_at, recorded_by
        FROM folio_payment_events
        WHERE reservation_id = %s
        ORDER BY recorded_at, id
        """,
        (reservation_id,),
    )
    return [_row_to_payment(r) for r in cur.fetchall()]


def select_reservation(cur: PgCursor, *, reservation_id: str) -> Reservation | None:
    cur.execute(
        """
        SELECT id, status, discount_percent, total, feedback_submitted,
               loyalty_points_redeemed
        FROM folio_reservations
        WHERE id = %s
        """,
        (reservation_id,),
    )
    row = cur.fetchone()
    if row is None:
        return None

    return Reservation(
        id=str(row[0]),
        status=row[1],
        discount_percent=Decimal(row[2]),
        total=Decimal(row[3]) if row[3] is not None else None,
        feedback_submitted=bool(row[4]),
        loyalty_points_redeemed=row[5],
        payments=tuple(select_payments(cur, reservation_id=str(row[0]))),
    )


def upsert_reservation(cur: PgCursor, reservation: Reservation) -> None:
    cur.execute(
        """
        INSERT INTO folio_reservations (
            id, status, discount_percent, total, feedback_submitted,
            loyalty_points_redeemed
        )
        VALUES (%s, %s, %s, %s, %s, %s)
        ON CONFLICT (id) DO UPDATE
        SET status = EXCLUDED.status,
            discount_percent = EXCLUDED.discount_percent,
            total = EXCLUDED.total,
            feedback_submitted = EXCLUDED.feedback_submitted,
            loyalty_points_redeemed = EXCLUDED.loyalty_points_redeemed,
            updated_at = now()
        """,
        (
            reservation.id,
            reservation.status.value,
            reservation.discount_percent,
            reservation.total,
            reservation.feedback_submitted,
            reservation.loyalty_points_redeemed,
        ),
    )


def insert_payment(cur: PgCursor, event: PaymentEvent) -> bool:
    """Insert one payment event. Returns False if it was already stored."""
    cur.execute(
        """
        INSERT INTO folio_payment_events (
            id, reservation_id, amount, kind, method, recorded_at, recorded_by
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        ON CONFLICT (id) DO NOTHING
        """,
        (
            event.id,
            event.reservation_id,
            event.amount,
            event.kind.value,
            event.method,
            event.recorded_at,
            event.recorded_by,
        ),
    )
    return cur.rowcount > 0


class PostgresReservationRepository:
    """ReservationRepository backed by DATABASE_URL; one transaction per call."""

    def find_reservation(self, reservation_id: str) -> Reservation | None:
        with db.txn() as cur:
            return select_reservation(cur, reservation_id=reservation_id)

    def find_payments(self, reservation_id: str) -> list[PaymentEvent]:
        with db.txn() as cur:
            return select_payments(cur, reservation_id=reservation_id)

    def save(self, reservation: Reservation) -> Reservation:
        with db.txn() as cur:
            upsert_reservation(cur, reservation)
            for event in reservation.payments:
                insert_payment(cur, event)
            stored = select_payments(cur, reservation_id=reservation.id)
        return replace(reservation, payments=tuple(stored))
