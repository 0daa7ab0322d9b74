"""Folio schema: reservation billing snapshot and insert-only payment events.

Revision ID: 001_folio_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op

revision = "001_folio_schema"
down_revision = None
branch_labels = None
depends_on = None

_SQL = """
CREATE TABLE folio_reservations (
    id                       TEXT PRIMARY KEY,
    status                   TEXT NOT NULL DEFAULT 'BOOKED'
        CHECK (status IN ('BOOKED', 'CONFIRMED', 'CHECKED_IN',
                          'CHECKED_OUT', 'COMPLETED', 'CANCELLED')),
    discount_percent         NUMERIC(5, 2) NOT NULL DEFAULT 0
        CHECK (discount_percent BETWEEN 0 AND 100),
    total                    NUMERIC(12, 2),
    feedback_submitted       BOOLEAN NOT NULL DEFAULT FALSE,
    loyalty_points_redeemed  INTEGER NOT NULL DEFAULT 0,
    created_at               TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at               TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE folio_payment_events (
    id              TEXT PRIMARY KEY,
    reservation_id  TEXT NOT NULL REFERENCES folio_reservations (id),
    amount          NUMERIC(12, 2) NOT NULL CHECK (amount > 0),
    kind            TEXT NOT NULL CHECK (kind IN ('CHARGE', 'REFUND')),
    method          TEXT NOT NULL,
    recorded_at     TIMESTAMPTZ NOT NULL,
    recorded_by     TEXT
);

CREATE INDEX ix_folio_payment_events_reservation
    ON folio_payment_events (reservation_id, recorded_at);
"""


def upgrade() -> None:
    op.execute(_SQL)


def downgrade() -> None:
    op.execute("DROP TABLE folio_payment_events")
    op.execute("DROP TABLE folio_reservations")
