"""Clock helpers for the payment ledger.

Every PaymentEvent.recorded_at is a timezone-aware UTC datetime, whether it
comes from the clock or from the caller.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC timestamp (timezone-aware)."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalise a caller-supplied timestamp to UTC.

    Raises:
        ValueError: value is naive; its offset cannot be guessed.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"recorded_at must be timezone-aware, got {value.isoformat()}")
    return value.astimezone(timezone.utc)
