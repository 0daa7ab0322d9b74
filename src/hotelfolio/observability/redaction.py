"""Log-safe rendering of folio context.

Payment method tags and operator names are free text typed at the desk and
may carry a guest phone number or e-mail; they pass through redact_string.
Amounts, statuses and payment kinds stay readable so that a ledger can be
followed from the logs.
"""

import re
from decimal import Decimal
from enum import Enum
from typing import Any

_PHONE_PATTERN = re.compile(r"\+?\d[\d\s\-()]{8,}\d")
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

_REDACTED = "[REDACTED]"


def redact_string(value: str) -> str:
    result = _EMAIL_PATTERN.sub(_REDACTED, value)
    return _PHONE_PATTERN.sub(_REDACTED, result)


def redact_value(value: Any) -> str:
    """String form of a value that is safe to log.

    Amounts and enums are kept verbatim; containers only expose their shape.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        return f"dict(keys={list(value.keys())})"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    return {k: redact_value(v) for k, v in kwargs.items()}
