"""Correlation ID propagation for request tracing."""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# Visible to every call made while handling one request.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Current correlation ID, or "" outside a request."""
    return correlation_id_var.get()


@contextmanager
def correlation_scope(cid: str | None = None) -> Iterator[str]:
    """Bind a correlation ID (generated when missing) for the enclosed block."""
    cid = cid or generate_correlation_id()
    token = correlation_id_var.set(cid)
    try:
        yield cid
    finally:
        correlation_id_var.reset(token)
