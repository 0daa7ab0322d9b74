"""Tests for observability utilities."""

import json
import logging
from decimal import Decimal

from hotelfolio.domain.ledger import PaymentKind
from hotelfolio.observability.correlation import correlation_scope, get_correlation_id
from hotelfolio.observability.logging import JsonFormatter, get_logger
from hotelfolio.observability.redaction import (
    redact_string,
    redact_value,
    safe_log_context,
)


class TestRedaction:
    def test_redact_phone_number(self):
        result = redact_string("Call me at +55 11 99999-8888")
        assert "99999" not in result
        assert "[REDACTED]" in result

    def test_redact_email(self):
        result = redact_string("Guest: guest@example.com")
        assert "guest@example.com" not in result
        assert "[REDACTED]" in result

    def test_redact_value_dict_only_keys(self):
        result = redact_value({"card": "4111", "holder": "john"})
        assert "4111" not in result
        assert "john" not in result
        assert "card" in result

    def test_redact_value_list_only_len(self):
        result = redact_value(["a", "b", "c"])
        assert "len=3" in result

    def test_amounts_and_enums_verbatim(self):
        assert redact_value(Decimal("110.00")) == "110.00"
        assert redact_value(PaymentKind.REFUND) == "REFUND"
        assert redact_value(None) == "null"
        assert redact_value(True) == "true"

    def test_safe_log_context(self):
        ctx = safe_log_context(recorded_by="desk@example.com", amount=Decimal("5.00"))
        assert ctx["recorded_by"] == "[REDACTED]"
        assert ctx["amount"] == "5.00"


class TestCorrelation:
    def test_scope_binds_and_resets(self):
        assert get_correlation_id() == ""
        with correlation_scope("abc") as cid:
            assert cid == "abc"
            assert get_correlation_id() == "abc"
        assert get_correlation_id() == ""

    def test_scope_generates_id(self):
        with correlation_scope() as cid:
            assert len(cid) == 36


class TestJsonFormatter:
    def _record(self, **extra):
        record = logging.LogRecord("hotelfolio.test", logging.INFO, __file__, 1, "payment recorded", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(self._record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "hotelfolio.test"
        assert data["message"] == "payment recorded"
        assert "correlationId" not in data

    def test_extra_fields_and_correlation(self):
        with correlation_scope("req-1"):
            line = JsonFormatter().format(self._record(extra_fields={"reservation_id": "r1"}))
        data = json.loads(line)
        assert data["correlationId"] == "req-1"
        assert data["reservation_id"] == "r1"

    def test_get_logger_single_handler(self):
        logger = get_logger("hotelfolio.test.single")
        get_logger("hotelfolio.test.single")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.propagate is False
