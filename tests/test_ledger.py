"""Tests for the payment ledger."""

import itertools
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from hotelfolio.domain.errors import AmountExceedsBalance, NonPositiveAmount, RefundExceedsPaid
from hotelfolio.domain.ledger import (
    Ledger,
    PaymentKind,
    balance,
    check_payment,
    record_payment,
    total_paid,
)

RES_ID = "res-1"


def charge(amount: str, method: str = "card"):
    return record_payment(RES_ID, Decimal(amount), PaymentKind.CHARGE, method)


def refund(amount: str, method: str = "card"):
    return record_payment(RES_ID, Decimal(amount), PaymentKind.REFUND, method)


class TestRecordPayment:
    def test_builds_event(self):
        event = charge("300")
        assert event.reservation_id == RES_ID
        assert event.amount == Decimal("300.00")
        assert event.kind is PaymentKind.CHARGE
        assert event.recorded_at.tzinfo == timezone.utc
        assert event.id

    def test_event_ids_unique(self):
        assert charge("1").id != charge("1").id

    def test_explicit_timestamp_and_operator(self):
        at = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        event = record_payment(RES_ID, "10", "REFUND", "cash", recorded_at=at, recorded_by="desk-1")
        assert event.recorded_at == at
        assert event.recorded_by == "desk-1"
        assert event.kind is PaymentKind.REFUND

    @pytest.mark.parametrize("amount", ["0", "-5", "0.004"])
    def test_non_positive_rejected(self, amount):
        with pytest.raises(NonPositiveAmount):
            charge(amount)

    def test_missing_method_is_type_error(self):
        with pytest.raises(TypeError):
            record_payment(RES_ID, Decimal("1"), PaymentKind.CHARGE, None)


class TestTotals:
    def test_charge_minus_refund(self):
        events = [charge("300"), refund("50")]
        assert total_paid(events) == Decimal("250.00")
        assert balance(Decimal("300"), events) == Decimal("50.00")

    def test_empty_ledger(self):
        assert total_paid([]) == Decimal("0.00")
        assert balance(Decimal("110"), []) == Decimal("110.00")

    def test_balance_floored_at_zero(self):
        assert balance(Decimal("100"), [charge("150")]) == Decimal("0")

    def test_order_independent(self):
        events = [charge("120.10"), refund("20.05"), charge("0.33"), refund("10")]
        totals = {total_paid(p) for p in itertools.permutations(events)}
        assert totals == {Decimal("90.38")}


class TestCheckPayment:
    def test_charge_up_to_balance(self):
        check_payment(Decimal("300"), [charge("250")], Decimal("50"), PaymentKind.CHARGE)

    def test_charge_within_tolerance(self):
        check_payment(Decimal("300"), [charge("250")], Decimal("50.01"), PaymentKind.CHARGE)

    def test_charge_over_balance(self):
        with pytest.raises(AmountExceedsBalance):
            check_payment(Decimal("300"), [charge("250")], Decimal("60"), PaymentKind.CHARGE)

    def test_refund_over_paid(self):
        with pytest.raises(RefundExceedsPaid):
            check_payment(Decimal("300"), [charge("300"), refund("50")], Decimal("300"), PaymentKind.REFUND)

    def test_refund_up_to_paid(self):
        check_payment(Decimal("300"), [charge("300")], Decimal("300"), PaymentKind.REFUND)


class TestLedger:
    def test_record_returns_new_ledger(self):
        empty = Ledger(RES_ID)
        updated, event = empty.record(Decimal("75"), PaymentKind.CHARGE, "card")
        assert empty.events == ()
        assert updated.events == (event,)
        assert updated.total_paid == Decimal("75.00")
        assert updated.balance(Decimal("100")) == Decimal("25.00")

    def test_rejects_events_of_other_reservation(self):
        other = record_payment("res-2", Decimal("1"), PaymentKind.CHARGE, "card")
        with pytest.raises(ValueError):
            Ledger(RES_ID, (other,))


class TestClock:
    def test_default_timestamp_comes_from_utc_now(self):
        from unittest.mock import patch

        fixed = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
        with patch("hotelfolio.domain.ledger.utc_now", return_value=fixed):
            assert charge("5").recorded_at == fixed

    def test_utc_now_is_aware(self):
        from hotelfolio.infra.time import utc_now

        before = datetime.now(timezone.utc)
        now = utc_now()
        assert now.tzinfo == timezone.utc
        assert before <= now <= datetime.now(timezone.utc)

    def test_recorded_at_normalised_to_utc(self):
        from datetime import timedelta

        local = datetime(2026, 10, 19, 11, 0, tzinfo=timezone(timedelta(hours=3)))
        event = record_payment(RES_ID, "10", PaymentKind.CHARGE, "card", recorded_at=local)
        assert event.recorded_at == datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
        assert event.recorded_at.utcoffset() == timedelta(0)

    def test_naive_recorded_at_rejected(self):
        with pytest.raises(ValueError):
            record_payment(RES_ID, "10", PaymentKind.CHARGE, "card", recorded_at=datetime(2026, 10, 19, 8, 0))
