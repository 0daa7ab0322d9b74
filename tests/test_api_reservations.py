"""HTTP tests for quotes and reservation folio endpoints."""

import pytest
from fastapi.testclient import TestClient

from hotelfolio.api.dependencies import get_folio_service
from hotelfolio.api.factory import create_app
from hotelfolio.domain.errors import InvalidMultiplier

from .helpers import FRI, MON, SAT, TUE, stay_payload


@pytest.fixture
def client(service):
    app = create_app()
    app.dependency_overrides[get_folio_service] = lambda: service
    with TestClient(app) as c:
        yield c


def _open(client, **kwargs):
    response = client.post("/reservations", json={"stay": stay_payload(**kwargs)})
    assert response.status_code == 201
    return response.json()


def _move(client, reservation_id, *statuses, **extra):
    for status in statuses:
        response = client.post(
            f"/reservations/{reservation_id}/transitions", json={"status": status, **extra}
        )
    return response


class TestQuotes:
    def test_weekend_quote(self, client):
        response = client.post("/quotes", json={"stay": stay_payload(FRI, SAT, addons=["Spa"])})
        assert response.status_code == 200
        body = response.json()
        assert body["room_subtotal"] == "120.00"
        assert body["addon_subtotal"] == "100.00"
        assert body["tax"] == "22.00"
        assert body["total"] == "242.00"

    def test_discount_and_loyalty(self, client):
        payload = {
            "stay": stay_payload(base_price="200.00"),
            "discount": {"percent": "10", "role": "STAFF"},
            "loyalty_points": 1000,
        }
        body = client.post("/quotes", json=payload).json()
        assert body["adjustment"] == "-30.00"
        assert body["total"] == "187.00"

    def test_role_cap_is_422(self, client):
        payload = {"stay": stay_payload(), "discount": {"percent": "20", "role": "STAFF"}}
        response = client.post("/quotes", json=payload)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "role_limit_exceeded"

    def test_invalid_dates_is_422(self, client):
        response = client.post("/quotes", json={"stay": stay_payload(TUE, MON)})
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_date_range"

    def test_zero_quantity_is_422(self, client):
        response = client.post("/quotes", json={"stay": stay_payload(quantity=0)})
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_stay"

    def test_unknown_addon_is_422(self, client):
        response = client.post("/quotes", json={"stay": stay_payload(addons=["Helicopter"])})
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "unknown_addon"
        assert response.json()["detail"]["meta"] == {"addon": "Helicopter"}

    def test_unknown_addon_on_open_is_422(self, client):
        response = client.post("/reservations", json={"stay": stay_payload(addons=["Helicopter"])})
        assert response.status_code == 422

    def test_other_config_errors_are_500(self):
        def broken_service():
            raise InvalidMultiplier("weekend multiplier must be >= 1.0, got 0.9")

        app = create_app()
        app.dependency_overrides[get_folio_service] = broken_service
        response = TestClient(app).post("/quotes", json={"stay": stay_payload()})
        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "invalid_multiplier"

    def test_extra_fields_rejected(self, client):
        response = client.post("/quotes", json={"stay": stay_payload(), "coupon": "X"})
        assert response.status_code == 422


class TestFolio:
    def test_open_and_read(self, client):
        created = _open(client)
        assert created["status"] == "BOOKED"
        assert created["total"] == "110.00"

        folio = client.get(f"/reservations/{created['id']}/folio").json()
        assert folio["balance"] == "110.00"
        assert folio["payments"] == []
        assert folio["feedback_eligible"] is False

    def test_unknown_reservation_is_404(self, client):
        response = client.get("/reservations/nope/folio")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "reservation_not_found"

    def test_payment_and_refund(self, client):
        rid = _open(client)["id"]
        charge = client.post(f"/reservations/{rid}/payments", json={"amount": "110", "method": "card"})
        assert charge.status_code == 200
        assert charge.json()["balance"] == "0.00"
        assert charge.json()["points_earned"] == 11

        refund = client.post(
            f"/reservations/{rid}/payments",
            json={"amount": "50", "kind": "REFUND", "method": "card", "recorded_by": "desk-1"},
        )
        assert refund.json()["balance"] == "50.00"
        assert refund.json()["payment"]["recorded_by"] == "desk-1"

        folio = client.get(f"/reservations/{rid}/folio").json()
        assert folio["total_paid"] == "60.00"
        assert [p["kind"] for p in folio["payments"]] == ["CHARGE", "REFUND"]

    def test_overpayment_is_422(self, client):
        rid = _open(client)["id"]
        response = client.post(f"/reservations/{rid}/payments", json={"amount": "500", "method": "card"})
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "amount_exceeds_balance"

    def test_sub_cent_payment_is_422(self, client):
        rid = _open(client)["id"]
        response = client.post(f"/reservations/{rid}/payments", json={"amount": "0.004", "method": "card"})
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "non_positive_amount"
        assert client.get(f"/reservations/{rid}/folio").json()["payments"] == []

    def test_empty_method_rejected(self, client):
        rid = _open(client)["id"]
        response = client.post(f"/reservations/{rid}/payments", json={"amount": "10", "method": ""})
        assert response.status_code == 422

    def test_discount_reprices(self, client):
        rid = _open(client)["id"]
        response = client.post(
            f"/reservations/{rid}/discount",
            json={"percent": "10", "role": "STAFF", "stay": stay_payload()},
        )
        assert response.status_code == 200
        assert response.json()["total"] == "99.00"
        assert response.json()["discount_percent"] == "10"


class TestLifecycle:
    def test_checkout_conflict_until_settled(self, client):
        rid = _open(client)["id"]
        _move(client, rid, "CONFIRMED", "CHECKED_IN")
        client.post(f"/reservations/{rid}/payments", json={"amount": "60", "method": "card"})

        response = _move(client, rid, "CHECKED_OUT")
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "outstanding_balance"
        assert response.json()["detail"]["meta"] == {"balance": "50.00"}

        client.post(f"/reservations/{rid}/payments", json={"amount": "50", "method": "card"})
        assert _move(client, rid, "CHECKED_OUT").json()["status"] == "CHECKED_OUT"

    def test_feedback_then_complete(self, client):
        rid = _open(client)["id"]
        _move(client, rid, "CONFIRMED", "CHECKED_IN")
        client.post(f"/reservations/{rid}/payments", json={"amount": "110", "method": "card"})
        _move(client, rid, "CHECKED_OUT")

        assert _move(client, rid, "COMPLETED").status_code == 409
        assert client.post(f"/reservations/{rid}/feedback").json()["feedback_submitted"] is True
        assert _move(client, rid, "COMPLETED").json()["status"] == "COMPLETED"

    def test_feedback_too_early_is_409(self, client):
        rid = _open(client)["id"]
        response = client.post(f"/reservations/{rid}/feedback")
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "feedback_not_eligible"

    def test_illegal_transition_is_409(self, client):
        rid = _open(client)["id"]
        response = _move(client, rid, "COMPLETED")
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "illegal_transition"

    def test_unknown_status_rejected(self, client):
        rid = _open(client)["id"]
        response = _move(client, rid, "NO_SHOW")
        assert response.status_code == 422

    def test_cancelled_refuses_charge(self, client):
        rid = _open(client)["id"]
        _move(client, rid, "CANCELLED")
        response = client.post(f"/reservations/{rid}/payments", json={"amount": "10", "method": "card"})
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "reservation_not_payable"
