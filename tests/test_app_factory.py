"""Tests for app factory, routing and dependency wiring."""

from fastapi.testclient import TestClient

from hotelfolio.api.dependencies import get_folio_service
from hotelfolio.api.errors import status_code_for
from hotelfolio.api.factory import create_app
from hotelfolio.infra.repositories.memory import InMemoryReservationRepository


class TestRoutes:
    def test_health_available(self):
        client = TestClient(create_app())
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_docs_not_mounted(self):
        client = TestClient(create_app())
        assert client.get("/docs").status_code == 404

    def test_quotes_mounted(self):
        client = TestClient(create_app())
        # Empty payload fails validation, not routing
        response = client.post("/quotes", json={})
        assert response.status_code == 422


class TestCorrelationId:
    def test_generates_correlation_id(self):
        client = TestClient(create_app())
        response = client.get("/health")
        assert "X-Correlation-ID" in response.headers
        assert len(response.headers["X-Correlation-ID"]) == 36  # UUID length

    def test_preserves_incoming_correlation_id(self):
        client = TestClient(create_app())
        response = client.get("/health", headers={"X-Correlation-ID": "test-123"})
        assert response.headers["X-Correlation-ID"] == "test-123"


class TestDependencies:
    def test_default_storage_is_memory(self, monkeypatch):
        monkeypatch.delenv("FOLIO_STORAGE", raising=False)
        service = get_folio_service()
        assert isinstance(service.repository, InMemoryReservationRepository)

    def test_service_is_cached(self):
        assert get_folio_service() is get_folio_service()

    def test_settings_flow_into_service(self, monkeypatch):
        monkeypatch.setenv("PRICING_TAX_RATE", "0.2")
        monkeypatch.setenv("LIFECYCLE_REQUIRE_FEEDBACK", "false")
        service = get_folio_service()
        assert str(service.pricing_config.tax_rate) == "0.2"
        assert service.lifecycle_policy.require_feedback_for_completion is False

    def test_postgres_storage(self, monkeypatch):
        from hotelfolio.infra.repositories.postgres import PostgresReservationRepository

        monkeypatch.setenv("FOLIO_STORAGE", "postgres")
        assert isinstance(get_folio_service().repository, PostgresReservationRepository)


class TestStatusCodes:
    def test_not_found(self):
        assert status_code_for("reservation_not_found") == 404

    def test_conflicts(self):
        for code in (
            "illegal_transition",
            "outstanding_balance",
            "feedback_pending",
            "already_checked_in",
            "reservation_not_priced",
        ):
            assert status_code_for(code) == 409

    def test_validation(self):
        assert status_code_for("amount_exceeds_balance") == 422
        assert status_code_for("percent_out_of_range") == 422


class TestAsgiModule:
    def test_module_level_app_serves_health(self):
        from hotelfolio.api.app import app

        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
