"""
Unit tests for scravo/api/errors.py
"""

import pytest
from starlette.exceptions import HTTPException

from scravo.api.errors import (
    GENERIC_MESSAGE,
    AppError,
    CorsRejectedError,
    PayloadTooLargeError,
    resolve_message,
    resolve_status,
)


class StatusAttributeError(Exception):
    """Foreign exception declaring `status`."""

    def __init__(self, message: str, status):
        super().__init__(message)
        self.status = status


# ============================================================
# resolve_status tests
# ============================================================


class TestResolveStatus:
    """Tests for resolve_status function."""

    def test_plain_exception(self):
        assert resolve_status(RuntimeError("boom")) == 500

    def test_app_error_default(self):
        assert resolve_status(AppError("boom")) == 500

    def test_app_error_explicit(self):
        assert resolve_status(AppError("Forbidden", status_code=403)) == 403

    def test_http_exception(self):
        assert resolve_status(HTTPException(status_code=409)) == 409

    def test_status_attribute(self):
        assert resolve_status(StatusAttributeError("teapot", 418)) == 418

    @pytest.mark.parametrize("status", [True, "403", 200, 302, 600, None])
    def test_invalid_status_falls_back(self, status):
        assert resolve_status(StatusAttributeError("odd", status)) == 500

    def test_error_subclasses(self):
        assert resolve_status(CorsRejectedError("https://evil.example")) == 403
        assert resolve_status(PayloadTooLargeError(10)) == 413


class TestResolveMessage:
    """Tests for resolve_message function."""

    def test_app_error(self):
        assert resolve_message(AppError("Listing sold"), 500) == "Listing sold"

    def test_http_exception(self):
        assert resolve_message(HTTPException(status_code=404, detail="Gone"), 404) == "Gone"

    def test_unknown_server_error_hidden(self):
        assert resolve_message(RuntimeError("db password wrong"), 500) == GENERIC_MESSAGE

    def test_foreign_client_error_kept(self):
        assert resolve_message(StatusAttributeError("Bad token", 401), 401) == "Bad token"


# ============================================================
# Responder tests
# ============================================================


class TestErrorResponder:
    """Tests for errors raised by handler groups."""

    def test_unhandled_error_is_500(self, client, handler_spy):
        response = client.get("/api/listings/broken")

        assert response.status_code == 500
        assert response.json() == {"message": GENERIC_MESSAGE, "status": 500}
        assert handler_spy.calls == ["listings.broken"]

    def test_declared_status_kept(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden", "status": 403}

    def test_handler_not_found_is_not_route_not_found(self, client):
        response = client.get("/api/listings/missing")

        assert response.status_code == 404
        assert response.json() == {"message": "Listing not found", "status": 404}

    def test_production_hides_detail(self, client):
        for path in ("/api/listings/broken", "/api/auth/me"):
            assert "error" not in client.get(path).json()

    def test_development_includes_detail(self, make_client):
        client = make_client(node_env="development")
        body = client.get("/api/listings/broken").json()

        assert body["message"] == GENERIC_MESSAGE
        assert body["status"] == 500
        assert "RuntimeError: listing store exploded" in body["error"]
        assert "Traceback" in body["error"]

    def test_test_mode_hides_detail(self, make_client):
        client = make_client(node_env="test")
        assert "error" not in client.get("/api/listings/broken").json()

    def test_validation_error(self, client, handler_spy):
        response = client.post("/api/transactions", json={"listing_id": "seven"})

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == 422
        assert body["message"].startswith("body.")
        assert handler_spy.calls == []

    def test_error_logged(self, client):
        from loguru import logger

        messages = []
        sink_id = logger.add(lambda message: messages.append(str(message)), level="ERROR")
        try:
            client.get("/api/listings/broken")
        finally:
            logger.remove(sink_id)

        assert any("GET /api/listings/broken -> 500" in message for message in messages)
