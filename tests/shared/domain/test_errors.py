"""Tests for the error taxonomy and its HTTP mapping."""

from fastapi import FastAPI
from fastapi.testclient import TestClient
from shared.api import register_exception_handlers
from shared.exceptions import (
    AuthenticationRequired,
    ExternalServiceError,
    InvalidStateError,
    ObjectNotFoundError,
    PaymentMismatchError,
    ValidationError,
)


def _client_raising(exc):
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise exc

    return TestClient(app)


class TestErrorMessages:
    def test_string_message_is_wrapped(self):
        error = InvalidStateError("Refund request already submitted")
        assert error.messages == {"_entity": ["Refund request already submitted"]}
        assert error.message == "Refund request already submitted"

    def test_first_field_message_is_the_headline(self):
        error = ValidationError({"quantity": ["Only 2 left in stock"]})
        assert error.message == "Only 2 left in stock"


class TestHttpMapping:
    def test_status_codes(self):
        cases = [
            (ValidationError("bad"), 400),
            (AuthenticationRequired("Authentication required"), 401),
            (ObjectNotFoundError("missing"), 404),
            (InvalidStateError("wrong state"), 409),
            (ExternalServiceError("gateway down"), 502),
        ]
        for exc, status in cases:
            response = _client_raising(exc).get("/boom")
            assert response.status_code == status
            assert response.json()["error"] == exc.message

    def test_payment_mismatch_carries_amounts(self):
        response = _client_raising(PaymentMismatchError(5000, 4999)).get("/boom")
        assert response.status_code == 400
        body = response.json()
        assert body["expected"] == 5000
        assert body["received"] == 4999
