"""
Domain error taxonomy and its mapping onto HTTP responses.
"""
import pytest
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated

from core_backend.exceptions import (
    DomainError,
    IntegrationError,
    NotFoundError,
    PaymentError,
    StateConflictError,
    ValidationFailed,
    domain_exception_handler,
)


class TestDomainError:
    def test_defaults(self):
        error = NotFoundError()

        assert error.message == "Resource not found."
        assert error.code == "not_found"
        assert str(error) == "Resource not found."

    def test_context_is_not_serialized(self):
        error = StateConflictError("Nope", details={"id": 1}, order_id="abc", stage="refund")

        assert error.context == {"order_id": "abc", "stage": "refund"}
        assert error.to_dict() == {"code": "state_conflict", "message": "Nope", "details": {"id": 1}}

    def test_payment_error_carries_reason(self):
        error = PaymentError(reason="card_declined")

        assert error.to_dict()["reason"] == "card_declined"
        assert error.message == "An error occurred. Please try again."

    @pytest.mark.parametrize(
        "error_class,expected",
        [
            (ValidationFailed, 400),
            (NotFoundError, 404),
            (StateConflictError, 409),
            (PaymentError, 402),
            (IntegrationError, 502),
        ],
    )
    def test_status_codes(self, error_class, expected):
        assert error_class.status_code == expected
        assert issubclass(error_class, DomainError)


class TestExceptionHandler:
    def test_domain_error_response(self):
        response = domain_exception_handler(
            ValidationFailed("Bad cart", code="bad_cart", details={"line": 2}), {"view": None}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": {"code": "bad_cart", "message": "Bad cart", "details": {"line": 2}}}

    def test_server_side_error_status(self):
        response = domain_exception_handler(IntegrationError(), {})
        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    def test_drf_exceptions_use_default_handler(self):
        response = domain_exception_handler(NotAuthenticated(), {})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "detail" in response.data

    def test_unexpected_exceptions_are_not_handled(self):
        assert domain_exception_handler(RuntimeError("boom"), {}) is None
