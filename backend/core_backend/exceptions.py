"""
Domain error taxonomy and the DRF exception handler that maps it to HTTP.

Every error raised by the order pipeline carries an explicit kind (its class),
a stable machine code, a human message and optional details. The boundary
picks a status code from the class, never from the message text.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for errors the API reports to callers."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "error"
    default_message = "Request could not be processed."

    def __init__(self, message=None, *, code=None, details=None, **context):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        # Observability context (order id, pipeline stage...) - logged, not returned.
        self.context = context
        super().__init__(self.message)

    def to_dict(self):
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(DomainError):
    """Bad input detected before any persistence."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "validation_error"
    default_message = "Invalid request."


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_message = "Resource not found."


class StateConflictError(DomainError):
    """The resource exists but is not in a state that allows the operation."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "state_conflict"
    default_message = "Operation not allowed in the current state."


class PaymentError(DomainError):
    """
    Payment processor failure, translated to a friendly message.

    ``reason`` is one of a small stable vocabulary (card_declined,
    insufficient_funds, expired_card, incorrect_cvc, processing_error,
    invalid_card). Raw processor detail never leaves the server logs.
    """

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_code = "payment_error"
    default_message = "An error occurred. Please try again."

    def __init__(self, message=None, *, reason="processing_error", **kwargs):
        self.reason = reason
        super().__init__(message, **kwargs)

    def to_dict(self):
        payload = super().to_dict()
        payload["reason"] = self.reason
        return payload


class IntegrationError(DomainError):
    """A downstream system (database, payment gateway) failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "integration_error"
    default_message = "A downstream service failed. Please try again later."


def domain_exception_handler(exc, context):
    """
    DRF exception handler that understands :class:`DomainError`.

    Anything else is delegated to DRF's default handler. Unhandled exceptions
    keep DRF's behaviour (re-raised, turned into a generic 500 by Django).
    """
    if isinstance(exc, DomainError):
        view = context.get("view")
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: "
            f"{exc.message} {exc.context or ''}".rstrip()
        )
        return Response({"error": exc.to_dict()}, status=exc.status_code)

    return exception_handler(exc, context)
