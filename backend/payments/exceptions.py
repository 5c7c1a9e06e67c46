from rest_framework import status

from core_backend.exceptions import DomainError, IntegrationError, PaymentError


class WebhookSignatureError(DomainError):
    """
    The webhook payload could not be authenticated.

    Kept apart from integration errors so the view answers with an auth-style
    status instead of a retryable 500.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "INVALID_SIGNATURE"
    default_message = "Invalid webhook signature."


class WebhookPayloadError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_PAYLOAD"
    default_message = "Invalid webhook payload."


class PaymentServiceUnavailable(IntegrationError):
    default_code = "payment_service_unavailable"
    default_message = "Payment service is unavailable. Please try again later."


class PaymentNotSucceeded(PaymentError):
    """Confirmation returned a status other than ``succeeded``."""

    default_code = "payment_not_succeeded"
    default_message = "Your payment could not be completed. Please try a different card."
