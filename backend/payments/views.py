"""
Stripe webhook endpoint.

The body is handed to signature verification as raw bytes; DRF never parses
it (``request.data`` is not touched in this view).
"""
import logging

from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.exceptions import DomainError
from .webhooks import WebhookService

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get_webhook_service(self):
        return WebhookService()

    def post(self, request, *args, **kwargs):
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")

        if not sig_header:
            logger.warning("Stripe webhook received without signature header")
            return Response(
                {"error": {"code": "MISSING_SIGNATURE", "message": "Missing Stripe-Signature header."}},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = self.get_webhook_service().handle_webhook(payload, sig_header)
        except DomainError as e:
            # Signature (401) and payload (400) failures carry their own status.
            return Response({"error": e.to_dict()}, status=e.status_code)
        except Exception as e:
            logger.error(f"Stripe webhook processing failed: {e}", exc_info=True)
            return Response(
                {"error": {"code": "WEBHOOK_ERROR", "message": "Webhook processing failed."}},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"received": True, "event_type": result.event_type, "handled": result.handled})
