import hmac
import logging

from django.conf import settings
from rest_framework import authentication, exceptions

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


class PrintAgent:
    """Request principal for the machine-to-machine print agent."""

    is_authenticated = True
    is_anonymous = False

    def __str__(self):
        return "print-agent"


class PrintAgentAPIKeyAuthentication(authentication.BaseAuthentication):
    """
    Static shared-secret header, compared in constant time.

    Missing header -> 401, wrong key -> 403. Independent of user sessions.
    """

    def authenticate(self, request):
        provided = request.headers.get(API_KEY_HEADER)
        if not provided:
            raise exceptions.NotAuthenticated("API key required.")

        expected = getattr(settings, "PRINT_SERVER_API_KEY", "")
        if not expected:
            logger.error("PRINT_SERVER_API_KEY is not configured; rejecting print agent request")
            raise exceptions.PermissionDenied("Invalid API key.")

        if not hmac.compare_digest(provided.encode(), expected.encode()):
            logger.warning(f"Invalid print agent API key from {request.META.get('REMOTE_ADDR')}")
            raise exceptions.PermissionDenied("Invalid API key.")

        return (PrintAgent(), None)

    def authenticate_header(self, request):
        return API_KEY_HEADER
