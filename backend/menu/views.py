from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .services import CatalogReader


class PublicMenuView(APIView):
    """Read-only menu tree for browsing. Served from the catalog cache."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response(CatalogReader().get_public_menu())
