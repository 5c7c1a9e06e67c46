from django.contrib import admin
from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from printing.urls import admin_urlpatterns as print_admin_urlpatterns
from printing.urls import agent_urlpatterns as print_agent_urlpatterns

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/menu/", include("menu.urls")),
    path("api/", include("orders.urls")),
    path("api/print/", include(print_agent_urlpatterns)),
    path("api/admin/print/", include(print_admin_urlpatterns)),
    path("api/webhooks/", include("payments.urls")),
]
