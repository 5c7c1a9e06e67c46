from django.urls import path

from .views import PublicMenuView

urlpatterns = [
    path("", PublicMenuView.as_view(), name="public-menu"),
]
