from rest_framework.routers import SimpleRouter

from .views import AdminOrderViewSet, OrderViewSet

router = SimpleRouter()
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"admin/orders", AdminOrderViewSet, basename="admin-order")

urlpatterns = router.urls
