import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from printing.serializers import PrintJobSerializer
from users.permissions import IsAdminOrHigher, IsStaffOrHigher
from .serializers import (
    OrderCreateSerializer,
    CustomerOrderListQuerySerializer,
    OrderListQuerySerializer,
    OrderSerializer,
    OrderStatusSerializer,
    RefundOrderSerializer,
    UpdateOrderStatusSerializer,
)
from .services import OrderService

logger = logging.getLogger(__name__)


def paginated_response(result):
    return Response(
        {
            "orders": OrderSerializer(result["orders"], many=True).data,
            "total": result["total"],
            "page": result["page"],
            "limit": result["limit"],
        }
    )


class OrderServiceMixin:
    def get_order_service(self):
        return OrderService()


class OrderViewSet(OrderServiceMixin, viewsets.ViewSet):
    """Customer-facing orders. Every lookup is scoped to request.user."""

    permission_classes = [IsAuthenticated]

    def create(self, request: Request) -> Response:
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self.get_order_service().create_order(
            user=request.user,
            items=serializer.to_cart(),
            payment_method_id=serializer.validated_data["payment_method_id"],
            special_instructions=serializer.validated_data.get("special_instructions", ""),
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    def list(self, request: Request) -> Response:
        query = CustomerOrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = self.get_order_service().get_user_orders(
            request.user,
            page=query.validated_data["page"],
            limit=query.validated_data["limit"],
            status=query.validated_data.get("status"),
        )
        return paginated_response(result)

    def retrieve(self, request: Request, pk=None) -> Response:
        order = self.get_order_service().get_order_by_id(pk, user=request.user)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get"], url_path="status")
    def order_status(self, request: Request, pk=None) -> Response:
        """Lightweight polling endpoint."""
        order = self.get_order_service().get_order_by_id(pk, user=request.user)
        return Response(OrderStatusSerializer(order).data)


class AdminOrderViewSet(OrderServiceMixin, viewsets.ViewSet):
    """Staff order management: board, transitions, refunds, reprints."""

    permission_classes = [IsStaffOrHigher]

    def list(self, request: Request) -> Response:
        query = OrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = self.get_order_service().get_all_orders(
            status=query.validated_data.get("status"),
            date=query.validated_data.get("date"),
            page=query.validated_data["page"],
            limit=query.validated_data["limit"],
        )
        return paginated_response(result)

    def retrieve(self, request: Request, pk=None) -> Response:
        order = self.get_order_service().get_order_by_id(pk)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def active(self, request: Request) -> Response:
        orders = self.get_order_service().get_active_orders()
        return Response(OrderSerializer(orders, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        return Response(self.get_order_service().get_order_count_by_status())

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self.get_order_service().update_order_status(
            pk, serializer.validated_data["status"], actor=request.user
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAdminOrHigher])
    def refund(self, request: Request, pk=None) -> Response:
        serializer = RefundOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self.get_order_service().refund_order(
            pk, actor=request.user, amount=serializer.validated_data.get("amount")
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="print-kitchen-ticket")
    def print_kitchen_ticket(self, request: Request, pk=None) -> Response:
        service = self.get_order_service()
        order = service.get_order_by_id(pk)
        job = service.print_service.print_kitchen_ticket(order)
        return Response(PrintJobSerializer(job).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="print-receipt")
    def print_receipt(self, request: Request, pk=None) -> Response:
        service = self.get_order_service()
        order = service.get_order_by_id(pk)
        job = service.print_service.print_receipt(order)
        return Response(PrintJobSerializer(job).data, status=status.HTTP_201_CREATED)
