from decimal import Decimal

from rest_framework import serializers

from .models import Order, OrderItem, OrderItemModifier
from .services import CartItem


# --- input ---

class CartItemSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=20)
    modifier_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list
    )
    special_instructions = serializers.CharField(
        max_length=200, required=False, allow_blank=True, default=""
    )

    def validate_modifier_ids(self, value):
        if len(value) != len(set(value)):
            raise serializers.ValidationError("Each modifier can only be selected once.")
        return value


class OrderCreateSerializer(serializers.Serializer):
    items = CartItemSerializer(many=True, allow_empty=False)
    special_instructions = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )
    payment_method_id = serializers.CharField(max_length=255)

    def to_cart(self):
        return [
            CartItem(
                menu_item_id=item["menu_item_id"],
                quantity=item["quantity"],
                modifier_ids=tuple(item.get("modifier_ids") or ()),
                special_instructions=item.get("special_instructions") or "",
            )
            for item in self.validated_data["items"]
        ]


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)


class RefundOrderSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
        required=False,
        allow_null=True,
        help_text="Partial refund amount. Omit for a full refund.",
    )


class OrderListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices, required=False)
    date = serializers.DateField(required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)


class CustomerOrderListQuerySerializer(OrderListQuerySerializer):
    date = None
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)


# --- output ---

class OrderItemModifierSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItemModifier
        fields = ["modifier_id", "name", "price_adjustment"]


class OrderItemSerializer(serializers.ModelSerializer):
    modifiers = OrderItemModifierSerializer(many=True, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item_id",
            "menu_item_name",
            "quantity",
            "unit_price",
            "line_total",
            "special_instructions",
            "modifiers",
        ]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source="user.display_name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "payment_status",
            "subtotal",
            "tax_amount",
            "total_amount",
            "estimated_ready_time",
            "actual_ready_time",
            "special_instructions",
            "customer_name",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ["status", "estimated_ready_time", "actual_ready_time"]
        read_only_fields = fields
