from django.contrib import admin

from .models import Order, OrderItem, OrderItemModifier


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "menu_item",
        "menu_item_name",
        "printer_destination",
        "quantity",
        "unit_price",
        "line_total",
        "special_instructions",
    )


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    # Display order_number instead of id in the list view
    list_display = (
        "order_number",
        "user",
        "status",
        "payment_status",
        "total_amount",
        "created_at",
    )
    list_display_links = ("order_number",)
    list_filter = ("status", "payment_status", "created_at")
    search_fields = ("order_number", "user__email", "stripe_payment_intent_id")
    list_select_related = ("user",)
    inlines = [OrderItemInline]

    # Money and payment references only change through the order pipeline.
    readonly_fields = (
        "id",
        "order_number",
        "user",
        "subtotal",
        "tax_amount",
        "total_amount",
        "payment_status",
        "stripe_payment_intent_id",
        "estimated_ready_time",
        "actual_ready_time",
        "created_at",
        "updated_at",
    )


@admin.register(OrderItemModifier)
class OrderItemModifierAdmin(admin.ModelAdmin):
    list_display = ("id", "get_order_number", "name", "price_adjustment")
    search_fields = ("order_item__order__order_number", "name")

    def get_order_number(self, obj):
        return obj.order_item.order.order_number

    get_order_number.short_description = "Order Number"
    get_order_number.admin_order_field = "order_item__order__order_number"
