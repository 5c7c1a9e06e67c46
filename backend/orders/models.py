import uuid

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import Max
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from menu.models import MenuItem


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")  # Provisional, payment not confirmed yet
        CONFIRMED = "CONFIRMED", _("Confirmed")  # Paid, waiting for the kitchen
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        COMPLETED = "COMPLETED", _("Completed")  # Picked up
        CANCELLED = "CANCELLED", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PAID = "PAID", _("Paid")
        FAILED = "FAILED", _("Failed")
        REFUNDED = "REFUNDED", _("Refunded")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.PositiveIntegerField(
        unique=True,
        editable=False,
        help_text=_("Sequential, customer-facing order number."),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )

    # --- Financial Fields ---
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    stripe_payment_intent_id = models.CharField(
        max_length=255, blank=True, null=True, db_index=True
    )

    estimated_ready_time = models.DateTimeField(null=True, blank=True)
    actual_ready_time = models.DateTimeField(null=True, blank=True)
    special_instructions = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["user", "status"], name="order_user_status_idx"),
            models.Index(fields=["payment_status"], name="order_payment_status_idx"),
        ]

    def __str__(self):
        return f"Order #{self.order_number} - {self.status}"

    def save(self, *args, **kwargs):
        if self.order_number is not None:
            return super().save(*args, **kwargs)

        # Two concurrent creates can read the same max; the unique constraint
        # rejects the loser, which takes the next number.
        max_retries = 5
        for _attempt in range(max_retries):
            self.order_number = self._next_order_number()
            try:
                with transaction.atomic():
                    return super().save(*args, **kwargs)
            except IntegrityError:
                self.order_number = None
                continue
        raise IntegrityError("Failed to allocate a unique order number after multiple retries.")

    @staticmethod
    def _next_order_number():
        last = Order.objects.aggregate(last=Max("order_number"))["last"]
        return (last or 0) + 1


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    # Snapshot of the catalog at order time. The FK is informational only and
    # survives catalog deletion as NULL.
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    menu_item_name = models.CharField(max_length=200)
    printer_destination = models.CharField(
        max_length=10,
        choices=MenuItem.PrinterDestination.choices,
        default=MenuItem.PrinterDestination.KITCHEN,
    )
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Base price plus modifier adjustments at the time of sale."),
    )
    line_total = models.DecimalField(max_digits=10, decimal_places=2)
    special_instructions = models.CharField(max_length=200, blank=True, default="")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} of {self.menu_item_name} in Order #{self.order.order_number}"


class OrderItemModifier(models.Model):
    order_item = models.ForeignKey(
        OrderItem, on_delete=models.CASCADE, related_name="modifiers"
    )
    modifier_id = models.BigIntegerField(null=True, blank=True)
    name = models.CharField(max_length=100)
    price_adjustment = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} ({self.price_adjustment})"
