from django.db import models
from django.utils.translation import gettext_lazy as _


class PrintJob(models.Model):
    """
    One station's ticket for one order, pulled by the print agent.

    Lifecycle: PENDING -> SENT (agent pulled) -> PRINTED | FAILED.
    FAILED jobs go back to PENDING through the retry sweep while
    ``attempts`` is below the configured maximum.
    """

    class PrinterType(models.TextChoices):
        KITCHEN = "KITCHEN", _("Kitchen")
        BEVERAGE = "BEVERAGE", _("Beverage")

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        SENT = "SENT", _("Sent")
        PRINTED = "PRINTED", _("Printed")
        FAILED = "FAILED", _("Failed")

    order = models.ForeignKey(
        "orders.Order", on_delete=models.CASCADE, related_name="print_jobs"
    )
    printer_type = models.CharField(max_length=10, choices=PrinterType.choices)
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, null=True)
    receipt_data = models.JSONField(
        default=dict, help_text=_("Station-filtered receipt payload rendered by the agent.")
    )
    sent_at = models.DateTimeField(null=True, blank=True)
    printed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="printjob_status_created_idx"),
            models.Index(fields=["status", "printed_at"], name="printjob_status_printed_idx"),
        ]

    def __str__(self):
        return f"{self.printer_type} job for Order #{self.order.order_number} ({self.status})"
