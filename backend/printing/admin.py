from django.contrib import admin, messages

from .models import PrintJob
from .services import PrintJobService


@admin.action(description="Retry selected print jobs")
def retry_selected_jobs(modeladmin, request, queryset):
    service = PrintJobService()
    for job in queryset:
        service.retry_job(job.id)
    modeladmin.message_user(
        request, f"Requeued {queryset.count()} print job(s).", level=messages.SUCCESS
    )


@admin.register(PrintJob)
class PrintJobAdmin(admin.ModelAdmin):
    list_display = ("id", "get_order_number", "printer_type", "status", "attempts", "created_at", "printed_at")
    list_filter = ("status", "printer_type")
    search_fields = ("order__order_number",)
    readonly_fields = ("order", "receipt_data", "sent_at", "printed_at", "created_at", "updated_at")
    list_select_related = ("order",)
    actions = [retry_selected_jobs]

    def get_order_number(self, obj):
        return obj.order.order_number

    get_order_number.short_description = "Order Number"
    get_order_number.admin_order_field = "order__order_number"
