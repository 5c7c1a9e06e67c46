from rest_framework import serializers

from .models import PrintJob


class AgentPrintJobSerializer(serializers.ModelSerializer):
    """Wire format consumed by the print agent."""

    printerType = serializers.CharField(source="printer_type")
    receiptData = serializers.JSONField(source="receipt_data")
    orderId = serializers.UUIDField(source="order_id")
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = PrintJob
        fields = ["id", "printerType", "receiptData", "orderId", "createdAt"]
        read_only_fields = fields


class PrintJobStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[PrintJob.Status.PRINTED, PrintJob.Status.FAILED]
    )
    error = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)

    def validate(self, attrs):
        if attrs["status"] == PrintJob.Status.FAILED and not (attrs.get("error") or "").strip():
            raise serializers.ValidationError({"error": "An error message is required when status is FAILED."})
        return attrs


class PrintJobSerializer(serializers.ModelSerializer):
    order_number = serializers.IntegerField(source="order.order_number", read_only=True)

    class Meta:
        model = PrintJob
        fields = [
            "id",
            "order",
            "order_number",
            "printer_type",
            "status",
            "attempts",
            "last_error",
            "receipt_data",
            "sent_at",
            "printed_at",
            "created_at",
        ]
        read_only_fields = fields
