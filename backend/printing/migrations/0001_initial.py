import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PrintJob",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("printer_type", models.CharField(choices=[("KITCHEN", "Kitchen"), ("BEVERAGE", "Beverage")], max_length=10)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("SENT", "Sent"), ("PRINTED", "Printed"), ("FAILED", "Failed")], db_index=True, default="PENDING", max_length=10)),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("last_error", models.TextField(blank=True, null=True)),
                ("receipt_data", models.JSONField(default=dict, help_text="Station-filtered receipt payload rendered by the agent.")),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("printed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="print_jobs", to="orders.order")),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="printjob_status_created_idx"),
                    models.Index(fields=["status", "printed_at"], name="printjob_status_printed_idx"),
                ],
            },
        ),
    ]
