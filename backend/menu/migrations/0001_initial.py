import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["display_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Name of the menu item.", max_length=200)),
                ("description", models.TextField(blank=True)),
                ("price", models.DecimalField(decimal_places=2, help_text="Base selling price before modifiers.", max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ("is_available", models.BooleanField(default=True, help_text="Unavailable items are hidden from the menu and rejected at checkout.")),
                ("preparation_time", models.PositiveIntegerField(default=5, help_text="Preparation time in minutes.")),
                ("printer_destination", models.CharField(choices=[("KITCHEN", "Kitchen"), ("BEVERAGE", "Beverage"), ("BOTH", "Both")], default="KITCHEN", help_text="Station(s) that receive a ticket for this item.", max_length=10)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="menu_items", to="menu.category")),
            ],
            options={
                "ordering": ["display_order", "name"],
                "indexes": [models.Index(fields=["category", "is_available"], name="menuitem_cat_avail_idx")],
            },
        ),
        migrations.CreateModel(
            name="ModifierGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Customer-facing name, e.g., 'Choose your size'", max_length=100)),
                ("is_required", models.BooleanField(default=False)),
                ("min_selections", models.PositiveIntegerField(default=0, help_text="Minimum required selections (0 for optional)")),
                ("max_selections", models.PositiveIntegerField(blank=True, help_text="Maximum allowed selections (null for unlimited)", null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("menu_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="modifier_groups", to="menu.menuitem")),
            ],
            options={
                "ordering": ["display_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="Modifier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("price_adjustment", models.DecimalField(decimal_places=2, default=0, help_text="The amount to add or subtract from the base item price.", max_digits=10)),
                ("is_available", models.BooleanField(default=True)),
                ("is_default", models.BooleanField(default=False)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("modifier_group", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="modifiers", to="menu.modifiergroup")),
            ],
            options={
                "ordering": ["display_order", "name"],
            },
        ),
    ]
