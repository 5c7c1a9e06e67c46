from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["display_order", "name"]
        verbose_name_plural = _("categories")

    def __str__(self):
        return self.name


class MenuItem(models.Model):
    class PrinterDestination(models.TextChoices):
        KITCHEN = "KITCHEN", _("Kitchen")
        BEVERAGE = "BEVERAGE", _("Beverage")
        BOTH = "BOTH", _("Both")

    category = models.ForeignKey(
        Category, on_delete=models.PROTECT, related_name="menu_items"
    )
    name = models.CharField(max_length=200, help_text=_("Name of the menu item."))
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        help_text=_("Base selling price before modifiers."),
    )
    is_available = models.BooleanField(
        default=True,
        help_text=_("Unavailable items are hidden from the menu and rejected at checkout."),
    )
    preparation_time = models.PositiveIntegerField(
        default=5, help_text=_("Preparation time in minutes.")
    )
    printer_destination = models.CharField(
        max_length=10,
        choices=PrinterDestination.choices,
        default=PrinterDestination.KITCHEN,
        help_text=_("Station(s) that receive a ticket for this item."),
    )
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["display_order", "name"]
        indexes = [
            models.Index(fields=["category", "is_available"], name="menuitem_cat_avail_idx"),
        ]

    def __str__(self):
        return self.name


class ModifierGroup(models.Model):
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.CASCADE, related_name="modifier_groups"
    )
    name = models.CharField(
        max_length=100, help_text=_("Customer-facing name, e.g., 'Choose your size'")
    )
    is_required = models.BooleanField(default=False)
    min_selections = models.PositiveIntegerField(
        default=0, help_text=_("Minimum required selections (0 for optional)")
    )
    max_selections = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Maximum allowed selections (null for unlimited)"),
    )
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]

    def __str__(self):
        return f"{self.menu_item.name} - {self.name}"


class Modifier(models.Model):
    modifier_group = models.ForeignKey(
        ModifierGroup, on_delete=models.CASCADE, related_name="modifiers"
    )
    name = models.CharField(max_length=100)
    price_adjustment = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text=_("The amount to add or subtract from the base item price."),
    )
    is_available = models.BooleanField(default=True)
    # Informational only; never auto-applied to a cart.
    is_default = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]

    def __str__(self):
        return f"{self.modifier_group.name} - {self.name}"
