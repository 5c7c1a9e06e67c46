"""
Cart validation and money-exact order pricing.

``validate_cart`` resolves each cart line against the live catalog and
produces immutable :class:`ValidatedOrderItem` snapshots; those snapshots are
the only pricing input, so later catalog edits never reprice an order.
``calculate_order_totals`` is pure Decimal arithmetic with rounding applied at
every accumulation step.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
import logging

from django.conf import settings

from menu.exceptions import (
    InsufficientSelections,
    MenuItemUnavailable,
    ModifierMismatch,
    ModifierUnavailable,
    TooManySelections,
)
from menu.services import CatalogReader
from payments.money import quantize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartItem:
    """One client-submitted cart line."""

    menu_item_id: int
    quantity: int = 1
    modifier_ids: Tuple[int, ...] = ()
    special_instructions: str = ""


@dataclass(frozen=True)
class ModifierSnapshot:
    modifier_id: int
    name: str
    price_adjustment: Decimal


@dataclass(frozen=True)
class ValidatedOrderItem:
    menu_item_id: int
    name: str
    base_price: Decimal
    preparation_time: int
    printer_destination: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    modifiers: Tuple[ModifierSnapshot, ...] = field(default_factory=tuple)
    special_instructions: str = ""


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal


class OrderCalculationService:
    """Pricing engine: cart validation and order totals."""

    def __init__(self, catalog: Optional[CatalogReader] = None, tax_rate: Optional[Decimal] = None):
        self.catalog = catalog or CatalogReader()
        self.tax_rate = Decimal(str(tax_rate if tax_rate is not None else settings.ORDER_TAX_RATE))

    def validate_cart(self, items: Sequence[CartItem]) -> List[ValidatedOrderItem]:
        return [self.validate_item(item) for item in items]

    def validate_item(self, item: CartItem) -> ValidatedOrderItem:
        menu_item = self.catalog.get_menu_item_for_order(item.menu_item_id)
        if not menu_item.is_available:
            raise MenuItemUnavailable(
                f"Menu item not available: {menu_item.name}",
                details={"menu_item_id": menu_item.id},
            )

        groups = list(menu_item.modifier_groups.all())
        group_ids = {group.id for group in groups}

        selected = []
        for modifier_id in item.modifier_ids:
            modifier = self.catalog.get_modifier(modifier_id)
            if not modifier.is_available:
                raise ModifierUnavailable(
                    f"Modifier not available: {modifier.name}",
                    details={"modifier_id": modifier.id},
                )
            if modifier.modifier_group_id not in group_ids:
                raise ModifierMismatch(
                    f"Modifier {modifier.name} does not belong to {menu_item.name}",
                    details={"modifier_id": modifier.id, "menu_item_id": menu_item.id},
                )
            selected.append(modifier)

        # Every group is checked, including ones the cart never touched.
        for group in groups:
            count = sum(1 for modifier in selected if modifier.modifier_group_id == group.id)
            if group.is_required and group.min_selections > 0 and count < group.min_selections:
                raise InsufficientSelections(
                    f"{group.name} requires at least {group.min_selections} selection(s)",
                    details={"modifier_group_id": group.id, "min_selections": group.min_selections, "selected": count},
                )
            if group.max_selections is not None and count > group.max_selections:
                raise TooManySelections(
                    f"{group.name} allows at most {group.max_selections} selection(s)",
                    details={"modifier_group_id": group.id, "max_selections": group.max_selections, "selected": count},
                )

        modifiers = tuple(
            ModifierSnapshot(
                modifier_id=modifier.id,
                name=modifier.name,
                price_adjustment=quantize(modifier.price_adjustment),
            )
            for modifier in selected
        )
        unit_price, line_total = self.calculate_line(menu_item.price, modifiers, item.quantity)

        return ValidatedOrderItem(
            menu_item_id=menu_item.id,
            name=menu_item.name,
            base_price=quantize(menu_item.price),
            preparation_time=menu_item.preparation_time,
            printer_destination=menu_item.printer_destination,
            quantity=item.quantity,
            unit_price=unit_price,
            line_total=line_total,
            modifiers=modifiers,
            special_instructions=item.special_instructions or "",
        )

    @staticmethod
    def calculate_line(base_price, modifiers, quantity) -> Tuple[Decimal, Decimal]:
        """Return ``(unit_price, line_total)``, each rounded to cents."""
        unit_price = quantize(
            Decimal(str(base_price)) + sum((m.price_adjustment for m in modifiers), Decimal("0"))
        )
        return unit_price, quantize(unit_price * quantity)

    def calculate_order_totals(self, items: Sequence[ValidatedOrderItem]) -> OrderTotals:
        subtotal = quantize(sum((item.line_total for item in items), Decimal("0")))
        tax_amount = quantize(subtotal * self.tax_rate)
        total_amount = quantize(subtotal + tax_amount)
        return OrderTotals(subtotal=subtotal, tax_amount=tax_amount, total_amount=total_amount)
