"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like users, catalog items, orders and a fake payment gateway.
"""
import pytest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

from menu.models import Category, MenuItem, ModifierGroup, Modifier
from orders.models import Order, OrderItem, OrderItemModifier
from orders.services import OrderService
from payments.gateway import StripeGateway
from printing.services import PrintJobService
from users.models import User


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def customer_user(db):
    """Customer with a full name (receipts show 'Jane Doe')."""
    return User.objects.create_user(
        email='jane@example.com',
        password='password123',
        first_name='Jane',
        last_name='Doe',
        role=User.Role.CUSTOMER,
    )


@pytest.fixture
def other_customer(db):
    """Customer without a name (receipts fall back to the email local part)."""
    return User.objects.create_user(
        email='nameless@example.com',
        password='password123',
        role=User.Role.CUSTOMER,
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        email='barista@thecafe.test',
        password='password123',
        role=User.Role.STAFF,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@thecafe.test',
        password='password123',
        role=User.Role.ADMIN,
        is_staff=True,
    )


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def category(db):
    return Category.objects.create(name='Breakfast', display_order=1)


@pytest.fixture
def sandwich(category):
    """KITCHEN item, 8.95, with an optional add-ons group."""
    item = MenuItem.objects.create(
        category=category,
        name='Breakfast Sandwich',
        price=Decimal('8.95'),
        preparation_time=10,
        printer_destination=MenuItem.PrinterDestination.KITCHEN,
    )
    addons = ModifierGroup.objects.create(menu_item=item, name='Add-ons')
    Modifier.objects.create(modifier_group=addons, name='Extra Cheese', price_adjustment=Decimal('0.75'))
    Modifier.objects.create(modifier_group=addons, name='Avocado', price_adjustment=Decimal('1.50'))
    return item


@pytest.fixture
def extra_cheese(sandwich):
    return Modifier.objects.get(modifier_group__menu_item=sandwich, name='Extra Cheese')


@pytest.fixture
def avocado(sandwich):
    return Modifier.objects.get(modifier_group__menu_item=sandwich, name='Avocado')


@pytest.fixture
def latte(db):
    """BEVERAGE item, 4.50, with a required single-choice size group."""
    coffee = Category.objects.create(name='Coffee', display_order=2)
    item = MenuItem.objects.create(
        category=coffee,
        name='Latte',
        price=Decimal('4.50'),
        preparation_time=3,
        printer_destination=MenuItem.PrinterDestination.BEVERAGE,
    )
    size = ModifierGroup.objects.create(
        menu_item=item, name='Size', is_required=True, min_selections=1, max_selections=1
    )
    Modifier.objects.create(modifier_group=size, name='Small', price_adjustment=Decimal('0.00'), is_default=True)
    Modifier.objects.create(modifier_group=size, name='Large', price_adjustment=Decimal('0.80'))
    return item


@pytest.fixture
def latte_small(latte):
    return Modifier.objects.get(modifier_group__menu_item=latte, name='Small')


@pytest.fixture
def latte_large(latte):
    return Modifier.objects.get(modifier_group__menu_item=latte, name='Large')


@pytest.fixture
def smoothie_bowl(category):
    """BOTH item: the kitchen builds it, the beverage bar blends it."""
    return MenuItem.objects.create(
        category=category,
        name='Smoothie Bowl',
        price=Decimal('11.25'),
        preparation_time=8,
        printer_destination=MenuItem.PrinterDestination.BOTH,
    )


# ============================================================================
# PAYMENT / SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def fake_gateway():
    """
    StripeGateway stand-in whose charges succeed by default.

    Tests override return values or side effects per scenario.
    """
    gateway = MagicMock(spec=StripeGateway)
    gateway.create_payment_intent.return_value = SimpleNamespace(
        id='pi_test_123', status='requires_confirmation'
    )
    gateway.confirm_payment.return_value = SimpleNamespace(id='pi_test_123', status='succeeded')
    gateway.refund_payment.return_value = SimpleNamespace(id='re_test_123', status='succeeded')
    return gateway


@pytest.fixture
def print_service():
    return PrintJobService(max_attempts=3, retention_days=7, pull_limit=100)


@pytest.fixture
def order_service(fake_gateway, print_service):
    return OrderService(gateway=fake_gateway, print_service=print_service)


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def make_order(customer_user, sandwich, latte):
    """
    Factory writing an order straight to the database (no pipeline).

    Usage:
        order = make_order(status=Order.OrderStatus.PREPARING)
    """

    def _make_order(
        user=None,
        status=Order.OrderStatus.CONFIRMED,
        payment_status=Order.PaymentStatus.PAID,
        payment_intent_id='pi_existing_1',
        items=None,
    ):
        order = Order.objects.create(
            user=user or customer_user,
            status=status,
            payment_status=payment_status,
            subtotal=Decimal('13.45'),
            tax_amount=Decimal('0.85'),
            total_amount=Decimal('14.30'),
            stripe_payment_intent_id=payment_intent_id,
        )
        for menu_item, quantity, unit_price in items or [
            (sandwich, 1, Decimal('8.95')),
            (latte, 1, Decimal('4.50')),
        ]:
            order_item = OrderItem.objects.create(
                order=order,
                menu_item=menu_item,
                menu_item_name=menu_item.name,
                printer_destination=menu_item.printer_destination,
                quantity=quantity,
                unit_price=unit_price,
                line_total=unit_price * quantity,
            )
            if menu_item == latte:
                OrderItemModifier.objects.create(
                    order_item=order_item, modifier_id=None, name='Small', price_adjustment=Decimal('0.00')
                )
        return order

    return _make_order
