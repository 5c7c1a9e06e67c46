"""
Orders API integration tests.

Full request/response cycle through routing, permissions, serializers and
the domain exception handler. The order service is wired to the fake
payment gateway.
"""
import uuid
from types import SimpleNamespace

import pytest
import stripe
from django.urls import reverse
from rest_framework import status

from orders.models import Order
from orders.views import OrderServiceMixin
from printing.models import PrintJob


@pytest.fixture(autouse=True)
def use_fake_gateway(monkeypatch, order_service):
    monkeypatch.setattr(OrderServiceMixin, "get_order_service", lambda self: order_service)


@pytest.fixture
def order_payload(sandwich, extra_cheese, latte, latte_small):
    return {
        "items": [
            {"menu_item_id": sandwich.id, "quantity": 2, "modifier_ids": [extra_cheese.id]},
            {"menu_item_id": latte.id, "quantity": 1, "modifier_ids": [latte_small.id], "special_instructions": "Oat milk"},
        ],
        "special_instructions": "Leave at the counter",
        "payment_method_id": "pm_card_visa",
    }


@pytest.mark.django_db
@pytest.mark.integration
class TestCreateOrderAPI:
    def test_create_order(self, customer_client, order_payload):
        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == "CONFIRMED"
        assert response.data["payment_status"] == "PAID"
        # 19.40 + 4.50 = 23.90; tax 1.517650 -> 1.52
        assert response.data["subtotal"] == "23.90"
        assert response.data["tax_amount"] == "1.52"
        assert response.data["total_amount"] == "25.42"
        assert response.data["customer_name"] == "Jane Doe"
        assert response.data["items"][1]["special_instructions"] == "Oat milk"
        assert response.data["items"][0]["modifiers"][0]["name"] == "Extra Cheese"
        assert PrintJob.objects.filter(order_id=response.data["id"]).count() == 2

    def test_requires_authentication(self, api_client, order_payload):
        response = api_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert Order.objects.count() == 0

    def test_empty_items(self, customer_client, order_payload):
        order_payload["items"] = []

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "items" in response.data

    @pytest.mark.parametrize("quantity", [0, 21])
    def test_quantity_bounds(self, customer_client, order_payload, quantity):
        order_payload["items"][0]["quantity"] = quantity

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_duplicate_modifier_ids(self, customer_client, order_payload, extra_cheese):
        order_payload["items"][0]["modifier_ids"] = [extra_cheese.id, extra_cheese.id]

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_missing_payment_method(self, customer_client, order_payload):
        del order_payload["payment_method_id"]

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_menu_item_is_404(self, customer_client, order_payload):
        order_payload["items"][0]["menu_item_id"] = 999999

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "menu_item_not_found"

    def test_modifier_rule_violation_is_400(self, customer_client, order_payload, latte_large, latte_small):
        order_payload["items"][1]["modifier_ids"] = [latte_small.id, latte_large.id]

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"]["code"] == "too_many_selections"

    def test_card_decline_is_402(self, customer_client, order_payload, fake_gateway):
        decline = stripe.CardError("Your card has expired.", None, "expired_card")
        fake_gateway.confirm_payment.side_effect = decline

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
        assert response.data["error"] == {
            "code": "payment_failed",
            "message": "Your card has expired. Please use a different card.",
            "reason": "expired_card",
        }
        assert Order.objects.count() == 0

    def test_unsuccessful_confirmation_is_402(self, customer_client, order_payload, fake_gateway):
        fake_gateway.confirm_payment.return_value = SimpleNamespace(id="pi_test_123", status="processing")

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
        assert response.data["error"]["code"] == "payment_not_succeeded"
        assert Order.objects.count() == 0

    def test_payment_service_outage_is_502(self, customer_client, order_payload, fake_gateway):
        fake_gateway.create_payment_intent.side_effect = stripe.APIConnectionError("Network is unreachable")

        response = customer_client.post(reverse("order-list"), order_payload, format="json")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY


@pytest.mark.django_db
@pytest.mark.integration
class TestCustomerOrdersAPI:
    def test_list_own_orders(self, customer_client, make_order, other_customer):
        mine = make_order()
        make_order(user=other_customer)

        response = customer_client.get(reverse("order-list"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["total"] == 1
        assert response.data["limit"] == 10
        assert response.data["orders"][0]["id"] == str(mine.id)

    def test_list_pagination_params(self, customer_client, make_order):
        for _ in range(3):
            make_order()

        response = customer_client.get(reverse("order-list"), {"page": 2, "limit": 2})

        assert response.data["page"] == 2
        assert len(response.data["orders"]) == 1

    def test_invalid_limit(self, customer_client, db):
        response = customer_client.get(reverse("order-list"), {"limit": 500})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve_own_order(self, customer_client, make_order):
        order = make_order()

        response = customer_client.get(reverse("order-detail", kwargs={"pk": order.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["order_number"] == order.order_number

    def test_other_customers_order_is_404(self, customer_client, make_order, other_customer):
        order = make_order(user=other_customer)

        response = customer_client.get(reverse("order-detail", kwargs={"pk": order.id}))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "order_not_found"

    def test_status_polling(self, customer_client, make_order):
        order = make_order(status=Order.OrderStatus.PREPARING)

        response = customer_client.get(reverse("order-order-status", kwargs={"pk": order.id}))

        assert response.status_code == status.HTTP_200_OK
        assert set(response.data) == {"status", "estimated_ready_time", "actual_ready_time"}
        assert response.data["status"] == "PREPARING"


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminOrdersAPI:
    def test_customer_is_forbidden(self, customer_client, db):
        response = customer_client.get(reverse("admin-order-list"))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_lists_all_orders(self, staff_client, make_order, other_customer):
        make_order()
        make_order(user=other_customer, status=Order.OrderStatus.READY)

        response = staff_client.get(reverse("admin-order-list"), {"status": "READY"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["total"] == 1
        assert response.data["limit"] == 20

    def test_staff_retrieves_any_order(self, staff_client, make_order, other_customer):
        order = make_order(user=other_customer)

        response = staff_client.get(reverse("admin-order-detail", kwargs={"pk": order.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["customer_name"] == "nameless"

    def test_active_board(self, staff_client, make_order):
        make_order(status=Order.OrderStatus.CONFIRMED)
        make_order(status=Order.OrderStatus.COMPLETED)

        response = staff_client.get(reverse("admin-order-active"))

        assert response.status_code == status.HTTP_200_OK
        assert [o["status"] for o in response.data] == ["CONFIRMED"]

    def test_stats(self, staff_client, make_order):
        make_order(status=Order.OrderStatus.PREPARING)

        response = staff_client.get(reverse("admin-order-stats"))

        assert response.data["PREPARING"] == 1
        assert response.data["CANCELLED"] == 0

    def test_update_status(self, staff_client, make_order):
        order = make_order(status=Order.OrderStatus.CONFIRMED)

        response = staff_client.patch(
            reverse("admin-order-update-status", kwargs={"pk": order.id}), {"status": "PREPARING"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "PREPARING"

    def test_invalid_transition_is_409(self, staff_client, make_order):
        order = make_order(status=Order.OrderStatus.COMPLETED)

        response = staff_client.patch(
            reverse("admin-order-update-status", kwargs={"pk": order.id}), {"status": "PREPARING"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"]["details"] == {
            "current_status": "COMPLETED",
            "attempted_status": "PREPARING",
        }

    def test_unknown_status_value_is_400(self, staff_client, make_order):
        order = make_order()

        response = staff_client.patch(
            reverse("admin-order-update-status", kwargs={"pk": order.id}), {"status": "LOST"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_staff_cannot_refund(self, staff_client, make_order, fake_gateway):
        order = make_order()

        response = staff_client.post(reverse("admin-order-refund", kwargs={"pk": order.id}), {}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        fake_gateway.refund_payment.assert_not_called()

    def test_admin_partial_refund(self, admin_client_api, make_order, fake_gateway):
        order = make_order()

        response = admin_client_api.post(
            reverse("admin-order-refund", kwargs={"pk": order.id}), {"amount": "5.00"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["payment_status"] == "REFUNDED"
        assert response.data["status"] == "CANCELLED"
        assert fake_gateway.refund_payment.call_args.args[1] == 500

    def test_refund_over_total_is_409(self, admin_client_api, make_order):
        order = make_order()

        response = admin_client_api.post(
            reverse("admin-order-refund", kwargs={"pk": order.id}), {"amount": "100.00"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"]["code"] == "refund_exceeds_total"

    def test_refund_unknown_order_is_404(self, admin_client_api, db):
        response = admin_client_api.post(
            reverse("admin-order-refund", kwargs={"pk": uuid.uuid4()}), {}, format="json"
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_print_kitchen_ticket(self, staff_client, make_order):
        order = make_order()

        response = staff_client.post(reverse("admin-order-print-kitchen-ticket", kwargs={"pk": order.id}))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["printer_type"] == "KITCHEN"
        assert response.data["receipt_data"]["ticket_type"] == "kitchen_ticket"
        assert len(response.data["receipt_data"]["items"]) == 2

    def test_print_receipt(self, staff_client, make_order):
        order = make_order()

        response = staff_client.post(reverse("admin-order-print-receipt", kwargs={"pk": order.id}))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["receipt_data"]["ticket_type"] == "receipt"
