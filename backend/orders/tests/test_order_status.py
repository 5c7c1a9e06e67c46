"""
Order state machine, cancellation refunds and admin refunds.
"""
import uuid
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import ANY, patch

import pytest
import stripe

from core_backend.exceptions import PaymentError, ValidationFailed
from orders.exceptions import (
    AlreadyRefunded,
    InvalidStatusTransition,
    NoPaymentToRefund,
    OrderNotFound,
    RefundExceedsTotal,
)
from orders.models import Order
from orders.services import OrderService
from payments.exceptions import PaymentServiceUnavailable
from printing.models import PrintJob

S = Order.OrderStatus

ALLOWED = {
    (S.PENDING, S.CONFIRMED),
    (S.PENDING, S.CANCELLED),
    (S.CONFIRMED, S.PREPARING),
    (S.CONFIRMED, S.CANCELLED),
    (S.PREPARING, S.READY),
    (S.PREPARING, S.CANCELLED),
    (S.READY, S.COMPLETED),
    (S.READY, S.CANCELLED),
}

ALL_PAIRS = [(current, target) for current in S.values for target in S.values]


@pytest.mark.django_db
@pytest.mark.business_logic
class TestStatusTransitions:
    @pytest.mark.parametrize("current,target", ALL_PAIRS)
    def test_transition_table(self, order_service, make_order, staff_user, current, target):
        order = make_order(status=current, payment_status=Order.PaymentStatus.PENDING)

        if (current, target) in ALLOWED:
            updated = order_service.update_order_status(order.id, target, actor=staff_user)
            assert updated.status == target
        else:
            with pytest.raises(InvalidStatusTransition) as exc_info:
                order_service.update_order_status(order.id, target, actor=staff_user)
            assert exc_info.value.status_code == 409
            assert exc_info.value.details == {"current_status": current, "attempted_status": target}
            order.refresh_from_db()
            assert order.status == current

    def test_table_matches_service(self):
        declared = {
            (current, target)
            for current, targets in OrderService.VALID_STATUS_TRANSITIONS.items()
            for target in targets
        }
        assert declared == ALLOWED

    def test_unknown_status_value(self, order_service, make_order):
        order = make_order()
        with pytest.raises(ValidationFailed):
            order_service.update_order_status(order.id, "BURNT")

    def test_unknown_order(self, order_service, db):
        with pytest.raises(OrderNotFound):
            order_service.update_order_status(uuid.uuid4(), S.PREPARING)

    def test_malformed_order_id(self, order_service, db):
        with pytest.raises(OrderNotFound):
            order_service.update_order_status("not-a-uuid", S.PREPARING)

    def test_ready_stamps_actual_ready_time(self, order_service, make_order):
        order = make_order(status=S.PREPARING)
        assert order.actual_ready_time is None

        updated = order_service.update_order_status(order.id, S.READY)

        assert updated.actual_ready_time is not None

    def test_completion_queues_receipt(self, order_service, make_order):
        order = make_order(status=S.READY)

        order_service.update_order_status(order.id, S.COMPLETED)

        job = PrintJob.objects.get(order=order)
        assert job.receipt_data["ticket_type"] == "receipt"
        assert len(job.receipt_data["items"]) == 2

    def test_receipt_failure_does_not_block_completion(self, order_service, make_order):
        order = make_order(status=S.READY)

        with patch.object(order_service.print_service, "print_receipt", side_effect=RuntimeError("offline")):
            updated = order_service.update_order_status(order.id, S.COMPLETED)

        assert updated.status == S.COMPLETED


@pytest.mark.django_db
@pytest.mark.business_logic
class TestCancellationRefund:
    def test_cancelling_paid_order_refunds_full_total_first(self, order_service, fake_gateway, make_order, staff_user):
        """
        Exactly one refund for the whole total, issued while the order is
        still stored in its previous status.
        """
        order = make_order(status=S.CONFIRMED, payment_status=Order.PaymentStatus.PAID)

        def refund(payment_intent_id, amount_minor=None, reason=None):
            assert Order.objects.get(pk=order.pk).status == S.CONFIRMED
            return SimpleNamespace(id="re_cancel", status="succeeded")

        fake_gateway.refund_payment.side_effect = refund

        updated = order_service.update_order_status(order.id, S.CANCELLED, actor=staff_user)

        fake_gateway.refund_payment.assert_called_once_with("pi_existing_1", 1430, ANY)
        assert updated.status == S.CANCELLED
        assert updated.payment_status == Order.PaymentStatus.REFUNDED

    def test_cancelling_unpaid_order_does_not_refund(self, order_service, fake_gateway, make_order):
        order = make_order(status=S.PENDING, payment_status=Order.PaymentStatus.PENDING)

        order_service.update_order_status(order.id, S.CANCELLED)

        fake_gateway.refund_payment.assert_not_called()

    def test_refund_failure_keeps_order_active(self, order_service, fake_gateway, make_order):
        order = make_order(status=S.PREPARING, payment_status=Order.PaymentStatus.PAID)
        fake_gateway.refund_payment.side_effect = stripe.APIConnectionError("Network is unreachable")

        with pytest.raises(PaymentServiceUnavailable):
            order_service.update_order_status(order.id, S.CANCELLED)

        order.refresh_from_db()
        assert order.status == S.PREPARING
        assert order.payment_status == Order.PaymentStatus.PAID


@pytest.mark.django_db
@pytest.mark.business_logic
class TestRefundOrder:
    def test_full_refund(self, order_service, fake_gateway, make_order, admin_user):
        order = make_order()

        refunded = order_service.refund_order(order.id, actor=admin_user)

        fake_gateway.refund_payment.assert_called_once_with(
            "pi_existing_1", None, f"Refund for order {order.order_number} by admin {admin_user.pk}"
        )
        assert refunded.payment_status == Order.PaymentStatus.REFUNDED
        assert refunded.status == S.CANCELLED

    def test_partial_refund_in_minor_units(self, order_service, fake_gateway, make_order, admin_user):
        order = make_order()

        order_service.refund_order(order.id, actor=admin_user, amount=Decimal("5.00"))

        assert fake_gateway.refund_payment.call_args.args[1] == 500

    def test_refund_equal_to_total_is_allowed(self, order_service, make_order, admin_user):
        order = make_order()
        assert order_service.refund_order(order.id, actor=admin_user, amount=Decimal("14.30")).status == S.CANCELLED

    def test_unknown_order(self, order_service, admin_user):
        with pytest.raises(OrderNotFound):
            order_service.refund_order(uuid.uuid4(), actor=admin_user)

    def test_order_without_payment(self, order_service, fake_gateway, make_order, admin_user):
        order = make_order(payment_status=Order.PaymentStatus.PENDING, payment_intent_id=None)

        with pytest.raises(NoPaymentToRefund):
            order_service.refund_order(order.id, actor=admin_user)
        fake_gateway.refund_payment.assert_not_called()

    def test_already_refunded(self, order_service, fake_gateway, make_order, admin_user):
        order = make_order(payment_status=Order.PaymentStatus.REFUNDED)

        with pytest.raises(AlreadyRefunded):
            order_service.refund_order(order.id, actor=admin_user)
        fake_gateway.refund_payment.assert_not_called()

    def test_already_refunded_checked_before_amount(self, order_service, make_order, admin_user):
        order = make_order(payment_status=Order.PaymentStatus.REFUNDED)

        with pytest.raises(AlreadyRefunded):
            order_service.refund_order(order.id, actor=admin_user, amount=Decimal("999.00"))

    def test_amount_above_total(self, order_service, fake_gateway, make_order, admin_user):
        order = make_order()

        with pytest.raises(RefundExceedsTotal) as exc_info:
            order_service.refund_order(order.id, actor=admin_user, amount=Decimal("14.31"))

        assert exc_info.value.status_code == 409
        fake_gateway.refund_payment.assert_not_called()

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1.00")])
    def test_non_positive_amount(self, order_service, make_order, admin_user, amount):
        order = make_order()
        with pytest.raises(ValidationFailed):
            order_service.refund_order(order.id, actor=admin_user, amount=amount)

    def test_gateway_failure_leaves_order_paid(self, order_service, fake_gateway, make_order, admin_user):
        order = make_order()
        fake_gateway.refund_payment.side_effect = stripe.InvalidRequestError(
            "Charge ch_1 has already been refunded.", None, code="charge_already_refunded"
        )

        with pytest.raises(PaymentError) as exc_info:
            order_service.refund_order(order.id, actor=admin_user)

        assert exc_info.value.context["stage"] == "refund"
        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.PAID
