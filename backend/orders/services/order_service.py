from datetime import datetime, time, timedelta
from decimal import Decimal
import logging

import stripe
from django.conf import settings
from django.db import transaction
from django.core.exceptions import ValidationError
from django.db.models import Count
from django.utils import timezone

from core_backend.exceptions import DomainError, ValidationFailed
from orders.exceptions import (
    AlreadyRefunded,
    InvalidStatusTransition,
    NoPaymentToRefund,
    OrderNotFound,
    RefundExceedsTotal,
)
from orders.models import Order, OrderItem, OrderItemModifier
from payments.exceptions import PaymentNotSucceeded
from payments.gateway import StripeGateway, translate_stripe_error
from payments.money import quantize, to_minor
from printing.services import PrintJobService
from .calculation_service import OrderCalculationService
from .queue_service import QueueEstimator

logger = logging.getLogger(__name__)


class OrderService:
    """
    Order pipeline: cart -> priced provisional order -> payment capture ->
    confirmed order -> print jobs, plus status transitions, refunds and reads.

    Collaborators are injected so tests can swap the gateway or printer.
    """

    # Valid status transitions for order state machine
    VALID_STATUS_TRANSITIONS = {
        Order.OrderStatus.PENDING: [
            Order.OrderStatus.CONFIRMED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.CONFIRMED: [
            Order.OrderStatus.PREPARING,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.PREPARING: [
            Order.OrderStatus.READY,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.READY: [
            Order.OrderStatus.COMPLETED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.COMPLETED: [],
        Order.OrderStatus.CANCELLED: [],
    }

    ACTIVE_STATUSES = (Order.OrderStatus.CONFIRMED, Order.OrderStatus.PREPARING)

    def __init__(self, calculator=None, estimator=None, gateway=None, print_service=None):
        self.calculator = calculator or OrderCalculationService()
        self.estimator = estimator or QueueEstimator()
        self.gateway = gateway or StripeGateway.from_settings()
        self.print_service = print_service or PrintJobService()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_order(self, user, items, payment_method_id, special_instructions=""):
        """
        Validate, price, charge and confirm an order, then queue its tickets.

        Payment is only attempted once the provisional order is durable (its
        id anchors the idempotency key), and print jobs only after the charge
        succeeded. Any failure after the provisional write is compensated:
        a captured (or possibly captured) charge is refunded and the order kept
        for reconciliation, otherwise the provisional order is deleted. The
        original error is re-raised either way.
        """
        if not items:
            raise ValidationFailed("Order must contain at least one item.")

        validated_items = self.calculator.validate_cart(items)
        totals = self.calculator.calculate_order_totals(validated_items)
        estimated_ready_time = self.estimator.estimate_ready_time(validated_items)

        order = self._create_provisional_order(
            user, validated_items, totals, estimated_ready_time, special_instructions
        )
        logger.info(
            f"Provisional order #{order.order_number} ({order.id}) created for user {user.pk}: "
            f"total={totals.total_amount}"
        )

        stage = "create_payment_intent"
        payment_intent_id = None
        # None means we cannot tell whether money moved.
        captured = False
        try:
            intent = self.gateway.create_payment_intent(
                to_minor(totals.total_amount), order=order, user=user
            )
            payment_intent_id = intent.id

            stage = "confirm_payment"
            captured = None
            try:
                confirmed = self.gateway.confirm_payment(payment_intent_id, payment_method_id)
            except (stripe.CardError, stripe.InvalidRequestError):
                # Stripe rejected the request outright; nothing was charged.
                captured = False
                raise

            if confirmed.status != "succeeded":
                captured = False
                raise PaymentNotSucceeded(
                    details={"payment_status": confirmed.status},
                )
            captured = True

            stage = "confirm_order"
            order = self._confirm_order(order.id, confirmed.id)
        except Exception as exc:
            order_id = str(order.id)
            self._compensate_failed_order(order, payment_intent_id, captured, stage, exc)
            if isinstance(exc, stripe.StripeError):
                error = translate_stripe_error(exc)
                error.context.update(order_id=order_id, stage=stage)
                raise error from exc
            if isinstance(exc, DomainError):
                exc.context.update(order_id=order_id, stage=stage)
            raise

        self._dispatch_print_jobs(order)
        return self.get_order_by_id(order.id)

    @transaction.atomic
    def _create_provisional_order(self, user, validated_items, totals, estimated_ready_time, special_instructions):
        order = Order.objects.create(
            user=user,
            status=Order.OrderStatus.PENDING,
            payment_status=Order.PaymentStatus.PENDING,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            estimated_ready_time=estimated_ready_time,
            special_instructions=special_instructions or "",
        )
        for item in validated_items:
            order_item = OrderItem.objects.create(
                order=order,
                menu_item_id=item.menu_item_id,
                menu_item_name=item.name,
                printer_destination=item.printer_destination,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
                special_instructions=item.special_instructions,
            )
            OrderItemModifier.objects.bulk_create(
                [
                    OrderItemModifier(
                        order_item=order_item,
                        modifier_id=modifier.modifier_id,
                        name=modifier.name,
                        price_adjustment=modifier.price_adjustment,
                    )
                    for modifier in item.modifiers
                ]
            )
        return order

    @transaction.atomic
    def _confirm_order(self, order_id, payment_intent_id):
        order = Order.objects.select_for_update().get(pk=order_id)
        order.status = Order.OrderStatus.CONFIRMED
        order.payment_status = Order.PaymentStatus.PAID
        order.stripe_payment_intent_id = payment_intent_id
        order.save(update_fields=["status", "payment_status", "stripe_payment_intent_id", "updated_at"])
        logger.info(f"Order #{order.order_number} confirmed and paid ({payment_intent_id})")
        return order

    def _compensate_failed_order(self, order, payment_intent_id, captured, stage, exc):
        logger.warning(
            f"Order {order.id} failed at stage '{stage}' "
            f"(payment_intent={payment_intent_id}, captured={captured}): {exc.__class__.__name__}: {exc}"
        )

        if payment_intent_id and captured is not False:
            refunded = False
            try:
                self.gateway.refund_payment(
                    payment_intent_id,
                    reason=f"Automatic refund: order {order.id} failed at {stage}",
                )
                refunded = True
                logger.info(f"Refunded {payment_intent_id} after failed order {order.id}")
            except Exception as refund_error:
                logger.error(
                    f"RECONCILIATION ALERT: refund of {payment_intent_id} for failed order {order.id} "
                    f"did not go through: {refund_error}",
                    exc_info=True,
                )

            # Keep the row: money moved, so there must be a record of it.
            fields = {
                "status": Order.OrderStatus.CANCELLED,
                "stripe_payment_intent_id": payment_intent_id,
                "updated_at": timezone.now(),
            }
            if refunded:
                fields["payment_status"] = Order.PaymentStatus.REFUNDED
            try:
                Order.objects.filter(pk=order.pk).update(**fields)
            except Exception as update_error:
                logger.error(
                    f"RECONCILIATION ALERT: could not mark order {order.id} cancelled: {update_error}",
                    exc_info=True,
                )
            return

        try:
            order.delete()
            logger.info(f"Deleted provisional order {order.id} after failure at '{stage}'")
        except Exception as cleanup_error:
            logger.error(f"Failed to delete provisional order {order.id}: {cleanup_error}", exc_info=True)

    def _dispatch_print_jobs(self, order):
        try:
            self.print_service.create_print_jobs(order)
        except Exception as e:
            # The order stands; an operator can re-dispatch from the admin API.
            logger.error(
                f"PRINT DISPATCH ALERT: no print jobs for order #{order.order_number} ({order.id}): {e}",
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Status transitions & refunds
    # ------------------------------------------------------------------

    def update_order_status(self, order_id, new_status, actor=None):
        """
        Move an order along the state machine.

        The row is locked for the read-validate-write so two staff members
        cannot both transition from the same stale status. Cancelling a paid
        order refunds the full total before the new status is written.
        """
        if new_status not in Order.OrderStatus.values:
            raise ValidationFailed(
                f"'{new_status}' is not a valid order status.",
                details={"status": new_status},
            )

        with transaction.atomic():
            order = self._get_locked_order(order_id)
            current_status = order.status
            if new_status not in self.VALID_STATUS_TRANSITIONS.get(current_status, []):
                raise InvalidStatusTransition(current_status, new_status, order_id=str(order.id))

            update_fields = ["status", "updated_at"]
            if new_status == Order.OrderStatus.CANCELLED and order.payment_status == Order.PaymentStatus.PAID:
                self._refund(
                    order,
                    amount_minor=to_minor(order.total_amount),
                    reason=f"Order {order.order_number} cancelled by {self._actor_label(actor)}",
                )
                order.payment_status = Order.PaymentStatus.REFUNDED
                update_fields.append("payment_status")

            if new_status == Order.OrderStatus.READY:
                order.actual_ready_time = timezone.now()
                update_fields.append("actual_ready_time")

            order.status = new_status
            order.save(update_fields=update_fields)

        logger.info(
            f"Order #{order.order_number} {current_status} -> {new_status} by {self._actor_label(actor)}"
        )

        if new_status == Order.OrderStatus.COMPLETED:
            try:
                self.print_service.print_receipt(order)
            except Exception as e:
                logger.error(f"Failed to queue receipt for order #{order.order_number}: {e}", exc_info=True)

        return self.get_order_by_id(order.id)

    def refund_order(self, order_id, actor, amount=None):
        """
        Refund an order, fully or partially, and cancel it.

        Checks run in order: missing order, nothing charged, already
        refunded, amount above the order total.
        """
        if amount is not None:
            amount = quantize(amount)
            if amount <= Decimal("0"):
                raise ValidationFailed("Refund amount must be positive.", details={"amount": str(amount)})

        with transaction.atomic():
            order = self._get_locked_order(order_id)
            if not order.stripe_payment_intent_id:
                raise NoPaymentToRefund(order_id=str(order.id))
            if order.payment_status == Order.PaymentStatus.REFUNDED:
                raise AlreadyRefunded(order_id=str(order.id))
            if amount is not None and amount > order.total_amount:
                raise RefundExceedsTotal(
                    details={"amount": str(amount), "total_amount": str(order.total_amount)},
                    order_id=str(order.id),
                )

            self._refund(
                order,
                amount_minor=to_minor(amount) if amount is not None else None,
                reason=f"Refund for order {order.order_number} by admin {self._actor_label(actor)}",
            )
            order.payment_status = Order.PaymentStatus.REFUNDED
            order.status = Order.OrderStatus.CANCELLED
            order.save(update_fields=["payment_status", "status", "updated_at"])

        logger.info(
            f"Order #{order.order_number} refunded ({amount if amount is not None else 'full'}) "
            f"by {self._actor_label(actor)}"
        )
        return self.get_order_by_id(order.id)

    def _refund(self, order, amount_minor, reason):
        try:
            return self.gateway.refund_payment(order.stripe_payment_intent_id, amount_minor, reason)
        except stripe.StripeError as e:
            error = translate_stripe_error(e)
            error.context.update(order_id=str(order.id), stage="refund")
            raise error from e

    @staticmethod
    def _actor_label(actor):
        return getattr(actor, "pk", None) or "system"

    @staticmethod
    def _get_locked_order(order_id):
        try:
            return Order.objects.select_for_update().get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError, ValidationError):
            raise OrderNotFound(f"Order not found: {order_id}", details={"order_id": str(order_id)})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def _order_queryset():
        return Order.objects.select_related("user").prefetch_related("items__modifiers")

    def get_order_by_id(self, order_id, user=None):
        """``user`` restricts the lookup to that user's own orders."""
        queryset = self._order_queryset()
        if user is not None:
            queryset = queryset.filter(user=user)
        try:
            return queryset.get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError, ValidationError):
            raise OrderNotFound(f"Order not found: {order_id}", details={"order_id": str(order_id)})

    @staticmethod
    def _paginate(queryset, page, limit):
        page = max(int(page or 1), 1)
        limit = max(int(limit or 1), 1)
        offset = (page - 1) * limit
        return {
            "orders": list(queryset[offset:offset + limit]),
            "total": queryset.count(),
            "page": page,
            "limit": limit,
        }

    def get_user_orders(self, user, page=1, limit=10, status=None):
        queryset = self._order_queryset().filter(user=user).order_by("-created_at")
        if status:
            queryset = queryset.filter(status=status)
        return self._paginate(queryset, page, limit)

    def get_active_orders(self, limit=None):
        """Kitchen board: CONFIRMED/PREPARING, oldest first. Never cached."""
        limit = limit or settings.ORDER_ACTIVE_LIMIT
        return list(
            self._order_queryset()
            .filter(status__in=self.ACTIVE_STATUSES)
            .order_by("created_at")[:limit]
        )

    def get_all_orders(self, status=None, date=None, page=1, limit=20):
        """Admin listing. ``date`` selects one whole day in local time."""
        queryset = self._order_queryset().order_by("-created_at")
        if status:
            queryset = queryset.filter(status=status)
        if date:
            start = timezone.make_aware(datetime.combine(date, time.min))
            queryset = queryset.filter(created_at__gte=start, created_at__lt=start + timedelta(days=1))
        return self._paginate(queryset, page, limit)

    def get_order_count_by_status(self):
        counts = {value: 0 for value in Order.OrderStatus.values}
        for row in Order.objects.values("status").annotate(count=Count("id")).order_by():
            counts[row["status"]] = row["count"]
        return counts
