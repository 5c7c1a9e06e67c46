import logging
from dataclasses import dataclass

from django.db import transaction

from orders.models import Order
from .gateway import StripeGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookResult:
    event_type: str
    handled: bool


class WebhookService:
    """
    Dispatches verified Stripe events onto order payment state.

    Handlers are keyed by event type; unknown types are acknowledged and
    reported as unhandled so Stripe stops redelivering them.
    """

    def __init__(self, gateway=None):
        self.gateway = gateway or StripeGateway.from_settings()
        self.handlers = {
            "payment_intent.succeeded": self._handle_payment_succeeded,
            "payment_intent.payment_failed": self._handle_payment_failed,
            "charge.refunded": self._handle_charge_refunded,
            "charge.dispute.created": self._handle_dispute_created,
        }

    def handle_webhook(self, payload, signature):
        event = self.gateway.construct_event(payload, signature)
        event_type = event["type"]
        handler = self.handlers.get(event_type)

        if handler is None:
            logger.info(f"Unhandled Stripe webhook event type: {event_type}")
            return WebhookResult(event_type=event_type, handled=False)

        logger.info(f"Processing Stripe webhook {event.get('id')} ({event_type})")
        handler(event["data"]["object"])
        return WebhookResult(event_type=event_type, handled=True)

    @staticmethod
    def _order_id_from_metadata(payment_intent):
        metadata = payment_intent.get("metadata") or {}
        return metadata.get("order_id")

    @transaction.atomic
    def _handle_payment_succeeded(self, payment_intent):
        order_id = self._order_id_from_metadata(payment_intent)
        if not order_id:
            logger.warning(f"payment_intent.succeeded {payment_intent['id']} has no order_id metadata")
            return

        orders = Order.objects.filter(id=order_id)
        # Late or redelivered events must not undo a refund.
        updated = orders.exclude(payment_status=Order.PaymentStatus.REFUNDED).update(
            payment_status=Order.PaymentStatus.PAID,
            stripe_payment_intent_id=payment_intent["id"],
        )
        if updated:
            logger.info(f"Order {order_id} marked PAID from webhook ({payment_intent['id']})")
        elif orders.exists():
            logger.info(f"Skipping payment_intent.succeeded for refunded order {order_id}")
        else:
            logger.warning(f"payment_intent.succeeded for unknown order {order_id}")

    @transaction.atomic
    def _handle_payment_failed(self, payment_intent):
        order_id = self._order_id_from_metadata(payment_intent)
        last_error = payment_intent.get("last_payment_error") or {}
        logger.warning(
            f"Payment failed for PaymentIntent {payment_intent['id']} (order {order_id}): "
            f"{last_error.get('code')} {last_error.get('message')}"
        )
        if not order_id:
            return

        updated = Order.objects.filter(
            id=order_id, payment_status=Order.PaymentStatus.PENDING
        ).update(payment_status=Order.PaymentStatus.FAILED)
        if not updated:
            logger.info(f"Skipping payment_intent.payment_failed for order {order_id}: not pending")

    @transaction.atomic
    def _handle_charge_refunded(self, charge):
        payment_intent_id = charge.get("payment_intent")
        order = (
            Order.objects.select_for_update()
            .filter(stripe_payment_intent_id=payment_intent_id)
            .first()
            if payment_intent_id
            else None
        )
        if order is None:
            logger.warning(f"charge.refunded for PaymentIntent {payment_intent_id} matches no order")
            return

        order.payment_status = Order.PaymentStatus.REFUNDED
        order.save(update_fields=["payment_status", "updated_at"])
        logger.info(f"Order {order.id} marked REFUNDED from webhook")

    def _handle_dispute_created(self, dispute):
        # No automatic state change: disputes need a human.
        logger.error(
            f"DISPUTE ALERT: dispute {dispute.get('id')} on charge {dispute.get('charge')} "
            f"amount={dispute.get('amount')} reason={dispute.get('reason')}"
        )
