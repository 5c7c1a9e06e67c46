import logging

import stripe
from django.conf import settings

from core_backend.exceptions import PaymentError
from .exceptions import (
    PaymentServiceUnavailable,
    WebhookPayloadError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)


# Friendly messages per Stripe error/decline code. Anything not listed maps
# to the generic processing error.
PAYMENT_MESSAGES = {
    "card_declined": ("card_declined", "Your card was declined. Please try a different card."),
    "insufficient_funds": ("insufficient_funds", "Insufficient funds. Please try a different card."),
    "expired_card": ("expired_card", "Your card has expired. Please use a different card."),
    "incorrect_cvc": ("incorrect_cvc", "Incorrect security code. Please check and try again."),
    "invalid_cvc": ("incorrect_cvc", "Incorrect security code. Please check and try again."),
    "incomplete_cvc": ("incorrect_cvc", "Security code is incomplete."),
    "processing_error": ("processing_error", "An error occurred. Please try again."),
    "invalid_number": ("invalid_card", "Invalid card number. Please check and try again."),
    "incorrect_number": ("invalid_card", "Incorrect card number. Please check and try again."),
    "incomplete_number": ("invalid_card", "Card number is incomplete."),
    "invalid_expiry_month": ("invalid_card", "Invalid expiration month."),
    "invalid_expiry_year": ("invalid_card", "Invalid expiration year."),
    "incomplete_expiry": ("invalid_card", "Card expiration date is incomplete."),
}

GENERIC_PAYMENT_MESSAGE = PAYMENT_MESSAGES["processing_error"]


def translate_stripe_error(exc):
    """
    Map a Stripe exception onto the stable payment error vocabulary.

    Card problems become :class:`PaymentError` with a friendly message;
    connectivity and credential problems become
    :class:`PaymentServiceUnavailable`. The raw Stripe message is only logged.
    """
    if isinstance(exc, stripe.CardError):
        decline_code = getattr(exc.error, "decline_code", None) if exc.error else None
        reason, message = (
            PAYMENT_MESSAGES.get(decline_code)
            or PAYMENT_MESSAGES.get(exc.code)
            or PAYMENT_MESSAGES["card_declined"]
        )
        logger.warning(f"Stripe card error code={exc.code} decline_code={decline_code}: {exc.user_message}")
        return PaymentError(message, reason=reason, code="payment_failed")

    if isinstance(exc, (stripe.APIConnectionError, stripe.AuthenticationError, stripe.RateLimitError)):
        logger.error(f"Stripe unavailable ({exc.__class__.__name__}): {exc}")
        return PaymentServiceUnavailable()

    reason, message = PAYMENT_MESSAGES.get(getattr(exc, "code", None)) or GENERIC_PAYMENT_MESSAGE
    logger.error(f"Stripe error ({exc.__class__.__name__}): {exc}")
    return PaymentError(message, reason=reason, code="payment_failed")


class StripeGateway:
    """
    Thin adapter over the Stripe API.

    Credentials and the client module are injected; ``from_settings`` builds
    the production instance. Every call passes ``api_key`` explicitly so
    nothing depends on the global ``stripe.api_key``.
    """

    def __init__(self, api_key, webhook_secret, currency="usd", client=stripe):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.currency = currency.lower()
        self.client = client

    @classmethod
    def from_settings(cls):
        return cls(
            api_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            currency=settings.STRIPE_CURRENCY,
        )

    # --- customers ---

    def get_or_create_customer(self, user):
        """
        Return the Stripe customer id for ``user``, creating one if needed.

        A stored id whose remote record is gone (deleted or unknown) is
        replaced by a fresh customer.
        """
        if user.stripe_customer_id:
            try:
                customer = self.client.Customer.retrieve(user.stripe_customer_id, api_key=self.api_key)
                if not getattr(customer, "deleted", False):
                    return customer.id
                logger.warning(f"Stripe customer {user.stripe_customer_id} was deleted, recreating for user {user.pk}")
            except stripe.InvalidRequestError as e:
                logger.warning(f"Stripe customer {user.stripe_customer_id} not retrievable for user {user.pk}: {e}")

        customer = self.client.Customer.create(
            email=user.email,
            name=user.display_name,
            metadata={"user_id": str(user.pk)},
            api_key=self.api_key,
        )
        user.stripe_customer_id = customer.id
        user.save(update_fields=["stripe_customer_id"])
        logger.info(f"Created Stripe customer {customer.id} for user {user.pk}")
        return customer.id

    # --- payment intents ---

    def create_payment_intent(self, amount_minor, *, order, user):
        """
        Create a card PaymentIntent for ``order``.

        The idempotency key is derived from the order id so a naive retry of
        the same order never creates a second intent.
        """
        customer_id = self.get_or_create_customer(user)
        intent = self.client.PaymentIntent.create(
            amount=amount_minor,
            currency=self.currency,
            customer=customer_id,
            payment_method_types=["card"],
            metadata={
                "order_id": str(order.id),
                "order_number": str(order.order_number),
                "user_id": str(user.pk),
            },
            description=f"Order #{order.order_number}",
            receipt_email=user.email,
            idempotency_key=f"order-{order.id}-intent",
            api_key=self.api_key,
        )
        logger.info(f"Created PaymentIntent {intent.id} for order {order.id} ({amount_minor} minor units)")
        return intent

    def confirm_payment(self, payment_intent_id, payment_method_id):
        """Capture immediately. Callers treat only status 'succeeded' as paid."""
        intent = self.client.PaymentIntent.confirm(
            payment_intent_id,
            payment_method=payment_method_id,
            idempotency_key=f"{payment_intent_id}-confirm",
            api_key=self.api_key,
        )
        logger.info(f"Confirmed PaymentIntent {payment_intent_id}: status={intent.status}")
        return intent

    # --- refunds ---

    def refund_payment(self, payment_intent_id, amount_minor=None, reason=None):
        """Full refund when ``amount_minor`` is None, partial otherwise."""
        params = {
            "payment_intent": payment_intent_id,
            "metadata": {"reason": reason or ""},
            "api_key": self.api_key,
        }
        if amount_minor is not None:
            params["amount"] = amount_minor
        refund = self.client.Refund.create(**params)
        logger.info(f"Refund {refund.id} created for PaymentIntent {payment_intent_id} (amount={amount_minor or 'full'})")
        return refund

    # --- webhooks ---

    def construct_event(self, payload, signature):
        """
        Verify ``payload`` (raw bytes) against ``signature`` and return the
        parsed event. Nothing in the payload is trusted before this passes.
        """
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header.", code="MISSING_SIGNATURE")
        try:
            return self.client.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Stripe webhook signature verification failed: {e}")
            raise WebhookSignatureError()
        except ValueError as e:
            logger.warning(f"Stripe webhook payload could not be parsed: {e}")
            raise WebhookPayloadError()
