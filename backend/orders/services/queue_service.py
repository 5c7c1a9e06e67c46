import logging
import math
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)

IN_FLIGHT_STATUSES = (Order.OrderStatus.CONFIRMED, Order.OrderStatus.PREPARING)


class QueueEstimator:
    """
    Advisory ready-time estimate from prep times and the live kitchen queue.

    The queue count is read uncached at estimation time and may race with
    concurrent orders; the estimate never gates acceptance of an order.
    """

    def __init__(
        self,
        base_minutes=None,
        batch_size=None,
        batch_delay_minutes=None,
        rounding_minutes=None,
    ):
        self.base_minutes = base_minutes if base_minutes is not None else settings.ORDER_BASE_PREP_MINUTES
        self.batch_size = batch_size or settings.ORDER_QUEUE_BATCH_SIZE
        self.batch_delay_minutes = (
            batch_delay_minutes if batch_delay_minutes is not None else settings.ORDER_QUEUE_BATCH_DELAY_MINUTES
        )
        self.rounding_minutes = rounding_minutes or settings.ORDER_READY_TIME_ROUNDING_MINUTES

    def items_in_flight(self):
        """Order item rows belonging to orders the kitchen is working on."""
        return OrderItem.objects.filter(order__status__in=IN_FLIGHT_STATUSES).count()

    def estimate_minutes(self, items, in_flight=None):
        longest_prep = max((item.preparation_time for item in items), default=0)
        if in_flight is None:
            in_flight = self.items_in_flight()
        queue_delay = (in_flight // self.batch_size) * self.batch_delay_minutes

        raw_minutes = self.base_minutes + longest_prep + queue_delay
        return math.ceil(raw_minutes / self.rounding_minutes) * self.rounding_minutes

    def estimate_ready_time(self, items, now=None):
        now = now or timezone.now()
        minutes = self.estimate_minutes(items)
        logger.debug(f"Estimated {minutes} min for {len(items)} item(s)")
        return now + timedelta(minutes=minutes)
