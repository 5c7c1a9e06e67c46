"""
Orders services package.

- OrderService: order pipeline (create, status transitions, refunds, reads)
- OrderCalculationService: cart validation and money-exact totals
- QueueEstimator: advisory ready-time estimate from the live kitchen queue
"""

from .order_service import OrderService
from .calculation_service import (
    CartItem,
    ModifierSnapshot,
    OrderCalculationService,
    OrderTotals,
    ValidatedOrderItem,
)
from .queue_service import QueueEstimator

__all__ = [
    'OrderService',
    'OrderCalculationService',
    'CartItem',
    'ModifierSnapshot',
    'OrderTotals',
    'ValidatedOrderItem',
    'QueueEstimator',
]
