from core_backend.exceptions import NotFoundError, StateConflictError


class OrderNotFound(NotFoundError):
    default_code = "order_not_found"
    default_message = "Order not found."


class InvalidStatusTransition(StateConflictError):
    default_code = "invalid_status_transition"

    def __init__(self, current_status, attempted_status, **context):
        self.current_status = current_status
        self.attempted_status = attempted_status
        super().__init__(
            f"Cannot transition from {current_status} to {attempted_status}",
            details={"current_status": current_status, "attempted_status": attempted_status},
            **context,
        )


class NoPaymentToRefund(StateConflictError):
    default_code = "no_payment_to_refund"
    default_message = "No payment to refund."


class AlreadyRefunded(StateConflictError):
    default_code = "already_refunded"
    default_message = "Order already refunded."


class RefundExceedsTotal(StateConflictError):
    default_code = "refund_exceeds_total"
    default_message = "Refund amount exceeds order total."
