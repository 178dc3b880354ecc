"""
Payment-related exceptions.
"""

from .base import CheckoutException


class InvalidPaymentStateException(CheckoutException):
    """Raised when a transaction is asked to leave a terminal state."""

    status_code = 409

    def __init__(self, transaction_id: int | None, current_state: str, requested_state: str):
        super().__init__(
            f"Transaction {transaction_id} cannot move from '{current_state}' to '{requested_state}'",
            details={
                'transaction_id': transaction_id,
                'current_state': current_state,
                'requested_state': requested_state,
            }
        )
        self.transaction_id = transaction_id
        self.current_state = current_state
        self.requested_state = requested_state
