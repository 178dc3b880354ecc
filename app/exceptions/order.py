"""
Order-related exceptions.
"""

from .base import CheckoutException


class OrderPlacementException(CheckoutException):
    """Raised when an order cannot be placed from the customer's cart."""

    status_code = 400

    def __init__(self, user_id: int, reason: str):
        super().__init__(
            f"Cannot place order for user {user_id}: {reason}",
            details={'user_id': user_id, 'reason': reason}
        )
        self.user_id = user_id
        self.reason = reason
