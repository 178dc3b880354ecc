"""
Inventory-related exceptions.
"""

from .base import CheckoutException


class InsufficientStockException(CheckoutException):
    """Raised when the requested quantity exceeds the available stock."""

    status_code = 400

    def __init__(self, product: str | int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product '{product}'. Available: {available}, requested: {requested}",
            details={'product': product, 'requested': requested, 'available': available}
        )
        self.product = product
        self.requested = requested
        self.available = available
