"""
Cart-related exceptions.
"""

from .base import CheckoutException, OperationFailedException


class CartOperationException(CheckoutException):
    """Raised when a cart mutation violates a business rule."""

    status_code = 400


class CartConflictException(CartOperationException):
    """Raised when the cart row changed between read and write (version mismatch)."""

    status_code = 409

    def __init__(self, cart_id: int, expected_version: int):
        super().__init__(
            f"Cart {cart_id} was modified by another request, please retry",
            details={'cart_id': cart_id, 'expected_version': expected_version}
        )
        self.cart_id = cart_id
        self.expected_version = expected_version


class StockReconciliationRequiredException(OperationFailedException):
    """
    Raised when clearing a cart stopped after stock had already been reduced
    for some of its items.

    The cart is left un-cleared; the listed products need manual reconciliation.
    """

    def __init__(
        self,
        user_id: int,
        reduced_product_ids: list[int],
        failed_product_id: int | None,
        cause: Exception | None = None,
    ):
        if failed_product_id is None:
            message = (
                f"Stock was reduced for cart of user {user_id} but the cart could not be cleared. "
                f"Reduced products: {reduced_product_ids}"
            )
        else:
            message = (
                f"Clearing cart of user {user_id} stopped at product {failed_product_id}. "
                f"Stock already reduced for products: {reduced_product_ids}"
            )
        super().__init__(
            message,
            details={
                'user_id': user_id,
                'reduced_product_ids': reduced_product_ids,
                'failed_product_id': failed_product_id,
            },
            cause=cause,
        )
        self.user_id = user_id
        self.reduced_product_ids = reduced_product_ids
        self.failed_product_id = failed_product_id
