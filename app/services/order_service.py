# app/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.exceptions import (
    DownstreamUnavailableException,
    InvalidInputException,
    OperationFailedException,
    OrderPlacementException,
    PersistenceFailureException,
    ResourceNotFoundException,
)
from app.repos.order_repo import OrderRepo
from app.services.cart_client import CartClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    Zamowienie to zamrozony snapshot koszyka: pozycje, ceny i suma z chwili
    skladania. Koszyk nie jest tu modyfikowany, a stock nie jest sprawdzany -
    to dzieje sie dopiero przy platnosci.
    """

    def __init__(self, db: Session, cart_client: CartClient):
        self.repo = OrderRepo(db)
        self.cart_client = cart_client

    def place_order(self, user_id: int) -> OrderModel:
        """
        Use Case: Tworzenie zamówienia z koszyka.

        1. Pobiera pozycje koszyka z cart-service
        2. Pobiera id koszyka (proweniencja)
        3. Zamraza pozycje i liczy sume
        4. Zapisuje naglowek, potem pozycje
        """
        if user_id is None or user_id <= 0:
            raise InvalidInputException("User ID must be positive", details={'user_id': user_id})

        try:
            cart_items = self.cart_client.get_cart_items_by_user_id(user_id)
        except ResourceNotFoundException as e:
            raise OrderPlacementException(user_id, "cart not found or is empty") from e

        if not cart_items:
            raise OrderPlacementException(user_id, "cart is empty")

        try:
            cart_id = self.cart_client.get_cart_id_by_user_id(user_id)
        except ResourceNotFoundException as e:
            # pozycje sa, a koszyka nie ma - niespojnosc po stronie cart-service
            raise ResourceNotFoundException(
                f"Cannot place order: Associated Cart ID not found for user ID: {user_id}",
                details={'user_id': user_id},
            ) from e
        except DownstreamUnavailableException as e:
            raise OperationFailedException(
                "Failed to retrieve associated Cart ID from Cart Service.", cause=e
            ) from e

        total = Decimal("0.00")
        order_items: list[OrderItemModel] = []
        for cart_item in cart_items:
            if cart_item.quantity <= 0:
                logger.warning(
                    f"Skipping cart line '{cart_item.product_name}' with quantity {cart_item.quantity} "
                    f"for user {user_id}"
                )
                continue
            line_total = (cart_item.price * cart_item.quantity).quantize(Decimal("0.01"))
            order_items.append(
                OrderItemModel(
                    product_id=cart_item.product_id,
                    product_name=cart_item.product_name,
                    quantity=cart_item.quantity,
                    price=cart_item.price,
                    line_total=line_total,
                )
            )
            total += line_total

        if not order_items:
            raise OrderPlacementException(user_id, "cart has no line items with a positive quantity")

        order = OrderModel(
            user_id=user_id,
            cart_id=cart_id,
            total=total,
            created_at=datetime.now(timezone.utc),
        )

        try:
            created_order = self.repo.create_order(order)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException("Failed to save order details to database.", cause=e) from e

        try:
            self.repo.add_order_items(created_order, order_items)
        except SQLAlchemyError as e:
            self.repo.rollback()
            # naglowek jest juz zacommitowany - nie cofamy go, tylko raportujemy
            logger.error(
                f"Order {created_order.id} header saved but its line items were not: {e}"
            )
            raise PersistenceFailureException(
                f"Failed to save line items of order {created_order.id}; order header is orphaned.",
                details={'order_id': created_order.id, 'user_id': user_id},
                cause=e,
            ) from e

        logger.info(
            f"Order {created_order.id} created from cart {cart_id} for user {user_id}, "
            f"{len(order_items)} items, total {total}"
        )
        return created_order

    def get_order_by_order_id(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise ResourceNotFoundException(f"Order not found with ID: {order_id}", details={'order_id': order_id})
        return order

    def get_order_by_user_id_and_order_id(self, user_id: int, order_id: int) -> OrderModel:
        order = self.repo.get_order_for_user(user_id, order_id)
        if not order:
            raise ResourceNotFoundException(
                f"Order not found with UserId: {user_id} and orderId: {order_id}",
                details={'user_id': user_id, 'order_id': order_id},
            )
        return order

    def get_orders_by_user_id(self, user_id: int) -> list[OrderModel]:
        try:
            orders = self.repo.get_orders_by_user(user_id)
        except SQLAlchemyError as e:
            raise PersistenceFailureException(f"Failed to retrieve orders for user ID: {user_id}", cause=e) from e
        if not orders:
            raise ResourceNotFoundException(f"No orders found for user ID: {user_id}", details={'user_id': user_id})
        return orders

    def get_all_orders(self) -> list[OrderModel]:
        try:
            orders = self.repo.get_all_orders()
        except SQLAlchemyError as e:
            raise PersistenceFailureException("Failed to retrieve all orders.", cause=e) from e
        if not orders:
            raise ResourceNotFoundException("No orders found.")
        return orders

    def delete_order(self, user_id: int, order_id: int) -> None:
        """Use Case: anulowanie zamowienia - usuwa naglowek razem z pozycjami."""
        order = self.repo.get_order_for_user(user_id, order_id)
        if not order:
            raise ResourceNotFoundException(
                f"Order with id {order_id} not found for user with id {user_id}.",
                details={'user_id': user_id, 'order_id': order_id},
            )
        try:
            self.repo.delete_order(order)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(f"Failed to delete order with id {order_id}.", cause=e) from e

        logger.info(f"Order {order_id} of user {user_id} cancelled")
