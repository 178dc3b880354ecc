# app/services/cart_service.py
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.schemas import ProductOut
from app.exceptions import (
    CartConflictException,
    DownstreamUnavailableException,
    InsufficientStockException,
    InvalidInputException,
    OperationFailedException,
    PersistenceFailureException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
    StockReconciliationRequiredException,
)
from app.repos.cart_repo import CartRepo
from app.services.inventory_client import InventoryClient
from app.utils.logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0.00")


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


class CartService:
    """
    Cart store - jeden koszyk na uzytkownika.

    Kazda komenda liczy delte sumy koszyka i zapisuje pozycje razem z nowa suma
    w jednym commicie. Suma jest zapisywana przez compare-and-swap na kolumnie version,
    wiec dwa rownolegle requesty nie nadpisza sobie nawzajem total.
    """

    def __init__(self, db: Session, inventory_client: InventoryClient):
        self.repo = CartRepo(db)
        self.inventory_client = inventory_client

    # =====================================================
    # QUERY
    # =====================================================
    def get_cart_by_user_id(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise ResourceNotFoundException(
                f"No cart available for user ID: {user_id}", details={'user_id': user_id}
            )
        return cart

    def get_cart_items_by_user_id(self, user_id: int) -> list[CartItemModel]:
        cart = self.get_cart_by_user_id(user_id)
        return list(cart.items)

    def get_cart_id_by_user_id(self, user_id: int) -> int:
        return self.get_cart_by_user_id(user_id).id

    # =====================================================
    # COMMANDS
    # =====================================================
    def add_item(self, user_id: int, product_name: str, quantity: int) -> CartModel:
        self._require_user_id(user_id)
        if quantity <= 0:
            raise InvalidInputException("Quantity to add must be positive.", details={'quantity': quantity})
        if not product_name or not product_name.strip():
            raise InvalidInputException("Product name cannot be blank")

        product = self._fetch_product_by_name(product_name)
        if product.stock < quantity:
            raise InsufficientStockException(product_name, quantity, product.stock)

        price = money(product.price)
        cart = self.repo.get_cart_by_user(user_id)
        existing = None
        if cart:
            existing = next((i for i in cart.items if i.product_id == product.id), None)

        if existing:
            # stock sprawdzamy dla lacznej ilosci, nie tylko dla dokladanej
            new_quantity = existing.quantity + quantity
            current = self._fetch_product_by_id(product.id, product_name)
            if current.stock < new_quantity:
                raise InsufficientStockException(product_name, new_quantity, current.stock)

        try:
            if not cart:
                cart = self._create_cart(user_id)

            if existing:
                old_line_total = existing.line_total
                existing.quantity = new_quantity
                existing.price = price
                existing.line_total = money(price * new_quantity)
                delta = existing.line_total - old_line_total
                logger.info(
                    f"Product {product.id} already in cart {cart.id}, quantity "
                    f"{new_quantity - quantity} -> {new_quantity}"
                )
            else:
                item = CartItemModel(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    price=price,
                    line_total=money(price * quantity),
                )
                self.repo.add_cart_item(cart, item)
                delta = item.line_total
                logger.info(f"Added product {product.id} x{quantity} to cart {cart.id}")

            self._save_total(cart, cart.total + delta)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(
                f"Failed to save item or update cart for user: {user_id}", cause=e
            ) from e

        return cart

    def increase_quantity(self, user_id: int, product_name: str) -> CartModel:
        self._require_user_id(user_id)
        cart = self.get_cart_by_user_id(user_id)
        item = self._find_item(cart, product_name, user_id)

        current = self._fetch_product_by_id(item.product_id, product_name)
        if current.stock <= item.quantity:
            raise InsufficientStockException(product_name, item.quantity + 1, current.stock)

        try:
            item.quantity += 1
            item.line_total = money(item.price * item.quantity)
            self._save_total(cart, cart.total + item.price)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(
                f"Failed to update item quantity or cart total for product: {product_name}", cause=e
            ) from e

        logger.info(f"Increased '{item.product_name}' in cart {cart.id} to {item.quantity}")
        return cart

    def decrease_quantity(self, user_id: int, product_name: str) -> CartModel:
        self._require_user_id(user_id)
        cart = self.get_cart_by_user_id(user_id)
        item = self._find_item(cart, product_name, user_id)

        # ilosc 0 nigdy nie jest zapisywana - pozycja znika
        if item.quantity <= 1:
            return self._remove_item(cart, item)

        try:
            item.quantity -= 1
            item.line_total = money(item.price * item.quantity)
            self._save_total(cart, cart.total - item.price)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(
                f"Failed to update item quantity or cart total for product: {product_name}", cause=e
            ) from e

        logger.info(f"Decreased '{item.product_name}' in cart {cart.id} to {item.quantity}")
        return cart

    def remove_item(self, user_id: int, product_name: str) -> CartModel:
        self._require_user_id(user_id)
        cart = self.get_cart_by_user_id(user_id)
        item = self._find_item(cart, product_name, user_id)
        return self._remove_item(cart, item)

    def clear_contents_only(self, user_id: int) -> CartModel:
        self._require_user_id(user_id)
        cart = self.get_cart_by_user_id(user_id)

        if not cart.items and cart.total == ZERO:
            return cart

        try:
            self.repo.delete_cart_items(cart)
            self._save_total(cart, ZERO)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException("Failed to clear cart items from database.", cause=e) from e

        logger.info(f"Cleared contents of cart {cart.id} for user {user_id}")
        return cart

    def clear_and_reduce_stock(self, user_id: int) -> CartModel:
        """
        Zdejmuje stock dla kazdej pozycji (jedno wywolanie na pozycje), dopiero potem
        usuwa pozycje koszyka.

        Kolejnosc jest celowa: niewyczyszczony koszyk po czesciowej redukcji da sie
        uzgodnic, wyczyszczony koszyk bez redukcji stocku juz nie.
        """
        self._require_user_id(user_id)
        cart = self.get_cart_by_user_id(user_id)
        items = [(item.product_id, item.quantity) for item in cart.items]

        reduced: list[int] = []
        for product_id, quantity in items:
            try:
                self.inventory_client.reduce_stock(product_id, quantity)
            except Exception as e:
                logger.error(
                    f"Reduce stock failed for product {product_id} (cart {cart.id}, user {user_id}): {e}"
                )
                if reduced:
                    raise StockReconciliationRequiredException(user_id, reduced, product_id, cause=e) from e
                if isinstance(e, ResourceNotFoundException):
                    message = f"Error during cart clear: Product ID {product_id} not found in inventory."
                else:
                    message = f"Failed to update inventory for product ID {product_id} while clearing cart."
                raise OperationFailedException(
                    message, details={'user_id': user_id, 'product_id': product_id}, cause=e
                ) from e
            reduced.append(product_id)

        try:
            self.repo.delete_cart_items(cart)
            self._save_total(cart, ZERO)
        except (SQLAlchemyError, CartConflictException) as e:
            self.repo.rollback()
            logger.error(f"Stock reduced but cart {cart.id} could not be cleared: {e}")
            raise StockReconciliationRequiredException(user_id, reduced, None, cause=e) from e

        logger.info(f"Cart {cart.id} cleared and stock reduced for {len(reduced)} products")
        return cart

    def delete_cart(self, cart_id: int) -> None:
        if not self.repo.get_cart(cart_id):
            raise ResourceNotFoundException(
                f"Cannot delete. Cart not found with ID: {cart_id}", details={'cart_id': cart_id}
            )
        try:
            self.repo.delete_cart(cart_id)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(f"Failed to delete cart with ID: {cart_id}", cause=e) from e

        logger.info(f"Cart {cart_id} deleted")

    # =====================================================
    # HELPERS
    # =====================================================
    @staticmethod
    def _require_user_id(user_id: int) -> None:
        if user_id is None or user_id <= 0:
            raise InvalidInputException("Invalid User ID", details={'user_id': user_id})

    @staticmethod
    def _find_item(cart: CartModel, product_name: str, user_id: int) -> CartItemModel:
        wanted = (product_name or "").strip().lower()
        for item in cart.items:
            if item.product_name.lower() == wanted:
                return item
        raise ResourceNotFoundException(
            f"Item '{product_name}' not found in the cart for user: {user_id}",
            details={'user_id': user_id, 'product_name': product_name},
        )

    def _remove_item(self, cart: CartModel, item: CartItemModel) -> CartModel:
        try:
            new_total = cart.total - item.line_total
            self.repo.delete_cart_item(cart, item)
            if not cart.items:
                # pusty koszyk = dokladnie zero, nie reszta z odejmowania
                new_total = ZERO
            self._save_total(cart, new_total)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(
                f"Failed to remove item '{item.product_name}' from cart.", cause=e
            ) from e

        logger.info(f"Removed '{item.product_name}' from cart {cart.id}")
        return cart

    def _create_cart(self, user_id: int) -> CartModel:
        try:
            cart = self.repo.create_cart(CartModel(user_id=user_id, total=ZERO, version=1))
        except IntegrityError as e:
            # rownolegle pierwsze add_item, carts.user_id jest unikalne
            self.repo.rollback()
            logger.warning(f"Cart for user {user_id} was created by a concurrent request")
            raise ResourceAlreadyExistsException(
                f"Cart for user {user_id} was created by another request, please retry",
                details={'user_id': user_id},
            ) from e
        logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart

    def _save_total(self, cart: CartModel, new_total: Decimal) -> None:
        old_version = cart.version
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=old_version,
            new_data={
                "total": money(new_total),
                "version": old_version + 1,
            },
        )

        if rowcount == 0:
            self.repo.rollback()
            logger.warning(f"Version conflict on cart {cart.id} (expected version {old_version})")
            raise CartConflictException(cart.id, old_version)

        self.repo.commit()

    def _fetch_product_by_name(self, product_name: str) -> ProductOut:
        try:
            return self.inventory_client.get_product_by_name(product_name)
        except ResourceNotFoundException as e:
            raise ResourceNotFoundException(
                f"Product '{product_name}' not found in inventory.", details={'product_name': product_name}
            ) from e
        except DownstreamUnavailableException as e:
            raise OperationFailedException(
                "Failed to retrieve product details from inventory service.", cause=e
            ) from e

    def _fetch_product_by_id(self, product_id: int, product_name: str) -> ProductOut:
        try:
            return self.inventory_client.get_product_by_id(product_id)
        except ResourceNotFoundException as e:
            raise ResourceNotFoundException(
                f"Product '{product_name}' not found in inventory.", details={'product_id': product_id}
            ) from e
        except DownstreamUnavailableException as e:
            raise OperationFailedException(
                "Failed to retrieve product details from inventory service.", cause=e
            ) from e
