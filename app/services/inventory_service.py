# app/services/inventory_service.py
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.exceptions import (
    InsufficientStockException,
    InvalidInputException,
    PersistenceFailureException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryService:
    """
    Inventory store: stany magazynowe produktow.
    reduce_stock to jedyna operacja z ktorej korzysta checkout - atomowa i fail-closed.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    #query
    def get_product_by_id(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ResourceNotFoundException(
                f"Product not found with id: {product_id}", details={'product_id': product_id}
            )
        return product

    def get_product_by_name(self, name: str) -> ProductModel:
        if not name or not name.strip():
            raise InvalidInputException("Product name cannot be blank")

        product = self.repo.get_product_by_name(name)
        if not product:
            raise ResourceNotFoundException(
                f"Product not found with name: {name}", details={'product_name': name}
            )
        return product

    def list_products(self) -> list[ProductModel]:
        products = self.repo.get_all_products()
        if not products:
            raise ResourceNotFoundException("No products found in the database.")
        return products

    #commands
    def add_product(self, name: str, price: Decimal, stock: int) -> ProductModel:
        if price <= 0:
            raise InvalidInputException("Price must be positive", details={'price': str(price)})
        if stock < 0:
            raise InvalidInputException("Stock cannot be negative", details={'stock': stock})

        if self.repo.get_product_by_name(name):
            raise ResourceAlreadyExistsException(
                f"Product with name '{name}' already exists.", details={'product_name': name}
            )

        try:
            created = self.repo.create_product(ProductModel(name=name.strip(), price=price, stock=stock))
        except IntegrityError as e:
            self.repo.rollback()
            raise ResourceAlreadyExistsException(
                f"Product with name '{name}' already exists.", details={'product_name': name}
            ) from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(f"Failed to add product: {name}", cause=e) from e

        logger.info(f"Product {created.id} '{created.name}' added with stock {created.stock}")
        return created

    def update_quantity(self, product_id: int, new_quantity: int) -> ProductModel:
        if product_id <= 0:
            raise InvalidInputException("Product ID must be positive")
        if new_quantity < 0:
            raise InvalidInputException("Stock quantity cannot be negative")

        product = self.get_product_by_id(product_id)
        try:
            updated = self.repo.set_stock(product, new_quantity)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(
                f"Failed to update quantity for product ID: {product_id}", cause=e
            ) from e

        logger.info(f"Stock of product {product_id} set to {new_quantity}")
        return updated

    def reduce_stock(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidInputException(
                "Quantity to reduce must be positive.", details={'quantity': quantity}
            )

        product = self.get_product_by_id(product_id)

        try:
            rowcount = self.repo.reduce_stock(product_id, quantity)
            if rowcount == 0:
                # warunek stock >= quantity nie spelniony (rowniez gdy ktos nas wyprzedzil)
                self.repo.rollback()
                current = self.repo.get_product(product_id)
                available = current.stock if current else 0
                logger.warning(
                    f"Reduce stock rejected for product {product_id}: requested {quantity}, available {available}"
                )
                raise InsufficientStockException(product.name, quantity, available)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException(
                f"Failed to update stock for product ID: {product_id}", cause=e
            ) from e

        logger.info(f"Stock of product {product_id} reduced by {quantity}")
