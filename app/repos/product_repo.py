# app/repos/product_repo.py
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_product_by_name(self, name: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(func.lower(ProductModel.name) == name.strip().lower())
        ).scalar_one_or_none()

    def get_all_products(self) -> list[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars().all())

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def reduce_stock(self, product_id: int, quantity: int) -> int:
        """
        Warunkowy dekrement w jednym UPDATE - baza serializuje rownolegle wywolania,
        stock nigdy nie spada ponizej zera. Zwraca rowcount (0 = brak towaru).
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def set_stock(self, product: ProductModel, new_stock: int) -> ProductModel:
        product.stock = new_stock
        self.db.commit()
        self.db.refresh(product)
        return product

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
