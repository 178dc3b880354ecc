# app/repos/cart_repo.py
from typing import Any, Dict

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        # flush zeby dostac id, commit razem z reszta zmian
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_items(self, cart_id: int) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars().all()
        )

    def add_cart_item(self, cart: CartModel, item: CartItemModel) -> CartItemModel:
        if item not in cart.items:
            cart.items.append(item)
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart: CartModel, item: CartItemModel) -> None:
        cart.items.remove(item)
        self.db.flush()

    def delete_cart_items(self, cart: CartModel) -> None:
        cart.items.clear()
        self.db.flush()

    def update_cart_version(self, cart_id: int, old_version: int, new_data: Dict[str, Any]) -> int:
        """
        Optimistic locking: UPDATE carts SET ... WHERE id = :id AND version = :old
        rowcount == 0 oznacza ze ktos inny zmienil koszyk w miedzyczasie.
        """
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def delete_cart(self, cart_id: int) -> None:
        self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        self.db.execute(delete(CartModel).where(CartModel.id == cart_id))
        self.db.expire_all()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
