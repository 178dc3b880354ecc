# app/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel


class OrderRepo:
    """Zamowienia sa niemutowalne - repo nie ma zadnej metody update."""

    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def add_order_items(self, order: OrderModel, items: list[OrderItemModel]) -> OrderModel:
        for item in items:
            order.items.append(item)
        self.db.add_all(items)
        self.db.commit()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_for_user(self, user_id: int, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id, OrderModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_orders_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel).where(OrderModel.user_id == user_id).order_by(OrderModel.id)
            ).scalars().all()
        )

    def get_all_orders(self) -> list[OrderModel]:
        return list(self.db.execute(select(OrderModel).order_by(OrderModel.id)).scalars().all())

    def delete_order(self, order: OrderModel) -> None:
        # cascade delete-orphan usuwa pozycje zamowienia
        self.db.delete(order)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
