#app/data/models/cart.py
from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric
from sqlalchemy.orm import relationship

from app.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    # jeden koszyk na uzytkownika
    user_id = Column(Integer, nullable=False, unique=True, index=True)

    total = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    version = Column(Integer, nullable=False, default=1)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
    )
