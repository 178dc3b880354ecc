# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from typing import List
from decimal import Decimal
from datetime import datetime

from app.domain.enums import PaymentMode, PaymentStatus


# ---------------------------------------------------------------- inventory

class ProductIn(BaseModel):
    """Schema dla dodawania produktu (admin)."""

    name: str = Field(..., min_length=2, max_length=100, description="Unique product name")
    price: Decimal = Field(..., gt=0, decimal_places=2)
    stock: int = Field(..., ge=0)


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    stock: int

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- cart

class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_name: str = Field(..., min_length=1, description="Product name as listed in inventory")
    quantity: int = Field(..., gt=0, description="Quantity to add (must be > 0)")


class CartItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    cart_id: int = Field(validation_alias="id")
    user_id: int
    items: List[CartItemOut]
    total: Decimal

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CartIdOut(BaseModel):
    cart_id: int


# ---------------------------------------------------------------- orders

class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    order_id: int = Field(validation_alias="id")
    user_id: int
    cart_id: int
    total_bill_price: Decimal = Field(validation_alias="total")
    order_date: datetime = Field(validation_alias="created_at")
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# ---------------------------------------------------------------- payments

class CashPaymentIn(BaseModel):
    order_id: int = Field(..., gt=0)
    received_amount: Decimal = Field(..., ge=0)


class CardPaymentIn(CashPaymentIn):
    card_number: str = Field(..., min_length=13, max_length=19, pattern=r"^\d+$")
    card_holder_name: str = Field(..., min_length=2, max_length=100)


class UpiPaymentIn(CashPaymentIn):
    upi_id: str = Field(..., min_length=3, max_length=100)


class TransactionOut(BaseModel):
    transaction_id: int = Field(validation_alias="id")
    user_id: int
    order_id: int
    required_amount: Decimal
    received_amount: Decimal | None = None
    balance_amount: Decimal | None = None
    payment_mode: PaymentMode
    payment_status: PaymentStatus
    payment_time: datetime
    transaction_time: datetime | None = None
    card_number: str | None = None
    card_holder_name: str | None = None
    upi_id: str | None = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @field_serializer("card_number")
    def _mask_card_number(self, card_number: str | None) -> str | None:
        if not card_number:
            return card_number
        return "*" * (len(card_number) - 4) + card_number[-4:]


class ErrorOut(BaseModel):
    timestamp: datetime
    status: int
    error: str
    message: str
    service: str
    path: str
    details: dict = Field(default_factory=dict)
