# app/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import OrderOut
from app.services.cart_client import CartClient
from app.services.order_service import OrderService

router = APIRouter(prefix="/bill", tags=["orders"])


def get_service(db: Session):
    return OrderService(db, cart_client=CartClient())


@router.post("/customer/orders", response_model=OrderOut, status_code=201)
def place_my_order(user_id: int = Header(..., alias="X-UserId"), db: Session = Depends(get_db)):
    """
    Tworzy zamówienie ze snapshotu koszyka zalogowanego klienta.
    Koszyk zostaje nietkniety - czysci go dopiero udana platnosc.
    """
    return get_service(db).place_order(user_id)


@router.post("/biller/orders/{user_id}", response_model=OrderOut, status_code=201)
def place_order(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).place_order(user_id)


@router.get("/customer/orders", response_model=List[OrderOut])
def get_my_orders(user_id: int = Header(..., alias="X-UserId"), db: Session = Depends(get_db)):
    return get_service(db).get_orders_by_user_id(user_id)


@router.get("/customer/orders/{order_id}", response_model=OrderOut)
def get_my_order(
    order_id: int,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    return get_service(db).get_order_by_user_id_and_order_id(user_id, order_id)


@router.delete("/customer/orders/{order_id}", status_code=204)
def cancel_my_order(
    order_id: int,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    get_service(db).delete_order(user_id, order_id)


@router.delete("/biller/orders/{user_id}/{order_id}", status_code=204)
def cancel_order(user_id: int, order_id: int, db: Session = Depends(get_db)):
    get_service(db).delete_order(user_id, order_id)


@router.get("/admin-biller/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    """Pobiera zamówienie po id - z tego korzysta payment-service."""
    return get_service(db).get_order_by_order_id(order_id)


@router.get("/admin/orders", response_model=List[OrderOut])
def get_all_orders(db: Session = Depends(get_db)):
    return get_service(db).get_all_orders()


@router.get("/admin/users/{user_id}/orders", response_model=List[OrderOut])
def get_orders_by_user(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_orders_by_user_id(user_id)
