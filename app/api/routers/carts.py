#app/api/routers/carts.py
from typing import List

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import CartIdOut, CartItemOut, CartOut, ItemIn
from app.services.cart_service import CartService
from app.services.inventory_client import InventoryClient

router = APIRouter(prefix="/cart", tags=["carts"])


def get_service(db: Session):
    return CartService(
        db=db,
        inventory_client=InventoryClient(),
    )


# =====================================================
# CUSTOMER (user z naglowka X-UserId)
# =====================================================
@router.post("/customer/items", response_model=CartOut)
def add_to_my_cart(
    payload: ItemIn,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    return get_service(db).add_item(user_id, payload.product_name, payload.quantity)


@router.get("/customer", response_model=CartOut)
def get_my_cart(user_id: int = Header(..., alias="X-UserId"), db: Session = Depends(get_db)):
    return get_service(db).get_cart_by_user_id(user_id)


@router.put("/customer/items/{product_name}/increase", response_model=CartOut)
def increase_my_item(
    product_name: str,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    return get_service(db).increase_quantity(user_id, product_name)


@router.put("/customer/items/{product_name}/decrease", response_model=CartOut)
def decrease_my_item(
    product_name: str,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    return get_service(db).decrease_quantity(user_id, product_name)


@router.delete("/customer/items/{product_name}", response_model=CartOut)
def remove_my_item(
    product_name: str,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(user_id, product_name)


@router.delete("/customer/items", response_model=CartOut)
def clear_my_cart(user_id: int = Header(..., alias="X-UserId"), db: Session = Depends(get_db)):
    return get_service(db).clear_contents_only(user_id)


# =====================================================
# BILLER (obsluguje koszyk klienta przy kasie)
# =====================================================
@router.post("/biller/users/{user_id}/items", response_model=CartOut)
def add_to_cart(user_id: int, payload: ItemIn, db: Session = Depends(get_db)):
    return get_service(db).add_item(user_id, payload.product_name, payload.quantity)


@router.get("/biller/users/{user_id}", response_model=CartOut)
def get_cart_by_user(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_cart_by_user_id(user_id)


@router.put("/biller/users/{user_id}/items/{product_name}/increase", response_model=CartOut)
def increase_item(user_id: int, product_name: str, db: Session = Depends(get_db)):
    return get_service(db).increase_quantity(user_id, product_name)


@router.put("/biller/users/{user_id}/items/{product_name}/decrease", response_model=CartOut)
def decrease_item(user_id: int, product_name: str, db: Session = Depends(get_db)):
    return get_service(db).decrease_quantity(user_id, product_name)


@router.delete("/biller/users/{user_id}/items/{product_name}", response_model=CartOut)
def remove_item(user_id: int, product_name: str, db: Session = Depends(get_db)):
    return get_service(db).remove_item(user_id, product_name)


@router.delete("/biller/users/{user_id}/items", response_model=CartOut)
def clear_user_cart_contents(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).clear_contents_only(user_id)


# =====================================================
# INTERNAL (order-service, payment-service)
# =====================================================
@router.get("/users/{user_id}/items", response_model=List[CartItemOut])
def get_cart_items_by_user_id(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_cart_items_by_user_id(user_id)


@router.get("/users/{user_id}/cart-id", response_model=CartIdOut)
def get_cart_id_by_user_id(user_id: int, db: Session = Depends(get_db)):
    return CartIdOut(cart_id=get_service(db).get_cart_id_by_user_id(user_id))


@router.delete("/users/{user_id}/clear-and-reduce-stock", status_code=204)
def clear_cart_and_reduce_stock(user_id: int, db: Session = Depends(get_db)):
    get_service(db).clear_and_reduce_stock(user_id)


@router.delete("/carts/{cart_id}", status_code=204)
def delete_cart(cart_id: int, db: Session = Depends(get_db)):
    get_service(db).delete_cart(cart_id)
