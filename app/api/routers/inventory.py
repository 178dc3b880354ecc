# app/api/routers/inventory.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import ProductIn, ProductOut
from app.services.inventory_service import InventoryService

router = APIRouter(prefix="/invent", tags=["inventory"])


def get_service(db: Session):
    return InventoryService(db)


@router.get("/biller-customer/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_product_by_id(product_id)


@router.get("/products/by-name", response_model=ProductOut)
def get_product_by_name(name: str = Query(...), db: Session = Depends(get_db)):
    """Wewnetrzne - uzywane przez cart-service."""
    return get_service(db).get_product_by_name(name)


@router.put("/products/{product_id}/reduce-stock", status_code=204)
def reduce_stock(
    product_id: int,
    quantity: int = Query(...),
    db: Session = Depends(get_db),
):
    get_service(db).reduce_stock(product_id, quantity)


@router.get("/admin-biller-customer/products", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return get_service(db).list_products()


@router.post("/admin/products", response_model=ProductOut, status_code=201)
def add_product(payload: ProductIn, db: Session = Depends(get_db)):
    return get_service(db).add_product(payload.name, payload.price, payload.stock)


@router.put("/admin/products/{product_id}/stock", response_model=ProductOut)
def update_quantity(
    product_id: int,
    new_quantity: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).update_quantity(product_id, new_quantity)
