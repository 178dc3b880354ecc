# app/api/routers/payments.py
from typing import List

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.enums import PaymentMode
from app.domain.schemas import CardPaymentIn, CashPaymentIn, TransactionOut, UpiPaymentIn
from app.services.cart_client import CartClient
from app.services.order_client import OrderClient
from app.services.payment_service import PaymentService

router = APIRouter(prefix="/payment", tags=["payments"])


def get_service(db: Session):
    return PaymentService(
        db=db,
        order_client=OrderClient(),
        cart_client=CartClient(),
    )


@router.post("/biller-customer/card", response_model=TransactionOut, status_code=201)
def pay_by_card(payload: CardPaymentIn, db: Session = Depends(get_db)):
    return get_service(db).pay_by_card(
        order_id=payload.order_id,
        received_amount=payload.received_amount,
        card_number=payload.card_number,
        card_holder_name=payload.card_holder_name,
    )


@router.post("/biller-customer/upi", response_model=TransactionOut, status_code=201)
def pay_by_upi(payload: UpiPaymentIn, db: Session = Depends(get_db)):
    return get_service(db).pay_by_upi(
        order_id=payload.order_id,
        received_amount=payload.received_amount,
        upi_id=payload.upi_id,
    )


@router.post("/biller-customer/cash", response_model=TransactionOut, status_code=201)
def pay_by_cash(payload: CashPaymentIn, db: Session = Depends(get_db)):
    return get_service(db).pay_by_cash(order_id=payload.order_id, received_amount=payload.received_amount)


@router.get("/admin/transactions/{transaction_id}", response_model=TransactionOut)
def get_payment(transaction_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_payment_by_id(transaction_id)


@router.get("/admin/transactions", response_model=List[TransactionOut])
def get_payments(mode: PaymentMode | None = Query(None), db: Session = Depends(get_db)):
    svc = get_service(db)
    if mode is None:
        return svc.get_all_payments()
    return svc.get_payments_by_mode(mode)


@router.get("/customer/transactions", response_model=List[TransactionOut])
def get_my_transactions(user_id: int = Header(..., alias="X-UserId"), db: Session = Depends(get_db)):
    return get_service(db).get_all_payments_by_user_id(user_id)


@router.get("/customer/transactions/{transaction_id}", response_model=TransactionOut)
def get_my_transaction(
    transaction_id: int,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    return get_service(db).get_my_transaction_by_id(user_id, transaction_id)


@router.get("/customer/orders/{order_id}/transaction", response_model=TransactionOut)
def get_my_transaction_by_order(
    order_id: int,
    user_id: int = Header(..., alias="X-UserId"),
    db: Session = Depends(get_db),
):
    return get_service(db).get_my_transaction_by_order_id(user_id, order_id)
