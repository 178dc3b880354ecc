# app/repos/transaction_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.transaction import TransactionModel
from app.domain.enums import PaymentMode


class TransactionRepo:
    def __init__(self, db: Session):
        self.db = db

    def save(self, transaction: TransactionModel) -> TransactionModel:
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def get_transaction(self, transaction_id: int) -> TransactionModel | None:
        return self.db.get(TransactionModel, transaction_id)

    def get_transaction_for_user(self, user_id: int, transaction_id: int) -> TransactionModel | None:
        return self.db.execute(
            select(TransactionModel).where(
                TransactionModel.id == transaction_id,
                TransactionModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def get_latest_for_user_and_order(self, user_id: int, order_id: int) -> TransactionModel | None:
        # kilka prob platnosci dla jednego zamowienia -> bierzemy ostatnia
        return self.db.execute(
            select(TransactionModel)
            .where(TransactionModel.user_id == user_id, TransactionModel.order_id == order_id)
            .order_by(TransactionModel.id.desc())
            .limit(1)
        ).scalar_one_or_none()

    def get_by_mode(self, mode: PaymentMode) -> list[TransactionModel]:
        return list(
            self.db.execute(
                select(TransactionModel)
                .where(TransactionModel.payment_mode == mode)
                .order_by(TransactionModel.id)
            ).scalars().all()
        )

    def get_by_user(self, user_id: int) -> list[TransactionModel]:
        return list(
            self.db.execute(
                select(TransactionModel)
                .where(TransactionModel.user_id == user_id)
                .order_by(TransactionModel.id)
            ).scalars().all()
        )

    def get_all(self) -> list[TransactionModel]:
        return list(self.db.execute(select(TransactionModel).order_by(TransactionModel.id)).scalars().all())

    def rollback(self):
        self.db.rollback()
