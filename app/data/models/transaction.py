from sqlalchemy import Column, Integer, String, DateTime, Numeric, Enum as SAEnum
from datetime import datetime, timezone

from app.data.database import Base
from app.domain.enums import PaymentMode, PaymentStatus


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class TransactionModel(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    # tylko referencje po id, transakcja nie jest wlascicielem zamowienia
    user_id = Column(Integer, nullable=False, index=True)
    order_id = Column(Integer, nullable=False, index=True)

    required_amount = Column(Numeric(10, 2), nullable=False)
    received_amount = Column(Numeric(10, 2), nullable=True)
    balance_amount = Column(Numeric(10, 2), nullable=True)

    payment_mode = Column(SAEnum(PaymentMode, values_callable=_enum_values, name="payment_mode"), nullable=False)
    payment_status = Column(
        SAEnum(PaymentStatus, values_callable=_enum_values, name="payment_status"),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    payment_time = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    transaction_time = Column(DateTime(timezone=True), nullable=True)

    card_number = Column(String(19), nullable=True)
    card_holder_name = Column(String(100), nullable=True)
    upi_id = Column(String(100), nullable=True)
