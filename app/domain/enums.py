# app/domain/enums.py
from enum import Enum


class PaymentMode(str, Enum):
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    INCOMPLETE = "Incomplete"


class Role(str, Enum):
    ADMIN = "ADMIN"
    BILLER = "BILLER"
    CUSTOMER = "CUSTOMER"
