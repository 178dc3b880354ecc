"""
Payment state machine for transaction status transitions.

Valid status transitions:
- Pending -> Completed   (received amount covers the required amount)
- Pending -> Incomplete  (received amount falls short)

Completed and Incomplete are terminal. A new payment attempt is a new
transaction, never a transition of an old one.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Dict, Set

from app.data.models.transaction import TransactionModel
from app.domain.enums import PaymentStatus
from app.exceptions import InvalidInputException, InvalidPaymentStateException
from app.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentStateMachine:
    VALID_TRANSITIONS: Dict[PaymentStatus, Set[PaymentStatus]] = {
        PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.INCOMPLETE},
        PaymentStatus.COMPLETED: set(),
        PaymentStatus.INCOMPLETE: set(),
    }

    @classmethod
    def is_valid_transition(cls, from_status: PaymentStatus, to_status: PaymentStatus) -> bool:
        return to_status in cls.VALID_TRANSITIONS.get(PaymentStatus(from_status), set())

    @classmethod
    def is_terminal(cls, status: PaymentStatus) -> bool:
        return not cls.VALID_TRANSITIONS.get(PaymentStatus(status))

    @classmethod
    def transition(cls, transaction: TransactionModel, to_status: PaymentStatus) -> None:
        current = PaymentStatus(transaction.payment_status)
        if not cls.is_valid_transition(current, to_status):
            raise InvalidPaymentStateException(transaction.id, current.value, to_status.value)

        transaction.payment_status = to_status
        logger.info(f"Transaction {transaction.id} (order {transaction.order_id}): {current.value} -> {to_status.value}")

    @classmethod
    def received(cls, received_amount) -> Decimal:
        """Parses a tendered amount; floats go through str so 19.99 stays 19.99."""
        try:
            amount = Decimal(str(received_amount))
            if not amount.is_finite():
                raise InvalidOperation(received_amount)
        except (InvalidOperation, ValueError) as e:
            raise InvalidInputException(
                "Received amount is not a number.", details={'received_amount': str(received_amount)}
            ) from e
        if amount < 0:
            raise InvalidInputException(
                "Received amount cannot be negative.", details={'received_amount': str(amount)}
            )
        return amount

    @classmethod
    def verify(cls, transaction: TransactionModel, received_amount: Decimal) -> TransactionModel:
        """
        Records the tendered amount and moves the transaction to its terminal state.

        The comparison uses required_amount captured when the transaction was
        created; orders are immutable, so it cannot go stale.

        Args:
            transaction: Pending transaction
            received_amount: Amount tendered by the customer

        Returns:
            The same transaction, now Completed or Incomplete

        Raises:
            InvalidInputException: received_amount is negative (no transition happens)
            InvalidPaymentStateException: transaction is not Pending
        """
        received_amount = cls.received(received_amount)

        required = Decimal(str(transaction.required_amount))
        if received_amount >= required:
            target = PaymentStatus.COMPLETED
            balance = Decimal("0.00")
        else:
            target = PaymentStatus.INCOMPLETE
            balance = required - received_amount

        cls.transition(transaction, target)
        transaction.received_amount = received_amount
        transaction.balance_amount = balance
        transaction.transaction_time = datetime.now(timezone.utc)
        return transaction
