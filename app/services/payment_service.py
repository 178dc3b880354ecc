# app/services/payment_service.py
import re
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.transaction import TransactionModel
from app.domain.enums import PaymentMode, PaymentStatus
from app.domain.payment_state import PaymentStateMachine
from app.exceptions import (
    InvalidInputException,
    OperationFailedException,
    PersistenceFailureException,
    ResourceNotFoundException,
)
from app.repos.transaction_repo import TransactionRepo
from app.services.cart_client import CartClient
from app.services.order_client import OrderClient
from app.utils.logging import get_logger

logger = get_logger(__name__)

UPI_ID_PATTERN = re.compile(r"^[\w.-]+@[\w.-]+$")


class PaymentService:
    """
    Platnosc za zamowienie:
    proceed (Pending) -> verify (Completed/Incomplete) -> completion (clear cart + reduce stock)
    -> zapis stanu koncowego.
    """

    def __init__(self, db: Session, order_client: OrderClient, cart_client: CartClient):
        self.repo = TransactionRepo(db)
        self.order_client = order_client
        self.cart_client = cart_client

    # =====================================================
    # CHECKOUT STEPS
    # =====================================================
    def proceed_transaction(self, order_id: int, payment_mode: PaymentMode) -> TransactionModel:
        try:
            order = self.order_client.get_order_by_order_id(order_id)
        except ResourceNotFoundException as e:
            raise ResourceNotFoundException(
                f"Order not found with ID: {order_id} in Billing Service.", details={'order_id': order_id}
            ) from e
        except Exception as e:
            raise OperationFailedException(
                "Failed to retrieve order details from Billing Service.",
                details={'order_id': order_id},
                cause=e,
            ) from e

        if order is None:
            raise ResourceNotFoundException(
                f"Order not found with ID: {order_id} (Billing service returned null)",
                details={'order_id': order_id},
            )

        transaction = TransactionModel(
            order_id=order_id,
            user_id=order.user_id,
            required_amount=order.total_bill_price,
            payment_mode=payment_mode,
            payment_status=PaymentStatus.PENDING,
            payment_time=datetime.now(timezone.utc),
        )

        try:
            saved = self.repo.save(transaction)
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceFailureException("Failed to save initial transaction record.", cause=e) from e

        logger.info(
            f"Transaction {saved.id} opened for order {order_id} (user {saved.user_id}), "
            f"mode {payment_mode.value}, required {saved.required_amount}"
        )
        return saved

    def verify_transaction(self, transaction: TransactionModel, received_amount: Decimal) -> TransactionModel:
        return PaymentStateMachine.verify(transaction, received_amount)

    def clear_cart_and_update_inventory(self, transaction: TransactionModel) -> None:
        if transaction.payment_status != PaymentStatus.COMPLETED:
            return

        try:
            self.cart_client.clear_cart_and_reduce_stock(transaction.user_id)
        except Exception as e:
            logger.error(
                f"Completion step failed for transaction {transaction.id} (order {transaction.order_id}): {e}"
            )
            raise OperationFailedException(
                "Failed to clear cart and update inventory.",
                details={
                    'transaction_id': transaction.id,
                    'order_id': transaction.order_id,
                    'user_id': transaction.user_id,
                    **getattr(e, 'details', {}),
                },
                cause=e,
            ) from e

    # =====================================================
    # PAY BY MODE
    # =====================================================
    def pay_by_card(
        self,
        order_id: int,
        received_amount: Decimal,
        card_number: str,
        card_holder_name: str,
    ) -> TransactionModel:
        if not card_number or not card_number.strip() or not card_holder_name or not card_holder_name.strip():
            raise InvalidInputException("Card number and holder name are required")
        received_amount = PaymentStateMachine.received(received_amount)

        transaction = self.proceed_transaction(order_id, PaymentMode.CARD)
        transaction.card_number = card_number.strip()
        transaction.card_holder_name = card_holder_name.strip()
        return self._settle(transaction, received_amount)

    def pay_by_upi(self, order_id: int, received_amount: Decimal, upi_id: str) -> TransactionModel:
        if not upi_id or not upi_id.strip():
            raise InvalidInputException("UPI ID is required for UPI payments")
        if not UPI_ID_PATTERN.match(upi_id.strip()):
            raise InvalidInputException("Invalid UPI ID format", details={'upi_id': upi_id})
        received_amount = PaymentStateMachine.received(received_amount)

        transaction = self.proceed_transaction(order_id, PaymentMode.UPI)
        transaction.upi_id = upi_id.strip()
        return self._settle(transaction, received_amount)

    def pay_by_cash(self, order_id: int, received_amount: Decimal) -> TransactionModel:
        # ujemna kwota odrzucona zanim powstanie rekord Pending
        received_amount = PaymentStateMachine.received(received_amount)
        transaction = self.proceed_transaction(order_id, PaymentMode.CASH)
        return self._settle(transaction, received_amount)

    def _settle(self, transaction: TransactionModel, received_amount: Decimal) -> TransactionModel:
        transaction_id, order_id, mode = transaction.id, transaction.order_id, transaction.payment_mode
        try:
            self.verify_transaction(transaction, received_amount)
            self.clear_cart_and_update_inventory(transaction)
        except Exception:
            # stan koncowy nie trafia do bazy, rekord zostaje Pending
            self.repo.rollback()
            raise

        try:
            saved = self.repo.save(transaction)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Final save of transaction {transaction_id} failed, payment outcome unconfirmed: {e}")
            raise PersistenceFailureException(
                f"Failed to save final {mode.value} payment transaction details; "
                f"payment outcome is unconfirmed.",
                details={'transaction_id': transaction_id, 'order_id': order_id},
                cause=e,
            ) from e

        logger.info(
            f"Transaction {saved.id} for order {saved.order_id} finished as {saved.payment_status.value}, "
            f"balance {saved.balance_amount}"
        )
        return saved

    # =====================================================
    # QUERY
    # =====================================================
    def get_payment_by_id(self, transaction_id: int) -> TransactionModel:
        transaction = self.repo.get_transaction(transaction_id)
        if not transaction:
            raise ResourceNotFoundException(
                f"Payment transaction not found with ID: {transaction_id}",
                details={'transaction_id': transaction_id},
            )
        return transaction

    def get_payments_by_mode(self, mode: PaymentMode) -> list[TransactionModel]:
        try:
            return self.repo.get_by_mode(mode)
        except SQLAlchemyError as e:
            raise PersistenceFailureException("Failed to retrieve payment transactions by mode.", cause=e) from e

    def get_all_payments(self) -> list[TransactionModel]:
        try:
            return self.repo.get_all()
        except SQLAlchemyError as e:
            raise PersistenceFailureException("Failed to retrieve all transactions.", cause=e) from e

    def get_all_payments_by_user_id(self, user_id: int) -> list[TransactionModel]:
        try:
            return self.repo.get_by_user(user_id)
        except SQLAlchemyError as e:
            raise PersistenceFailureException(
                f"Failed to retrieve transactions for user ID: {user_id}", cause=e
            ) from e

    def get_my_transaction_by_id(self, user_id: int, transaction_id: int) -> TransactionModel:
        transaction = self.repo.get_transaction_for_user(user_id, transaction_id)
        if not transaction:
            raise ResourceNotFoundException(
                f"Transaction not found with ID: {transaction_id} for user ID: {user_id}",
                details={'user_id': user_id, 'transaction_id': transaction_id},
            )
        return transaction

    def get_my_transaction_by_order_id(self, user_id: int, order_id: int) -> TransactionModel:
        if user_id is None or user_id <= 0:
            raise InvalidInputException("User id cannot be 0 or negative")
        if order_id is None or order_id <= 0:
            raise InvalidInputException("Order id cannot be 0 or negative")

        transaction = self.repo.get_latest_for_user_and_order(user_id, order_id)
        if not transaction:
            raise ResourceNotFoundException(
                f"Transaction not found for User ID: {user_id} and Order ID: {order_id}",
                details={'user_id': user_id, 'order_id': order_id},
            )
        return transaction
