"""
Custom exceptions for the checkout services.

Exception Hierarchy:
--------------------
CheckoutException (base)
├── ResourceNotFoundException            404
├── ResourceAlreadyExistsException       409
├── InvalidInputException                400
├── InsufficientStockException           400
├── CartOperationException               400
│   └── CartConflictException            409
├── OrderPlacementException              400
├── InvalidPaymentStateException         409
├── DownstreamUnavailableException       502 / 503
└── OperationFailedException             500 / 502
    ├── PersistenceFailureException
    └── StockReconciliationRequiredException

Services raise specific exceptions:
    raise ResourceNotFoundException(f"Order not found with ID: {order_id}")

The HTTP layer (app.api.errors) renders every CheckoutException using its
status_code.
"""

from .base import (
    CheckoutException,
    ResourceNotFoundException,
    ResourceAlreadyExistsException,
    InvalidInputException,
    DownstreamUnavailableException,
    OperationFailedException,
    PersistenceFailureException,
)
from .inventory import InsufficientStockException
from .cart import CartOperationException, CartConflictException, StockReconciliationRequiredException
from .order import OrderPlacementException
from .payment import InvalidPaymentStateException

__all__ = [
    # Base
    'CheckoutException',
    'ResourceNotFoundException',
    'ResourceAlreadyExistsException',
    'InvalidInputException',
    'DownstreamUnavailableException',
    'OperationFailedException',
    'PersistenceFailureException',

    # Inventory
    'InsufficientStockException',

    # Cart
    'CartOperationException',
    'CartConflictException',
    'StockReconciliationRequiredException',

    # Order
    'OrderPlacementException',

    # Payment
    'InvalidPaymentStateException',
]
