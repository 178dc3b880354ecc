"""
Tests for the cart store (app/services/cart_service.py).

The inventory client is a MagicMock backed by a small catalog so tests can
change prices and stock between calls or make a call fail.
"""
from decimal import Decimal
from unittest.mock import MagicMock, call, patch

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.schemas import ProductOut
from app.exceptions import (
    CartConflictException,
    DownstreamUnavailableException,
    InsufficientStockException,
    InvalidInputException,
    OperationFailedException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
    StockReconciliationRequiredException,
)
from app.services.cart_service import CartService, money

APPLE = ProductOut(id=1, name="Apple", price=Decimal("10.00"), stock=10)
BANANA = ProductOut(id=2, name="Banana", price=Decimal("5.00"), stock=10)


def fake_inventory(catalog: dict) -> MagicMock:
    client = MagicMock()

    def by_name(name):
        for product in catalog.values():
            if product.name.lower() == name.strip().lower():
                return product
        raise ResourceNotFoundException(f"Product not found with name: {name}")

    def by_id(product_id):
        if product_id not in catalog:
            raise ResourceNotFoundException(f"Product not found with id: {product_id}")
        return catalog[product_id]

    client.get_product_by_name.side_effect = by_name
    client.get_product_by_id.side_effect = by_id
    return client


def assert_totals_consistent(cart):
    for item in cart.items:
        assert item.quantity > 0
        assert item.line_total == (item.price * item.quantity).quantize(Decimal("0.01"))
    assert cart.total == sum((i.line_total for i in cart.items), Decimal("0.00"))


@pytest.fixture
def catalog():
    return {APPLE.id: APPLE, BANANA.id: BANANA}


@pytest.fixture
def inventory(catalog):
    return fake_inventory(catalog)


@pytest.fixture
def svc(db, inventory):
    return CartService(db, inventory)


def count_cart_items(session_factory, user_id):
    session = session_factory()
    try:
        return session.execute(
            select(func.count(CartItemModel.id))
            .join(CartModel, CartModel.id == CartItemModel.cart_id)
            .where(CartModel.user_id == user_id)
        ).scalar_one()
    finally:
        session.close()


class TestAddItem:
    def test_creates_cart_lazily(self, svc):
        cart = svc.add_item(1, "Apple", 2)

        assert cart.user_id == 1
        assert len(cart.items) == 1
        assert cart.items[0].line_total == Decimal("20.00")
        assert cart.total == Decimal("20.00")
        assert cart.version == 2

    def test_same_product_merges_into_one_line(self, svc):
        svc.add_item(1, "Apple", 2)
        cart = svc.add_item(1, "apple", 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert cart.total == Decimal("50.00")

    def test_merge_checks_cumulative_quantity(self, svc, catalog):
        catalog[APPLE.id] = APPLE.model_copy(update={"stock": 5})
        svc.add_item(1, "Apple", 3)

        with pytest.raises(InsufficientStockException) as exc_info:
            svc.add_item(1, "Apple", 3)

        assert exc_info.value.requested == 6
        cart = svc.get_cart_by_user_id(1)
        assert cart.items[0].quantity == 3
        assert cart.total == Decimal("30.00")

    def test_merge_refreshes_unit_price(self, svc, catalog):
        svc.add_item(1, "Apple", 1)
        catalog[APPLE.id] = APPLE.model_copy(update={"price": Decimal("12.00")})

        cart = svc.add_item(1, "Apple", 1)

        item = cart.items[0]
        assert item.price == Decimal("12.00")
        assert item.line_total == Decimal("24.00")
        assert cart.total == Decimal("24.00")

    def test_insufficient_stock_creates_nothing(self, svc, catalog):
        catalog[APPLE.id] = APPLE.model_copy(update={"stock": 1})

        with pytest.raises(InsufficientStockException):
            svc.add_item(1, "Apple", 2)

        with pytest.raises(ResourceNotFoundException):
            svc.get_cart_by_user_id(1)

    def test_unknown_product(self, svc):
        with pytest.raises(ResourceNotFoundException) as exc_info:
            svc.add_item(1, "Durian", 1)

        assert "Durian" in exc_info.value.message

    def test_inventory_down_is_operation_failed(self, svc, inventory):
        inventory.get_product_by_name.side_effect = DownstreamUnavailableException(
            "inventory-service", "Downstream service [inventory-service] is unavailable."
        )

        with pytest.raises(OperationFailedException) as exc_info:
            svc.add_item(1, "Apple", 1)

        assert exc_info.value.status_code == 502

    @pytest.mark.parametrize("user_id, quantity", [(1, 0), (1, -2), (0, 1), (-3, 1)])
    def test_invalid_input(self, svc, user_id, quantity):
        with pytest.raises(InvalidInputException):
            svc.add_item(user_id, "Apple", quantity)


class TestQuantityChanges:
    def test_increase_matches_name_case_insensitively(self, svc):
        svc.add_item(1, "Apple", 1)

        cart = svc.increase_quantity(1, "APPLE")

        assert cart.items[0].quantity == 2
        assert cart.total == Decimal("20.00")

    def test_increase_checks_stock(self, svc, catalog):
        catalog[APPLE.id] = APPLE.model_copy(update={"stock": 2})
        svc.add_item(1, "Apple", 2)

        with pytest.raises(InsufficientStockException) as exc_info:
            svc.increase_quantity(1, "Apple")

        assert exc_info.value.requested == 3

    def test_decrease(self, svc):
        svc.add_item(1, "Apple", 3)

        cart = svc.decrease_quantity(1, "Apple")

        assert cart.items[0].quantity == 2
        assert cart.total == Decimal("20.00")

    def test_decrease_from_one_removes_line(self, svc):
        svc.add_item(1, "Apple", 1)

        cart = svc.decrease_quantity(1, "Apple")

        assert cart.items == []
        assert cart.total == Decimal("0.00")

    def test_decrease_from_one_keeps_other_lines(self, svc, session_factory):
        svc.add_item(1, "Apple", 1)
        svc.add_item(1, "Banana", 2)

        cart = svc.decrease_quantity(1, "Apple")

        assert [i.product_name for i in cart.items] == ["Banana"]
        assert cart.total == Decimal("10.00")
        assert count_cart_items(session_factory, 1) == 1

    def test_missing_line(self, svc):
        svc.add_item(1, "Apple", 1)

        with pytest.raises(ResourceNotFoundException):
            svc.increase_quantity(1, "Banana")

    def test_missing_cart(self, svc):
        with pytest.raises(ResourceNotFoundException):
            svc.decrease_quantity(7, "Apple")

    def test_remove_item(self, svc):
        svc.add_item(1, "Apple", 2)
        svc.add_item(1, "Banana", 1)

        cart = svc.remove_item(1, "apple")

        assert [i.product_name for i in cart.items] == ["Banana"]
        assert cart.total == Decimal("5.00")


class TestTotalsInvariant:
    def test_total_tracks_line_totals_through_mutations(self, svc, catalog):
        catalog[APPLE.id] = APPLE.model_copy(update={"price": Decimal("19.99")})
        catalog[BANANA.id] = BANANA.model_copy(update={"price": Decimal("0.35")})

        steps = [
            lambda: svc.add_item(1, "Apple", 2),
            lambda: svc.add_item(1, "Banana", 3),
            lambda: svc.increase_quantity(1, "Banana"),
            lambda: svc.add_item(1, "Apple", 1),
            lambda: svc.decrease_quantity(1, "Apple"),
            lambda: svc.decrease_quantity(1, "Banana"),
            lambda: svc.remove_item(1, "Apple"),
            lambda: svc.decrease_quantity(1, "Banana"),
            lambda: svc.decrease_quantity(1, "Banana"),
            lambda: svc.decrease_quantity(1, "Banana"),
        ]
        for step in steps:
            assert_totals_consistent(step())

        cart = svc.get_cart_by_user_id(1)
        assert cart.items == []
        assert cart.total == Decimal("0.00")


class TestClearContentsOnly:
    def test_clears_items_and_total(self, svc, inventory):
        svc.add_item(1, "Apple", 2)
        svc.add_item(1, "Banana", 2)

        cart = svc.clear_contents_only(1)

        assert cart.items == []
        assert cart.total == Decimal("0.00")
        inventory.reduce_stock.assert_not_called()

    def test_empty_cart_is_noop(self, svc):
        svc.add_item(1, "Apple", 1)
        svc.clear_contents_only(1)
        version = svc.get_cart_by_user_id(1).version

        cart = svc.clear_contents_only(1)

        assert cart.version == version


class TestClearAndReduceStock:
    def test_reduces_every_line_before_deleting(self, svc, inventory, session_factory):
        svc.add_item(1, "Apple", 2)
        svc.add_item(1, "Banana", 3)
        rows_seen = []
        inventory.reduce_stock.side_effect = lambda pid, qty: rows_seen.append(count_cart_items(session_factory, 1))

        cart = svc.clear_and_reduce_stock(1)

        assert inventory.reduce_stock.call_args_list == [call(1, 2), call(2, 3)]
        assert rows_seen == [2, 2]
        assert cart.items == []
        assert cart.total == Decimal("0.00")
        assert count_cart_items(session_factory, 1) == 0

    def test_failure_after_partial_reduction_keeps_cart(self, svc, inventory, session_factory):
        svc.add_item(1, "Apple", 2)
        svc.add_item(1, "Banana", 3)
        inventory.reduce_stock.side_effect = [None, InsufficientStockException("Banana", 3, 1)]

        with pytest.raises(StockReconciliationRequiredException) as exc_info:
            svc.clear_and_reduce_stock(1)

        exc = exc_info.value
        assert isinstance(exc, OperationFailedException)
        assert exc.reduced_product_ids == [1]
        assert exc.failed_product_id == 2
        assert count_cart_items(session_factory, 1) == 2

    def test_failure_on_first_line_is_plain_operation_failed(self, svc, inventory, session_factory):
        svc.add_item(1, "Apple", 2)
        inventory.reduce_stock.side_effect = ResourceNotFoundException("Product not found with id: 1")

        with pytest.raises(OperationFailedException) as exc_info:
            svc.clear_and_reduce_stock(1)

        assert not isinstance(exc_info.value, StockReconciliationRequiredException)
        assert "not found in inventory" in exc_info.value.message
        assert count_cart_items(session_factory, 1) == 1

    def test_failed_delete_after_reduction_needs_reconciliation(self, svc, inventory, session_factory):
        svc.add_item(1, "Apple", 2)

        with patch.object(svc.repo, "delete_cart_items", side_effect=SQLAlchemyError("disk I/O error")):
            with pytest.raises(StockReconciliationRequiredException) as exc_info:
                svc.clear_and_reduce_stock(1)

        assert exc_info.value.reduced_product_ids == [1]
        assert exc_info.value.failed_product_id is None
        assert count_cart_items(session_factory, 1) == 1

    def test_missing_cart(self, svc, inventory):
        with pytest.raises(ResourceNotFoundException):
            svc.clear_and_reduce_stock(5)

        inventory.reduce_stock.assert_not_called()


class TestOptimisticConcurrency:
    def test_stale_version_is_rejected(self, svc, session_factory):
        svc.add_item(1, "Apple", 2)

        # inny request zmienil koszyk w miedzyczasie
        other = session_factory()
        other.execute(update(CartModel).where(CartModel.user_id == 1).values(version=CartModel.version + 1))
        other.commit()
        other.close()

        with pytest.raises(CartConflictException) as exc_info:
            svc.increase_quantity(1, "Apple")

        assert exc_info.value.status_code == 409
        fresh = session_factory()
        try:
            item = fresh.execute(select(CartItemModel)).scalar_one()
            assert item.quantity == 2
        finally:
            fresh.close()


    def test_concurrent_first_add_is_conflict(self, svc, session_factory):
        # drugi request zalozyl koszyk zanim ten zdazyl go zapisac
        other = session_factory()
        other.add(CartModel(user_id=4, total=Decimal("0.00"), version=1))
        other.commit()
        other.close()

        with patch.object(svc.repo, "get_cart_by_user", return_value=None):
            with pytest.raises(ResourceAlreadyExistsException) as exc_info:
                svc.add_item(4, "Apple", 1)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {'user_id': 4}
        assert count_cart_items(session_factory, 4) == 0
        assert svc.add_item(4, "Apple", 1).total == Decimal("10.00")


class TestCartLookup:
    def test_cart_id_and_items(self, svc):
        cart = svc.add_item(3, "Banana", 1)

        assert svc.get_cart_id_by_user_id(3) == cart.id
        assert [i.product_id for i in svc.get_cart_items_by_user_id(3)] == [BANANA.id]

    def test_delete_cart(self, svc):
        cart = svc.add_item(3, "Banana", 1)

        svc.delete_cart(cart.id)

        with pytest.raises(ResourceNotFoundException):
            svc.get_cart_by_user_id(3)

    def test_delete_missing_cart(self, svc):
        with pytest.raises(ResourceNotFoundException):
            svc.delete_cart(99)


class TestMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (19.99, Decimal("19.99")),
            (2.675, Decimal("2.68")),
            ("5", Decimal("5.00")),
            (Decimal("1.005"), Decimal("1.00")),
        ],
    )
    def test_rounds_to_cents_as_written(self, value, expected):
        assert money(value) == expected
