"""
Pytest fixtures shared by the checkout tests.

Each test gets its own SQLite database file. Cross-store HTTP clients are
replaced by in-process adapters that call the real services, each on its own
session, so the stores stay as isolated as they are over HTTP.
"""
import os
from decimal import Decimal

# Set required environment variables before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENFORCE_ROLE_GATE", "false")
os.environ.setdefault("ENABLED_SERVICES", "inventory,cart,orders,payments")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.data.database import Base
from app.data import models  # noqa: F401
from app.domain.schemas import CartItemOut, OrderOut, ProductOut
from app.services.cart_service import CartService
from app.services.inventory_service import InventoryService
from app.services.order_service import OrderService


class InProcessInventoryClient:
    """Same calls as InventoryClient, served by InventoryService."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self.reduce_calls = []

    def _call(self, fn):
        db = self.session_factory()
        try:
            return fn(InventoryService(db))
        finally:
            db.close()

    def get_product_by_id(self, product_id):
        return self._call(lambda svc: ProductOut.model_validate(svc.get_product_by_id(product_id)))

    def get_product_by_name(self, name):
        return self._call(lambda svc: ProductOut.model_validate(svc.get_product_by_name(name)))

    def reduce_stock(self, product_id, quantity):
        self.reduce_calls.append((product_id, quantity))
        self._call(lambda svc: svc.reduce_stock(product_id, quantity))


class InProcessCartClient:
    """Same calls as CartClient, served by CartService."""

    def __init__(self, session_factory, inventory_client):
        self.session_factory = session_factory
        self.inventory_client = inventory_client

    def _call(self, fn):
        db = self.session_factory()
        try:
            return fn(CartService(db, self.inventory_client))
        finally:
            db.close()

    def get_cart_items_by_user_id(self, user_id):
        return self._call(
            lambda svc: [CartItemOut.model_validate(i) for i in svc.get_cart_items_by_user_id(user_id)]
        )

    def get_cart_id_by_user_id(self, user_id):
        return self._call(lambda svc: svc.get_cart_id_by_user_id(user_id))

    def clear_cart_and_reduce_stock(self, user_id):
        self._call(lambda svc: svc.clear_and_reduce_stock(user_id))


class InProcessOrderClient:
    """Same calls as OrderClient, served by OrderService."""

    def __init__(self, session_factory, cart_client):
        self.session_factory = session_factory
        self.cart_client = cart_client

    def get_order_by_order_id(self, order_id):
        db = self.session_factory()
        try:
            return OrderOut.model_validate(OrderService(db, self.cart_client).get_order_by_order_id(order_id))
        finally:
            db.close()


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'checkout.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_product(session_factory):
    """Adds a product to the inventory store and returns it."""

    def _make(name, price, stock):
        session = session_factory()
        try:
            return InventoryService(session).add_product(name, Decimal(str(price)), stock)
        finally:
            session.close()

    return _make


@pytest.fixture
def stock_of(session_factory):
    def _stock(product_id):
        session = session_factory()
        try:
            return InventoryService(session).get_product_by_id(product_id).stock
        finally:
            session.close()

    return _stock


@pytest.fixture
def inventory_client(session_factory):
    return InProcessInventoryClient(session_factory)


@pytest.fixture
def cart_client(session_factory, inventory_client):
    return InProcessCartClient(session_factory, inventory_client)


@pytest.fixture
def order_client(session_factory, cart_client):
    return InProcessOrderClient(session_factory, cart_client)


@pytest.fixture
def make_api_client(session_factory, inventory_client, cart_client, order_client, monkeypatch):
    """Builds a TestClient over all stores, peers served in-process."""
    from fastapi.testclient import TestClient

    from app.api.routers import carts, orders, payments
    from app.data.database import get_db
    from app.main import create_app

    monkeypatch.setattr(carts, "InventoryClient", lambda: inventory_client)
    monkeypatch.setattr(orders, "CartClient", lambda: cart_client)
    monkeypatch.setattr(payments, "OrderClient", lambda: order_client)
    monkeypatch.setattr(payments, "CartClient", lambda: cart_client)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    clients = []

    def _make(enforce_role_gate=False):
        api = create_app(
            stores=["inventory", "cart", "orders", "payments"],
            enforce_role_gate=enforce_role_gate,
            create_tables=False,
        )
        api.dependency_overrides[get_db] = override_get_db
        client = TestClient(api, raise_server_exceptions=False)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def api_client(make_api_client):
    return make_api_client()
