"""Pytest fixtures for storefront tests."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.database import Base, get_db, unit_of_work
from storefront.models import inventory, order  # noqa: F401
from storefront.schemas.order import OrderCreate
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.notification_hook import get_notification_hook
from storefront.services.order_service import OrderService


class RecordingHook:
    """Notification hook that remembers what it was told"""

    def __init__(self):
        self.status_changes = []
        self.placed = []

    def notify(self, order, new_status):
        self.status_changes.append((order.id, new_status))

    def order_placed(self, order):
        self.placed.append(order.id)


class FailingHook:
    """Notification hook whose backend is down"""

    def notify(self, order, new_status):
        raise RuntimeError("mail pipeline down")

    def order_placed(self, order):
        raise RuntimeError("mail pipeline down")


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingHook()


@pytest.fixture
def set_stock(db):
    """Set stock for a product/size/color combination."""

    def _set_stock(product_id, quantity, size=None, color=None):
        with unit_of_work(db):
            InventoryLedger(db).update_quantity(product_id, size, color, quantity)

    return _set_stock


@pytest.fixture
def stock_of(db):
    """Read current stock for a product/size/color combination."""

    def _stock_of(product_id, size=None, color=None):
        return InventoryLedger(db).available(product_id, size, color)

    return _stock_of


@pytest.fixture
def place_order(db, notifier):
    """Create a pending order for the given item dicts."""

    def _place_order(*items, user_id=1):
        data = OrderCreate(
            items=[
                {"product_name": f"Product {item['product_id']}", "unit_price": 10.0, **item}
                for item in items
            ],
            payment_method="card",
            subtotal=10.0,
            shipping_amount=5.0,
            total_amount=15.0,
            customer_email="shopper@threadedtreasure.com",
        )
        return OrderService(db, notifier).create_order(user_id, data)

    return _place_order


@pytest.fixture
def client(session_factory, notifier):
    """Test client wired to the in-memory database and recording hook."""
    from storefront.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_hook] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


ADMIN = {"X-User-Id": "99", "X-User-Role": "admin"}
CUSTOMER = {"X-User-Id": "1", "X-User-Role": "customer"}
OTHER_CUSTOMER = {"X-User-Id": "2", "X-User-Role": "customer"}
