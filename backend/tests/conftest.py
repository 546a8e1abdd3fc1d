"""
Pytest fixtures for Stockledger backend tests.

Provides an in-memory database per test, the test client, and a
deterministic InventoryService.
"""

import itertools

import pytest
from stockledger import create_app
from stockledger.extensions import db
from stockledger.services.inventory_service import InventoryService, get_inventory
from stockledger.services.kv_store import KeyValueStore


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'LOW_STOCK_THRESHOLD': 5,
    'LEDGER_PAGE_SIZE': 10,
}


def make_clock(start: int = 0):
    """Strictly increasing ledger timestamps, one second apart."""
    counter = itertools.count(start)

    def clock() -> str:
        n = next(counter)
        return f"2026-10-19T{n // 3600 % 24:02d}:{n // 60 % 60:02d}:{n % 60:02d}.000Z"

    return clock


def make_ids(prefix: str = "id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter):04d}"


@pytest.fixture(scope='function')
def app():
    """Create application with a fresh in-memory database."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def store(app):
    return KeyValueStore()


@pytest.fixture(scope='function')
def inventory(store):
    """InventoryService with predictable ids and timestamps."""
    return InventoryService.load(store, clock=make_clock(), id_factory=make_ids())


@pytest.fixture(scope='function')
def app_inventory(app):
    """The service instance the routes and CLI use."""
    return get_inventory()


@pytest.fixture(scope='function')
def widget(inventory):
    """Widget, SKU A1, 9.99, 3 on hand."""
    return inventory.register_product("A1", "Widget", 9.99, 3)
