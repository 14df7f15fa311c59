"""
Pytest fixtures for asel backend tests.

Provides the in-memory application, a per-test clean database, and small
record-store doubles for the sequence generators.
"""

from datetime import datetime

import pytest
from asel import create_app
from asel.extensions import db
from asel.models import Product, PurchaseInvoice, PurchaseInvoiceItem
from asel.services.record_store import RecordStore


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'COUNTER_BACKEND': 'sql',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client on a clean database."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def carton_product(db_session):
    """Product sold in pieces and cartons of 12."""
    product = Product(
        code="PRD-00001",
        name="Mineral Water 500ml",
        smallest_unit="piece",
        largest_unit="carton",
        conversion_factor=12,
        smallest_price=10,
        largest_price=110,
    )
    db_session.add(product)
    db_session.commit()
    return product


def add_purchase(db_session, product, *, date, lines, number):
    """Persist a purchase invoice; lines are (quantity, unit, price) tuples."""
    invoice = PurchaseInvoice(
        invoice_number=number,
        date=datetime.fromisoformat(date),
        total=sum(q * p for q, _, p in lines),
    )
    invoice.items = [
        PurchaseInvoiceItem(
            product_id=product.id,
            product_name=product.name,
            quantity=q,
            unit=unit,
            price=p,
            total=q * p,
        )
        for q, unit, p in lines
    ]
    db_session.add(invoice)
    db_session.commit()
    return invoice


class ListRecordStore(RecordStore):
    """Record store double serving fixed collections."""

    def __init__(self, **collections):
        self.collections = {k: list(v) for k, v in collections.items()}
        self.fetch_calls = 0

    def fetch_all(self, collection: str) -> list[dict]:
        self.fetch_calls += 1
        return list(self.collections.get(collection, []))

    def insert(self, collection: str, values: dict) -> dict:
        row = dict(values, id=len(self.collections.get(collection, [])) + 1)
        self.collections.setdefault(collection, []).append(row)
        return row


class FailingRecordStore(RecordStore):
    """Record store double whose reads always fail."""

    def fetch_all(self, collection: str) -> list[dict]:
        raise ConnectionError("record store unreachable")

    def insert(self, collection: str, values: dict) -> dict:
        raise ConnectionError("record store unreachable")
