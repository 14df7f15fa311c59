# Overview: Collection-style access to the authoritative record store.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import (
    Product,
    PurchaseInvoice,
    PurchaseInvoiceItem,
    SalesInvoice,
    SalesInvoiceItem,
    OperatingExpense,
)


class RecordStoreError(Exception):
    """Raised when the record store cannot serve a request."""
    pass


COLLECTIONS = {
    "products": Product,
    "purchase_invoices": PurchaseInvoice,
    "purchase_invoice_items": PurchaseInvoiceItem,
    "sales_invoices": SalesInvoice,
    "sales_invoice_items": SalesInvoiceItem,
    "operating_expenses": OperatingExpense,
}


class RecordStore:
    """
    Minimal contract the sequence generators depend on:
    fetch every record of a named collection, and insert one.
    """

    def fetch_all(self, collection: str) -> list[dict]:
        raise NotImplementedError

    def insert(self, collection: str, values: dict) -> dict:
        raise NotImplementedError


class SqlRecordStore(RecordStore):
    def __init__(self, session):
        self.session = session

    def _model(self, collection: str):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise RecordStoreError(f"Unknown collection: {collection}")
        return model

    def fetch_all(self, collection: str) -> list[dict]:
        model = self._model(collection)
        try:
            rows = self.session.query(model).order_by(model.id.asc()).all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RecordStoreError(f"Failed to read {collection}: {exc}") from exc
        return [row.to_dict() for row in rows]

    def insert(self, collection: str, values: dict) -> dict:
        """Add a row and flush so the id is assigned; the caller commits."""
        model = self._model(collection)
        try:
            row = model(**values)
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RecordStoreError(f"Failed to insert into {collection}: {exc}") from exc
        return row.to_dict()


def default_record_store() -> SqlRecordStore:
    """Record store bound to the current app's session."""
    return SqlRecordStore(db.session)
