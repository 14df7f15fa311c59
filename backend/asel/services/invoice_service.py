# Overview: Invoice totals and creation of purchase and sales invoices.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..extensions import db
from ..models import (
    Product,
    PurchaseInvoice,
    PurchaseInvoiceItem,
    SalesInvoice,
    SalesInvoiceItem,
    OperatingExpense,
)
from ..time_utils import local_now
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    coerce_numeric,
    enforce_rules_invoice_line,
    validate_payload,
)
from .counter_store import (
    CounterStore,
    INVOICE_COUNTER_KEY,
    PURCHASE_INVOICE_COUNTER_KEY,
    default_counter_store,
)
from .record_store import RecordStore, default_record_store
from .sequence_service import generate_document_number


class InvoiceError(ValueError):
    """Raised when an invoice references data that does not exist."""
    pass


def calculate_totals(
    line_totals: Iterable,
    *,
    tax_rate=0,
    shipping=0,
    discount=0,
    paid=0,
    previous_balance=None,
) -> dict:
    """
    Invoice footer figures.

    tax is a percentage of the subtotal; total = subtotal + tax + shipping - discount;
    remaining = total - paid. With previous_balance the party's running balance
    is carried forward as well.
    """
    subtotal = sum(coerce_numeric(v) for v in line_totals)
    tax_amount = subtotal * coerce_numeric(tax_rate) / 100
    total = subtotal + tax_amount + coerce_numeric(shipping) - coerce_numeric(discount)
    remaining = total - coerce_numeric(paid)

    totals = {
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "total": total,
        "remaining": remaining,
    }
    if previous_balance is not None:
        old_balance = coerce_numeric(previous_balance)
        totals["old_balance"] = old_balance
        totals["new_balance"] = old_balance + remaining
    return totals


@dataclass(frozen=True)
class InvoiceKind:
    header_model: type
    item_model: type
    collection: str
    prefix: str
    counter_key: str
    party_field: str


PURCHASE = InvoiceKind(
    header_model=PurchaseInvoice,
    item_model=PurchaseInvoiceItem,
    collection="purchase_invoices",
    prefix="PUR",
    counter_key=PURCHASE_INVOICE_COUNTER_KEY,
    party_field="supplier_name",
)

SALES = InvoiceKind(
    header_model=SalesInvoice,
    item_model=SalesInvoiceItem,
    collection="sales_invoices",
    prefix="INV",
    counter_key=INVOICE_COUNTER_KEY,
    party_field="customer_name",
)

_HEADER_FIELDS = {"date", "tax_rate", "shipping", "discount", "paid", "payment_method", "notes"}
LINE_POLICY = ModelValidationPolicy(
    writable_fields={"product_id", "unit", "quantity", "price"},
    required_on_create={"product_id", "unit", "quantity", "price"},
)


def _header_policy(kind: InvoiceKind) -> ModelValidationPolicy:
    return ModelValidationPolicy(writable_fields=_HEADER_FIELDS | {kind.party_field})


def _create_invoice(
    kind: InvoiceKind,
    payload: dict,
    *,
    records: RecordStore | None = None,
    counters: CounterStore | None = None,
) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")

    header_payload = {k: v for k, v in payload.items() if k != "items"}
    header = validate_payload(
        model=kind.header_model,
        payload=header_payload,
        policy=_header_policy(kind),
        partial=True,
    )

    lines = []
    for raw in raw_items:
        line = validate_payload(model=kind.item_model, payload=raw, policy=LINE_POLICY, partial=False)
        enforce_rules_invoice_line(line)
        product = db.session.query(Product).filter_by(id=line["product_id"]).first()
        if product is None:
            raise InvoiceError(f"product {line['product_id']} not found")
        line["product_name"] = product.name
        line["total"] = line["quantity"] * line["price"]
        lines.append(line)

    totals = calculate_totals(
        [line["total"] for line in lines],
        tax_rate=header.get("tax_rate"),
        shipping=header.get("shipping"),
        discount=header.get("discount"),
        paid=header.get("paid"),
    )

    if records is None:
        records = default_record_store()
    if counters is None:
        counters = default_counter_store()

    invoice_number = generate_document_number(
        kind.prefix,
        records=records,
        counters=counters,
        collection=kind.collection,
        counter_key=kind.counter_key,
    )

    invoice = kind.header_model(
        invoice_number=invoice_number,
        date=header.get("date") or local_now(),
        tax_rate=coerce_numeric(header.get("tax_rate")),
        shipping=coerce_numeric(header.get("shipping")),
        discount=coerce_numeric(header.get("discount")),
        paid=coerce_numeric(header.get("paid")),
        subtotal=totals["subtotal"],
        tax_amount=totals["tax_amount"],
        total=totals["total"],
        remaining=totals["remaining"],
        payment_method=header.get("payment_method"),
        notes=header.get("notes"),
    )
    setattr(invoice, kind.party_field, header.get(kind.party_field))
    invoice.items = [kind.item_model(**line) for line in lines]

    db.session.add(invoice)
    db.session.commit()
    return invoice.to_dict(include_items=True)


def create_purchase_invoice(payload: dict, *, records: RecordStore | None = None, counters: CounterStore | None = None) -> dict:
    """
    Post a supplier purchase with its lines.

    Raises:
        ValidationError: malformed header or line
        InvoiceError: a line references an unknown product
    """
    return _create_invoice(PURCHASE, payload, records=records, counters=counters)


def create_sales_invoice(payload: dict, *, records: RecordStore | None = None, counters: CounterStore | None = None) -> dict:
    return _create_invoice(SALES, payload, records=records, counters=counters)


def list_invoices(kind: InvoiceKind) -> list[dict]:
    rows = (
        db.session.query(kind.header_model)
        .order_by(kind.header_model.date.desc(), kind.header_model.id.desc())
        .all()
    )
    return [row.to_dict() for row in rows]


EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"date", "category", "amount", "description"},
    required_on_create={"amount"},
)


def create_expense(payload: dict) -> dict:
    patch = validate_payload(model=OperatingExpense, payload=payload, policy=EXPENSE_POLICY, partial=False)
    if patch["amount"] is None or patch["amount"] < 0:
        raise ValidationError("amount must be >= 0")
    expense = OperatingExpense(
        date=patch.get("date") or local_now(),
        category=patch.get("category"),
        amount=patch["amount"],
        description=patch.get("description"),
    )
    db.session.add(expense)
    db.session.commit()
    return expense.to_dict()
