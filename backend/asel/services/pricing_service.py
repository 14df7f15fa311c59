# Overview: Average purchase price of a product from posted purchase invoices.

from __future__ import annotations

from datetime import date, datetime
from typing import Hashable, Iterable

from ..extensions import db
from ..models import Product, PurchaseInvoice, PurchaseInvoiceItem
from ..records import InvoiceItemRecord, InvoiceRecord, ProductRecord
from ..time_utils import date_portion
from ..validation import UNIT_LARGEST

"""
Average Purchase Price (authoritative)

As-of semantics:
- as_of_date is a 'YYYY-MM-DD' string; an item counts when the date portion
  of its invoice is <= as_of_date (text comparison, inclusive).
- No as_of_date -> every purchase counts.

Aggregation:
- Quantities are normalized to the smallest unit: "largest" lines are
  multiplied by the product's conversion_factor, any other unit is taken as-is.
- Cost is price * quantity in the line's own unit (not re-priced per
  smallest unit). Only the quantity side is normalized.
  Flagged for product-owner review: for "largest" lines this divides a
  per-carton cost by a per-piece quantity. Existing reports depend on it.
- Result = total cost / total normalized quantity, 0 when nothing qualifies.

Lines whose invoice is missing are skipped. Unknown products yield 0.
"""


def normalized_quantity(item: InvoiceItemRecord, product: ProductRecord) -> float:
    """Quantity of an invoice line expressed in the product's smallest unit."""
    if item.unit == UNIT_LARGEST:
        return item.quantity * (product.conversion_factor or 1)
    return item.quantity


def _as_of_text(as_of_date) -> str | None:
    if as_of_date is None or as_of_date == "":
        return None
    if isinstance(as_of_date, (date, datetime)):
        return date_portion(as_of_date)
    return str(as_of_date)


def calculate_average_purchase_price(
    product_id: Hashable,
    as_of_date: str | date | None,
    products: Iterable[ProductRecord],
    purchase_invoices: Iterable[InvoiceRecord],
    purchase_invoice_items: Iterable[InvoiceItemRecord],
) -> float:
    product = next((p for p in products if p.id == product_id), None)
    if product is None:
        return 0

    cutoff = _as_of_text(as_of_date)
    invoices_by_id: dict = {}
    for inv in purchase_invoices:
        invoices_by_id.setdefault(inv.id, inv)

    total_cost = 0.0
    total_quantity = 0.0

    for item in purchase_invoice_items:
        if item.product_id != product_id:
            continue

        invoice = invoices_by_id.get(item.invoice_id)
        if invoice is None:
            continue

        if cutoff is not None:
            purchase_date = date_portion(invoice.date)
            if purchase_date is None or purchase_date > cutoff:
                continue

        total_cost += item.price * item.quantity
        total_quantity += normalized_quantity(item, product)

    return total_cost / total_quantity if total_quantity else 0


def get_average_purchase_price(product_id: int, as_of_date: str | date | None = None) -> float:
    """
    Database-backed average purchase price for one product.

    Loads the product, its purchase lines and their invoices, then defers
    to calculate_average_purchase_price.
    """
    product = db.session.query(Product).filter_by(id=product_id).first()
    if product is None:
        return 0

    items = (
        db.session.query(PurchaseInvoiceItem)
        .filter(PurchaseInvoiceItem.product_id == product_id)
        .order_by(PurchaseInvoiceItem.id.asc())
        .all()
    )
    invoice_ids = {item.invoice_id for item in items}
    invoices = []
    if invoice_ids:
        invoices = (
            db.session.query(PurchaseInvoice)
            .filter(PurchaseInvoice.id.in_(invoice_ids))
            .all()
        )

    return calculate_average_purchase_price(
        product_id,
        as_of_date,
        [product.to_record()],
        [inv.to_record() for inv in invoices],
        [item.to_record() for item in items],
    )
