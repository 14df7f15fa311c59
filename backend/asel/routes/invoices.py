# Overview: Flask API routes for purchase and sales invoices and operating expenses.

from flask import Blueprint, current_app, request

from ..services import invoice_service
from ..services.counter_store import CounterStoreError
from ..validation import ValidationError

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api")


def _create(create_fn, label: str):
    payload = request.get_json(silent=True) or {}
    try:
        created = create_fn(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except invoice_service.InvoiceError as e:
        return {"error": str(e)}, 404
    except CounterStoreError:
        current_app.logger.exception("Failed to create %s", label)
        return {"error": f"Failed to create {label}"}, 500
    return created, 201


@invoices_bp.get("/purchases")
def list_purchases():
    items = invoice_service.list_invoices(invoice_service.PURCHASE)
    return {"items": items, "count": len(items)}


@invoices_bp.post("/purchases")
def create_purchase():
    """
    Post a purchase invoice.

    Body: supplier_name, date, tax_rate, shipping, discount, paid,
    payment_method, notes, items=[{product_id, unit, quantity, price}]
    """
    return _create(invoice_service.create_purchase_invoice, "purchase invoice")


@invoices_bp.get("/sales")
def list_sales():
    items = invoice_service.list_invoices(invoice_service.SALES)
    return {"items": items, "count": len(items)}


@invoices_bp.post("/sales")
def create_sale():
    return _create(invoice_service.create_sales_invoice, "sales invoice")


@invoices_bp.post("/expenses")
def create_expense():
    return _create(invoice_service.create_expense, "expense")
