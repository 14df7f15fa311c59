# Overview: Profit and loss figures built on the average purchase price.

from __future__ import annotations

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
from ..records import ExpenseRecord, InvoiceItemRecord, InvoiceRecord, ProductRecord
from ..time_utils import date_portion, parse_iso_datetime
from .formatting_service import DEFAULT_CURRENCY, format_currency, format_percentage
from .pricing_service import calculate_average_purchase_price, normalized_quantity


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _validate_range(from_date: str, to_date: str) -> tuple[str, str]:
    try:
        start = parse_iso_datetime(from_date)
        end = parse_iso_datetime(to_date)
    except (AttributeError, ValueError):
        raise ReportError("from and to must be YYYY-MM-DD dates")
    if start is None or end is None:
        raise ReportError("from and to are required")
    if start > end:
        raise ReportError("from must not be after to")
    return date_portion(start), date_portion(end)


def calculate_kpis(
    sales_invoices: Iterable[InvoiceRecord],
    sales_items: Iterable[InvoiceItemRecord],
    products: Iterable[ProductRecord],
    purchase_invoices: Iterable[InvoiceRecord],
    purchase_items: Iterable[InvoiceItemRecord],
    expenses: Iterable[ExpenseRecord],
    from_date: str,
    to_date: str,
) -> dict:
    """
    Profit KPIs for the given sales.

    COGS values each sold line at the average purchase price as of its sale
    date, so later purchases never change the cost of earlier sales.
    Expenses are filtered to [from_date, to_date] by date portion; sales are
    taken as given (callers pre-filter them).
    """
    sales_invoices = list(sales_invoices)
    products = list(products)
    purchase_invoices = list(purchase_invoices)
    purchase_items = list(purchase_items)

    products_by_id = {p.id: p for p in products}
    sales_by_id = {inv.id: inv for inv in sales_invoices}

    total_sales = sum(inv.total for inv in sales_invoices)

    total_cogs = 0.0
    for item in sales_items:
        product = products_by_id.get(item.product_id)
        if product is None:
            continue

        invoice = sales_by_id.get(item.invoice_id)
        sale_date = date_portion(invoice.date) if invoice else None

        avg_price = calculate_average_purchase_price(
            item.product_id, sale_date, products, purchase_invoices, purchase_items
        )
        total_cogs += avg_price * normalized_quantity(item, product)

    gross_profit = total_sales - total_cogs

    total_expenses = 0.0
    for exp in expenses:
        exp_date = date_portion(exp.date)
        if exp_date is not None and from_date <= exp_date <= to_date:
            total_expenses += exp.amount

    net_profit = gross_profit - total_expenses
    profit_margin = (net_profit / total_sales) * 100 if total_sales > 0 else 0

    return {
        "total_sales": total_sales,
        "total_cogs": total_cogs,
        "gross_profit": gross_profit,
        "total_expenses": total_expenses,
        "net_profit": net_profit,
        "profit_margin": profit_margin,
    }


def profit_report(*, from_date: str, to_date: str, currency: str = DEFAULT_CURRENCY) -> dict:
    """
    KPIs for sales dated within [from_date, to_date], with display strings.

    The full purchase history is loaded so each sale is costed as of its date.
    """
    start, end = _validate_range(from_date, to_date)

    sales = [
        inv for inv in db.session.query(SalesInvoice).order_by(SalesInvoice.date.asc()).all()
        if start <= date_portion(inv.date) <= end
    ]
    sale_ids = [inv.id for inv in sales]
    sales_items = []
    if sale_ids:
        sales_items = (
            db.session.query(SalesInvoiceItem)
            .filter(SalesInvoiceItem.invoice_id.in_(sale_ids))
            .all()
        )

    kpis = calculate_kpis(
        [inv.to_record() for inv in sales],
        [item.to_record() for item in sales_items],
        [p.to_record() for p in db.session.query(Product).all()],
        [inv.to_record() for inv in db.session.query(PurchaseInvoice).all()],
        [item.to_record() for item in db.session.query(PurchaseInvoiceItem).all()],
        [exp.to_record() for exp in db.session.query(OperatingExpense).all()],
        start,
        end,
    )

    formatted = {
        key: format_currency(value, currency)
        for key, value in kpis.items()
        if key != "profit_margin"
    }
    formatted["profit_margin"] = format_percentage(kpis["profit_margin"])

    return {
        "from": start,
        "to": end,
        "sales_count": len(sales),
        "kpis": kpis,
        "formatted": formatted,
    }
