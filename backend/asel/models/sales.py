from __future__ import annotations

from ..extensions import db
from ..records import InvoiceRecord, InvoiceItemRecord, ExpenseRecord
from asel.time_utils import to_iso


class SalesInvoice(db.Model):
    __tablename__ = "sales_invoices"
    __table_args__ = (
        db.UniqueConstraint("invoice_number", name="uq_sales_invoices_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(64), nullable=False)
    customer_name = db.Column(db.String(255), nullable=True)

    date = db.Column(db.DateTime, nullable=False, index=True)

    subtotal = db.Column(db.Float, nullable=False, default=0)
    tax_rate = db.Column(db.Float, nullable=False, default=0)
    tax_amount = db.Column(db.Float, nullable=False, default=0)
    shipping = db.Column(db.Float, nullable=False, default=0)
    discount = db.Column(db.Float, nullable=False, default=0)
    total = db.Column(db.Float, nullable=False, default=0)
    paid = db.Column(db.Float, nullable=False, default=0)
    remaining = db.Column(db.Float, nullable=False, default=0)

    payment_method = db.Column(db.String(32), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    items = db.relationship(
        "SalesInvoiceItem",
        backref="invoice",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "customer_name": self.customer_name,
            "date": to_iso(self.date),
            "subtotal": self.subtotal,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "shipping": self.shipping,
            "discount": self.discount,
            "total": self.total,
            "paid": self.paid,
            "remaining": self.remaining,
            "payment_method": self.payment_method,
            "notes": self.notes,
            "created_at": to_iso(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data

    def to_record(self) -> InvoiceRecord:
        return InvoiceRecord.from_mapping(self.to_dict())


class SalesInvoiceItem(db.Model):
    __tablename__ = "sales_invoice_items"

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("sales_invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=True)

    unit = db.Column(db.String(16), nullable=False, default="smallest")
    quantity = db.Column(db.Float, nullable=False)
    price = db.Column(db.Float, nullable=False)
    total = db.Column(db.Float, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "unit": self.unit,
            "quantity": self.quantity,
            "price": self.price,
            "total": self.total,
        }

    def to_record(self) -> InvoiceItemRecord:
        return InvoiceItemRecord.from_mapping(self.to_dict())


class OperatingExpense(db.Model):
    __tablename__ = "operating_expenses"

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime, nullable=False, index=True)
    category = db.Column(db.String(128), nullable=True)
    amount = db.Column(db.Float, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso(self.date),
            "category": self.category,
            "amount": self.amount,
            "description": self.description,
            "created_at": to_iso(self.created_at),
        }

    def to_record(self) -> ExpenseRecord:
        return ExpenseRecord.from_mapping(self.to_dict())
