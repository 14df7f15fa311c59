from __future__ import annotations

from ..extensions import db
from ..records import ProductRecord, InvoiceRecord, InvoiceItemRecord
from asel.time_utils import to_iso


class Product(db.Model):
    """
    Product master data.

    CODE DESIGN DECISION:
    Product.code ("PRD-NNNNN") is assigned once at creation by the sequence
    service and never changed afterwards.

    UNITS:
    A product is stocked in two granularities. conversion_factor is the number
    of smallest units in one largest unit (e.g. 12 pieces per carton).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_products_code"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    code = db.Column(db.String(32), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(128), nullable=True)

    smallest_unit = db.Column(db.String(64), nullable=True)
    largest_unit = db.Column(db.String(64), nullable=True)
    conversion_factor = db.Column(db.Integer, nullable=False, default=1)

    smallest_price = db.Column(db.Float, nullable=False, default=0)
    largest_price = db.Column(db.Float, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="active")
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} code={self.code!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "smallest_unit": self.smallest_unit,
            "largest_unit": self.largest_unit,
            "conversion_factor": self.conversion_factor,
            "smallest_price": self.smallest_price,
            "largest_price": self.largest_price,
            "status": self.status,
            "notes": self.notes,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    def to_record(self) -> ProductRecord:
        return ProductRecord.from_mapping(self.to_dict())


class PurchaseInvoice(db.Model):
    """
    Supplier purchase. Posted once; the pricing service reads it, never writes it.
    """
    __tablename__ = "purchase_invoices"
    __table_args__ = (
        db.UniqueConstraint("invoice_number", name="uq_purchase_invoices_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(64), nullable=False)
    supplier_name = db.Column(db.String(255), nullable=True)

    # Business time of the purchase (local, naive)
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
        "PurchaseInvoiceItem",
        backref="invoice",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "supplier_name": self.supplier_name,
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


class PurchaseInvoiceItem(db.Model):
    __tablename__ = "purchase_invoice_items"

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("purchase_invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=True)

    # "smallest" or "largest"; price is per this unit
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
