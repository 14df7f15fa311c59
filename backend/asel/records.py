# Overview: Read-only record shapes consumed by the pricing and reporting calculators.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Hashable, Mapping, Optional

from asel.time_utils import to_iso
from asel.validation import UNIT_SMALLEST, coerce_numeric


"""
Record normalization (authoritative)

- Records are built once at the boundary (ORM rows, JSON payloads, fixtures)
  through from_mapping(); calculators trust the normalized fields.
- Missing or malformed numbers become 0, except conversion_factor which
  becomes 1 (a product always converts at least one-to-one).
- Dates are kept as ISO-8601 strings so the as-of cutoff can compare the
  'YYYY-MM-DD' portion as text.
"""


def _iso_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, date):
        return value.isoformat()
    s = str(value).strip()
    return s or None


@dataclass(frozen=True)
class ProductRecord:
    id: Hashable
    code: Optional[str] = None
    conversion_factor: float = 1
    smallest_price: float = 0.0
    largest_price: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProductRecord":
        return cls(
            id=data.get("id"),
            code=data.get("code"),
            conversion_factor=coerce_numeric(data.get("conversion_factor")) or 1,
            smallest_price=coerce_numeric(data.get("smallest_price")),
            largest_price=coerce_numeric(data.get("largest_price")),
        )


@dataclass(frozen=True)
class InvoiceRecord:
    """Header of a purchase or sales invoice."""
    id: Hashable
    date: Optional[str] = None
    total: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "InvoiceRecord":
        return cls(
            id=data.get("id"),
            date=_iso_or_none(data.get("date")),
            total=coerce_numeric(data.get("total")),
        )


@dataclass(frozen=True)
class InvoiceItemRecord:
    """Line of a purchase or sales invoice; price is per `unit`."""
    id: Hashable
    invoice_id: Hashable
    product_id: Hashable
    quantity: float = 0.0
    unit: str = UNIT_SMALLEST
    price: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "InvoiceItemRecord":
        unit = data.get("unit")
        return cls(
            id=data.get("id"),
            invoice_id=data.get("invoice_id"),
            product_id=data.get("product_id"),
            quantity=coerce_numeric(data.get("quantity")),
            unit=str(unit) if unit is not None else UNIT_SMALLEST,
            price=coerce_numeric(data.get("price")),
        )


@dataclass(frozen=True)
class ExpenseRecord:
    id: Hashable
    date: Optional[str] = None
    amount: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ExpenseRecord":
        return cls(
            id=data.get("id"),
            date=_iso_or_none(data.get("date")),
            amount=coerce_numeric(data.get("amount")),
        )
