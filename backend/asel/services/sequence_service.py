# Overview: Product code and invoice number generation.

from __future__ import annotations

import logging
import re

from ..time_utils import current_year
from .counter_store import (
    CounterStore,
    INVOICE_COUNTER_KEY,
    PRODUCT_COUNTER_KEY,
)
from .record_store import RecordStore

logger = logging.getLogger(__name__)

"""
Sequence Invariants (authoritative)

Product codes:
- Format "PRD-" + counter zero-padded to 5 digits; 100000 and above simply
  widen the suffix.
- The record store is consulted first: next = max(existing PRD suffix) + 1.
  Codes without the prefix are ignored; prefixed codes with no digits count as 0.
- If the store is missing or fails, the fallback counter is incremented instead.
- Scan-based numbering only moves forward once the new product is saved, so
  callers persist the product before asking for the next code.

Invoice numbers:
- Format "{prefix}-{year}-" + counter zero-padded to 3 digits.
- The year is the local calendar year when the number is generated.
- Counters are never reset per year.
"""

PRODUCT_CODE_PREFIX = "PRD"
PRODUCT_CODE_PAD = 5
INVOICE_NUMBER_PAD = 3

_PRODUCT_CODE_RE = re.compile(r"PRD-(\d+)")


def format_product_code(counter: int) -> str:
    return f"{PRODUCT_CODE_PREFIX}-{counter:0{PRODUCT_CODE_PAD}d}"


def format_invoice_number(prefix: str, year: int, counter: int) -> str:
    return f"{prefix}-{year}-{counter:0{INVOICE_NUMBER_PAD}d}"


def _code_number(code: str) -> int:
    match = _PRODUCT_CODE_RE.search(code)
    return int(match.group(1)) if match else 0


def next_product_counter_from_records(products: list[dict]) -> int:
    numbers = [
        _code_number(code)
        for code in (p.get("code") for p in products)
        if isinstance(code, str) and code.startswith(f"{PRODUCT_CODE_PREFIX}-")
    ]
    return max(numbers, default=0) + 1


def generate_product_code(*, records: RecordStore | None, counters: CounterStore) -> str:
    """
    Next product code, e.g. "PRD-00001".

    Args:
        records: authoritative store (None when running without one)
        counters: fallback counter store

    Returns:
        Code string matching PRD-\\d{5,}
    """
    if records is not None:
        try:
            products = records.fetch_all("products")
            return format_product_code(next_product_counter_from_records(products))
        except Exception:
            logger.warning("Product code scan failed; using fallback counter", exc_info=True)

    counter = counters.increment(PRODUCT_COUNTER_KEY)
    return format_product_code(counter)


def generate_invoice_number(
    counters: CounterStore,
    *,
    prefix: str = "INV",
    counter_key: str = INVOICE_COUNTER_KEY,
    year: int | None = None,
) -> str:
    """Increment the invoice counter and format it for the current year."""
    if year is None:
        year = current_year()
    counter = counters.increment(counter_key)
    return format_invoice_number(prefix, year, counter)


def generate_document_number(
    prefix: str,
    *,
    records: RecordStore | None,
    counters: CounterStore,
    collection: str,
    counter_key: str,
    year: int | None = None,
) -> str:
    """
    Year-scoped invoice number derived from the invoices already saved.

    Scans `collection` for invoice_number values of this prefix and year and
    returns max + 1, mirroring the result into the counter store as a backup.
    Falls back to generate_invoice_number() when there is no store, the
    collection is empty, or the scan fails.
    """
    if year is None:
        year = current_year()
    year_prefix = f"{prefix}-{year}-"

    if records is not None:
        try:
            invoices = records.fetch_all(collection)
        except Exception:
            logger.warning("Invoice number scan of %s failed; using fallback counter", collection, exc_info=True)
            invoices = []

        if invoices:
            pattern = re.compile(re.escape(year_prefix) + r"(\d+)")
            numbers = []
            for inv in invoices:
                number = inv.get("invoice_number")
                if not isinstance(number, str) or not number.startswith(year_prefix):
                    continue
                match = pattern.match(number)
                numbers.append(int(match.group(1)) if match else 0)

            counter = max(numbers, default=0) + 1
            counters.set(counter_key, str(counter))
            return format_invoice_number(prefix, year, counter)

    return generate_invoice_number(counters, prefix=prefix, counter_key=counter_key, year=year)
