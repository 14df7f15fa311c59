# backend/asel/services/products_service.py
"""
Products Service

- create_product assigns the product code once, at creation
- codes are never part of a patch; PRODUCT_MUTABLE_FIELDS excludes them
"""
from __future__ import annotations
from ..extensions import db
from ..models import Product
from ..validation import ConflictError
from .counter_store import CounterStore, default_counter_store
from .record_store import RecordStore, default_record_store
from .sequence_service import generate_product_code

PRODUCT_MUTABLE_FIELDS = {
    "name",
    "category",
    "smallest_unit",
    "largest_unit",
    "conversion_factor",
    "smallest_price",
    "largest_price",
    "status",
    "notes",
}


def list_products(page: int | None = None, per_page: int | None = None) -> dict:
    """
    Product listing ordered by code, with optional pagination.

    Args:
        page: Page number (1-indexed). If None, returns all items.
        per_page: Items per page (default 20, max 100)

    Returns:
        Dict with 'items', 'count', and pagination metadata if paginated.
    """
    base_query = db.session.query(Product).order_by(Product.code.asc(), Product.id.asc())

    if page is None:
        products = base_query.all()
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }

    per_page = min(per_page or 20, 100)
    page = max(page, 1)

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    products = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def create_product(
    *,
    patch: dict,
    records: RecordStore | None = None,
    counters: CounterStore | None = None,
) -> dict:
    """
    Create a product from a validated patch dict and give it the next code.

    Raises:
        ConflictError: If the generated code is already taken
    """
    if records is None:
        records = default_record_store()
    if counters is None:
        counters = default_counter_store()

    code = generate_product_code(records=records, counters=counters)

    existing = db.session.query(Product).filter(Product.code == code).first()
    if existing:
        raise ConflictError(f"Product code {code} already exists.")

    values = {k: v for k, v in patch.items() if k in PRODUCT_MUTABLE_FIELDS}
    values["code"] = code
    created = records.insert("products", values)

    db.session.commit()
    return created
