# Overview: Flask API routes for products; parses input and returns JSON responses.

# backend/asel/routes/products.py
from flask import Blueprint, current_app, request
from ..models import Product
from ..services.counter_store import CounterStoreError, default_counter_store
from ..services.record_store import RecordStoreError, default_record_store
from ..services.products_service import create_product, list_products as list_products_service
from ..services.sequence_service import generate_product_code
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name",
        "category",
        "smallest_unit",
        "largest_unit",
        "conversion_factor",
        "smallest_price",
        "largest_price",
        "status",
        "notes",
    },
    required_on_create={"name"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List all products with optional pagination.

    Query params:
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - items per page (default 20, max 100)
    """
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return list_products_service(page=page, per_page=per_page)


@products_bp.get("/next-code")
def next_code():
    """
    Preview the code the next created product would receive.

    With the file counter backend this consumes a counter value when the
    record store cannot be scanned.
    """
    try:
        code = generate_product_code(records=default_record_store(), counters=default_counter_store())
    except CounterStoreError:
        current_app.logger.exception("Failed to generate product code")
        return {"error": "Counter store unavailable"}, 503
    return {"code": code}


@products_bp.post("")
def create_product_route():
    """
    Create a new product. The code is assigned by the server.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = create_product(patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except (RecordStoreError, CounterStoreError):
        current_app.logger.exception("Failed to create product")
        return {"error": "Failed to create product"}, 500

    return created, 201
