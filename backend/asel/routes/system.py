# backend/asel/routes/system.py
"""
System health and formatting endpoints.
"""

import time
from flask import Blueprint, current_app, request
from sqlalchemy import text

from ..extensions import db
from ..services.formatting_service import (
    format_arabic_number,
    format_currency,
    format_percentage,
)

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial query.

    Returns dict with status and latency.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/system/health")
def health():
    database = check_database_health()
    status_code = 200 if database["status"] == "healthy" else 503
    return {"status": database["status"], "database": database}, status_code


@system_bp.get("/format")
def format_value():
    """
    Format a value for display.

    Query params:
    - value: number to format (invalid input formats as zero)
    - kind: number | currency | percentage (default number)
    - decimals: int (default 2; ignored for percentage)
    - currency: currency label (default from config)
    """
    value = request.args.get("value")
    kind = request.args.get("kind", "number")
    decimals = request.args.get("decimals", default=2, type=int)
    if decimals is None or decimals < 0 or decimals > 20:
        return {"error": "decimals must be between 0 and 20"}, 400

    if kind == "number":
        formatted = format_arabic_number(value, decimals)
    elif kind == "currency":
        currency = request.args.get("currency", current_app.config["DEFAULT_CURRENCY"])
        formatted = format_currency(value, currency, decimals)
    elif kind == "percentage":
        formatted = format_percentage(value)
    else:
        return {"error": "kind must be number, currency, or percentage"}, 400

    return {"value": value, "kind": kind, "formatted": formatted}
