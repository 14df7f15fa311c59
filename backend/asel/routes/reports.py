from flask import Blueprint, current_app, jsonify, request

from ..services import pricing_service, reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/average-purchase-price")
def average_purchase_price():
    product_id = request.args.get("product_id", type=int)
    if product_id is None:
        return jsonify({"error": "product_id is required"}), 400

    as_of = request.args.get("as_of") or None
    price = pricing_service.get_average_purchase_price(product_id, as_of)
    return jsonify({
        "product_id": product_id,
        "as_of": as_of,
        "average_purchase_price": price,
    }), 200


@reports_bp.get("/profit")
def profit_report():
    try:
        report = reporting_service.profit_report(
            from_date=request.args.get("from"),
            to_date=request.args.get("to"),
            currency=current_app.config["DEFAULT_CURRENCY"],
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
