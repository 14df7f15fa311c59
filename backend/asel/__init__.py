# backend/asel/__init__.py
import logging

from flask import Flask, request

from .config import Config
from .extensions import db


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.getLogger("asel").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)

    # Import models so create_all sees every table
    from . import models  # noqa: F401

    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.invoices import invoices_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        # Desktop shell loads the UI from a local dev server or file://
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "null",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return response

    from .cli import register_commands
    register_commands(app)

    return app
