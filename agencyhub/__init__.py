# agencyhub/__init__.py
from __future__ import annotations

import logging
from typing import Any, Mapping

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import NotFound

from .billing.catalog import ProductCatalog, default_catalog
from .billing.lifecycle import InvalidTransition, UnknownStatus
from .extensions import db, limiter, migrate
from .settings import Config


def create_app(
    config_overrides: Mapping[str, Any] | None = None,
    catalog: ProductCatalog | None = None,
) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # ======================
    # Initialize Extensions
    # ======================
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # ======================
    # Import Models (CRITICAL)
    # ======================
    from . import models  # noqa: F401

    # ======================
    # Product catalog (injected, per app)
    # ======================
    app.extensions["product_catalog"] = catalog if catalog is not None else default_catalog()

    # ======================
    # Register Blueprints
    # ======================
    from .routes import main
    from .invoicing import invoicing
    from .clients import clients_bp
    from .support import support
    from .library import library

    app.register_blueprint(main)
    app.register_blueprint(invoicing)
    app.register_blueprint(clients_bp)
    app.register_blueprint(support)
    app.register_blueprint(library)

    # ======================
    # CLI
    # ======================
    from .cli import register_cli

    register_cli(app)

    _register_error_handlers(app)
    return app


def _register_error_handlers(app: Flask) -> None:
    from .services.documents import NumberingConflict
    from .utils.parsing import PayloadError

    # ======================
    # Domain errors
    # ======================
    @app.errorhandler(PayloadError)
    def bad_payload(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(UnknownStatus)
    def unknown_status(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(InvalidTransition)
    def invalid_transition(e):
        db.session.rollback()
        return jsonify({"error": str(e), "from": e.current, "to": e.target}), 409

    @app.errorhandler(NumberingConflict)
    def numbering_conflict(e):
        app.logger.error("%s", e)
        return jsonify({"error": f"{e.document.capitalize()} numbering conflict. Try again."}), 409

    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        app.logger.exception("Database error")
        return jsonify({"error": "Failed to process request"}), 500

    # ======================
    # Rate limit error handler
    # ======================
    @app.errorhandler(429)
    def ratelimit_handler(e):
        return jsonify({"error": "Too many requests. Please try again later."}), 429

    # ======================
    # Not found / other HTTP errors as JSON
    # ======================
    @app.errorhandler(404)
    def not_found(e):
        message = e.description if e.description != NotFound.description else "Not found"
        return jsonify({"error": message}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500
