"""
guestbook/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time, so tests can build isolated
         app instances and Alembic can import the models without a server.

Responsibilities:
  1. Load configuration from config_by_name[config_name] (+ test overrides)
  2. Initialise extensions (SQLAlchemy, Marshmallow) via init_app()
  3. Create the schema on startup when AUTO_CREATE_SCHEMA is set
  4. Register route blueprints under /api/v1
  5. Register global error handlers (AppError → JSON, Exception → 500)
  6. Add CORS headers for the configured browser origins
  7. Register the `init-db` CLI command
"""

from __future__ import annotations

import traceback

import click
from flask import Flask, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from guestbook.config import ACTIVE_CONFIG_NAME, config_by_name, validate_production_config


def create_app(config_name: str | None = None, test_config: dict | None = None) -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to FLASK_ENV, then "development".
        test_config: Optional mapping applied on top of the config class
                     (tests use it to point at a temporary database).
    """
    config_name = config_name or ACTIVE_CONFIG_NAME

    app = Flask(__name__)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)
    if test_config:
        app.config.update(test_config)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    app.json.sort_keys = app.config.get("JSON_SORT_KEYS", False)

    # ── Extensions ─────────────────────────────────────────────────────────
    from guestbook.extensions import db, ma
    db.init_app(app)
    ma.init_app(app)

    # ── Schema ─────────────────────────────────────────────────────────────
    from guestbook.schema import create_schema
    if app.config.get("AUTO_CREATE_SCHEMA"):
        with app.app_context():
            create_schema()

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cors(app)
    _register_cli(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Registers all route blueprints under the /api/v1 prefix."""
    from guestbook.routes.auth import auth_bp
    from guestbook.routes.guests import guests_bp

    app.register_blueprint(auth_bp,   url_prefix="/api/v1")
    app.register_blueprint(guests_bp, url_prefix="/api/v1")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError        → structured JSON error envelope with its HTTP status
      ValidationError → first marshmallow error as MISSING_FIELD / INVALID_FIELD (400)
      Exception       → generic INTERNAL_ERROR (500); traceback logged, never returned
    """
    from guestbook.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """Routes never catch AppError — they let it propagate here."""
        if error.http_status >= 500:
            app.logger.error("%r", error, exc_info=error)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """Returns only the FIRST field error ("one error, not many")."""
        messages = error.messages
        field = None
        message = "Invalid input."
        code = ErrorCode.INVALID_FIELD

        if isinstance(messages, dict):
            for field_name, field_errors in messages.items():
                field = field_name if field_name != "_schema" else None
                if isinstance(field_errors, list):
                    message = str(field_errors[0]) if field_errors else "Invalid value."
                elif isinstance(field_errors, dict):
                    # Nested list item errors, e.g. {"companions": {1: [...]}}.
                    first = next(iter(field_errors.values()), ["Invalid value."])
                    message = str(first[0] if isinstance(first, list) else first)
                else:
                    message = str(field_errors)
                break
        elif isinstance(messages, list) and messages:
            message = str(messages[0])

        if message.startswith("Missing data for required field"):
            code = ErrorCode.MISSING_FIELD

        body = {"error": {"code": code, "message": message}}
        if field is not None:
            body["error"]["field"] = field
        return jsonify(body), 400

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        # Werkzeug's own 404/405/... keep their status.
        if isinstance(error, HTTPException):
            return error

        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for the browser front end.

    Allowed origins come from CORS_ORIGINS. In DEBUG/TESTING any origin is
    reflected so local dev servers on other ports work.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if not origin:
            return response

        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))
        if not (allow_all or origin in app.config.get("CORS_ORIGINS", [])):
            return response

        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Vary"] = "Origin"
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = app.config["CORS_ALLOW_METHODS"]
        response.headers["Access-Control-Allow-Headers"] = app.config["CORS_ALLOW_HEADERS"]
        response.headers["Access-Control-Expose-Headers"] = app.config["CORS_EXPOSE_HEADERS"]
        response.headers["Access-Control-Max-Age"] = str(app.config["CORS_MAX_AGE"])
        return response


def _register_cli(app: Flask) -> None:

    @app.cli.command("init-db")
    def init_db_command():
        """Create the guest_groups and guests tables if they are absent."""
        from guestbook.schema import create_schema

        create_schema()
        click.echo("Initialized the database.")
