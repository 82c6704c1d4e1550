# guardian/__init__.py
"""
App factory.

    from guardian import create_app
    app = create_app()                       # settings from the environment
    app = create_app(GuardianConfig(...))    # explicit settings (tests, scripts)

Production behaviour:
    - CORS origins read from CORS_ORIGINS env var (https:// origins = production)
    - Database URI from SQLALCHEMY_DATABASE_URI
    - SECRET_KEY required in production (no default fallback)
    - Production-appropriate logging levels
    - Gunicorn-safe scheduler guard (SCHEDULER_ENABLED)
    - Flask-Migrate manages schema; db.create_all() is not called here
"""

from __future__ import annotations
from flask_cors import CORS
from flask_migrate import Migrate
import logging
import os
import re
import traceback
from typing import Callable, Optional
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from .config import GuardianConfig
from .errors import GuardianError
from .extensions import init_extensions, db
from . import models
from .auth import auth_bp
from .audit import audit_bp
from .billing import billing_bp, webhooks_bp
from .dashboard import dashboard_bp
from .monitoring import monitoring_bp
from .reputation import reputation_bp
from .scans import scans_bp
from .subscriptions.routes import subscriptions_bp

error_logger = logging.getLogger("guardian.errors")


def _scheduler_allowed(config: GuardianConfig) -> bool:
    """
    Guard for background schedulers under Gunicorn.
    With multiple workers, schedulers must only run once: set
    SCHEDULER_ENABLED=true on exactly one worker.
    """
    server = os.getenv("SERVER_SOFTWARE", "")
    if "gunicorn" not in server.lower():
        return config.scheduler_enabled
    return os.environ.get("SCHEDULER_ENABLED", "false").lower() == "true"


def create_app(
    config: Optional[GuardianConfig] = None,
    *,
    breach_source=None,
    payment_gateway=None,
    reputation_client=None,
    clock: Optional[Callable] = None,
) -> Flask:
    app = Flask(__name__)

    config = config or GuardianConfig.from_env()
    app.config["GUARDIAN"] = config

    # ── Logging ──────────────────────────────────────────────────────
    if config.production:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        app.logger.setLevel(logging.INFO)
    else:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )
        app.logger.setLevel(logging.DEBUG)

    # Werkzeug logs every request
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    # Quieten noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    # ─────────────────────────────────────────────────────────────────

    # ── CORS ────────────────────────────────────────────────────────
    # Dev: falls back to localhost origins if CORS_ORIGINS is not set
    cors_origins = config.cors_origins or [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        re.compile(r"http://192\.168\.\d+\.\d+:5173"),
    ]

    CORS(app, resources={
        r"/*": {
            "origins": cors_origins,
            "supports_credentials": True,
            "allow_headers": ["Content-Type", "Authorization", "Stripe-Signature"],
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
        }
    })

    # ── Secret Key / Database ────────────────────────────────────────
    app.config["SECRET_KEY"] = config.secret_key
    app.config["SQLALCHEMY_DATABASE_URI"] = config.database_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # ── Extensions ───────────────────────────────────────────────────
    init_extensions(
        app,
        breach_source=breach_source,
        payment_gateway=payment_gateway,
        reputation_client=reputation_client,
        clock=clock,
    )
    Migrate(app, db)

    # ── Blueprints ───────────────────────────────────────────────────
    app.register_blueprint(auth_bp)
    app.register_blueprint(scans_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(subscriptions_bp)
    app.register_blueprint(billing_bp)
    app.register_blueprint(webhooks_bp)
    app.register_blueprint(audit_bp)
    app.register_blueprint(reputation_bp)
    app.register_blueprint(monitoring_bp)

    # ── Global Error Handlers ────────────────────────────────────────
    # Return clean JSON for all errors; never expose tracebacks to users.
    # Errors are logged server-side for debugging.

    @app.errorhandler(GuardianError)
    def guardian_error(e: GuardianError):
        if e.status_code >= 500:
            error_logger.warning("%s: %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({
            "error": "Bad request",
            "message": str(e.description) if hasattr(e, "description") else "The request was malformed or invalid.",
        }), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({
            "error": "Not found",
            "message": "The requested resource was not found.",
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({
            "error": "Method not allowed",
            "message": "This HTTP method is not allowed for this endpoint.",
        }), 405

    @app.errorhandler(413)
    def payload_too_large(e):
        return jsonify({
            "error": "Payload too large",
            "message": "The request body exceeds the maximum allowed size.",
        }), 413

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({
            "error": e.name,
            "message": e.description,
        }), e.code

    @app.errorhandler(500)
    def internal_error(e):
        error_logger.error(
            "500 Internal Server Error:\n%s", traceback.format_exc()
        )
        return jsonify({
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
        }), 500

    @app.errorhandler(Exception)
    def catch_all(e):
        """Catch-all for any unhandled exception; never leak tracebacks."""
        error_logger.error(
            "Unhandled exception: %s\n%s", str(e), traceback.format_exc()
        )
        return jsonify({
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
        }), 500

    # ─────────────────────────────────────────────────────────────────

    # Health check
    @app.get("/health")
    def health():
        return jsonify(status="up and running"), 200

    # ── Background Schedulers ────────────────────────────────────────
    if _scheduler_allowed(config):
        try:
            from guardian.monitoring.scheduler import start_monitor_scheduler
            start_monitor_scheduler(app)
        except Exception as e:
            logging.getLogger(__name__).warning(
                "Failed to start monitor scheduler: %s", e
            )
    else:
        logging.getLogger(__name__).info(
            "Schedulers disabled for this process (SCHEDULER_ENABLED != true)"
        )
    # ─────────────────────────────────────────────────────────────────

    return app


__all__ = ["create_app", "GuardianConfig"]
