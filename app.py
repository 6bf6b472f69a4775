"""Application factory."""

import json
import os
import uuid
from datetime import timedelta
from typing import Optional

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException, TooManyRequests

from config import Config
from models import db
from routes.auth import auth_bp
from routes.protected import protected_bp
from routes.users import users_bp
from services.exceptions import ValidationFailed
from services.lifecycle import AccountLifecycle
from services.mailer import Mailer, SMTPMailer
from services.tokens import TokenService
from storage import SQLAlchemyAccountStore

migrate = Migrate()
jwt = JWTManager()


def _seconds(value) -> Optional[timedelta]:
    seconds = int(value or 0)
    return timedelta(seconds=seconds) if seconds > 0 else None


def build_accounts(app: Flask, mailer: Optional[Mailer] = None) -> AccountLifecycle:
    """Wire the account lifecycle with its store, token service and mailer."""

    tokens = TokenService(
        session_ttl=app.config.get("JWT_ACCESS_TOKEN_EXPIRES", timedelta(hours=1)),
        verification_ttl=_seconds(app.config.get("VERIFICATION_TOKEN_TTL")),
        reset_ttl=_seconds(app.config.get("RESET_TOKEN_TTL")) or timedelta(hours=1),
    )
    return AccountLifecycle(
        SQLAlchemyAccountStore(db),
        tokens,
        mailer or SMTPMailer.from_config(app.config),
        base_url=app.config.get("PUBLIC_BASE_URL", "http://localhost:3000"),
    )


def create_app(
    config_class: type[Config] = Config, mailer: Optional[Mailer] = None
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    app.extensions["accounts"] = build_accounts(app, mailer)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "100 per 15 minutes")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Blueprints
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(protected_bp)

    @app.route("/", methods=["GET"])
    def index():
        return "Welcome to our REST API!"

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    return app


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        if isinstance(error, ValidationFailed):
            payload["errors"] = error.errors
        if isinstance(error, TooManyRequests):
            payload["detail"] = app.config.get("RATE_LIMIT_MESSAGE", error.description)
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = g.get("request_id") or str(uuid.uuid4())
        app.logger.exception("Unhandled application error", exc_info=error)
        db.session.rollback()
        payload = {
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred.",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 3000)))
