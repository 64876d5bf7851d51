import logging
import os
import re

from dotenv import load_dotenv

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()

from flask import Flask  # noqa: E402
from sqlalchemy import text  # noqa: E402

from kingdom_hospital.core.api_utils import IdConverter, api_response  # noqa: E402
from kingdom_hospital.core.config import (  # noqa: E402
    get_database_url,
    get_log_settings,
    is_testing,
    log_runtime_config,
    rate_limit_enabled,
    seed_on_startup,
)
from kingdom_hospital.core.validation import ValidationError  # noqa: E402

logger = logging.getLogger(__name__)


def _mask_url_password(url: str) -> str:
    """Hide the password part of a database URL before logging it."""
    return re.sub(r"(://[^:/?#]+):[^@]*@", r"\1:***@", url)


def check_database_connection() -> bool:
    """Return True if the database answers a trivial query."""
    from kingdom_hospital.db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(
            "Database connection failed",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        return False


def _register_error_handlers(app: Flask) -> None:
    """JSON envelopes for every error the API can produce."""

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        return api_response(False, error.message, None, 400)

    @app.errorhandler(404)
    def handle_not_found(error):
        return api_response(False, "Resource not found", None, 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return api_response(False, "Method not allowed", None, 405)

    @app.errorhandler(429)
    def handle_rate_limited(error):
        logger.warning(
            "Rate limit exceeded",
            extra={"context": {"limit": str(getattr(error, "description", ""))}},
        )
        return api_response(False, "Too many requests", None, 429)

    @app.errorhandler(500)
    def handle_internal_error(error):
        logger.error(
            "Unhandled error",
            extra={"context": {"error": str(error)}},
            exc_info=True,
        )
        return api_response(False, "Internal server error", None, 500)


def create_app() -> Flask:
    """Application factory: logging, rate limiting, blueprints, schema and seed."""
    app = Flask(__name__)
    app.config["JSON_SORT_KEYS"] = False
    if is_testing():
        app.config["TESTING"] = True

    # Configure structured logging (after app creation so we can register hooks)
    from kingdom_hospital.core.logging_config import setup_logging

    setup_logging(app=app, **get_log_settings())
    log_runtime_config()
    logger.info(
        "Database configured",
        extra={"context": {"database_url": _mask_url_password(get_database_url())}},
    )

    # Rate limiting
    from kingdom_hospital.core.limiter_config import limiter

    # Flask-Limiter reads RATELIMIT_ENABLED on every init_app call
    app.config["RATELIMIT_ENABLED"] = rate_limit_enabled()
    limiter.init_app(app)
    if not app.config["RATELIMIT_ENABLED"]:
        logger.info("Rate limiting disabled", extra={"context": {"testing": is_testing()}})

    app.url_map.converters["id"] = IdConverter
    from kingdom_hospital.controllers import ALL_BLUEPRINTS

    for blueprint in ALL_BLUEPRINTS:
        app.register_blueprint(blueprint)

    _register_error_handlers(app)

    # Schema and reference data
    from kingdom_hospital.db.seed import ensure_default_specialties
    from kingdom_hospital.db.session import create_tables

    create_tables()
    if seed_on_startup():
        ensure_default_specialties()

    logger.info(
        "Application created",
        extra={"context": {"blueprints": [bp.name for bp in ALL_BLUEPRINTS]}},
    )
    return app
