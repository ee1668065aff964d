import logging
import os

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()

from shopqueue.core.api_utils import api_response  # noqa: E402
from shopqueue.core.exceptions import ShopQueueError  # noqa: E402

logger = logging.getLogger(__name__)

HTTP_MESSAGES = {
    401: "Missing or empty X-Tenant-ID header",
    404: "Resource not found",
    405: "Method not allowed",
    429: "Rate limit exceeded",
}


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ShopQueueError)
    def handle_engine_error(error: ShopQueueError):
        log = logger.warning if error.status_code < 500 else logger.error
        log(
            error.message,
            extra={"context": {"error": error.code, **error.details}},
        )
        return api_response(False, error.message, error.to_dict(), error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        message = HTTP_MESSAGES.get(error.code, error.description)
        return api_response(False, message, None, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        if app.config.get("SENTRY_ENABLED"):
            import sentry_sdk

            sentry_sdk.capture_exception(error)
        logger.error(
            "Unhandled error",
            extra={"context": {"error_type": type(error).__name__}},
            exc_info=True,
        )
        return api_response(False, "Internal server error", None, 500)


def _init_error_tracking(app: Flask, env: str) -> None:
    """Report unhandled errors to Sentry when ``SENTRY_DSN`` is set."""
    sentry_dsn = os.getenv("SENTRY_DSN")
    app.config["SENTRY_ENABLED"] = bool(sentry_dsn)
    if not sentry_dsn:
        logger.info(
            "Sentry not initialized (SENTRY_DSN not set)",
            extra={"context": {"environment": env}},
        )
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    release = os.getenv("GIT_SHA", "unknown")
    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=env,
        release=release,
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        send_default_pii=False,
    )
    logger.info(
        "Sentry initialized",
        extra={"context": {"environment": env, "release": release}},
    )


def create_app(testing: bool = False, clock=None) -> Flask:
    """Application factory.

    Args:
        testing: Force TESTING mode (also enabled by the TESTING env var)
        clock: Optional clock returning aware datetimes; defaults to system time
    """
    env = os.getenv("FLASK_ENV", "development")
    is_production = env == "production"

    app = Flask(__name__)

    testing_env = os.getenv("TESTING", "").lower().strip()
    if testing or testing_env in ("true", "1", "yes"):
        app.config["TESTING"] = True
    if clock is not None:
        app.config["SHOPQUEUE_CLOCK"] = clock

    # Configure structured logging (after app creation so we can register hooks)
    from shopqueue.core.config import get_log_json, get_log_level, get_log_to_file
    from shopqueue.core.logging_config import setup_logging

    setup_logging(
        app=app,
        log_level=get_log_level(),
        enable_sql_echo=False,
        log_to_file=get_log_to_file() and not app.config.get("TESTING"),
        use_json_format=is_production or get_log_json(),
    )

    from shopqueue.core.config import log_queue_config, log_timezone_config

    log_timezone_config()
    log_queue_config()

    _init_error_tracking(app, env)

    # Initialize Flask-Limiter (rate limiting)
    from shopqueue.core.config import get_rate_limit_enabled
    from shopqueue.core.limiter_config import limiter

    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_STORAGE_URI", "memory://")
    app.config["RATELIMIT_ENABLED"] = get_rate_limit_enabled()
    limiter.init_app(app)
    if not get_rate_limit_enabled():
        limiter.enabled = False
        logger.info("Rate limiting disabled", extra={"context": {"testing": app.config.get("TESTING", False)}})

    # Ensure the schema exists (no-op when tables are already there)
    from shopqueue.db.session import create_tables

    create_tables()

    from shopqueue.controllers import (
        appointment_bp,
        dashboard_bp,
        health_bp,
        queue_bp,
        transaction_bp,
    )

    app.register_blueprint(queue_bp)
    app.register_blueprint(appointment_bp)
    app.register_blueprint(transaction_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(health_bp)

    _register_error_handlers(app)

    logger.info(
        "Application created",
        extra={"context": {"environment": env, "testing": app.config.get("TESTING", False)}},
    )
    return app


if __name__ == "__main__":
    create_app().run(debug=os.getenv("FLASK_ENV", "development") != "production")
