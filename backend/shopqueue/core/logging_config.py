"""
Logging setup for the shopqueue engine.

Every record may carry structured data as ``extra={"context": {...}}``.
Inside a request the calling tenant and request id are merged into that
context by ``RequestContextFilter``, so service code only adds the ids it
owns (entry, appointment, positions).

Usage:
    from shopqueue.core.logging_config import setup_logging, get_logger

    setup_logging(app, log_level="INFO")
    logger = get_logger(__name__)
    logger.info("Entry admitted", extra={"context": {"entry_id": 7}})
"""

import json
import logging
import logging.handlers
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from flask import Flask, g, has_request_context, request

TENANT_HEADER = "X-Tenant-ID"

LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5


class RequestContextFilter(logging.Filter):
    """Adds ``tenant_id`` and ``request_id`` of the current request to the context."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            return True
        context = dict(getattr(record, "context", None) or {})
        context.setdefault("tenant_id", g.get("tenant_id"))
        context.setdefault("request_id", g.get("request_id"))
        record.context = context
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message and context."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line console output with the context appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items() if v is not None)
            if pairs:
                line = f"{line} [{pairs}]"
        return line


def _file_handlers(level: int) -> List[logging.Handler]:
    LOG_DIR.mkdir(exist_ok=True)
    handlers: List[logging.Handler] = []
    for filename, handler_level in (("shopqueue.log", level), ("errors.log", logging.ERROR)):
        handler = logging.handlers.RotatingFileHandler(
            LOG_DIR / filename,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUPS,
            encoding="utf-8",
        )
        handler.setLevel(handler_level)
        handler.setFormatter(JSONFormatter())
        handlers.append(handler)
    return handlers


def _install_request_hooks(app: Flask) -> None:
    access_logger = logging.getLogger("shopqueue.access")

    @app.before_request
    def _start_request():
        g.request_started = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.tenant_id = request.headers.get(TENANT_HEADER) or None

    @app.after_request
    def _log_response(response):
        started = g.get("request_started")
        if started is not None:
            access_logger.info(
                "%s %s %s",
                request.method,
                request.path,
                response.status_code,
                extra={
                    "context": {
                        "status_code": response.status_code,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    }
                },
            )
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = True,
    use_json_format: bool = False,
) -> None:
    """
    Configure the root logger and, when ``app`` is given, its access log.

    Args:
        app: Flask application whose requests should be logged
        log_level: Level name or number
        enable_sql_echo: Route SQLAlchemy's statement log through these handlers
        log_to_file: Also write rotating JSON files under ``backend/logs``
        use_json_format: JSON instead of the console format on stdout
    """
    level = log_level if isinstance(log_level, int) else getattr(
        logging, str(log_level).upper(), logging.INFO
    )

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)

    handlers: List[logging.Handler] = []
    stdout = logging.StreamHandler(sys.stdout)
    stdout.setFormatter(JSONFormatter() if use_json_format else ConsoleFormatter())
    handlers.append(stdout)

    file_error = None
    if log_to_file:
        try:
            handlers.extend(_file_handlers(level))
        except OSError as exc:
            file_error = exc

    context_filter = RequestContextFilter()
    for handler in handlers:
        handler.addFilter(context_filter)
        root.addHandler(handler)

    if file_error is not None:
        root.warning(
            "File logging unavailable, using stdout only",
            extra={"context": {"log_dir": str(LOG_DIR), "error": str(file_error)}},
        )

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if enable_sql_echo else logging.WARNING
    )
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    if app is not None:
        _install_request_hooks(app)

    logging.getLogger("shopqueue").info(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "json": use_json_format,
                "files": log_to_file and file_error is None,
            }
        },
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_performance(func_name: str, duration_ms: float, **kwargs) -> None:
    """
    Log how long an operation took.

    Args:
        func_name: Name of the operation, e.g. ``"dashboard_stats"``
        duration_ms: Elapsed milliseconds
        **kwargs: Extra context such as ``tenant_id`` or row counts
    """
    context = {"operation": func_name, "duration_ms": round(duration_ms, 2)}
    context.update(kwargs)
    get_logger("shopqueue.performance").info(
        "%s took %.2fms", func_name, duration_ms, extra={"context": context}
    )
