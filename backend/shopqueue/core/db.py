"""
Statement timing for the transactional store.

Statements slower than ``ALERT_QUERY_MS_THRESHOLD`` are logged on the
``sql.alerts`` logger with the tenant of the current request, so a slow
queue renumbering or dashboard aggregation can be traced to its shop.
Customer contact details never reach the log.
"""

import logging
import time
from typing import Any

from flask import has_request_context, request
from sqlalchemy import event
from sqlalchemy.engine import Engine

from shopqueue.core.config import get_slow_query_enabled, get_slow_query_ms
from shopqueue.core.logging_config import TENANT_HEADER

logger = logging.getLogger("sql.alerts")

_MASKED_COLUMNS = ("email", "phone", "notes")
_STATEMENT_LIMIT = 500


def _shorten(value: Any, limit: int) -> str:
    text = str(value)
    return text if len(text) <= limit else text[:limit] + "..."


def _masked(parameters: Any) -> Any:
    if isinstance(parameters, dict):
        return {
            key: "***" if any(c in str(key).lower() for c in _MASKED_COLUMNS)
            else _masked(value)
            for key, value in parameters.items()
        }
    if isinstance(parameters, (list, tuple)):
        return [_masked(p) for p in parameters]
    return _shorten(parameters, 200)


def _statement_kind(statement: str) -> str:
    head = statement.lstrip().split(None, 1)
    kind = head[0].upper() if head else "UNKNOWN"
    if kind == "SELECT" and "FOR UPDATE" in statement.upper():
        return "SELECT FOR UPDATE"
    return kind


def _tenant_of_request():
    if not has_request_context():
        return None
    return request.headers.get(TENANT_HEADER) or None


def register_query_timing(engine: Engine) -> None:
    """Attach the timing listeners to ``engine`` once."""
    if getattr(engine, "_shopqueue_query_timing", False):
        return

    @event.listens_for(engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("shopqueue_query_start", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def _stop_timer(conn, cursor, statement, parameters, context, executemany):
        starts = conn.info.get("shopqueue_query_start")
        if not starts:
            return
        elapsed_ms = (time.perf_counter() - starts.pop()) * 1000.0
        if not get_slow_query_enabled() or elapsed_ms < get_slow_query_ms():
            return
        logger.warning(
            "Slow %s statement",
            _statement_kind(statement or ""),
            extra={
                "context": {
                    "duration_ms": round(elapsed_ms, 2),
                    "statement": _shorten(statement or "", _STATEMENT_LIMIT),
                    "params": _masked(parameters),
                    "tenant_id": _tenant_of_request(),
                    "database": engine.url.database,
                }
            },
        )

    setattr(engine, "_shopqueue_query_timing", True)
