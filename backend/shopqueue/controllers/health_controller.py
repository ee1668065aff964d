"""
Health controller - health check endpoint for monitoring.
"""

import logging

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shopqueue.controllers.dependencies import request_session
from shopqueue.core.limiter_config import limiter

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
@limiter.exempt
def health_check():
    """
    Ping the database.

    Returns:
        200 with ``{"status": "healthy", "database": "connected"}`` or 503
        when the store cannot be reached. No authentication required.
    """
    try:
        with request_session() as db:
            db.execute(text("SELECT 1"))
        db_status = True
    except SQLAlchemyError as e:
        logger.error(
            "Health check: database unreachable",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        db_status = False

    return jsonify(
        {
            "status": "healthy" if db_status else "unhealthy",
            "database": "connected" if db_status else "disconnected",
        }
    ), (200 if db_status else 503)
