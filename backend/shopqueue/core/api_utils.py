"""
Common API utilities for consistent response formatting across all controllers.
"""

from typing import Any, Optional

from flask import abort, g, jsonify, request

from shopqueue.core.logging_config import TENANT_HEADER


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def current_tenant_id() -> str:
    """
    Tenant id of the current request.

    The upstream identity collaborator authenticates the caller and forwards
    its subject in the ``X-Tenant-ID`` header. A request without one is
    rejected with 401.
    """
    tenant_id = (request.headers.get(TENANT_HEADER) or "").strip()
    if not tenant_id:
        abort(401)
    g.tenant_id = tenant_id
    return tenant_id


def json_body() -> dict:
    """Request JSON object, or an empty dict for a missing/non-object body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
