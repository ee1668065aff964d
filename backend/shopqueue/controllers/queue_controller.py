"""
Queue controller - HTTP surface of the walk-in line.

Handles HTTP concerns only; ordering rules live in ``QueueService``.
Engine errors propagate to the app-level handler registered in ``main``.
"""

from flask import Blueprint

from shopqueue.controllers.dependencies import queue_service, request_session, tenant_timezone
from shopqueue.core.api_utils import api_response, current_tenant_id, json_body
from shopqueue.core.limiter_config import READ_LIMIT, WRITE_LIMIT, limiter
from shopqueue.schemas.dtos import (
    QueueAdmitRequest,
    QueueEntryResponse,
    QueuePositionRequest,
    QueueStatusRequest,
)

queue_bp = Blueprint("queue", __name__, url_prefix="/api/queue")


@queue_bp.route("", methods=["GET"])
@limiter.limit(READ_LIMIT)
def list_queue():
    """List every queue entry of the tenant ordered by position."""
    tenant_id = current_tenant_id()
    with request_session() as db:
        entries = queue_service(db).list_queue(tenant_id)
        tz = tenant_timezone(db, tenant_id)
        data = [QueueEntryResponse.from_domain(e, tz).to_dict() for e in entries]
    return api_response(True, "Queue retrieved", data)


@queue_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def admit():
    """Admit a walk-in at the end of the line."""
    tenant_id = current_tenant_id()
    payload = QueueAdmitRequest.from_json(json_body())
    payload.validate()
    with request_session() as db:
        entry = queue_service(db).admit(
            tenant_id, payload.customer_id, payload.service_id, payload.barber
        )
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Customer added to queue", QueueEntryResponse.from_domain(entry, tz).to_dict(), 201
    )


@queue_bp.route("/<int:entry_id>/position", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def reposition(entry_id: int):
    tenant_id = current_tenant_id()
    payload = QueuePositionRequest.from_json(json_body())
    payload.validate()
    with request_session() as db:
        entry = queue_service(db).reposition(tenant_id, entry_id, payload.position)
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Queue entry moved", QueueEntryResponse.from_domain(entry, tz).to_dict()
    )


@queue_bp.route("/<int:entry_id>/status", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def update_status(entry_id: int):
    tenant_id = current_tenant_id()
    payload = QueueStatusRequest.from_json(json_body())
    payload.validate()
    with request_session() as db:
        entry = queue_service(db).update_status(tenant_id, entry_id, payload.status)
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Queue entry updated", QueueEntryResponse.from_domain(entry, tz).to_dict()
    )


@queue_bp.route("/<int:entry_id>/advance", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def advance(entry_id: int):
    tenant_id = current_tenant_id()
    with request_session() as db:
        entry = queue_service(db).advance(tenant_id, entry_id)
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Queue entry advanced", QueueEntryResponse.from_domain(entry, tz).to_dict()
    )


@queue_bp.route("/<int:entry_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def remove(entry_id: int):
    tenant_id = current_tenant_id()
    with request_session() as db:
        entry = queue_service(db).remove(tenant_id, entry_id)
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Queue entry removed", QueueEntryResponse.from_domain(entry, tz).to_dict()
    )


@queue_bp.route("/<int:entry_id>/wait-time", methods=["GET"])
@limiter.limit(READ_LIMIT)
def wait_time(entry_id: int):
    """Live wait for an entry, following reorderings since admission."""
    tenant_id = current_tenant_id()
    with request_session() as db:
        minutes = queue_service(db).live_wait_time(tenant_id, entry_id)
    return api_response(True, "Wait time computed", {"id": entry_id, "waitTime": minutes})
