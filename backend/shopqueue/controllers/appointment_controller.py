"""
Appointment controller for handling HTTP requests.

Handles HTTP concerns only; booking rules live in ``AppointmentService``.
"""

from flask import Blueprint

from shopqueue.controllers.dependencies import (
    appointment_service,
    request_session,
    tenant_timezone,
)
from shopqueue.core.api_utils import api_response, current_tenant_id, json_body
from shopqueue.core.limiter_config import READ_LIMIT, WRITE_LIMIT, limiter
from shopqueue.schemas.dtos import (
    AppointmentCreateRequest,
    AppointmentResponse,
    AppointmentStatusRequest,
    AppointmentUpdateRequest,
)

appointment_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointment_bp.route("", methods=["GET"])
@limiter.limit(READ_LIMIT)
def list_appointments():
    tenant_id = current_tenant_id()
    with request_session() as db:
        appointments = appointment_service(db).list_appointments(tenant_id)
        tz = tenant_timezone(db, tenant_id)
        data = [AppointmentResponse.from_domain(a, tz).to_dict() for a in appointments]
    return api_response(True, "Appointments retrieved", data)


@appointment_bp.route("/today", methods=["GET"])
@limiter.limit(READ_LIMIT)
def todays_appointments():
    """Appointments in the tenant's local today, earliest first."""
    tenant_id = current_tenant_id()
    with request_session() as db:
        appointments = appointment_service(db).todays_appointments(tenant_id)
        tz = tenant_timezone(db, tenant_id)
        data = [AppointmentResponse.from_domain(a, tz).to_dict() for a in appointments]
    return api_response(True, "Today's appointments retrieved", data)


@appointment_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def book():
    tenant_id = current_tenant_id()
    payload = AppointmentCreateRequest.from_json(json_body())
    payload.validate()
    with request_session() as db:
        appointment = appointment_service(db).book(
            tenant_id,
            payload.customer_id,
            payload.service_id,
            payload.start_time,
            barber=payload.barber,
            notes=payload.notes,
        )
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Appointment booked", AppointmentResponse.from_domain(appointment, tz).to_dict(), 201
    )


@appointment_bp.route("/<int:appointment_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def reschedule(appointment_id: int):
    tenant_id = current_tenant_id()
    payload = AppointmentUpdateRequest.from_json(json_body())
    payload.validate()
    with request_session() as db:
        appointment = appointment_service(db).reschedule(
            tenant_id, appointment_id, payload.to_patch()
        )
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Appointment updated", AppointmentResponse.from_domain(appointment, tz).to_dict()
    )


@appointment_bp.route("/<int:appointment_id>/status", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def transition(appointment_id: int):
    tenant_id = current_tenant_id()
    payload = AppointmentStatusRequest.from_json(json_body())
    payload.validate()
    with request_session() as db:
        appointment = appointment_service(db).transition(
            tenant_id, appointment_id, payload.status
        )
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Appointment status updated", AppointmentResponse.from_domain(appointment, tz).to_dict()
    )


@appointment_bp.route("/<int:appointment_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def remove(appointment_id: int):
    tenant_id = current_tenant_id()
    with request_session() as db:
        appointment = appointment_service(db).remove(tenant_id, appointment_id)
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Appointment deleted", AppointmentResponse.from_domain(appointment, tz).to_dict()
    )
