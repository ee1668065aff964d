"""
Appointment scheduler: fixed-time bookings for a tenant.

``end_time`` is never taken from the caller. It is derived from the start
time and the service duration on booking and again on every update that
touches either of them.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from shopqueue.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from shopqueue.domain.entities import (
    Appointment,
    AppointmentPatch,
    AppointmentStatus,
    Service,
)
from shopqueue.domain.interfaces import (
    IAppointmentRepository,
    ICustomerReader,
    IServiceReader,
    ITenantReader,
)
from shopqueue.utils.time_window import Clock, day_window, system_clock, to_local_naive

from .tenant_context import require_tenant

logger = logging.getLogger(__name__)


class AppointmentService:
    """Application service for appointment use-cases.

    Depends on interfaces only; all repositories share one session so each
    operation commits or rolls back as a unit.
    """

    def __init__(
        self,
        appointment_repo: IAppointmentRepository,
        customer_repo: ICustomerReader,
        service_repo: IServiceReader,
        tenant_repo: ITenantReader,
        clock: Clock = system_clock,
    ) -> None:
        self.appointment_repo = appointment_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo
        self.tenant_repo = tenant_repo
        self.clock = clock

    def book(
        self,
        tenant_id: str,
        customer_id: int,
        service_id: int,
        start_time: datetime,
        barber: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Create a ``scheduled`` appointment ending ``service.duration`` later.

        Business Rules:
        - Customer and service must belong to the tenant
        - The service must be active
        - No slot conflict check: barbers are free-text labels
        """
        if not isinstance(start_time, datetime):
            raise ValidationError("start_time is required")

        with self.appointment_repo.atomic(tenant_id):
            _, tz = require_tenant(self.tenant_repo, tenant_id)
            self._require_customer(tenant_id, customer_id)
            service = self._require_service(tenant_id, service_id, must_be_active=True)

            start = to_local_naive(start_time, tz)
            appointment = Appointment(
                tenant_id=tenant_id,
                customer_id=customer_id,
                service_id=service_id,
                barber=barber,
                start_time=start,
                end_time=service.end_time_for(start),
                status=AppointmentStatus.SCHEDULED,
                notes=notes,
            )
            created = self.appointment_repo.create(appointment)

        logger.info(
            "Appointment booked",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "appointment_id": created.id,
                    "start_time": created.start_time.isoformat(),
                    "service_id": service_id,
                }
            },
        )
        return created

    def reschedule(
        self, tenant_id: str, appointment_id: int, patch: AppointmentPatch
    ) -> Appointment:
        """Apply a partial update.

        When ``start_time`` or ``service_id`` changes, ``end_time`` is
        recomputed from the (new) service duration. A status in the patch
        goes through the same state machine as ``transition``.
        """
        with self.appointment_repo.atomic(tenant_id):
            _, tz = require_tenant(self.tenant_repo, tenant_id)
            current = self.get(tenant_id, appointment_id)
            changes = {}

            if patch.customer_id is not None and patch.customer_id != current.customer_id:
                self._require_customer(tenant_id, patch.customer_id)
                changes["customer_id"] = patch.customer_id

            service_changed = (
                patch.service_id is not None and patch.service_id != current.service_id
            )
            start = to_local_naive(patch.start_time, tz) if patch.start_time else None
            start_changed = start is not None and start != current.start_time

            if service_changed or start_changed:
                service = self._require_service(
                    tenant_id,
                    patch.service_id if service_changed else current.service_id,
                    must_be_active=service_changed,
                )
                new_start = start if start_changed else current.start_time
                changes["service_id"] = service.id
                changes["start_time"] = new_start
                changes["end_time"] = service.end_time_for(new_start)

            if patch.barber is not None:
                changes["barber"] = patch.barber
            if patch.notes is not None:
                changes["notes"] = patch.notes
            if patch.status is not None and patch.status != current.status:
                AppointmentStatus.check_transition(current.status, patch.status)
                changes["status"] = patch.status

            if not changes:
                return current
            updated = self.appointment_repo.update(replace(current, **changes))

        logger.info(
            "Appointment updated",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "appointment_id": appointment_id,
                    "fields": sorted(changes),
                }
            },
        )
        return updated

    def transition(self, tenant_id: str, appointment_id: int, new_status: str) -> Appointment:
        """Move along ``scheduled -> in_progress -> completed`` or to ``cancelled``."""
        if new_status not in AppointmentStatus.ALL:
            raise ValidationError(f"Invalid appointment status: {new_status}")

        with self.appointment_repo.atomic(tenant_id):
            require_tenant(self.tenant_repo, tenant_id)
            current = self.get(tenant_id, appointment_id)
            try:
                AppointmentStatus.check_transition(current.status, new_status)
            except InvalidTransitionError:
                logger.warning(
                    "Appointment transition rejected",
                    extra={
                        "context": {
                            "tenant_id": tenant_id,
                            "appointment_id": appointment_id,
                            "from": current.status,
                            "to": new_status,
                        }
                    },
                )
                raise
            updated = self.appointment_repo.update(replace(current, status=new_status))

        logger.info(
            "Appointment status changed",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "appointment_id": appointment_id,
                    "from": current.status,
                    "to": new_status,
                }
            },
        )
        return updated

    def todays_appointments(self, tenant_id: str) -> List[Appointment]:
        """Appointments starting in the tenant's local today, earliest first."""
        _, tz = require_tenant(self.tenant_repo, tenant_id)
        window = day_window(self.clock(), tz)
        return self.appointment_repo.get_by_date_range(tenant_id, window.start, window.end)

    def get(self, tenant_id: str, appointment_id: int) -> Appointment:
        appointment = self.appointment_repo.get_by_id(tenant_id, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id, tenant_id)
        return appointment

    def list_appointments(self, tenant_id: str) -> List[Appointment]:
        """All appointments of the tenant, latest start first."""
        require_tenant(self.tenant_repo, tenant_id)
        return self.appointment_repo.list_by_tenant(tenant_id)

    def remove(self, tenant_id: str, appointment_id: int) -> Appointment:
        """Hard delete at any status. Returns the appointment as it was."""
        with self.appointment_repo.atomic(tenant_id):
            require_tenant(self.tenant_repo, tenant_id)
            appointment = self.get(tenant_id, appointment_id)
            self.appointment_repo.delete(tenant_id, appointment_id)

        logger.info(
            "Appointment deleted",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "appointment_id": appointment_id,
                    "status": appointment.status,
                }
            },
        )
        return appointment

    def _require_customer(self, tenant_id: str, customer_id: int) -> None:
        if self.customer_repo.get_by_id(tenant_id, customer_id) is None:
            raise NotFoundError("Customer", customer_id, tenant_id)

    def _require_service(
        self, tenant_id: str, service_id: int, must_be_active: bool
    ) -> Service:
        service = self.service_repo.get_by_id(tenant_id, service_id)
        if service is None:
            raise NotFoundError("Service", service_id, tenant_id)
        if must_be_active and not service.is_active:
            raise ValidationError("Service is not active", {"service_id": service_id})
        return service
