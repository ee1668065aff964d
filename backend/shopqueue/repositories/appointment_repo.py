"""
Appointment repository implementation following SOLID principles.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func

from shopqueue.db.base import Appointment as DbAppointment
from shopqueue.db.base import Transaction as DbTransaction
from shopqueue.domain.entities import Appointment as DomainAppointment
from shopqueue.domain.interfaces import IAppointmentRepository

from .base import SqlAlchemyRepository


class AppointmentRepository(SqlAlchemyRepository, IAppointmentRepository):
    """Repository for Appointment persistence operations.

    ``start_time``/``end_time`` are naive wall-clock values in the tenant's
    timezone; callers convert before handing entities in.
    """

    def _scoped(self, tenant_id: str):
        return self.db.query(DbAppointment).filter(DbAppointment.tenant_id == tenant_id)

    def _get_row(self, tenant_id: str, appointment_id: int) -> Optional[DbAppointment]:
        return self._scoped(tenant_id).filter(DbAppointment.id == appointment_id).first()

    def get_by_id(self, tenant_id: str, appointment_id: int) -> Optional[DomainAppointment]:
        """Get appointment by ID within the tenant."""
        db_appointment = self._get_row(tenant_id, appointment_id)
        return self._to_domain(db_appointment) if db_appointment else None

    def list_by_tenant(self, tenant_id: str) -> List[DomainAppointment]:
        rows = (
            self._scoped(tenant_id)
            .order_by(DbAppointment.start_time.desc(), DbAppointment.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def get_by_date_range(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> List[DomainAppointment]:
        """Get appointments starting in ``[start, end)``."""
        rows = (
            self._scoped(tenant_id)
            .filter(DbAppointment.start_time >= start, DbAppointment.start_time < end)
            .order_by(DbAppointment.start_time.asc(), DbAppointment.id.asc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def count_between(self, tenant_id: str, start: datetime, end: datetime) -> int:
        return (
            self._scoped(tenant_id)
            .filter(DbAppointment.start_time >= start, DbAppointment.start_time < end)
            .count()
        )

    def count_by_service(self, tenant_id: str) -> Dict[int, int]:
        rows = (
            self.db.query(DbAppointment.service_id, func.count(DbAppointment.id))
            .filter(DbAppointment.tenant_id == tenant_id)
            .group_by(DbAppointment.service_id)
            .all()
        )
        return {service_id: count for service_id, count in rows}

    def create(self, appointment: DomainAppointment) -> DomainAppointment:
        """Create a new appointment."""
        db_appointment = DbAppointment(
            tenant_id=appointment.tenant_id,
            customer_id=appointment.customer_id,
            service_id=appointment.service_id,
            barber=appointment.barber,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            status=appointment.status,
            notes=appointment.notes,
        )
        self.db.add(db_appointment)
        self._commit_unless_scoped()
        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    def update(self, appointment: DomainAppointment) -> DomainAppointment:
        """Update an existing appointment."""
        db_appointment = self._get_row(appointment.tenant_id, appointment.id)
        if db_appointment is None:
            raise LookupError(f"Appointment {appointment.id} vanished during update")

        db_appointment.customer_id = appointment.customer_id
        db_appointment.service_id = appointment.service_id
        db_appointment.barber = appointment.barber
        db_appointment.start_time = appointment.start_time
        db_appointment.end_time = appointment.end_time
        db_appointment.status = appointment.status
        db_appointment.notes = appointment.notes

        self._commit_unless_scoped()
        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    def delete(self, tenant_id: str, appointment_id: int) -> bool:
        """Hard delete; financial records keep their row with the link cleared."""
        db_appointment = self._get_row(tenant_id, appointment_id)
        if not db_appointment:
            return False
        # SQLite ignores ON DELETE SET NULL unless foreign keys are switched on
        self.db.query(DbTransaction).filter(
            DbTransaction.tenant_id == tenant_id,
            DbTransaction.appointment_id == appointment_id,
        ).update({DbTransaction.appointment_id: None}, synchronize_session="fetch")
        self.db.delete(db_appointment)
        self._commit_unless_scoped()
        return True

    def _to_domain(self, db_appointment: DbAppointment) -> DomainAppointment:
        """Convert database model to domain entity."""
        return DomainAppointment(
            id=db_appointment.id,
            tenant_id=db_appointment.tenant_id,
            customer_id=db_appointment.customer_id,
            service_id=db_appointment.service_id,
            barber=db_appointment.barber,
            start_time=db_appointment.start_time,
            end_time=db_appointment.end_time,
            status=db_appointment.status,
            notes=db_appointment.notes,
            created_at=db_appointment.created_at,
            updated_at=db_appointment.updated_at,
        )
