"""
Repository test factories following Interface Segregation Principle.

This module provides mock factories for the Entity Store interfaces so
service tests only depend on the specific interfaces they need. Unit of
work scopes (``atomic``/``snapshot``) are MagicMocks so ``with`` works and
exceptions propagate.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from unittest.mock import MagicMock, Mock

from shopqueue.domain.entities import (
    Appointment,
    Customer,
    QueueEntry,
    Service,
    Tenant,
)
from shopqueue.domain.interfaces import (
    IAppointmentRepository,
    ICustomerReader,
    IQueueReader,
    IQueueRepository,
    IServiceReader,
    ITenantRepository,
    ITransactionRepository,
)


def _with_unit_of_work(mock_repo: Mock) -> Mock:
    mock_repo.atomic.return_value = MagicMock()
    mock_repo.snapshot.return_value = MagicMock()
    return mock_repo


class TenantRepositoryFactory:
    @staticmethod
    def create_mock_full(tenant: Optional[Tenant] = None) -> Mock:
        mock_repo = _with_unit_of_work(Mock(spec=ITenantRepository))
        mock_repo.get_by_id.return_value = tenant
        return mock_repo


class CustomerRepositoryFactory:
    @staticmethod
    def create_mock_reader(customer: Optional[Customer] = None) -> Mock:
        mock_reader = Mock(spec=ICustomerReader)
        mock_reader.get_by_id.return_value = customer
        mock_reader.list_by_tenant.return_value = []
        return mock_reader


class ServiceRepositoryFactory:
    @staticmethod
    def create_mock_reader(service: Optional[Service] = None) -> Mock:
        mock_reader = Mock(spec=IServiceReader)
        mock_reader.get_by_id.return_value = service
        mock_reader.list_by_tenant.return_value = []
        return mock_reader


class QueueRepositoryFactory:
    @staticmethod
    def create_mock_reader(waiting: int = 0) -> Mock:
        mock_reader = Mock(spec=IQueueReader)
        mock_reader.count_waiting.return_value = waiting
        mock_reader.count_active.return_value = 0
        mock_reader.list_active.return_value = []
        mock_reader.estimated_wait_times.return_value = []
        mock_reader.count_joined_between.return_value = 0
        return mock_reader

    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = _with_unit_of_work(Mock(spec=IQueueRepository))

        # Read operations
        mock_repo.get_by_id.return_value = None
        mock_repo.list_by_tenant.return_value = []
        mock_repo.list_active.return_value = []
        mock_repo.count_active.return_value = 0
        mock_repo.count_waiting.return_value = 0
        mock_repo.count_joined_between.return_value = 0
        mock_repo.estimated_wait_times.return_value = []

        # Write operations
        mock_repo.add.side_effect = lambda entry: entry
        mock_repo.delete.return_value = True
        return mock_repo


class AppointmentRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = _with_unit_of_work(Mock(spec=IAppointmentRepository))
        mock_repo.get_by_id.return_value = None
        mock_repo.list_by_tenant.return_value = []
        mock_repo.get_by_date_range.return_value = []
        mock_repo.count_between.return_value = 0
        mock_repo.count_by_service.return_value = {}
        mock_repo.create.side_effect = lambda appointment: appointment
        mock_repo.update.side_effect = lambda appointment: appointment
        mock_repo.delete.return_value = True
        return mock_repo


class TransactionRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = _with_unit_of_work(Mock(spec=ITransactionRepository))
        mock_repo.list_by_tenant.return_value = []
        mock_repo.get_between.return_value = []
        mock_repo.sum_total_between.return_value = Decimal("0.00")
        return mock_repo


def make_tenant(tenant_id: str = "t1", timezone: Optional[str] = "UTC") -> Tenant:
    return Tenant(id=tenant_id, business_name="Unit Barbers", timezone=timezone)


def make_service(
    service_id: int = 1, duration: int = 30, is_active: bool = True, tenant_id: str = "t1"
) -> Service:
    return Service(
        id=service_id,
        tenant_id=tenant_id,
        name=f"Service {service_id}",
        price=Decimal("20.00"),
        duration=duration,
        is_active=is_active,
    )


def make_entry(
    entry_id: int, position: int, status: str = "waiting", service_id: int = 1
) -> QueueEntry:
    return QueueEntry(
        id=entry_id,
        tenant_id="t1",
        customer_id=1,
        service_id=service_id,
        position=position,
        status=status,
        estimated_wait_time=0,
        joined_at=datetime(2024, 1, 1, 9, 0),
    )


def make_appointment(
    appointment_id: int = 1, status: str = "scheduled", start: Optional[datetime] = None
) -> Appointment:
    start = start or datetime(2024, 1, 1, 9, 0)
    return Appointment(
        id=appointment_id,
        tenant_id="t1",
        customer_id=1,
        service_id=1,
        start_time=start,
        end_time=start + timedelta(minutes=30),
        status=status,
    )
