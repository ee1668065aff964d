"""
Abstract interfaces for the Entity Store, following Interface Segregation.

Every read and write is scoped by tenant: an id that exists under another
tenant resolves to ``None`` exactly like an id that does not exist at all.
Writers never commit on their own inside ``atomic()``; the scope commits or
rolls back the whole unit.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import ContextManager, Dict, List, Mapping, Optional

from .entities import Appointment, Customer, QueueEntry, Service, Tenant, Transaction


class IUnitOfWork(ABC):
    """Transaction boundaries shared by all repositories bound to one session."""

    @abstractmethod
    def atomic(self, tenant_id: str) -> ContextManager:
        """Serialized, all-or-nothing write scope for one tenant."""
        pass

    @abstractmethod
    def snapshot(self) -> ContextManager:
        """Read scope in which every query sees the same committed state."""
        pass


class ITenantReader(ABC):
    @abstractmethod
    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        """Get tenant by its external identity."""
        pass


class ITenantWriter(ABC):
    @abstractmethod
    def create(self, tenant: Tenant) -> Tenant:
        """Create a tenant (done by the onboarding collaborator)."""
        pass


class ITenantRepository(ITenantReader, ITenantWriter, IUnitOfWork):
    pass


class ICustomerReader(ABC):
    @abstractmethod
    def get_by_id(self, tenant_id: str, customer_id: int) -> Optional[Customer]:
        pass

    @abstractmethod
    def list_by_tenant(self, tenant_id: str) -> List[Customer]:
        pass


class ICustomerWriter(ABC):
    @abstractmethod
    def create(self, customer: Customer) -> Customer:
        pass


class ICustomerRepository(ICustomerReader, ICustomerWriter):
    pass


class IServiceReader(ABC):
    @abstractmethod
    def get_by_id(self, tenant_id: str, service_id: int) -> Optional[Service]:
        """Get a service, active or not; inactive services stay resolvable."""
        pass

    @abstractmethod
    def list_by_tenant(
        self, tenant_id: str, include_inactive: bool = False
    ) -> List[Service]:
        pass


class IServiceWriter(ABC):
    @abstractmethod
    def create(self, service: Service) -> Service:
        pass

    @abstractmethod
    def deactivate(self, tenant_id: str, service_id: int) -> Optional[Service]:
        """Soft delete: flip ``is_active`` off."""
        pass


class IServiceRepository(IServiceReader, IServiceWriter):
    pass


class IQueueReader(ABC):
    @abstractmethod
    def get_by_id(self, tenant_id: str, entry_id: int) -> Optional[QueueEntry]:
        pass

    @abstractmethod
    def list_by_tenant(self, tenant_id: str) -> List[QueueEntry]:
        """All entries of the tenant ordered by position."""
        pass

    @abstractmethod
    def list_active(self, tenant_id: str) -> List[QueueEntry]:
        """Waiting and in-progress entries ordered by position."""
        pass

    @abstractmethod
    def count_active(self, tenant_id: str) -> int:
        pass

    @abstractmethod
    def count_waiting(self, tenant_id: str) -> int:
        pass

    @abstractmethod
    def count_joined_between(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> int:
        """Entries whose ``joined_at`` falls in ``[start, end)``."""
        pass

    @abstractmethod
    def estimated_wait_times(self, tenant_id: str) -> List[Optional[int]]:
        """Stored estimate of every current entry, any status."""
        pass


class IQueueWriter(IUnitOfWork):
    @abstractmethod
    def add(self, entry: QueueEntry) -> QueueEntry:
        pass

    @abstractmethod
    def update_status(self, tenant_id: str, entry_id: int, status: str) -> QueueEntry:
        pass

    @abstractmethod
    def set_positions(self, tenant_id: str, positions: Mapping[int, int]) -> None:
        """Apply ``{entry_id: new_position}`` in one flush."""
        pass

    @abstractmethod
    def delete(self, tenant_id: str, entry_id: int) -> bool:
        pass


class IQueueRepository(IQueueReader, IQueueWriter):
    pass


class IAppointmentReader(ABC):
    @abstractmethod
    def get_by_id(self, tenant_id: str, appointment_id: int) -> Optional[Appointment]:
        pass

    @abstractmethod
    def list_by_tenant(self, tenant_id: str) -> List[Appointment]:
        """All appointments, newest start time first."""
        pass

    @abstractmethod
    def get_by_date_range(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> List[Appointment]:
        """Appointments starting in ``[start, end)``, earliest first."""
        pass

    @abstractmethod
    def count_between(self, tenant_id: str, start: datetime, end: datetime) -> int:
        pass

    @abstractmethod
    def count_by_service(self, tenant_id: str) -> Dict[int, int]:
        pass


class IAppointmentWriter(IUnitOfWork):
    @abstractmethod
    def create(self, appointment: Appointment) -> Appointment:
        pass

    @abstractmethod
    def update(self, appointment: Appointment) -> Appointment:
        pass

    @abstractmethod
    def delete(self, tenant_id: str, appointment_id: int) -> bool:
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter):
    pass


class ITransactionReader(ABC):
    @abstractmethod
    def list_by_tenant(self, tenant_id: str) -> List[Transaction]:
        """All transactions, newest first."""
        pass

    @abstractmethod
    def get_between(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> List[Transaction]:
        pass

    @abstractmethod
    def sum_total_between(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> Decimal:
        """Sum of ``total`` in ``[start, end)`` regardless of status."""
        pass


class ITransactionWriter(IUnitOfWork):
    @abstractmethod
    def create(self, transaction: Transaction) -> Transaction:
        pass


class ITransactionRepository(ITransactionReader, ITransactionWriter):
    pass
