"""
Domain package - pure business logic layer.

This package contains:
- entities.py: Domain entities, status state machines and value helpers
- interfaces.py: Tenant-scoped Entity Store contracts
"""

from .entities import (
    Appointment,
    AppointmentPatch,
    AppointmentStatus,
    Customer,
    DashboardStats,
    DayWindow,
    PaymentMethod,
    QueueEntry,
    QueueStatus,
    Service,
    Tenant,
    Transaction,
    TransactionStatus,
)
from .interfaces import (
    IAppointmentRepository,
    ICustomerRepository,
    IQueueRepository,
    IServiceRepository,
    ITenantRepository,
    ITransactionRepository,
    IUnitOfWork,
)

__all__ = [
    # Domain entities
    "Tenant",
    "Customer",
    "Service",
    "Appointment",
    "AppointmentPatch",
    "QueueEntry",
    "Transaction",
    "DashboardStats",
    "DayWindow",
    # State machines and enumerations
    "QueueStatus",
    "AppointmentStatus",
    "PaymentMethod",
    "TransactionStatus",
    # Repository interfaces
    "IUnitOfWork",
    "ITenantRepository",
    "ICustomerRepository",
    "IServiceRepository",
    "IQueueRepository",
    "IAppointmentRepository",
    "ITransactionRepository",
]
