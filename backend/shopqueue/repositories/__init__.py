from .appointment_repo import AppointmentRepository
from .customer_repo import CustomerRepository
from .queue_repo import QueueRepository
from .service_repo import ServiceRepository
from .tenant_repo import TenantRepository
from .transaction_repo import TransactionRepository

__all__ = [
    "TenantRepository",
    "CustomerRepository",
    "ServiceRepository",
    "QueueRepository",
    "AppointmentRepository",
    "TransactionRepository",
]
