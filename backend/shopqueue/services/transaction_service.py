"""
Transaction recording: the slice of the point-of-sale collaborator that the
revenue figures depend on.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from shopqueue.core.exceptions import NotFoundError
from shopqueue.domain.entities import Transaction, TransactionStatus
from shopqueue.domain.interfaces import (
    IAppointmentReader,
    ICustomerReader,
    ITenantReader,
    ITransactionRepository,
)
from shopqueue.utils.time_window import Clock, day_window, system_clock, to_local_naive

from .tenant_context import require_tenant

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(
        self,
        transaction_repo: ITransactionRepository,
        customer_repo: ICustomerReader,
        appointment_repo: IAppointmentReader,
        tenant_repo: ITenantReader,
        clock: Clock = system_clock,
    ) -> None:
        self.transaction_repo = transaction_repo
        self.customer_repo = customer_repo
        self.appointment_repo = appointment_repo
        self.tenant_repo = tenant_repo
        self.clock = clock

    def record(
        self,
        tenant_id: str,
        total: Decimal,
        payment_method: str,
        status: str = TransactionStatus.COMPLETED,
        customer_id: Optional[int] = None,
        appointment_id: Optional[int] = None,
    ) -> Transaction:
        """Store a transaction stamped with the current tenant-local time.

        Referenced customer and appointment must belong to the tenant.
        """
        with self.transaction_repo.atomic(tenant_id):
            _, tz = require_tenant(self.tenant_repo, tenant_id)
            if customer_id is not None and (
                self.customer_repo.get_by_id(tenant_id, customer_id) is None
            ):
                raise NotFoundError("Customer", customer_id, tenant_id)
            if appointment_id is not None and (
                self.appointment_repo.get_by_id(tenant_id, appointment_id) is None
            ):
                raise NotFoundError("Appointment", appointment_id, tenant_id)

            transaction = Transaction(
                tenant_id=tenant_id,
                total=total,
                payment_method=payment_method,
                status=status,
                customer_id=customer_id,
                appointment_id=appointment_id,
                created_at=to_local_naive(self.clock(), tz),
            )
            created = self.transaction_repo.create(transaction)

        logger.info(
            "Transaction recorded",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "transaction_id": created.id,
                    "total": str(created.total),
                    "status": created.status,
                }
            },
        )
        return created

    def list_transactions(self, tenant_id: str) -> List[Transaction]:
        require_tenant(self.tenant_repo, tenant_id)
        return self.transaction_repo.list_by_tenant(tenant_id)

    def todays_transactions(self, tenant_id: str) -> List[Transaction]:
        _, tz = require_tenant(self.tenant_repo, tenant_id)
        window = day_window(self.clock(), tz)
        return self.transaction_repo.get_between(tenant_id, window.start, window.end)
