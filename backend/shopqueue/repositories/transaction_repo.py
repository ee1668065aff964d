from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import func

from shopqueue.db.base import Transaction as DbTransaction
from shopqueue.domain.entities import Transaction as DomainTransaction
from shopqueue.domain.entities import to_money
from shopqueue.domain.interfaces import ITransactionRepository

from .base import SqlAlchemyRepository


class TransactionRepository(SqlAlchemyRepository, ITransactionRepository):
    def _scoped(self, tenant_id: str):
        return self.db.query(DbTransaction).filter(DbTransaction.tenant_id == tenant_id)

    def list_by_tenant(self, tenant_id: str) -> List[DomainTransaction]:
        rows = (
            self._scoped(tenant_id)
            .order_by(DbTransaction.created_at.desc(), DbTransaction.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def get_between(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> List[DomainTransaction]:
        rows = (
            self._scoped(tenant_id)
            .filter(DbTransaction.created_at >= start, DbTransaction.created_at < end)
            .order_by(DbTransaction.created_at.desc(), DbTransaction.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def sum_total_between(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> Decimal:
        # No status filter: pending and refunded rows count towards revenue
        total = (
            self.db.query(func.coalesce(func.sum(DbTransaction.total), 0))
            .filter(
                DbTransaction.tenant_id == tenant_id,
                DbTransaction.created_at >= start,
                DbTransaction.created_at < end,
            )
            .scalar()
        )
        return to_money(total)

    def create(self, transaction: DomainTransaction) -> DomainTransaction:
        db_transaction = DbTransaction(
            tenant_id=transaction.tenant_id,
            customer_id=transaction.customer_id,
            appointment_id=transaction.appointment_id,
            total=transaction.total,
            payment_method=transaction.payment_method,
            status=transaction.status,
            created_at=transaction.created_at,
        )
        self.db.add(db_transaction)
        self._commit_unless_scoped()
        self.db.refresh(db_transaction)
        return self._to_domain(db_transaction)

    def _to_domain(self, db_transaction: DbTransaction) -> DomainTransaction:
        return DomainTransaction(
            id=db_transaction.id,
            tenant_id=db_transaction.tenant_id,
            customer_id=db_transaction.customer_id,
            appointment_id=db_transaction.appointment_id,
            total=db_transaction.total,
            payment_method=db_transaction.payment_method,
            status=db_transaction.status,
            created_at=db_transaction.created_at,
        )
