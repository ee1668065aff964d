"""Queue repository: tenant-scoped persistence for walk-in entries.

Position arithmetic lives in ``QueueService``; this class only reads and
writes rows. Writes flush inside ``atomic()`` and are committed by it.
"""

from datetime import datetime
from typing import List, Mapping, Optional

from shopqueue.db.base import QueueEntry as DbQueueEntry
from shopqueue.domain.entities import QueueEntry as DomainQueueEntry
from shopqueue.domain.entities import QueueStatus
from shopqueue.domain.interfaces import IQueueRepository

from .base import SqlAlchemyRepository


class QueueRepository(SqlAlchemyRepository, IQueueRepository):
    def _scoped(self, tenant_id: str):
        return self.db.query(DbQueueEntry).filter(DbQueueEntry.tenant_id == tenant_id)

    def _active(self, tenant_id: str):
        return self._scoped(tenant_id).filter(
            DbQueueEntry.status.in_(QueueStatus.ACTIVE)
        )

    def _get_row(self, tenant_id: str, entry_id: int) -> Optional[DbQueueEntry]:
        return self._scoped(tenant_id).filter(DbQueueEntry.id == entry_id).first()

    def get_by_id(self, tenant_id: str, entry_id: int) -> Optional[DomainQueueEntry]:
        row = self._get_row(tenant_id, entry_id)
        return self._to_domain(row) if row else None

    def list_by_tenant(self, tenant_id: str) -> List[DomainQueueEntry]:
        rows = (
            self._scoped(tenant_id)
            .order_by(DbQueueEntry.position.asc(), DbQueueEntry.id.asc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def list_active(self, tenant_id: str) -> List[DomainQueueEntry]:
        rows = (
            self._active(tenant_id)
            .order_by(DbQueueEntry.position.asc(), DbQueueEntry.id.asc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def count_active(self, tenant_id: str) -> int:
        return self._active(tenant_id).count()

    def count_waiting(self, tenant_id: str) -> int:
        return (
            self._scoped(tenant_id)
            .filter(DbQueueEntry.status == QueueStatus.WAITING)
            .count()
        )

    def count_joined_between(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> int:
        return (
            self._scoped(tenant_id)
            .filter(DbQueueEntry.joined_at >= start, DbQueueEntry.joined_at < end)
            .count()
        )

    def estimated_wait_times(self, tenant_id: str) -> List[Optional[int]]:
        rows = self.db.query(DbQueueEntry.estimated_wait_time).filter(
            DbQueueEntry.tenant_id == tenant_id
        )
        return [r[0] for r in rows.all()]

    def add(self, entry: DomainQueueEntry) -> DomainQueueEntry:
        row = DbQueueEntry(
            tenant_id=entry.tenant_id,
            customer_id=entry.customer_id,
            service_id=entry.service_id,
            barber=entry.barber,
            position=entry.position,
            status=entry.status,
            estimated_wait_time=entry.estimated_wait_time,
            joined_at=entry.joined_at,
        )
        self.db.add(row)
        self._commit_unless_scoped()
        self.db.refresh(row)
        return self._to_domain(row)

    def update_status(
        self, tenant_id: str, entry_id: int, status: str
    ) -> DomainQueueEntry:
        row = self._get_row(tenant_id, entry_id)
        if row is None:
            raise LookupError(f"Queue entry {entry_id} vanished during update")
        row.status = status
        self._commit_unless_scoped()
        return self._to_domain(row)

    def set_positions(self, tenant_id: str, positions: Mapping[int, int]) -> None:
        if not positions:
            return
        rows = (
            self._scoped(tenant_id)
            .filter(DbQueueEntry.id.in_(list(positions.keys())))
            .all()
        )
        for row in rows:
            row.position = positions[row.id]
        self._commit_unless_scoped()

    def delete(self, tenant_id: str, entry_id: int) -> bool:
        row = self._get_row(tenant_id, entry_id)
        if not row:
            return False
        self.db.delete(row)
        self._commit_unless_scoped()
        return True

    def _to_domain(self, row: DbQueueEntry) -> DomainQueueEntry:
        return DomainQueueEntry(
            id=row.id,
            tenant_id=row.tenant_id,
            customer_id=row.customer_id,
            service_id=row.service_id,
            barber=row.barber,
            position=row.position,
            status=row.status,
            estimated_wait_time=row.estimated_wait_time,
            joined_at=row.joined_at,
            updated_at=row.updated_at,
        )
