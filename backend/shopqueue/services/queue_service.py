"""
Queue ordering engine for walk-in customers.

Keeps the positions of waiting and in-progress entries dense (``1..N``)
across every mutation and drives the waiting -> in_progress -> completed
state machine. Every write runs inside the tenant's ``atomic()`` scope, so a
multi-row renumbering is either fully applied or not at all, and two writers
of the same tenant never interleave.
"""

import logging
from typing import Dict, List, Optional

from shopqueue.core import config
from shopqueue.core.exceptions import (
    ConcurrencyConflictError,
    InvalidPositionError,
    NotFoundError,
    ValidationError,
)
from shopqueue.domain.entities import QueueEntry, QueueStatus
from shopqueue.domain.interfaces import (
    ICustomerReader,
    IQueueRepository,
    IServiceReader,
    ITenantReader,
)
from shopqueue.utils.time_window import Clock, system_clock, to_local_naive

from .tenant_context import require_tenant
from .wait_time_estimator import WaitTimeEstimator

logger = logging.getLogger(__name__)


class QueueService:
    """Application service for the per-tenant walk-in line.

    All repositories must be bound to the same session so that the reads
    and writes of one operation share the ``atomic()`` unit of work.
    """

    def __init__(
        self,
        queue_repo: IQueueRepository,
        customer_repo: ICustomerReader,
        service_repo: IServiceReader,
        tenant_repo: ITenantReader,
        estimator: Optional[WaitTimeEstimator] = None,
        clock: Clock = system_clock,
        compact_on_complete: Optional[bool] = None,
    ) -> None:
        self.queue_repo = queue_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo
        self.tenant_repo = tenant_repo
        self.estimator = estimator or WaitTimeEstimator(queue_repo, service_repo)
        self.clock = clock
        if compact_on_complete is None:
            compact_on_complete = config.QUEUE_COMPACT_ON_COMPLETE
        self.compact_on_complete = compact_on_complete

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_queue(self, tenant_id: str) -> List[QueueEntry]:
        """Every entry of the tenant, ordered by position."""
        require_tenant(self.tenant_repo, tenant_id)
        return self.queue_repo.list_by_tenant(tenant_id)

    def get_entry(self, tenant_id: str, entry_id: int) -> QueueEntry:
        entry = self.queue_repo.get_by_id(tenant_id, entry_id)
        if entry is None:
            raise NotFoundError("Queue entry", entry_id, tenant_id)
        return entry

    def live_wait_time(self, tenant_id: str, entry_id: int) -> int:
        """Current wait for an entry: summed durations of the entries ahead.

        Unlike ``estimated_wait_time`` this follows reorderings. Entries
        already being served, or done, wait 0 minutes.
        """
        require_tenant(self.tenant_repo, tenant_id)
        entry = self.get_entry(tenant_id, entry_id)
        if entry.status != QueueStatus.WAITING:
            return 0

        durations: Dict[int, int] = {}
        total = 0
        for ahead in self.queue_repo.list_active(tenant_id):
            if ahead.position >= entry.position:
                break
            if ahead.service_id not in durations:
                service = self.service_repo.get_by_id(tenant_id, ahead.service_id)
                durations[ahead.service_id] = service.duration if service else 0
            total += durations[ahead.service_id]
        return total

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def admit(
        self,
        tenant_id: str,
        customer_id: int,
        service_id: int,
        barber: Optional[str] = None,
    ) -> QueueEntry:
        """Append a walk-in at position ``N + 1`` with status ``waiting``.

        Raises:
            TenantNotFoundError: unknown tenant
            NotFoundError: customer or service not in this tenant
            ValidationError: the service is no longer offered
        """
        with self.queue_repo.atomic(tenant_id):
            _, tz = require_tenant(self.tenant_repo, tenant_id)

            if self.customer_repo.get_by_id(tenant_id, customer_id) is None:
                raise NotFoundError("Customer", customer_id, tenant_id)
            service = self.service_repo.get_by_id(tenant_id, service_id)
            if service is None:
                raise NotFoundError("Service", service_id, tenant_id)
            if not service.is_active:
                raise ValidationError(
                    "Service is not active", {"service_id": service_id}
                )

            active = self._normalize(tenant_id)
            entry = QueueEntry(
                tenant_id=tenant_id,
                customer_id=customer_id,
                service_id=service_id,
                barber=barber,
                position=len(active) + 1,
                status=QueueStatus.WAITING,
                estimated_wait_time=self.estimator.estimate(tenant_id, service_id),
                joined_at=to_local_naive(self.clock(), tz),
            )
            created = self.queue_repo.add(entry)
            self._verify_density(tenant_id)

        logger.info(
            "Walk-in admitted",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "entry_id": created.id,
                    "position": created.position,
                    "estimated_wait_time": created.estimated_wait_time,
                }
            },
        )
        return created

    def reposition(self, tenant_id: str, entry_id: int, new_position: int) -> QueueEntry:
        """Move an entry to ``new_position``; entries in between shift by one."""
        if isinstance(new_position, bool) or not isinstance(new_position, int):
            raise ValidationError("Position must be an integer", {"position": new_position})

        with self.queue_repo.atomic(tenant_id):
            require_tenant(self.tenant_repo, tenant_id)
            entry = self.get_entry(tenant_id, entry_id)
            previous = entry.position
            if not entry.is_active:
                raise ValidationError(
                    "Only waiting or in-progress entries have a position in the line",
                    {"entry_id": entry_id, "status": entry.status},
                )

            active = self._normalize(tenant_id)
            if not 1 <= new_position <= len(active):
                logger.warning(
                    "Reposition rejected",
                    extra={
                        "context": {
                            "tenant_id": tenant_id,
                            "entry_id": entry_id,
                            "position": new_position,
                            "count": len(active),
                        }
                    },
                )
                raise InvalidPositionError(new_position, len(active))

            current = next(e for e in active if e.id == entry_id)
            order = [e for e in active if e.id != entry_id]
            order.insert(new_position - 1, current)
            self._apply_order(tenant_id, order)
            self._verify_density(tenant_id)
            moved = self.get_entry(tenant_id, entry_id)

        logger.info(
            "Queue entry repositioned",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "entry_id": entry_id,
                    "from": previous,
                    "to": moved.position,
                }
            },
        )
        return moved

    def advance(self, tenant_id: str, entry_id: int) -> QueueEntry:
        """Move an entry to its single legal successor status."""
        with self.queue_repo.atomic(tenant_id):
            require_tenant(self.tenant_repo, tenant_id)
            entry = self.get_entry(tenant_id, entry_id)
            return self._transition(tenant_id, entry, QueueStatus.next_status(entry.status))

    def update_status(self, tenant_id: str, entry_id: int, status: str) -> QueueEntry:
        """Explicit-target form of ``advance``: ``status`` must be the next edge."""
        if status not in QueueStatus.ALL:
            raise ValidationError(f"Invalid queue status: {status}", {"status": status})

        with self.queue_repo.atomic(tenant_id):
            require_tenant(self.tenant_repo, tenant_id)
            entry = self.get_entry(tenant_id, entry_id)
            QueueStatus.check_transition(entry.status, status)
            return self._transition(tenant_id, entry, status)

    def remove(self, tenant_id: str, entry_id: int) -> QueueEntry:
        """Delete an entry from any state and close the gap it leaves.

        Returns the entry as it was before deletion.
        """
        with self.queue_repo.atomic(tenant_id):
            require_tenant(self.tenant_repo, tenant_id)
            entry = self.get_entry(tenant_id, entry_id)
            self.queue_repo.delete(tenant_id, entry_id)
            if entry.is_active:
                self._normalize(tenant_id)
                self._verify_density(tenant_id)

        logger.info(
            "Queue entry removed",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "entry_id": entry_id,
                    "status": entry.status,
                    "position": entry.position,
                }
            },
        )
        return entry

    def compact(self, tenant_id: str) -> List[QueueEntry]:
        """Renumber waiting and in-progress entries to ``1..N`` in current order."""
        with self.queue_repo.atomic(tenant_id):
            require_tenant(self.tenant_repo, tenant_id)
            active = self._normalize(tenant_id)
            self._verify_density(tenant_id)
        logger.info(
            "Queue compacted",
            extra={"context": {"tenant_id": tenant_id, "active": len(active)}},
        )
        return active

    # ------------------------------------------------------------------
    # Internals (must run inside atomic())
    # ------------------------------------------------------------------

    def _transition(self, tenant_id: str, entry: QueueEntry, status: str) -> QueueEntry:
        updated = self.queue_repo.update_status(tenant_id, entry.id, status)
        if status == QueueStatus.COMPLETED and self.compact_on_complete:
            self._normalize(tenant_id)
            self._verify_density(tenant_id)
        logger.info(
            "Queue entry status changed",
            extra={
                "context": {
                    "tenant_id": tenant_id,
                    "entry_id": entry.id,
                    "from": entry.status,
                    "to": status,
                }
            },
        )
        return updated

    def _normalize(self, tenant_id: str) -> List[QueueEntry]:
        """Rebuild ``1..N`` from the current relative order of active entries."""
        return self._apply_order(tenant_id, self.queue_repo.list_active(tenant_id))

    def _apply_order(self, tenant_id: str, order: List[QueueEntry]) -> List[QueueEntry]:
        changes = {
            e.id: rank for rank, e in enumerate(order, start=1) if e.position != rank
        }
        self.queue_repo.set_positions(tenant_id, changes)
        for rank, e in enumerate(order, start=1):
            e.position = rank
        return order

    def _verify_density(self, tenant_id: str) -> None:
        positions = sorted(e.position for e in self.queue_repo.list_active(tenant_id))
        if positions != list(range(1, len(positions) + 1)):
            logger.error(
                "Queue positions lost density, rolling back",
                extra={"context": {"tenant_id": tenant_id, "positions": positions}},
            )
            raise ConcurrencyConflictError(
                "Queue positions changed concurrently; no changes were applied",
                {"tenant_id": tenant_id, "positions": positions},
            )
