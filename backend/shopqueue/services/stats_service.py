"""
Aggregation service: today's dashboard figures for one tenant.

The clock is read exactly once per call, so the four figures can never
straddle two different midnights, and all queries run in one read
snapshot. Any failure fails the whole call.
"""

import time
from decimal import ROUND_HALF_UP, Decimal

from shopqueue.core.logging_config import log_performance
from shopqueue.domain.entities import DashboardStats
from shopqueue.domain.interfaces import (
    IAppointmentReader,
    IQueueReader,
    ITenantRepository,
    ITransactionReader,
)
from shopqueue.utils.time_window import Clock, day_window, system_clock

from .tenant_context import require_tenant


def average_minutes(estimates) -> int:
    """Mean of the stored estimates, rounded half up; missing ones count as 0."""
    values = [e or 0 for e in estimates]
    if not values:
        return 0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StatsService:
    def __init__(
        self,
        tenant_repo: ITenantRepository,
        queue_repo: IQueueReader,
        appointment_repo: IAppointmentReader,
        transaction_repo: ITransactionReader,
        clock: Clock = system_clock,
    ) -> None:
        self.tenant_repo = tenant_repo
        self.queue_repo = queue_repo
        self.appointment_repo = appointment_repo
        self.transaction_repo = transaction_repo
        self.clock = clock

    def stats(self, tenant_id: str) -> DashboardStats:
        """Compute ``todayQueueCount``, ``todayAppointmentCount``,
        ``averageWaitTime`` and ``todayRevenue``.

        ``averageWaitTime`` covers every current queue entry, not just
        today's; ``todayRevenue`` sums every transaction in the window
        whatever its status.

        Raises:
            TenantNotFoundError: unknown tenant
        """
        started = time.perf_counter()

        with self.tenant_repo.snapshot():
            _, tz = require_tenant(self.tenant_repo, tenant_id)
            window = day_window(self.clock(), tz)

            stats = DashboardStats(
                today_queue_count=self.queue_repo.count_joined_between(
                    tenant_id, window.start, window.end
                ),
                today_appointment_count=self.appointment_repo.count_between(
                    tenant_id, window.start, window.end
                ),
                average_wait_time=average_minutes(
                    self.queue_repo.estimated_wait_times(tenant_id)
                ),
                today_revenue=self.transaction_repo.sum_total_between(
                    tenant_id, window.start, window.end
                ),
                window=window,
            )

        log_performance(
            "stats",
            (time.perf_counter() - started) * 1000,
            tenant_id=tenant_id,
            window_start=window.start.isoformat(),
        )
        return stats
