"""
Analytics service for the owner's performance page.

Weeks start on Sunday 00:00 in the tenant's timezone. Revenue follows the
dashboard rule: every transaction counts whatever its status.
"""

import time
from collections import Counter
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Tuple

from shopqueue.core.logging_config import log_performance
from shopqueue.domain.entities import Service
from shopqueue.domain.interfaces import (
    IAppointmentReader,
    ICustomerReader,
    IServiceReader,
    ITenantRepository,
    ITransactionReader,
)
from shopqueue.utils.time_window import Clock, system_clock, week_bounds

from .tenant_context import require_tenant

ONE_DECIMAL = Decimal("0.1")


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    return (Decimal(part) * 100 / Decimal(whole)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


class AnalyticsService:
    def __init__(
        self,
        tenant_repo: ITenantRepository,
        customer_repo: ICustomerReader,
        service_repo: IServiceReader,
        appointment_repo: IAppointmentReader,
        transaction_repo: ITransactionReader,
        clock: Clock = system_clock,
    ) -> None:
        self.tenant_repo = tenant_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo
        self.appointment_repo = appointment_repo
        self.transaction_repo = transaction_repo
        self.clock = clock

    def weekly_revenue(self, tenant_id: str) -> Dict[str, Decimal]:
        """This week's and last week's revenue and the change in percent.

        ``change`` is 0 when last week had no revenue.
        """
        _, tz = require_tenant(self.tenant_repo, tenant_id)
        this_start, last_start = week_bounds(self.clock(), tz)
        this_week = self.transaction_repo.sum_total_between(
            tenant_id, this_start, this_start + timedelta(days=7)
        )
        last_week = self.transaction_repo.sum_total_between(tenant_id, last_start, this_start)
        change = _percent(this_week - last_week, last_week) if last_week > 0 else Decimal("0.0")
        return {"this_week": this_week, "last_week": last_week, "change": change}

    def customer_retention(self, tenant_id: str) -> Decimal:
        """Percentage of customers that came back (``visit_count > 1``)."""
        require_tenant(self.tenant_repo, tenant_id)
        customers = self.customer_repo.list_by_tenant(tenant_id)
        if not customers:
            return Decimal("0.0")
        returning = sum(1 for c in customers if c.visit_count > 1)
        return _percent(Decimal(returning), Decimal(len(customers)))

    def popular_services(self, tenant_id: str, limit: int = 5) -> List[Tuple[Service, int]]:
        """Services ranked by appointment count, most booked first."""
        require_tenant(self.tenant_repo, tenant_id)
        counts = self.appointment_repo.count_by_service(tenant_id)
        services = self.service_repo.list_by_tenant(tenant_id, include_inactive=True)
        ranked = sorted(
            ((s, counts.get(s.id, 0)) for s in services),
            key=lambda pair: (-pair[1], pair[0].name),
        )
        return ranked[:limit]

    def peak_hours(self, tenant_id: str, limit: int = 5) -> List[Tuple[int, int]]:
        """Local start hours ranked by number of appointments."""
        require_tenant(self.tenant_repo, tenant_id)
        hours = Counter(a.start_time.hour for a in self.appointment_repo.list_by_tenant(tenant_id))
        return sorted(hours.items(), key=lambda pair: (-pair[1], pair[0]))[:limit]

    def summary(self, tenant_id: str) -> Dict[str, Any]:
        started = time.perf_counter()
        with self.tenant_repo.snapshot():
            result = {
                "weekly_revenue": self.weekly_revenue(tenant_id),
                "customer_retention": self.customer_retention(tenant_id),
                "popular_services": self.popular_services(tenant_id),
                "peak_hours": self.peak_hours(tenant_id),
            }
        log_performance(
            "analytics_summary", (time.perf_counter() - started) * 1000, tenant_id=tenant_id
        )
        return result
