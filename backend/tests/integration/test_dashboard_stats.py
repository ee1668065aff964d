"""
Integration tests for the dashboard aggregation.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shopqueue.core.exceptions import TenantNotFoundError
from shopqueue.domain.entities import Transaction
from shopqueue.repositories import (
    AppointmentRepository,
    QueueRepository,
    TenantRepository,
    TransactionRepository,
)
from shopqueue.services import StatsService
from tests.conftest import OTHER_TENANT_ID, TENANT_ID, FrozenClock, seed_tenant


class TickingClock(FrozenClock):
    """Moves one second forward every time it is read."""

    def __call__(self) -> datetime:
        moment = super().__call__()
        self.advance(seconds=1)
        return moment


def _transaction(total, status, created_at, tenant_id=TENANT_ID):
    return Transaction(
        tenant_id=tenant_id,
        total=Decimal(total),
        payment_method="cash",
        status=status,
        created_at=created_at,
    )


class TestRevenue:
    def test_pending_and_completed_both_count(self, stats_service, transaction_service, tenant_data):
        transaction_service.record(TENANT_ID, Decimal("20.00"), "cash", status="pending")
        transaction_service.record(TENANT_ID, Decimal("35.00"), "card", status="completed")

        stats = stats_service.stats(TENANT_ID)

        assert stats.today_revenue == Decimal("55.00")

    def test_refunded_counts_too(self, stats_service, transaction_service, tenant_data):
        transaction_service.record(TENANT_ID, Decimal("10.00"), "cash", status="refunded")
        assert stats_service.stats(TENANT_ID).today_revenue == Decimal("10.00")

    def test_yesterday_and_tomorrow_excluded(self, stats_service, db_session, tenant_data):
        repo = TransactionRepository(db_session)
        repo.create(_transaction("5.00", "completed", datetime(2023, 12, 31, 23, 59, 59)))
        repo.create(_transaction("7.00", "completed", datetime(2024, 1, 1, 0, 0)))
        repo.create(_transaction("9.00", "completed", datetime(2024, 1, 2, 0, 0)))

        assert stats_service.stats(TENANT_ID).today_revenue == Decimal("7.00")

    def test_no_transactions_is_zero(self, stats_service, tenant_data):
        assert stats_service.stats(TENANT_ID).today_revenue == Decimal("0.00")


class TestCounts:
    def test_queue_and_appointment_counts(
        self, stats_service, queue_service, appointment_service, haircut, customers
    ):
        for customer in customers:
            queue_service.admit(TENANT_ID, customer.id, haircut.id)
        appointment_service.book(TENANT_ID, customers[0].id, haircut.id, datetime(2024, 1, 1, 9, 0))
        appointment_service.book(TENANT_ID, customers[1].id, haircut.id, datetime(2024, 1, 1, 16, 0))
        appointment_service.book(TENANT_ID, customers[2].id, haircut.id, datetime(2024, 1, 2, 9, 0))

        stats = stats_service.stats(TENANT_ID)

        assert stats.today_queue_count == 3
        assert stats.today_appointment_count == 2
        assert stats.average_wait_time == 30

    def test_average_covers_entries_in_any_status(
        self, stats_service, queue_service, haircut, customers
    ):
        entries = [queue_service.admit(TENANT_ID, c.id, haircut.id) for c in customers]
        queue_service.advance(TENANT_ID, entries[0].id)
        queue_service.advance(TENANT_ID, entries[0].id)

        # estimates 0, 30, 60 stay on the rows whatever their status
        assert stats_service.stats(TENANT_ID).average_wait_time == 30

    def test_empty_queue_average_is_zero(self, stats_service, tenant_data):
        stats = stats_service.stats(TENANT_ID)
        assert stats.average_wait_time == 0
        assert stats.today_queue_count == 0

    def test_other_tenants_are_invisible(
        self, stats_service, queue_service, transaction_service, other_tenant_data, tenant_data
    ):
        queue_service.admit(
            OTHER_TENANT_ID,
            other_tenant_data["customers"][0].id,
            other_tenant_data["haircut"].id,
        )
        transaction_service.record(OTHER_TENANT_ID, Decimal("99.00"), "cash")

        stats = stats_service.stats(TENANT_ID)

        assert stats.today_queue_count == 0
        assert stats.today_revenue == Decimal("0.00")


class TestWindow:
    def test_unknown_tenant(self, stats_service):
        with pytest.raises(TenantNotFoundError):
            stats_service.stats("nobody")

    def test_tenant_timezone_decides_today(self, db_session, tenant_data):
        seed_tenant(db_session, tenant_id="tenant-ny", timezone_name="America/New_York")
        repo = TransactionRepository(db_session)
        # 22:00 local on Jan 1 in New York is 03:00 UTC on Jan 2
        repo.create(_transaction("12.00", "completed", datetime(2024, 1, 1, 22, 0), "tenant-ny"))
        clock = FrozenClock(datetime(2024, 1, 2, 3, 30, tzinfo=timezone.utc))
        service = StatsService(
            tenant_repo=TenantRepository(db_session),
            queue_repo=QueueRepository(db_session),
            appointment_repo=AppointmentRepository(db_session),
            transaction_repo=TransactionRepository(db_session),
            clock=clock,
        )

        stats = service.stats("tenant-ny")

        assert stats.window.start == datetime(2024, 1, 1)
        assert stats.today_revenue == Decimal("12.00")

    def test_figures_cannot_straddle_midnight(self, db_session, tenant_data):
        repo = TransactionRepository(db_session)
        repo.create(_transaction("20.00", "completed", datetime(2024, 1, 1, 23, 0)))
        repo.create(_transaction("30.00", "completed", datetime(2024, 1, 2, 0, 0, 5)))
        clock = TickingClock(datetime(2024, 1, 1, 23, 59, 59, tzinfo=timezone.utc))
        service = StatsService(
            tenant_repo=TenantRepository(db_session),
            queue_repo=QueueRepository(db_session),
            appointment_repo=AppointmentRepository(db_session),
            transaction_repo=TransactionRepository(db_session),
            clock=clock,
        )

        stats = service.stats(TENANT_ID)

        assert clock.calls == 1
        assert stats.window.start == datetime(2024, 1, 1)
        assert stats.window.end == stats.window.start + timedelta(days=1)
        assert stats.today_revenue == Decimal("20.00")
