"""
Per-request wiring: one session, repositories bound to it, services on top.

Every repository of a request shares the session so a service's
``atomic()`` scope covers all of its reads and writes.
"""

from contextlib import contextmanager
from typing import Iterator
from zoneinfo import ZoneInfo

from flask import current_app
from sqlalchemy.orm import Session

from shopqueue.db.session import SessionLocal
from shopqueue.repositories import (
    AppointmentRepository,
    CustomerRepository,
    QueueRepository,
    ServiceRepository,
    TenantRepository,
    TransactionRepository,
)
from shopqueue.services import (
    AnalyticsService,
    AppointmentService,
    QueueService,
    StatsService,
    TransactionService,
)
from shopqueue.services.tenant_context import require_tenant
from shopqueue.utils.time_window import Clock, system_clock


@contextmanager
def request_session() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def app_clock() -> Clock:
    """Clock configured on the app (tests inject a frozen one)."""
    return current_app.config.get("SHOPQUEUE_CLOCK") or system_clock


def tenant_timezone(db: Session, tenant_id: str) -> ZoneInfo:
    return require_tenant(TenantRepository(db), tenant_id)[1]


def queue_service(db: Session) -> QueueService:
    return QueueService(
        queue_repo=QueueRepository(db),
        customer_repo=CustomerRepository(db),
        service_repo=ServiceRepository(db),
        tenant_repo=TenantRepository(db),
        clock=app_clock(),
    )


def appointment_service(db: Session) -> AppointmentService:
    return AppointmentService(
        appointment_repo=AppointmentRepository(db),
        customer_repo=CustomerRepository(db),
        service_repo=ServiceRepository(db),
        tenant_repo=TenantRepository(db),
        clock=app_clock(),
    )


def transaction_service(db: Session) -> TransactionService:
    return TransactionService(
        transaction_repo=TransactionRepository(db),
        customer_repo=CustomerRepository(db),
        appointment_repo=AppointmentRepository(db),
        tenant_repo=TenantRepository(db),
        clock=app_clock(),
    )


def stats_service(db: Session) -> StatsService:
    return StatsService(
        tenant_repo=TenantRepository(db),
        queue_repo=QueueRepository(db),
        appointment_repo=AppointmentRepository(db),
        transaction_repo=TransactionRepository(db),
        clock=app_clock(),
    )


def analytics_service(db: Session) -> AnalyticsService:
    return AnalyticsService(
        tenant_repo=TenantRepository(db),
        customer_repo=CustomerRepository(db),
        service_repo=ServiceRepository(db),
        appointment_repo=AppointmentRepository(db),
        transaction_repo=TransactionRepository(db),
        clock=app_clock(),
    )
