"""
Central pytest configuration for the shopqueue tests.

Provides an isolated in-memory SQLite store per test, seeded tenant data,
a controllable clock, engine services bound to one session and a Flask
test client backed by its own database file.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to sys.path so ``shopqueue`` imports without install
backend_root = Path(__file__).parent.parent  # backend/
sys.path.insert(0, str(backend_root))

# Test environment (set early so import-time settings use it)
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"  # Disable rate limiting in tests
os.environ["LOG_TO_FILE"] = "0"
os.environ.setdefault("TZ", "UTC")

from shopqueue.db import base  # noqa: E402,F401  populate metadata
from shopqueue.db.session import Base, reset_engine  # noqa: E402
from shopqueue.domain.entities import Customer, Service, Tenant  # noqa: E402
from shopqueue.repositories import (  # noqa: E402
    AppointmentRepository,
    CustomerRepository,
    QueueRepository,
    ServiceRepository,
    TenantRepository,
    TransactionRepository,
)
from shopqueue.services import (  # noqa: E402
    AnalyticsService,
    AppointmentService,
    QueueService,
    StatsService,
    TransactionService,
)

from tests.config.markers import *  # noqa: E402,F401,F403

TENANT_ID = "tenant-t"
OTHER_TENANT_ID = "tenant-other"


class FrozenClock:
    """Clock returning a fixed aware instant until moved explicitly."""

    def __init__(self, moment: datetime):
        self.moment = moment
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment = self.moment + timedelta(**kwargs)


# =====================================================
# DATABASE FIXTURES
# =====================================================


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =====================================================
# DOMAIN DATA FIXTURES
# =====================================================


def seed_tenant(session, tenant_id=TENANT_ID, timezone_name="UTC"):
    """Create a tenant with Haircut (30 min) and Shave (15 min) and three customers."""
    TenantRepository(session).create(
        Tenant(id=tenant_id, business_name="Test Barbers", timezone=timezone_name)
    )
    services_repo = ServiceRepository(session)
    haircut = services_repo.create(
        Service(tenant_id=tenant_id, name="Haircut", price=Decimal("25.00"), duration=30)
    )
    shave = services_repo.create(
        Service(tenant_id=tenant_id, name="Shave", price=Decimal("15.00"), duration=15)
    )
    customers_repo = CustomerRepository(session)
    customers = [
        customers_repo.create(Customer(tenant_id=tenant_id, name=name, visit_count=visits))
        for name, visits in (("Ana", 3), ("Bruno", 1), ("Carla", 0))
    ]
    return {"haircut": haircut, "shave": shave, "customers": customers}


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def tenant_data(db_session):
    return seed_tenant(db_session)


@pytest.fixture
def other_tenant_data(db_session):
    return seed_tenant(db_session, tenant_id=OTHER_TENANT_ID)


@pytest.fixture
def haircut(tenant_data):
    return tenant_data["haircut"]


@pytest.fixture
def shave(tenant_data):
    return tenant_data["shave"]


@pytest.fixture
def customers(tenant_data):
    return tenant_data["customers"]


# =====================================================
# SERVICE FIXTURES (all bound to one session)
# =====================================================


@pytest.fixture
def queue_service(db_session, clock):
    return QueueService(
        queue_repo=QueueRepository(db_session),
        customer_repo=CustomerRepository(db_session),
        service_repo=ServiceRepository(db_session),
        tenant_repo=TenantRepository(db_session),
        clock=clock,
        compact_on_complete=False,
    )


@pytest.fixture
def appointment_service(db_session, clock):
    return AppointmentService(
        appointment_repo=AppointmentRepository(db_session),
        customer_repo=CustomerRepository(db_session),
        service_repo=ServiceRepository(db_session),
        tenant_repo=TenantRepository(db_session),
        clock=clock,
    )


@pytest.fixture
def transaction_service(db_session, clock):
    return TransactionService(
        transaction_repo=TransactionRepository(db_session),
        customer_repo=CustomerRepository(db_session),
        appointment_repo=AppointmentRepository(db_session),
        tenant_repo=TenantRepository(db_session),
        clock=clock,
    )


@pytest.fixture
def stats_service(db_session, clock):
    return StatsService(
        tenant_repo=TenantRepository(db_session),
        queue_repo=QueueRepository(db_session),
        appointment_repo=AppointmentRepository(db_session),
        transaction_repo=TransactionRepository(db_session),
        clock=clock,
    )


@pytest.fixture
def analytics_service(db_session, clock):
    return AnalyticsService(
        tenant_repo=TenantRepository(db_session),
        customer_repo=CustomerRepository(db_session),
        service_repo=ServiceRepository(db_session),
        appointment_repo=AppointmentRepository(db_session),
        transaction_repo=TransactionRepository(db_session),
        clock=clock,
    )


# =====================================================
# FLASK APP FIXTURES
# =====================================================


@pytest.fixture
def app(tmp_path, monkeypatch, clock):
    """Flask app on its own SQLite file, with one seeded tenant."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'api.db'}")
    reset_engine()

    from shopqueue.db.session import SessionLocal
    from shopqueue.main import create_app

    flask_app = create_app(testing=True, clock=clock)

    session = SessionLocal()
    try:
        flask_app.config["SEED"] = seed_tenant(session)
    finally:
        session.close()

    yield flask_app
    reset_engine()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tenant_headers():
    return {"X-Tenant-ID": TENANT_ID}
