import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, select
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from shopqueue.core.config import get_database_url
from shopqueue.core.db import register_query_timing
from shopqueue.core.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine = None
_SessionLocal = None
_database_url = None


def _build_engine(database_url: str):
    url = make_url(database_url)
    if url.drivername.startswith("postgres"):
        return create_engine(
            database_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Detects and refreshes stale connections
            pool_recycle=3600,
            connect_args={
                "application_name": "shopqueue",  # Visible in pg_stat_activity
                "connect_timeout": 10,
            },
            echo=False,
        )
    if url.drivername.startswith("sqlite") and ":memory:" in database_url:
        # Single shared in-memory database so DDL persists across sessions
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.drivername.startswith("sqlite"):
        return create_engine(
            database_url, echo=False, connect_args={"check_same_thread": False}
        )
    return create_engine(database_url, echo=False)


def get_engine():
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. This allows tests to set DATABASE_URL before the engine is
    constructed."""
    global _engine, _SessionLocal, _database_url
    database_url = get_database_url()
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            _engine.dispose()
        _engine = _build_engine(database_url)
        _SessionLocal = None
        register_query_timing(_engine)
        logger.debug(
            "SQLAlchemy engine created",
            extra={"context": {"dialect": _engine.dialect.name}},
        )
        _database_url = database_url
    return _engine


def get_sessionmaker():
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
        )
    return _SessionLocal


def SessionLocal() -> Session:
    """Return a new Session bound to the lazy engine."""
    return get_sessionmaker()()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine=None):
    """Create all tables using the given engine or the lazy engine."""
    # Ensure models are imported so Base.metadata is populated
    from shopqueue.db import base  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


class TenantLockRegistry:
    """One re-entrant lock per tenant, alive while some writer holds it.

    Serializes writers of the same tenant inside this process. Across
    processes the ``SELECT ... FOR UPDATE`` on the tenant row takes over.
    Locks are held weakly, so tenant ids that stop writing (or never
    existed) do not accumulate.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, threading.RLock]" = (
            weakref.WeakValueDictionary()
        )

    def get(self, tenant_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(tenant_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[tenant_id] = lock
            return lock

    def __len__(self) -> int:
        return len(self._locks)


tenant_locks = TenantLockRegistry()


@contextmanager
def tenant_write_scope(session: Session, tenant_id: str) -> Iterator[Session]:
    """Run a tenant's multi-row write as one atomic, serialized unit.

    Commits on success. Any exception rolls the whole unit back and is
    re-raised; lost-update signals from the store become
    ``ConcurrencyConflictError``. Nested scopes for the same tenant join
    the outer one.
    """
    from shopqueue.db.base import Tenant

    lock = tenant_locks.get(tenant_id)
    with lock:
        depth = session.info.get("tenant_scope_depth", 0)
        if depth == 0 and session.in_transaction() and not (
            session.new or session.dirty or session.deleted
        ):
            # Reads must happen under the lock, not in a transaction opened before it
            session.commit()
        session.info["tenant_scope_depth"] = depth + 1
        try:
            if depth == 0:
                session.execute(
                    select(Tenant.id).where(Tenant.id == tenant_id).with_for_update()
                )
            yield session
            if depth == 0:
                session.commit()
        except (StaleDataError, OperationalError) as e:
            if depth == 0:
                session.rollback()
            logger.error(
                "Tenant write rolled back after store conflict",
                extra={"context": {"tenant_id": tenant_id, "error": str(e)}},
                exc_info=True,
            )
            raise ConcurrencyConflictError(
                "Concurrent update detected; no changes were applied",
                {"tenant_id": tenant_id},
            ) from e
        except Exception:
            if depth == 0:
                session.rollback()
            raise
        finally:
            session.info["tenant_scope_depth"] = depth


def reset_engine() -> None:
    """Dispose the cached engine so the next call picks up DATABASE_URL again."""
    global _engine, _SessionLocal, _database_url
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
    _database_url = None

