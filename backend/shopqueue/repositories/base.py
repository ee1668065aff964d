from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from shopqueue.db.session import SessionLocal, tenant_write_scope


class SqlAlchemyRepository:
    """Shared session handling for the tenant-scoped repositories.

    Repositories built on the same session share one unit of work, so a
    service can combine reads and writes of several of them inside a single
    ``atomic()`` scope.
    """

    def __init__(self, db_session: Session = None):
        self.db = db_session or SessionLocal()

    def atomic(self, tenant_id: str):
        return tenant_write_scope(self.db, tenant_id)

    @contextmanager
    def snapshot(self) -> Iterator[Session]:
        has_pending = bool(self.db.new or self.db.dirty or self.db.deleted)
        if has_pending:
            yield self.db
            return
        if self.db.in_transaction():
            self.db.rollback()
        if self.db.get_bind().dialect.name == "postgresql":
            self.db.connection(execution_options={"isolation_level": "REPEATABLE READ"})
        try:
            yield self.db
        finally:
            self.db.rollback()

    def _commit_unless_scoped(self) -> None:
        """Commit single-row collaborator writes made outside ``atomic()``."""
        if not self.db.info.get("tenant_scope_depth"):
            self.db.commit()
        else:
            self.db.flush()
