from typing import List, Optional

from shopqueue.db.base import Service as DbService
from shopqueue.domain.entities import Service as DomainService
from shopqueue.domain.interfaces import IServiceRepository

from .base import SqlAlchemyRepository


class ServiceRepository(SqlAlchemyRepository, IServiceRepository):
    def get_by_id(self, tenant_id: str, service_id: int) -> Optional[DomainService]:
        db_service = (
            self.db.query(DbService).filter_by(tenant_id=tenant_id, id=service_id).first()
        )
        return self._to_domain(db_service) if db_service else None

    def list_by_tenant(
        self, tenant_id: str, include_inactive: bool = False
    ) -> List[DomainService]:
        query = self.db.query(DbService).filter(DbService.tenant_id == tenant_id)
        if not include_inactive:
            query = query.filter(DbService.is_active.is_(True))
        return [self._to_domain(s) for s in query.order_by(DbService.name).all()]

    def create(self, service: DomainService) -> DomainService:
        db_service = DbService(
            tenant_id=service.tenant_id,
            name=service.name.strip(),
            description=service.description,
            price=service.price,
            duration=service.duration,
            is_active=service.is_active,
        )
        self.db.add(db_service)
        self._commit_unless_scoped()
        self.db.refresh(db_service)
        return self._to_domain(db_service)

    def deactivate(self, tenant_id: str, service_id: int) -> Optional[DomainService]:
        db_service = (
            self.db.query(DbService).filter_by(tenant_id=tenant_id, id=service_id).first()
        )
        if not db_service:
            return None
        db_service.is_active = False
        self._commit_unless_scoped()
        return self._to_domain(db_service)

    def _to_domain(self, db_service: DbService) -> DomainService:
        return DomainService(
            id=db_service.id,
            tenant_id=db_service.tenant_id,
            name=db_service.name,
            description=db_service.description,
            price=db_service.price,
            duration=db_service.duration,
            is_active=bool(db_service.is_active),
            created_at=db_service.created_at,
        )
