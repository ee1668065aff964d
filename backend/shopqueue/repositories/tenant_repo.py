"""Tenant repository: the scoping root of every other entity."""

from typing import Optional

from shopqueue.db.base import Tenant as DbTenant
from shopqueue.domain.entities import Tenant as DomainTenant
from shopqueue.domain.interfaces import ITenantRepository

from .base import SqlAlchemyRepository


class TenantRepository(SqlAlchemyRepository, ITenantRepository):
    def get_by_id(self, tenant_id: str) -> Optional[DomainTenant]:
        db_tenant = self.db.get(DbTenant, tenant_id)
        return self._to_domain(db_tenant) if db_tenant else None

    def create(self, tenant: DomainTenant) -> DomainTenant:
        db_tenant = DbTenant(
            id=tenant.id,
            business_name=tenant.business_name,
            timezone=tenant.timezone,
        )
        self.db.add(db_tenant)
        self._commit_unless_scoped()
        self.db.refresh(db_tenant)
        return self._to_domain(db_tenant)

    def _to_domain(self, db_tenant: DbTenant) -> DomainTenant:
        return DomainTenant(
            id=db_tenant.id,
            business_name=db_tenant.business_name,
            timezone=db_tenant.timezone,
            created_at=db_tenant.created_at,
        )
