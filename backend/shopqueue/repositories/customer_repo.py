"""Customer repository.

Customers are owned by the CRUD collaborator; the engine only resolves
them inside a tenant. ``create`` exists for onboarding, seeding and tests.
"""

from typing import List, Optional

from shopqueue.db.base import Customer as DbCustomer
from shopqueue.domain.entities import Customer as DomainCustomer
from shopqueue.domain.interfaces import ICustomerRepository

from .base import SqlAlchemyRepository


class CustomerRepository(SqlAlchemyRepository, ICustomerRepository):
    def get_by_id(self, tenant_id: str, customer_id: int) -> Optional[DomainCustomer]:
        db_customer = (
            self.db.query(DbCustomer)
            .filter_by(tenant_id=tenant_id, id=customer_id)
            .first()
        )
        return self._to_domain(db_customer) if db_customer else None

    def list_by_tenant(self, tenant_id: str) -> List[DomainCustomer]:
        db_customers = (
            self.db.query(DbCustomer)
            .filter_by(tenant_id=tenant_id)
            .order_by(DbCustomer.name)
            .all()
        )
        return [self._to_domain(c) for c in db_customers]

    def create(self, customer: DomainCustomer) -> DomainCustomer:
        db_customer = DbCustomer(
            tenant_id=customer.tenant_id,
            name=customer.name.strip(),
            email=customer.email,
            phone=customer.phone,
            notes=customer.notes,
            preferred_barber=customer.preferred_barber,
            visit_count=customer.visit_count,
        )
        self.db.add(db_customer)
        self._commit_unless_scoped()
        self.db.refresh(db_customer)
        return self._to_domain(db_customer)

    def _to_domain(self, db_customer: DbCustomer) -> DomainCustomer:
        return DomainCustomer(
            id=db_customer.id,
            tenant_id=db_customer.tenant_id,
            name=db_customer.name,
            email=db_customer.email,
            phone=db_customer.phone,
            notes=db_customer.notes,
            preferred_barber=db_customer.preferred_barber,
            visit_count=db_customer.visit_count or 0,
            created_at=db_customer.created_at,
        )
