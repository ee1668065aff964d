"""Tenant lookup shared by the engine services."""

from typing import Tuple
from zoneinfo import ZoneInfo

from shopqueue.core.config import resolve_timezone
from shopqueue.core.exceptions import TenantNotFoundError
from shopqueue.domain.entities import Tenant
from shopqueue.domain.interfaces import ITenantReader


def require_tenant(tenant_repo: ITenantReader, tenant_id: str) -> Tuple[Tenant, ZoneInfo]:
    """Resolve the tenant and the timezone its day windows are computed in.

    Raises:
        TenantNotFoundError: when no tenant has this id
    """
    tenant = tenant_repo.get_by_id(tenant_id) if tenant_id else None
    if tenant is None:
        raise TenantNotFoundError(tenant_id)
    return tenant, resolve_timezone(tenant.timezone)
