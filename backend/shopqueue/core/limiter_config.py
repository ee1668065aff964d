import os

from flask import g, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from shopqueue.core.logging_config import TENANT_HEADER

READ_LIMIT = "100 per minute"
WRITE_LIMIT = "30 per minute"


def _tenant_or_address() -> str:
    """Rate-limit per tenant when the request carries one, else per client IP."""
    tenant_id = getattr(g, "tenant_id", None) or request.headers.get(TENANT_HEADER)
    return f"tenant:{tenant_id}" if tenant_id else get_remote_address()


# Global Limiter instance to be imported by controllers
# Note: enabled here; create_app() re-applies RATE_LIMIT_ENABLED on init
limiter = Limiter(
    key_func=_tenant_or_address,
    default_limits=["1000 per hour"],
    storage_uri=os.getenv("LIMITER_STORAGE_URI", "memory://"),
    enabled=True,
)
