"""
Dashboard and analytics endpoints. Read-only; each call is one snapshot.
"""

from flask import Blueprint

from shopqueue.controllers.dependencies import (
    analytics_service,
    request_session,
    stats_service,
)
from shopqueue.core.api_utils import api_response, current_tenant_id
from shopqueue.core.limiter_config import READ_LIMIT, limiter
from shopqueue.schemas.dtos import DashboardStatsResponse, analytics_summary_to_dict

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.route("/dashboard/stats", methods=["GET"])
@limiter.limit(READ_LIMIT)
def dashboard_stats():
    tenant_id = current_tenant_id()
    with request_session() as db:
        stats = stats_service(db).stats(tenant_id)
    return api_response(
        True, "Dashboard stats computed", DashboardStatsResponse.from_domain(stats).to_dict()
    )


@dashboard_bp.route("/analytics/summary", methods=["GET"])
@limiter.limit(READ_LIMIT)
def analytics_summary():
    tenant_id = current_tenant_id()
    with request_session() as db:
        summary = analytics_service(db).summary(tenant_id)
    return api_response(True, "Analytics computed", analytics_summary_to_dict(summary))
