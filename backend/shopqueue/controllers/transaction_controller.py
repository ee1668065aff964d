from flask import Blueprint

from shopqueue.controllers.dependencies import (
    request_session,
    tenant_timezone,
    transaction_service,
)
from shopqueue.core.api_utils import api_response, current_tenant_id, json_body
from shopqueue.core.limiter_config import READ_LIMIT, WRITE_LIMIT, limiter
from shopqueue.schemas.dtos import TransactionCreateRequest, TransactionResponse

transaction_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transaction_bp.route("", methods=["GET"])
@limiter.limit(READ_LIMIT)
def list_transactions():
    tenant_id = current_tenant_id()
    with request_session() as db:
        transactions = transaction_service(db).list_transactions(tenant_id)
        tz = tenant_timezone(db, tenant_id)
        data = [TransactionResponse.from_domain(t, tz).to_dict() for t in transactions]
    return api_response(True, "Transactions retrieved", data)


@transaction_bp.route("/today", methods=["GET"])
@limiter.limit(READ_LIMIT)
def todays_transactions():
    tenant_id = current_tenant_id()
    with request_session() as db:
        transactions = transaction_service(db).todays_transactions(tenant_id)
        tz = tenant_timezone(db, tenant_id)
        data = [TransactionResponse.from_domain(t, tz).to_dict() for t in transactions]
    return api_response(True, "Today's transactions retrieved", data)


@transaction_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def record():
    tenant_id = current_tenant_id()
    payload = TransactionCreateRequest.from_json(json_body())
    payload.validate()
    with request_session() as db:
        transaction = transaction_service(db).record(
            tenant_id,
            payload.total,
            payload.payment_method,
            status=payload.status,
            customer_id=payload.customer_id,
            appointment_id=payload.appointment_id,
        )
        tz = tenant_timezone(db, tenant_id)
    return api_response(
        True, "Transaction recorded", TransactionResponse.from_domain(transaction, tz).to_dict(), 201
    )
