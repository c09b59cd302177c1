"""
Credit-metered gateway core

handle_call() runs one request end to end: authenticate, authorize, validate,
charge and execute inside a single database transaction. It never raises;
every outcome, including unexpected failures, comes back as a GatewayOutcome
for the HTTP layer to render.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..db import SessionLocal
from ..endpoints import CallContext, Endpoint, endpoint_label, endpoint_name_from_path, lookup
from ..errors import (
    EndpointNotAllowed,
    GatewayError,
    INTERNAL_ERROR,
    MethodNotAllowed,
    MissingParam,
    UnknownEndpoint,
)
from ..auth import authenticate_api_key
from ..metrics import LEADS_SOLD_TOTAL, record_gateway_call
from .credits import debit

logger = logging.getLogger("app")


@dataclass
class GatewayCall:
    raw_key: Optional[str]
    path: str
    method: str
    query: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GatewayOutcome:
    status_code: int
    endpoint: str
    data: Any = None
    error: Optional[Dict[str, Any]] = None
    credits_used: int = 0
    client_id: Optional[str] = None   # set once an active client is resolved
    api_key_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def authorize(api_key, endpoint_name: str) -> None:
    if endpoint_name == Endpoint.INFO.value:
        return
    if endpoint_name not in (api_key.allowed_endpoints or []):
        raise EndpointNotAllowed(f"Endpoint '{endpoint_name}' not allowed for this API key")


def execute(ctx: CallContext, spec) -> Any:
    """Validate the call against its spec, charge fixed-price endpoints, run the handler"""
    if spec.methods is not None and ctx.method not in spec.methods:
        raise MethodNotAllowed(f"{ctx.endpoint.value} requires {' or '.join(sorted(spec.methods))}")

    for name in spec.required:
        if ctx.param(name, source=spec.param_source) is None:
            raise MissingParam(name)

    if spec.cost:
        debit(
            ctx.db, ctx.client, spec.cost,
            transaction_type="usage",
            reference_type="api_call",
            reference_id=ctx.endpoint.value,
            description=f"API call: {ctx.endpoint.value}",
        )
        ctx.credits_used = spec.cost

    return spec.handler(ctx)


def handle_call(call: GatewayCall) -> GatewayOutcome:
    endpoint_name = endpoint_name_from_path(call.path)
    outcome = GatewayOutcome(status_code=200, endpoint=endpoint_name)
    method = (call.method or "GET").upper()

    db = SessionLocal()
    try:
        api_key, client = authenticate_api_key(db, call.raw_key)
        outcome.client_id = client.id
        outcome.api_key_id = api_key.id

        authorize(api_key, endpoint_name)
        spec = lookup(endpoint_name)
        if spec is None:
            raise UnknownEndpoint(f"Unknown endpoint: {endpoint_name}")

        ctx = CallContext(
            db=db, client=client, api_key=api_key, endpoint=spec.endpoint,
            method=method, query=call.query, body=call.body,
        )
        data = execute(ctx, spec)
        db.commit()

        outcome.data = data
        outcome.credits_used = ctx.credits_used
        if spec.endpoint is Endpoint.PURCHASE_LEAD:
            LEADS_SOLD_TOTAL.inc()
        logger.info("gateway call ok", extra={
            "endpoint": endpoint_name, "client_id": client.id, "credits_used": ctx.credits_used,
        })

    except GatewayError as e:
        db.rollback()
        outcome.status_code = e.status_code
        outcome.error = e.to_dict()
        outcome.credits_used = 0
        logger.info("gateway call rejected", extra={
            "endpoint": endpoint_name, "client_id": outcome.client_id, "code": e.code,
        })

    except Exception as e:
        db.rollback()
        logger.exception("B2B API error", extra={"endpoint": endpoint_name, "client_id": outcome.client_id})
        outcome.status_code = 500
        outcome.error = {"success": False, "error": str(e) or "Internal server error", "code": INTERNAL_ERROR}
        outcome.credits_used = 0

    finally:
        db.close()

    record_gateway_call(endpoint_label(endpoint_name), outcome.error["code"] if outcome.error else "OK", outcome.credits_used)
    return outcome
