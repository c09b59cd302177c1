"""
B2B API endpoint

``/v1/b2b-api/<endpoint>``: the last path segment selects the endpoint,
callers authenticate with the ``x-api-key`` header.
"""

import json
import time
from typing import Any, Dict

from fastapi import APIRouter, Request
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool

from ..config import USAGE_LOG_MODE
from ..endpoints import endpoint_label
from ..security import get_client_ip, redact_payload
from ..services.gateway import GatewayCall, handle_call
from ..services.usage import UsageEntry, record_usage
from .response_builders import build_error_response, build_preflight_response, build_success_response

router = APIRouter()

GATEWAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]
BODYLESS_METHODS = ("GET", "HEAD")


async def _read_json_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


@router.options("/b2b-api", include_in_schema=False)
@router.options("/b2b-api/{path:path}", include_in_schema=False)
async def b2b_api_preflight(path: str = ""):
    return build_preflight_response()


@router.api_route("/b2b-api", methods=GATEWAY_METHODS, include_in_schema=False)
@router.api_route("/b2b-api/{path:path}", methods=GATEWAY_METHODS)
async def b2b_api(request: Request, path: str = ""):
    """Credit-metered B2B data API"""
    start_time = time.time()
    body = await _read_json_body(request) if request.method not in BODYLESS_METHODS else {}
    query = dict(request.query_params)

    call = GatewayCall(
        raw_key=request.headers.get("x-api-key"),
        path=path,
        method=request.method,
        query=query,
        body=body,
    )
    outcome = await run_in_threadpool(handle_call, call)
    response_time_ms = int((time.time() - start_time) * 1000)
    request.state.client_id = outcome.client_id

    if outcome.ok:
        response = build_success_response(outcome.data, outcome.endpoint, outcome.credits_used, response_time_ms)
    else:
        response = build_error_response(outcome.status_code, outcome.error)

    if outcome.client_id:
        label = endpoint_label(outcome.endpoint)
        params = redact_payload({**query, **body})
        if label != outcome.endpoint:
            # endpoint column is bounded; keep the caller's raw name with the params
            params["requested_endpoint"] = outcome.endpoint
        entry = UsageEntry(
            client_id=outcome.client_id,
            api_key_id=outcome.api_key_id,
            endpoint=label,
            method=request.method,
            response_status=outcome.status_code,
            credits_used=outcome.credits_used,
            response_time_ms=response_time_ms,
            request_params=params,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
        if USAGE_LOG_MODE == "inline":
            await run_in_threadpool(record_usage, entry)
        else:
            response.background = BackgroundTask(record_usage, entry)

    return response
