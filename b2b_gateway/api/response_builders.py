"""
Response builders for the gateway
Every gateway response is JSON and carries the CORS headers.
"""

from typing import Any, Dict

from fastapi.responses import JSONResponse

from ..security import get_cors_headers


def build_success_response(data: Any, endpoint: str, credits_used: int, response_time_ms: int) -> JSONResponse:
    """Build 200 response with the standard success envelope"""
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "data": data,
            "meta": {
                "endpoint": endpoint,
                "credits_used": credits_used,
                "response_time_ms": response_time_ms,
            },
        },
        headers=get_cors_headers(),
    )


def build_error_response(status_code: int, error: Dict[str, Any]) -> JSONResponse:
    """Build an error response from an ``{error, code}`` body"""
    return JSONResponse(status_code=status_code, content=error, headers=get_cors_headers())


def build_preflight_response() -> JSONResponse:
    return JSONResponse(status_code=200, content={"ok": True}, headers=get_cors_headers())
