"""
Security and Privacy Features
"""
from typing import Any, Dict, Optional

from fastapi import Request

from .config import CORS_ORIGINS, REDACT_FIELDS, TRUST_PROXY


def get_cors_headers() -> Dict[str, str]:
    """Get CORS headers"""
    return {
        "Access-Control-Allow-Origin": "*" if "*" in CORS_ORIGINS else ", ".join(CORS_ORIGINS),
        "Access-Control-Allow-Methods": "GET, HEAD, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, x-api-key",
        "Access-Control-Max-Age": "86400",
    }


def redact_payload(payload: Any) -> Any:
    """Recursively redact sensitive fields from payload"""
    if isinstance(payload, dict):
        redacted = {}
        for key, value in payload.items():
            key_lower = str(key).lower()
            if any(field and field in key_lower for field in REDACT_FIELDS):
                redacted[key] = "[REDACTED]"
            else:
                redacted[key] = redact_payload(value)
        return redacted
    elif isinstance(payload, list):
        return [redact_payload(item) for item in payload]
    else:
        return payload


def get_client_ip(request: Request) -> Optional[str]:
    """Caller IP, honouring X-Forwarded-For when running behind a proxy"""
    if TRUST_PROXY:
        xff = request.headers.get("x-forwarded-for")
        if xff:
            return xff.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()
    return request.client.host if request.client else None
