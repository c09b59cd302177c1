# b2b_gateway/auth/admin.py
import hmac
import logging
import os
from typing import Optional, Set

from fastapi import HTTPException, Request, status

log = logging.getLogger("app")

# Default development key (fallback for CI/dev)
DEV_ADMIN_KEY = os.environ.get("DEV_ADMIN_KEY", "DEV_ADMIN_KEY_5a8f9ffdc3")

# Always include the dev default unless explicitly disabled
ALLOW_DEV_KEYS = os.environ.get("ALLOW_DEV_KEYS", "true").lower() in ("1", "true", "yes")


def get_admin_keys() -> Set[str]:
    """Comma-separated admin keys via env, plus the dev key when allowed"""
    keys = {k.strip() for k in os.environ.get("ADMIN_API_KEYS", "").split(",") if k.strip()}
    if ALLOW_DEV_KEYS:
        keys.add(DEV_ADMIN_KEY)
    return keys


def _extract_admin_token(request: Request) -> Optional[str]:
    # Authorization: Bearer <key>   OR   X-Admin-Key: <key>
    auth = request.headers.get("authorization", "")
    if auth:
        parts = auth.strip().split(None, 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1].strip()
    x = request.headers.get("x-admin-key")
    return x.strip() if x else None


def is_admin_key(token: str) -> bool:
    return any(hmac.compare_digest(token, k) for k in get_admin_keys())


async def require_admin(request: Request) -> str:
    token = _extract_admin_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing admin key")
    if not is_admin_key(token):
        log.warning("AUTH: admin key rejected")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin scope required")
    request.state.admin_key = token
    return token
