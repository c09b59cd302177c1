# b2b_gateway/auth/__init__.py
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import ExpiredApiKey, InactiveAccount, InvalidApiKey, MissingApiKey
from ..models import ApiKey, Client
from ..utils.crypto import key_prefix, mask_key, token_matches

log = logging.getLogger("app")


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def is_expired(key: ApiKey, now: Optional[datetime] = None) -> bool:
    if key.expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return _as_utc(key.expires_at) < now


def find_active_key(db: Session, raw_key: str) -> Optional[ApiKey]:
    """Look up by prefix among active keys, then confirm the full key hash"""
    candidates = db.scalars(
        select(ApiKey).where(ApiKey.key_prefix == key_prefix(raw_key), ApiKey.is_active.is_(True))
    ).all()
    for candidate in candidates:
        if token_matches(raw_key, candidate.key_hash):
            return candidate
    return None


def authenticate_api_key(db: Session, raw_key: Optional[str]) -> Tuple[ApiKey, Client]:
    """Resolve the calling key and its client, raising on the first failed check"""
    raw_key = (raw_key or "").strip()
    if not raw_key:
        raise MissingApiKey("API key required. Include x-api-key header.")

    key = find_active_key(db, raw_key)
    if key is None:
        log.warning("AUTH: key not found, prefix=%s", mask_key(raw_key))
        raise InvalidApiKey("Invalid API key")

    if is_expired(key):
        log.warning("AUTH: key expired, key_id=%s", key.id)
        raise ExpiredApiKey("API key has expired")

    client = db.get(Client, key.client_id)
    if client is None or not client.is_active:
        log.warning("AUTH: inactive account, key_id=%s client_id=%s", key.id, key.client_id)
        raise InactiveAccount("Client account is inactive")

    return key, client
