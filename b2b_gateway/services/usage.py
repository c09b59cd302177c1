"""
Usage audit trail

One ``b2b_api_usage`` row per gateway call that resolved an active client.
Written in its own session after the business transaction; failures are
logged and counted, never raised to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..db import SessionLocal
from ..metrics import USAGE_LOG_FAILURES_TOTAL
from ..models import ApiKey, ApiUsage, Client
from ..models._common import utcnow

logger = logging.getLogger(__name__)


@dataclass
class UsageEntry:
    client_id: str
    api_key_id: Optional[str]
    endpoint: str
    method: str
    response_status: int
    credits_used: int = 0
    response_time_ms: Optional[int] = None
    request_params: Dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def record_usage(entry: UsageEntry) -> bool:
    """Append the usage row and bump the key's last_used_at"""
    db = SessionLocal()
    try:
        db.add(ApiUsage(
            client_id=entry.client_id,
            api_key_id=entry.api_key_id,
            endpoint=entry.endpoint,
            method=entry.method,
            request_params=entry.request_params,
            response_status=entry.response_status,
            credits_used=entry.credits_used,
            response_time_ms=entry.response_time_ms,
            ip_address=entry.ip_address,
            user_agent=(entry.user_agent or "")[:500] or None,
        ))
        if entry.api_key_id:
            db.execute(
                update(ApiKey)
                .where(ApiKey.id == entry.api_key_id)
                .values(last_used_at=utcnow())
                .execution_options(synchronize_session=False)
            )
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        USAGE_LOG_FAILURES_TOTAL.inc()
        logger.error(f"Failed to record usage for client {entry.client_id}: {e}")
        return False
    finally:
        db.close()


def recent_usage(db, client_id: Optional[str] = None, endpoint: Optional[str] = None,
                 limit: int = 100) -> List[Dict[str, Any]]:
    stmt = select(ApiUsage, Client.company_name).join(Client, Client.id == ApiUsage.client_id, isouter=True)
    if client_id:
        stmt = stmt.where(ApiUsage.client_id == client_id)
    if endpoint:
        stmt = stmt.where(ApiUsage.endpoint == endpoint)
    stmt = stmt.order_by(ApiUsage.created_at.desc()).limit(limit)
    return [
        {
            "id": usage.id,
            "client_id": usage.client_id,
            "company_name": company_name,
            "api_key_id": usage.api_key_id,
            "endpoint": usage.endpoint,
            "method": usage.method,
            "request_params": usage.request_params,
            "response_status": usage.response_status,
            "credits_used": usage.credits_used,
            "response_time_ms": usage.response_time_ms,
            "ip_address": usage.ip_address,
            "user_agent": usage.user_agent,
            "created_at": usage.created_at.isoformat() if usage.created_at else None,
        }
        for usage, company_name in db.execute(stmt)
    ]


def usage_summary(db, client_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Calls, errors and credits per endpoint"""
    stmt = select(
        ApiUsage.endpoint,
        func.count(ApiUsage.id),
        func.coalesce(func.sum(case((ApiUsage.response_status >= 400, 1), else_=0)), 0),
        func.coalesce(func.sum(ApiUsage.credits_used), 0),
        func.avg(ApiUsage.response_time_ms),
    ).group_by(ApiUsage.endpoint).order_by(ApiUsage.endpoint)
    if client_id:
        stmt = stmt.where(ApiUsage.client_id == client_id)
    return [
        {
            "endpoint": endpoint,
            "calls": calls,
            "errors": int(errors),
            "credits_used": int(credits),
            "avg_response_time_ms": round(float(avg_ms), 1) if avg_ms is not None else None,
        }
        for endpoint, calls, errors, credits, avg_ms in db.execute(stmt)
    ]
