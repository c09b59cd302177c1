"""
Admin audit trail

Every mutating admin call leaves one row. Writes use their own session so an
audit failure never undoes the admin change it describes.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..db import SessionLocal, session_scope
from ..models import AdminAuditLog

logger = logging.getLogger(__name__)


def _dump(value: Optional[Dict[str, Any]]) -> Optional[str]:
    return json.dumps(value, default=str, sort_keys=True) if value else None


def _load(value: Optional[str]) -> Optional[Dict[str, Any]]:
    return json.loads(value) if value else None


def log_admin_action(
    actor: str,
    action: str,
    target: str,
    before_value: Optional[Dict[str, Any]] = None,
    after_value: Optional[Dict[str, Any]] = None,
    client_ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    try:
        with session_scope() as db:
            db.add(AdminAuditLog(
                actor=actor,
                action=action,
                target=target,
                before_value=_dump(before_value),
                after_value=_dump(after_value),
                client_ip=client_ip,
                user_agent=(user_agent or "")[:500] or None,
            ))
    except SQLAlchemyError as e:
        logger.error("admin audit write failed action=%s target=%s: %s", action, target, e)
        return False
    logger.info("admin %s on %s by %s", action, target, actor)
    return True


def get_recent_audit_logs(limit: int = 100, action: Optional[str] = None) -> List[Dict[str, Any]]:
    stmt = select(AdminAuditLog).order_by(AdminAuditLog.timestamp.desc(), AdminAuditLog.id.desc()).limit(limit)
    if action:
        stmt = stmt.where(AdminAuditLog.action == action)
    with SessionLocal() as db:
        return [
            {
                "id": row.id,
                "timestamp": row.timestamp.isoformat() if row.timestamp else None,
                "actor": row.actor,
                "action": row.action,
                "target": row.target,
                "before": _load(row.before_value),
                "after": _load(row.after_value),
                "client_ip": row.client_ip,
                "user_agent": row.user_agent,
            }
            for row in db.scalars(stmt)
        ]
