"""
Admin Audit Log Model
"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from ..db import Base
from ._common import utcnow


class AdminAuditLog(Base):
    __tablename__ = "admin_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    actor = Column(String(255), nullable=False, index=True)   # masked admin key that performed the action
    action = Column(String(100), nullable=False, index=True)  # e.g., "client_create", "key_issue", "credits_topup"
    target = Column(String(255), nullable=False)              # e.g., "client:<id>", "key:<id>"
    before_value = Column(Text, nullable=True)  # JSON of previous state
    after_value = Column(Text, nullable=True)   # JSON of new state
    client_ip = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)
