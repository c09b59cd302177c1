from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ..db import Base
from ._common import new_id, utcnow


class ApiKey(Base):
    __tablename__ = "b2b_api_keys"

    id = Column(String(36), primary_key=True, default=new_id)
    client_id = Column(String(36), ForeignKey("b2b_clients.id"), index=True, nullable=False)
    name = Column(String(128), nullable=False, default="default")
    key_prefix = Column(String(8), index=True, nullable=False)  # first 8 chars of the raw key
    key_hash = Column(String(128), nullable=False)               # sha256 of the raw key
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    allowed_endpoints = Column(JSON, nullable=False, default=list)
    rate_limit_per_minute = Column(Integer, nullable=True)       # overrides the tier default
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    client = relationship("Client", back_populates="api_keys")
