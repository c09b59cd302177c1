from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON
from ..db import Base
from ._common import new_id, utcnow


class ApiUsage(Base):
    __tablename__ = "b2b_api_usage"

    id = Column(String(36), primary_key=True, default=new_id)
    client_id = Column(String(36), ForeignKey("b2b_clients.id"), index=True, nullable=False)
    api_key_id = Column(String(36), ForeignKey("b2b_api_keys.id"), index=True, nullable=True)
    endpoint = Column(String(64), index=True, nullable=False)
    method = Column(String(10), nullable=False)
    request_params = Column(JSON)
    response_status = Column(Integer, index=True, nullable=False)
    credits_used = Column(Integer, nullable=False, default=0)
    response_time_ms = Column(Integer)
    ip_address = Column(String(45))
    user_agent = Column(String(500))
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
