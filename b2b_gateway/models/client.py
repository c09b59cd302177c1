from sqlalchemy import Column, String, Integer, Boolean, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from ..db import Base
from ._common import new_id, utcnow


class Client(Base):
    __tablename__ = "b2b_clients"
    __table_args__ = (
        CheckConstraint("credits_balance >= 0", name="ck_b2b_clients_credits_nonnegative"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    company_name = Column(String(255), nullable=False)
    client_type = Column(String(32), nullable=False, default="agency")  # agency, investor, developer, bank, other
    contact_name = Column(String(255))
    contact_email = Column(String(255))
    contact_phone = Column(String(64))
    tier = Column(String(32), nullable=False, default="starter")        # starter, professional, enterprise
    is_active = Column(Boolean, nullable=False, default=True)
    credits_balance = Column(Integer, nullable=False, default=0)
    lifetime_credits_used = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    api_keys = relationship("ApiKey", back_populates="client")
