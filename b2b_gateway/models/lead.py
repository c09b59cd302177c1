from sqlalchemy import Column, String, Integer, BigInteger, Boolean, DateTime, ForeignKey, JSON, Text
from ..db import Base
from ._common import new_id, utcnow


class Lead(Base):
    __tablename__ = "b2b_leads"

    id = Column(String(36), primary_key=True, default=new_id)
    lead_source = Column(String(64), nullable=False, default="inquiry")
    property_type = Column(String(64))
    property_location = Column(String(255), index=True)
    lead_intent = Column(String(32))            # buy, rent, invest
    lead_budget = Column(BigInteger)
    lead_score = Column(Integer, nullable=False, default=0, index=True)
    contact_name = Column(String(255))
    contact_email = Column(String(255))
    contact_phone = Column(String(64))
    notes = Column(Text)
    is_sold = Column(Boolean, nullable=False, default=False, index=True)
    sold_to = Column(String(36), ForeignKey("b2b_clients.id"), nullable=True)
    sold_price = Column(Integer, nullable=True)
    sold_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class LeadPurchase(Base):
    __tablename__ = "b2b_lead_purchases"

    id = Column(String(36), primary_key=True, default=new_id)
    lead_id = Column(String(36), ForeignKey("b2b_leads.id"), unique=True, nullable=False)
    client_id = Column(String(36), ForeignKey("b2b_clients.id"), index=True, nullable=False)
    credits_spent = Column(Integer, nullable=False)
    lead_snapshot = Column(JSON, nullable=False)
    purchased_at = Column(DateTime(timezone=True), default=utcnow)
