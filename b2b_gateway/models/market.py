from sqlalchemy import Column, String, Integer, BigInteger, Float, DateTime, JSON
from ..db import Base
from ._common import new_id, utcnow


class MarketInsight(Base):
    __tablename__ = "b2b_market_insights"

    id = Column(String(36), primary_key=True, default=new_id)
    region = Column(String(128), index=True, nullable=False)
    insight_type = Column(String(64), index=True, nullable=False, default="price_trend")
    title = Column(String(255))
    data = Column(JSON, nullable=False, default=dict)
    period = Column(String(32))
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)


class PropertyValuation(Base):
    __tablename__ = "property_valuations"

    id = Column(String(36), primary_key=True, default=new_id)
    property_id = Column(String(64), index=True, nullable=False)
    estimated_value = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="IDR")
    confidence_score = Column(Float)
    valuation_method = Column(String(64))
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
