from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Numeric, Text
from ..db import Base
from ._common import new_id, utcnow


class CreditTransaction(Base):
    """Append-only ledger; sum(amount) per client reconstructs the balance"""
    __tablename__ = "b2b_credit_transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    client_id = Column(String(36), ForeignKey("b2b_clients.id"), index=True, nullable=False)
    transaction_type = Column(String(32), nullable=False)   # usage, purchase, topup, adjustment
    amount = Column(Integer, nullable=False)                # signed delta
    balance_after = Column(Integer, nullable=False)
    reference_type = Column(String(64))
    reference_id = Column(String(64))
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)


class CreditPackage(Base):
    __tablename__ = "b2b_credit_packages"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(128), nullable=False)
    description = Column(Text)
    credits = Column(Integer, nullable=False)
    bonus_credits = Column(Integer, nullable=False, default=0)
    price_idr = Column(Integer, nullable=False, default=0)
    price_usd = Column(Numeric(10, 2), nullable=False, default=0)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
