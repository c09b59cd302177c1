import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..errors import InsufficientCredits, LeadNotAvailable
from ..models import Client, Lead, LeadPurchase
from ..models._common import utcnow
from .credits import debit

logger = logging.getLogger(__name__)

PREMIUM_LEAD_SCORE = 70
PREMIUM_LEAD_PRICE = 25
STANDARD_LEAD_PRICE = 10


def lead_price(score: Optional[int]) -> int:
    return PREMIUM_LEAD_PRICE if (score or 0) >= PREMIUM_LEAD_SCORE else STANDARD_LEAD_PRICE


def _iso(dt):
    return dt.isoformat() if dt else None


def public_lead_view(lead: Lead) -> Dict[str, Any]:
    """Marketplace view; contact details stay hidden until purchase"""
    return {
        "id": lead.id,
        "lead_source": lead.lead_source,
        "property_type": lead.property_type,
        "property_location": lead.property_location,
        "lead_intent": lead.lead_intent,
        "lead_budget": lead.lead_budget,
        "lead_score": lead.lead_score,
        "price": lead_price(lead.lead_score),
        "created_at": _iso(lead.created_at),
    }


def full_lead_view(lead: Lead) -> Dict[str, Any]:
    data = public_lead_view(lead)
    data.pop("price")
    data.update({
        "contact_name": lead.contact_name,
        "contact_email": lead.contact_email,
        "contact_phone": lead.contact_phone,
        "notes": lead.notes,
    })
    return data


def list_available_leads(
    db: Session,
    limit: int,
    property_type: Optional[str] = None,
    location: Optional[str] = None,
    min_score: Optional[int] = None,
) -> List[Dict[str, Any]]:
    stmt = select(Lead).where(Lead.is_sold.is_(False))
    if property_type:
        stmt = stmt.where(Lead.property_type == property_type)
    if location:
        stmt = stmt.where(Lead.property_location.ilike(f"%{location}%"))
    if min_score is not None:
        stmt = stmt.where(Lead.lead_score >= min_score)
    stmt = stmt.order_by(Lead.lead_score.desc(), Lead.created_at.desc()).limit(limit)
    return [public_lead_view(lead) for lead in db.scalars(stmt)]


def get_available_lead(db: Session, lead_id: str) -> Lead:
    lead = db.scalar(select(Lead).where(Lead.id == lead_id, Lead.is_sold.is_(False)))
    if lead is None:
        raise LeadNotAvailable()
    return lead


def purchase_lead(db: Session, client: Client, lead_id: str) -> Dict[str, Any]:
    """Sell an available lead to ``client``.

    All writes happen in the caller's transaction; any exception raised here
    must be followed by a rollback so the lead stays available and the
    balance untouched.
    """
    lead = get_available_lead(db, lead_id)
    cost = lead_price(lead.lead_score)

    # Fail fast before any write; the conditional debit below is the real guard
    if (client.credits_balance or 0) < cost:
        raise InsufficientCredits(credits_needed=cost, credits_balance=client.credits_balance or 0)

    sold_at = utcnow()
    result = db.execute(
        update(Lead)
        .where(Lead.id == lead.id, Lead.is_sold.is_(False))
        .values(is_sold=True, sold_to=client.id, sold_at=sold_at, sold_price=cost)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise LeadNotAvailable()

    snapshot = full_lead_view(lead)
    purchase = LeadPurchase(
        lead_id=lead.id,
        client_id=client.id,
        credits_spent=cost,
        lead_snapshot=snapshot,
        purchased_at=sold_at,
    )
    db.add(purchase)
    db.flush()

    debit(
        db, client, cost,
        transaction_type="purchase",
        reference_type="lead_purchase",
        reference_id=purchase.id,
        description=f"Lead purchase {lead.id}",
    )

    logger.info("lead sold lead=%s client=%s price=%s", lead.id, client.id, cost)
    return {
        "purchase_id": purchase.id,
        "lead": snapshot,
        "credits_spent": cost,
        "credits_remaining": client.credits_balance,
        "purchased_at": _iso(sold_at),
    }
