"""
Admin endpoints for provisioning B2B clients, keys, credits and marketplace data
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth.admin import require_admin
from ..config import DEFAULT_ALLOWED_ENDPOINTS
from ..db import get_db
from ..endpoints import Endpoint
from ..models import ApiKey, Client, CreditPackage, CreditTransaction, Lead, MarketInsight, PropertyValuation
from ..schemas.apikey import ApiKeyCreate, ApiKeyIssued, ApiKeyOut
from ..schemas.client import ClientCreate, ClientOut, ClientUpdate, CreditTopUp, PackageOut, TransactionOut
from ..schemas.market import InsightCreate, LeadCreate, ValuationCreate
from ..security import get_client_ip
from ..services import credits as credit_service
from ..services.audit import get_recent_audit_logs, log_admin_action
from ..services.leads import full_lead_view
from ..services.usage import recent_usage, usage_summary
from ..utils.crypto import generate_api_key, hash_token, key_prefix, mask_key

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])
logger = logging.getLogger("app")


def _iso(dt):
    return dt.isoformat() if dt else None


def _client_out(c: Client) -> ClientOut:
    return ClientOut(
        id=c.id,
        company_name=c.company_name,
        client_type=c.client_type,
        contact_name=c.contact_name,
        contact_email=c.contact_email,
        contact_phone=c.contact_phone,
        tier=c.tier,
        is_active=c.is_active,
        credits_balance=c.credits_balance,
        lifetime_credits_used=c.lifetime_credits_used,
        created_at=_iso(c.created_at),
    )


def _key_out(k: ApiKey) -> dict:
    return dict(
        id=k.id,
        client_id=k.client_id,
        name=k.name,
        key_prefix=k.key_prefix,
        is_active=k.is_active,
        allowed_endpoints=list(k.allowed_endpoints or []),
        rate_limit_per_minute=k.rate_limit_per_minute,
        expires_at=_iso(k.expires_at),
        last_used_at=_iso(k.last_used_at),
        created_at=_iso(k.created_at),
    )


def _get_client(db: Session, client_id: str) -> Client:
    client = db.get(Client, client_id)
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


def _audit(request: Request, action: str, target: str, before=None, after=None):
    log_admin_action(
        actor=mask_key(getattr(request.state, "admin_key", "")),
        action=action,
        target=target,
        before_value=before,
        after_value=after,
        client_ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


# ----- Clients -----

@router.post("/clients", response_model=ClientOut, status_code=201)
def create_client(payload: ClientCreate, request: Request, db: Session = Depends(get_db)):
    """Register a B2B client, optionally with an opening credit balance"""
    client = Client(**payload.model_dump(exclude={"initial_credits"}), credits_balance=0)
    db.add(client)
    db.flush()
    if payload.initial_credits:
        credit_service.credit(db, client, payload.initial_credits, description="Opening balance")
    db.commit()
    db.refresh(client)
    _audit(request, "client_create", f"client:{client.id}", after=payload.model_dump())
    return _client_out(client)


@router.get("/clients")
def list_clients(
    active: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    stmt = select(Client).order_by(Client.created_at.desc()).limit(limit)
    if active is not None:
        stmt = stmt.where(Client.is_active.is_(active))
    clients = [_client_out(c) for c in db.scalars(stmt)]
    return {"clients": clients, "total": len(clients)}


@router.get("/clients/{client_id}", response_model=ClientOut)
def get_client(client_id: str, db: Session = Depends(get_db)):
    return _client_out(_get_client(db, client_id))


@router.patch("/clients/{client_id}", response_model=ClientOut)
def update_client(client_id: str, payload: ClientUpdate, request: Request, db: Session = Depends(get_db)):
    client = _get_client(db, client_id)
    changes = payload.model_dump(exclude_unset=True)
    before = {k: getattr(client, k) for k in changes}
    for k, v in changes.items():
        setattr(client, k, v)
    db.commit()
    db.refresh(client)
    _audit(request, "client_update", f"client:{client.id}", before=before, after=changes)
    return _client_out(client)


# ----- API keys -----

@router.post("/clients/{client_id}/keys", response_model=ApiKeyIssued, status_code=201)
def issue_key(client_id: str, payload: ApiKeyCreate, request: Request, db: Session = Depends(get_db)):
    """Issue a new API key; the raw key is only returned here"""
    client = _get_client(db, client_id)
    allowed = payload.allowed_endpoints if payload.allowed_endpoints is not None else DEFAULT_ALLOWED_ENDPOINTS
    known = {e.value for e in Endpoint}
    unknown = [e for e in allowed if e not in known]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Invalid endpoint: {unknown[0]}")

    raw_key = generate_api_key()
    key = ApiKey(
        client_id=client.id,
        name=payload.name,
        key_prefix=key_prefix(raw_key),
        key_hash=hash_token(raw_key),
        allowed_endpoints=list(allowed),
        expires_at=payload.expires_at,
        rate_limit_per_minute=payload.rate_limit_per_minute,
    )
    db.add(key)
    db.commit()
    db.refresh(key)
    _audit(request, "key_issue", f"key:{key.id}", after={"client_id": client.id, "allowed_endpoints": allowed})
    return ApiKeyIssued(api_key=raw_key, **_key_out(key))


@router.get("/clients/{client_id}/keys")
def list_keys(client_id: str, db: Session = Depends(get_db)):
    _get_client(db, client_id)
    keys = db.scalars(select(ApiKey).where(ApiKey.client_id == client_id).order_by(ApiKey.created_at.desc()))
    items = [ApiKeyOut(**_key_out(k)) for k in keys]
    return {"keys": items, "total": len(items)}


@router.post("/keys/{key_id}/deactivate", response_model=ApiKeyOut)
def deactivate_key(key_id: str, request: Request, db: Session = Depends(get_db)):
    key = db.get(ApiKey, key_id)
    if key is None:
        raise HTTPException(status_code=404, detail="API key not found")
    key.is_active = False
    db.commit()
    db.refresh(key)
    _audit(request, "key_deactivate", f"key:{key.id}", before={"is_active": True}, after={"is_active": False})
    return ApiKeyOut(**_key_out(key))


# ----- Credits -----

@router.post("/clients/{client_id}/credits", response_model=TransactionOut)
def top_up_credits(client_id: str, payload: CreditTopUp, request: Request, db: Session = Depends(get_db)):
    """Add credits directly or by applying a credit package (credits + bonus)"""
    client = _get_client(db, client_id)
    if payload.package_id:
        package = db.get(CreditPackage, payload.package_id)
        if package is None or not package.is_active:
            raise HTTPException(status_code=404, detail="Credit package not found")
        amount = package.credits + (package.bonus_credits or 0)
        entry = credit_service.credit(
            db, client, amount,
            reference_type="credit_package", reference_id=package.id,
            description=payload.description or f"Package: {package.name}",
        )
    elif payload.amount:
        entry = credit_service.credit(db, client, payload.amount, description=payload.description or "Manual top-up")
    else:
        raise HTTPException(status_code=400, detail="amount or package_id required")
    db.commit()
    db.refresh(entry)
    _audit(request, "credits_topup", f"client:{client.id}", after={"amount": entry.amount, "balance": entry.balance_after})
    return _transaction_out(entry)


def _transaction_out(t: CreditTransaction) -> TransactionOut:
    return TransactionOut(
        id=t.id,
        transaction_type=t.transaction_type,
        amount=t.amount,
        balance_after=t.balance_after,
        reference_type=t.reference_type,
        reference_id=t.reference_id,
        description=t.description,
        created_at=_iso(t.created_at),
    )


@router.get("/clients/{client_id}/transactions")
def list_transactions(client_id: str, limit: int = Query(100, ge=1, le=1000), db: Session = Depends(get_db)):
    _get_client(db, client_id)
    rows = db.scalars(
        select(CreditTransaction)
        .where(CreditTransaction.client_id == client_id)
        .order_by(CreditTransaction.created_at.desc())
        .limit(limit)
    )
    items = [_transaction_out(t) for t in rows]
    return {"transactions": items, "total": len(items)}


@router.get("/packages")
def list_packages(db: Session = Depends(get_db)):
    rows = db.scalars(
        select(CreditPackage).where(CreditPackage.is_active.is_(True)).order_by(CreditPackage.credits)
    )
    items = [
        PackageOut(
            id=p.id, name=p.name, description=p.description, credits=p.credits,
            bonus_credits=p.bonus_credits, price_idr=p.price_idr, price_usd=float(p.price_usd or 0),
            is_featured=p.is_featured,
        )
        for p in rows
    ]
    return {"packages": items, "total": len(items)}


# ----- Usage -----

@router.get("/usage")
def get_usage(
    client_id: Optional[str] = Query(None),
    endpoint: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    items = recent_usage(db, client_id=client_id, endpoint=endpoint, limit=limit)
    return {"items": items, "total": len(items)}


@router.get("/usage/summary")
def get_usage_summary(client_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return {"endpoints": usage_summary(db, client_id=client_id)}


@router.get("/audit")
def get_audit(action: Optional[str] = Query(None), limit: int = Query(100, ge=1, le=1000)):
    items = get_recent_audit_logs(limit, action=action)
    return {"items": items, "total": len(items)}


# ----- Marketplace data -----

@router.post("/leads", status_code=201)
def create_lead(payload: LeadCreate, request: Request, db: Session = Depends(get_db)):
    lead = Lead(**payload.model_dump())
    db.add(lead)
    db.commit()
    db.refresh(lead)
    _audit(request, "lead_create", f"lead:{lead.id}")
    return {**full_lead_view(lead), "is_sold": lead.is_sold}


@router.get("/leads")
def list_leads(
    sold: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    stmt = select(Lead).order_by(Lead.created_at.desc()).limit(limit)
    if sold is not None:
        stmt = stmt.where(Lead.is_sold.is_(sold))
    items = [
        {**full_lead_view(lead), "is_sold": lead.is_sold, "sold_to": lead.sold_to,
         "sold_price": lead.sold_price, "sold_at": _iso(lead.sold_at)}
        for lead in db.scalars(stmt)
    ]
    return {"leads": items, "total": len(items)}


@router.post("/insights", status_code=201)
def create_insight(payload: InsightCreate, request: Request, db: Session = Depends(get_db)):
    insight = MarketInsight(**payload.model_dump())
    db.add(insight)
    db.commit()
    _audit(request, "insight_create", f"insight:{insight.id}")
    return {"id": insight.id, "region": insight.region, "insight_type": insight.insight_type}


@router.post("/valuations", status_code=201)
def create_valuation(payload: ValuationCreate, request: Request, db: Session = Depends(get_db)):
    valuation = PropertyValuation(**payload.model_dump())
    db.add(valuation)
    db.commit()
    _audit(request, "valuation_create", f"valuation:{valuation.id}")
    return {"id": valuation.id, "property_id": valuation.property_id, "estimated_value": valuation.estimated_value}
