# tests/conftest.py
import os
import tempfile

# Point the app at a throw-away SQLite file before anything imports b2b_gateway.db
_DB_DIR = tempfile.mkdtemp(prefix="b2b-gateway-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["SEED_DEMO_DATA"] = "false"

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from b2b_gateway.db import Base, SessionLocal, engine  # noqa: E402
from b2b_gateway.main import app  # noqa: E402
from b2b_gateway.models import ApiKey, ApiUsage, Client, Lead  # noqa: E402
from b2b_gateway.utils.crypto import hash_token, key_prefix  # noqa: E402

ADMIN_KEY = "DEV_ADMIN_KEY_5a8f9ffdc3"
TEST_KEY = "ABCD1234-0f6e2b9c1d7a4e58"
ALL_ENDPOINTS = ["leads", "insights", "demographics", "valuations", "purchase-lead"]
GATEWAY = "/v1/b2b-api"


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_KEY}"}


@pytest.fixture
def make_client(db):
    def _make(credits: int = 100, is_active: bool = True, tier: str = "starter", **kw) -> Client:
        c = Client(company_name=kw.pop("company_name", "Acme Realty"), tier=tier,
                   is_active=is_active, credits_balance=credits, **kw)
        db.add(c)
        db.commit()
        return c
    return _make


@pytest.fixture
def make_key(db):
    def _make(client: Client, raw_key: str = TEST_KEY, allowed=None, is_active: bool = True,
              expires_at=None, rate_limit_per_minute=None) -> str:
        db.add(ApiKey(
            client_id=client.id,
            key_prefix=key_prefix(raw_key),
            key_hash=hash_token(raw_key),
            allowed_endpoints=list(ALL_ENDPOINTS if allowed is None else allowed),
            is_active=is_active,
            expires_at=expires_at,
            rate_limit_per_minute=rate_limit_per_minute,
        ))
        db.commit()
        return raw_key
    return _make


@pytest.fixture
def make_lead(db):
    def _make(score: int = 50, is_sold: bool = False, **kw) -> Lead:
        lead = Lead(
            lead_score=score,
            is_sold=is_sold,
            lead_source=kw.pop("lead_source", "inquiry"),
            property_type=kw.pop("property_type", "apartment"),
            property_location=kw.pop("property_location", "Jakarta Selatan"),
            contact_name=kw.pop("contact_name", "Budi Santoso"),
            contact_email=kw.pop("contact_email", "budi@example.com"),
            contact_phone=kw.pop("contact_phone", "+62 811 000 111"),
            created_at=kw.pop("created_at", datetime.now(timezone.utc)),
            **kw,
        )
        db.add(lead)
        db.commit()
        return lead
    return _make


@pytest.fixture
def account(make_client, make_key):
    """Active client with 100 credits and a key allowed on every endpoint"""
    c = make_client(credits=100)
    key = make_key(c)
    return c, {"x-api-key": key}


def balance_of(client_id: str) -> int:
    with SessionLocal() as s:
        return s.scalar(select(Client.credits_balance).where(Client.id == client_id))


def usage_rows(client_id: str = None) -> list:
    with SessionLocal() as s:
        stmt = select(ApiUsage).order_by(ApiUsage.created_at)
        if client_id:
            stmt = stmt.where(ApiUsage.client_id == client_id)
        return list(s.scalars(stmt))


def count(model) -> int:
    with SessionLocal() as s:
        return s.scalar(select(func.count()).select_from(model))
