"""
Lead purchase: pricing, exclusivity and atomicity
"""
import pytest
from sqlalchemy import select

from b2b_gateway.db import SessionLocal
from b2b_gateway.models import Client, CreditTransaction, Lead, LeadPurchase
from b2b_gateway.services import leads as lead_service

from conftest import GATEWAY, balance_of, count

PURCHASE = f"{GATEWAY}/purchase-lead"


def _lead(lead_id):
    with SessionLocal() as s:
        return s.get(Lead, lead_id)


def test_requires_post(client, account, make_lead):
    c, headers = account
    lead = make_lead(score=80)
    response = client.get(f"{PURCHASE}?lead_id={lead.id}", headers=headers)
    assert response.status_code == 405
    assert response.json()["code"] == "METHOD_NOT_ALLOWED"
    assert balance_of(c.id) == 100


def test_missing_lead_id(client, account):
    _, headers = account
    response = client.post(PURCHASE, headers=headers, json={})
    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_PARAM"
    assert response.json()["param"] == "lead_id"


def test_lead_id_in_query_is_ignored(client, account, make_lead):
    _, headers = account
    lead = make_lead(score=80)
    response = client.post(f"{PURCHASE}?lead_id={lead.id}", headers=headers)
    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_PARAM"


def test_unknown_lead(client, account):
    c, headers = account
    response = client.post(PURCHASE, headers=headers, json={"lead_id": "does-not-exist"})
    assert response.status_code == 404
    assert response.json()["code"] == "LEAD_NOT_AVAILABLE"
    assert balance_of(c.id) == 100


@pytest.mark.parametrize("score,price", [(100, 25), (70, 25), (69, 10), (0, 10)])
def test_price_by_score(client, account, make_lead, score, price):
    """Test premium pricing starts at score 70"""
    c, headers = account
    lead = make_lead(score=score)
    response = client.post(PURCHASE, headers=headers, json={"lead_id": lead.id})
    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["credits_used"] == price
    assert body["data"]["credits_spent"] == price
    assert body["data"]["credits_remaining"] == 100 - price
    assert balance_of(c.id) == 100 - price


def test_purchase_reveals_contact_and_records_sale(client, account, make_lead):
    c, headers = account
    lead = make_lead(score=85, contact_email="buyer@example.com")
    data = client.post(PURCHASE, headers=headers, json={"lead_id": lead.id}).json()["data"]

    assert data["lead"]["contact_email"] == "buyer@example.com"
    assert data["lead"]["contact_name"] == "Budi Santoso"

    sold = _lead(lead.id)
    assert sold.is_sold is True
    assert sold.sold_to == c.id
    assert sold.sold_price == 25
    assert sold.sold_at is not None

    with SessionLocal() as s:
        purchase = s.scalar(select(LeadPurchase).where(LeadPurchase.lead_id == lead.id))
        assert purchase.id == data["purchase_id"]
        assert purchase.client_id == c.id
        assert purchase.credits_spent == 25
        assert purchase.lead_snapshot["contact_email"] == "buyer@example.com"

        ledger = s.scalars(select(CreditTransaction)).all()
        assert len(ledger) == 1
        assert ledger[0].transaction_type == "purchase"
        assert ledger[0].amount == -25
        assert ledger[0].balance_after == 75
        assert ledger[0].reference_id == purchase.id


def test_lead_sold_only_once(client, make_client, make_key, make_lead):
    """Test a second purchase of the same lead fails without charging"""
    first = make_client(credits=100, company_name="First Agency")
    second = make_client(credits=100, company_name="Second Agency")
    key_a = make_key(first, raw_key="AAAA0001-first-secret")
    key_b = make_key(second, raw_key="BBBB0002-second-secret")
    lead = make_lead(score=90)

    ok = client.post(PURCHASE, headers={"x-api-key": key_a}, json={"lead_id": lead.id})
    assert ok.status_code == 200

    again = client.post(PURCHASE, headers={"x-api-key": key_b}, json={"lead_id": lead.id})
    assert again.status_code == 404
    assert again.json()["code"] == "LEAD_NOT_AVAILABLE"

    same_buyer = client.post(PURCHASE, headers={"x-api-key": key_a}, json={"lead_id": lead.id})
    assert same_buyer.status_code == 404

    assert balance_of(first.id) == 75
    assert balance_of(second.id) == 100
    assert count(LeadPurchase) == 1
    assert _lead(lead.id).sold_to == first.id


def test_sold_lead_leaves_listing(client, account, make_lead):
    _, headers = account
    lead = make_lead(score=90)
    client.post(PURCHASE, headers=headers, json={"lead_id": lead.id})
    listed = client.get(f"{GATEWAY}/leads", headers=headers).json()["data"]
    assert lead.id not in [item["id"] for item in listed]


def test_insufficient_credits_leaves_lead_available(client, make_client, make_key, make_lead):
    c = make_client(credits=20)
    key = make_key(c)
    lead = make_lead(score=95)

    response = client.post(PURCHASE, headers={"x-api-key": key}, json={"lead_id": lead.id})
    assert response.status_code == 402
    body = response.json()
    assert body["code"] == "INSUFFICIENT_CREDITS"
    assert body["credits_needed"] == 25
    assert body["credits_balance"] == 20

    assert _lead(lead.id).is_sold is False
    assert balance_of(c.id) == 20
    assert count(LeadPurchase) == 0
    assert count(CreditTransaction) == 0


def test_failure_after_mark_sold_rolls_back(client, account, make_lead, monkeypatch):
    """Test a failing debit undoes the sale and the purchase row"""
    c, headers = account
    lead = make_lead(score=90)

    def broken_debit(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr("b2b_gateway.services.leads.debit", broken_debit)
    response = client.post(PURCHASE, headers=headers, json={"lead_id": lead.id})
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "INTERNAL_ERROR"

    assert _lead(lead.id).is_sold is False
    assert balance_of(c.id) == 100
    assert count(LeadPurchase) == 0


def test_lead_sold_elsewhere_after_lookup(client, account, make_lead, monkeypatch):
    """Test the conditional mark-sold refuses a lead another buyer took meanwhile"""
    c, headers = account
    lead = make_lead(score=90)
    real_lookup = lead_service.get_available_lead

    def lookup_then_sell_elsewhere(db, lead_id):
        found = real_lookup(db, lead_id)
        with SessionLocal() as other:
            other.get(Lead, lead_id).is_sold = True
            other.commit()
        return found

    monkeypatch.setattr(lead_service, "get_available_lead", lookup_then_sell_elsewhere)
    response = client.post(PURCHASE, headers=headers, json={"lead_id": lead.id})
    assert response.status_code == 404
    assert response.json()["code"] == "LEAD_NOT_AVAILABLE"

    assert balance_of(c.id) == 100
    assert _lead(lead.id).sold_to is None
    assert count(LeadPurchase) == 0
    assert count(CreditTransaction) == 0


def test_balance_drained_after_precheck(client, account, make_lead, monkeypatch):
    """Test the conditional debit refuses when the loaded balance is stale"""
    c, headers = account
    lead = make_lead(score=90)
    real_lookup = lead_service.get_available_lead

    def lookup_then_drain(db, lead_id):
        found = real_lookup(db, lead_id)
        with SessionLocal() as other:
            other.get(Client, c.id).credits_balance = 0
            other.commit()
        return found

    monkeypatch.setattr(lead_service, "get_available_lead", lookup_then_drain)
    response = client.post(PURCHASE, headers=headers, json={"lead_id": lead.id})
    assert response.status_code == 402
    body = response.json()
    assert body["code"] == "INSUFFICIENT_CREDITS"
    assert body["credits_needed"] == 25
    assert body["credits_balance"] == 0

    assert _lead(lead.id).is_sold is False
    assert count(LeadPurchase) == 0
    assert count(CreditTransaction) == 0
