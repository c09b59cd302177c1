"""
Credit ledger service
"""
import pytest
from sqlalchemy import func, select

from b2b_gateway.errors import InsufficientCredits
from b2b_gateway.models import CreditTransaction
from b2b_gateway.services import credits as credit_service

from conftest import balance_of


def test_debit_updates_balance_and_ledger(db, make_client):
    c = make_client(credits=50)
    entry = credit_service.debit(db, c, 15, reference_type="api_call", reference_id="insights")
    db.commit()

    assert entry.amount == -15
    assert entry.balance_after == 35
    assert c.credits_balance == 35
    assert c.lifetime_credits_used == 15
    assert balance_of(c.id) == 35


def test_debit_exact_balance(db, make_client):
    c = make_client(credits=30)
    credit_service.debit(db, c, 30)
    db.commit()
    assert balance_of(c.id) == 0


def test_debit_refused_leaves_balance(db, make_client):
    c = make_client(credits=12)
    with pytest.raises(InsufficientCredits) as exc:
        credit_service.debit(db, c, 15)
    db.rollback()

    assert exc.value.status_code == 402
    assert exc.value.to_dict() == {
        "error": "Insufficient credits",
        "code": "INSUFFICIENT_CREDITS",
        "credits_needed": 15,
        "credits_balance": 12,
    }
    assert balance_of(c.id) == 12
    assert db.scalar(select(func.count(CreditTransaction.id))) == 0


def test_zero_cost_is_noop(db, make_client):
    c = make_client(credits=0)
    assert credit_service.debit(db, c, 0) is None


def test_credit_and_ledger_reconstructs_balance(db, make_client):
    """Test sum of ledger amounts equals the balance"""
    c = make_client(credits=0)
    credit_service.credit(db, c, 100, description="Opening balance")
    credit_service.debit(db, c, 30)
    credit_service.debit(db, c, 5)
    credit_service.credit(db, c, 10, transaction_type="adjustment")
    db.commit()

    total = db.scalar(select(func.sum(CreditTransaction.amount)).where(CreditTransaction.client_id == c.id))
    assert total == 75
    assert balance_of(c.id) == 75
    assert c.lifetime_credits_used == 35


@pytest.mark.parametrize("amount", [0, -5])
def test_credit_rejects_non_positive(db, make_client, amount):
    c = make_client()
    with pytest.raises(ValueError):
        credit_service.credit(db, c, amount)
