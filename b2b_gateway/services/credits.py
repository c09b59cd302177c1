"""
Credit metering

Balances are only ever changed through conditional UPDATE statements so the
check and the write are a single database operation. Every change appends a
CreditTransaction with the resulting balance.
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..errors import InsufficientCredits
from ..models import Client, CreditTransaction

logger = logging.getLogger(__name__)


def current_balance(db: Session, client_id: str) -> int:
    return db.scalar(select(Client.credits_balance).where(Client.id == client_id)) or 0


def _append_ledger(db: Session, client_id: str, transaction_type: str, amount: int,
                   reference_type: Optional[str], reference_id: Optional[str],
                   description: Optional[str]) -> CreditTransaction:
    entry = CreditTransaction(
        client_id=client_id,
        transaction_type=transaction_type,
        amount=amount,
        balance_after=current_balance(db, client_id),
        reference_type=reference_type,
        reference_id=reference_id,
        description=description,
    )
    db.add(entry)
    db.flush()
    return entry


def debit(
    db: Session,
    client: Client,
    cost: int,
    transaction_type: str = "usage",
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
    description: Optional[str] = None,
) -> Optional[CreditTransaction]:
    """Charge ``cost`` credits or raise InsufficientCredits without touching the balance.

    Runs inside the caller's transaction; nothing is committed here.
    """
    if cost <= 0:
        return None

    result = db.execute(
        update(Client)
        .where(Client.id == client.id, Client.credits_balance >= cost)
        .values(
            credits_balance=Client.credits_balance - cost,
            lifetime_credits_used=Client.lifetime_credits_used + cost,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        balance = current_balance(db, client.id)
        logger.info("credit debit refused client=%s cost=%s balance=%s", client.id, cost, balance)
        raise InsufficientCredits(credits_needed=cost, credits_balance=balance)

    entry = _append_ledger(db, client.id, transaction_type, -cost, reference_type, reference_id, description)
    db.expire(client, ["credits_balance", "lifetime_credits_used"])
    return entry


def credit(
    db: Session,
    client: Client,
    amount: int,
    transaction_type: str = "topup",
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
    description: Optional[str] = None,
) -> CreditTransaction:
    """Add credits to a client balance"""
    if amount <= 0:
        raise ValueError("amount must be positive")

    db.execute(
        update(Client)
        .where(Client.id == client.id)
        .values(credits_balance=Client.credits_balance + amount)
        .execution_options(synchronize_session=False)
    )
    entry = _append_ledger(db, client.id, transaction_type, amount, reference_type, reference_id, description)
    db.expire(client, ["credits_balance"])
    return entry
