import logging
from threading import Lock

from sqlalchemy import func, select

from .db import SessionLocal, init_db

logger = logging.getLogger("app")

_initialized = False
_init_lock = Lock()

# Mirrors the packages sold in the admin console
DEFAULT_PACKAGES = [
    {"name": "Starter", "description": "Try the API", "credits": 100, "bonus_credits": 0,
     "price_idr": 1_500_000, "price_usd": 99, "is_featured": False},
    {"name": "Growth", "description": "For active agencies", "credits": 500, "bonus_credits": 50,
     "price_idr": 6_500_000, "price_usd": 429, "is_featured": True},
    {"name": "Professional", "description": "Teams with daily lead flow", "credits": 1500, "bonus_credits": 250,
     "price_idr": 17_500_000, "price_usd": 1149, "is_featured": False},
    {"name": "Enterprise", "description": "High-volume data access", "credits": 5000, "bonus_credits": 1000,
     "price_idr": 52_500_000, "price_usd": 3449, "is_featured": False},
]

DEMO_INSIGHTS = [
    {"region": "Jakarta Selatan", "insight_type": "price_trend", "title": "Apartment prices Q3",
     "data": {"avg_price_per_sqm": 38_500_000, "yoy_change_pct": 4.2}, "period": "2024-Q3"},
    {"region": "Bali - Badung", "insight_type": "rental_yield", "title": "Villa rental yields",
     "data": {"gross_yield_pct": 8.9, "occupancy_pct": 71}, "period": "2024-Q3"},
    {"region": "Surabaya", "insight_type": "demand", "title": "Landed house demand",
     "data": {"inquiries_index": 112, "days_on_market": 64}, "period": "2024-Q3"},
]


def seed_reference_data(db) -> None:
    """Insert credit packages and demo market data when tables are empty"""
    from .models import CreditPackage, MarketInsight

    if not db.scalar(select(func.count(CreditPackage.id))):
        db.add_all(CreditPackage(**p) for p in DEFAULT_PACKAGES)
        logger.info("seeded %d credit packages", len(DEFAULT_PACKAGES))
    if not db.scalar(select(func.count(MarketInsight.id))):
        db.add_all(MarketInsight(**i) for i in DEMO_INSIGHTS)
        logger.info("seeded %d market insights", len(DEMO_INSIGHTS))
    db.commit()


def init_schema_and_seed(seed: bool = False) -> None:
    """
    Ensure DB schema exists and optionally seed reference data.
    Safe to call multiple times.
    """
    global _initialized
    if _initialized:
        return
    with _init_lock:
        if _initialized:
            return
        init_db()
        if seed:
            with SessionLocal() as db:
                seed_reference_data(db)
        _initialized = True
