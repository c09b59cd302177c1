"""
Market data endpoints: insights, demographics and valuations
"""

import hashlib
import random
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import MarketInsight, PropertyValuation

DEFAULT_DEMOGRAPHICS_REGION = "Indonesia"


def search_insights(db: Session, region: Optional[str], insight_type: Optional[str], limit: int) -> List[Dict[str, Any]]:
    stmt = select(MarketInsight)
    if region:
        stmt = stmt.where(MarketInsight.region.ilike(f"%{region}%"))
    if insight_type:
        stmt = stmt.where(MarketInsight.insight_type == insight_type)
    stmt = stmt.order_by(MarketInsight.created_at.desc()).limit(limit)
    return [
        {
            "id": row.id,
            "region": row.region,
            "insight_type": row.insight_type,
            "title": row.title,
            "data": row.data,
            "period": row.period,
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
        for row in db.scalars(stmt)
    ]


def simulated_demographics(region: Optional[str]) -> Dict[str, Any]:
    """Placeholder demographic profile until a real data source is wired in.

    Values are derived from the region name so repeated calls agree.
    """
    region = (region or DEFAULT_DEMOGRAPHICS_REGION).strip() or DEFAULT_DEMOGRAPHICS_REGION
    seed = int(hashlib.sha256(region.lower().encode()).hexdigest()[:12], 16)
    rng = random.Random(seed)

    population = rng.randint(150_000, 11_000_000)
    age_split = [rng.randint(15, 30), rng.randint(25, 40), rng.randint(15, 25)]
    seniors = max(5, 100 - sum(age_split))
    total = sum(age_split) + seniors
    return {
        "region": region,
        "population": population,
        "households": population // rng.randint(3, 5),
        "median_age": round(rng.uniform(24.0, 38.0), 1),
        "population_growth_rate": round(rng.uniform(0.3, 2.8), 2),
        "homeownership_rate": round(rng.uniform(0.45, 0.85), 2),
        "avg_household_income_idr": rng.randint(4_000_000, 25_000_000),
        "age_distribution": {
            "0-17": round(age_split[0] / total, 2),
            "18-34": round(age_split[1] / total, 2),
            "35-54": round(age_split[2] / total, 2),
            "55+": round(seniors / total, 2),
        },
        "simulated": True,
        "source": "simulated",
    }


def latest_valuation(db: Session, property_id: str) -> Optional[Dict[str, Any]]:
    row = db.scalar(
        select(PropertyValuation)
        .where(PropertyValuation.property_id == property_id)
        .order_by(PropertyValuation.created_at.desc())
        .limit(1)
    )
    if row is None:
        return None
    return {
        "id": row.id,
        "property_id": row.property_id,
        "estimated_value": row.estimated_value,
        "currency": row.currency,
        "confidence_score": row.confidence_score,
        "valuation_method": row.valuation_method,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
