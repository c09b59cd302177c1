from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class LeadCreate(BaseModel):
    lead_source: str = "inquiry"
    property_type: Optional[str] = None
    property_location: Optional[str] = None
    lead_intent: Optional[str] = Field(None, pattern="^(buy|rent|invest)$")
    lead_budget: Optional[int] = Field(None, ge=0)
    lead_score: int = Field(0, ge=0, le=100)
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None


class InsightCreate(BaseModel):
    region: str = Field(..., min_length=1)
    insight_type: str = "price_trend"
    title: Optional[str] = None
    data: Dict[str, Any] = {}
    period: Optional[str] = None


class ValuationCreate(BaseModel):
    property_id: str = Field(..., min_length=1)
    estimated_value: int = Field(..., gt=0)
    currency: str = Field("IDR", min_length=3, max_length=3)
    confidence_score: Optional[float] = Field(None, ge=0, le=1)
    valuation_method: Optional[str] = None
