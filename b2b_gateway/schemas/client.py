from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ClientCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    client_type: str = Field("agency", pattern="^(agency|investor|developer|bank|other)$")
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    tier: str = Field("starter", pattern="^(starter|professional|enterprise)$")
    initial_credits: int = Field(0, ge=0)


class ClientUpdate(BaseModel):
    tier: Optional[str] = Field(None, pattern="^(starter|professional|enterprise)$")
    is_active: Optional[bool] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None

    @field_validator("tier", "is_active")
    @classmethod
    def not_null(cls, v):
        # omit the field to leave it unchanged
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class ClientOut(BaseModel):
    id: str
    company_name: str
    client_type: str
    contact_name: Optional[str]
    contact_email: Optional[str]
    contact_phone: Optional[str]
    tier: str
    is_active: bool
    credits_balance: int
    lifetime_credits_used: int
    created_at: Optional[str]


class CreditTopUp(BaseModel):
    amount: Optional[int] = Field(None, gt=0)
    package_id: Optional[str] = None
    description: Optional[str] = None


class TransactionOut(BaseModel):
    id: str
    transaction_type: str
    amount: int
    balance_after: int
    reference_type: Optional[str]
    reference_id: Optional[str]
    description: Optional[str]
    created_at: Optional[str]


class PackageOut(BaseModel):
    id: str
    name: str
    description: Optional[str]
    credits: int
    bonus_credits: int
    price_idr: int
    price_usd: float
    is_featured: bool
