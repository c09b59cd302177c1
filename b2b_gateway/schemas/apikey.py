from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ApiKeyCreate(BaseModel):
    name: str = Field("default", max_length=128)
    allowed_endpoints: Optional[List[str]] = None
    expires_at: Optional[datetime] = None
    rate_limit_per_minute: Optional[int] = Field(None, gt=0)


class ApiKeyOut(BaseModel):
    id: str
    client_id: str
    name: str
    key_prefix: str
    is_active: bool
    allowed_endpoints: List[str]
    rate_limit_per_minute: Optional[int]
    expires_at: Optional[str]
    last_used_at: Optional[str]
    created_at: Optional[str]


class ApiKeyIssued(ApiKeyOut):
    api_key: str
