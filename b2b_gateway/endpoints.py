"""
Gateway endpoint catalogue

Each endpoint declares its price, accepted methods and required parameters
next to its handler. ``cost=None`` means the handler prices the call itself
(purchase-lead depends on the lead's score).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

from sqlalchemy.orm import Session

from . import config
from .models import ApiKey, Client
from .services import leads as lead_service
from .services import market


UNKNOWN_LABEL = "unknown"


class Endpoint(str, Enum):
    INFO = "info"
    LEADS = "leads"
    INSIGHTS = "insights"
    DEMOGRAPHICS = "demographics"
    VALUATIONS = "valuations"
    PURCHASE_LEAD = "purchase-lead"


@dataclass
class CallContext:
    db: Session
    client: Client
    api_key: ApiKey
    endpoint: Endpoint
    method: str
    query: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    credits_used: int = 0

    def param(self, name: str, source: str = "query") -> Any:
        values = self.body if source == "body" else self.query
        value = values.get(name)
        if isinstance(value, str):
            value = value.strip()
        return value if value not in (None, "") else None


@dataclass(frozen=True)
class EndpointSpec:
    endpoint: Endpoint
    handler: Callable[[CallContext], Any]
    cost: Optional[int] = 0
    methods: Optional[FrozenSet[str]] = None   # None accepts any method
    required: Tuple[str, ...] = ()
    param_source: str = "query"
    description: str = ""


def _int_param(value: Any, default: int, minimum: int = 1, maximum: Optional[int] = None) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    n = max(minimum, n)
    return min(n, maximum) if maximum is not None else n


def rate_limit_for(client: Client, key: ApiKey) -> int:
    if key.rate_limit_per_minute:
        return key.rate_limit_per_minute
    return config.TIER_RATE_LIMITS.get(client.tier, config.TIER_RATE_LIMITS["starter"])


def handle_info(ctx: CallContext):
    return {
        "client_id": ctx.client.id,
        "company_name": ctx.client.company_name,
        "tier": ctx.client.tier,
        "credits_balance": ctx.client.credits_balance,
        "lifetime_credits_used": ctx.client.lifetime_credits_used,
        "allowed_endpoints": list(ctx.api_key.allowed_endpoints or []),
        "rate_limit": {"requests_per_minute": rate_limit_for(ctx.client, ctx.api_key)},
        "pricing": pricing_catalogue(),
    }


def handle_leads(ctx: CallContext):
    limit = _int_param(ctx.param("limit"), config.LEADS_DEFAULT_LIMIT, maximum=config.LEADS_MAX_LIMIT)
    min_score = ctx.param("min_score")
    return lead_service.list_available_leads(
        ctx.db,
        limit=limit,
        property_type=ctx.param("property_type"),
        location=ctx.param("location"),
        min_score=_int_param(min_score, 0, minimum=0, maximum=100) if min_score is not None else None,
    )


def handle_insights(ctx: CallContext):
    limit = _int_param(ctx.param("limit"), config.INSIGHTS_DEFAULT_LIMIT, maximum=config.INSIGHTS_MAX_LIMIT)
    return market.search_insights(ctx.db, ctx.param("region"), ctx.param("type"), limit)


def handle_demographics(ctx: CallContext):
    return market.simulated_demographics(ctx.param("region"))


def handle_valuations(ctx: CallContext):
    return market.latest_valuation(ctx.db, str(ctx.param("property_id")))


def handle_purchase_lead(ctx: CallContext):
    result = lead_service.purchase_lead(ctx.db, ctx.client, str(ctx.param("lead_id", source="body")))
    ctx.credits_used = result["credits_spent"]
    return result


ENDPOINTS: Dict[Endpoint, EndpointSpec] = {
    spec.endpoint: spec
    for spec in (
        EndpointSpec(Endpoint.INFO, handle_info, cost=0,
                     description="Account tier, balance and entitlements"),
        EndpointSpec(Endpoint.LEADS, handle_leads, cost=0,
                     description="Available leads by descending score"),
        EndpointSpec(Endpoint.INSIGHTS, handle_insights, cost=15,
                     description="Market insights filtered by region"),
        EndpointSpec(Endpoint.DEMOGRAPHICS, handle_demographics, cost=30,
                     description="Demographic profile for a region (simulated)"),
        EndpointSpec(Endpoint.VALUATIONS, handle_valuations, cost=5, required=("property_id",),
                     description="Latest valuation for a property"),
        EndpointSpec(Endpoint.PURCHASE_LEAD, handle_purchase_lead, cost=None,
                     methods=frozenset({"POST"}), required=("lead_id",), param_source="body",
                     description="Buy a lead's contact details"),
    )
}


def pricing_catalogue() -> Dict[str, Any]:
    catalogue = {}
    for endpoint, spec in ENDPOINTS.items():
        if spec.cost is None:
            price = {
                "standard": lead_service.STANDARD_LEAD_PRICE,
                "premium": lead_service.PREMIUM_LEAD_PRICE,
                "premium_min_score": lead_service.PREMIUM_LEAD_SCORE,
            }
        else:
            price = spec.cost
        catalogue[endpoint.value] = {"credits": price, "description": spec.description}
    return catalogue


def endpoint_name_from_path(path: str) -> str:
    """Last path segment names the endpoint; none means info"""
    segments = [s for s in (path or "").split("/") if s]
    return segments[-1] if segments else Endpoint.INFO.value


def lookup(name: str) -> Optional[EndpointSpec]:
    try:
        return ENDPOINTS[Endpoint(name)]
    except ValueError:
        return None


def endpoint_label(name: str) -> str:
    """Catalogue name, or UNKNOWN_LABEL for any name outside the catalogue"""
    return name if lookup(name) else UNKNOWN_LABEL
