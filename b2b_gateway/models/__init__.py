from .client import Client
from .apikey import ApiKey
from .lead import Lead, LeadPurchase
from .credit import CreditTransaction, CreditPackage
from .usage import ApiUsage
from .market import MarketInsight, PropertyValuation
from .admin_audit import AdminAuditLog

__all__ = [
    "Client",
    "ApiKey",
    "Lead",
    "LeadPurchase",
    "CreditTransaction",
    "CreditPackage",
    "ApiUsage",
    "MarketInsight",
    "PropertyValuation",
    "AdminAuditLog",
]
