"""
Gateway error taxonomy
Stable machine-readable codes returned in the ``code`` field of error bodies.
"""

from typing import Any, Dict, Optional

MISSING_API_KEY = "MISSING_API_KEY"
INVALID_API_KEY = "INVALID_API_KEY"
EXPIRED_API_KEY = "EXPIRED_API_KEY"
INACTIVE_ACCOUNT = "INACTIVE_ACCOUNT"
ENDPOINT_NOT_ALLOWED = "ENDPOINT_NOT_ALLOWED"
INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
MISSING_PARAM = "MISSING_PARAM"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
LEAD_NOT_AVAILABLE = "LEAD_NOT_AVAILABLE"
UNKNOWN_ENDPOINT = "UNKNOWN_ENDPOINT"
INTERNAL_ERROR = "INTERNAL_ERROR"


class GatewayError(Exception):
    """A terminal failure for the current request, rendered as ``{error, code}``"""

    status_code = 400
    code = INTERNAL_ERROR

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.extra}


# Authentication failures: never retryable
class AuthenticationError(GatewayError):
    status_code = 401


class MissingApiKey(AuthenticationError):
    code = MISSING_API_KEY


class InvalidApiKey(AuthenticationError):
    code = INVALID_API_KEY


class ExpiredApiKey(AuthenticationError):
    code = EXPIRED_API_KEY


# Authorization failures: entitlements must change out-of-band
class AuthorizationError(GatewayError):
    status_code = 403


class InactiveAccount(AuthorizationError):
    code = INACTIVE_ACCOUNT


class EndpointNotAllowed(AuthorizationError):
    code = ENDPOINT_NOT_ALLOWED


# Resource/state failures: caller may retry after correcting state
class InsufficientCredits(GatewayError):
    status_code = 402
    code = INSUFFICIENT_CREDITS

    def __init__(self, credits_needed: int, credits_balance: int):
        super().__init__(
            "Insufficient credits",
            {"credits_needed": credits_needed, "credits_balance": credits_balance},
        )


class MissingParam(GatewayError):
    status_code = 400
    code = MISSING_PARAM

    def __init__(self, param: str):
        super().__init__(f"Missing required parameter: {param}", {"param": param})


class MethodNotAllowed(GatewayError):
    status_code = 405
    code = METHOD_NOT_ALLOWED


class LeadNotAvailable(GatewayError):
    status_code = 404
    code = LEAD_NOT_AVAILABLE

    def __init__(self, message: str = "Lead not found or already sold"):
        super().__init__(message)


class UnknownEndpoint(GatewayError):
    status_code = 404
    code = UNKNOWN_ENDPOINT
