"""
Configuration module for the B2B gateway
"""

import os
from pathlib import Path


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _read_version_from_repo(default: str = "dev") -> str:
    try:
        # repo root: b2b_gateway/.. (two parents up)
        version_file = Path(__file__).resolve().parents[1] / "VERSION"
        v = version_file.read_text(encoding="utf-8").strip()
        if v:
            return v
    except OSError:
        pass
    return os.getenv("APP_VERSION", default)


APP_NAME = os.getenv("APP_NAME", "b2b-gateway")
API_VERSION = _read_version_from_repo()

# Database configuration
sqlite_path = os.getenv("SQLITE_PATH", "./b2b_gateway.db")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{sqlite_path}")
AUTO_CREATE_SCHEMA = env_bool("AUTO_CREATE_SCHEMA", True)
SEED_DEMO_DATA = env_bool("SEED_DEMO_DATA", False)

# API configuration
API_PREFIX = "/v1"
APP_PORT = int(os.getenv("APP_PORT", "8000"))

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").lower()
LOGGING_CONFIG = os.getenv("LOGGING_CONFIG", "LOGGING.yaml")
LOG_SAMPLE_RATE = float(os.getenv("LOG_SAMPLE_RATE", "1.0"))
LOG_EXCLUDE_PATHS = set(os.getenv("LOG_EXCLUDE_PATHS", "/v1/health,/v1/metrics/prometheus").split(","))

# Security configuration
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
REDACT_FIELDS = os.getenv("REDACT_FIELDS", "password,token,api_key,secret").lower().split(",")
TRUST_PROXY: bool = env_bool("TRUST_PROXY", True)

# Usage logging: "background" runs after the response is sent, "inline" awaits it
USAGE_LOG_MODE = os.getenv("USAGE_LOG_MODE", "background").lower()

# Endpoint tuning
LEADS_DEFAULT_LIMIT = int(os.getenv("LEADS_DEFAULT_LIMIT", "20"))
LEADS_MAX_LIMIT = int(os.getenv("LEADS_MAX_LIMIT", "100"))
INSIGHTS_DEFAULT_LIMIT = int(os.getenv("INSIGHTS_DEFAULT_LIMIT", "20"))
INSIGHTS_MAX_LIMIT = int(os.getenv("INSIGHTS_MAX_LIMIT", "100"))

# Requests per minute advertised by the info endpoint, per client tier
TIER_RATE_LIMITS = {
    "starter": int(os.getenv("RATE_LIMIT_STARTER", "60")),
    "professional": int(os.getenv("RATE_LIMIT_PROFESSIONAL", "300")),
    "enterprise": int(os.getenv("RATE_LIMIT_ENTERPRISE", "1000")),
}
DEFAULT_ALLOWED_ENDPOINTS = [
    e.strip() for e in os.getenv("DEFAULT_ALLOWED_ENDPOINTS", "leads").split(",") if e.strip()
]
