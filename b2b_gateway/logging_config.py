import contextvars
import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import yaml

from .config import LOG_FORMAT, LOG_LEVEL, LOGGING_CONFIG

# Per-request trace id, set by TracingMiddleware
trace_id_var = contextvars.ContextVar("b2b_trace_id", default=None)

# Fields every JSON line carries, populated from ``extra=`` when present
REQUEST_FIELDS = ("method", "path", "status", "latency_ms", "client_ip")
GATEWAY_FIELDS = ("client_id", "endpoint", "code", "credits_used")

_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def get_trace_id() -> Optional[str]:
    return trace_id_var.get()


class JsonFormatter(logging.Formatter):
    """One JSON object per line: request fields, gateway fields, then any other extras"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "trace_id": get_trace_id(),
            "component": getattr(record, "component", "api"),
        }
        for name in REQUEST_FIELDS + GATEWAY_FIELDS:
            entry[name] = getattr(record, name, None)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and key not in entry:
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _default_config(level: str, fmt: str) -> Dict[str, Any]:
    handler_names = ["console"]
    quiet = {"level": "WARNING", "handlers": handler_names, "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "text": {"format": "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": fmt,
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "app": {"level": level, "handlers": handler_names, "propagate": False},
            "b2b_gateway": {"level": level, "handlers": handler_names, "propagate": False},
            "uvicorn.error": {"level": level, "handlers": handler_names, "propagate": False},
            "uvicorn.access": quiet,
            "sqlalchemy.engine": quiet,
        },
        "root": {"level": level, "handlers": handler_names},
    }


def _load_yaml(path: str) -> Optional[Dict[str, Any]]:
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logging.getLogger("app").warning("Ignoring unreadable logging config %s: %s", path, e)
        return None


def setup_logging() -> Dict[str, Any]:
    """Configure logging from LOGGING.yaml if present, else from LOG_LEVEL / LOG_FORMAT"""
    level = LOG_LEVEL
    fmt = LOG_FORMAT if LOG_FORMAT in ("json", "text") else "json"

    config = _load_yaml(LOGGING_CONFIG) or _default_config(level, fmt)

    # Environment wins over the file for level and format
    for handler in config.get("handlers", {}).values():
        if "formatter" in handler and fmt in config.get("formatters", {}):
            handler["formatter"] = fmt
    for name, logger_cfg in config.get("loggers", {}).items():
        if name in ("app", "b2b_gateway"):
            logger_cfg["level"] = level

    logging.config.dictConfig(config)
    return config
