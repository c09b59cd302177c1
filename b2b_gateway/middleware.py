import logging
import random
import time
import uuid
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .config import API_VERSION, LOG_EXCLUDE_PATHS, LOG_SAMPLE_RATE
from .logging_config import trace_id_var
from .metrics import observe_request
from .security import get_client_ip

logger = logging.getLogger("app")

REQUEST_ID_HEADER = "X-Request-ID"


class TracingMiddleware(BaseHTTPMiddleware):
    """Tag each request with a trace id, time it, log it and count it.

    Client errors and server errors are always logged; successful requests are
    sampled at ``sample_rate``. Paths in ``exclude_paths`` (health checks,
    scrapes) are counted but never logged.
    """

    def __init__(self, app: ASGIApp, sample_rate: float = LOG_SAMPLE_RATE,
                 exclude_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.sample_rate = sample_rate
        self.exclude_paths = frozenset(LOG_EXCLUDE_PATHS if exclude_paths is None else exclude_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        trace_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = trace_id_var.set(trace_id)
        request.state.trace_id = trace_id
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers[REQUEST_ID_HEADER] = trace_id
            return response
        except Exception:
            logger.exception("request crashed", extra={"method": request.method, "path": request.url.path})
            raise
        finally:
            latency_ms = round((time.perf_counter() - started) * 1000, 2)
            observe_request(request.url.path, status, latency_ms)
            self._log(request, status, latency_ms)
            trace_id_var.reset(token)

    def _log(self, request: Request, status: int, latency_ms: float) -> None:
        path = request.url.path
        if path in self.exclude_paths:
            return
        if status < 400 and random.random() > self.sample_rate:
            return

        level = logging.INFO
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING

        logger.log(level, "%s %s -> %s", request.method, path, status, extra={
            "method": request.method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "client_ip": get_client_ip(request) or "unknown",
            "client_id": getattr(request.state, "client_id", None),
        })


class ApiVersionHeaderMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-API-Version"] = API_VERSION
        return response
