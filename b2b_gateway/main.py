import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.admin import router as admin_router
from .api.gateway import router as gateway_router
from .api.health import router as health_router
from .config import API_PREFIX, API_VERSION, APP_NAME, AUTO_CREATE_SCHEMA, CORS_ORIGINS, DATABASE_URL, SEED_DEMO_DATA
from .db_init import init_schema_and_seed
from .errors import INTERNAL_ERROR
from .logging_config import setup_logging
from .metrics import BUILD_INFO
from .middleware import ApiVersionHeaderMiddleware, TracingMiddleware
from .security import get_cors_headers

# Configure logging at import time
setup_logging()

logger = logging.getLogger("app")
logger.info("startup: logging configured", extra={"component": "api"})


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("B2B gateway starting up", extra={"component": "api", "version": API_VERSION})

    if AUTO_CREATE_SCHEMA:
        init_schema_and_seed(seed=SEED_DEMO_DATA)
    BUILD_INFO.labels(version=API_VERSION).set(1)

    logger.info("B2B gateway ready", extra={
        "component": "api",
        "database": DATABASE_URL.split("://", 1)[0],
    })
    try:
        yield
    finally:
        logger.info("B2B gateway shutting down", extra={"component": "api"})


app = FastAPI(title="B2B Property Data Gateway", version=API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TracingMiddleware)
app.add_middleware(ApiVersionHeaderMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path, "method": request.method})
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "code": INTERNAL_ERROR},
        headers=get_cors_headers(),
    )


app.include_router(health_router, prefix=API_PREFIX)
app.include_router(gateway_router, prefix=API_PREFIX)
app.include_router(admin_router, prefix=API_PREFIX)


@app.get("/", include_in_schema=False)
def root():
    return {"service": APP_NAME, "version": API_VERSION, "docs": "/docs"}


# Server startup configuration
if __name__ == "__main__":
    import uvicorn
    from .config import APP_PORT

    logger.info(f"Starting B2B gateway on port {APP_PORT}")

    uvicorn.run(
        "b2b_gateway.main:app",
        host="0.0.0.0",
        port=APP_PORT,
        reload=False,
        access_log=True
    )
