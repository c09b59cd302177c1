"""
Health and version endpoints - no authentication required
"""
import os

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse
from sqlalchemy import text

from ..config import API_VERSION, APP_NAME
from ..db import engine
from ..metrics import render_latest

router = APIRouter()


@router.get("/health")
def health():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        return JSONResponse(status_code=503, content={"status": "degraded", "service": APP_NAME, "database": str(e)})
    return {"status": "ok", "service": APP_NAME, "database": "ok"}


@router.get("/version")
def get_version():
    git_sha = os.getenv("GIT_SHA", "unknown")
    return {
        "status": "ok",
        "service": APP_NAME,
        "api_version": "v1",
        "version": API_VERSION,
        "git_sha": git_sha[:7],
    }


@router.get("/metrics/prometheus", include_in_schema=False)
def prometheus_metrics():
    payload, content_type = render_latest()
    return Response(content=payload, media_type=content_type)
