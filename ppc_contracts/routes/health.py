"""Liveness and readiness probes."""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from minio import Minio
from sqlalchemy import text

from ppc_contracts.core.config import settings
from ppc_contracts.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _database_status() -> Optional[str]:
    """None when healthy, otherwise the failure text."""
    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
    except Exception as exc:
        return str(exc)
    return None


def _storage_status(minio: Optional[Minio]) -> Optional[str]:
    if minio is None:
        return "not configured"
    try:
        minio.bucket_exists(settings.S3_BUCKET_SIGNATURES)
    except Exception as exc:
        return f"error: {exc}"
    return None


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(request: Request):
    """503 until the database, the signatures bucket and Temporal all answer."""
    checks = {}

    db_error = await _database_status()
    checks["database"] = "ok" if db_error is None else f"error: {db_error}"

    storage_error = _storage_status(getattr(request.app.state, "minio", None))
    checks["storage"] = storage_error or "ok"

    # Signing itself works without Temporal; notifications do not
    temporal = getattr(request.app.state, "temporal", None)
    checks["temporal"] = "ok" if temporal is not None else "not connected"

    failing = sorted(name for name, status in checks.items() if status != "ok")
    if failing:
        logger.warning("Readiness degraded: %s", ", ".join(f"{n}={checks[n]}" for n in failing))
    return JSONResponse(
        status_code=503 if failing else 200,
        content={"status": "degraded" if failing else "ok", "checks": checks},
    )
