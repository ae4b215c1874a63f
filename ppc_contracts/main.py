"""FastAPI application: contract authoring, public signing and health probes."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from temporalio.client import Client as TemporalClient

from ppc_contracts.core.config import settings
from ppc_contracts.core.logging import setup_logging
from ppc_contracts.db import init_db
from ppc_contracts.routes import contracts_router, health_router, signing_router
from ppc_contracts.storage.factory import build_minio_client

logger = logging.getLogger(__name__)


async def _connect_temporal() -> Optional[TemporalClient]:
    # Signing still works when this fails; notifications are skipped
    try:
        client = await TemporalClient.connect(
            settings.TEMPORAL_ADDRESS,
            namespace=settings.TEMPORAL_NAMESPACE,
        )
    except Exception as exc:
        logger.warning("Temporal unavailable at %s: %s", settings.TEMPORAL_ADDRESS, exc)
        return None
    logger.info("Connected to Temporal at %s", settings.TEMPORAL_ADDRESS)
    return client


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()

    storage_configured = all((settings.S3_ENDPOINT, settings.S3_ACCESS_KEY, settings.S3_SECRET_KEY))
    app.state.minio = build_minio_client() if storage_configured else None
    app.state.temporal = await _connect_temporal()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)

    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(contracts_router)
app.include_router(signing_router)
