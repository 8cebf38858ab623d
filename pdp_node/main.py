"""
main.py — PDP Node Service Entrypoint
========================================
Runs the FastAPI service that generates and verifies
Proofs of Data Possession for stored documents.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from pdp_node.api.routes import router
from pdp_node.config import settings
from pdp_node.services.inflight import InFlightGuard
from pdp_node.services.pdp_service import PDPService
from pdp_node.services.record_store import FileRecordStore
from pdp_node.services.retrieval import HttpRetrievalClient

# ── Logging Configuration ─────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("pdp-node")


def build_service() -> PDPService:
    """Wire the PDP service to the configured storage node and record store."""
    return PDPService(
        retriever=HttpRetrievalClient(
            settings.STORAGE_NODE_URL, timeout=settings.RETRIEVAL_TIMEOUT
        ),
        store=FileRecordStore(settings.DATA_DIR),
        block_size=settings.BLOCK_SIZE,
        challenge_count=settings.CHALLENGE_COUNT,
        index_domain=settings.INDEX_DOMAIN,
        nonce_size=settings.NONCE_SIZE,
        retrieval_timeout=settings.RETRIEVAL_TIMEOUT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: build the service unless one was injected."""
    if getattr(app.state, "pdp_service", None) is None:
        app.state.pdp_service = build_service()
    logger.info("PDP node starting on %s:%d", settings.HOST, settings.PORT)
    logger.info("Storage node: %s", settings.STORAGE_NODE_URL)
    logger.info("Block size:   %d bytes", app.state.pdp_service.block_size)
    logger.info("Challenges:   %d per proof", app.state.pdp_service.challenge_count)
    yield
    logger.info("PDP node shutting down")


def create_app(service: Optional[PDPService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Pre-built PDP service; when omitted one is built from
            settings at startup.
    """
    app = FastAPI(
        title="PDP Node — Proof of Data Possession API",
        description=(
            "Generates and verifies Proofs of Data Possession for stored "
            "documents.\n\n"
            "**Generate:** retrieve → challenge → sample + HMAC → Merkle "
            "root → proof hash → record\n\n"
            "**Verify:** retrieve → Merkle root → compare → record → "
            "update status"
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.pdp_service = service
    app.state.inflight = InFlightGuard()
    app.include_router(router)
    return app


app = create_app()
