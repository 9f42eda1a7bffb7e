"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from billing.api.v1 import documents, health, sequences
from billing.config import settings
from billing.db import dispose_engine
from billing.logging import setup_logging

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Billing Numbering API", debug=settings.debug)

    yield

    logger.info("Shutting down Billing Numbering API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="Billing Numbering API",
    description="Gap-filling statutory document numbering for the billing backend",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(sequences.router, prefix="/api/v1", tags=["sequences"])
app.include_router(documents.router, prefix="/api/v1", tags=["documents"])
