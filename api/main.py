"""
Metadata cache API - FastAPI application.

Provides endpoints for:
- Serving TMDb movie, TV and episode metadata through the CDN
- Batch lookups of several titles in one request
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import metadata

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = ["http://localhost:3001"]


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins from environment.
    Set CORS_ALLOW_ORIGINS as comma-separated list of origins.
    Example: CORS_ALLOW_ORIGINS=https://app.example.com,http://localhost:3001
    """
    origins_str = os.getenv("CORS_ALLOW_ORIGINS", "")
    if not origins_str:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting up metadata cache API...")
    yield
    logger.info("Shutting down metadata cache API...")


app = FastAPI(
    title="Metadata Cache API",
    description="Caching proxy for TMDb metadata and images backed by a CDN object store",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(metadata.router)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "metacache"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
