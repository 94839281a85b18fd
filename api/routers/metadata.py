"""
Cache-aside endpoints serving TMDb metadata through the CDN.
"""
from __future__ import annotations

import logging
from typing import Any

import requests
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from api.deps import BatchWorkers, StorageSettings, require_batch_workers, require_storage
from metacache.ingestion.metadata_cache import (
    InvalidMetadataRequest,
    get_batch_metadata,
    get_metadata,
    validate_batch_request,
    validate_request,
)
from metacache.integrations.tmdb.client import FetchError
from metacache.media.bunny_storage import UploadError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["metadata"])


# --- Pydantic models ---

class BatchMetadataResponse(BaseModel):
    results: list[dict[str, Any]]


# --- Endpoints ---

@router.get("/getMetadata")
def get_metadata_route(
    storage: StorageSettings,
    identifier: str | None = Query(default=None, alias="id"),
    media_type: str | None = Query(default=None, alias="type"),
    season: str | None = Query(default=None),
    episode: str | None = Query(default=None),
) -> dict[str, Any]:
    """Return CDN URLs for a title or episode, filling the cache from TMDb on a miss."""
    try:
        validate_request(identifier, media_type)
    except InvalidMetadataRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    config = require_storage(storage)

    try:
        return get_metadata(identifier, media_type, season, episode, config=config)
    except (FetchError, UploadError, requests.RequestException, RuntimeError) as exc:
        logger.error(f"[ERROR] Failed to fetch/upload {media_type} ID {identifier}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to fetch and upload data.") from exc


@router.get("/getBatchMetadata", response_model=BatchMetadataResponse)
def get_batch_metadata_route(
    storage: StorageSettings,
    max_workers: BatchWorkers,
    ids: str | None = Query(default=None),
    media_type: str | None = Query(default=None, alias="type"),
) -> dict[str, Any]:
    """Resolve a comma-separated list of ids; per-id failures are reported inline."""
    try:
        id_list = validate_batch_request(ids, media_type)
    except InvalidMetadataRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    config = require_storage(storage)
    workers = require_batch_workers(max_workers)

    results = get_batch_metadata(id_list, media_type, max_workers=workers, config=config)
    return {"results": results}
