"""
Dependency injection for storage settings and other shared configuration.

Configuration errors are resolved to None here and turned into a 500 by the
router only after the query itself has been validated.
"""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException

from metacache.ingestion.metadata_cache import get_batch_max_workers
from metacache.media.bunny_storage import StorageConfig, get_storage_config
from metacache.utils.env import load_env

load_env()

logger = logging.getLogger(__name__)


def get_storage_settings() -> StorageConfig | None:
    """
    Returns the CDN storage configuration read from the environment, or None if it is incomplete.
    """
    try:
        return get_storage_config()
    except RuntimeError as exc:
        logger.error(f"Storage configuration error: {exc}")
        return None


def get_batch_workers() -> int | None:
    """
    Returns the concurrency cap for the batch endpoint, or None if it is invalid.
    """
    try:
        return get_batch_max_workers()
    except RuntimeError as exc:
        logger.error(f"Batch configuration error: {exc}")
        return None


def require_storage(storage: StorageConfig | None) -> StorageConfig:
    if storage is None:
        # Don't leak which variable is missing to the client
        raise HTTPException(status_code=500, detail="Server storage is not configured.")
    return storage


def require_batch_workers(max_workers: int | None) -> int:
    if max_workers is None:
        raise HTTPException(status_code=500, detail="Server batch settings are invalid.")
    return max_workers


# Type aliases for dependency injection
StorageSettings = Annotated[StorageConfig | None, Depends(get_storage_settings)]
BatchWorkers = Annotated[int | None, Depends(get_batch_workers)]
