"""
Cache-aside flow for TMDb metadata mirrored to the CDN.

For each request:
- resolve deterministic storage keys from (type, id[, season, episode])
- HEAD the metadata key; on a hit return CDN URLs only
- on a miss fetch from TMDb, upload the metadata JSON, mirror each image
  independently, append to the upload log, and return metadata plus URLs

Metadata fetch/upload failures propagate to the caller. Image failures never do;
the URL for that image is returned as None instead.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

import requests

from metacache.integrations.tmdb.client import (
    TITLE_MEDIA_TYPES,
    FetchError,
    fetch_episode_metadata,
    fetch_title_metadata,
)
from metacache.integrations.tmdb.images import InvalidImageReference, fetch_image
from metacache.media.bunny_storage import (
    StorageConfig,
    UploadError,
    build_hosted_url,
    get_storage_config,
    object_exists,
    upload_bytes,
)
from metacache.media.storage_paths import build_episode_paths, build_title_paths
from metacache.models.metadata import StoragePaths
from metacache.upload_log import record_upload
from metacache.utils.env import env_int

logger = logging.getLogger(__name__)

DEFAULT_BATCH_MAX_WORKERS = 8
UPLOADED_STATUS = "uploaded"


class InvalidMetadataRequest(ValueError):
    pass


def _present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def validate_request(identifier: str | None, media_type: str | None) -> str:
    if not _present(identifier) or media_type not in TITLE_MEDIA_TYPES:
        raise InvalidMetadataRequest('Invalid or missing "id" or "type"')
    return str(identifier).strip()


def parse_identifier_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def get_batch_max_workers() -> int:
    return env_int("BATCH_MAX_WORKERS", DEFAULT_BATCH_MAX_WORKERS)


def is_episode_request(media_type: str, season: Any = None, episode: Any = None) -> bool:
    return media_type == "tv" and _present(season) and _present(episode)


def resolve_paths(
    media_type: str,
    identifier: str | int,
    season: str | int | None = None,
    episode: str | int | None = None,
) -> StoragePaths:
    if is_episode_request(media_type, season, episode):
        return build_episode_paths(identifier, str(season).strip(), str(episode).strip())
    return build_title_paths(media_type, identifier)


def _urls(paths: StoragePaths, cdn_base_url: str) -> dict[str, str]:
    urls = {
        "metaUrl": build_hosted_url(paths.meta_key, cdn_base_url),
        "imageUrl": build_hosted_url(paths.image_key, cdn_base_url),
    }
    if paths.backdrop_key is not None:
        urls["backdropUrl"] = build_hosted_url(paths.backdrop_key, cdn_base_url)
    return urls


def _encode_metadata(metadata: dict[str, Any]) -> bytes:
    return json.dumps(metadata, indent=2, ensure_ascii=False).encode("utf-8")


def _mirror_image(
    image_ref: str | None,
    key: str,
    *,
    identifier: str,
    kind: str,
    config: StorageConfig,
) -> bool:
    try:
        data = fetch_image(image_ref)
        upload_bytes(key, data, config=config)
    except InvalidImageReference:
        return False
    except (FetchError, UploadError, requests.RequestException) as exc:
        logger.warning(f"[WARNING] {kind.capitalize()} upload failed for ID {identifier}: {exc}")
        return False
    return True


def _upload_metadata(paths: StoragePaths, metadata: dict[str, Any], *, identifier: str, config: StorageConfig) -> None:
    try:
        upload_bytes(paths.meta_key, _encode_metadata(metadata), config=config)
    except UploadError as exc:
        logger.error(f"[ERROR] Metadata upload failed for ID {identifier} ({paths.meta_key}): {exc}")
        raise


def _fill_title(identifier: str, media_type: str, paths: StoragePaths, config: StorageConfig) -> dict[str, Any]:
    urls = _urls(paths, config.cdn_base_url)
    try:
        record = fetch_title_metadata(identifier, media_type)
    except FetchError as exc:
        logger.error(f"[ERROR] TMDb fetch failed for {media_type} ID {identifier}: {exc}")
        raise
    metadata = record.to_dict()
    _upload_metadata(paths, metadata, identifier=identifier, config=config)

    poster_ok = _mirror_image(
        record.poster_path, paths.image_key, identifier=identifier, kind="poster", config=config
    )
    backdrop_ok = _mirror_image(
        record.backdrop_path, paths.backdrop_key, identifier=identifier, kind="backdrop", config=config
    )

    record_upload(identifier, media_type, UPLOADED_STATUS)
    logger.info(f"[UPLOAD] {media_type.upper()} metadata uploaded for ID: {identifier}")
    return {
        "from": "tmdb",
        "metaUrl": urls["metaUrl"],
        "imageUrl": urls["imageUrl"] if poster_ok else None,
        "backdropUrl": urls["backdropUrl"] if backdrop_ok else None,
        "metadata": metadata,
    }


def _fill_episode(
    identifier: str,
    season: str,
    episode: str,
    paths: StoragePaths,
    config: StorageConfig,
) -> dict[str, Any]:
    urls = _urls(paths, config.cdn_base_url)
    try:
        record = fetch_episode_metadata(identifier, season, episode)
    except FetchError as exc:
        logger.error(f"[ERROR] TMDb fetch failed for TV ID {identifier} S{season}E{episode}: {exc}")
        raise
    metadata = record.to_dict()
    _upload_metadata(paths, metadata, identifier=identifier, config=config)

    still_ok = _mirror_image(record.still_path, paths.image_key, identifier=identifier, kind="still", config=config)

    record_upload(identifier, f"episode {season}-{episode}", UPLOADED_STATUS)
    logger.info(f"[UPLOAD] Episode metadata uploaded for TV ID: {identifier} S{season}E{episode}")
    return {
        "from": "tmdb",
        "metaUrl": urls["metaUrl"],
        "imageUrl": urls["imageUrl"] if still_ok else None,
        "metadata": metadata,
    }


def _get_title(identifier: str, media_type: str, config: StorageConfig) -> dict[str, Any]:
    paths = build_title_paths(media_type, identifier)
    if object_exists(paths.meta_key, config=config):
        logger.info(f"[CACHE] {media_type} metadata from CDN for ID: {identifier}")
        return {"from": "cdn", **_urls(paths, config.cdn_base_url)}
    return _fill_title(identifier, media_type, paths, config)


def get_metadata(
    identifier: str | None,
    media_type: str | None,
    season: str | int | None = None,
    episode: str | int | None = None,
    *,
    config: StorageConfig | None = None,
) -> dict[str, Any]:
    """
    Serve one title or episode, filling the CDN on a miss.

    Raises `InvalidMetadataRequest` before any network call when the id or type is bad.
    """

    identifier = validate_request(identifier, media_type)
    config = config or get_storage_config()

    if not is_episode_request(media_type, season, episode):
        return _get_title(identifier, media_type, config)

    season_s, episode_s = str(season).strip(), str(episode).strip()
    paths = resolve_paths(media_type, identifier, season_s, episode_s)
    if object_exists(paths.meta_key, config=config):
        logger.info(f"[CACHE] Episode S{season_s}E{episode_s} from CDN for TV ID: {identifier}")
        return {"from": "cdn", **_urls(paths, config.cdn_base_url)}
    return _fill_episode(identifier, season_s, episode_s, paths, config)


def _batch_entry(identifier: str, media_type: str, config: StorageConfig) -> dict[str, Any]:
    try:
        return {"id": identifier, **_get_title(identifier, media_type, config)}
    except Exception as exc:
        # One bad id must not take down its siblings or the 200 response.
        logger.error(f"[ERROR] Failed to process ID {identifier}: {exc}")
        return {"id": identifier, "error": True, "message": str(exc)}


def validate_batch_request(identifiers: str | Iterable[str] | None, media_type: str | None) -> list[str]:
    if isinstance(identifiers, str) or identifiers is None:
        ids = parse_identifier_list(identifiers)
    else:
        ids = [str(i).strip() for i in identifiers if _present(i)]
    if not ids or media_type not in TITLE_MEDIA_TYPES:
        raise InvalidMetadataRequest('Missing or invalid "ids" or "type"')
    return ids


def get_batch_metadata(
    identifiers: str | Iterable[str] | None,
    media_type: str | None,
    *,
    max_workers: int | None = None,
    config: StorageConfig | None = None,
) -> list[dict[str, Any]]:
    """
    Serve several titles of one type, one entry per identifier in input order.

    Per-identifier failures become `{"id", "error": True, "message"}` entries and never
    affect siblings. At most `max_workers` identifiers are processed at once.
    """

    ids = validate_batch_request(identifiers, media_type)
    config = config or get_storage_config()
    workers = max(1, min(max_workers or get_batch_max_workers(), len(ids)))

    results: list[dict[str, Any]] = [{} for _ in ids]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(_batch_entry, identifier, media_type, config): idx for idx, identifier in enumerate(ids)}
        for fut in as_completed(futures):
            results[futures[fut]] = fut.result()
    return results
