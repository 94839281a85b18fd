from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

HEAD_TIMEOUT_SECONDS = 10.0
PUT_TIMEOUT_SECONDS = 30.0


class UploadError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class StorageConfig:
    storage_url: str
    access_key: str
    cdn_base_url: str


def _require_env(name: str) -> str:
    value = (os.getenv(name) or "").strip()
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _load_storage_config() -> StorageConfig:
    return StorageConfig(
        storage_url=_require_env("BUNNY_STORAGE_REGION_URL").rstrip("/"),
        access_key=_require_env("BUNNY_API_KEY"),
        cdn_base_url=_require_env("CDN_BASE_URL").rstrip("/"),
    )


def get_storage_config() -> StorageConfig:
    return _load_storage_config()


def build_hosted_url(hosted_key: str, cdn_base_url: str | None = None) -> str:
    key = str(hosted_key or "").strip()
    if not key:
        raise RuntimeError("hosted_key is required to build hosted_url")
    base = (cdn_base_url or get_storage_config().cdn_base_url).rstrip("/")
    return f"{base}/{key.lstrip('/')}"


def object_exists(
    key: str,
    *,
    config: StorageConfig | None = None,
    session: requests.Session | None = None,
) -> bool:
    """
    Check the CDN for `key` with a HEAD request.

    Redirects are followed and only a final HTTP 200 counts as present. Any other
    status or a network error is reported as missing, so the caller re-fetches
    instead of serving a false hit.
    """

    config = config or get_storage_config()
    http = session or requests
    url = build_hosted_url(key, config.cdn_base_url)
    try:
        resp = http.head(url, timeout=HEAD_TIMEOUT_SECONDS, allow_redirects=True)
    except requests.RequestException as exc:
        logger.warning(f"HEAD {url} failed, treating as missing: {exc}")
        return False
    if resp.status_code != 200:
        logger.debug(f"HEAD {url} returned HTTP {resp.status_code}, treating as missing")
        return False
    return True


def upload_bytes(
    key: str,
    data: bytes,
    *,
    content_type: str = "application/octet-stream",
    config: StorageConfig | None = None,
    session: requests.Session | None = None,
) -> int:
    config = config or get_storage_config()
    http = session or requests
    url = f"{config.storage_url}/{key.lstrip('/')}"
    headers = {
        "AccessKey": config.access_key,
        "Content-Type": content_type,
    }
    try:
        resp = http.put(url, data=data, headers=headers, timeout=PUT_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        raise UploadError(f"Upload of {key} failed: {exc}") from exc
    if not 200 <= resp.status_code < 300:
        raise UploadError(
            f"Upload of {key} failed with HTTP {resp.status_code}.",
            status_code=resp.status_code,
        )
    return len(data)
