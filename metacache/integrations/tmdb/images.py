from __future__ import annotations

import requests

from metacache.integrations.tmdb.client import (
    MAX_ATTEMPTS,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_DELAY_SECONDS,
    FetchError,
    get_with_retry,
)

TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"

_IMAGE_HEADERS = {
    "accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


class InvalidImageReference(ValueError):
    pass


def build_image_url(image_path: str) -> str:
    path = str(image_path).strip()
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{TMDB_IMAGE_BASE_URL}{path}"


def fetch_image(
    image_path: str | None,
    *,
    session: requests.Session | None = None,
    retries: int = MAX_ATTEMPTS,
    delay_seconds: float = RETRY_DELAY_SECONDS,
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
) -> bytes:
    """
    Download one TMDb image at the "original" rendition.

    A missing reference raises `InvalidImageReference` without any network call.
    """

    if not image_path or not str(image_path).strip():
        raise InvalidImageReference("Image path is undefined")

    session = session or requests.Session()
    resp = get_with_retry(
        session,
        build_image_url(image_path),
        headers=_IMAGE_HEADERS,
        retries=retries,
        delay_seconds=delay_seconds,
        timeout_seconds=timeout_seconds,
    )
    data = resp.content or b""
    if not data:
        raise FetchError("Empty image response", status_code=resp.status_code)
    return data
