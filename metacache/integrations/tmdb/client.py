from __future__ import annotations

import logging
import os
import time
from typing import Any, Mapping

import requests

from metacache.models.metadata import NOT_RATED, EpisodeMetadata, TitleMetadata

logger = logging.getLogger(__name__)

TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
TMDB_LANGUAGE = "en-US"
TITLE_MEDIA_TYPES = ("movie", "tv")

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 1.0
REQUEST_TIMEOUT_SECONDS = 8.0


class FetchError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


def _require_api_key(api_key: str | None) -> str:
    resolved = (api_key or os.getenv("TMDB_API_KEY") or "").strip()
    if not resolved:
        raise RuntimeError("TMDB_API_KEY is not set.")
    return resolved


def _get_once(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None,
    headers: Mapping[str, str],
    timeout_seconds: float,
) -> requests.Response:
    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout_seconds)
    except requests.RequestException as exc:
        # requests messages embed the URL, which carries the api_key query param
        raise FetchError(f"TMDb request failed: {type(exc).__name__}") from exc
    if resp.status_code != 200:
        raise FetchError(
            f"TMDb request failed with HTTP {resp.status_code}.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        )
    return resp


def get_with_retry(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    retries: int = MAX_ATTEMPTS,
    delay_seconds: float = RETRY_DELAY_SECONDS,
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
) -> requests.Response:
    """
    GET `url` with a bounded, fixed-delay retry.

    Every failure (network error or non-200) is retried until `retries` attempts
    are used up; the last `FetchError` is raised.
    """

    merged_headers = {"user-agent": "metacache/0.1", **(headers or {})}
    attempts = max(1, int(retries))
    for attempt in range(1, attempts + 1):
        try:
            return _get_once(session, url, params=params, headers=merged_headers, timeout_seconds=timeout_seconds)
        except FetchError as exc:
            if attempt >= attempts:
                raise
            logger.warning(f"[Retry] TMDb request failed (attempt {attempt}/{attempts}): {exc}")
            time.sleep(delay_seconds)
    raise FetchError("TMDb request failed (no attempts made).")


def _request_json(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    resp = get_with_retry(session, url, params=params, headers={"accept": "application/json"})
    try:
        payload = resp.json()
    except ValueError as exc:
        raise FetchError(
            "TMDb returned non-JSON response.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        ) from exc

    if not isinstance(payload, dict):
        raise FetchError("TMDb returned unexpected JSON shape (not an object).")
    return payload


def _genre_names(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    names: list[str] = []
    for genre in value:
        if isinstance(genre, Mapping) and genre.get("name"):
            names.append(str(genre["name"]))
    return names


def normalize_title_payload(payload: Mapping[str, Any]) -> TitleMetadata:
    """
    Normalize a `/movie/{id}` or `/tv/{id}` payload.

    Movies use `title`/`release_date`, series use `name`/`first_air_date`; either is accepted.
    TMDb exposes no age rating on these endpoints, so it is always "Not rated".
    """

    return TitleMetadata(
        title=payload.get("title") or payload.get("name"),
        description=payload.get("overview"),
        genres=_genre_names(payload.get("genres")),
        release_date=payload.get("release_date") or payload.get("first_air_date"),
        average_vote=payload.get("vote_average"),
        original_language=payload.get("original_language"),
        age_rating=NOT_RATED,
        poster_path=payload.get("poster_path"),
        backdrop_path=payload.get("backdrop_path"),
    )


def normalize_episode_payload(payload: Mapping[str, Any]) -> EpisodeMetadata:
    return EpisodeMetadata(
        title=payload.get("name"),
        description=payload.get("overview"),
        air_date=payload.get("air_date"),
        average_vote=payload.get("vote_average"),
        season_number=payload.get("season_number"),
        episode_number=payload.get("episode_number"),
        still_path=payload.get("still_path"),
    )


def fetch_title_metadata(
    tmdb_id: str | int,
    media_type: str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    language: str = TMDB_LANGUAGE,
) -> TitleMetadata:
    """
    Fetch and normalize a movie or TV series from TMDb.

    Raises `FetchError` once retries are exhausted.
    """

    if media_type not in TITLE_MEDIA_TYPES:
        raise ValueError(f"Unsupported media type: {media_type!r}")

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/{media_type}/{tmdb_id}"
    payload = _request_json(session, url, params={"api_key": api_key, "language": language})
    return normalize_title_payload(payload)


def fetch_episode_metadata(
    tv_id: str | int,
    season: str | int,
    episode: str | int,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    language: str = TMDB_LANGUAGE,
) -> EpisodeMetadata:
    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{TMDB_API_BASE_URL}/tv/{tv_id}/season/{season}/episode/{episode}"
    payload = _request_json(session, url, params={"api_key": api_key, "language": language})
    return normalize_episode_payload(payload)
