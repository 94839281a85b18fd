from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

NOT_RATED = "Not rated"


@dataclass(frozen=True)
class TitleMetadata:
    """
    Normalized metadata for a movie or TV series.

    Note: `poster_path` and `backdrop_path` are TMDb image references (e.g. `/abc.jpg`),
    not storage keys.
    """

    title: str | None = None
    description: str | None = None
    genres: list[str] | None = None
    release_date: str | None = None
    average_vote: float | None = None
    original_language: str | None = None
    age_rating: str = NOT_RATED
    poster_path: str | None = None
    backdrop_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EpisodeMetadata:
    title: str | None = None
    description: str | None = None
    air_date: str | None = None
    average_vote: float | None = None
    season_number: int | None = None
    episode_number: int | None = None
    still_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StoragePaths:
    """
    Storage keys resolved for one request.

    Titles carry a poster (`image_key`) and a backdrop; episodes carry only a still
    (`image_key`) and leave `backdrop_key` unset.
    """

    meta_key: str
    image_key: str
    backdrop_key: str | None = None

    @property
    def is_episode(self) -> bool:
        return self.backdrop_key is None
