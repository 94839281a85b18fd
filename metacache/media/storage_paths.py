from __future__ import annotations

from metacache.models.metadata import StoragePaths


def _title_stem(media_type: str, identifier: str | int) -> str:
    return f"{media_type}_{identifier}"


def _episode_stem(tv_id: str | int, season: str | int, episode: str | int) -> str:
    return f"episode_{tv_id}_s{season}_e{episode}"


def build_metadata_key(media_type: str, identifier: str | int) -> str:
    """
    Build the storage key for a title's metadata JSON.

    Path: metadata/{type}_{id}.json
    """
    return "/".join(["metadata", f"{_title_stem(media_type, identifier)}.json"])


def build_poster_key(media_type: str, identifier: str | int) -> str:
    """
    Path: images/poster/{type}_{id}.jpg
    """
    return "/".join(["images", "poster", f"{_title_stem(media_type, identifier)}.jpg"])


def build_backdrop_key(media_type: str, identifier: str | int) -> str:
    """
    Path: images/backdrop/{type}_{id}.jpg
    """
    return "/".join(["images", "backdrop", f"{_title_stem(media_type, identifier)}.jpg"])


def build_episode_metadata_key(tv_id: str | int, season: str | int, episode: str | int) -> str:
    """
    Path: metadata/episode_{id}_s{season}_e{episode}.json
    """
    return "/".join(["metadata", f"{_episode_stem(tv_id, season, episode)}.json"])


def build_episode_image_key(tv_id: str | int, season: str | int, episode: str | int) -> str:
    """
    Path: images/episode/episode_{id}_s{season}_e{episode}.jpg
    """
    return "/".join(["images", "episode", f"{_episode_stem(tv_id, season, episode)}.jpg"])


def build_title_paths(media_type: str, identifier: str | int) -> StoragePaths:
    return StoragePaths(
        meta_key=build_metadata_key(media_type, identifier),
        image_key=build_poster_key(media_type, identifier),
        backdrop_key=build_backdrop_key(media_type, identifier),
    )


def build_episode_paths(tv_id: str | int, season: str | int, episode: str | int) -> StoragePaths:
    return StoragePaths(
        meta_key=build_episode_metadata_key(tv_id, season, episode),
        image_key=build_episode_image_key(tv_id, season, episode),
    )
