"""
TMDb integration clients.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from metacache.integrations.tmdb.client import (
        FetchError,
        fetch_episode_metadata,
        fetch_title_metadata,
    )
    from metacache.integrations.tmdb.images import InvalidImageReference, fetch_image

__all__ = [
    "FetchError",
    "InvalidImageReference",
    "fetch_episode_metadata",
    "fetch_image",
    "fetch_title_metadata",
]

_IMAGE_NAMES = {"InvalidImageReference", "fetch_image"}


def __getattr__(name: str):
    if name in _IMAGE_NAMES:
        from metacache.integrations.tmdb import images

        return getattr(images, name)
    if name in __all__:
        from metacache.integrations.tmdb import client

        return getattr(client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
