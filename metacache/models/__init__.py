"""
Domain models shared across the library and the API.
"""

from metacache.models.metadata import EpisodeMetadata, StoragePaths, TitleMetadata

__all__ = [
    "EpisodeMetadata",
    "StoragePaths",
    "TitleMetadata",
]
