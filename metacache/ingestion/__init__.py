"""
Cache-aside helpers for filling the CDN from TMDb.
"""

from metacache.ingestion.metadata_cache import (
    InvalidMetadataRequest,
    get_batch_metadata,
    get_metadata,
    parse_identifier_list,
    resolve_paths,
    validate_batch_request,
    validate_request,
)

__all__ = [
    "InvalidMetadataRequest",
    "get_batch_metadata",
    "get_metadata",
    "parse_identifier_list",
    "resolve_paths",
    "validate_batch_request",
    "validate_request",
]
