"""
Shared metadata-cache library code.

This package holds the pieces reused by the FastAPI app in `api/`:
- TMDb metadata and image clients
- CDN object storage access and storage key layout
- the cache-aside flow that ties them together

App entrypoints should live outside this package and import from `metacache`
rather than the other way around.
"""
