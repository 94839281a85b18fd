"""
External system integrations (TMDb).

New upstream clients should live under this namespace so they remain
decoupled from the app entrypoint (`api/`).
"""
