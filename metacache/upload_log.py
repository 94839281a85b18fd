"""
Append-only upload log.

One plain-text line per cache fill, meant for grepping; nothing reads it back.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_LOG_PATH = Path("logs") / "uploads.log"


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_upload_log_path() -> Path:
    raw = (os.getenv("UPLOAD_LOG_PATH") or "").strip()
    return Path(raw) if raw else DEFAULT_UPLOAD_LOG_PATH


def format_upload_entry(identifier: str, type_label: str, status: str, *, timestamp: str | None = None) -> str:
    return f"{timestamp or _now_utc_iso()} | {type_label} | ID: {identifier} | {status}\n"


def record_upload(identifier: str, type_label: str, status: str, *, log_path: Path | str | None = None) -> None:
    path = Path(log_path) if log_path else get_upload_log_path()
    entry = format_upload_entry(identifier, type_label, status)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(entry)
    except OSError as exc:
        logger.warning(f"Failed to write upload log {path}: {exc}")
