"""
Local runner: `python -m api`.
"""
from __future__ import annotations

import logging
import os

import uvicorn

from metacache.utils.env import load_env


def main() -> None:
    load_env()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    main()
