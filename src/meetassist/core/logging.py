"""Logging setup shared by the API server and the CLI."""
from __future__ import annotations

import logging
from collections.abc import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Client libraries that log every outbound request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def setup_logging(level: str | int = "INFO", quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    if isinstance(level, str):
        level = level.upper()
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)
