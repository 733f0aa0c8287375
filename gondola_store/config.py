"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


HOST = env_str("GONDOLA_HOST", "0.0.0.0")
PORT = env_int("GONDOLA_PORT", 8080, minimum=1)
LISTEN_BACKLOG = env_int("GONDOLA_LISTEN_BACKLOG", 128, minimum=1)
MAX_BODY_BYTES = env_int("GONDOLA_MAX_BODY_BYTES", 4 * 1024 * 1024, minimum=1024)

PAGE_BUTTONS = env_int("GONDOLA_PAGE_BUTTONS", 5, minimum=3)
MAX_PAGE_BUTTONS = env_int("GONDOLA_MAX_PAGE_BUTTONS", 101, minimum=3)
MAX_TOTAL_PAGES = env_int("GONDOLA_MAX_TOTAL_PAGES", 1000000, minimum=1)
DEFAULT_PER_PAGE = env_int("GONDOLA_DEFAULT_PER_PAGE", 5, minimum=1)
MAX_STATEMENT_ROWS = env_int("GONDOLA_MAX_STATEMENT_ROWS", 5000, minimum=1)

LOG_LEVEL = env_str("GONDOLA_LOG_LEVEL", "INFO").upper()
