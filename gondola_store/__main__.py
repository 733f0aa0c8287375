"""Module entrypoint for running the store API server."""

from __future__ import annotations

from .config import HOST, PORT
from .logger import configure_logging
from .server import DependencyError, run


def main() -> None:
    logger = configure_logging()
    try:
        run(HOST, PORT)
    except DependencyError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
