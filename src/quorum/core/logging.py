"""Root logger setup for the Quorum service."""

from __future__ import annotations

import logging
import sys

from quorum.core.settings import settings

_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Install a stdout handler on the root logger once.

    Handlers already installed by uvicorn are left alone.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = logging.getLevelName((level or settings.log_level).upper())
    root = logging.getLogger()
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.sql_debug else logging.WARNING
    )
    _CONFIGURED = True
