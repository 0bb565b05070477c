"""Logging helpers shared by every jsonsync module."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: int = logging.INFO, fmt: Optional[str] = None) -> None:
    """
    Attach a single stream handler to the ``jsonsync`` logger.

    Calling it again only updates the level.
    """
    global _configured
    root = logging.getLogger("jsonsync")
    root.setLevel(level)
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or LOG_FORMAT))
    root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; names outside the package are nested under it."""
    if not name.startswith("jsonsync"):
        name = f"jsonsync.{name}"
    return logging.getLogger(name)
