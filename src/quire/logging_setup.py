"""Logging for quire runs.

Parse and render work happens on named worker threads (``quire-parse_*``,
``quire-render_*``); at DEBUG level the thread name is prefixed to each record
so per-source and per-page messages can be told apart.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["LEVEL_NAMES", "configure_logging", "console", "resolve_level"]

LOG_LEVEL_ENV: Final[str] = "QUIRE_LOG_LEVEL"
LEVEL_NAMES: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_MANAGED_ATTR: Final[str] = "_quire_managed"
_PLAIN_FORMAT: Final[str] = "%(message)s"
_THREADED_FORMAT: Final[str] = "[%(threadName)s] %(message)s"

console = Console(stderr=True)


def resolve_level(level_name: str | None = None) -> int:
    """Return the numeric level for ``level_name`` or ``$QUIRE_LOG_LEVEL``.

    Raises:
        ValueError: If the name is not one of :data:`LEVEL_NAMES`.

    """
    name = (level_name or os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
    if name not in LEVEL_NAMES:
        msg = f"Unknown log level {name!r}; expected one of {', '.join(LEVEL_NAMES)}"
        raise ValueError(msg)
    return logging.getLevelNamesMapping()[name]


def _managed_handler(root: logging.Logger) -> RichHandler | None:
    for handler in root.handlers:
        if isinstance(handler, RichHandler) and getattr(handler, _MANAGED_ATTR, False):
            return handler
    return None


def configure_logging(level_name: str | None = None) -> RichHandler:
    """Route all records through a single Rich handler.

    Repeated calls reuse the handler and only change the level and format.
    Messages quote source paths and YAML values verbatim, so Rich markup is off.
    """
    level = resolve_level(level_name)
    root = logging.getLogger()

    handler = _managed_handler(root)
    if handler is None:
        root.handlers.clear()
        handler = RichHandler(console=console, rich_tracebacks=True, show_path=False, markup=False)
        setattr(handler, _MANAGED_ATTR, True)
        root.addHandler(handler)

    handler.setFormatter(logging.Formatter(_THREADED_FORMAT if level <= logging.DEBUG else _PLAIN_FORMAT))
    root.setLevel(level)
    logging.captureWarnings(True)
    return handler
