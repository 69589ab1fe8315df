"""Discover and read markdown sources below a content directory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quire.exceptions import UnreadableSourceError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*.md"


def discover_sources(content_dir: Path, pattern: str = DEFAULT_PATTERN) -> list[Path]:
    """Return matching files in ingestion order (sorted by relative path)."""
    if not content_dir.is_dir():
        logger.warning("Content directory %s does not exist", content_dir)
        return []
    paths = [path for path in content_dir.glob(pattern) if path.is_file()]
    return sorted(paths, key=lambda path: path.relative_to(content_dir).as_posix())


def source_id(path: Path, content_dir: Path) -> str:
    return path.relative_to(content_dir).as_posix()


def read_source(path: Path, source: str, *, encoding: str = "utf-8") -> str:
    """Read a source file.

    Raises:
        UnreadableSourceError: If the file cannot be read or decoded.

    """
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableSourceError(source, str(exc)) from exc
