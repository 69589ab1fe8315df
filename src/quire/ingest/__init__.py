"""Turning raw content sources into content units."""

from quire.ingest.frontmatter import dump_content_unit, parse_content_unit
from quire.ingest.loader import discover_sources, read_source, source_id
from quire.ingest.splitter import DEFAULT_MARKER, LogicalSource, split_source

__all__ = [
    "DEFAULT_MARKER",
    "LogicalSource",
    "discover_sources",
    "dump_content_unit",
    "parse_content_unit",
    "read_source",
    "source_id",
    "split_source",
]
