"""quire: index markdown articles and plan a static page tree."""

from quire.config import QuireConfig
from quire.exceptions import (
    BuildError,
    ContentError,
    InvalidConfigError,
    MalformedDateError,
    MissingFieldError,
    SlugCollisionError,
)
from quire.indexing import build_index
from quire.ingest import parse_content_unit, split_source
from quire.pipeline import SiteBuilder
from quire.planning import generate_page_plan
from quire.slugs import resolve_slugs, slugify
from quire.types import BuildReport, ContentUnit, PageKind, PagePlanEntry, SiteIndex, TermPolicy

__version__ = "0.1.0"

__all__ = [
    "BuildError",
    "BuildReport",
    "ContentError",
    "ContentUnit",
    "InvalidConfigError",
    "MalformedDateError",
    "MissingFieldError",
    "PageKind",
    "PagePlanEntry",
    "QuireConfig",
    "SiteBuilder",
    "SiteIndex",
    "SlugCollisionError",
    "TermPolicy",
    "build_index",
    "generate_page_plan",
    "parse_content_unit",
    "resolve_slugs",
    "slugify",
    "split_source",
]
