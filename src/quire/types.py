"""Core data types for quire.

Every value here is immutable once built: a run produces fresh units, a fresh
:class:`SiteIndex` snapshot and a fresh page plan, and later stages only read
what earlier stages returned.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class PageKind(str, Enum):
    POST = "post"
    TAG = "tag"
    CATEGORY = "category"
    INDEX = "index"


class TermPolicy(str, Enum):
    """How tag and category names are compared."""

    CASE_INSENSITIVE = "case-insensitive"
    CASE_SENSITIVE = "case-sensitive"

    def key(self, name: str) -> str:
        if self is TermPolicy.CASE_INSENSITIVE:
            return name.casefold()
        return name


class ContentUnit(BaseModel):
    """One independently addressable article parsed from a content source."""

    model_config = ConfigDict(frozen=True)

    source: str
    title: str
    date: datetime
    tags: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    description: str | None = None
    keywords: tuple[str, ...] = ()
    body: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)
    slug: str | None = None


class TaxonomyTerm(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    key: str
    slug: str
    members: tuple[str, ...] = ()


class Taxonomy(BaseModel):
    """Ordered mapping of tag or category names to the slugs carrying them."""

    model_config = ConfigDict(frozen=True)

    kind: PageKind
    policy: TermPolicy = TermPolicy.CASE_INSENSITIVE
    terms: tuple[TaxonomyTerm, ...] = ()

    @property
    def names(self) -> list[str]:
        return [term.name for term in self.terms]

    def get(self, name: str) -> TaxonomyTerm | None:
        key = self.policy.key(name)
        for term in self.terms:
            if term.key == key:
                return term
        return None

    def __len__(self) -> int:
        return len(self.terms)


class SiteIndex(BaseModel):
    """Snapshot of everything the page plan is computed from."""

    model_config = ConfigDict(frozen=True)

    units: tuple[ContentUnit, ...] = ()
    chronology: tuple[str, ...] = ()
    tags: Taxonomy = Field(default_factory=lambda: Taxonomy(kind=PageKind.TAG))
    categories: Taxonomy = Field(default_factory=lambda: Taxonomy(kind=PageKind.CATEGORY))

    _by_slug: dict[str, ContentUnit] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._by_slug = {unit.slug: unit for unit in self.units if unit.slug}

    def unit(self, slug: str) -> ContentUnit:
        """Return the unit carrying ``slug``.

        Raises:
            KeyError: If no unit in the snapshot has that slug.

        """
        return self._by_slug[slug]

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug


class PagePlanEntry(BaseModel):
    """One output page and the unit slugs it renders."""

    model_config = ConfigDict(frozen=True)

    output_path: str
    kind: PageKind
    items: tuple[str, ...] = ()
    page_number: int = 1
    total_pages: int = 1
    term: str | None = None
    prev_path: str | None = None
    next_path: str | None = None


class RenderRequest(BaseModel):
    """What a renderer receives for a single page."""

    model_config = ConfigDict(frozen=True)

    entry: PagePlanEntry
    units: tuple[ContentUnit, ...] = ()
    index: SiteIndex


class RenderedPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_path: str
    content: str


class RenderFailure(BaseModel):
    """A page the renderer could not produce; collected, never raised."""

    model_config = ConfigDict(frozen=True)

    output_path: str
    error_type: str
    message: str


class ExcludedSource(BaseModel):
    """A content source left out of the build because it failed to parse."""

    model_config = ConfigDict(frozen=True)

    source: str
    error_type: str
    message: str


class BuildStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"


class BuildReport(BaseModel):
    """Outcome of a build run that was not aborted."""

    model_config = ConfigDict(frozen=True)

    index: SiteIndex
    plan: tuple[PagePlanEntry, ...] = ()
    pages: tuple[RenderedPage, ...] = ()
    excluded: tuple[ExcludedSource, ...] = ()
    render_failures: tuple[RenderFailure, ...] = ()

    @property
    def status(self) -> BuildStatus:
        if self.excluded or self.render_failures:
            return BuildStatus.PARTIAL
        return BuildStatus.SUCCESS
