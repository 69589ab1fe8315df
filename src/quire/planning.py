"""Compute the full set of output pages from a :class:`SiteIndex`."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from quire.config import DEFAULT_PAGE_SIZE, check_page_size
from quire.exceptions import OutputPathCollisionError
from quire.routing import PathConvention
from quire.types import PageKind, PagePlanEntry

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from quire.types import SiteIndex, Taxonomy

logger = logging.getLogger(__name__)


def page_count(item_count: int, page_size: int) -> int:
    check_page_size(page_size)
    return math.ceil(item_count / page_size)


def paginate(items: Sequence[str], page_size: int) -> list[tuple[str, ...]]:
    """Split items into pages; page N holds items [(N-1)*size, N*size)."""
    return [
        tuple(items[(number - 1) * page_size : number * page_size])
        for number in range(1, page_count(len(items), page_size) + 1)
    ]


def _linked_entries(
    kind: PageKind,
    pages: list[tuple[str, ...]],
    path_for: Callable[[int], str],
    term: str | None = None,
) -> list[PagePlanEntry]:
    total = len(pages)
    paths = [path_for(number) for number in range(1, total + 1)]
    return [
        PagePlanEntry(
            output_path=paths[i],
            kind=kind,
            items=items,
            page_number=i + 1,
            total_pages=total,
            term=term,
            prev_path=paths[i - 1] if i > 0 else None,
            next_path=paths[i + 1] if i + 1 < total else None,
        )
        for i, items in enumerate(pages)
    ]


def _post_entries(index: SiteIndex, convention: PathConvention) -> list[PagePlanEntry]:
    pages = [(slug,) for slug in index.chronology]
    slugs = list(index.chronology)
    return _linked_entries(PageKind.POST, pages, lambda number: convention.post_path(slugs[number - 1]))


def _term_entries(
    taxonomy: Taxonomy,
    known: set[str],
    page_size: int,
    convention: PathConvention,
) -> list[PagePlanEntry]:
    entries: list[PagePlanEntry] = []
    for term in taxonomy.terms:
        members = [slug for slug in term.members if slug in known]
        if not members:
            logger.debug("Dropping %s '%s': no remaining members", taxonomy.kind.value, term.name)
            continue
        entries.extend(
            _linked_entries(
                taxonomy.kind,
                paginate(members, page_size),
                lambda number, term_slug=term.slug: convention.listing_path(taxonomy.kind, term_slug, number),
                term=term.name,
            )
        )
    return entries


def generate_page_plan(
    index: SiteIndex,
    page_size: int = DEFAULT_PAGE_SIZE,
    convention: PathConvention | None = None,
) -> tuple[PagePlanEntry, ...]:
    """Return every page of the site in render order.

    Post pages come first (newest first), then the paginated index, then tag
    and category listings in taxonomy order. Consecutive pages of the same
    sequence are linked through ``prev_path``/``next_path``.

    Raises:
        InvalidConfigError: If ``page_size`` is not positive.
        OutputPathCollisionError: If two pages resolve to the same output path.

    """
    check_page_size(page_size)
    convention = convention or PathConvention()
    known = set(index.chronology)

    # An empty corpus still gets a (single, empty) site root.
    index_pages = paginate(index.chronology, page_size) or [()]

    entries = [
        *_post_entries(index, convention),
        *_linked_entries(PageKind.INDEX, index_pages, convention.index_path),
        *_term_entries(index.tags, known, page_size, convention),
        *_term_entries(index.categories, known, page_size, convention),
    ]

    seen: set[str] = set()
    for entry in entries:
        if entry.output_path in seen:
            raise OutputPathCollisionError(entry.output_path)
        seen.add(entry.output_path)

    logger.info("Planned %d pages", len(entries))
    return tuple(entries)
