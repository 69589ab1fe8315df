"""Build the tag, category and chronological indices.

This is the pipeline's join point: it needs the complete set of parsed units
because term order depends on the global chronological order, not on the
order in which parsing finished.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quire.slugs import slugify
from quire.types import ContentUnit, PageKind, SiteIndex, Taxonomy, TaxonomyTerm, TermPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def chronological_order(units: Sequence[ContentUnit]) -> list[ContentUnit]:
    """Newest first; units sharing a timestamp keep their ingestion order."""
    return sorted(units, key=lambda unit: unit.date, reverse=True)


def _build_taxonomy(kind: PageKind, ordered: Sequence[ContentUnit], policy: TermPolicy) -> Taxonomy:
    names: dict[str, str] = {}
    members: dict[str, list[str]] = {}
    for unit in ordered:
        values = unit.tags if kind is PageKind.TAG else unit.categories
        for name in values:
            key = policy.key(name)
            names.setdefault(key, name)
            slugs = members.setdefault(key, [])
            if unit.slug not in slugs:
                slugs.append(unit.slug)

    # Case-sensitive terms keep their case in the listing slug so distinct
    # spellings get distinct pages.
    lowercase = policy is TermPolicy.CASE_INSENSITIVE
    terms = tuple(
        TaxonomyTerm(
            name=names[key],
            key=key,
            slug=slugify(names[key], lowercase=lowercase),
            members=tuple(slugs),
        )
        for key, slugs in members.items()
    )
    return Taxonomy(kind=kind, policy=policy, terms=terms)


def build_index(
    units: Sequence[ContentUnit],
    policy: TermPolicy = TermPolicy.CASE_INSENSITIVE,
) -> SiteIndex:
    """Build a :class:`SiteIndex` from slug-resolved units in ingestion order.

    Raises:
        ValueError: If a unit has no slug yet.

    """
    unresolved = [unit.source for unit in units if not unit.slug]
    if unresolved:
        msg = f"Units must have resolved slugs before indexing: {', '.join(unresolved)}"
        raise ValueError(msg)

    ordered = chronological_order(units)
    index = SiteIndex(
        units=tuple(ordered),
        chronology=tuple(unit.slug for unit in ordered),
        tags=_build_taxonomy(PageKind.TAG, ordered, policy),
        categories=_build_taxonomy(PageKind.CATEGORY, ordered, policy),
    )
    logger.info(
        "Indexed %d units, %d tags, %d categories",
        len(index.units),
        len(index.tags),
        len(index.categories),
    )
    return index


def orphaned_slugs(index: SiteIndex) -> set[str]:
    """Slugs referenced by a term but missing from the chronological index."""
    known = set(index.chronology)
    referenced = {
        slug
        for taxonomy in (index.tags, index.categories)
        for term in taxonomy.terms
        for slug in term.members
    }
    return referenced - known
