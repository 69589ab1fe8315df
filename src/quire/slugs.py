"""Slug derivation and corpus-wide collision detection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from unicodedata import category, combining, normalize

from quire.exceptions import SlugCollisionError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quire.types import ContentUnit

logger = logging.getLogger(__name__)


def _fold_latin(text: str) -> str:
    """NFKD-decompose and drop accents on ASCII base letters; other scripts keep their marks."""
    kept: list[str] = []
    for char in normalize("NFKD", text):
        if combining(char) and kept and kept[-1].isascii():
            continue
        kept.append(char)
    return normalize("NFC", "".join(kept))


def _is_slug_char(char: str) -> bool:
    return char.isalnum() or category(char).startswith("M")


def slugify(text: str, *, lowercase: bool = True) -> str:
    """Convert text to a URL-friendly slug.

    Latin letters are folded to ASCII; letters and digits of other scripts are
    kept. Every run of other characters becomes a single ``-``.

    Examples:
        >>> slugify("Fix Error 429: Too Many Requests")
        'fix-error-429-too-many-requests'
        >>> slugify("Café")
        'cafe'
        >>> slugify("Привет мир")
        'привет-мир'
        >>> slugify("VBA", lowercase=False)
        'VBA'
        >>> slugify("!!!")
        'untitled'

    """
    folded = _fold_latin(text)
    if lowercase:
        folded = folded.casefold()
    words = "".join(char if _is_slug_char(char) else " " for char in folded).split()
    return "-".join(words) or "untitled"


def content_slug(unit: ContentUnit) -> str:
    """Return the canonical 'YYYY/MM/DD/title-slug' for a unit."""
    return f"{unit.date:%Y/%m/%d}/{slugify(unit.title)}"


def resolve_slugs(units: Iterable[ContentUnit]) -> list[ContentUnit]:
    """Assign slugs to every unit, keeping input order.

    Raises:
        SlugCollisionError: If two units derive the same slug. The check only
            completes once every unit has been seen.

    """
    claimed: dict[str, str] = {}
    resolved: list[ContentUnit] = []
    for unit in units:
        slug = content_slug(unit)
        if slug in claimed:
            raise SlugCollisionError(slug, claimed[slug], unit.source)
        claimed[slug] = unit.source
        resolved.append(unit.model_copy(update={"slug": slug}))

    logger.debug("Resolved %d slugs", len(resolved))
    return resolved
