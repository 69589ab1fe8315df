"""Parse a single content source into a :class:`ContentUnit`.

A source opens with a frontmatter block delimited by lines containing only
``---``; everything after the closing delimiter is the body and is kept
verbatim. Delimiter detection and metadata export go through
python-frontmatter's YAML handler.
"""

from __future__ import annotations

from itertools import islice
from typing import TYPE_CHECKING, Any

import yaml
from frontmatter.default_handlers import YAMLHandler

from quire.exceptions import FrontmatterSyntaxError, MissingFieldError
from quire.ingest.dates import parse_publish_date
from quire.types import ContentUnit

if TYPE_CHECKING:
    from collections.abc import Iterator

DELIMITER = YAMLHandler.START_DELIMITER
RECOGNIZED_FIELDS = frozenset({"title", "date", "tags", "categories", "description", "keywords"})

_handler = YAMLHandler()


def _delimiter_lines(text: str, pos: int = 0) -> Iterator[tuple[int, int]]:
    """Yield (start, end) offsets of lines holding exactly ``---``, line break included."""
    for match in _handler.FM_BOUNDARY.finditer(text, pos):
        if match.group().strip() != DELIMITER:
            continue
        newline = text.find("\n", match.start())
        yield match.start(), len(text) if newline == -1 else newline + 1


def split_frontmatter(text: str, source: str) -> tuple[str | None, str]:
    """Split raw text into (frontmatter, body).

    Blank lines before the opening delimiter are skipped. Returns
    ``(None, text)`` when the first non-blank line is not a delimiter.

    Raises:
        FrontmatterSyntaxError: If the block is opened but never closed.

    """
    content = text.removeprefix("\ufeff")
    lead = len(content) - len(content.lstrip())
    lead = content.rfind("\n", 0, lead) + 1
    if not _handler.detect(content[lead:]):
        return None, text

    delimiters = list(islice(_delimiter_lines(content, lead), 2))
    if not delimiters or delimiters[0][0] != lead:
        return None, text
    if len(delimiters) < 2:
        raise FrontmatterSyntaxError(source, "frontmatter block is never closed")

    (_, block_start), (block_end, body_start) = delimiters
    return content[block_start:block_end], content[body_start:]


def load_metadata(block: str | None, source: str) -> dict[str, Any]:
    if block is None:
        return {}
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontmatterSyntaxError(source, str(exc)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontmatterSyntaxError(source, f"expected a mapping, got {type(data).__name__}")
    return data


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list | tuple | set):
        return list(value)
    return [value]


def normalize_terms(value: Any, *, split_commas: bool = False) -> tuple[str, ...]:
    """Normalize a scalar-or-sequence field to a tuple of unique, non-empty strings."""
    items = _as_list(value)
    if split_commas and isinstance(value, str):
        items = value.split(",")

    seen: dict[str, None] = {}
    for item in items:
        if item is None:
            continue
        term = str(item).strip()
        if term:
            seen.setdefault(term, None)
    return tuple(seen)


def _required_text(metadata: dict[str, Any], field: str, source: str) -> str:
    value = metadata.get(field)
    text = "" if value is None else str(value).strip()
    if not text:
        raise MissingFieldError(source, field)
    return text


def parse_content_unit(text: str, source: str) -> ContentUnit:
    """Parse one logical content source.

    Args:
        text: Raw source text, frontmatter included.
        source: Identity of the source, used in errors and as the unit's key.

    Returns:
        The parsed unit. Its slug is not resolved yet.

    Raises:
        FrontmatterSyntaxError: If the frontmatter is not a valid YAML mapping.
        MissingFieldError: If ``title`` or ``date`` is absent or empty.
        MalformedDateError: If ``date`` lacks day precision or cannot be parsed.

    """
    block, body = split_frontmatter(text, source)
    metadata = load_metadata(block, source)

    title = _required_text(metadata, "title", source)
    raw_date = metadata.get("date")
    if raw_date is None or (isinstance(raw_date, str) and not raw_date.strip()):
        raise MissingFieldError(source, "date")

    description = metadata.get("description")
    return ContentUnit(
        source=source,
        title=title,
        date=parse_publish_date(raw_date, source),
        tags=normalize_terms(metadata.get("tags")),
        categories=normalize_terms(metadata.get("categories")),
        description=None if description is None else str(description),
        keywords=normalize_terms(metadata.get("keywords"), split_commas=True),
        body=body,
        extra={str(key): value for key, value in metadata.items() if key not in RECOGNIZED_FIELDS},
    )


def dump_content_unit(unit: ContentUnit) -> str:
    """Serialize a unit's recognized fields and body back to source text."""
    metadata: dict[str, Any] = {"title": unit.title, "date": unit.date.isoformat()}
    if unit.tags:
        metadata["tags"] = list(unit.tags)
    if unit.categories:
        metadata["categories"] = list(unit.categories)
    if unit.description is not None:
        metadata["description"] = unit.description
    if unit.keywords:
        metadata["keywords"] = list(unit.keywords)

    # YAMLHandler.format() strips the body, so only the metadata goes through it.
    block = _handler.export(metadata, sort_keys=False)
    return f"{_handler.START_DELIMITER}\n{block}\n{_handler.END_DELIMITER}\n{unit.body}"
