"""Split physical sources that bundle several posts.

Authors may store more than one post in a file by ending a post with a marker
line (``<!-- post-break -->`` by default) followed by the next post's
frontmatter. Splitting happens before parsing so the parser only ever sees
one post at a time.
"""

from __future__ import annotations

from dataclasses import dataclass

from quire.exceptions import FrontmatterSyntaxError
from quire.ingest.frontmatter import DELIMITER, load_metadata, split_frontmatter

DEFAULT_MARKER = "<!-- post-break -->"


@dataclass(frozen=True)
class LogicalSource:
    source: str
    text: str


def _opens_post(lines: list[str], start: int) -> bool:
    """Whether ``lines[start:]`` begins with a closed frontmatter mapping.

    A marker followed by a ``---`` thematic break and ordinary prose is not a
    post boundary.
    """
    try:
        block, _ = split_frontmatter("".join(lines[start:]), "")
        return block is not None and bool(load_metadata(block, ""))
    except FrontmatterSyntaxError:
        return False


def split_source(text: str, path: str, marker: str = DEFAULT_MARKER) -> list[LogicalSource]:
    """Split ``text`` into logical sources.

    A marker line only counts as a break when it sits in a body (never inside a
    frontmatter block) and the lines after it open a new, closed frontmatter
    block holding a mapping. A source without breaks keeps ``path`` as its
    identity; split parts are named ``path#1``, ``path#2``, ...
    """
    lines = text.splitlines(keepends=True)
    segments: list[list[str]] = [[]]
    state = "start"

    for i, line in enumerate(lines):
        stripped = line.rstrip().lstrip("\ufeff")
        if state == "start":
            if stripped == DELIMITER:
                state = "frontmatter"
            elif stripped:
                state = "body"
        elif state == "frontmatter":
            if stripped == DELIMITER:
                state = "body"
        elif stripped == marker and _opens_post(lines, i + 1):
            segments.append([])
            state = "start"
            continue
        segments[-1].append(line)

    if len(segments) == 1:
        return [LogicalSource(source=path, text=text)]
    return [LogicalSource(source=f"{path}#{n}", text="".join(seg)) for n, seg in enumerate(segments, start=1)]
