from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import pytest

from quire.config import BuildSettings, QuireConfig
from quire.types import ContentUnit

RATE_LIMIT_POST = """---
title: "Fix Error 429: Too Many Requests in VBA Web Queries"
date: 2025-12-10
tags:
  - VBA
  - Troubleshooting
categories: Excel
description: Back off and retry when a web service throttles your macro.
keywords: vba, http 429, throttling
---
When `WinHttpRequest` returns **429**, wait before retrying.
"""

PIVOT_POST = """---
title: Automating Excel PivotTables with VBA
date: 2025-12-10
tags: [vba, excel-pivottables]
categories: [Excel, Automation]
---
Use `PivotCaches.Create` to build the cache first.
"""


@dataclass(slots=True)
class Corpus:
    """Sources laid out in a temporary content directory."""

    root: Path

    def add(self, relative: str, text: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path


def make_post(
    title: str, date: str, *, tags: list[str] | None = None, categories: list[str] | None = None
) -> str:
    lines = ["---", f'title: "{title}"', f"date: {date}"]
    if tags:
        lines.append(f"tags: [{', '.join(tags)}]")
    if categories:
        lines.append(f"categories: [{', '.join(categories)}]")
    lines.extend(["---", f"Body of {title}.", ""])
    return "\n".join(lines)


def make_unit(title: str, when: datetime, *, source: str | None = None, **fields) -> ContentUnit:
    return ContentUnit(source=source or f"{title}.md", title=title, date=when, **fields)


@pytest.fixture
def corpus(tmp_path: Path) -> Corpus:
    root = tmp_path / "content"
    root.mkdir()
    return Corpus(root=root)


@pytest.fixture
def sample_sources() -> list[tuple[str, str]]:
    return [("fix-error-429.md", RATE_LIMIT_POST), ("pivot-tables.md", PIVOT_POST)]


@pytest.fixture
def config(tmp_path: Path) -> QuireConfig:
    return QuireConfig(
        build=BuildSettings(page_size=2, parse_workers=2, render_workers=2),
        paths={"site_root": tmp_path},
    )


@pytest.fixture
def december_10() -> datetime:
    return datetime(2025, 12, 10, tzinfo=UTC)
