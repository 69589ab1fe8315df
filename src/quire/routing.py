"""Output path conventions for planned pages.

Posts live under their slug (which already carries the date), listings live
under a per-kind prefix, and every page after the first gets a
``page/<n>`` segment:

    2025/12/10/fix-error-429/index.html
    index.html, page/2/index.html
    tags/vba/index.html, tags/vba/page/2/index.html
    categories/excel/index.html
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from quire.types import PageKind


class RouteConfig(BaseModel):
    """URL prefixes for each page family; ``..`` segments are rejected at write time."""

    model_config = ConfigDict(frozen=True)

    posts_prefix: str = ""
    tags_prefix: str = "tags"
    categories_prefix: str = "categories"
    page_segment: str = "page"
    index_file: str = "index.html"


class PathConvention:
    """Maps a page's kind, term slug and page number to its output path."""

    def __init__(self, routes: RouteConfig | None = None) -> None:
        self.routes = routes or RouteConfig()

    def _join(self, *segments: str | None) -> str:
        parts = [part for s in segments if s for part in s.strip("/").split("/") if part]
        parts.append(self.routes.index_file)
        return "/".join(parts)

    def _page(self, page_number: int) -> str | None:
        if page_number <= 1:
            return None
        return f"{self.routes.page_segment}/{page_number}"

    def post_path(self, slug: str) -> str:
        return self._join(self.routes.posts_prefix, slug)

    def index_path(self, page_number: int = 1) -> str:
        return self._join(self._page(page_number))

    def listing_path(self, kind: PageKind, term_slug: str, page_number: int = 1) -> str:
        match kind:
            case PageKind.TAG:
                prefix = self.routes.tags_prefix
            case PageKind.CATEGORY:
                prefix = self.routes.categories_prefix
            case _:
                msg = f"{kind.value} pages are not term listings"
                raise ValueError(msg)
        return self._join(prefix, term_slug, self._page(page_number))
