"""Jinja2 reference renderer.

Markdown bodies go through markdown-it-py; page chrome comes from the
templates shipped in ``quire/rendering/templates``.
"""

from __future__ import annotations

from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markdown_it import MarkdownIt
from markupsafe import Markup

from quire.routing import PathConvention
from quire.slugs import slugify
from quire.types import PageKind, TermPolicy

if TYPE_CHECKING:
    from datetime import datetime

    from quire.types import RenderRequest, SiteIndex

_md = MarkdownIt("commonmark", {"html": True})

TEMPLATES = {
    PageKind.POST: "post.html.jinja2",
    PageKind.INDEX: "listing.html.jinja2",
    PageKind.TAG: "listing.html.jinja2",
    PageKind.CATEGORY: "listing.html.jinja2",
}


def render_markdown(content: str | None) -> Markup:
    if not content:
        return Markup("")
    return Markup(_md.render(content).strip())


def format_date(value: datetime, fmt: str = "%Y-%m-%d") -> str:
    return value.strftime(fmt)


class TemplateRenderer:
    """Renders page requests to HTML with Jinja2 templates."""

    def __init__(
        self,
        template_dir: Path | None = None,
        *,
        convention: PathConvention | None = None,
        base_url: str = "/",
        site_title: str = "quire",
    ) -> None:
        if template_dir is None:
            template_dir = Path(str(files("quire.rendering").joinpath("templates")))

        self.template_dir = template_dir
        self.convention = convention or PathConvention()
        self.base_url = base_url.rstrip("/") + "/"
        self.site_title = site_title

        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(["html", "jinja2"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["markdown"] = render_markdown
        self.env.filters["format_date"] = format_date
        self.env.filters["slugify"] = slugify
        self.env.filters["url"] = self.url

    def url(self, output_path: str | None) -> str:
        """Public URL for an output path, dropping a trailing index file."""
        if output_path is None:
            return ""
        return self.base_url + output_path.removesuffix(self.convention.routes.index_file)

    def _term_url(self, index: SiteIndex, kind: PageKind, name: str) -> str:
        taxonomy = index.tags if kind is PageKind.TAG else index.categories
        term = taxonomy.get(name)
        if term is not None:
            term_slug = term.slug
        else:
            term_slug = slugify(name, lowercase=taxonomy.policy is TermPolicy.CASE_INSENSITIVE)
        return self.url(self.convention.listing_path(kind, term_slug))

    @staticmethod
    def _heading(kind: PageKind, term: str | None) -> str:
        match kind:
            case PageKind.TAG:
                return f"Tag: {term}"
            case PageKind.CATEGORY:
                return f"Category: {term}"
            case _:
                return "Latest posts"

    def render(self, request: RenderRequest) -> str:
        entry = request.entry
        index = request.index
        context: dict[str, Any] = {
            "site_title": self.site_title,
            "entry": entry,
            "units": request.units,
            "post_url": lambda unit: self.url(self.convention.post_path(unit.slug)),
            "tag_url": lambda name: self._term_url(index, PageKind.TAG, name),
            "category_url": lambda name: self._term_url(index, PageKind.CATEGORY, name),
            "home_url": self.url(self.convention.index_path()),
        }
        if entry.kind is PageKind.POST:
            context["unit"] = request.units[0]
        else:
            context["heading"] = self._heading(entry.kind, entry.term)
        return self.env.get_template(TEMPLATES[entry.kind]).render(**context)
