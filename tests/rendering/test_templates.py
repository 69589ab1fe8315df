import pytest

from quire.indexing import build_index
from quire.ingest import parse_content_unit
from quire.planning import generate_page_plan
from quire.rendering.dispatcher import build_request
from quire.rendering.templates import TemplateRenderer, render_markdown
from quire.slugs import resolve_slugs
from quire.types import PageKind, SiteIndex


@pytest.fixture
def site(sample_sources):
    index = build_index(resolve_slugs([parse_content_unit(text, source) for source, text in sample_sources]))
    return index, generate_page_plan(index, page_size=1)


@pytest.fixture
def renderer():
    return TemplateRenderer(site_title="Excel Notes")


def _render(renderer, index, entry):
    return renderer.render(build_request(entry, index))


def test_post_page(renderer, site):
    index, plan = site
    html = _render(renderer, index, plan[0])

    assert "<title>Fix Error 429: Too Many Requests in VBA Web Queries | Excel Notes</title>" in html
    assert '<meta name="description" content="Back off and retry' in html
    assert '<meta name="keywords" content="vba, http 429, throttling">' in html
    assert "<strong>429</strong>" in html
    assert '<a href="/tags/vba/">VBA</a>' in html
    assert '<a href="/categories/excel/">Excel</a>' in html
    assert '<time datetime="2025-12-10T00:00:00+00:00">2025-12-10</time>' in html


def test_post_links_to_neighbours(renderer, site):
    index, plan = site
    html = _render(renderer, index, plan[0])

    assert 'rel="next" href="/2025/12/10/automating-excel-pivottables-with-vba/"' in html
    assert 'rel="prev"' not in html


def test_tag_listing_page(renderer, site):
    index, plan = site
    entry = next(e for e in plan if e.kind is PageKind.TAG and e.term == "VBA" and e.page_number == 2)
    html = _render(renderer, index, entry)

    assert "<h1>Tag: VBA</h1>" in html
    assert 'href="/2025/12/10/automating-excel-pivottables-with-vba/"' in html
    assert "Page 2 of 2" in html
    assert 'rel="prev" href="/tags/vba/"' in html


def test_titles_are_escaped(renderer):
    text = '---\ntitle: "<script>alert(1)</script>"\ndate: 2025-12-10\n---\nbody\n'
    index = build_index(resolve_slugs([parse_content_unit(text, "x.md")]))
    html = _render(renderer, index, generate_page_plan(index)[0])

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_empty_index_page(renderer):
    index = SiteIndex()
    html = _render(renderer, index, generate_page_plan(index)[0])

    assert "<h1>Latest posts</h1>" in html
    assert "No posts yet." in html


def test_url_honours_base_url():
    renderer = TemplateRenderer(base_url="https://example.com/blog")
    assert renderer.url("tags/vba/index.html") == "https://example.com/blog/tags/vba/"
    assert renderer.url("index.html") == "https://example.com/blog/"
    assert renderer.url(None) == ""


def test_render_markdown():
    assert render_markdown(None) == ""
    assert render_markdown("*hi*") == "<p><em>hi</em></p>"
