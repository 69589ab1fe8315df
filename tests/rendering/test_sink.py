import pytest

from quire.exceptions import InvalidConfigError, UnsafeOutputPathError
from quire.rendering.sink import SiteWriter
from quire.types import RenderedPage


@pytest.fixture
def published(tmp_path):
    stale = tmp_path / "public" / "old" / "index.html"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")
    return stale


def test_write_creates_directories(tmp_path):
    writer = SiteWriter(tmp_path / "public")
    pages = [
        RenderedPage(output_path="index.html", content="home"),
        RenderedPage(output_path="tags/vba/page/2/index.html", content="vba 2"),
    ]

    written = writer.write(pages)

    assert len(written) == 2
    assert (tmp_path / "public" / "index.html").read_text(encoding="utf-8") == "home"
    assert (tmp_path / "public" / "tags/vba/page/2/index.html").read_text(encoding="utf-8") == "vba 2"


@pytest.mark.parametrize("output_path", ["../outside.html", "tags/../../outside.html", "."])
def test_write_refuses_paths_outside_output_dir(tmp_path, output_path):
    writer = SiteWriter(tmp_path / "public")

    with pytest.raises(UnsafeOutputPathError) as excinfo:
        writer.write([RenderedPage(output_path=output_path, content="x")])
    assert excinfo.value.output_path == output_path
    assert not (tmp_path / "outside.html").exists()


def test_clean_happens_when_writing(tmp_path, published):
    writer = SiteWriter(tmp_path / "public", clean=True)
    assert published.exists()

    writer.write([RenderedPage(output_path="index.html", content="home")])

    assert not published.exists()
    assert (tmp_path / "public" / "index.html").is_file()


def test_unsafe_page_aborts_before_cleaning(tmp_path, published):
    writer = SiteWriter(tmp_path / "public", clean=True)
    pages = [
        RenderedPage(output_path="index.html", content="home"),
        RenderedPage(output_path="../escape.html", content="x"),
    ]

    with pytest.raises(UnsafeOutputPathError):
        writer.write(pages)
    assert published.exists()
    assert not (tmp_path / "public" / "index.html").exists()


@pytest.mark.parametrize("output", [".", "content", ".."])
def test_clean_refuses_to_remove_protected_directories(tmp_path, output):
    site_root = tmp_path / "site"
    content = site_root / "content"
    content.mkdir(parents=True)

    with pytest.raises(InvalidConfigError) as excinfo:
        SiteWriter(site_root / output, clean=True, protected=(site_root, content))
    assert excinfo.value.setting == "paths.output_dir"


def test_protected_directories_do_not_matter_without_clean(tmp_path):
    SiteWriter(tmp_path, protected=(tmp_path,))


def test_clean_without_output_is_a_noop(tmp_path):
    SiteWriter(tmp_path / "public").clean()
