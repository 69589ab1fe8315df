import logging

import pytest
from typer.testing import CliRunner

from conftest import PIVOT_POST, RATE_LIMIT_POST
from quire.cli import EXIT_FATAL, EXIT_PARTIAL, app

runner = CliRunner()

NO_DATE = "---\ntitle: Draft without a date\n---\nTBD\n"


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def site(tmp_path, corpus):
    corpus.add("fix-error-429.md", RATE_LIMIT_POST)
    corpus.add("pivot-tables.md", PIVOT_POST)
    return tmp_path


def _build(site, *args):
    return runner.invoke(app, ["build", str(site / "content"), "--site-root", str(site), *args])


def _flat(output):
    """Undo Rich line wrapping so messages can be matched as phrases."""
    return " ".join(output.split())


def test_build_success(site):
    result = _build(site, "-o", str(site / "out"))

    assert result.exit_code == 0, result.output
    assert "Success" in result.output
    assert (site / "out" / "index.html").is_file()
    assert (site / "out" / "tags" / "vba" / "index.html").is_file()


def test_build_uses_configured_output_dir(site):
    (site / ".quire.toml").write_text('[paths]\noutput_dir = "site"\n', encoding="utf-8")

    result = _build(site)

    assert result.exit_code == 0, result.output
    assert (site / "site" / "index.html").is_file()


def test_build_partial_success(site, corpus):
    corpus.add("draft.md", NO_DATE)

    result = _build(site, "-o", str(site / "out"))

    assert result.exit_code == EXIT_PARTIAL
    assert "Partial success" in result.output
    assert "draft.md" in result.output
    assert (site / "out" / "index.html").is_file()


def test_strict_build_is_fatal(site, corpus):
    corpus.add("draft.md", NO_DATE)

    result = _build(site, "-o", str(site / "out"), "--strict")

    assert result.exit_code == EXIT_FATAL
    assert "Build failed" in result.output
    assert not (site / "out").exists()


def test_invalid_page_size_is_fatal(site):
    result = _build(site, "-o", str(site / "out"), "--page-size", "0")

    assert result.exit_code == EXIT_FATAL
    assert "build.page_size" in result.output


def test_case_sensitive_terms_build_separate_listings(site):
    result = _build(site, "-o", str(site / "out"), "--case-sensitive-terms")

    assert result.exit_code == 0, result.output
    tags = sorted(path.parent.name for path in (site / "out" / "tags").glob("*/index.html"))
    assert tags == ["Troubleshooting", "VBA", "excel-pivottables", "vba"]


def test_fatal_build_keeps_published_site(site, corpus):
    assert _build(site, "-o", str(site / "out")).exit_code == 0
    corpus.add("copy.md", RATE_LIMIT_POST)

    result = _build(site, "-o", str(site / "out"), "--clean")

    assert result.exit_code == EXIT_FATAL
    assert (site / "out" / "index.html").is_file()


@pytest.mark.parametrize("output", [".", "content"])
def test_clean_refuses_site_root_and_sources(site, output):
    result = _build(site, "-o", str(site / output), "--clean")

    assert result.exit_code == EXIT_FATAL
    assert "refusing to clean" in _flat(result.output)
    assert (site / "content" / "pivot-tables.md").is_file()


def test_route_escaping_output_dir_is_fatal(site):
    (site / ".quire.toml").write_text('[routes]\ntags_prefix = "../../escaped"\n', encoding="utf-8")

    result = _build(site, "-o", str(site / "out"))

    assert result.exit_code == EXIT_FATAL
    assert "escapes the output directory" in _flat(result.output)
    assert not (site / "out").exists()
    assert not (site.parent / "escaped").exists()


def test_unknown_log_level_is_rejected(site):
    result = _build(site, "--log-level", "chatty")
    assert result.exit_code == 2


def test_clean_removes_stale_pages(site):
    stale = site / "out" / "old" / "index.html"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")

    result = _build(site, "-o", str(site / "out"), "--clean")

    assert result.exit_code == 0, result.output
    assert not stale.exists()


def test_check_does_not_write(site):
    result = runner.invoke(app, ["check", str(site / "content"), "--site-root", str(site)])

    assert result.exit_code == 0, result.output
    assert "Build summary" in result.output
    assert not (site / "public").exists()
