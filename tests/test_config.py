from pathlib import Path

import pytest

from quire.config import BuildSettings, QuireConfig, check_build_settings
from quire.exceptions import InvalidConfigError
from quire.types import TermPolicy


def _write_config(root: Path, text: str) -> None:
    (root / ".quire.toml").write_text(text, encoding="utf-8")


def test_defaults_without_config_file(tmp_path):
    config = QuireConfig.load(tmp_path)

    assert config.build.page_size == 10
    assert config.build.strict is False
    assert config.build.term_policy is TermPolicy.CASE_INSENSITIVE
    assert config.paths.abs_content_dir == tmp_path / "content"
    assert config.paths.abs_output_dir == tmp_path / "public"
    assert config.routes.tags_prefix == "tags"


def test_values_from_config_file(tmp_path):
    _write_config(
        tmp_path,
        """
[build]
page_size = 5
strict = true
term_policy = "case-sensitive"

[paths]
output_dir = "/srv/site"

[routes]
tags_prefix = "topics"
""",
    )

    config = QuireConfig.load(tmp_path)

    assert config.build.page_size == 5
    assert config.build.strict is True
    assert config.build.term_policy is TermPolicy.CASE_SENSITIVE
    assert config.paths.abs_output_dir == Path("/srv/site")
    assert config.routes.tags_prefix == "topics"


def test_environment_overrides_config_file(tmp_path, monkeypatch):
    _write_config(tmp_path, "[build]\npage_size = 5\nstrict = true\n")
    monkeypatch.setenv("QUIRE_BUILD__PAGE_SIZE", "7")

    config = QuireConfig.load(tmp_path)

    assert config.build.page_size == 7
    assert config.build.strict is True


def test_route_override_keeps_other_route_values_from_file(tmp_path, monkeypatch):
    _write_config(tmp_path, '[routes]\ntags_prefix = "topics"\ncategories_prefix = "sections"\n')
    monkeypatch.setenv("QUIRE_ROUTES__PAGE_SEGMENT", "p")

    routes = QuireConfig.load(tmp_path).routes

    assert routes.tags_prefix == "topics"
    assert routes.categories_prefix == "sections"
    assert routes.page_segment == "p"
    assert routes.index_file == "index.html"


@pytest.mark.parametrize(
    ("text", "setting"),
    [
        ("[build]\npage_size = 0\n", "build.page_size"),
        ("[build]\npage_size = -1\n", "build.page_size"),
        ('[build]\npage_size = "lots"\n', "build.page_size"),
        ('[build]\nterm_policy = "fuzzy"\n', "build.term_policy"),
        ("[build]\nrender_timeout = 0\n", "build.render_timeout"),
    ],
)
def test_invalid_values_are_rejected(tmp_path, text, setting):
    _write_config(tmp_path, text)

    with pytest.raises(InvalidConfigError) as excinfo:
        QuireConfig.load(tmp_path)
    assert excinfo.value.setting == setting


def test_malformed_toml_is_rejected(tmp_path):
    _write_config(tmp_path, "[build\npage_size = 5\n")

    with pytest.raises(InvalidConfigError) as excinfo:
        QuireConfig.load(tmp_path)
    assert excinfo.value.setting.endswith(".quire.toml")


@pytest.mark.parametrize(
    "update",
    [{"parse_workers": 0}, {"render_workers": -2}, {"post_break_marker": "  "}],
)
def test_check_build_settings(update):
    with pytest.raises(InvalidConfigError):
        check_build_settings(BuildSettings(**update))
