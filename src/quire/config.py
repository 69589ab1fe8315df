"""Site configuration loaded from ``.quire.toml`` and ``QUIRE_*`` environment variables."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from quire.exceptions import InvalidConfigError
from quire.ingest.splitter import DEFAULT_MARKER
from quire.routing import RouteConfig
from quire.types import TermPolicy

CONFIG_FILENAME = ".quire.toml"
DEFAULT_PAGE_SIZE = 10


def _deep_merge(destination: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source into destination, with source values overwriting."""
    for key, value in source.items():
        if isinstance(value, Mapping) and key in destination and isinstance(destination[key], Mapping):
            destination[key] = _deep_merge(dict(destination[key]), dict(value))
        else:
            destination[key] = value
    return destination


class BuildSettings(BaseModel):
    """Knobs for a single build run."""

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, description="Items per listing page")
    strict: bool = Field(default=False, description="Fail the run if any source is excluded")
    term_policy: TermPolicy = Field(
        default=TermPolicy.CASE_INSENSITIVE,
        description="How tag and category names are compared",
    )
    post_break_marker: str = Field(
        default=DEFAULT_MARKER,
        description="Line separating several posts stored in one source file",
    )
    parse_workers: int = Field(default=4, description="Threads used to parse sources")
    render_workers: int = Field(default=4, description="Threads used to render pages")
    render_timeout: float | None = Field(default=None, description="Seconds to wait for each page render")


class PathsSettings(BaseModel):
    """Path configuration.

    All paths are relative to 'site_root' unless absolute.
    """

    site_root: Path = Field(default_factory=Path.cwd, description="Root directory of the site")
    content_dir: Path = Field(default=Path("content"), description="Markdown sources")
    output_dir: Path = Field(default=Path("public"), description="Rendered pages")

    @property
    def abs_content_dir(self) -> Path:
        return self._resolve(self.content_dir)

    @property
    def abs_output_dir(self) -> Path:
        return self._resolve(self.output_dir)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.site_root / path


class QuireConfig(BaseSettings):
    """Root configuration.

    Supports environment variable overrides with the pattern
    QUIRE_SECTION__KEY (e.g., QUIRE_BUILD__PAGE_SIZE).
    """

    build: BuildSettings = Field(default_factory=BuildSettings)
    paths: PathsSettings = Field(default_factory=PathsSettings)
    routes: RouteConfig = Field(default_factory=RouteConfig)

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="QUIRE_",
        env_nested_delimiter="__",
    )

    @classmethod
    def load(cls, site_root: Path | None = None) -> QuireConfig:
        """Load configuration from .quire.toml and environment variables.

        Priority (highest to lowest):
        1. Environment variables (QUIRE_SECTION__KEY)
        2. Config file (.quire.toml in the site root)
        3. Defaults

        Raises:
            InvalidConfigError: If the file cannot be parsed or a value is invalid.

        """
        root_path = site_root if site_root is not None else Path.cwd()
        config_file = root_path / CONFIG_FILENAME

        file_settings: dict[str, Any] = {}
        if config_file.is_file():
            try:
                with config_file.open("rb") as f:
                    file_settings = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise InvalidConfigError(str(config_file), str(exc)) from exc

        try:
            env_settings = cls().model_dump(exclude_unset=True)
            merged = _deep_merge(file_settings, env_settings)
            merged.setdefault("paths", {})["site_root"] = root_path
            config = cls.model_validate(merged)
        except ValidationError as exc:
            error = exc.errors()[0]
            setting = ".".join(str(part) for part in error["loc"])
            raise InvalidConfigError(setting, error["msg"]) from exc

        check_build_settings(config.build)
        return config


def check_page_size(page_size: int) -> None:
    if page_size <= 0:
        raise InvalidConfigError("build.page_size", f"must be a positive integer, got {page_size}")


def check_build_settings(settings: BuildSettings) -> None:
    """Reject settings no run could succeed with.

    Raises:
        InvalidConfigError: On the first unusable value.

    """
    check_page_size(settings.page_size)
    if settings.parse_workers <= 0:
        raise InvalidConfigError("build.parse_workers", "must be a positive integer")
    if settings.render_workers <= 0:
        raise InvalidConfigError("build.render_workers", "must be a positive integer")
    if settings.render_timeout is not None and settings.render_timeout <= 0:
        raise InvalidConfigError("build.render_timeout", "must be positive when set")
    if not settings.post_break_marker.strip():
        raise InvalidConfigError("build.post_break_marker", "must not be blank")
