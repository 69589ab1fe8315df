"""Exceptions raised by the quire pipeline.

Two families matter to callers:

- :class:`ContentError` subclasses describe a problem with a single content
  source. The pipeline records them in the build report and carries on with
  the remaining sources.
- :class:`BuildError` subclasses describe a corpus- or configuration-level
  inconsistency. They abort the whole run and no page plan is produced.
"""

from __future__ import annotations

from typing import Any


class QuireError(Exception):
    """Base class for all quire errors."""


class ContentError(QuireError):
    """Raised when a single content source cannot be turned into a unit."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class MissingFieldError(ContentError):
    """Raised when a required frontmatter field is absent or empty."""

    def __init__(self, source: str, field: str) -> None:
        self.field = field
        super().__init__(source, f"missing required field '{field}'")


class MalformedDateError(ContentError):
    """Raised when the date field cannot be parsed to at least day precision."""

    def __init__(self, source: str, value: Any) -> None:
        self.value = value
        super().__init__(source, f"malformed date {value!r}")


class FrontmatterSyntaxError(ContentError):
    """Raised when the frontmatter block is not a valid YAML mapping."""

    def __init__(self, source: str, reason: str) -> None:
        self.reason = reason
        super().__init__(source, f"invalid frontmatter: {reason}")


class UnreadableSourceError(ContentError):
    """Raised when a content source cannot be read as UTF-8 text."""

    def __init__(self, source: str, reason: str) -> None:
        self.reason = reason
        super().__init__(source, f"cannot read source: {reason}")


class BuildError(QuireError):
    """Base class for errors that abort a build run."""


class SlugCollisionError(BuildError):
    """Raised when two content units derive the same slug."""

    def __init__(self, slug: str, first_source: str, second_source: str) -> None:
        self.slug = slug
        self.first_source = first_source
        self.second_source = second_source
        super().__init__(f"Slug '{slug}' is derived by both '{first_source}' and '{second_source}'")


class OutputPathCollisionError(BuildError):
    """Raised when two planned pages resolve to the same output path."""

    def __init__(self, output_path: str) -> None:
        self.output_path = output_path
        super().__init__(f"More than one page would be written to '{output_path}'")


class UnsafeOutputPathError(BuildError):
    """Raised when a planned page would be written outside the output directory."""

    def __init__(self, output_path: str, output_dir: str) -> None:
        self.output_path = output_path
        self.output_dir = output_dir
        super().__init__(f"Output path '{output_path}' escapes the output directory '{output_dir}'")


class InvalidConfigError(BuildError):
    """Raised when the build configuration is unusable."""

    def __init__(self, setting: str, reason: str) -> None:
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid configuration for '{setting}': {reason}")


class StrictModeError(BuildError):
    """Raised in strict mode when any content source was excluded."""

    def __init__(self, excluded: list[str]) -> None:
        self.excluded = excluded
        super().__init__(f"Strict mode: {len(excluded)} source(s) failed to parse: {', '.join(excluded)}")


class BuildCancelledError(BuildError):
    """Raised when a run is cancelled between stages."""

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"Build cancelled after stage '{stage}'")
