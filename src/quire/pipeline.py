"""Build pipeline orchestration.

Stages run in a fixed order: parse, resolve slugs and index, plan, render,
write. Parsing and rendering fan out over thread pools; indexing is the join
point and only starts once every source has been parsed. A run can be
cancelled between stages through a ``threading.Event``; nothing is written
until the last stage, so a cancelled run leaves no trace.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from quire.config import QuireConfig, check_build_settings
from quire.exceptions import BuildCancelledError, ContentError, StrictModeError
from quire.indexing import build_index
from quire.ingest import discover_sources, parse_content_unit, read_source, source_id, split_source
from quire.planning import generate_page_plan
from quire.rendering.dispatcher import RenderDispatcher
from quire.routing import PathConvention
from quire.slugs import resolve_slugs
from quire.types import BuildReport, ContentUnit, ExcludedSource

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from quire.rendering.dispatcher import Renderer
    from quire.rendering.sink import SiteWriter
    from quire.types import PagePlanEntry, SiteIndex

logger = logging.getLogger(__name__)

Outcome = ContentUnit | ExcludedSource


@dataclass
class ParseResult:
    """Parsed units and excluded sources, both in ingestion order."""

    units: list[ContentUnit] = field(default_factory=list)
    excluded: list[ExcludedSource] = field(default_factory=list)


def _excluded(exc: ContentError) -> ExcludedSource:
    logger.warning("Excluding %s", exc)
    return ExcludedSource(source=exc.source, error_type=type(exc).__name__, message=str(exc))


class SiteBuilder:
    """Runs the pipeline for one site configuration.

    The builder keeps no state between runs; every call to :meth:`build`
    recomputes units, indices and the page plan from scratch.
    """

    def __init__(
        self,
        config: QuireConfig | None = None,
        renderer: Renderer | None = None,
        writer: SiteWriter | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            config: Site configuration; defaults are used when omitted.
            renderer: Page renderer. Without one the run stops after planning.
            writer: Destination for rendered pages. Nothing is written
                without both a writer and a renderer.
            cancel_event: When set, the run stops at the next stage boundary.

        """
        self.config = config or QuireConfig()
        self.renderer = renderer
        self.writer = writer
        self.cancel_event = cancel_event
        self.convention = PathConvention(self.config.routes)

    def _checkpoint(self, stage: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            logger.info("Build cancelled after %s", stage)
            raise BuildCancelledError(stage)

    def _parse_text(self, text: str, source: str) -> list[Outcome]:
        outcomes: list[Outcome] = []
        for logical in split_source(text, source, self.config.build.post_break_marker):
            try:
                outcomes.append(parse_content_unit(logical.text, logical.source))
            except ContentError as exc:
                outcomes.append(_excluded(exc))
        return outcomes

    def _parse_file(self, path: Path, content_dir: Path) -> list[Outcome]:
        source = source_id(path, content_dir)
        try:
            text = read_source(path, source)
        except ContentError as exc:
            return [_excluded(exc)]
        return self._parse_text(text, source)

    def _run_parsers(self, tasks: Sequence[Callable[[], list[Outcome]]]) -> ParseResult:
        with ThreadPoolExecutor(
            max_workers=self.config.build.parse_workers, thread_name_prefix="quire-parse"
        ) as executor:
            futures = [executor.submit(task) for task in tasks]
            outcomes = [outcome for future in futures for outcome in future.result()]

        result = ParseResult()
        for outcome in outcomes:
            if isinstance(outcome, ContentUnit):
                result.units.append(outcome)
            else:
                result.excluded.append(outcome)
        logger.info("Parsed %d units, excluded %d sources", len(result.units), len(result.excluded))
        return result

    def parse_texts(self, sources: Sequence[tuple[str, str]]) -> ParseResult:
        """Parse in-memory ``(source, text)`` pairs given in ingestion order."""
        return self._run_parsers(
            [lambda text=text, source=source: self._parse_text(text, source) for source, text in sources]
        )

    def parse_directory(self, content_dir: Path | None = None) -> ParseResult:
        """Parse every markdown file below ``content_dir`` in sorted path order."""
        root = content_dir or self.config.paths.abs_content_dir
        paths = discover_sources(root)
        return self._run_parsers([lambda path=path: self._parse_file(path, root) for path in paths])

    def index(self, units: Sequence[ContentUnit]) -> SiteIndex:
        """Resolve slugs over the whole corpus, then build the indices."""
        return build_index(resolve_slugs(units), self.config.build.term_policy)

    def plan(self, index: SiteIndex) -> tuple[PagePlanEntry, ...]:
        return generate_page_plan(index, self.config.build.page_size, self.convention)

    def _build(self, parse: Callable[[], ParseResult]) -> BuildReport:
        check_build_settings(self.config.build)

        parsed = parse()
        self._checkpoint("parse")
        if self.config.build.strict and parsed.excluded:
            raise StrictModeError([item.source for item in parsed.excluded])

        index = self.index(parsed.units)
        self._checkpoint("index")

        plan = self.plan(index)
        self._checkpoint("plan")

        pages, failures = [], []
        if self.renderer is not None:
            dispatcher = RenderDispatcher(
                self.renderer,
                max_workers=self.config.build.render_workers,
                timeout=self.config.build.render_timeout,
            )
            pages, failures = dispatcher.dispatch(plan, index, cancel_event=self.cancel_event)
            self._checkpoint("render")

            # Only a run that rendered may touch the output directory.
            if self.writer is not None:
                self.writer.write(pages)

        report = BuildReport(
            index=index,
            plan=plan,
            pages=tuple(pages),
            excluded=tuple(parsed.excluded),
            render_failures=tuple(failures),
        )
        logger.info("Build finished: %s", report.status.value)
        return report

    def build(self, content_dir: Path | None = None) -> BuildReport:
        """Build the site from a content directory.

        Raises:
            BuildError: On any fatal condition (invalid configuration, slug or
                output path collision, strict mode exclusions, cancellation).

        """
        return self._build(lambda: self.parse_directory(content_dir))

    def build_texts(self, sources: Sequence[tuple[str, str]]) -> BuildReport:
        """Build the site from in-memory ``(source, text)`` pairs."""
        return self._build(lambda: self.parse_texts(sources))
