"""Hand planned pages to a renderer and collect the results.

The renderer is an external collaborator: whatever it raises for one page is
recorded as a :class:`RenderFailure` for that page and the batch carries on.
Nothing is retried.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from quire.exceptions import BuildCancelledError
from quire.types import RenderedPage, RenderFailure, RenderRequest

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence

    from quire.types import PagePlanEntry, SiteIndex

logger = logging.getLogger(__name__)


@runtime_checkable
class Renderer(Protocol):
    """Turns one page request into the page body."""

    def render(self, request: RenderRequest) -> str: ...


def build_request(entry: PagePlanEntry, index: SiteIndex) -> RenderRequest:
    """Resolve an entry's slugs to units, keeping item order."""
    return RenderRequest(entry=entry, units=tuple(index.unit(slug) for slug in entry.items), index=index)


class RenderDispatcher:
    """Renders a page plan on a thread pool with best-effort batch semantics."""

    def __init__(self, renderer: Renderer, max_workers: int = 4, timeout: float | None = None) -> None:
        """Initialize the dispatcher.

        Args:
            renderer: Collaborator producing page bodies.
            max_workers: Maximum number of pages rendered at once.
            timeout: Seconds to wait for each page once the dispatcher starts
                waiting on it. ``None`` waits indefinitely.

        """
        self._renderer = renderer
        self._max_workers = max_workers
        self._timeout = timeout

    def _render_one(self, entry: PagePlanEntry, index: SiteIndex) -> str:
        content = self._renderer.render(build_request(entry, index))
        if not isinstance(content, str):
            msg = f"renderer returned {type(content).__name__}, expected str"
            raise TypeError(msg)
        return content

    def dispatch(
        self,
        plan: Sequence[PagePlanEntry],
        index: SiteIndex,
        *,
        cancel_event: threading.Event | None = None,
    ) -> tuple[list[RenderedPage], list[RenderFailure]]:
        """Render every entry of ``plan``.

        Returns:
            Rendered pages and failures, each in plan order.

        Raises:
            BuildCancelledError: If ``cancel_event`` is set while waiting on
                results. Pending renders are cancelled; running ones finish and
                their output is discarded.

        """
        pages: list[RenderedPage] = []
        failures: list[RenderFailure] = []
        if not plan:
            return pages, failures

        executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="quire-render")
        try:
            futures = [executor.submit(self._render_one, entry, index) for entry in plan]
            for entry, future in zip(plan, futures, strict=True):
                if cancel_event is not None and cancel_event.is_set():
                    raise BuildCancelledError("render")
                try:
                    content = future.result(timeout=self._timeout)
                except TimeoutError:
                    logger.warning("Render of %s timed out", entry.output_path)
                    failures.append(
                        RenderFailure(
                            output_path=entry.output_path,
                            error_type="TimeoutError",
                            message=f"render did not finish within {self._timeout}s",
                        )
                    )
                except Exception as exc:  # renderer errors are collected per page
                    logger.warning("Render of %s failed: %s", entry.output_path, exc)
                    failures.append(
                        RenderFailure(
                            output_path=entry.output_path,
                            error_type=type(exc).__name__,
                            message=str(exc),
                        )
                    )
                else:
                    logger.debug("Rendered %s", entry.output_path)
                    pages.append(RenderedPage(output_path=entry.output_path, content=content))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info("Rendered %d pages, %d failures", len(pages), len(failures))
        return pages, failures
