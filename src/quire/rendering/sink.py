"""Write rendered pages to disk."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from quire.exceptions import InvalidConfigError, UnsafeOutputPathError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from quire.types import RenderedPage

logger = logging.getLogger(__name__)


class SiteWriter:
    """Materializes rendered pages below an output directory.

    With ``clean=True`` the previous contents of the output directory are
    removed, but only as part of :meth:`write`, i.e. once a run has produced
    its pages. A run that fails earlier leaves the published site alone.
    """

    def __init__(self, output_dir: Path, *, clean: bool = False, protected: Sequence[Path] = ()) -> None:
        """Initialize the writer.

        Args:
            output_dir: Directory receiving the page tree.
            clean: Remove existing output before writing.
            protected: Directories that must survive a clean (site root,
                content directory).

        Raises:
            InvalidConfigError: If ``clean`` is set and the output directory is
                or contains one of the ``protected`` directories.

        """
        self.output_dir = Path(output_dir)
        self.clean_first = clean
        if clean:
            root = self.output_dir.resolve()
            for path in protected:
                if Path(path).resolve().is_relative_to(root):
                    raise InvalidConfigError(
                        "paths.output_dir",
                        f"refusing to clean {root}: it contains {Path(path).resolve()}",
                    )

    def _target(self, output_path: str) -> Path:
        root = self.output_dir.resolve()
        target = (root / output_path).resolve()
        if not target.is_relative_to(root) or target == root:
            raise UnsafeOutputPathError(output_path, str(self.output_dir))
        return target

    def clean(self) -> None:
        """Remove everything below the output directory."""
        if self.output_dir.is_dir():
            shutil.rmtree(self.output_dir)
            logger.info("Removed previous output in %s", self.output_dir)

    def write(self, pages: Iterable[RenderedPage]) -> list[Path]:
        """Write each page, creating parent directories as needed.

        Every target is checked before anything is removed or written.

        Raises:
            UnsafeOutputPathError: If a page would land outside the output directory.

        """
        targets = [(self._target(page.output_path), page) for page in pages]
        if self.clean_first:
            self.clean()

        written: list[Path] = []
        for target, page in targets:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(page.content, encoding="utf-8")
            written.append(target)

        logger.info("Wrote %d pages to %s", len(written), self.output_dir)
        return written
