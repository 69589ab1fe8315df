"""Command line interface for quire."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from quire.config import QuireConfig
from quire.exceptions import BuildError
from quire.logging_setup import configure_logging
from quire.pipeline import SiteBuilder
from quire.rendering import SiteWriter, TemplateRenderer
from quire.routing import PathConvention
from quire.types import BuildReport, BuildStatus, TermPolicy

app = typer.Typer(name="quire", help="Index markdown articles and generate a static page tree.")

EXIT_PARTIAL = 1
EXIT_FATAL = 2

console = Console()


def _setup_logging(log_level: str | None) -> None:
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


def _term_policy(case_sensitive: bool | None) -> TermPolicy | None:
    if case_sensitive is None:
        return None
    return TermPolicy.CASE_SENSITIVE if case_sensitive else TermPolicy.CASE_INSENSITIVE


def _load_config(
    site_root: Path,
    *,
    content_dir: Path | None,
    output_dir: Path | None,
    page_size: int | None,
    strict: bool | None,
    case_sensitive_terms: bool | None,
) -> QuireConfig:
    config = QuireConfig.load(site_root)
    build = config.build.model_copy(
        update={
            key: value
            for key, value in {
                "page_size": page_size,
                "strict": strict,
                "term_policy": _term_policy(case_sensitive_terms),
            }.items()
            if value is not None
        }
    )
    paths = config.paths.model_copy(
        update={
            key: value.resolve()
            for key, value in {"content_dir": content_dir, "output_dir": output_dir}.items()
            if value is not None
        }
    )
    return config.model_copy(update={"build": build, "paths": paths})


def _print_report(report: BuildReport) -> None:
    summary = Table(title="Build summary")
    summary.add_column("Item")
    summary.add_column("Count", justify="right")
    summary.add_row("Units", str(len(report.index.units)))
    summary.add_row("Tags", str(len(report.index.tags)))
    summary.add_row("Categories", str(len(report.index.categories)))
    summary.add_row("Planned pages", str(len(report.plan)))
    summary.add_row("Rendered pages", str(len(report.pages)))
    console.print(summary)

    if report.excluded:
        excluded = Table(title="Excluded sources")
        excluded.add_column("Source")
        excluded.add_column("Error")
        excluded.add_column("Message")
        for item in report.excluded:
            excluded.add_row(item.source, item.error_type, item.message)
        console.print(excluded)

    if report.render_failures:
        failures = Table(title="Render failures")
        failures.add_column("Output path")
        failures.add_column("Error")
        failures.add_column("Message")
        for item in report.render_failures:
            failures.add_row(item.output_path, item.error_type, item.message)
        console.print(failures)


def _finish(report: BuildReport) -> None:
    _print_report(report)
    if report.status is BuildStatus.PARTIAL:
        console.print("[bold yellow]Partial success[/bold yellow]")
        raise typer.Exit(code=EXIT_PARTIAL)
    console.print("[bold green]Success[/bold green]")


@app.command()
def build(
    content_dir: Annotated[Path | None, typer.Argument(help="Directory holding the markdown sources")] = None,
    *,
    site_root: Annotated[Path, typer.Option("--site-root", help="Directory holding .quire.toml")] = Path(),
    output_dir: Annotated[
        Path | None, typer.Option("--output-dir", "-o", help="Where pages are written")
    ] = None,
    page_size: Annotated[int | None, typer.Option(help="Items per listing page")] = None,
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", help="Fail when any source is excluded"),
    ] = None,
    case_sensitive_terms: Annotated[
        bool | None,
        typer.Option("--case-sensitive-terms/--case-insensitive-terms", help="Tag and category comparison"),
    ] = None,
    clean: Annotated[
        bool,
        typer.Option("--clean", help="Replace previous output once the build succeeds"),
    ] = False,
    log_level: Annotated[str | None, typer.Option(help="Logging level")] = None,
) -> None:
    """Parse, index, plan, render and write the site."""
    _setup_logging(log_level)
    try:
        config = _load_config(
            site_root.resolve(),
            content_dir=content_dir,
            output_dir=output_dir,
            page_size=page_size,
            strict=strict,
            case_sensitive_terms=case_sensitive_terms,
        )
        writer = SiteWriter(
            config.paths.abs_output_dir,
            clean=clean,
            protected=(config.paths.site_root, config.paths.abs_content_dir),
        )
        renderer = TemplateRenderer(convention=PathConvention(config.routes))
        report = SiteBuilder(config, renderer=renderer, writer=writer).build()
    except BuildError as exc:
        console.print(f"[bold red]Build failed:[/bold red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=EXIT_FATAL) from exc

    _finish(report)


@app.command()
def check(
    content_dir: Annotated[Path | None, typer.Argument(help="Directory holding the markdown sources")] = None,
    *,
    site_root: Annotated[Path, typer.Option("--site-root", help="Directory holding .quire.toml")] = Path(),
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", help="Fail when any source is excluded"),
    ] = None,
    case_sensitive_terms: Annotated[
        bool | None,
        typer.Option("--case-sensitive-terms/--case-insensitive-terms", help="Tag and category comparison"),
    ] = None,
    log_level: Annotated[str | None, typer.Option(help="Logging level")] = None,
) -> None:
    """Parse, index and plan without rendering anything."""
    _setup_logging(log_level)
    try:
        config = _load_config(
            site_root.resolve(),
            content_dir=content_dir,
            output_dir=None,
            page_size=None,
            strict=strict,
            case_sensitive_terms=case_sensitive_terms,
        )
        report = SiteBuilder(config).build()
    except BuildError as exc:
        console.print(f"[bold red]Check failed:[/bold red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=EXIT_FATAL) from exc

    _finish(report)
