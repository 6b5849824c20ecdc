"""
Command-line interface for the release watcher.

Uses Typer to provide a CLI with options for the settings a scheduled
job usually overrides. Exits with status 1 when the release store cannot
be loaded, 0 otherwise (including runs that found nothing new).
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import load_config
from .core.providers import load_providers
from .core.types import RunStatus, RunSummary
from .runner import run_pipeline
from .store.base import format_display_date

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    store: Path | None = typer.Option(None, "--store", "-s", help="Release store file."),
    store_format: str | None = typer.Option(
        None, "--store-format", help="Release store format: timeline or yaml."
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Report directory."),
    github_output: Path | None = typer.Option(
        None,
        "--github-output",
        envvar="GITHUB_OUTPUT",
        help="Append key=value run results to this file (defaults to $GITHUB_OUTPUT).",
    ),
    provider: list[str] | None = typer.Option(
        None, "--provider", "-p", help="Only check these providers (repeatable)."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not modify the release store."),
    html: bool | None = typer.Option(None, "--html/--no-html", help="Also render an HTML report."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Check provider blogs and feeds for new model releases.

    Loads the known releases, checks every configured provider, appends
    new releases to the store and writes the run result and report.
    """
    cfg = load_config(str(config) if config else None)

    if store is not None:
        cfg.store.path = str(store)
    if store_format:
        cfg.store.format = store_format
    if output is not None:
        cfg.output.report_dir = str(output)
    if github_output is not None:
        cfg.output.github_output = str(github_output)
    if html is not None:
        cfg.output.include_html = html
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        providers = load_providers(cfg.providers)
    except ValueError as exc:
        console.print(f"[red]Invalid provider configuration:[/red] {exc}")
        raise typer.Exit(code=2)

    summary = run_pipeline(
        cfg,
        providers,
        only=provider or None,
        dry_run=dry_run,
        show_progress=progress,
        console=console,
    )
    _print_summary(summary)

    if summary.status == RunStatus.FAILED_FATAL:
        raise typer.Exit(code=1)


@app.command()
def providers(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
):
    """List the configured provider profiles."""
    cfg = load_config(str(config) if config else None)
    table = Table(title="Providers")
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("Blog")
    table.add_column("Feed")
    table.add_column("Patterns", justify="right")
    for profile in load_providers(cfg.providers).values():
        table.add_row(
            profile.key,
            profile.name,
            profile.blog_url,
            profile.feed_url or "-",
            str(len(profile.model_patterns)),
        )
    console.print(table)


def _print_summary(summary: RunSummary) -> None:
    if summary.status == RunStatus.FAILED_FATAL:
        console.print(f"[bold red]Fatal error:[/bold red] {summary.error}")
        return

    stats = Table(title="Provider checks")
    stats.add_column("Provider")
    stats.add_column("Feed items", justify="right")
    stats.add_column("Recent", justify="right")
    stats.add_column("Findings", justify="right")
    stats.add_column("Errors")
    for item in summary.provider_stats:
        errors = "; ".join(
            f"{label}: {error}"
            for label, error in (("feed", item.feed_error), ("page", item.page_error))
            if error
        )
        stats.add_row(item.provider, str(item.feed_items), str(item.recent_items), str(item.findings), errors)
    console.print(stats)

    if not summary.has_new:
        console.print("No new model releases found.")
        return

    table = Table(title=f"Found {summary.count} potential new model(s)")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Source")
    table.add_column("Date")
    table.add_column("Stored")
    for item in summary.new_releases:
        stored = "yes" if item.persisted else ("dry run" if summary.dry_run else f"[red]no[/red] ({item.error})")
        table.add_row(
            item.provider_name,
            item.model,
            item.source.value,
            format_display_date(item.discovered_at),
            stored,
        )
    console.print(table)


if __name__ == "__main__":
    app()
