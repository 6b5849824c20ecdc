"""
Report rendering for Markdown and HTML output.

The Markdown report is the body used for review of automated store
updates; the HTML report uses a Jinja2 template with the same content.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.types import NewRelease, RunStatus, RunSummary
from ..store.base import format_display_date


def report_title(summary: RunSummary) -> str:
    if summary.status == RunStatus.FAILED_FATAL:
        return "Release Check Failed"
    if not summary.has_new:
        return "No New AI Model Releases"
    return "New AI Model Releases Detected"


def render_markdown(summary: RunSummary, output_path: Path) -> None:
    """Render a run summary as a Markdown report.

    Args:
        summary: The run to describe
        output_path: Path where the Markdown file will be written
    """
    lines = [f"# {report_title(summary)}", "", f"**Date:** {summary.started_at:%Y-%m-%d}", ""]

    if summary.status == RunStatus.FAILED_FATAL:
        lines.extend(["## Run failed", "", f"{summary.error or 'Unknown error'}", ""])
        output_path.write_text("\n".join(lines), encoding="utf-8")
        return

    if not summary.has_new:
        lines.extend(["No new model releases found.", ""])
    else:
        lines.extend(["## Models Found", ""])
        for item in summary.new_releases:
            lines.extend(_release_lines(item))
            lines.append("")

    failed = summary.failed_persists
    if failed:
        lines.extend(["## Not Persisted", ""])
        for item in failed:
            lines.append(f"- **{item.provider_name}**: {item.model} ({item.error})")
        lines.append("")

    if summary.dry_run and summary.has_new:
        lines.extend(["_Dry run: the release store was not modified._", ""])

    lines.extend(["---", "*Generated automatically by the release watcher.*", ""])
    output_path.write_text("\n".join(lines), encoding="utf-8")


def _release_lines(item: NewRelease) -> list[str]:
    lines = [
        f"- **{item.provider_name}**: {item.model}",
        f"  - Source: {item.source.value}",
        f"  - Detected: {format_display_date(item.discovered_at)}",
    ]
    if item.link:
        lines.append(f"  - Link: {item.link}")
    if item.closest_known:
        lines.append(f"  - Closest known: {item.closest_known} ({item.closest_score:.0f})")
    return lines


def render_html(summary: RunSummary, output_path: Path) -> None:
    """Render a run summary as an HTML report using a Jinja2 template."""
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["display_date"] = format_display_date
    template = env.get_template("report.html")

    html = template.render(
        title=report_title(summary),
        summary=summary,
        failed=summary.status == RunStatus.FAILED_FATAL,
        generated_at=summary.started_at.strftime("%Y-%m-%d %H:%M UTC"),
    )
    output_path.write_text(html, encoding="utf-8")
