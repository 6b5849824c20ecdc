"""
Main pipeline orchestration for the release watcher.

This module coordinates one run:
1. Load known releases from the store (fatal on failure)
2. Check each provider sequentially: feed first (if configured), then page
3. Extract candidate model names from every recent feed item and the page
4. Drop candidates matching a known release
5. Append new releases to the store, saving after each append
6. Write the run-result channel and the human-readable report

Fetch failures are logged and count as zero findings for that source; a
failed append is flagged on the release and the run continues.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Mapping

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import AppConfig
from .core.extractor import extract_models
from .core.matcher import closest_known, model_exists, normalize_name
from .core.types import (
    FeedEntry,
    Finding,
    FindingSource,
    KnownRelease,
    NewRelease,
    ProviderProfile,
    ProviderStats,
    RunStatus,
    RunSummary,
)
from .errors import FetchError, StoreError, StoreLoadError
from .fetch.feed import parse_feed
from .fetch.fetcher import fetch_text
from .fetch.page import extract_page
from .output.renderer import render_html, render_markdown
from .output.run_outputs import write_run_outputs
from .store.base import ReleaseStore
from .store.factory import create_store
from .utils.logging import LOGGER_NAME, ProviderLogger, log_event, setup_logging


def run_pipeline(
    cfg: AppConfig,
    providers: Mapping[str, ProviderProfile],
    only: Iterable[str] | None = None,
    dry_run: bool = False,
    show_progress: bool = True,
    console: Console | None = None,
) -> RunSummary:
    """Run a complete check and emit its outputs.

    Args:
        cfg: Application configuration
        providers: Provider table, in check order
        only: Optional subset of provider keys to check
        dry_run: Report new releases without writing the store
        show_progress: Whether to display a progress bar
        console: Rich console for output (creates default if None)

    Returns:
        The RunSummary of this run
    """
    report_dir = Path(cfg.output.report_dir)
    logger = setup_logging(cfg.logging, report_dir)
    store = create_store(cfg.store)

    if show_progress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console or Console(),
        )
        with progress:
            summary = run_check(
                cfg, store, providers, only=only, dry_run=dry_run, logger=logger, progress=progress
            )
    else:
        summary = run_check(cfg, store, providers, only=only, dry_run=dry_run, logger=logger)

    emit_outputs(summary, cfg, logger)
    return summary


def run_check(
    cfg: AppConfig,
    store: ReleaseStore,
    providers: Mapping[str, ProviderProfile],
    only: Iterable[str] | None = None,
    dry_run: bool = False,
    now: datetime | None = None,
    logger: logging.Logger | None = None,
    progress: Progress | None = None,
) -> RunSummary:
    """Check providers, deduplicate candidates and persist new releases.

    Only a store load failure is fatal; it yields a FAILED_FATAL summary
    without touching any provider or writing anything.
    """
    logger = logger or logging.getLogger(LOGGER_NAME)
    now = now or datetime.now(timezone.utc)
    summary = RunSummary(status=RunStatus.COMPLETED, started_at=now, dry_run=dry_run)

    try:
        known = store.load_known()
    except StoreLoadError as exc:
        log_event(logger, "Release store load failed", logging.ERROR, event="store_load_failed", error=str(exc))
        summary.status = RunStatus.FAILED_FATAL
        summary.error = str(exc)
        return summary

    summary.known_count = len(known)
    log_event(logger, f"Loaded {len(known)} known releases", event="store_loaded", count=len(known))

    selected = _select_providers(providers, only)
    provider_task = progress.add_task("Providers", total=len(selected)) if progress else None

    collected: list[tuple[ProviderProfile, Finding]] = []
    for profile in selected:
        if progress is not None and provider_task is not None:
            progress.update(provider_task, description=f"Checking {profile.name}")
        findings, stats = check_provider(profile, cfg, now, logger)
        summary.provider_stats.append(stats)
        collected.extend((profile, finding) for finding in findings)
        if progress is not None and provider_task is not None:
            progress.advance(provider_task, 1)

    summary.new_releases = find_new_releases(collected, known, cfg.dedup.containment_ratio, logger)

    if not dry_run:
        persist_releases(summary.new_releases, store, logger)

    log_event(
        logger,
        "Run complete",
        event="run_complete",
        new=summary.count,
        persisted=len(summary.persisted),
        failed=len(summary.failed_persists),
    )
    return summary


def check_provider(
    profile: ProviderProfile,
    cfg: AppConfig,
    now: datetime,
    logger: logging.Logger,
) -> tuple[list[Finding], ProviderStats]:
    """Check one provider's feed (if any) and blog page."""
    stats = ProviderStats(provider=profile.key)
    provider_logger = ProviderLogger(logger, profile.key)
    log_event(provider_logger, f"Checking {profile.name}", event="provider_start")

    findings: list[Finding] = []
    if profile.feed_url:
        findings.extend(check_feed(profile, cfg, now, provider_logger.for_source(FindingSource.FEED), stats))
    findings.extend(check_page(profile, cfg, now, provider_logger.for_source(FindingSource.PAGE), stats))

    stats.findings = len(findings)
    return findings, stats


def check_feed(
    profile: ProviderProfile,
    cfg: AppConfig,
    now: datetime,
    logger: logging.Logger | logging.LoggerAdapter,
    stats: ProviderStats,
) -> list[Finding]:
    try:
        xml_text = fetch_text(profile.feed_url, cfg.fetch)
    except FetchError as exc:
        stats.feed_error = str(exc)
        log_event(
            logger,
            f"Feed fetch failed for {profile.name}: {exc}",
            logging.WARNING,
            event="feed_failed",
            url=profile.feed_url,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return []

    entries = parse_feed(xml_text)
    recent = select_recent(entries, now, cfg.discovery.recent_days, cfg.discovery.max_feed_items)
    stats.feed_items = len(entries)
    stats.recent_items = len(recent)
    log_event(
        logger,
        f"Found {len(recent)} recent feed items",
        event="feed_parsed",
        total=len(entries),
        recent=len(recent),
    )

    findings = []
    for entry in recent:
        models = extract_models(f"{entry.title} {entry.description}", profile, cfg.extract.min_name_length)
        if not models:
            continue
        findings.append(
            Finding(
                source=FindingSource.FEED,
                title=entry.title,
                link=entry.link,
                observed_at=entry.published_at or now,
                candidate_models=models,
            )
        )
    return findings


def check_page(
    profile: ProviderProfile,
    cfg: AppConfig,
    now: datetime,
    logger: logging.Logger | logging.LoggerAdapter,
    stats: ProviderStats,
) -> list[Finding]:
    try:
        html = fetch_text(profile.blog_url, cfg.fetch)
    except FetchError as exc:
        stats.page_error = str(exc)
        log_event(
            logger,
            f"Blog fetch failed for {profile.name}: {exc}",
            logging.WARNING,
            event="page_failed",
            url=profile.blog_url,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return []

    page = extract_page(html)
    text = " ".join([page.title, *page.headings, page.content])
    models = extract_models(text, profile, cfg.extract.min_name_length)
    if not models:
        return []
    return [
        Finding(
            source=FindingSource.PAGE,
            title=page.title,
            link=profile.blog_url,
            observed_at=now,
            candidate_models=models,
        )
    ]


def select_recent(
    entries: list[FeedEntry],
    now: datetime,
    recent_days: int,
    max_items: int,
) -> list[FeedEntry]:
    """Keep entries from the recency window, newest first, capped.

    Entries without a parseable date are kept and ranked as if published
    now.
    """
    cutoff = now - timedelta(days=recent_days)
    recent = [entry for entry in entries if entry.published_at is None or entry.published_at >= cutoff]
    recent.sort(key=lambda entry: entry.published_at or now, reverse=True)
    return recent[:max_items]


def find_new_releases(
    collected: list[tuple[ProviderProfile, Finding]],
    known: Mapping[str, KnownRelease],
    ratio: float,
    logger: logging.Logger,
) -> list[NewRelease]:
    """Return candidates not matching any known release.

    A candidate accepted earlier in the same run counts as known, so a
    model seen in both a feed item and the page is reported once.
    """
    accepted: dict[str, str] = {}
    new_releases: list[NewRelease] = []
    for profile, finding in collected:
        for model in sorted(finding.candidate_models):
            if model_exists(model, known, ratio) or model_exists(model, accepted.values(), ratio):
                continue
            accepted[normalize_name(model)] = model
            closest = closest_known(model, known)
            log_event(
                ProviderLogger(logger, profile.key, finding.source.value),
                f"NEW MODEL FOUND: {model}",
                event="new_model",
                model=model,
                link=finding.link,
            )
            new_releases.append(
                NewRelease(
                    provider=profile.key,
                    provider_name=profile.name,
                    model=model,
                    discovered_at=finding.observed_at,
                    source=finding.source,
                    link=finding.link,
                    closest_known=closest[0] if closest else None,
                    closest_score=closest[1] if closest else None,
                )
            )
    return new_releases


def persist_releases(
    new_releases: list[NewRelease],
    store: ReleaseStore,
    logger: logging.Logger,
) -> None:
    """Append and save each release; failures are flagged, not raised."""
    for item in new_releases:
        # Roll back an append whose save failed.
        content, known = store.content, dict(store.known)
        try:
            store.append(item.provider, item.model, item.discovered_at)
            store.save()
        except (StoreError, OSError) as exc:
            store.content, store.known = content, known
            item.error = str(exc)
            log_event(
                logger,
                f"Could not persist {item.provider_name}: {item.model}: {exc}",
                logging.ERROR,
                event="persist_failed",
                provider=item.provider,
                model=item.model,
                error=str(exc),
            )
            continue
        item.persisted = True


def emit_outputs(summary: RunSummary, cfg: AppConfig, logger: logging.Logger | None = None) -> Path:
    """Write the run-result channel and the Markdown (and optional HTML) report.

    Returns:
        Path to the Markdown report
    """
    logger = logger or logging.getLogger(LOGGER_NAME)
    report_dir = Path(cfg.output.report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)

    if cfg.output.github_output:
        write_run_outputs(summary, Path(cfg.output.github_output))

    md_path = report_dir / f"{cfg.output.report_filename}.md"
    render_markdown(summary, md_path)
    if cfg.output.include_html:
        render_html(summary, report_dir / f"{cfg.output.report_filename}.html")

    log_event(logger, f"Report written: {md_path}", event="report_written", output=str(md_path))
    return md_path


def _select_providers(
    providers: Mapping[str, ProviderProfile],
    only: Iterable[str] | None,
) -> list[ProviderProfile]:
    if not only:
        return list(providers.values())
    wanted = list(only)
    unknown = [key for key in wanted if key not in providers]
    if unknown:
        raise ValueError(f"Unknown providers: {', '.join(unknown)}")
    return [profile for key, profile in providers.items() if key in wanted]
