"""Tests for the per-run orchestration: fetch, extract, dedup, persist."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from pathlib import Path

from release_watch import runner
from release_watch.config import AppConfig
from release_watch.core.providers import load_providers
from release_watch.core.types import FeedEntry, FindingSource, RunStatus
from release_watch.errors import HttpStatusError, NetworkError
from release_watch.store import TimelineReleaseStore


NOW = datetime(2025, 11, 26, 12, 0, tzinfo=timezone.utc)
FEED_URL = "https://example.com/anthropic.xml"
BLOG_URL = "https://www.anthropic.com/news"

TIMELINE = """export const timelineData: TimelineCompany[] = [
  {
    company: 'anthropic',
    releases: [
      { date: 'Mar 4 2024', name: 'Claude 3 Opus', position: getMonthPosition('Mar 4 2024') },
      { date: 'Sep 29 2025', name: 'Claude Sonnet 4.5', position: getMonthPosition('Sep 29 2025') }
    ]
  },
  {
    company: 'mistral',
    releases: [
      { date: 'Sep 27 2023', name: 'Mistral 7B', position: getMonthPosition('Sep 27 2023') }
    ]
  }
];
"""


def _rss(*items: tuple[str, datetime | None]) -> str:
    blocks = []
    for title, published in items:
        pub = f"<pubDate>{published.strftime('%a, %d %b %Y %H:%M:%S +0000')}</pubDate>" if published else ""
        blocks.append(f"<item><title>{title}</title><link>https://example.com/{len(blocks)}</link>{pub}</item>")
    return f"<rss><channel>{''.join(blocks)}</channel></rss>"


def _store(tmp_path: Path) -> TimelineReleaseStore:
    path = tmp_path / "timeline-data.ts"
    path.write_text(TIMELINE, encoding="utf-8")
    return TimelineReleaseStore(path)


def _fake_fetch(monkeypatch, responses: dict[str, object]) -> list[str]:
    calls: list[str] = []

    def fake_fetch(url, cfg, *args, **kwargs):  # noqa: ANN001
        calls.append(url)
        response = responses.get(url, HttpStatusError(404, url))
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(runner, "fetch_text", fake_fetch)
    return calls


def _anthropic_only():
    return load_providers({"enabled": ["anthropic"], "anthropic": {"feed_url": FEED_URL}})


def test_feed_item_produces_one_new_release(monkeypatch, tmp_path):
    _fake_fetch(
        monkeypatch,
        {
            FEED_URL: _rss(("Introducing Claude Opus 4.5", NOW - timedelta(days=2))),
            BLOG_URL: "<html><article>Company news about our team</article></html>",
        },
    )
    store = _store(tmp_path)

    summary = runner.run_check(AppConfig(), store, _anthropic_only(), now=NOW)

    assert summary.status == RunStatus.COMPLETED
    assert summary.count == 1
    release = summary.new_releases[0]
    assert release.provider == "anthropic"
    assert "Opus" in release.model and "4.5" in release.model
    assert release.source == FindingSource.FEED
    assert release.discovered_at == NOW - timedelta(days=2)
    assert release.persisted
    assert "name: 'Claude Opus 4.5'" in store.path.read_text(encoding="utf-8")
    assert "date: 'Nov 24 2025'" in store.path.read_text(encoding="utf-8")


def test_second_run_finds_nothing_new(monkeypatch, tmp_path):
    _fake_fetch(
        monkeypatch,
        {
            FEED_URL: _rss(("Introducing Claude Opus 4.5", NOW - timedelta(days=2))),
            BLOG_URL: "<main><h1>Claude Opus 4.5</h1><p>Our best model.</p></main>",
        },
    )
    providers = _anthropic_only()

    first = runner.run_check(AppConfig(), _store(tmp_path), providers, now=NOW)
    second = runner.run_check(AppConfig(), TimelineReleaseStore(tmp_path / "timeline-data.ts"), providers, now=NOW)

    assert first.count == 1
    assert second.status == RunStatus.COMPLETED
    assert second.count == 0
    assert not second.has_new


def test_model_seen_in_feed_and_page_reported_once(monkeypatch, tmp_path):
    _fake_fetch(
        monkeypatch,
        {
            FEED_URL: _rss(("Introducing Claude Opus 4.5", NOW - timedelta(days=1))),
            BLOG_URL: "<article>Claude Opus 4.5 is available today</article>",
        },
    )

    summary = runner.run_check(AppConfig(), _store(tmp_path), _anthropic_only(), now=NOW)

    assert [item.model for item in summary.new_releases] == ["Claude Opus 4.5"]
    assert summary.new_releases[0].source == FindingSource.FEED


def test_page_finding_dated_now(monkeypatch, tmp_path):
    _fake_fetch(monkeypatch, {BLOG_URL: "<article>Introducing Claude Haiku 4.5</article>"})

    summary = runner.run_check(AppConfig(), _store(tmp_path), _anthropic_only(), now=NOW)

    assert summary.count == 1
    release = summary.new_releases[0]
    assert release.source == FindingSource.PAGE
    assert release.discovered_at == NOW
    assert release.link == BLOG_URL


def test_fetch_failures_are_not_fatal(monkeypatch, tmp_path):
    calls = _fake_fetch(
        monkeypatch,
        {FEED_URL: NetworkError("connection refused", FEED_URL), BLOG_URL: HttpStatusError(503, BLOG_URL)},
    )

    summary = runner.run_check(AppConfig(), _store(tmp_path), _anthropic_only(), now=NOW)

    assert calls == [FEED_URL, BLOG_URL]
    assert summary.status == RunStatus.COMPLETED
    assert summary.count == 0
    stats = summary.provider_stats[0]
    assert stats.feed_error == "connection refused"
    assert stats.page_error == "HTTP 503"


def test_failing_provider_does_not_stop_next_provider(monkeypatch, tmp_path):
    _fake_fetch(
        monkeypatch,
        {
            BLOG_URL: NetworkError("boom", BLOG_URL),
            "https://mistral.ai/news/": "<article>Introducing Magistral Large</article>",
        },
    )
    providers = load_providers({"enabled": ["anthropic", "mistral"]})

    summary = runner.run_check(AppConfig(), _store(tmp_path), providers, now=NOW)

    assert [(item.provider, item.model) for item in summary.new_releases] == [("mistral", "Magistral Large")]


def test_store_load_failure_is_fatal(monkeypatch, tmp_path):
    calls = _fake_fetch(monkeypatch, {})
    store = TimelineReleaseStore(tmp_path / "missing.ts")

    summary = runner.run_check(AppConfig(), store, _anthropic_only(), now=NOW)

    assert summary.status == RunStatus.FAILED_FATAL
    assert summary.error
    assert calls == []
    assert not (tmp_path / "missing.ts").exists()


def test_missing_store_section_flags_release_and_continues(monkeypatch, tmp_path):
    _fake_fetch(
        monkeypatch,
        {
            "https://x.ai/news": "<article>Introducing Grok 5</article>",
            "https://mistral.ai/news/": "<article>Introducing Devstral Medium</article>",
        },
    )
    providers = load_providers({"enabled": ["xai", "mistral"]})
    store = _store(tmp_path)

    summary = runner.run_check(AppConfig(), store, providers, now=NOW)

    by_model = {item.model: item for item in summary.new_releases}
    assert not by_model["Grok 5"].persisted
    assert "xai" in by_model["Grok 5"].error
    assert by_model["Devstral Medium"].persisted
    assert summary.failed_persists == [by_model["Grok 5"]]
    assert "Devstral Medium" in store.path.read_text(encoding="utf-8")


def test_dry_run_leaves_store_untouched(monkeypatch, tmp_path):
    _fake_fetch(monkeypatch, {BLOG_URL: "<article>Introducing Claude Haiku 4.5</article>"})
    store = _store(tmp_path)

    summary = runner.run_check(AppConfig(), store, _anthropic_only(), dry_run=True, now=NOW)

    assert summary.count == 1
    assert not summary.new_releases[0].persisted
    assert store.path.read_text(encoding="utf-8") == TIMELINE


def test_only_filters_providers(monkeypatch, tmp_path):
    calls = _fake_fetch(monkeypatch, {})
    providers = load_providers({"enabled": ["anthropic", "mistral"]})

    runner.run_check(AppConfig(), _store(tmp_path), providers, only=["mistral"], now=NOW)

    assert calls == ["https://mistral.ai/news/"]


def test_select_recent_window_and_cap():
    entries = [FeedEntry(title=f"post {day}", published_at=NOW - timedelta(days=day)) for day in range(12)]
    entries.append(FeedEntry(title="undated"))
    entries.append(FeedEntry(title="old", published_at=NOW - timedelta(days=30)))

    recent = runner.select_recent(entries, NOW, recent_days=7, max_items=10)

    titles = [entry.title for entry in recent]
    assert "old" not in titles
    assert "undated" in titles
    assert all(entry.published_at is None or entry.published_at >= NOW - timedelta(days=7) for entry in recent)
    assert len(recent) == 9

    capped = runner.select_recent(entries, NOW, recent_days=7, max_items=3)
    assert [entry.title for entry in capped] == ["post 0", "undated", "post 1"]


def test_old_feed_items_ignored(monkeypatch, tmp_path):
    _fake_fetch(monkeypatch, {FEED_URL: _rss(("Introducing Claude Opus 4.5", NOW - timedelta(days=10)))})

    summary = runner.run_check(AppConfig(), _store(tmp_path), _anthropic_only(), now=NOW)

    assert summary.count == 0
    assert summary.provider_stats[0].feed_items == 1
    assert summary.provider_stats[0].recent_items == 0


def test_emit_outputs_writes_report_and_run_result(monkeypatch, tmp_path):
    _fake_fetch(monkeypatch, {BLOG_URL: "<article>Introducing Claude Haiku 4.5</article>"})
    summary = runner.run_check(AppConfig(), _store(tmp_path), _anthropic_only(), now=NOW)

    cfg = AppConfig()
    cfg.output.report_dir = str(tmp_path / "out")
    cfg.output.github_output = str(tmp_path / "github_output")
    cfg.output.include_html = True

    md_path = runner.emit_outputs(summary, cfg, logging.getLogger("test_emit"))

    assert md_path.read_text(encoding="utf-8").count("**Anthropic**: Claude Haiku 4.5") == 1
    assert (tmp_path / "out" / "new-models-summary.html").exists()
    assert (tmp_path / "github_output").read_text(encoding="utf-8") == (
        "new_models=true\nmodel_count=1\nmodel_summary=Anthropic: Claude Haiku 4.5\n"
    )


def test_failed_save_is_rolled_back(monkeypatch, tmp_path):
    _fake_fetch(
        monkeypatch,
        {
            BLOG_URL: "<article>Introducing Claude Haiku 4.5</article>",
            "https://mistral.ai/news/": "<article>Introducing Devstral Medium</article>",
        },
    )
    providers = load_providers({"enabled": ["anthropic", "mistral"]})
    store = _store(tmp_path)
    saves = []

    def flaky_save():
        saves.append(store.content)
        if len(saves) == 1:
            raise OSError("disk full")
        TimelineReleaseStore.save(store)

    monkeypatch.setattr(store, "save", flaky_save)

    summary = runner.run_check(AppConfig(), store, providers, now=NOW)

    by_model = {item.model: item for item in summary.new_releases}
    assert by_model["Claude Haiku 4.5"].error == "disk full"
    assert not by_model["Claude Haiku 4.5"].persisted
    assert by_model["Devstral Medium"].persisted
    text = store.path.read_text(encoding="utf-8")
    assert "Devstral Medium" in text
    assert "Claude Haiku 4.5" not in text
    assert "claude haiku 4.5" not in store.known
