"""
Core data types for the release watcher.

This module defines the data structures passed between pipeline stages:
- ProviderProfile: Static per-provider configuration
- FeedEntry / ExtractedPage: Parsed feed items and blog pages
- Finding: Candidate model names observed in one feed item or page
- KnownRelease: A record already present in the release store
- NewRelease / RunSummary: The outcome of one run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import re


class FindingSource(str, Enum):
    FEED = "feed"
    PAGE = "page"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    FAILED_FATAL = "failed_fatal"


@dataclass(frozen=True)
class ProviderProfile:
    """Immutable configuration for one AI provider.

    Attributes:
        key: Provider key used by the release store (e.g. "openai")
        name: Display name (e.g. "OpenAI")
        blog_url: Blog or news page checked on every run
        feed_url: Optional RSS/Atom feed URL, checked before the page
        keywords: Case-insensitive substrings gating pattern extraction
        model_patterns: Compiled name patterns, applied in order
    """
    key: str
    name: str
    blog_url: str
    feed_url: str | None = None
    keywords: tuple[str, ...] = ()
    model_patterns: tuple[re.Pattern[str], ...] = ()


@dataclass
class FeedEntry:
    """A single item parsed from an RSS or Atom feed.

    Attributes:
        title: Item title, CDATA removed
        link: Item link, empty string when absent
        published_at: Timezone-aware publish time, or None if missing/unparseable
        description: Item description or summary, CDATA removed
    """
    title: str
    link: str = ""
    published_at: datetime | None = None
    description: str = ""


@dataclass
class ExtractedPage:
    """Plain-text view of a blog page."""
    title: str = ""
    headings: list[str] = field(default_factory=list)
    content: str = ""


@dataclass
class Finding:
    """Candidate model names observed in one feed item or page check."""
    source: FindingSource
    title: str
    link: str
    observed_at: datetime
    candidate_models: set[str] = field(default_factory=set)


@dataclass
class KnownRelease:
    provider: str
    date: str
    name: str


@dataclass
class NewRelease:
    """A candidate that did not match any known release.

    Attributes:
        provider: Provider key
        provider_name: Provider display name
        model: Model name as extracted
        discovered_at: Feed publish time, or run time for page findings
        source: Where the candidate was observed
        link: Feed item link or blog URL
        persisted: Whether the release was written to the store
        error: Persist error message, if the append failed
        closest_known: Most similar known release name, for review
        closest_score: Similarity score (0-100) of closest_known
    """
    provider: str
    provider_name: str
    model: str
    discovered_at: datetime
    source: FindingSource
    link: str = ""
    persisted: bool = False
    error: str | None = None
    closest_known: str | None = None
    closest_score: float | None = None


@dataclass
class ProviderStats:
    """Per-provider counters collected while checking sources."""
    provider: str
    feed_items: int = 0
    recent_items: int = 0
    findings: int = 0
    feed_error: str | None = None
    page_error: str | None = None


@dataclass
class RunSummary:
    """Aggregate result of one run."""
    status: RunStatus
    started_at: datetime
    new_releases: list[NewRelease] = field(default_factory=list)
    known_count: int = 0
    provider_stats: list[ProviderStats] = field(default_factory=list)
    error: str | None = None
    dry_run: bool = False

    @property
    def has_new(self) -> bool:
        return bool(self.new_releases)

    @property
    def count(self) -> int:
        return len(self.new_releases)

    @property
    def persisted(self) -> list[NewRelease]:
        return [item for item in self.new_releases if item.persisted]

    @property
    def failed_persists(self) -> list[NewRelease]:
        return [item for item in self.new_releases if item.error]

    @property
    def summary_line(self) -> str:
        return ", ".join(f"{item.provider_name}: {item.model}" for item in self.new_releases)
