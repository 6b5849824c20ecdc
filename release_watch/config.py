"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: HTTP fetching settings
- DiscoveryConfig: Feed recency window settings
- ExtractConfig: Model-name extraction settings
- DedupConfig: Known-release matching settings
- StoreConfig: Release store location and format
- OutputConfig: Report and run-result settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container

Provider profiles live under an optional top-level ``providers`` key and
are resolved separately by ``release_watch.core.providers``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import yaml


@dataclass
class FetchConfig:
    """Configuration for HTTP fetching.

    Attributes:
        timeout_seconds: Overall request timeout
        max_redirects: Number of redirects followed before giving up
        retries: Retry attempts after a network-level failure (0 disables)
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        accept: HTTP Accept header string
    """

    timeout_seconds: float = 30.0
    max_redirects: int = 5
    retries: int = 0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (compatible; ReleaseWatch/1.0; "
        "+https://github.com/release-watch/release-watch)"
    )
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass
class DiscoveryConfig:
    """Configuration for the feed recency filter.

    Attributes:
        recent_days: Feed entries older than this many days are ignored
        max_feed_items: Cap on recent feed entries inspected per provider
    """

    recent_days: int = 7
    max_feed_items: int = 10


@dataclass
class ExtractConfig:
    """Configuration for model-name extraction.

    Attributes:
        min_name_length: Cleaned matches shorter than this are dropped
    """

    min_name_length: int = 3


@dataclass
class DedupConfig:
    """Configuration for matching candidates against known releases.

    Attributes:
        containment_ratio: Minimum min(len)/max(len) for a substring match
            to count as the same model (strictly greater than)
    """

    containment_ratio: float = 0.7


@dataclass
class StoreConfig:
    """Configuration for the release store.

    Attributes:
        path: Path to the persisted release data
        format: "timeline" for the TypeScript timeline source, "yaml" for YAML
    """

    path: str = "lib/timeline-data.ts"
    format: str = "timeline"


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        report_dir: Directory for the human-readable report and run log
        report_filename: Base filename (without extension) of the report
        include_html: Whether to also render an HTML report
        github_output: Optional key/value output file for CI callers
    """

    report_dir: str = "."
    report_filename: str = "new-models-summary"
    include_html: bool = False
    github_output: str | None = None


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file inside the report directory
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    providers: dict[str, Any] = field(default_factory=dict)


_SECTIONS: dict[str, type] = {
    "fetch": FetchConfig,
    "discovery": DiscoveryConfig,
    "extract": ExtractConfig,
    "dedup": DedupConfig,
    "store": StoreConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    sections = {name: cls(**data[name]) for name, cls in _SECTIONS.items()}
    return AppConfig(providers=dict(data.get("providers") or {}), **sections)
