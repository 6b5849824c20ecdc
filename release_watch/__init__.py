"""
Release Watch - AI model release discovery.

This package polls AI provider blogs and RSS feeds, extracts candidate
model names with keyword and pattern heuristics, deduplicates them
against a release store and appends newly discovered releases.

Main entry point is the CLI via `release-watch run` command.

Example:
    $ release-watch run --store lib/timeline-data.ts -o reports/
"""

__all__ = ["__version__", "run_check", "run_pipeline", "load_config", "load_providers"]
__version__ = "0.1.0"

from .config import load_config
from .core.providers import load_providers
from .runner import run_check, run_pipeline
