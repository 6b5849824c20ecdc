"""
Core domain models and matching logic.

This package contains data types, provider profiles, model-name
extraction and known-release matching, independent of any I/O.
"""

from .types import (
    ExtractedPage,
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
from .providers import DEFAULT_PROVIDERS, build_profile, load_providers
from .extractor import extract_models
from .matcher import closest_known, find_match, model_exists, normalize_name

__all__ = [
    "ExtractedPage",
    "FeedEntry",
    "Finding",
    "FindingSource",
    "KnownRelease",
    "NewRelease",
    "ProviderProfile",
    "ProviderStats",
    "RunStatus",
    "RunSummary",
    "DEFAULT_PROVIDERS",
    "build_profile",
    "load_providers",
    "extract_models",
    "closest_known",
    "find_match",
    "model_exists",
    "normalize_name",
]
