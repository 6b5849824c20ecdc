"""
Known-release matching using normalization and fuzzy containment.

A candidate counts as already known when, after normalization, it:
1. Equals a known name
2. Equals a known name once all spaces are removed
3. Contains or is contained in a known name, and the shorter of the two is
   more than ``ratio`` of the longer one's length

The length guard keeps short tokens like "o1" from matching unrelated
longer names. The heuristic favors recall of existing entries: a genuinely
new model whose name extends a known one ("Claude Opus 4" -> "Claude Opus
4.5") may be reported as known. That is preferred over filing duplicates.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping

from rapidfuzz import fuzz, process

from .types import KnownRelease

DEFAULT_CONTAINMENT_RATIO = 0.7

_HYPHENS_RE = re.compile("[\u2010\u2011-]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Lowercase, unify hyphen variants and collapse whitespace.

    Examples:
        >>> normalize_name("Grok‑1.5")
        'grok-1.5'
        >>> normalize_name("  GPT-4o   mini ")
        'gpt-4o mini'
    """
    lowered = _HYPHENS_RE.sub("-", name.lower())
    return _WHITESPACE_RE.sub(" ", lowered).strip()


def _known_names(known: Mapping[str, KnownRelease] | Iterable[str]) -> dict[str, str]:
    """Map normalized known names to their display names."""
    if isinstance(known, Mapping):
        return {normalize_name(release.name): release.name for release in known.values()}
    return {normalize_name(name): name for name in known}


def _matches(candidate: str, existing: str, ratio: float) -> bool:
    if candidate == existing:
        return True
    if candidate.replace(" ", "") == existing.replace(" ", ""):
        return True
    if not candidate or not existing:
        return False
    if candidate in existing or existing in candidate:
        shorter, longer = sorted((len(candidate), len(existing)))
        return shorter / longer > ratio
    return False


def find_match(
    candidate: str,
    known: Mapping[str, KnownRelease] | Iterable[str],
    ratio: float = DEFAULT_CONTAINMENT_RATIO,
) -> str | None:
    """Return the display name of the first known release matching the candidate.

    Which known name is returned when several match is unspecified.
    """
    normalized = normalize_name(candidate)
    for existing, display in _known_names(known).items():
        if _matches(normalized, existing, ratio):
            return display
    return None


def model_exists(
    candidate: str,
    known: Mapping[str, KnownRelease] | Iterable[str],
    ratio: float = DEFAULT_CONTAINMENT_RATIO,
) -> bool:
    """Check whether a candidate model name is already known.

    Args:
        candidate: Extracted model name
        known: Known releases keyed by normalized name, or plain names
        ratio: Length ratio guard for substring matches

    Returns:
        True if any known name matches
    """
    return find_match(candidate, known, ratio) is not None


def closest_known(
    candidate: str,
    known: Mapping[str, KnownRelease] | Iterable[str],
) -> tuple[str, float] | None:
    """Return the most similar known name and its similarity score (0-100).

    Used for review hints only; never decides whether a candidate is known.
    """
    names = _known_names(known)
    if not names:
        return None
    best = process.extractOne(normalize_name(candidate), list(names), scorer=fuzz.ratio)
    if best is None:
        return None
    name, score, _index = best
    return names[name], float(score)
