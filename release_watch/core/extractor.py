"""
Model-name extraction from free text.

A provider profile carries a keyword gate and an ordered list of name
patterns. Extraction is generic: the gate is checked first, then every
pattern is applied and its matches cleaned. Pattern authorship is
configuration, so false positives are expected and are filtered by the
known-release matcher and human review.
"""

from __future__ import annotations

import re

from .types import ProviderProfile

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PUNCTUATION = ".,;:!?"


def has_keywords(text: str, profile: ProviderProfile) -> bool:
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in profile.keywords)


def clean_match(match: str) -> str:
    """Normalize whitespace and strip one trailing punctuation character."""
    cleaned = _WHITESPACE_RE.sub(" ", match.strip())
    if cleaned and cleaned[-1] in _TRAILING_PUNCTUATION:
        cleaned = cleaned[:-1].rstrip()
    return cleaned


def extract_models(text: str, profile: ProviderProfile, min_length: int = 3) -> set[str]:
    """Return candidate model names found in text.

    Args:
        text: Free text from a feed item or page
        profile: Provider whose keywords and patterns are applied
        min_length: Cleaned matches shorter than this are dropped

    Returns:
        Deduplicated set of cleaned names; empty when no keyword is present

    Examples:
        >>> extract_models("We are introducing GPT-5 today", openai)
        {'GPT-5'}
    """
    if not text or not has_keywords(text, profile):
        return set()

    models: set[str] = set()
    for pattern in profile.model_patterns:
        for match in pattern.finditer(text):
            cleaned = clean_match(match.group(0))
            if len(cleaned) < min_length:
                continue
            models.add(cleaned)
    return models
