"""Tests for known-release normalization and fuzzy matching."""

from __future__ import annotations

from release_watch.core.matcher import closest_known, find_match, model_exists, normalize_name
from release_watch.core.types import KnownRelease


def _known(*names: str) -> dict[str, KnownRelease]:
    return {normalize_name(name): KnownRelease(provider="test", date="Jan 1 2025", name=name) for name in names}


KNOWN = _known("GPT-4o mini", "Grok\u20111.5", "o1-mini", "Claude 3.5 Sonnet", "DeepSeek V3.1", "Mistral Large 2")


def test_normalize_name():
    assert normalize_name("  GPT-4o   MINI ") == "gpt-4o mini"
    assert normalize_name("Grok\u20111.5") == "grok-1.5"
    assert normalize_name("Grok\u20101.5") == "grok-1.5"


def test_every_known_name_exists():
    for release in KNOWN.values():
        assert model_exists(release.name, KNOWN)


def test_case_hyphen_and_spacing_variants_exist():
    assert model_exists("gpt-4o MINI", KNOWN)
    assert model_exists("Grok-1.5", KNOWN)
    assert model_exists("GPT-4o  mini", KNOWN)
    assert model_exists("GPT-4omini", KNOWN)
    assert model_exists("DeepSeek V 3.1", KNOWN)


def test_containment_with_close_length_is_known():
    # "mistral large 2" is inside "mistral large 2.1" and 15/17 > 0.7
    assert model_exists("Mistral Large 2.1", KNOWN)


def test_short_unrelated_substring_is_new():
    # "o1" is inside "o1-mini" but 2/7 is below the ratio
    assert not model_exists("o1", KNOWN)
    assert not model_exists("Claude", KNOWN)


def test_unrelated_names_are_new():
    assert not model_exists("Gemini 3 Pro", KNOWN)
    assert not model_exists("Claude Opus 4.5", KNOWN)


def test_ratio_is_configurable():
    assert not model_exists("Mistral Large 2.1", KNOWN, ratio=0.95)


def test_plain_name_iterables_supported():
    assert model_exists("GPT-5", ["gpt-5"])
    assert not model_exists("GPT-5", [])


def test_find_match_returns_display_name():
    assert find_match("grok-1.5", KNOWN) == "Grok\u20111.5"
    assert find_match("Gemini 3 Pro", KNOWN) is None


def test_closest_known_reports_best_candidate():
    name, score = closest_known("Claude 3.7 Sonnet", KNOWN)

    assert name == "Claude 3.5 Sonnet"
    assert 80 < score < 100
    assert closest_known("anything", {}) is None
