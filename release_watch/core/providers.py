"""
Provider profile table.

The default table covers the providers tracked by the timeline. A config
file may override individual fields of a default provider, add new
providers, or restrict the run to a subset via ``enabled``:

    providers:
      enabled: [openai, anthropic]
      anthropic:
        feed_url: https://example.com/anthropic.xml
      cohere:
        name: Cohere
        blog_url: https://cohere.com/blog
        keywords: [command, model]
        model_patterns: ['Command\\s+R\\+?']

Patterns are compiled case-insensitively once, and the resulting table is
passed explicitly to the runner.
"""

from __future__ import annotations

import re
from typing import Any

from .types import ProviderProfile


DEFAULT_PROVIDERS: dict[str, dict[str, Any]] = {
    "openai": {
        "name": "OpenAI",
        "blog_url": "https://openai.com/blog",
        "feed_url": "https://openai.com/blog/rss.xml",
        "keywords": ["gpt", "o1", "o3", "o4", "model", "release", "introducing", "announcing"],
        "model_patterns": [
            r"GPT-[\d.]+(?:-(?:turbo|mini|nano))?",
            r"\bo[1-9]-(?:mini|preview|pro)\b",
            r"\bo[1-9]\b(?!\s*(?:clock|day|week|month|year|am|pm))",
        ],
    },
    "anthropic": {
        "name": "Anthropic",
        "blog_url": "https://www.anthropic.com/news",
        "feed_url": None,
        "keywords": ["claude", "model", "release", "introducing", "announcing", "sonnet", "opus", "haiku"],
        "model_patterns": [
            r"Claude\s+\d+(?:\.\d+)?\s+(?:Sonnet|Opus|Haiku)",
            r"Claude\s+(?:Sonnet|Opus|Haiku)(?:\s+\d+(?:\.\d+)?)?",
            r"Claude\s+\d+(?:\.\d+)?",
        ],
    },
    "google": {
        "name": "Google",
        "blog_url": "https://blog.google/technology/ai/",
        "feed_url": "https://blog.google/rss/",
        "keywords": ["gemini", "model", "release", "introducing", "announcing"],
        "model_patterns": [
            r"Gemini\s+\d+(?:\.\d+)?\s+(?:Pro|Ultra|Nano|Flash-Lite|Flash)",
            r"Gemini\s+(?:Pro|Ultra|Nano|Flash-Lite|Flash)(?:\s+\d+(?:\.\d+)?)?",
            r"Gemini\s+\d+(?:\.\d+)?",
            r"PaLM\s*\d+",
        ],
    },
    "meta": {
        "name": "Meta",
        "blog_url": "https://ai.meta.com/blog/",
        "feed_url": None,
        "keywords": ["llama", "model", "release", "introducing", "announcing", "open source"],
        "model_patterns": [
            r"Llama\s+\d+(?:\.\d+)?(?:\s+(?:Scout|Maverick))?",
            r"Code\s*Llama(?:\s+\d+B)?",
        ],
    },
    "xai": {
        "name": "xAI",
        "blog_url": "https://x.ai/news",
        "feed_url": None,
        "keywords": ["grok", "model", "release", "introducing", "announcing"],
        "model_patterns": [
            r"Grok[\s-]+\d+(?:\.\d+)?(?:\s+(?:Fast|Vision))?",
            r"Grok[\s-]+(?:Fast|Vision)(?:\s+\d+(?:\.\d+)?)?",
        ],
    },
    "deepseek": {
        "name": "DeepSeek",
        "blog_url": "https://www.deepseek.com/",
        "feed_url": None,
        "keywords": ["deepseek", "model", "release", "introducing"],
        "model_patterns": [
            r"DeepSeek[\s-]+V\d+(?:\.\d+)?",
            r"DeepSeek[\s-]+R\d+",
            r"DeepSeek[\s-]+Coder(?:\s+V?\d+(?:\.\d+)?)?",
            r"DeepSeek[\s-]+Math",
        ],
    },
    "mistral": {
        "name": "Mistral AI",
        "blog_url": "https://mistral.ai/news/",
        "feed_url": None,
        "keywords": ["mistral", "mixtral", "codestral", "model", "release", "introducing", "ministral", "pixtral"],
        "model_patterns": [
            r"Mistral\s+(?:Large|Medium|Small)(?:\s+\d+(?:\.\d+)?)?",
            r"Mixtral\s+\d+x\d+B",
            r"Codestral(?:\s+\d+(?:\.\d+)?)?",
            r"Ministral\s+\d+B",
            r"Pixtral(?:\s+(?:Large|\d+B))?",
            r"Mathstral",
            r"Magistral(?:\s+(?:Small|Medium|Large))?",
            r"Devstral(?:\s+(?:Small|Medium|Large))?",
        ],
    },
}


def build_profile(key: str, raw: dict[str, Any]) -> ProviderProfile:
    """Build a ProviderProfile from a raw mapping.

    Raises:
        ValueError: If blog_url is missing or a pattern does not compile
    """
    blog_url = raw.get("blog_url")
    if not blog_url:
        raise ValueError(f"Provider {key} has no blog_url")
    patterns = []
    for source in raw.get("model_patterns") or []:
        try:
            patterns.append(re.compile(source, re.IGNORECASE))
        except re.error as exc:
            raise ValueError(f"Provider {key} has an invalid pattern {source!r}: {exc}") from exc
    return ProviderProfile(
        key=key,
        name=raw.get("name") or key,
        blog_url=blog_url,
        feed_url=raw.get("feed_url") or None,
        keywords=tuple(str(keyword) for keyword in raw.get("keywords") or []),
        model_patterns=tuple(patterns),
    )


def load_providers(overrides: dict[str, Any] | None = None) -> dict[str, ProviderProfile]:
    """Resolve the provider table from defaults plus config overrides.

    Args:
        overrides: The ``providers`` section of the config file

    Returns:
        Ordered mapping of provider key to profile
    """
    overrides = dict(overrides or {})
    enabled = overrides.pop("enabled", None)

    merged: dict[str, dict[str, Any]] = {key: dict(value) for key, value in DEFAULT_PROVIDERS.items()}
    for key, value in overrides.items():
        if not isinstance(value, dict):
            raise ValueError(f"Provider {key} must be a mapping")
        merged.setdefault(key, {}).update(value)

    if enabled is not None:
        unknown = [key for key in enabled if key not in merged]
        if unknown:
            raise ValueError(f"Unknown providers enabled: {', '.join(unknown)}")
        merged = {key: merged[key] for key in enabled}

    return {key: build_profile(key, raw) for key, raw in merged.items()}
