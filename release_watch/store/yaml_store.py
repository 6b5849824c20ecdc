"""
Release store backed by a YAML document.

Layout:

    releases:
      openai:
        - date: Nov 30 2022
          name: GPT-3.5
      anthropic: []
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

import yaml

from ..core.types import KnownRelease
from ..errors import StoreLoadError, StoreSectionNotFound
from .base import ReleaseStore

logger = logging.getLogger(__name__)


class YamlReleaseStore(ReleaseStore):
    """Release store over a YAML file keyed by provider."""

    def _parse(self, content: str) -> Iterator[KnownRelease]:
        releases = _releases_section(_load(content))
        for provider, records in releases.items():
            if not isinstance(records, list):
                logger.warning("Skipping %s: release list is not a sequence", provider)
                continue
            for record in records:
                if not isinstance(record, dict) or not record.get("name") or not record.get("date"):
                    logger.warning("Skipping malformed %s release record: %r", provider, record)
                    continue
                yield KnownRelease(
                    provider=str(provider),
                    date=str(record["date"]),
                    name=str(record["name"]),
                )

    def _insert(self, content: str, provider: str, name: str, date_str: str) -> str:
        data = _load(content)
        releases = _releases_section(data)
        records = releases.get(provider)
        if records is None and provider not in releases:
            raise StoreSectionNotFound(provider)
        if records is None:
            records = releases[provider] = []
        if not isinstance(records, list):
            raise StoreSectionNotFound(provider)
        records.append({"date": date_str, "name": name})
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


def _load(content: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise StoreLoadError(f"Invalid YAML release store: {exc}") from exc
    if not isinstance(data, dict):
        raise StoreLoadError("YAML release store must contain a mapping at the top level")
    return data


def _releases_section(data: dict[str, Any]) -> dict[str, Any]:
    releases = data.setdefault("releases", {})
    if not isinstance(releases, dict):
        raise StoreLoadError("'releases' must map provider keys to release lists")
    return releases
