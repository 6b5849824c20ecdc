"""
Best-effort RSS/Atom feed parsing.

Feeds are parsed with feedparser, which tolerates the malformed XML some
provider feeds serve. Each entry is mapped to a FeedEntry:
- title (required; untitled entries are dropped)
- link (the alternate link for Atom)
- published/updated date, parsed with dateutil and normalized to UTC
- summary/description

Malformed input never raises; it yields whatever entries could be read.
"""

from __future__ import annotations

from datetime import datetime, timezone
import io
import logging
from typing import Any

from dateutil import parser as date_parser
import feedparser

from ..core.types import FeedEntry

logger = logging.getLogger(__name__)

_DATE_FIELDS = ("published", "updated", "created")


def parse_feed(xml_text: str) -> list[FeedEntry]:
    """Parse a feed document into entries, in document order.

    Args:
        xml_text: Raw RSS or Atom text

    Returns:
        A list of FeedEntry objects. Entries without a title are skipped.
    """
    if not xml_text or not xml_text.strip():
        return []

    # A stream keeps feedparser from treating the text as a path or URL.
    feed = feedparser.parse(io.BytesIO(xml_text.encode("utf-8")))
    if feed.bozo:
        logger.debug("Feed parsing warning: %s", feed.get("bozo_exception"))

    entries: list[FeedEntry] = []
    for entry in feed.entries:
        title = (entry.get("title") or "").strip()
        if not title:
            continue
        entries.append(
            FeedEntry(
                title=title,
                link=(entry.get("link") or "").strip(),
                published_at=_entry_date(entry),
                description=(entry.get("summary") or "").strip(),
            )
        )
    return entries


def _entry_date(entry: Any) -> datetime | None:
    for field in _DATE_FIELDS:
        parsed = parse_date(entry.get(field))
        if parsed is not None:
            return parsed

    # feedparser's own parse, already normalized to UTC
    for field in _DATE_FIELDS:
        struct = entry.get(f"{field}_parsed")
        if struct:
            return datetime(*struct[:6], tzinfo=timezone.utc)
    return None


def parse_date(value: str | None) -> datetime | None:
    """Parse a feed date string into an aware UTC datetime.

    Naive values are taken as UTC. Returns None for empty or unparseable
    values.
    """
    if not value or not value.strip():
        return None
    try:
        parsed = date_parser.parse(value.strip())
    except (ValueError, OverflowError) as exc:
        logger.debug("Unparseable feed date %r: %s", value, exc)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
