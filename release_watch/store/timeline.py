"""
Release store backed by the timeline TypeScript source.

The timeline keeps one object per provider:

    {
      company: 'openai',
      releases: [
        { date: 'Nov 30 2022', name: 'GPT-3.5', position: getMonthPosition('Nov 30 2022') },
        ...
      ]
    }

Records are located with regular expressions and new records are inserted
as text, so everything outside the edited list is preserved byte for byte.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

from ..core.types import KnownRelease
from ..errors import StoreSectionNotFound
from .base import ReleaseStore

logger = logging.getLogger(__name__)

# company: '<key>' ... releases: [ <body> ] }   (never crossing into the next company)
SECTION_TEMPLATE = (
    r"(?P<head>company:\s*(?P<q>['\"])(?P<key>{key})(?P=q)(?:(?!company:)[\s\S])*?releases:\s*\[)"
    r"(?P<body>[\s\S]*?)"
    r"(?P<tail>\]\s*\}})"
)
SECTION_RE = re.compile(SECTION_TEMPLATE.format(key=r"[^'\"]+"))
RECORD_RE = re.compile(r"\{[^{}]*\}")
DEFAULT_INDENT = "      "


def _field_re(name: str) -> re.Pattern[str]:
    return re.compile(rf"\b{name}:\s*(['\"])((?:\\.|(?!\1).)*)\1")


DATE_RE = _field_re("date")
NAME_RE = _field_re("name")
ESCAPE_RE = re.compile(r"\\(.)")


class TimelineReleaseStore(ReleaseStore):
    """Release store over the timeline-data.ts source file."""

    def _parse(self, content: str) -> Iterator[KnownRelease]:
        for section in SECTION_RE.finditer(content):
            provider = section.group("key")
            for record in RECORD_RE.finditer(section.group("body")):
                text = record.group(0)
                date = DATE_RE.search(text)
                name = NAME_RE.search(text)
                if not date or not name or not name.group(2).strip():
                    logger.warning("Skipping malformed %s release record: %s", provider, text.strip())
                    continue
                yield KnownRelease(
                    provider=provider,
                    date=_unescape(date.group(2)),
                    name=_unescape(name.group(2)),
                )

    def _insert(self, content: str, provider: str, name: str, date_str: str) -> str:
        pattern = re.compile(SECTION_TEMPLATE.format(key=re.escape(provider)), re.IGNORECASE)
        section = pattern.search(content)
        if section is None:
            raise StoreSectionNotFound(provider)

        body = section.group("body")
        releases = body.rstrip()
        trailing = body[len(releases):]
        if releases.strip() and not releases.endswith(","):
            releases += ","

        record = (
            f"{{ date: '{_escape(date_str)}', name: '{_escape(name)}', "
            f"position: getMonthPosition('{_escape(date_str)}') }}"
        )
        updated = f"{releases}\n{_record_indent(body)}{record}{trailing}"
        start, end = section.span("body")
        return content[:start] + updated + content[end:]


def _record_indent(body: str) -> str:
    """Reuse the indentation of the last existing record."""
    indents = re.findall(r"\n([ \t]*)\{", body)
    return indents[-1] if indents else DEFAULT_INDENT


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _unescape(value: str) -> str:
    return ESCAPE_RE.sub(lambda m: m.group(1), value)
