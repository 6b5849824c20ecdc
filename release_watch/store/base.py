"""Abstract release store shared by all persistence backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
import logging
import os
import shutil
from pathlib import Path
import tempfile
from typing import Iterable

from ..core.matcher import normalize_name
from ..core.types import KnownRelease
from ..errors import StoreError, StoreLoadError

logger = logging.getLogger(__name__)

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_display_date(date: datetime) -> str:
    """Format a date the way release records display it.

    Examples:
        >>> format_display_date(datetime(2025, 8, 5))
        'Aug 5 2025'
    """
    return f"{MONTHS[date.month - 1]} {date.day} {date.year}"


class ReleaseStore(ABC):
    """Release records persisted as a single text document.

    The document is read once by ``load_known``. Appends modify the
    in-memory text, and ``save`` writes it back, so consecutive appends in
    one run build on each other without re-reading the file.

    Attributes:
        path: Location of the persisted document
        content: Current in-memory text, None until loaded
        known: Known releases keyed by normalized name
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.content: str | None = None
        self.known: dict[str, KnownRelease] = {}

    def load_known(self) -> dict[str, KnownRelease]:
        """Read the store and build the normalized-name lookup.

        Raises:
            StoreLoadError: If the document cannot be read or parsed
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StoreLoadError(f"Cannot read release store {self.path}: {exc}") from exc

        known: dict[str, KnownRelease] = {}
        for release in self._parse(content):
            known[normalize_name(release.name)] = release

        self.content = content
        self.known = known
        logger.debug("Loaded %d known releases from %s", len(known), self.path)
        return dict(known)

    def append(self, provider: str, name: str, date: datetime) -> str:
        """Append a release at the end of the provider's list.

        Returns:
            The updated textual representation

        Raises:
            StoreSectionNotFound: If the provider has no section
        """
        if self.content is None:
            raise StoreError("load_known() must be called before append()")
        date_str = format_display_date(date)
        self.content = self._insert(self.content, provider, name, date_str)
        self.known[normalize_name(name)] = KnownRelease(provider=provider, date=date_str, name=name)
        return self.content

    def save(self) -> None:
        """Write the in-memory document back, replacing the file atomically."""
        if self.content is None:
            raise StoreError("Nothing to save; load_known() was never called")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(self.content)
            if self.path.exists():
                shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @abstractmethod
    def _parse(self, content: str) -> Iterable[KnownRelease]:
        """Yield well-formed release records, skipping malformed ones."""
        raise NotImplementedError

    @abstractmethod
    def _insert(self, content: str, provider: str, name: str, date_str: str) -> str:
        """Return content with a new record appended to the provider's list."""
        raise NotImplementedError
