"""
Main-text extraction from blog pages.

Script and style contents are dropped first so code and CSS never reach
the text corpus. Content is then taken from <article> elements, falling
back to <main> elements, falling back to the whole document.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from ..core.types import ExtractedPage

_WHITESPACE_RE = re.compile(r"\s+")


def extract_page(html: str) -> ExtractedPage:
    """Extract title, <h1> headings and main text from an HTML document.

    Args:
        html: Raw HTML text

    Returns:
        ExtractedPage with whitespace-normalized fields; empty for
        degenerate input

    Examples:
        >>> extract_page("<script>alert(1)</script><article>Hello <b>World</b></article>").content
        'Hello World'
    """
    if not html:
        return ExtractedPage()

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    title_tag = soup.find("title")
    title = _clean(title_tag.get_text(" ")) if title_tag else ""
    headings = [_clean(h1.get_text(" ")) for h1 in soup.find_all("h1")]

    regions = _top_level(soup, "article") or _top_level(soup, "main")
    if regions:
        content = " ".join(region.get_text(" ") for region in regions)
    else:
        content = soup.get_text(" ")

    return ExtractedPage(
        title=title,
        headings=[heading for heading in headings if heading],
        content=_clean(content),
    )


def _top_level(soup: BeautifulSoup, name: str) -> list:
    """Elements named name that are not nested inside another one."""
    return [tag for tag in soup.find_all(name) if tag.find_parent(name) is None]


def _clean(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text.replace("\xa0", " ")).strip()
