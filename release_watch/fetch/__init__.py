"""
Fetching and parsing of provider sources.

This package handles HTTP fetching, feed parsing and blog page
text extraction.
"""

from .fetcher import fetch_text
from .feed import parse_date, parse_feed
from .page import extract_page

__all__ = [
    "fetch_text",
    "parse_date",
    "parse_feed",
    "extract_page",
]
