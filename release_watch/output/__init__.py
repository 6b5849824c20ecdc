"""
Run outputs.

This package writes the key/value run result consumed by CI and the
human-readable Markdown/HTML reports.
"""

from .renderer import render_html, render_markdown
from .run_outputs import build_run_outputs, write_run_outputs

__all__ = [
    "render_html",
    "render_markdown",
    "build_run_outputs",
    "write_run_outputs",
]
