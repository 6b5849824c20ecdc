"""
Release record persistence.

Stores load the known releases at the start of a run and append newly
discovered ones, writing each append back before the next provider.
"""

from .base import ReleaseStore, format_display_date
from .factory import available_formats, create_store
from .timeline import TimelineReleaseStore
from .yaml_store import YamlReleaseStore

__all__ = [
    "ReleaseStore",
    "TimelineReleaseStore",
    "YamlReleaseStore",
    "available_formats",
    "create_store",
    "format_display_date",
]
