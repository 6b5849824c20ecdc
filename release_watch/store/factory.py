"""Store factory and registry for the supported persistence formats."""

from __future__ import annotations

from pathlib import Path

from ..config import StoreConfig
from .base import ReleaseStore
from .timeline import TimelineReleaseStore
from .yaml_store import YamlReleaseStore


StoreBuilder = type[ReleaseStore]

_STORE_REGISTRY: dict[str, StoreBuilder] = {
    "timeline": TimelineReleaseStore,
    "ts": TimelineReleaseStore,
    "yaml": YamlReleaseStore,
    "yml": YamlReleaseStore,
}


def available_formats() -> list[str]:
    """Return the set of registered store formats."""
    return sorted(_STORE_REGISTRY.keys())


def create_store(store_cfg: StoreConfig) -> ReleaseStore:
    """Build a release store instance from runtime config."""
    name = store_cfg.format.lower().strip()
    builder = _STORE_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_formats())
        raise ValueError(f"Unsupported store format: {store_cfg.format}. Supported: {supported}")
    return builder(Path(store_cfg.path))
