"""Application layer: settings, persisted config, bootstrap and timing."""

from __future__ import annotations

from . import settings  # noqa: F401
from .config_store import CONFIG_VERSION, TableConfig, load_config, save_config  # noqa: F401
from .timing import TimingEvent, TimingLogger  # noqa: F401

__all__ = [
    "settings",
    "CONFIG_VERSION",
    "TableConfig",
    "load_config",
    "save_config",
    "TimingEvent",
    "TimingLogger",
]
