"""Persisted table view preferences.

Stores the geometry and styling knobs a host applies when it builds a
table view (row height, overscan, idle pool cap, density, variant).

Design principles:
- Pure logic (no Qt import) so it can be unit-tested headless.
- Explicit schema ``version`` field; incompatible files reset to defaults.
- Graceful fallback: corrupt files produce defaults instead of raising.
- Atomic write (temp file + replace).
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from . import settings

__all__ = ["TableConfig", "load_config", "save_config", "CONFIG_VERSION"]

log = logging.getLogger(__name__)

CONFIG_VERSION = 1

DEFAULT_FILENAME = "tableview_config.json"

_DENSITIES = {"comfortable", "compact"}
_VARIANTS = {"plain", "striped"}


@dataclass(slots=True)
class TableConfig:
    """Serializable table view preferences.

    Attributes
    ----------
    version: Schema version for migration handling.
    row_height: Pixel height of every row.
    overscan: Rows bound beyond each viewport edge.
    idle_capacity: Fixed per-identifier idle cap, or None to follow the window size.
    density: "comfortable" or "compact" (QSS hook).
    variant: "plain" or "striped" (QSS hook).
    """

    version: int = CONFIG_VERSION
    row_height: int = settings.DEFAULT_ROW_HEIGHT
    overscan: int = settings.DEFAULT_OVERSCAN
    idle_capacity: Optional[int] = None
    density: str = "comfortable"
    variant: str = "plain"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableConfig":
        idle = data.get("idle_capacity")
        density = data.get("density", "comfortable")
        variant = data.get("variant", "plain")
        return cls(
            version=int(data.get("version", CONFIG_VERSION)),
            row_height=max(1, int(data.get("row_height", settings.DEFAULT_ROW_HEIGHT))),
            overscan=max(0, int(data.get("overscan", settings.DEFAULT_OVERSCAN))),
            idle_capacity=None if idle is None else max(0, int(idle)),
            density=density if density in _DENSITIES else "comfortable",
            variant=variant if variant in _VARIANTS else "plain",
        )


def _resolve_path(base_dir: str | Path | None) -> Path:
    base = Path(base_dir) if base_dir else Path(settings.CONFIG_DIR or Path.cwd())
    return base / DEFAULT_FILENAME


def load_config(base_dir: str | Path | None = None) -> TableConfig:
    """Load preferences from ``base_dir`` (defaults: ``TABLEVIEW_CONFIG_DIR`` or CWD)."""
    path = _resolve_path(base_dir)
    if not path.exists():
        return TableConfig()
    try:
        cfg = TableConfig.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        log.warning("Ignoring unreadable config %s: %s", path, exc)
        return TableConfig()
    if cfg.version != CONFIG_VERSION:
        log.info("Config version %s != %s; using defaults", cfg.version, CONFIG_VERSION)
        return TableConfig()
    return cfg


def save_config(cfg: TableConfig, base_dir: str | Path | None = None) -> Path:
    """Persist preferences; returns the path written."""
    path = _resolve_path(base_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(cfg.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
    return path
