"""Global defaults for the table view, overridable through the environment."""

from __future__ import annotations

import os
from typing import Final

DEFAULT_ROW_HEIGHT: Final = int(os.environ.get("TABLEVIEW_ROW_HEIGHT", "44"))  # pixels
DEFAULT_OVERSCAN: Final = int(os.environ.get("TABLEVIEW_OVERSCAN", "1"))  # rows above & below
DEFAULT_IDLE_CAPACITY: Final = int(os.environ.get("TABLEVIEW_IDLE_CAPACITY", "16"))  # per identifier
DEFAULT_VIEWPORT_HEIGHT: Final = 440  # pixels, used until a host reports its real size
CONFIG_DIR: Final = os.environ.get("TABLEVIEW_CONFIG_DIR")  # None -> CWD
