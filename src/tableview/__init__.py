"""tableview public API.

A virtualized list renderer: rows addressed as ``RowIndex(section, row)``
are displayed through a bounded pool of reusable cells keyed by reuse
identifier. The core (pool, layout driver, selection dispatcher) is pure
Python; ``tableview.components`` holds the PyQt6 host widget and is not
imported here so headless use never pulls in Qt.
"""

from __future__ import annotations

from .cell_pool import CellPoolManager, CellRegistration, PoolStats
from .data_sources import SequenceDataSource, alphabet
from .errors import CellReuseError, DataSourceError, RowIndexError, TableViewError
from .layout_driver import RowBindingDriver
from .models import (
    DEFAULT_REUSE_IDENTIFIER,
    Accessory,
    Cell,
    CellStyle,
    RowIndex,
    RowState,
)
from .protocols import (
    RowActivationHandler,
    RowDataProvider,
    SectionTitleProvider,
    notify_activation,
)
from .selection import SelectionDispatcher
from .services.event_bus import Event, EventBus, GUIEvent
from .table import TableView

__version__ = "0.1.0"

__all__ = [
    "CellPoolManager",
    "CellRegistration",
    "PoolStats",
    "SequenceDataSource",
    "alphabet",
    "CellReuseError",
    "DataSourceError",
    "RowIndexError",
    "TableViewError",
    "RowBindingDriver",
    "DEFAULT_REUSE_IDENTIFIER",
    "Accessory",
    "Cell",
    "CellStyle",
    "RowIndex",
    "RowState",
    "RowActivationHandler",
    "RowDataProvider",
    "SectionTitleProvider",
    "notify_activation",
    "SelectionDispatcher",
    "Event",
    "EventBus",
    "GUIEvent",
    "TableView",
]
