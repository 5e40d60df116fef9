"""Headless table view: one pool, one layout driver, one selection dispatcher.

``TableView`` is the unit of ownership. Every host view (a Qt widget, a test,
a terminal renderer) creates its own instance, so pools are never shared
between unrelated lists and are dropped together with their host.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .app.config_store import TableConfig
from .cell_pool import CellHook, CellPoolManager
from .layout_driver import RowBindingDriver
from .models import Cell, CellStyle, RowIndex
from .protocols import ActivationCallback, RowDataProvider
from .selection import SelectionDispatcher
from .services.event_bus import EventBus

__all__ = ["TableView"]


class TableView:
    def __init__(
        self,
        provider: RowDataProvider,
        *,
        config: TableConfig | None = None,
        viewport_height: int | None = None,
        on_activate: ActivationCallback | None = None,
        event_bus: EventBus | None = None,
        on_create: CellHook | None = None,
        on_evict: CellHook | None = None,
    ) -> None:
        self.config = config or TableConfig()
        self.pool = CellPoolManager(
            idle_capacity=self.config.idle_capacity, on_create=on_create, on_evict=on_evict
        )
        self.driver = RowBindingDriver(
            provider,
            pool=self.pool,
            row_height=self.config.row_height,
            viewport_height=viewport_height,
            overscan=self.config.overscan,
            auto_size_pool=self.config.idle_capacity is None,
            event_bus=event_bus,
        )
        self.selection = SelectionDispatcher(self.driver, on_activate, event_bus=event_bus)

    # Convenience pass-throughs ----------------------------------------
    def register(
        self,
        identifier: str,
        *,
        style: CellStyle = CellStyle.DEFAULT,
        factory: Callable[[str], Cell] | None = None,
    ) -> None:
        self.pool.register(identifier, style=style, factory=factory)

    def reload_data(self) -> List[RowIndex]:
        return self.driver.reload_data()

    def scroll_to(self, offset: int) -> int:
        return self.driver.scroll_to(offset)

    def activate(self, index: RowIndex) -> bool:
        return self.selection.on_row_activated(index)

    def visible_texts(self) -> List[str]:
        bound = self.driver.bound_cells()
        return [bound[i].text for i in sorted(bound)]

    def snapshot(self) -> Dict[str, Any]:
        """Diagnostic summary (window, pool counters)."""
        rows = self.driver.visible_rows()
        first: Optional[RowIndex] = rows[0] if rows else None
        return {
            "offset": self.driver.offset,
            "bound": len(rows),
            "first": first.as_tuple() if first else None,
            "idle": self.pool.idle_count(),
            "idle_capacity": self.pool.idle_capacity,
            "pool": self.pool.stats().as_dict(),
        }
