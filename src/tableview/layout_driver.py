"""Row binding / layout driver.

Keeps a one-to-one mapping between the rows inside the current scroll window
and the cells bound to them. Whenever the window moves (scroll, resize,
reload) the driver:

1. releases the cells of rows leaving the window back to the pool, then
2. binds a cell to every row entering the window, asking the data provider
   for a reuse identifier and for the cell's content.

Rows that stay inside the window keep their cell untouched. Content is only
written during binding, so a data change becomes visible after
``reload_data`` / ``reload_rows`` or once the row scrolls out and back in.

Geometry is deliberately simple: every row has the same height, rows of all
sections are stacked in (section, row) order, and ``overscan`` extra rows are
bound above and below the viewport.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Optional

from .app import settings
from .cell_pool import CellPoolManager
from .errors import DataSourceError, RowIndexError
from .models import Cell, RowIndex
from .protocols import RowDataProvider, SectionTitleProvider
from .services.event_bus import EventBus, GUIEvent

__all__ = ["RowBindingDriver"]

log = logging.getLogger(__name__)


class RowBindingDriver:
    """Binds pooled cells to the rows of the visible scroll window.

    Parameters
    ----------
    provider:
        The ``RowDataProvider`` answering counts and populating cells.
    pool:
        Cell pool owned by this driver's host view (a fresh one if omitted).
    row_height, viewport_height:
        Pixel geometry; defaults come from ``tableview.app.settings``.
    overscan:
        Rows bound beyond each edge of the viewport.
    auto_size_pool:
        When True the pool's per-identifier idle cap follows the window size,
        so idle cells beyond what one screenful needs are evicted.
    event_bus:
        Optional bus receiving ``VISIBLE_RANGE_CHANGED`` / ``DATA_RELOADED``.
    """

    def __init__(
        self,
        provider: RowDataProvider,
        *,
        pool: CellPoolManager | None = None,
        row_height: int | None = None,
        viewport_height: int | None = None,
        overscan: int | None = None,
        auto_size_pool: bool = True,
        event_bus: EventBus | None = None,
    ) -> None:
        self._provider = provider
        self._pool = pool if pool is not None else CellPoolManager()
        self._row_height = _positive(
            settings.DEFAULT_ROW_HEIGHT if row_height is None else row_height, "row_height"
        )
        self._viewport_height = max(
            0, settings.DEFAULT_VIEWPORT_HEIGHT if viewport_height is None else viewport_height
        )
        self._overscan = max(0, settings.DEFAULT_OVERSCAN if overscan is None else overscan)
        self._auto_size_pool = auto_size_pool
        self._event_bus = event_bus
        self._offset = 0
        self._bound: Dict[RowIndex, Cell] = {}
        self._sync_pool_capacity()

    # ------------------------------------------------------------------
    # Data source delegation (never cached)
    # ------------------------------------------------------------------
    @property
    def provider(self) -> RowDataProvider:
        return self._provider

    def set_provider(self, provider: RowDataProvider) -> List[RowIndex]:
        """Swap the data provider and rebind the window from it."""
        self.release_all()
        self._provider = provider
        self._offset = 0
        return self.reload_data()

    @property
    def pool(self) -> CellPoolManager:
        return self._pool

    def section_count(self) -> int:
        count = self._provider.number_of_sections()
        if count < 0:
            raise DataSourceError("Negative section count", context={"count": count})
        return count

    def row_count(self, section: int) -> int:
        sections = self.section_count()
        if not 0 <= section < sections:
            raise RowIndexError(
                f"Section {section} out of range", context={"section": section, "sections": sections}
            )
        return self._row_count(section)

    def _row_count(self, section: int) -> int:
        count = self._provider.row_count(section)
        if count < 0:
            raise DataSourceError(
                "Negative row count", context={"section": section, "count": count}
            )
        return count

    def total_rows(self) -> int:
        return sum(self._row_count(s) for s in range(self.section_count()))

    def section_title(self, section: int) -> Optional[str]:
        if isinstance(self._provider, SectionTitleProvider):
            return self._provider.title_for_section(section)
        return None

    def check_index(self, index: RowIndex) -> None:
        """Raise ``RowIndexError`` unless ``index`` lies within the reported bounds."""
        sections = self.section_count()
        if index.section >= sections:
            raise RowIndexError(
                f"Section {index.section} out of range",
                context={"index": index.as_tuple(), "sections": sections},
            )
        rows = self._row_count(index.section)
        if index.row >= rows:
            raise RowIndexError(
                f"Row {index.row} out of range for section {index.section}",
                context={"index": index.as_tuple(), "rows": rows},
            )

    # ------------------------------------------------------------------
    # Flat position mapping
    # ------------------------------------------------------------------
    def flat_position(self, index: RowIndex) -> int:
        self.check_index(index)
        return sum(self._row_count(s) for s in range(index.section)) + index.row

    def index_at_position(self, position: int) -> RowIndex:
        if position >= 0:
            remaining = position
            for section in range(self.section_count()):
                rows = self._row_count(section)
                if remaining < rows:
                    return RowIndex(section, remaining)
                remaining -= rows
        raise RowIndexError(f"Position {position} out of range", context={"position": position})

    def _indices_between(self, start: int, end: int) -> List[RowIndex]:
        out: List[RowIndex] = []
        base = 0
        for section in range(self.section_count()):
            if base >= end:
                break
            rows = self._row_count(section)
            lo = max(start - base, 0)
            hi = min(end - base, rows)
            out.extend(RowIndex(section, r) for r in range(lo, hi))
            base += rows
        return out

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def row_height(self) -> int:
        return self._row_height

    @property
    def viewport_height(self) -> int:
        return self._viewport_height

    @property
    def overscan(self) -> int:
        return self._overscan

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def visible_capacity(self) -> int:
        """Upper bound of rows bound at once (partial rows and overscan included)."""
        if self._viewport_height == 0:
            return 0
        return math.ceil(self._viewport_height / self._row_height) + 1 + 2 * self._overscan

    def content_height(self) -> int:
        return self.total_rows() * self._row_height

    def max_offset(self, total: int | None = None) -> int:
        rows = self.total_rows() if total is None else total
        return max(0, rows * self._row_height - self._viewport_height)

    def window(self, total: int | None = None) -> tuple[int, int]:
        """Half-open flat range ``[start, end)`` of rows to bind at the current offset."""
        rows = self.total_rows() if total is None else total
        if rows == 0 or self._viewport_height == 0:
            return (0, 0)
        first = self._offset // self._row_height
        last = (self._offset + self._viewport_height - 1) // self._row_height
        start = max(0, first - self._overscan)
        end = min(rows, last + self._overscan + 1)
        return (start, max(start, end))

    def set_viewport_height(self, height: int) -> List[RowIndex]:
        self._viewport_height = max(0, height)
        self._sync_pool_capacity()
        return self.layout()

    def set_row_height(self, height: int) -> List[RowIndex]:
        self._row_height = _positive(height, "row_height")
        self._sync_pool_capacity()
        return self.layout()

    def set_overscan(self, rows: int) -> List[RowIndex]:
        self._overscan = max(0, rows)
        self._sync_pool_capacity()
        return self.layout()

    def _sync_pool_capacity(self) -> None:
        if self._auto_size_pool:
            self._pool.set_idle_capacity(self.visible_capacity)

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------
    def scroll_to(self, offset: int) -> int:
        """Move the viewport to ``offset`` (clamped); returns the applied offset."""
        self._offset = max(0, min(int(offset), self.max_offset()))
        self.layout()
        return self._offset

    def scroll_by(self, delta: int) -> int:
        return self.scroll_to(self._offset + delta)

    def scroll_to_row(self, index: RowIndex) -> int:
        return self.scroll_to(self.flat_position(index) * self._row_height)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------
    def layout(self) -> List[RowIndex]:
        """Reconcile bound cells with the current window; returns the bound rows in order."""
        total = self.total_rows()
        self._offset = min(self._offset, self.max_offset(total))
        start, end = self.window(total)
        wanted = self._indices_between(start, end)
        wanted_set = set(wanted)
        before = list(self._bound)
        for index in before:
            if index not in wanted_set:
                self._pool.release(self._bound.pop(index))
        for index in wanted:
            if index not in self._bound:
                self._bind(index)
        self._bound = {index: self._bound[index] for index in wanted}
        if wanted != before:
            log.debug("Window %d-%d of %d rows (%d bound)", start, end, total, len(wanted))
            self._publish(
                GUIEvent.VISIBLE_RANGE_CHANGED,
                {
                    "first": wanted[0].as_tuple() if wanted else None,
                    "last": wanted[-1].as_tuple() if wanted else None,
                    "count": len(wanted),
                    "offset": self._offset,
                },
            )
        return wanted

    def cell_for_row(self, index: RowIndex) -> Cell:
        """Acquire, populate and bind a cell for ``index``.

        If the row is already bound its current cell is released first, so a
        row is never bound to two cells. The returned content reflects the
        data source at call time only.
        """
        self.check_index(index)
        previous = self._bound.pop(index, None)
        if previous is not None:
            self._pool.release(previous)
        return self._bind(index)

    def _bind(self, index: RowIndex) -> Cell:
        cell = self._pool.acquire_cell(self._provider.reuse_identifier_for_row(index))
        try:
            self._provider.populate_cell(cell, index)
        except Exception:
            self._pool.release(cell)
            raise
        cell.bind(index)
        self._bound[index] = cell
        return cell

    def release(self, cell: Cell) -> None:
        """Stop tracking ``cell``'s row and return the cell to the pool."""
        index = cell.row_index
        if index is not None and self._bound.get(index) is cell:
            del self._bound[index]
        self._pool.release(cell)

    def release_all(self) -> None:
        for cell in list(self._bound.values()):
            self._pool.release(cell)
        self._bound.clear()

    def reload_data(self) -> List[RowIndex]:
        """Drop every binding and rebind the window from the provider."""
        self.release_all()
        rows = self.layout()
        self._publish(GUIEvent.DATA_RELOADED, {"bound": len(rows)})
        log.info("Reloaded data (%d rows bound)", len(rows))
        return rows

    def reload_rows(self, indices: Iterable[RowIndex]) -> List[Cell]:
        """Re-populate the given rows if they are currently bound."""
        refreshed = [self.cell_for_row(i) for i in indices if i in self._bound]
        if refreshed:
            ordered = sorted(self._bound)
            self._bound = {i: self._bound[i] for i in ordered}
        return refreshed

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def visible_rows(self) -> List[RowIndex]:
        return sorted(self._bound)

    def cell_at(self, index: RowIndex) -> Optional[Cell]:
        return self._bound.get(index)

    def index_for_cell(self, cell: Cell) -> Optional[RowIndex]:
        index = cell.row_index
        if index is not None and self._bound.get(index) is cell:
            return index
        return None

    def bound_cells(self) -> Dict[RowIndex, Cell]:
        return dict(self._bound)

    def row_top(self, index: RowIndex) -> int:
        """Viewport-relative y coordinate of ``index``'s top edge."""
        return self.flat_position(index) * self._row_height - self._offset

    def _publish(self, event: GUIEvent, payload: dict) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event, payload)


def _positive(value: int, name: str) -> int:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return int(value)
