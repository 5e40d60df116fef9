"""Virtualized list widget (PyQt6 host for the recycling table view).

Only the rows inside the viewport (plus overscan) exist as widgets. Each
pooled ``Cell`` carries one ``QLabel`` created when the pool constructs the
cell and deleted when the pool evicts it; scrolling re-positions and
re-texts those labels instead of creating new ones, so a list of 26 rows and
a list of 100 000 rows use the same handful of labels.

Styling hooks:
 - objectName ``virtualizedList`` on the widget, ``virtualizedListRow`` on rows
 - dynamic properties ``density`` (comfortable/compact) and ``variant``
   (plain/striped) on the widget; ``alt`` and ``highlighted`` on rows
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QMouseEvent, QResizeEvent
from PyQt6.QtWidgets import QAbstractScrollArea, QLabel, QSizePolicy, QWidget

from ..app.config_store import TableConfig
from ..data_sources import SequenceDataSource
from ..models import Cell, RowIndex
from ..protocols import ActivationCallback, RowDataProvider, notify_activation
from ..services.event_bus import EventBus
from ..table import TableView

__all__ = ["VirtualizedList"]


class VirtualizedList(QAbstractScrollArea):
    """Scrollable list that recycles row widgets through a ``TableView``.

    Parameters
    ----------
    provider:
        Row data provider (an empty single-section list if omitted).
    parent:
        Optional parent widget.
    density, variant:
        Visual hints exposed as dynamic properties for QSS; override the
        values in ``config`` when given.
    config:
        Row height / overscan / idle cap preferences.
    on_activate:
        Handler (object or callable) notified once per row click.
    event_bus:
        Optional bus for ``ROW_ACTIVATED`` / ``VISIBLE_RANGE_CHANGED`` events.
    """

    rowActivated = pyqtSignal(int, int)  # section, row

    def __init__(
        self,
        provider: RowDataProvider | None = None,
        parent: Optional[QWidget] = None,
        *,
        density: str | None = None,
        variant: str | None = None,
        config: TableConfig | None = None,
        on_activate: ActivationCallback | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("virtualizedList")
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        cfg = TableConfig.from_dict(
            {
                **(config or TableConfig()).to_dict(),
                **({"density": density} if density is not None else {}),
                **({"variant": variant} if variant is not None else {}),
            }
        )
        self.setProperty("density", cfg.density)
        self.setProperty("variant", cfg.variant)
        self._user_handler = on_activate
        self._table = TableView(
            provider or SequenceDataSource([[]]),
            config=cfg,
            viewport_height=0,
            on_activate=self._dispatch_activation,
            event_bus=event_bus,
            on_create=self._attach_view,
            on_evict=self._detach_view,
        )
        self.verticalScrollBar().valueChanged.connect(self._on_scroll)
        # rows are bound by the first resizeEvent, once the viewport has its real size
        self.reload_data()

    # Public API -----------------------------------------------------
    @property
    def table(self) -> TableView:
        return self._table

    def set_provider(self, provider: RowDataProvider) -> None:
        self._table.driver.set_provider(provider)
        self._refresh()

    def set_items(self, items: Iterable[str]) -> None:
        """Replace the rows with a single section of strings."""
        self.set_provider(SequenceDataSource.from_items([str(i) for i in items]))

    def set_activation_handler(self, handler: ActivationCallback | None) -> None:
        self._user_handler = handler

    def reload_data(self) -> None:
        self._table.reload_data()
        self._refresh()

    def scroll_to_row(self, index: RowIndex) -> None:
        offset = self._table.driver.flat_position(index) * self._table.driver.row_height
        self.verticalScrollBar().setValue(offset)

    def row_count(self) -> int:
        """Number of rows currently materialized as widgets."""
        return len(self._table.driver.visible_rows())

    def total_rows(self) -> int:
        return self._table.driver.total_rows()

    def row_widgets(self) -> List[QLabel]:
        bound = self._table.driver.bound_cells()
        return [bound[i].view for i in sorted(bound)]

    def density(self) -> str:
        return self._table.config.density

    def variant(self) -> str:
        return self._table.config.variant

    # Pool hooks -----------------------------------------------------
    def _attach_view(self, cell: Cell) -> None:
        label = QLabel(self.viewport())
        label.setObjectName("virtualizedListRow")
        label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        label.setProperty("reuseIdentifier", cell.reuse_identifier)
        label.hide()
        cell.view = label

    def _detach_view(self, cell: Cell) -> None:
        label = cell.view
        cell.view = None
        if label is not None:
            label.hide()
            label.setParent(None)
            label.deleteLater()

    # Event handling -------------------------------------------------
    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        self._table.driver.set_viewport_height(self.viewport().height())
        self._refresh()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802 - Qt override
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        driver = self._table.driver
        position = int((event.position().y() + driver.offset) // driver.row_height)
        self._table.selection.activate_position(position)
        self._sync_views()
        event.accept()

    def _on_scroll(self, value: int) -> None:
        self._table.driver.scroll_to(value)
        self._sync_views()

    def _dispatch_activation(self, index: RowIndex) -> None:
        self._sync_views()
        self.rowActivated.emit(index.section, index.row)
        notify_activation(self._user_handler, index)

    # Rendering ------------------------------------------------------
    def _refresh(self) -> None:
        driver = self._table.driver
        bar = self.verticalScrollBar()
        bar.setSingleStep(driver.row_height)
        bar.setPageStep(max(driver.row_height, driver.viewport_height))
        bar.setRange(0, driver.max_offset())
        if bar.value() != driver.offset:
            bar.setValue(driver.offset)
        self._sync_views()

    def _sync_views(self) -> None:
        driver = self._table.driver
        width = self.viewport().width()
        for cell in self._table.pool.idle_cells():
            if cell.view is not None:
                cell.view.hide()
        for index, cell in driver.bound_cells().items():
            label = cell.view
            if label is None:
                continue
            top = driver.row_top(index)
            flat = (top + driver.offset) // driver.row_height
            label.setGeometry(0, top, width, driver.row_height)
            label.setText(cell.display_text())
            label.setProperty("alt", bool(flat % 2))
            label.setProperty("highlighted", cell.highlighted)
            label.show()
