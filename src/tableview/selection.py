"""Row activation dispatch.

Turns one activation gesture on a displayed row into exactly one handler
call. Each row moves through ``IDLE -> ACTIVATED -> IDLE``: the bound cell
is highlighted while the handler runs and always returned to ``IDLE``
afterwards, including when the handler raises (the exception is not
swallowed). Nothing is remembered as "selected" once dispatch completes.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .errors import RowIndexError
from .layout_driver import RowBindingDriver
from .models import Cell, RowIndex, RowState
from .protocols import ActivationCallback, notify_activation
from .services.event_bus import EventBus, GUIEvent

__all__ = ["SelectionDispatcher"]

log = logging.getLogger(__name__)


class SelectionDispatcher:
    def __init__(
        self,
        driver: RowBindingDriver,
        handler: ActivationCallback | None = None,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self._driver = driver
        self._handler = handler
        self._event_bus = event_bus
        self._states: Dict[RowIndex, RowState] = {}
        self._activation_count = 0

    def set_handler(self, handler: ActivationCallback | None) -> None:
        self._handler = handler

    @property
    def handler(self) -> Optional[ActivationCallback]:
        return self._handler

    @property
    def activation_count(self) -> int:
        return self._activation_count

    def state_for(self, index: RowIndex) -> RowState:
        return self._states.get(index, RowState.IDLE)

    def on_row_activated(self, index: RowIndex) -> bool:
        """Dispatch one activation of ``index``.

        Returns False when the row is already mid-activation (a nested
        gesture re-entering from inside the handler); the handler is not
        called a second time in that case.
        """
        self._driver.check_index(index)
        if self.state_for(index) is RowState.ACTIVATED:
            log.debug("Ignoring re-entrant activation of %s", index)
            return False
        cell = self._driver.cell_at(index)
        self._states[index] = RowState.ACTIVATED
        if cell is not None:
            cell.highlighted = True
        try:
            self._activation_count += 1
            notify_activation(self._handler, index)
        finally:
            self._deselect(index, cell)
        if self._event_bus is not None:
            self._event_bus.publish(GUIEvent.ROW_ACTIVATED, {"index": index.as_tuple()})
        return True

    def activate_position(self, position: int) -> bool:
        """Activate the row at a flat position (host hit-testing helper)."""
        try:
            index = self._driver.index_at_position(position)
        except RowIndexError:
            return False
        return self.on_row_activated(index)

    def _deselect(self, index: RowIndex, original: Optional[Cell]) -> None:
        self._states.pop(index, None)
        # The handler may have rebound the row or scrolled it away.
        for cell in (original, self._driver.cell_at(index)):
            if cell is not None:
                cell.highlighted = False
