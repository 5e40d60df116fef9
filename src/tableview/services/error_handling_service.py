"""Global error capture for the table view host.

The recycling mechanism itself never suppresses errors: provider callbacks
and activation handlers propagate to the host's event boundary. In a Qt host
that boundary is the event loop, which reports uncaught exceptions through
``sys.excepthook``. This service installs that hook (and
``threading.excepthook``) so such failures are logged, kept in a short
deduplicated history and announced as ``GUIEvent.UNCAUGHT_EXCEPTION``.
"""

from __future__ import annotations

import logging
import sys
import threading
import traceback
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, List, Optional

from .event_bus import EventBus, GUIEvent

__all__ = [
    "ErrorRecord",
    "DedupEntry",
    "ErrorHandlingService",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorRecord:
    """Structured capture of an uncaught exception."""

    exc_type: type
    exc_value: BaseException
    traceback_str: str
    timestamp: float
    iso_time: str
    thread_name: str

    def summary(self, max_len: int = 120) -> str:
        msg = f"{self.exc_type.__name__}: {self.exc_value}"
        return msg if len(msg) <= max_len else msg[: max_len - 3] + "..."


@dataclass
class DedupEntry:
    """Repeated occurrences of the same exception (type + traceback text)."""

    key: str
    first: ErrorRecord
    count: int
    last_timestamp: float


class ErrorHandlingService:
    """Installable ``sys.excepthook`` / ``threading.excepthook`` manager.

    Usage
    -----
    svc = ErrorHandlingService(event_bus=bus)
    svc.install()
    ... run event loop ...
    svc.uninstall()
    """

    def __init__(
        self,
        *,
        capacity: int = 20,
        logger: logging.Logger | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._errors: Deque[ErrorRecord] = deque(maxlen=max(1, capacity))
        self._installed = False
        self._prev_sys_hook = None
        self._prev_threading_hook = None
        self._logger = logger or log
        self._event_bus = event_bus
        self._dedup: dict[str, DedupEntry] = {}

    # ------------------------------------------------------------------
    # Installation / removal
    # ------------------------------------------------------------------
    def install(self) -> None:
        if self._installed:
            return
        self._prev_sys_hook = sys.excepthook
        sys.excepthook = self._sys_hook
        self._prev_threading_hook = threading.excepthook
        threading.excepthook = self._thread_hook
        self._installed = True

    def uninstall(self) -> None:
        if not self._installed:
            return
        if self._prev_sys_hook is not None:
            sys.excepthook = self._prev_sys_hook
        if self._prev_threading_hook is not None:
            threading.excepthook = self._prev_threading_hook
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def _sys_hook(self, exc_type, exc_value, tb):  # pragma: no cover - delegate
        self.handle_exception(exc_type, exc_value, tb)
        if self._prev_sys_hook:
            self._prev_sys_hook(exc_type, exc_value, tb)

    def _thread_hook(self, args):  # pragma: no cover - delegate
        self.handle_exception(args.exc_type, args.exc_value, args.exc_traceback, thread=args.thread)
        if self._prev_threading_hook:
            self._prev_threading_hook(args)

    # ------------------------------------------------------------------
    # Core logic
    # ------------------------------------------------------------------
    def handle_exception(
        self, exc_type, exc_value, tb, *, thread: Optional[threading.Thread] = None
    ) -> ErrorRecord:
        """Record an exception; also callable directly (tests, host boundaries)."""
        trace_text = "".join(traceback.format_exception(exc_type, exc_value, tb))
        now = datetime.now(timezone.utc)
        record = ErrorRecord(
            exc_type=exc_type,
            exc_value=exc_value,
            traceback_str=trace_text,
            timestamp=now.timestamp(),
            iso_time=now.isoformat(),
            thread_name=(thread.name if thread else threading.current_thread().name),
        )
        self._errors.append(record)
        key = f"{exc_type.__name__}|{hash(trace_text)}"
        entry = self._dedup.get(key)
        if entry is None:
            self._dedup[key] = DedupEntry(key=key, first=record, count=1, last_timestamp=record.timestamp)
        else:
            entry.count += 1
            entry.last_timestamp = record.timestamp
        self._logger.error(
            "Uncaught exception (%s) %s", record.thread_name, record.summary()
        )
        if self._event_bus is not None:
            self._event_bus.publish(
                GUIEvent.UNCAUGHT_EXCEPTION,
                {
                    "type": exc_type.__name__,
                    "message": str(exc_value),
                    "thread": record.thread_name,
                    "iso_time": record.iso_time,
                },
            )
        return record

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def recent_errors(self) -> List[ErrorRecord]:
        return list(self._errors)

    def dedup_entries(self) -> List[DedupEntry]:
        """Aggregated groups in first-seen order."""
        return list(self._dedup.values())

    def clear(self) -> None:
        self._errors.clear()
        self._dedup.clear()
