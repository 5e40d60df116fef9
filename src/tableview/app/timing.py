"""Phase timing for bootstrap (and ad-hoc scroll benchmarks).

Usage:
    t = TimingLogger()
    with t.measure("load_config"):
        load_config()
    t.stop()

Phases cannot nest; after ``stop()`` no further phases may begin.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Iterator, List

__all__ = ["TimingEvent", "TimingLogger"]


@dataclass
class TimingEvent:
    name: str
    start: float
    end: float

    @property
    def duration(self) -> float:  # seconds
        return self.end - self.start


class TimingLogger:
    def __init__(self) -> None:
        self._started_at = perf_counter()
        self._events: List[TimingEvent] = []
        self._current_name: str | None = None
        self._current_start: float | None = None
        self._stopped_at: float | None = None

    @property
    def stopped(self) -> bool:
        return self._stopped_at is not None

    def stop(self) -> None:
        if self.stopped:
            return
        if self._current_name is not None:
            self.end()
        self._stopped_at = perf_counter()

    def begin(self, name: str) -> None:
        if self.stopped:
            raise RuntimeError("TimingLogger already stopped")
        if self._current_name is not None:
            raise RuntimeError(
                f"Attempted to begin phase '{name}' while phase "
                f"'{self._current_name}' still active"
            )
        self._current_name = name
        self._current_start = perf_counter()

    def end(self) -> None:
        if self._current_name is None or self._current_start is None:
            raise RuntimeError("No active timing phase to end")
        self._events.append(TimingEvent(self._current_name, self._current_start, perf_counter()))
        self._current_name = None
        self._current_start = None

    class _PhaseCtx:
        def __init__(self, logger: "TimingLogger", name: str) -> None:
            self._logger = logger
            self._name = name

        def __enter__(self) -> "TimingLogger._PhaseCtx":
            self._logger.begin(self._name)
            return self

        def __exit__(self, exc_type, exc, tb) -> None:
            # Elapsed time is recorded even when the phase raised.
            self._logger.end()

    def measure(self, name: str) -> "TimingLogger._PhaseCtx":
        return TimingLogger._PhaseCtx(self, name)

    @property
    def events(self) -> List[TimingEvent]:
        return list(self._events)

    @property
    def total_duration(self) -> float:
        end = self._stopped_at if self._stopped_at is not None else perf_counter()
        return end - self._started_at

    def as_dict(self) -> dict:
        return {
            "total_duration": self.total_duration,
            "events": [
                {"name": e.name, "duration": e.duration} for e in self._events
            ],
        }

    def __iter__(self) -> Iterator[TimingEvent]:
        return iter(self._events)
