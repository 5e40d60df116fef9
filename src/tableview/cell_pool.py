"""Per-identifier pools of reusable cells.

The pool manager is what keeps a table with ten rows and a table with a
million rows on the same working set: cells scrolled off screen are released
into an idle pool keyed by their reuse identifier and handed out again for
the next row that asks for that identifier.

Rules:
 - A cell is either idle in exactly one pool or handed out (bound); never both.
 - ``acquire_cell(identifier)`` only ever returns a cell constructed for that
   identifier.
 - Content is NOT reset on reuse; callers overwrite it before display.
 - Every cell handed out for an identifier has its current registered shape.
 - Each identifier's idle pool is capped. Releasing beyond the cap evicts the
   oldest idle cell (LIFO reuse, FIFO eviction).

The manager is single-threaded by contract: it performs no locking and must
only be touched from the thread that drives its host view.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Set

from .app import settings
from .errors import CellReuseError
from .models import Cell, CellStyle

__all__ = ["CellPoolManager", "CellRegistration", "PoolStats"]

log = logging.getLogger(__name__)

CellFactory = Callable[[str], Cell]
CellHook = Callable[[Cell], None]


@dataclass(frozen=True)
class CellRegistration:
    identifier: str
    style: CellStyle = CellStyle.DEFAULT
    factory: Optional[CellFactory] = None

    def construct(self) -> Cell:
        if self.factory is not None:
            cell = self.factory(self.identifier)
            if cell.reuse_identifier != self.identifier:
                raise CellReuseError(
                    "Cell factory returned a cell tagged with a different identifier",
                    context={"expected": self.identifier, "got": cell.reuse_identifier},
                )
            return cell
        return Cell(reuse_identifier=self.identifier, style=self.style)


@dataclass
class PoolStats:
    created: int = 0
    reused: int = 0
    released: int = 0
    evicted: int = 0
    peak_bound: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "created": self.created,
            "reused": self.reused,
            "released": self.released,
            "evicted": self.evicted,
            "peak_bound": self.peak_bound,
        }


class CellPoolManager:
    """Hands out recycled or freshly constructed cells per reuse identifier.

    Parameters
    ----------
    idle_capacity:
        Maximum idle cells retained per identifier (``None`` -> settings default).
    on_create:
        Hook called once for every newly constructed cell (hosts attach views here).
    on_evict:
        Hook called for every cell dropped from an idle pool (hosts free views here).
    """

    def __init__(
        self,
        *,
        idle_capacity: int | None = None,
        on_create: CellHook | None = None,
        on_evict: CellHook | None = None,
    ) -> None:
        cap = settings.DEFAULT_IDLE_CAPACITY if idle_capacity is None else idle_capacity
        self._idle_capacity = max(0, cap)
        self._on_create = on_create
        self._on_evict = on_evict
        self._registrations: Dict[str, CellRegistration] = {}
        self._idle: Dict[str, Deque[Cell]] = {}
        self._idle_members: Set[Cell] = set()
        self._bound: Set[Cell] = set()
        self._shapes: Dict[Cell, CellRegistration] = {}
        self._stats = PoolStats()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(
        self,
        identifier: str,
        *,
        style: CellStyle = CellStyle.DEFAULT,
        factory: CellFactory | None = None,
    ) -> CellRegistration:
        """Declare the cell shape used for ``identifier``.

        Re-registering with a different shape evicts idle cells of the old
        shape, and old-shape cells still bound are evicted when released, so
        they can never be handed out under the new one.
        """
        reg = CellRegistration(identifier=identifier, style=style, factory=factory)
        previous = self._registrations.get(identifier)
        self._registrations[identifier] = reg
        if previous is not None and previous != reg:
            dropped = self._evict_all(identifier)
            log.debug("Re-registered %r; evicted %d idle cells", identifier, dropped)
        return reg

    def registration(self, identifier: str) -> Optional[CellRegistration]:
        return self._registrations.get(identifier)

    def _current_shape(self, identifier: str) -> CellRegistration:
        return self._registrations.get(identifier) or CellRegistration(identifier)

    def identifiers(self) -> List[str]:
        keys = set(self._registrations) | set(self._idle)
        return sorted(keys)

    # ------------------------------------------------------------------
    # Acquire / release
    # ------------------------------------------------------------------
    def acquire_cell(self, identifier: str) -> Cell:
        """Return an idle cell for ``identifier`` or construct a new one."""
        bucket = self._idle.get(identifier)
        if bucket:
            cell = bucket.pop()
            self._idle_members.discard(cell)
            cell.prepare_for_reuse()
            self._stats.reused += 1
        else:
            reg = self._current_shape(identifier)
            cell = reg.construct()
            self._shapes[cell] = reg
            self._stats.created += 1
            log.debug("Constructed cell #%d for %r", self._stats.created, identifier)
            if self._on_create is not None:
                self._on_create(cell)
        self._bound.add(cell)
        if len(self._bound) > self._stats.peak_bound:
            self._stats.peak_bound = len(self._bound)
        return cell

    def release(self, cell: Cell) -> None:
        """Return a handed-out cell to the idle pool of its identifier."""
        if cell in self._idle_members:
            raise CellReuseError(
                "Cell released twice", context={"identifier": cell.reuse_identifier}
            )
        if cell not in self._bound:
            raise CellReuseError(
                "Cell was not handed out by this pool",
                context={"identifier": cell.reuse_identifier},
            )
        self._bound.discard(cell)
        cell.unbind()
        self._stats.released += 1
        if self._shapes.get(cell) != self._current_shape(cell.reuse_identifier):
            log.debug("Dropping cell of a superseded %r shape", cell.reuse_identifier)
            self._evict(cell)
            return
        bucket = self._idle.setdefault(cell.reuse_identifier, deque())
        bucket.append(cell)
        self._idle_members.add(cell)
        self._trim(cell.reuse_identifier, self._idle_capacity)

    # ------------------------------------------------------------------
    # Eviction
    # ------------------------------------------------------------------
    @property
    def idle_capacity(self) -> int:
        return self._idle_capacity

    def set_idle_capacity(self, capacity: int) -> int:
        """Change the per-identifier idle cap; returns the number of cells evicted."""
        self._idle_capacity = max(0, capacity)
        return sum(self._trim(key, self._idle_capacity) for key in list(self._idle))

    def clear(self) -> int:
        """Evict every idle cell. Bound cells are untouched."""
        return sum(self._evict_all(key) for key in list(self._idle))

    def _trim(self, identifier: str, limit: int) -> int:
        bucket = self._idle.get(identifier)
        if not bucket:
            return 0
        dropped = 0
        while len(bucket) > limit:
            self._evict(bucket.popleft())
            dropped += 1
        if not bucket:
            self._idle.pop(identifier, None)
        return dropped

    def _evict_all(self, identifier: str) -> int:
        return self._trim(identifier, 0)

    def _evict(self, cell: Cell) -> None:
        self._idle_members.discard(cell)
        self._shapes.pop(cell, None)
        self._stats.evicted += 1
        if self._on_evict is not None:
            self._on_evict(cell)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def idle_count(self, identifier: str | None = None) -> int:
        if identifier is not None:
            return len(self._idle.get(identifier, ()))
        return len(self._idle_members)

    def idle_cells(self, identifier: str | None = None) -> List[Cell]:
        if identifier is not None:
            return list(self._idle.get(identifier, ()))
        out: List[Cell] = []
        for bucket in self._idle.values():
            out.extend(bucket)
        return out

    @property
    def bound_count(self) -> int:
        return len(self._bound)

    @property
    def live_count(self) -> int:
        return len(self._bound) + len(self._idle_members)

    def is_idle(self, cell: Cell) -> bool:
        return cell in self._idle_members

    def is_bound(self, cell: Cell) -> bool:
        return cell in self._bound

    def stats(self) -> PoolStats:
        s = self._stats
        return PoolStats(s.created, s.reused, s.released, s.evicted, s.peak_bound)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return (
            f"CellPoolManager(bound={self.bound_count}, idle={self.idle_count()}, "
            f"cap={self._idle_capacity})"
        )
