"""Lightweight models shared by the pool, the layout driver and the host widget."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

__all__ = [
    "RowIndex",
    "CellStyle",
    "Accessory",
    "RowState",
    "Cell",
    "DEFAULT_REUSE_IDENTIFIER",
]

DEFAULT_REUSE_IDENTIFIER = "Cell"


@dataclass(frozen=True, order=True, slots=True)
class RowIndex:
    """Address of a logical row: ``(section, row)``.

    Ordering follows sections first, then rows, which matches the order rows
    are laid out on screen.
    """

    section: int
    row: int

    def __post_init__(self) -> None:
        if self.section < 0 or self.row < 0:
            raise ValueError(f"RowIndex components must be non-negative: {self!r}")

    @classmethod
    def of(cls, section: int, row: int) -> "RowIndex":
        return cls(section, row)

    def as_tuple(self) -> tuple[int, int]:
        return (self.section, self.row)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"({self.section}, {self.row})"


class CellStyle(str, Enum):  # str subclass so values double as reuse identifiers
    DEFAULT = "default"
    SUBTITLE = "subtitle"
    VALUE1 = "value1"
    VALUE2 = "value2"

    @property
    def shows_detail(self) -> bool:
        return self is not CellStyle.DEFAULT


class Accessory(str, Enum):
    NONE = "none"
    DISCLOSURE = "disclosure"
    CHECKMARK = "checkmark"


class RowState(str, Enum):
    IDLE = "idle"
    ACTIVATED = "activated"


@dataclass(eq=False)
class Cell:
    """Reusable visual unit.

    ``reuse_identifier`` and ``style`` are fixed at construction. The content
    payload (``text``, ``detail_text``, ``image``, ``accessory``) is owned by
    whoever populates the cell and is overwritten on every reuse; the pool
    never resets it. ``view`` is an opaque handle a host toolkit may attach
    (e.g. a QLabel).

    Cells compare by identity so two cells with equal content are still
    distinct pool members.
    """

    reuse_identifier: str
    style: CellStyle = CellStyle.DEFAULT
    text: str = ""
    detail_text: Optional[str] = None
    image: Any = None
    accessory: Accessory = Accessory.NONE
    highlighted: bool = False
    row_index: Optional[RowIndex] = None
    view: Any = None
    reuse_count: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_bound(self) -> bool:
        return self.row_index is not None

    def bind(self, index: RowIndex) -> None:
        self.row_index = index

    def unbind(self) -> None:
        self.row_index = None

    def prepare_for_reuse(self) -> None:
        """Clear transient visual state before the cell is handed out again."""
        self.highlighted = False
        self.reuse_count += 1

    def display_text(self) -> str:
        if self.style.shows_detail and self.detail_text:
            sep = "\n" if self.style is CellStyle.SUBTITLE else "  "
            return f"{self.text}{sep}{self.detail_text}"
        return self.text
