"""Capability interfaces a host registers with the table view.

Two small protocols replace the single multi-role "delegate" object found in
dynamic UI frameworks:

- ``RowDataProvider`` answers structure questions (section / row counts),
  picks a reuse identifier per row and fills a cell's content.
- ``RowActivationHandler`` receives one notification per activation gesture.

Both are ``runtime_checkable`` so hosts may pass plain objects; the
selection dispatcher additionally accepts any callable taking a ``RowIndex``.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Union, runtime_checkable

from .models import Cell, RowIndex

__all__ = [
    "RowDataProvider",
    "SectionTitleProvider",
    "RowActivationHandler",
    "ActivationCallback",
    "notify_activation",
]


@runtime_checkable
class RowDataProvider(Protocol):
    def number_of_sections(self) -> int: ...  # pragma: no cover - structural

    def row_count(self, section: int) -> int: ...  # pragma: no cover - structural

    def reuse_identifier_for_row(self, index: RowIndex) -> str: ...  # pragma: no cover

    def populate_cell(self, cell: Cell, index: RowIndex) -> None: ...  # pragma: no cover


@runtime_checkable
class SectionTitleProvider(Protocol):
    def title_for_section(self, section: int) -> Optional[str]: ...  # pragma: no cover


@runtime_checkable
class RowActivationHandler(Protocol):
    def row_activated(self, index: RowIndex) -> None: ...  # pragma: no cover - structural


ActivationCallback = Union[RowActivationHandler, Callable[[RowIndex], None]]


def notify_activation(handler: ActivationCallback | None, index: RowIndex) -> None:
    """Deliver ``index`` to a handler object or a plain callable (None is a no-op)."""
    if handler is None:
        return
    if isinstance(handler, RowActivationHandler):
        handler.row_activated(index)
    else:
        handler(index)
