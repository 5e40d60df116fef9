"""Ready-made ``RowDataProvider`` backed by in-memory sequences."""

from __future__ import annotations

import string
from typing import Any, Callable, List, Optional, Sequence

from .models import DEFAULT_REUSE_IDENTIFIER, Cell, RowIndex

__all__ = ["SequenceDataSource", "alphabet"]

Formatter = Callable[[Any], str]


class SequenceDataSource:
    """Serve rows from one list per section.

    The lists are copied on construction; mutate through ``replace_section``
    / ``append_row`` so counts stay consistent. Content is read at populate
    time, so cells show whatever the lists hold when they are (re)bound.
    """

    def __init__(
        self,
        sections: Sequence[Sequence[Any]],
        *,
        titles: Sequence[str] | None = None,
        identifier: str = DEFAULT_REUSE_IDENTIFIER,
        formatter: Formatter = str,
        detail: Formatter | None = None,
    ) -> None:
        self._sections: List[List[Any]] = [list(s) for s in sections]
        self._titles = list(titles) if titles is not None else None
        self._identifier = identifier
        self._formatter = formatter
        self._detail = detail
        self.populate_calls = 0

    @classmethod
    def from_items(cls, items: Sequence[Any], **kwargs: Any) -> "SequenceDataSource":
        return cls([items], **kwargs)

    # RowDataProvider --------------------------------------------------
    def number_of_sections(self) -> int:
        return len(self._sections)

    def row_count(self, section: int) -> int:
        return len(self._sections[section])

    def reuse_identifier_for_row(self, index: RowIndex) -> str:
        return self._identifier

    def populate_cell(self, cell: Cell, index: RowIndex) -> None:
        item = self.item_at(index)
        self.populate_calls += 1
        cell.text = self._formatter(item)
        cell.detail_text = self._detail(item) if self._detail is not None else None

    # SectionTitleProvider ---------------------------------------------
    def title_for_section(self, section: int) -> Optional[str]:
        if self._titles is None or section >= len(self._titles):
            return None
        return self._titles[section]

    # Data access / mutation -------------------------------------------
    def item_at(self, index: RowIndex) -> Any:
        return self._sections[index.section][index.row]

    def replace_section(self, section: int, items: Sequence[Any]) -> None:
        self._sections[section] = list(items)

    def set_item(self, index: RowIndex, item: Any) -> None:
        self._sections[index.section][index.row] = item

    def append_row(self, item: Any, *, section: int = 0) -> RowIndex:
        rows = self._sections[section]
        rows.append(item)
        return RowIndex(section, len(rows) - 1)


def alphabet(**kwargs: Any) -> SequenceDataSource:
    """The classic 26-row example: one section holding ``"A"`` .. ``"Z"``."""
    return SequenceDataSource.from_items(list(string.ascii_uppercase), **kwargs)
