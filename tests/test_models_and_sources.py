import pytest

from tableview.data_sources import SequenceDataSource, alphabet
from tableview.models import Cell, CellStyle, RowIndex
from tableview.protocols import RowDataProvider, SectionTitleProvider


def test_row_index_ordering_and_validation():
    assert RowIndex(0, 5) < RowIndex(1, 0) < RowIndex(1, 2)
    assert RowIndex.of(2, 3).as_tuple() == (2, 3)
    assert {RowIndex(0, 1), RowIndex(0, 1)} == {RowIndex(0, 1)}
    with pytest.raises(ValueError):
        RowIndex(-1, 0)


def test_cell_identity_semantics():
    a = Cell(reuse_identifier="Cell", text="same")
    b = Cell(reuse_identifier="Cell", text="same")
    assert a != b
    assert len({a, b}) == 2


def test_cell_display_text_by_style():
    cell = Cell(reuse_identifier="x", style=CellStyle.SUBTITLE, text="Title", detail_text="sub")
    assert cell.display_text() == "Title\nsub"
    cell = Cell(reuse_identifier="x", style=CellStyle.VALUE1, text="Key", detail_text="val")
    assert cell.display_text() == "Key  val"
    cell = Cell(reuse_identifier="x", text="Plain", detail_text="ignored")
    assert cell.display_text() == "Plain"


def test_cell_style_values_usable_as_identifiers():
    assert CellStyle.SUBTITLE == "subtitle"
    assert not CellStyle.DEFAULT.shows_detail


def test_alphabet_source():
    source = alphabet()
    assert isinstance(source, RowDataProvider)
    assert isinstance(source, SectionTitleProvider)
    assert source.number_of_sections() == 1
    assert source.row_count(0) == 26
    assert source.item_at(RowIndex(0, 25)) == "Z"


def test_sequence_source_populates_with_formatters():
    source = SequenceDataSource(
        [[{"name": "Ada", "year": 1815}]],
        formatter=lambda p: p["name"],
        detail=lambda p: str(p["year"]),
        identifier="person",
    )
    cell = Cell(reuse_identifier="person", style=CellStyle.SUBTITLE)
    source.populate_cell(cell, RowIndex(0, 0))
    assert (cell.text, cell.detail_text) == ("Ada", "1815")
    assert source.reuse_identifier_for_row(RowIndex(0, 0)) == "person"
    assert source.populate_calls == 1


def test_sequence_source_copies_input_and_mutates():
    items = ["a", "b"]
    source = SequenceDataSource.from_items(items)
    items.append("c")
    assert source.row_count(0) == 2
    assert source.append_row("z") == RowIndex(0, 2)
    source.replace_section(0, ["only"])
    assert source.row_count(0) == 1
