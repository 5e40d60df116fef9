import pytest

from tableview.data_sources import SequenceDataSource, alphabet
from tableview.errors import DataSourceError, RowIndexError
from tableview.models import CellStyle, RowIndex
from tableview.protocols import RowDataProvider
from tableview.services.event_bus import EventBus, GUIEvent

from tests.factories import RecordingProvider, make_driver, numbered


def test_row_count_delegates_to_provider():
    driver = make_driver(alphabet())
    assert driver.section_count() == 1
    assert driver.row_count(0) == 26
    assert driver.total_rows() == 26


def test_row_count_is_not_cached():
    provider = RecordingProvider(numbered(3))
    driver = make_driver(provider)
    driver.row_count(0)
    driver.row_count(0)
    assert provider.count_calls == 2
    provider.sections[0].append("late")
    assert driver.row_count(0) == 4


def test_empty_source_binds_nothing():
    provider = RecordingProvider([])
    driver = make_driver(provider)
    assert driver.row_count(0) == 0
    assert driver.layout() == []
    assert driver.reload_data() == []
    assert provider.populated == []
    assert driver.pool.live_count == 0


def test_no_sections_binds_nothing():
    provider = RecordingProvider(sections=[])
    driver = make_driver(provider)
    assert driver.section_count() == 0
    assert driver.layout() == []


def test_cell_for_row_content_matches_source():
    driver = make_driver(alphabet())
    assert driver.cell_for_row(RowIndex(0, 0)).text == "A"
    assert driver.cell_for_row(RowIndex(0, 25)).text == "Z"


def test_cell_for_row_binds_index():
    driver = make_driver(alphabet())
    cell = driver.cell_for_row(RowIndex(0, 3))
    assert cell.row_index == RowIndex(0, 3)
    assert driver.cell_at(RowIndex(0, 3)) is cell
    assert driver.index_for_cell(cell) == RowIndex(0, 3)


def test_cell_for_row_twice_keeps_one_cell_per_row():
    driver = make_driver(alphabet())
    first = driver.cell_for_row(RowIndex(0, 1))
    second = driver.cell_for_row(RowIndex(0, 1))
    # released then re-acquired from the pool
    assert second is first
    assert driver.pool.bound_count == 1
    assert list(driver.bound_cells()) == [RowIndex(0, 1)]


@pytest.mark.parametrize("index", [RowIndex(0, 26), RowIndex(1, 0)])
def test_out_of_range_index_fails_fast(index):
    driver = make_driver(alphabet())
    with pytest.raises(RowIndexError):
        driver.cell_for_row(index)
    with pytest.raises(IndexError):
        driver.flat_position(index)
    assert driver.pool.live_count == 0


def test_row_count_for_missing_section_raises():
    driver = make_driver(alphabet())
    with pytest.raises(RowIndexError) as exc:
        driver.row_count(3)
    assert exc.value.context["sections"] == 1


def test_negative_count_is_rejected():
    class Broken(RecordingProvider):
        def row_count(self, section):
            return -1

    driver = make_driver(Broken(["x"]))
    with pytest.raises(DataSourceError):
        driver.total_rows()


def test_initial_window_with_overscan():
    driver = make_driver(alphabet())
    rows = driver.layout()
    # viewport shows rows 0-4; one overscan row below, none above the top
    assert rows == [RowIndex(0, i) for i in range(6)]
    assert [driver.cell_at(i).text for i in rows] == list("ABCDEF")


def test_scroll_releases_before_binding():
    provider = RecordingProvider(numbered(100))
    driver = make_driver(provider)
    driver.layout()
    assert driver.pool.stats().created == 6
    assert driver.scroll_to(440) == 440
    assert driver.visible_rows() == [RowIndex(0, i) for i in range(9, 16)]
    stats = driver.pool.stats()
    # 6 cells released, then reused for 6 of the 7 entering rows
    assert stats.released == 6
    assert stats.reused == 6
    assert stats.created == 7
    assert driver.pool.bound_count == 7
    assert driver.pool.idle_count() == 0


def test_rows_staying_in_window_are_not_repopulated():
    provider = RecordingProvider(numbered(100))
    driver = make_driver(provider)
    driver.layout()
    provider.populated.clear()
    driver.scroll_to(44)
    # window moved by one row: only the entering row is populated
    assert provider.populated == [RowIndex(0, 6)]


def test_scroll_is_clamped():
    driver = make_driver(alphabet())
    driver.layout()
    assert driver.scroll_to(10**9) == 26 * 44 - 220
    assert driver.visible_rows()[-1] == RowIndex(0, 25)
    assert driver.scroll_to(-50) == 0
    assert driver.scroll_by(44) == 44


def test_scroll_to_row():
    driver = make_driver(alphabet())
    assert driver.scroll_to_row(RowIndex(0, 10)) == 440
    assert driver.cell_at(RowIndex(0, 10)).text == "K"
    assert driver.row_top(RowIndex(0, 10)) == 0


def test_data_change_not_pushed_until_reload():
    source = alphabet()
    driver = make_driver(source)
    driver.layout()
    cell = driver.cell_at(RowIndex(0, 0))
    source.set_item(RowIndex(0, 0), "Alpha")
    assert cell.text == "A"
    driver.reload_data()
    assert driver.cell_at(RowIndex(0, 0)).text == "Alpha"


def test_reload_rows_refreshes_only_bound_rows():
    source = alphabet()
    driver = make_driver(source)
    driver.layout()
    source.set_item(RowIndex(0, 2), "c")
    source.set_item(RowIndex(0, 20), "u")
    refreshed = driver.reload_rows([RowIndex(0, 2), RowIndex(0, 20)])
    assert [c.text for c in refreshed] == ["c"]
    assert driver.visible_rows() == [RowIndex(0, i) for i in range(6)]


def test_reload_picks_up_shrunk_source():
    source = SequenceDataSource.from_items(numbered(50))
    driver = make_driver(source)
    driver.layout()
    driver.scroll_to(1500)
    source.replace_section(0, numbered(3))
    rows = driver.reload_data()
    assert driver.offset == 0
    assert rows == [RowIndex(0, 0), RowIndex(0, 1), RowIndex(0, 2)]


def test_multi_section_flat_mapping():
    provider = RecordingProvider(sections=[["a", "b"], ["c"], [], ["d", "e"]])
    driver = make_driver(provider)
    assert driver.total_rows() == 5
    assert driver.flat_position(RowIndex(3, 1)) == 4
    assert driver.index_at_position(2) == RowIndex(1, 0)
    assert driver.index_at_position(3) == RowIndex(3, 0)
    with pytest.raises(RowIndexError):
        driver.index_at_position(5)
    rows = driver.layout()
    assert [driver.cell_at(i).text for i in rows] == ["a", "b", "c", "d", "e"]


def test_section_titles():
    source = SequenceDataSource([["a"], ["b"]], titles=["Vowels"])
    driver = make_driver(source)
    assert driver.section_title(0) == "Vowels"
    assert driver.section_title(1) is None
    assert make_driver(RecordingProvider(["x"])).section_title(0) is None


def test_identifier_per_row_is_honoured():
    provider = RecordingProvider(
        numbered(10), identifier_for=lambda i: "even" if i.row % 2 == 0 else "odd"
    )
    driver = make_driver(provider)
    for index in driver.layout():
        expected = "even" if index.row % 2 == 0 else "odd"
        assert driver.cell_at(index).reuse_identifier == expected


def test_provider_must_supply_reuse_identifier():
    class Minimal:
        def number_of_sections(self):
            return 1

        def row_count(self, section):
            return 2

        def populate_cell(self, cell, index):
            cell.text = "x"

    provider = Minimal()
    assert not isinstance(provider, RowDataProvider)
    driver = make_driver(provider)
    with pytest.raises(AttributeError):
        driver.layout()
    assert driver.pool.live_count == 0


def test_populate_error_propagates_and_pool_stays_consistent():
    class Failing(RecordingProvider):
        def populate_cell(self, cell, index):
            if index.row == 3:
                raise ValueError("bad row")
            super().populate_cell(cell, index)

    driver = make_driver(Failing(numbered(20)))
    with pytest.raises(ValueError, match="bad row"):
        driver.layout()
    assert driver.pool.bound_count == len(driver.bound_cells())
    assert all(c.row_index == i for i, c in driver.bound_cells().items())


def test_release_stops_tracking():
    driver = make_driver(alphabet())
    driver.layout()
    cell = driver.cell_at(RowIndex(0, 0))
    driver.release(cell)
    assert driver.cell_at(RowIndex(0, 0)) is None
    assert driver.pool.is_idle(cell)


def test_pool_capacity_follows_window():
    driver = make_driver(alphabet())
    assert driver.visible_capacity == 8
    assert driver.pool.idle_capacity == 8
    driver.set_viewport_height(440)
    assert driver.pool.idle_capacity == driver.visible_capacity == 13
    driver.set_viewport_height(0)
    assert driver.visible_rows() == []


def test_range_events_only_on_change():
    bus = EventBus()
    events = []
    bus.subscribe(GUIEvent.VISIBLE_RANGE_CHANGED, lambda e: events.append(e.payload))
    driver = make_driver(alphabet(), event_bus=bus)
    driver.layout()
    driver.scroll_to(1)
    assert len(events) == 2
    driver.scroll_to(2)
    assert len(events) == 2
    assert events[0]["first"] == (0, 0)
    assert events[0]["count"] == 6


def test_reload_publishes_event():
    bus = EventBus()
    seen = []
    bus.subscribe(GUIEvent.DATA_RELOADED, lambda e: seen.append(e.payload["bound"]))
    driver = make_driver(alphabet(), event_bus=bus)
    driver.reload_data()
    assert seen == [6]


def test_invalid_row_height():
    with pytest.raises(ValueError):
        make_driver(alphabet(), row_height=0)


def test_reregistered_shape_reaches_rows_bound_after_scroll():
    driver = make_driver(alphabet())
    driver.layout()
    driver.pool.register("Cell", style=CellStyle.VALUE1)
    driver.scroll_to(440)
    assert {c.style for c in driver.bound_cells().values()} == {CellStyle.VALUE1}
    assert driver.pool.stats().evicted == 6
    driver.scroll_to(0)
    assert {c.style for c in driver.bound_cells().values()} == {CellStyle.VALUE1}
