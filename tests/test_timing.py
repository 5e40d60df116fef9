import pytest

from tableview.app.timing import TimingLogger


def test_phases_recorded_in_order():
    t = TimingLogger()
    with t.measure("a"):
        pass
    t.begin("b")
    t.end()
    t.stop()
    assert [e.name for e in t] == ["a", "b"]
    assert all(e.duration >= 0 for e in t.events)
    assert t.as_dict()["events"][0]["name"] == "a"


def test_nested_phase_rejected():
    t = TimingLogger()
    t.begin("outer")
    with pytest.raises(RuntimeError):
        t.begin("inner")


def test_stop_closes_open_phase_and_blocks_new_ones():
    t = TimingLogger()
    t.begin("open")
    t.stop()
    assert t.stopped
    assert [e.name for e in t] == ["open"]
    with pytest.raises(RuntimeError):
        t.begin("late")


def test_end_without_begin():
    with pytest.raises(RuntimeError):
        TimingLogger().end()


def test_phase_recorded_when_body_raises():
    t = TimingLogger()
    with pytest.raises(ValueError):
        with t.measure("failing"):
            raise ValueError("x")
    assert [e.name for e in t] == ["failing"]
