from fractions import Fraction

import pytest

from chartscript.errors import ArgumentError
from chartscript.scope import SessionState
from chartscript.session import ChartSession


def _session() -> ChartSession:
    s = ChartSession("scope")
    s.offset(0.2)
    s.bpm(150)
    return s


def test_mark_and_at_inside_chain() -> None:
    s = _session()
    with s.tp_chain(1, 1, 0.1) as group1:
        note1 = s.t(0, 0)
        last_beat = s.b(1)
        assert s.mark("test1") == "test1"
    with s.at("test1", preserve_beat=True) as group2:
        note2 = s.t(5, 5)
        current_beat = s.b(1)
    note3 = s.t(6, 6)
    # die Gruppe des Bookmarks war beim mark offen und bekommt note2 ebenfalls
    assert len(group1) == 3
    assert group2 == [note2]
    assert note1["tip_point"] == note2["tip_point"]
    assert note2.beat == last_beat
    assert note3.beat == current_beat
    assert note3["tip_point"] is None


def test_at_without_preserve_beat_keeps_caller_beat() -> None:
    s = _session()
    s.b(2)
    s.mark("m")
    s.b(5)
    with s.at("m") as g:
        n = s.t(0, 0)
        s.b(1)
    after = s.t(1, 1)
    assert g == [n]
    assert n.beat == 2
    assert after.beat == 7


def test_at_restores_all_state() -> None:
    s = _session()
    s.b(1)
    s.mark("start")
    with s.tp_drop(0, 0, 0.1):
        s.t(0, 0)
        before = s.state.snapshot()
        peak_before = s.tip_point_peak
        with s.at("start"):
            s.offset(3.0)
            s.bpm(60)
            s.b(10)
            with s.tp_chain(0, 0, 0.2):
                s.t(1, 1)
            s.mark("start")
        after = s.state.snapshot()
        assert after == before
        assert s.tip_point_peak > peak_before


def test_at_update_mark() -> None:
    s = _session()
    s.mark("m")
    with s.at("m", update_mark=True):
        s.b(4)
    with s.at("m") as g:
        n = s.t(0, 0)
    assert g == [n]
    assert n.beat == 4
    assert s.current_beat == 0


def test_at_unknown_bookmark() -> None:
    s = _session()
    with pytest.raises(ArgumentError):
        with s.at("missing"):
            pass


def test_mark_overwrites() -> None:
    s = _session()
    s.mark("m")
    s.b(3)
    s.mark("m")
    with s.at("m") as g:
        n = s.t(0, 0)
    assert n.beat == 3
    assert g == [n]


def test_mark_and_drop_identifiers_stay_unique() -> None:
    s = _session()
    with s.tp_drop(0, 0, 0.1) as group1:
        note1 = s.t(0, 0)
        s.b(1)
        s.mark("d")
    with s.at("d"):
        note2 = s.t(0, 0)
        s.b(1)
    with s.tp_chain(0, 0, 0.1):
        note3 = s.t(0, 0)
    assert len(group1) == 4
    assert len({note1["tip_point"], note2["tip_point"], note3["tip_point"]}) == 3


def test_duplicates_inside_at_never_collide() -> None:
    s = _session()
    with s.tp_chain(0, 0, 0.1) as chain:
        s.t(0, 0)
    s.mark("m")
    first = s.duplicate(chain)
    with s.at("m"):
        second = s.duplicate(chain)
    third = s.duplicate(chain)
    ids = {first[0]["tip_point"], second[0]["tip_point"], third[0]["tip_point"]}
    assert len(ids) == 3


def test_bookmark_shares_time_model_reference() -> None:
    s = _session()
    tm = s.state.time_model
    s.mark("m")
    s.offset(5.0)
    with s.at("m"):
        assert s.state.time_model is tm
        s.bpm(60)
    assert len(tm.changes) == 2
    assert tm.changes[1].beat == Fraction(0)


def test_session_state_groups_start_with_events() -> None:
    state = SessionState()
    assert state.groups[0] is state.events
    g = state.open_group()
    state.close_group(g)
    assert state.groups == [state.events]
