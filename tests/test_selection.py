import plotly.graph_objects as go
import pytest

from climate_story.controls import CheckboxGroup, ControlRegistry, SearchInput, Slider
from climate_story.selection import OrdinalColors, SeriesVisibilityController


def draw(key, color):
    return [
        go.Scatter(x=[0, 1], y=[0, 1], mode="lines", line=dict(color=color)),
        go.Scatter(x=[0, 1], y=[0, 1], mode="markers", marker=dict(color=color)),
    ]


def make(**kw):
    return SeriesVisibilityController(draw, OrdinalColors(["red", "blue", "green"]), **kw)


def test_toggle_keeps_insertion_order():
    ctl = make()
    ctl.toggle("A")
    ctl.toggle("B")
    assert [k for k, _, _ in ctl.rendered()] == ["A", "B"]
    ctl.toggle("A")
    assert [k for k, _, _ in ctl.rendered()] == ["B"]
    assert [tr.name for tr in ctl.traces if tr.showlegend] == ["B"]


def test_one_legend_entry_per_series():
    ctl = make(initial=["A"], labels={"A": "Alpha"})
    ctl.redraw()
    assert len(ctl.traces) == 2
    assert [tr.showlegend for tr in ctl.traces] == [True, False]
    assert {tr.legendgroup for tr in ctl.traces} == {"A"}
    assert {tr.name for tr in ctl.traces} == {"Alpha"}


def test_colors_are_stable_per_key():
    ctl = make(initial=["A", "B"])
    ctl.redraw()
    first = dict((k, c) for k, c, _ in ctl.rendered())
    ctl.toggle("A")
    ctl.toggle("A")
    assert dict((k, c) for k, c, _ in ctl.rendered()) == first
    assert first == {"A": "red", "B": "blue"}


def test_redraw_is_idempotent():
    ctl = make(initial=["A", "B"])
    ctl.redraw()
    before = (ctl.rendered(), len(ctl.traces))
    ctl.redraw()
    assert (ctl.rendered(), len(ctl.traces)) == before


def test_set_all_replaces_selection():
    ctl = make(initial=["A"])
    ctl.set_all(["C", "B"])
    assert ctl.keys == ["C", "B"]
    ctl.set_all([])
    assert ctl.rendered() == []
    assert ctl.traces == []


def test_opacity_survives_redraw():
    ctl = make(initial=["A", "B"])
    ctl.redraw()
    ctl.set_opacity("A", 0.1)
    assert all(tr.opacity == pytest.approx(0.1) for tr in ctl.traces if tr.legendgroup == "A")
    ctl.redraw()
    ops = {k: o for k, _, o in ctl.rendered()}
    assert ops == {"A": pytest.approx(0.1), "B": 1.0}


def test_checkboxes_and_controller_stay_in_sync():
    group = CheckboxGroup("opts", [("A", "A"), ("B", "B"), ("C", "C")])
    ctl = make(initial=["A"], checkboxes=group)
    assert group.checked_values() == ["A"]
    group.box("C").set_checked(True)
    assert ctl.keys == ["A", "C"]
    ctl.toggle("A")
    assert group.checked_values() == ["C"]
    group.box("C").set_checked(False)
    assert ctl.keys == []


def test_search_only_hides_rows():
    group = CheckboxGroup("opts", [("FR", "France"), ("DE", "Germany"), ("GE", "Georgia")])
    search = SearchInput("q")
    ctl = make(initial=["FR"], checkboxes=group, search=search)
    search.set_text("GE")
    assert [b.display for b in group.boxes] == ["none", "", ""]
    assert ctl.keys == ["FR"]
    search.set_text("")
    assert all(b.display == "" for b in group.boxes)


def test_detach_stops_listening():
    group = CheckboxGroup("opts", [("A", "A")])
    ctl = make(checkboxes=group)
    ctl.detach()
    group.box("A").set_checked(True)
    assert ctl.keys == []


def test_retoggled_key_goes_to_the_end():
    ctl = make(initial=["A", "B"])
    ctl.toggle("B")
    assert [k for k, _, _ in ctl.rendered()] == ["A"]
    ctl.toggle("B")
    assert [k for k, _, _ in ctl.rendered()] == ["A", "B"]
    ctl.toggle("A")
    ctl.toggle("A")
    assert [k for k, _, _ in ctl.rendered()] == ["B", "A"]


def test_registry_bind_returns_the_control():
    slider = Slider("s", 0, 10)
    reg = ControlRegistry([slider])
    seen = []
    assert reg.bind("s", "input", seen.append) is slider
    slider.set_value(42)
    assert seen == [10]
    assert reg.bind("absent", "input", seen.append) is None
