import plotly.graph_objects as go
import pytest

from climate_story.selection import OrdinalColors, SeriesVisibilityController
from climate_story.steps import DIMMED, ScrollStepMachine, Step

STEPS = [
    Step(("h",)),
    Step(("h", "a"), {"h": DIMMED}),
    Step(("h", "a", "b"), {"h": DIMMED, "a": DIMMED}),
]


def draw(key, color):
    return [go.Scatter(x=[0, 1], y=[0, 1], line=dict(color=color))]


@pytest.fixture
def machine():
    ctl = SeriesVisibilityController(draw, OrdinalColors())
    return ScrollStepMachine(STEPS, ctl, viewport_height=800)


def test_enter_applies_selection_and_opacity(machine):
    machine.enter(2)
    assert machine.controller.rendered()[0][0] == "h"
    ops = {k: o for k, _, o in machine.controller.rendered()}
    assert ops == {"h": pytest.approx(0.1), "a": pytest.approx(0.1), "b": 1.0}


def test_reentry_is_independent_of_history(machine):
    machine.enter(1)
    direct = machine.controller.rendered()
    machine.enter(2)
    machine.enter(0)
    machine.enter(1)
    assert machine.controller.rendered() == direct


def test_scroll_enters_step_under_trigger_line(machine):
    assert machine.trigger == 400
    assert machine.on_scroll(0) == 0
    assert machine.on_scroll(500) == 1
    assert machine.on_scroll(1300) == 2
    assert machine.on_scroll(500) == 1
    assert machine.controller.keys == ["h", "a"]


def test_same_step_is_not_reentered(machine):
    machine.on_scroll(0)
    machine.on_scroll(100)
    assert machine.entries == 1


def test_last_step_persists_past_the_end(machine):
    machine.on_scroll(1700)
    machine.on_scroll(10_000)
    assert machine.current == 2


def test_resize_keeps_current_step(machine):
    machine.on_scroll(500)
    machine.resize(400)
    assert machine.trigger == 200
    assert machine.current == 1
    machine.resize(400, [(0, 400), (400, 400), (800, 400)])
    assert machine.on_scroll(700) == 2


def test_enter_out_of_range(machine):
    with pytest.raises(IndexError):
        machine.enter(3)
