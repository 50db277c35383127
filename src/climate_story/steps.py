from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from .config import DIMMED_OPACITY, STEP_OFFSET
from .selection import SeriesVisibilityController

FULL = "full"
DIMMED = "dimmed"


@dataclass(frozen=True)
class Step:
    selection: tuple
    opacity: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    def opacity_for(self, key: str) -> str:
        return self.opacity.get(key, FULL)


class ScrollStepMachine:
    """Narrative steps entered as their text block crosses the trigger line.

    The trigger line sits at `offset` x viewport height. Entering a step runs
    its whole entry action (selection + opacities + redraw) whatever the
    previous step or scroll direction was.
    """

    def __init__(self, steps: Sequence[Step], controller: SeriesVisibilityController,
                 offset: float = STEP_OFFSET, dimmed_opacity: float = DIMMED_OPACITY,
                 viewport_height: float = 800.0, regions: Optional[Sequence[tuple]] = None):
        if not steps:
            raise ValueError("at least one step is required")
        self.steps = list(steps)
        self.controller = controller
        self.offset = offset
        self.dimmed_opacity = dimmed_opacity
        self.viewport_height = float(viewport_height)
        # (top, height) of each step's text block in document coordinates
        self.regions = list(regions) if regions is not None else [
            (i * self.viewport_height, self.viewport_height) for i in range(len(self.steps))
        ]
        self.trigger = self.offset * self.viewport_height
        self.current: Optional[int] = None
        self.entries = 0

    def enter(self, index: int) -> Step:
        if index < 0 or index >= len(self.steps):
            raise IndexError(f"step {index} out of range 0..{len(self.steps) - 1}")
        step = self.steps[index]
        for key in step.selection:
            self.controller.opacity[key] = 1.0 if step.opacity_for(key) == FULL else self.dimmed_opacity
        self.controller.set_all(step.selection)
        self.current = index
        self.entries += 1
        return step

    def step_at(self, scroll_top: float) -> Optional[int]:
        line = scroll_top + self.trigger
        for i, (top, height) in enumerate(self.regions):
            if top <= line < top + height:
                return i
        return None

    def on_scroll(self, scroll_top: float) -> Optional[int]:
        i = self.step_at(scroll_top)
        if i is not None and i != self.current:
            self.enter(i)
        return self.current

    def resize(self, viewport_height: float, regions: Optional[Sequence[tuple]] = None) -> None:
        self.viewport_height = float(viewport_height)
        self.trigger = self.offset * self.viewport_height
        if regions is not None:
            self.regions = list(regions)
