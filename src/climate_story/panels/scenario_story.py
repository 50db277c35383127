from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import plotly.graph_objects as go

from ..config import SCENARIO_COLORS, SCENARIO_LABELS
from ..controls import ControlRegistry
from ..data import DataLoadError, Sample, load_samples
from ..selection import OrdinalColors, SeriesVisibilityController
from ..steps import DIMMED, ScrollStepMachine, Step
from ..tooltip import CrosshairSync, compose_label
from .base import Panel, base_figure

SERIES = ["historical", *SCENARIO_COLORS]
LABELS = {"historical": "Historical", **SCENARIO_LABELS}
COLORS = {"historical": "black", **SCENARIO_COLORS}

STORY_STEPS = [
    Step(("historical",), text="Observed warming since 1950."),
    Step(("historical", "ssp126"),
         text="Strong mitigation keeps warming lowest."),
    Step(("historical", "ssp126", "ssp245"), {"ssp126": DIMMED},
         text="Middle-of-the-road emissions."),
    Step(("historical", "ssp126", "ssp245", "ssp370"), {"ssp126": DIMMED, "ssp245": DIMMED},
         text="Regional rivalry, high emissions."),
    Step(("historical", "ssp126", "ssp245", "ssp370", "ssp585"),
         {"ssp126": DIMMED, "ssp245": DIMMED, "ssp370": DIMMED},
         text="Fossil-fuelled development."),
    Step(tuple(SERIES), text="All pathways side by side."),
]


class ScenarioStoryPanel(Panel):
    """Temperature anomaly scenarios revealed step by step while scrolling."""

    def __init__(self, container_id: str, csv: Path, registry: Optional[ControlRegistry] = None,
                 steps: Sequence[Step] = STORY_STEPS, viewport_height: float = 800.0,
                 regions: Optional[Sequence[tuple]] = None):
        super().__init__(container_id, registry)
        self.csv = csv
        self.steps = list(steps)
        self.viewport_height = viewport_height
        self.regions = regions
        self.samples: list[Sample] = []
        self.machine: Optional[ScrollStepMachine] = None

    def _load(self) -> None:
        cols = {"historical": "historical", **{k: SCENARIO_LABELS[k] for k in SCENARIO_COLORS}}
        self.samples = load_samples(self.csv, "year", cols)
        if not self.samples:
            raise DataLoadError(f"no scenario rows in {self.csv}")

    def _build(self) -> None:
        years = [s.year for s in self.samples]
        vals = [v for s in self.samples for v in s.values.values() if v == v]
        self.x_range = (min(years), max(years))
        lo, hi = (min(vals), max(vals)) if vals else (0.0, 1.0)
        pad = (hi - lo) * 0.05 or 0.5
        self.y_range = (lo - pad, hi + pad)
        self.controller = SeriesVisibilityController(self._draw_series, OrdinalColors(fixed=COLORS), labels=LABELS)
        self.machine = ScrollStepMachine(self.steps, self.controller, viewport_height=self.viewport_height,
                                         regions=self.regions)
        self.machine.enter(0)
        self.crosshair = CrosshairSync(
            self.samples, lambda s, keys: compose_label(s, keys, LABELS),
            active=lambda: self.controller.keys, viewport=self.size,
        )

    def _draw_series(self, key: str, color: str) -> list:
        return [go.Scatter(
            x=[s.year for s in self.samples], y=[s[key] for s in self.samples], mode="lines",
            line=dict(color=color, width=3 if key == "historical" else 2),
            hovertemplate=f"{LABELS[key]}: %{{y:+.2f}} °C<extra></extra>",
        )]

    def _figure(self) -> go.Figure:
        fig = base_figure(x_title="Year", y_title="Temperature anomaly (°C)")
        for tr in self.controller.traces:
            fig.add_trace(tr)
        fig.add_hline(y=0, line_dash="dot", line_color="#999", line_width=1)
        fig.update_xaxes(range=list(self.x_range))
        fig.update_yaxes(range=list(self.y_range), tickformat="+.1f")
        return fig

    def enter_step(self, index: int) -> Optional[Step]:
        if self.machine is None:
            return None
        return self.machine.enter(index)

    def on_scroll(self, scroll_top: float) -> Optional[int]:
        if self.machine is None:
            return None
        self.page_scroll()
        return self.machine.on_scroll(scroll_top)

    def resize(self, viewport_height: float, regions: Optional[Sequence[tuple]] = None) -> None:
        self.viewport_height = viewport_height
        if self.machine is not None:
            self.machine.resize(viewport_height, regions)

    @property
    def step_text(self) -> str:
        if self.machine is None or self.machine.current is None:
            return ""
        return self.steps[self.machine.current].text
