from __future__ import annotations

from pathlib import Path
from typing import Optional

import plotly.graph_objects as go

from ..config import PLAY_PERIOD_MS
from ..controls import Button, ControlRegistry, Slider
from ..data import DataLoadError, Sample, future_category, load_samples
from ..playback import IntervalScheduler, PlaybackAnimator, PlaybackFrame
from .base import Panel, base_figure

PLAY_ID = "play-btn"
RESET_ID = "reset-btn"
SLIDER_ID = "year-slider"


class SeaIcePanel(Panel):
    """Arctic sea-ice extent drawn cumulatively year by year, with play/reset controls."""

    def __init__(self, container_id: str, csv: Path, registry: Optional[ControlRegistry] = None,
                 scheduler: Optional[IntervalScheduler] = None, period_ms: float = PLAY_PERIOD_MS):
        super().__init__(container_id, registry)
        self.csv = csv
        self.scheduler = scheduler if scheduler is not None else IntervalScheduler()
        self.period_ms = period_ms
        self.samples: list[Sample] = []
        self.animator: Optional[PlaybackAnimator] = None
        self.current: Optional[PlaybackFrame] = None

    def _load(self) -> None:
        self.samples = [
            s for s in load_samples(self.csv, "year", {"value": "extent"}, category="is_future",
                                    category_fn=future_category)
            if s.value == s.value
        ]
        if not self.samples:
            raise DataLoadError(f"{self.csv}: no sea-ice rows")

    def teardown(self) -> None:
        if self.animator is not None:
            self.animator.pause()
            self.animator = None
        super().teardown()

    def _build(self) -> None:
        years = [s.year for s in self.samples]
        vals = [s.value for s in self.samples]
        self.x_range = (min(years), max(years))
        self.y_range = (0.0, max(vals) * 1.1)
        button = self.registry.get(PLAY_ID)
        self.animator = PlaybackAnimator(
            self.samples, self.scheduler, on_frame=self._draw_frame, period_ms=self.period_ms,
            button=button if isinstance(button, Button) else None,
        )
        self.bind(PLAY_ID, "click", self.animator.toggle)
        self.bind(RESET_ID, "click", self.animator.reset)
        self.bind(SLIDER_ID, "input", self.animator.seek)
        slider = self.registry.get(SLIDER_ID)
        if isinstance(slider, Slider):
            slider.min, slider.max = years[0], years[-1]
            slider.value = years[0]

    def _draw_frame(self, fr: PlaybackFrame) -> None:
        self.current = fr
        slider = self.registry.get(SLIDER_ID)
        if isinstance(slider, Slider):
            slider.value = fr.sample.year

    def _figure(self) -> go.Figure:
        fr = self.current if self.current is not None else self.animator.frame()
        fig = base_figure(x_title="Year", y_title="Extent (million km²)", hovermode="closest")
        fig.add_trace(go.Scatter(
            x=[s.year for s in fr.historical], y=[s.value for s in fr.historical], mode="lines",
            name="Historical", fill="tozeroy", line=dict(color="steelblue", width=2),
            fillcolor="rgba(70,130,180,0.3)", hovertemplate="%{x}: %{y:.2f}<extra></extra>",
        ))
        # the projected run starts at the last observed point so the two lines join
        anchor = fr.historical[-1:] if fr.projected else []
        run = anchor + fr.projected
        fig.add_trace(go.Scatter(
            x=[s.year for s in run], y=[s.value for s in run], mode="lines", name="Projected",
            fill="tozeroy", line=dict(color="tomato", width=2, dash="dash"), fillcolor="rgba(255,99,71,0.2)",
            opacity=fr.projected_opacity, hovertemplate="%{x}: %{y:.2f}<extra></extra>",
        ))
        s = fr.sample
        fig.add_trace(go.Scatter(
            x=[s.year], y=[s.value], mode="markers+text", name="Current", text=[f"{s.year}: {s.value:.2f}"],
            textposition="top right", marker=dict(color="black", size=10), hoverinfo="skip",
        ))
        fig.update_xaxes(range=[self.x_range[0] - 0.5, self.x_range[1] + 0.5])
        fig.update_yaxes(range=list(self.y_range))
        return fig

    def on_select(self, points: list) -> None:
        if points and points[0].get("x") is not None:
            self.click(float(points[0]["x"]))

    def click(self, value: float) -> Optional[int]:
        if self.animator is None:
            return None
        return self.animator.seek(value)

    @property
    def projected_opacity(self) -> float:
        if self.animator is None:
            return 0.0
        return self.animator.frame().projected_opacity
