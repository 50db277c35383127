from __future__ import annotations

from pathlib import Path
from typing import Optional

import plotly.graph_objects as go

from ..controls import ControlRegistry
from ..data import DataLoadError, Sample, load_samples
from ..stats import Trend, linear_trend
from ..tooltip import CrosshairSync, fmt_value
from .base import Panel, base_figure

POINT_SIZE = 7
HIGHLIGHT_SIZE = 12


def co2_of(s: Sample) -> float:
    return s["co2"]


class ScatterPanel(Panel):
    """Yearly CO2 concentration against global temperature anomaly, with OLS fit."""

    def __init__(self, container_id: str, csv: Path, registry: Optional[ControlRegistry] = None):
        super().__init__(container_id, registry)
        self.csv = csv
        self.samples: list[Sample] = []
        self.trend: Optional[Trend] = None
        self.highlighted: Optional[int] = None

    def _load(self) -> None:
        rows = load_samples(self.csv, "year", {"co2": "co2_ppm", "anomaly": "anomaly"})
        self.samples = [s for s in rows if s["co2"] == s["co2"] and s["anomaly"] == s["anomaly"]]
        if not self.samples:
            raise DataLoadError(f"no complete CO2/anomaly rows in {self.csv}")

    def _build(self) -> None:
        xs = [s["co2"] for s in self.samples]
        ys = [s["anomaly"] for s in self.samples]
        self.x_range = (min(xs), max(xs))
        self.trend = linear_trend(xs, ys)
        self.highlighted = None
        self.crosshair = CrosshairSync(self.samples, self._label, key=co2_of, viewport=self.size,
                                       on_sample=self._highlight)

    def _figure(self) -> go.Figure:
        fig = base_figure(x_title="CO₂ (ppm)", y_title="Temperature anomaly (°C)", hovermode="closest")
        fig.add_trace(go.Scatter(
            x=[s["co2"] for s in self.samples], y=[s["anomaly"] for s in self.samples], mode="markers",
            name="Years", customdata=[s.year for s in self.samples],
            marker=dict(color="steelblue", opacity=0.8, size=self.marker_sizes()),
            hovertemplate="Year: %{customdata}<br>CO₂: %{x:.2f} ppm<br>Anomaly: %{y:.2f} °C<extra></extra>",
        ))
        x0, x1 = self.x_range
        fig.add_trace(go.Scatter(
            x=[x0, x1], y=[self.trend(x0), self.trend(x1)], mode="lines", name="Linear fit",
            line=dict(color="crimson", width=2, dash="dash"), hoverinfo="skip",
        ))
        fig.add_annotation(x=1, y=1, xref="paper", yref="paper", xanchor="right", showarrow=False,
                           text=self.trend_label, font=dict(color="crimson", size=12))
        fig.update_yaxes(tickformat="+.1f")
        return fig

    @property
    def trend_label(self) -> str:
        return f"{self.trend.slope * 100:+.2f} °C per 100 ppm"

    def marker_sizes(self) -> list:
        return [HIGHLIGHT_SIZE if s.year == self.highlighted else POINT_SIZE for s in self.samples]

    def _label(self, s: Sample, active: list) -> str:
        return (f"Year: {s.year}<br>CO₂: {fmt_value(s['co2'])} ppm"
                f"<br>Anomaly: {fmt_value(s['anomaly'])} °C")

    def _highlight(self, s: Sample) -> None:
        self.highlighted = s.year

    def pointer_leave(self) -> None:
        super().pointer_leave()
        self.highlighted = None
