from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Optional

import plotly.graph_objects as go

from ..config import PROJECTION_START, SCENARIO_COLORS, SCENARIO_LABELS
from ..controls import CheckboxGroup, ControlRegistry
from ..data import DataLoadError, Sample, load_samples
from ..selection import OrdinalColors, SeriesVisibilityController
from ..tooltip import CrosshairSync, fmt_value
from .base import Panel, base_figure, padded_domain

CHECKBOX_ID = "ssp-options"


def merge_by_year(historical: list[Sample], predictions: list[Sample]) -> list[Sample]:
    """One sample per year carrying "historical" plus every scenario value."""
    rows: dict[int, dict] = {}
    for s in historical:
        rows.setdefault(s.year, {})["historical"] = s.value
    for s in predictions:
        rows.setdefault(s.year, {}).update(s.values)
    return [Sample(y, MappingProxyType(rows[y])) for y in sorted(rows)]


class Co2LinesPanel(Panel):
    """Historical CO2 mass plus the four SSP projections, scenario checkboxes."""

    def __init__(self, container_id: str, historical_csv: Path, predictions_csv: Path,
                 registry: Optional[ControlRegistry] = None):
        super().__init__(container_id, registry)
        self.historical_csv = historical_csv
        self.predictions_csv = predictions_csv
        self.historical: list[Sample] = []
        self.predictions: list[Sample] = []
        self.samples: list[Sample] = []

    def _load(self) -> None:
        self.historical = load_samples(self.historical_csv, "time", {"value": "co2mass"})
        self.predictions = load_samples(
            self.predictions_csv, "time", {k: SCENARIO_LABELS[k] for k in SCENARIO_COLORS}
        )
        self.samples = merge_by_year(self.historical, self.predictions)
        if not self.samples:
            raise DataLoadError(f"no CO2 rows in {self.historical_csv} or {self.predictions_csv}")

    def _build(self) -> None:
        years = [s.year for s in self.samples]
        self.x_range = (min(years), max(years))
        values = [s.value for s in self.historical] + [v for s in self.predictions for v in s.values.values()]
        self.y_range = padded_domain(values)

        group = self.registry.get(CHECKBOX_ID)
        boxes = group if isinstance(group, CheckboxGroup) else None
        if boxes is not None and not boxes.boxes:
            for key in SCENARIO_COLORS:
                boxes.add(key, SCENARIO_LABELS[key], True)
        initial = boxes.checked_values() if boxes is not None else list(SCENARIO_COLORS)
        self.controller = SeriesVisibilityController(
            self._draw_scenario, OrdinalColors(fixed=SCENARIO_COLORS), initial=initial,
            checkboxes=boxes, labels=SCENARIO_LABELS,
        )
        self.controller.redraw()
        self.crosshair = CrosshairSync(self.samples, self._label, active=lambda: self.controller.keys,
                                       viewport=self.size)

    def _draw_scenario(self, key: str, color: str) -> list:
        return [go.Scatter(
            x=[s.year for s in self.predictions], y=[s[key] for s in self.predictions],
            mode="lines+markers", line=dict(color=color, width=2), marker=dict(size=6, color=color),
            hovertemplate=f"{SCENARIO_LABELS[key]}: %{{y:.2f}}<extra></extra>",
        )]

    def _figure(self) -> go.Figure:
        fig = base_figure(x_title="Year", y_title="CO₂ mass (kg)")
        fig.add_trace(go.Scatter(
            x=[s.year for s in self.historical], y=[s.value for s in self.historical], mode="lines",
            name="Historical", line=dict(color="black", width=2),
            hovertemplate="Historical: %{y:.2f}<extra></extra>",
        ))
        for tr in self.controller.traces:
            fig.add_trace(tr)
        fig.add_vline(x=PROJECTION_START, line_dash="dash", line_color="darkblue", line_width=2)
        fig.update_xaxes(range=list(self.x_range))
        fig.update_yaxes(range=list(self.y_range))
        return fig

    def _label(self, s: Sample, active: list) -> str:
        text = f"Year: {s.year}"
        if s.year < PROJECTION_START:
            text += f"<br>Historical: {fmt_value(s.get('historical'))}"
        for key in active:
            v = s.get(key)
            if v is not None:
                text += f"<br>{SCENARIO_LABELS.get(key, key)}: {fmt_value(v)}"
        return text
