from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Optional

import plotly.graph_objects as go

from ..controls import CheckboxGroup, ControlRegistry, SearchInput
from ..data import DataLoadError, Sample, read_table
from ..selection import OrdinalColors, SeriesVisibilityController
from ..tooltip import CrosshairSync, compose_label
from .base import Panel, base_figure

CHECKBOX_ID = "country-options"
SEARCH_ID = "country-search"
SELECT_ALL_ID = "select-all"
CLEAR_ID = "clear-all"


class CountryLinesPanel(Panel):
    """Per-country anomaly lines with a searchable checkbox list."""

    def __init__(self, container_id: str, csv: Path, registry: Optional[ControlRegistry] = None,
                 measure: str = "anom", initial: Iterable[str] = (), viewport: Optional[tuple] = None):
        super().__init__(container_id, registry)
        self.csv = csv
        self.measure = measure
        self.initial = list(initial)
        self.viewport = viewport
        self.countries: list[str] = []
        self.series: dict[str, list[tuple]] = {}
        self.samples: list[Sample] = []

    def _load(self) -> None:
        df = read_table(self.csv, {"year": "year", "value": self.measure}, text_fields={"country": "country"})
        df = df.dropna(subset=["year"])
        if df.empty:
            raise DataLoadError(f"no country rows in {self.csv}")
        df["year"] = df["year"].astype(int)
        df["country"] = df["country"].str.replace("_", " ", regex=False).str.strip()
        df = df.sort_values(["country", "year"])
        self.countries = sorted(df["country"].unique().tolist())
        self.series = {c: list(zip(g["year"], g["value"])) for c, g in df.groupby("country")}
        wide = df.pivot_table(index="year", columns="country", values="value", aggfunc="last")
        self.samples = [
            Sample(int(y), MappingProxyType({c: float(v) for c, v in row.items() if v == v}))
            for y, row in wide.sort_index().iterrows()
        ]
        if not self.samples:
            raise DataLoadError(f"no country values in {self.csv}")

    def _build(self) -> None:
        years = [s.year for s in self.samples]
        vals = [v for pts in self.series.values() for _, v in pts if v == v]
        self.x_range = (min(years), max(years))
        lo, hi = (min(vals), max(vals)) if vals else (0.0, 1.0)
        pad = (hi - lo) * 0.05 or 0.5
        self.y_range = (lo - pad, hi + pad)

        group = self.registry.get(CHECKBOX_ID)
        boxes = group if isinstance(group, CheckboxGroup) else None
        search = self.registry.get(SEARCH_ID)
        search = search if isinstance(search, SearchInput) else None
        initial = [c for c in self.initial if c in self.series] or self.countries[:3]
        if boxes is not None and not boxes.boxes:
            for c in self.countries:
                boxes.add(c, c, c in initial)
        self.controller = SeriesVisibilityController(
            self._draw_country, OrdinalColors(), initial=initial, checkboxes=boxes, search=search,
        )
        self.controller.redraw()
        self.bind(SELECT_ALL_ID, "click", self.select_all)
        self.bind(CLEAR_ID, "click", self.clear)
        self.crosshair = CrosshairSync(self.samples, compose_label, active=lambda: self.controller.keys,
                                       viewport=self.viewport or self.size)

    def _draw_country(self, key: str, color: str) -> list:
        pts = self.series.get(key, [])
        return [go.Scatter(
            x=[a for a, _ in pts], y=[b for _, b in pts], mode="lines", line=dict(color=color, width=1.5),
            hovertemplate=f"{key}: %{{y:.2f}}<extra></extra>",
        )]

    def _figure(self) -> go.Figure:
        fig = base_figure(x_title="Year", y_title="Temperature anomaly (°C)")
        for tr in self.controller.traces:
            fig.add_trace(tr)
        fig.update_xaxes(range=list(self.x_range))
        fig.update_yaxes(range=list(self.y_range))
        return fig

    def select_all(self) -> None:
        # only rows left visible by the search filter
        if self.controller is None:
            return
        boxes = self.controller.checkboxes
        keys = [b.value for b in boxes.boxes if b.display != "none"] if boxes is not None else self.countries
        self.controller.set_all(keys)

    def clear(self) -> None:
        if self.controller is not None:
            self.controller.set_all([])
