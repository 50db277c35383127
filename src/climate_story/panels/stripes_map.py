from __future__ import annotations

import html
import math
from pathlib import Path
from typing import Optional

import plotly.graph_objects as go

from ..choropleth import ChoroplethUpdater, signed
from ..config import BASELINE_LABEL, NO_DATA_COLOR, UNKNOWN_COLOR
from ..controls import ControlRegistry, Slider
from ..data import Region, Sample, future_category, load_country_rows, load_geometry, load_samples
from ..nearest import nearest_sample
from ..playback import PROJECTED
from ..scales import DivergingScale
from ..tooltip import fmt_value
from .base import Panel

SLIDER_ID = "map-year-slider"
HINT = ("Hover a stripe to see the global temperature anomaly for that year. "
        "Click a stripe to update the world map below with country-level anomalies.")

STRIPE_SIZE = (900, 120)
MAP_SIZE = (900, 460)
BACKGROUND = "#111"


def era(s: Sample) -> str:
    return "Projected (ssp245)" if s.category == PROJECTED else "Historical data"


def feature_collection(regions) -> dict:
    """GeoJSON keyed by `properties.name` for plotly's choropleth lookup."""
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"name": r.name}, "geometry": r.geometry}
            for r in regions
        ],
    }


class StripesMapPanel(Panel):
    """Warming stripes over a country anomaly map; clicking a stripe picks the map year."""

    size = STRIPE_SIZE

    def __init__(self, container_id: str, map_container_id: str, stripes_csv: Path, country_csv: Path,
                 geojson: Path, registry: Optional[ControlRegistry] = None):
        super().__init__(container_id, registry)
        self.map_container_id = map_container_id
        self.stripes_csv = stripes_csv
        self.country_csv = country_csv
        self.geojson = geojson
        self.stripes: list[Sample] = []
        self.regions: list[Region] = []
        self.updater: Optional[ChoroplethUpdater] = None
        self.stripe_colors: Optional[DivergingScale] = None
        self.features: dict = {}
        self.selected_year: Optional[int] = None
        self.info_text = HINT
        self.map_title = ""
        self.map_year_label = ""

    def _load(self) -> None:
        stripes = load_samples(self.stripes_csv, "year", {"anomaly": "anomaly"}, category="is_future",
                               category_fn=future_category)
        rows = load_country_rows(self.country_csv)
        self.regions = load_geometry(self.geojson)
        self.stripes = stripes
        self.updater = ChoroplethUpdater(self.regions, rows)

    def _build(self) -> None:
        self.stripe_colors = DivergingScale.from_values([s["anomaly"] for s in self.stripes],
                                                        unknown=UNKNOWN_COLOR)
        self.features = feature_collection(self.regions)
        self.bind(SLIDER_ID, "input", self.set_selected_year)
        slider = self.registry.get(SLIDER_ID)
        if isinstance(slider, Slider) and self.stripes:
            slider.min, slider.max = self.stripes[0].year, self.stripes[-1].year
        if self.stripes:
            self.x_range = (self.stripes[0].year, self.stripes[-1].year)
            hist = [s for s in self.stripes if s.category != PROJECTED]
            default = hist[0].year if hist else self.stripes[len(self.stripes) // 2].year
            self.set_selected_year(default)

    def _info(self, s: Sample, note: str = "") -> str:
        a = s["anomaly"]
        value = fmt_value(a) if a is None or math.isnan(a) else f"{signed(a)} °C"
        return (f"<b>{s.year}</b>: {value} vs {BASELINE_LABEL}<br>"
                f'<span style="color:#aaa">{era(s)}{note}</span>')

    def stripe(self, year: int) -> Optional[Sample]:
        for s in self.stripes:
            if s.year == year:
                return s
        return None

    def stripe_fills(self) -> list[str]:
        return [self.stripe_colors(s["anomaly"]) for s in self.stripes]

    def stripe_hover(self) -> list[str]:
        return [self._info(s) for s in self.stripes]

    def _figure(self) -> go.Figure:
        years = [s.year for s in self.stripes]
        outline = [3 if y == self.selected_year else 0 for y in years]
        fig = go.Figure(go.Bar(
            x=years, y=[1] * len(years), width=1, name="Stripes",
            marker=dict(color=self.stripe_fills(), line=dict(color="white", width=outline)),
            hovertext=self.stripe_hover(), hoverinfo="text",
        ))
        fig.update_layout(
            height=STRIPE_SIZE[1], margin=dict(l=10, r=10, t=10, b=20), bargap=0, showlegend=False,
            hovermode="closest", plot_bgcolor=BACKGROUND, paper_bgcolor=BACKGROUND,
        )
        fig.update_yaxes(visible=False, range=[0, 1], fixedrange=True)
        fig.update_xaxes(dtick=10, color="#ddd", showgrid=False, fixedrange=True)
        future = [s.year for s in self.stripes if s.category == PROJECTED]
        hist = [s.year for s in self.stripes if s.category != PROJECTED]
        if future and hist:
            xb = (max(hist) + min(future)) / 2
            fig.add_vline(x=xb, line_dash="dash", line_color="#f5f5f5", line_width=1, opacity=0.8)
            for text, anchor, shift in (("Historical", "right", -6), ("Projected", "left", 6)):
                fig.add_annotation(x=xb, y=0.85, yref="paper", text=text, showarrow=False, xanchor=anchor,
                                   xshift=shift, font=dict(color="#f5f5f5", size=12))
        return fig

    def map_figure(self) -> Optional[go.Figure]:
        if not self.ready:
            return None
        missing = [r for r in self.regions if r.anomaly is None]
        present = [r for r in self.regions if r.anomaly is not None]
        fig = go.Figure()
        if missing:
            fig.add_trace(go.Choropleth(
                geojson=self.features, featureidkey="properties.name", locations=[r.name for r in missing],
                z=[0] * len(missing), colorscale=[[0, NO_DATA_COLOR], [1, NO_DATA_COLOR]], showscale=False,
                hovertext=[self.updater.tooltip_html(r) for r in missing], hoverinfo="text", name="No data",
                marker_line_color="#555", marker_line_width=0.5,
            ))
        scale = self.updater.scale
        fig.add_trace(go.Choropleth(
            geojson=self.features, featureidkey="properties.name", locations=[r.name for r in present],
            z=[scale.t(r.anomaly) for r in present], zmin=0, zmax=1, colorscale=scale.colorscale,
            colorbar=scale.colorbar(), hovertext=[self.updater.tooltip_html(r) for r in present],
            hoverinfo="text", name="Anomaly", marker_line_color="#555", marker_line_width=0.5,
        ))
        fig.update_geos(projection_type="natural earth", visible=False, showframe=False, bgcolor=BACKGROUND)
        fig.update_layout(
            height=MAP_SIZE[1], margin=dict(l=0, r=0, t=40, b=0), paper_bgcolor=BACKGROUND,
            title=dict(text=html.escape(self.map_year_label), font=dict(color="#eee", size=14)),
        )
        return fig

    def on_select(self, points: list) -> None:
        if points and points[0].get("x") is not None:
            self.click_stripe(int(round(float(points[0]["x"]))))

    def leave_stripe(self) -> str:
        sel = self.stripe(self.selected_year) if self.selected_year is not None else None
        self.info_text = HINT if sel is None else self._info(sel, ", currently displayed on the map.")
        return self.info_text

    def click_stripe(self, year: int) -> None:
        self.set_selected_year(year)

    def set_selected_year(self, year) -> None:
        if not self.stripes or self.updater is None:
            return
        s = nearest_sample(self.stripes, float(year))
        year = s.year
        self.selected_year = year
        self.updater.update(year)
        self.map_title = "Country Anomaly Map"
        self.map_year_label = f"Country-level anomalies in {year} (vs {BASELINE_LABEL} baseline)"
        self.leave_stripe()
        slider = self.registry.get(SLIDER_ID)
        if isinstance(slider, Slider):
            slider.value = year

    def country_summary(self, name: str) -> str:
        """Snapshot for the selected year and the linear trend over the whole record."""
        hist = self.updater.history(name)
        region = next((r for r in self.regions if r.name == name), None)
        current = region.anomaly if region is not None else None
        now = f"Temperature Anomaly: {current:.2f} °C" if current is not None else "no data"
        years = hist["year"].tolist()
        span = f"{years[0]}–{years[-1]}" if years else ""
        return (
            f'<div class="info-title">{html.escape(name)}</div>'
            f"<div><b>{self.selected_year}</b> snapshot: <b>{now}</b></div>"
            f"<div>Trend (linear, {span}): <b>{self.updater.trend_per_decade(name):.2f} °C/decade</b></div>"
        )

    def country_figure(self, name: str) -> go.Figure:
        """Sparkline of one country's anomaly record with the selected year marked."""
        hist = self.updater.history(name)
        fig = go.Figure(go.Scatter(
            x=hist["year"], y=hist["anomaly"], mode="lines", line=dict(color="#e15759", width=1.5),
            hovertemplate="%{x}: %{y:+.2f} °C<extra></extra>",
        ))
        if self.selected_year is not None:
            fig.add_vline(x=self.selected_year, line_dash="dot", line_color="#888", line_width=1)
        fig.update_layout(height=140, margin=dict(l=40, r=10, t=10, b=25), showlegend=False,
                          yaxis_title="°C", plot_bgcolor="white")
        return fig
