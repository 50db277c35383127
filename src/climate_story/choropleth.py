from __future__ import annotations

import html
import math
from typing import Optional, Sequence

import pandas as pd

from .config import BASELINE_LABEL, CLIP_QUANTILES, NO_DATA_COLOR, UNKNOWN_COLOR
from .data import Region
from .scales import DivergingScale
from .stats import linear_trend


def _missing(v) -> bool:
    return v is None or (isinstance(v, float) and math.isnan(v))


def signed(v) -> str:
    if _missing(v):
        return "N/A"
    return f"{'+' if v >= 0 else ''}{v:.2f}"


class ChoroplethUpdater:
    """Recolors region polygons from per-year country anomaly rows.

    Rows are joined on exact region name. The color domain comes from the
    2nd/98th percentile of every anomaly in `rows` and never changes after
    construction.
    """

    def __init__(self, regions: Sequence[Region], rows: pd.DataFrame, no_data_color: str = NO_DATA_COLOR,
                 quantiles: tuple = CLIP_QUANTILES):
        self.regions = list(regions)
        self.rows = rows
        self.no_data_color = no_data_color
        self.scale = DivergingScale.from_values(rows["anomaly"].tolist(), quantiles, unknown=UNKNOWN_COLOR)
        self.by_year = {int(y): g for y, g in rows.groupby("year")}
        self.fills = [no_data_color] * len(self.regions)
        self.year: Optional[int] = None

    @property
    def domain(self) -> tuple:
        return self.scale.domain

    def color(self, v) -> str:
        if _missing(v):
            return self.no_data_color
        return self.scale(v)

    def lookup(self, year: int) -> dict:
        g = self.by_year.get(int(year))
        if g is None:
            return {}
        return dict(zip(g["name"], g["anomaly"]))

    def update(self, year: int) -> list[str]:
        by_name = self.lookup(year)
        for i, r in enumerate(self.regions):
            v = by_name.get(r.name)
            r.anomaly = None if _missing(v) else float(v)
            self.fills[i] = self.color(r.anomaly)
        self.year = int(year)
        return list(self.fills)

    def tooltip_html(self, region: Region) -> str:
        name = html.escape(region.name)
        if region.anomaly is None:
            return f'<b>{name}</b><br><span style="color:#aaa">No data for this year</span>'
        return f"<b>{name}</b><br>{signed(region.anomaly)} °C vs {BASELINE_LABEL}"

    def history(self, name: str) -> pd.DataFrame:
        h = self.rows[self.rows["name"] == name][["year", "anomaly"]]
        return h.sort_values("year").reset_index(drop=True)

    def trend_per_decade(self, name: str) -> float:
        h = self.history(name)
        return linear_trend(h["year"], h["anomaly"]).slope * 10

    def coverage(self, year: int) -> dict:
        table = set(self.lookup(year))
        geo = {r.name for r in self.regions}
        return {
            "matched": sorted(table & geo),
            "geometry_only": sorted(geo - table),
            "table_only": sorted(table - geo),
        }
