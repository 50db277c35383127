from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DATA_DIR = Path("data")
GEOJSON_PATH = Path("world.geojson")

# chart timing / interaction
PLAY_PERIOD_MS = 140
STEP_OFFSET = 0.5
DIMMED_OPACITY = 0.1
TOOLTIP_OFFSET = (10, 10)
TOOLTIP_OPACITY = 0.9
TOOLTIP_SIZE = (180, 90)
CLIP_QUANTILES = (0.02, 0.98)

NO_DATA_COLOR = "#444"
UNKNOWN_COLOR = "#222"
PROJECTION_START = 2015
BASELINE_LABEL = "1950–1980"

SCENARIO_COLORS = {
    "ssp126": "green",
    "ssp245": "blue",
    "ssp370": "orange",
    "ssp585": "red",
}
SCENARIO_LABELS = {
    "ssp126": "SSP1-2.6",
    "ssp245": "SSP2-4.5",
    "ssp370": "SSP3-7.0",
    "ssp585": "SSP5-8.5",
}
# d3.schemeTableau10
CATEGORY_PALETTE = [
    "#4e79a7", "#f28e2c", "#e15759", "#76b7b2", "#59a14f",
    "#edc949", "#af7aa1", "#ff9da7", "#9c755f", "#bab0ab",
]

MARGIN = dict(l=60, r=30, t=40, b=40)
CHART_SIZE = (900, 500)
GUIDE_COLOR = "gray"


@dataclass
class DataPaths:
    co2_historical: Path
    co2_predictions: Path
    scenario_temps: Path
    country_temps: Path
    global_stripes: Path
    country_anomalies: Path
    sea_ice: Path
    co2_vs_temp: Path
    world_geojson: Path

    @classmethod
    def from_root(cls, root: Path = DATA_DIR, geojson: Path = GEOJSON_PATH) -> "DataPaths":
        root = Path(root)
        return cls(
            co2_historical=root / "co2mass_historical_1950_2014_yearly.csv",
            co2_predictions=root / "co2mass_ssp_predictions_yearly.csv",
            scenario_temps=root / "tas_ssp_scenarios_yearly.csv",
            country_temps=root / "country_temperature_yearly.csv",
            global_stripes=root / "global_temp_anomaly_1950_2050.csv",
            country_anomalies=root / "country_temp_anomaly_1950_2050.csv",
            sea_ice=root / "arctic_sea_ice_extent_yearly.csv",
            co2_vs_temp=root / "co2_vs_temperature_yearly.csv",
            world_geojson=Path(geojson),
        )
