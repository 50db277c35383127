import math

import pandas as pd
import pytest
from plotly.colors import sample_colorscale

from climate_story.choropleth import ChoroplethUpdater, signed
from climate_story.data import Region
from climate_story.scales import COLORSCALE


@pytest.fixture
def rows():
    data = []
    for i, y in enumerate((2000, 2001, 2002)):
        data.append(("France", y, 0.5 * i))
        data.append(("Germany", y, -0.5 * i if y != 2001 else math.nan))
        data.append(("Narnia", y, 1.0))
    return pd.DataFrame(data, columns=["name", "year", "anomaly"])


@pytest.fixture
def updater(rows):
    regions = [Region("France", {}), Region("Germany", {}), Region("Atlantis", {})]
    return ChoroplethUpdater(regions, rows)


def test_domain_is_fixed_across_years(updater):
    d = updater.domain
    assert d[1] == 0.0
    assert d[0] > d[2]
    for y in (2000, 2001, 2002, 1990):
        updater.update(y)
        assert updater.domain == d


def test_missing_and_nan_get_sentinel(updater):
    fills = updater.update(2001)
    assert fills[1] == "#444"
    assert fills[2] == "#444"
    assert updater.regions[1].anomaly is None
    assert updater.regions[0].anomaly == pytest.approx(0.5)


def test_warm_maps_to_red_end(updater):
    fills = updater.update(2002)
    assert fills[0] == sample_colorscale(COLORSCALE, [0.0])[0]
    assert fills[1] == sample_colorscale(COLORSCALE, [1.0])[0]


def test_year_without_rows_clears_everything(updater):
    updater.update(2002)
    assert updater.update(1800) == ["#444"] * 3
    assert all(r.anomaly is None for r in updater.regions)


def test_names_match_exactly(rows):
    regions = [Region("france", {}), Region("France ", {})]
    upd = ChoroplethUpdater(regions, rows)
    assert upd.update(2000) == ["#444", "#444"]


def test_tooltip_and_history(updater):
    updater.update(2002)
    assert "+1.00 °C vs 1950–1980" in updater.tooltip_html(updater.regions[0])
    assert "No data" in updater.tooltip_html(updater.regions[2])
    assert updater.history("France")["year"].tolist() == [2000, 2001, 2002]
    assert updater.trend_per_decade("France") == pytest.approx(5.0)


def test_coverage_lists_unmatched_names(updater):
    cov = updater.coverage(2000)
    assert cov["matched"] == ["France", "Germany"]
    assert cov["geometry_only"] == ["Atlantis"]
    assert cov["table_only"] == ["Narnia"]


def test_signed():
    assert signed(0.5) == "+0.50"
    assert signed(-0.25) == "-0.25"
    assert signed(math.nan) == "N/A"
    assert signed(None) == "N/A"
