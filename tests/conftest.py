import json

import pytest

from climate_story.controls import Button, CheckboxGroup, ControlRegistry, SearchInput, Slider
from climate_story.data import Sample


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def square(lon, lat, size=5):
    return {
        "type": "Polygon",
        "coordinates": [[[lon, lat], [lon + size, lat], [lon + size, lat + size], [lon, lat + size], [lon, lat]]],
    }


@pytest.fixture
def years():
    return [Sample(y, {"value": float(i)}) for i, y in enumerate((2000, 2005, 2010))]


@pytest.fixture
def registry():
    return ControlRegistry([
        CheckboxGroup("ssp-options"),
        CheckboxGroup("country-options"),
        SearchInput("country-search"),
        Button("select-all", "Select all"),
        Button("clear-all", "Clear"),
        Button("play-btn", "Play"),
        Button("reset-btn", "Reset"),
        Slider("year-slider"),
        Slider("map-year-slider"),
    ])


@pytest.fixture
def co2_files(tmp_path):
    hist = write(tmp_path / "co2_hist.csv", "time,co2mass\n" + "".join(
        f"{y},{300 + (y - 2010) * 2}\n" for y in range(2010, 2015)))
    pred = write(tmp_path / "co2_pred.csv", "time,SSP1-2.6,SSP2-4.5,SSP3-7.0,SSP5-8.5\n" + "".join(
        f"{y},{310 + i},{312 + i * 2},{314 + i * 3},{316 + i * 4}\n" for i, y in enumerate(range(2015, 2021))))
    return hist, pred


@pytest.fixture
def scenario_csv(tmp_path):
    rows = "".join(
        f"{y},{0.1 * i if y <= 2014 else ''},{0.5 + 0.01 * i},{0.6 + 0.02 * i},{0.7 + 0.03 * i},{0.8 + 0.04 * i}\n"
        for i, y in enumerate(range(2010, 2021))
    )
    return write(tmp_path / "scen.csv", "year,historical,SSP1-2.6,SSP2-4.5,SSP3-7.0,SSP5-8.5\n" + rows)


@pytest.fixture
def country_csv(tmp_path):
    lines = ["country,year,anom"]
    for c, base in (("France", 0.1), ("Germany", 0.2), ("United_States", 0.3), ("Georgia", 0.4)):
        for i, y in enumerate(range(2000, 2005)):
            lines.append(f"{c},{y},{base + 0.1 * i:.2f}")
    return write(tmp_path / "countries.csv", "\n".join(lines) + "\n")


@pytest.fixture
def scatter_csv(tmp_path):
    rows = "".join(f"{2000 + i},{300 + 10 * i},{0.1 * i}\n" for i in range(6))
    return write(tmp_path / "scatter.csv", "year,co2_ppm,anomaly\n" + rows)


@pytest.fixture
def stripes_files(tmp_path):
    glob = write(tmp_path / "global.csv", "year,anomaly,is_future\n" + "".join(
        f"{y},{-0.3 + 0.2 * i:.2f},{'true' if y >= 1954 else 'false'}\n" for i, y in enumerate(range(1950, 1956))))
    rows = ["CountryName,year,anomaly"]
    for i, y in enumerate(range(1950, 1956)):
        rows.append(f"France,{y},{-0.5 + 0.2 * i:.2f}")
        rows.append(f"Germany,{y},{0.1 * i:.2f}" if y != 1952 else f"Germany,{y},")
    country = write(tmp_path / "country.csv", "\n".join(rows) + "\n")
    geo = {"type": "FeatureCollection", "features": [
        {"type": "Feature", "properties": {"name": n}, "geometry": square(lon, 40)}
        for n, lon in (("France", 0), ("Germany", 10), ("Atlantis", -30))
    ]}
    geojson = write(tmp_path / "world.geojson", json.dumps(geo))
    return glob, country, geojson


@pytest.fixture
def sea_ice_csv(tmp_path):
    rows = "".join(f"{y},{7.0 - 0.5 * i},{'True' if y >= 2003 else 'False'}\n"
                   for i, y in enumerate(range(2000, 2005)))
    return write(tmp_path / "ice.csv", "year,extent,is_future\n" + rows)
