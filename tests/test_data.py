import math

import pytest

from climate_story.data import (
    DataLoadError,
    load_country_rows,
    load_geometry,
    load_samples,
    parse_flag,
    read_table,
)
from climate_story.stats import linear_trend


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_read_table_coerces_garbage_to_nan(tmp_path):
    p = write(tmp_path / "t.csv", "year,value\n2000,1.5\n2001,abc\n")
    df = read_table(p, {"year": "year", "v": "value"})
    assert df["v"].iloc[0] == 1.5
    assert math.isnan(df["v"].iloc[1])


def test_missing_column_raises(tmp_path):
    p = write(tmp_path / "t.csv", "year,other\n2000,1\n")
    with pytest.raises(DataLoadError, match="Missing columns"):
        read_table(p, {"year": "year", "v": "value"})


def test_missing_file_raises(tmp_path):
    with pytest.raises(DataLoadError):
        load_samples(tmp_path / "nope.csv", "year", {"value": "value"})


def test_empty_file_raises(tmp_path):
    p = write(tmp_path / "empty.csv", "")
    with pytest.raises(DataLoadError):
        read_table(p, {"year": "year"})


def test_load_samples_sorted_with_categories(tmp_path):
    p = write(tmp_path / "s.csv", "year,extent,is_future\n2002,5,true\n2000,7,false\n,1,false\n2001,6,False\n")
    out = load_samples(p, "year", {"value": "extent"}, category="is_future", category_fn=parse_flag)
    assert [s.year for s in out] == [2000, 2001, 2002]
    assert [s.category for s in out] == [False, False, True]
    assert out[0].value == 7.0


def test_samples_are_immutable(tmp_path):
    p = write(tmp_path / "s.csv", "year,v\n2000,1\n")
    s = load_samples(p, "year", {"value": "v"})[0]
    with pytest.raises(TypeError):
        s.values["value"] = 2.0


def test_parse_flag():
    assert parse_flag("TRUE") is True
    assert parse_flag("false") is False
    assert parse_flag(True) is True
    assert parse_flag(math.nan) is False
    assert parse_flag(None) is False


def test_load_geometry(stripes_files):
    regions = load_geometry(stripes_files[2])
    assert [r.name for r in regions] == ["France", "Germany", "Atlantis"]
    assert regions[0].geometry["type"] == "Polygon"
    assert regions[0].anomaly is None


def test_bad_geometry_raises(tmp_path):
    with pytest.raises(DataLoadError):
        load_geometry(write(tmp_path / "bad.geojson", "{not json"))
    with pytest.raises(DataLoadError):
        load_geometry(write(tmp_path / "list.geojson", "[]"))


def test_country_rows_keep_blank_anomaly(stripes_files):
    df = load_country_rows(stripes_files[1])
    assert list(df.columns) == ["name", "year", "anomaly"]
    g = df[(df["name"] == "Germany") & (df["year"] == 1952)]
    assert math.isnan(g["anomaly"].iloc[0])


def test_linear_trend():
    t = linear_trend([0, 1, 2, 3], [1, 3, 5, math.nan])
    assert t.slope == pytest.approx(2.0)
    assert t(10) == pytest.approx(21.0)
    one = linear_trend([5], [2.5])
    assert (one.slope, one.intercept) == (0.0, 2.5)
    assert linear_trend([], []).intercept == 0.0
