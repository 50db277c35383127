from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

import numpy as np
import pandas as pd


class DataLoadError(ValueError):
    """Raised when a panel input file is unreachable or malformed."""


@dataclass(frozen=True)
class Sample:
    year: int
    values: Mapping[str, float] = field(default_factory=dict)
    category: Optional[str] = None

    def __getitem__(self, key: str) -> float:
        return self.values[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    @property
    def value(self) -> float:
        # single-measurement series keep their number under "value"
        return self.values["value"]


@dataclass
class Region:
    name: str
    geometry: dict
    properties: dict = field(default_factory=dict)
    anomaly: Optional[float] = None


def parse_flag(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() == "true"
    if v is None or (isinstance(v, float) and np.isnan(v)):
        return False
    return bool(v)


def read_table(path: Path, fields: Mapping[str, str], sep: str = ",",
               text_fields: Mapping[str, str] | None = None) -> pd.DataFrame:
    """Read a delimited file and coerce the declared columns.

    `fields` maps output name -> source column for numeric casts; unparsable
    cells become NaN. `text_fields` are copied through as stripped strings.
    """
    path = Path(path)
    try:
        df = pd.read_csv(path, sep=sep)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataLoadError(f"cannot read {path}: {e}") from e
    text_fields = dict(text_fields or {})
    req = set(fields.values()) | set(text_fields.values())
    missing = req - set(df.columns)
    if missing:
        raise DataLoadError(f"Missing columns in {path}: {sorted(missing)}")
    out = pd.DataFrame(index=df.index)
    for name, col in fields.items():
        out[name] = pd.to_numeric(df[col], errors="coerce")
    for name, col in text_fields.items():
        out[name] = df[col].astype(str).str.strip()
    return out


def load_samples(path: Path, year: str, values: Mapping[str, str], category: str | None = None,
                 sep: str = ",", category_fn: Callable[[Any], str] | None = None) -> list[Sample]:
    """Load one time series file as Samples sorted ascending by year.

    Rows without a parsable year are dropped. `category_fn` maps the raw
    category cell (e.g. an is_future flag) to a label such as "projected".
    """
    df = read_table(path, {"year": year, **values}, sep=sep,
                    text_fields={"category": category} if category else None)
    df = df.dropna(subset=["year"]).sort_values("year", kind="stable")
    out = []
    for row in df.to_dict(orient="records"):
        cat = None
        if category:
            cat = category_fn(row["category"]) if category_fn else row["category"]
        vals = MappingProxyType({k: float(row[k]) for k in values})
        out.append(Sample(year=int(row["year"]), values=vals, category=cat))
    return out


def future_category(v: Any) -> str:
    return "projected" if parse_flag(v) else "historical"


def load_geometry(path: Path, name_field: str = "name") -> list[Region]:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            geo = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(f"cannot read geometry {path}: {e}") from e
    feats = geo.get("features") if isinstance(geo, dict) else None
    if feats is None:
        raise DataLoadError(f"{path}: not a FeatureCollection")
    regions = []
    for f in feats:
        props = dict(f.get("properties") or {})
        regions.append(Region(name=str(props.get(name_field, "")).strip(),
                              geometry=f.get("geometry") or {}, properties=props))
    return regions


def load_country_rows(path: Path, name: str = "CountryName", year: str = "year",
                      anomaly: str = "anomaly") -> pd.DataFrame:
    df = read_table(path, {"year": year, "anomaly": anomaly}, text_fields={"name": name})
    df = df.dropna(subset=["year"])
    df["year"] = df["year"].astype(int)
    return df[["name", "year", "anomaly"]].reset_index(drop=True)
