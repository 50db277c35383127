#!/usr/bin/env python
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse, json
from pathlib import Path
import pandas as pd
from datetime import datetime, timezone

SUPPORTED = {".csv"}

def load_any(path: Path) -> pd.DataFrame:
    if path.suffix.lower() not in SUPPORTED:
        raise ValueError(f"Unsupported file: {path}")
    return pd.read_csv(path)

def ensure_cols(df: pd.DataFrame, src: Path) -> pd.DataFrame:
    df = df.copy()
    if "country" not in df.columns and "CountryName" in df.columns:
        df = df.rename(columns={"CountryName": "country"})
    if "year" not in df.columns and "date" in df.columns:
        df["year"] = pd.to_datetime(df["date"], errors="coerce").dt.year
    for req in ["country", "year", "temp_c"]:
        if req not in df.columns:
            raise SystemExit(f"{src.name}: missing required column '{req}'")
    df["year"] = pd.to_numeric(df["year"], errors="coerce")
    df["temp_c"] = pd.to_numeric(df["temp_c"], errors="coerce")
    df = df.dropna(subset=["year"])
    df["year"] = df["year"].astype(int)
    df["country"] = df["country"].astype(str).str.strip()
    return df[["country", "year", "temp_c"]]

def annual_means(df: pd.DataFrame) -> pd.DataFrame:
    # monthly rows collapse to one value per country and year
    return df.groupby(["country", "year"], as_index=False)["temp_c"].mean()

def country_anomalies(annual: pd.DataFrame, ref_start: int, ref_end: int, future_from: int) -> pd.DataFrame:
    in_ref = (annual["year"] >= ref_start) & (annual["year"] <= ref_end)
    clim = (annual.loc[in_ref]
            .groupby("country", as_index=False)["temp_c"]
            .mean()
            .rename(columns={"temp_c": "clim_temp_c"}))
    out = annual.merge(clim, on="country", how="left")
    missing = sorted(out.loc[out["clim_temp_c"].isna(), "country"].unique())
    if missing:
        print(f"[WARN] no baseline years for {len(missing)} countries, e.g. {missing[:5]}")
    out["anomaly"] = out["temp_c"] - out["clim_temp_c"]
    out["is_future"] = out["year"] >= future_from
    out = out.rename(columns={"country": "CountryName"})
    return out[["CountryName", "year", "anomaly", "is_future"]].sort_values(["CountryName", "year"])

def global_anomalies(country: pd.DataFrame) -> pd.DataFrame:
    g = (country.dropna(subset=["anomaly"])
         .groupby("year", as_index=False)
         .agg(anomaly=("anomaly", "mean"), is_future=("is_future", "max")))
    return g.sort_values("year")

def write_any(df: pd.DataFrame, path: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)

def main():
    ap = argparse.ArgumentParser(description="Build country and global annual anomaly tables for the stripes and map panels.")
    ap.add_argument("--input", required=True, help="File or folder with country/year/temp_c rows (monthly or annual).")
    ap.add_argument("--output_country", default="data/country_temp_anomaly_1950_2050.csv")
    ap.add_argument("--output_global", default="data/global_temp_anomaly_1950_2050.csv")
    ap.add_argument("--ref_start", type=int, default=1950, help="Baseline start year (inclusive).")
    ap.add_argument("--ref_end", type=int, default=1980, help="Baseline end year (inclusive).")
    ap.add_argument("--future_from", type=int, default=2025, help="First year flagged as projected.")
    args = ap.parse_args()

    src = Path(args.input)
    if src.is_dir():
        files = [p for p in sorted(src.iterdir()) if p.is_file() and p.suffix.lower() in SUPPORTED]
        if not files:
            raise SystemExit(f"No data files found in {src}")
        df = pd.concat([ensure_cols(load_any(p), p) for p in files], ignore_index=True)
    elif src.exists():
        df = ensure_cols(load_any(src), src)
    else:
        raise SystemExit(f"Input not found: {src}")

    country = country_anomalies(annual_means(df), args.ref_start, args.ref_end, args.future_from)
    glob = global_anomalies(country)
    write_any(country, args.output_country)
    write_any(glob, args.output_global)
    print(f"[OK] wrote {args.output_country} ({len(country)} rows) and {args.output_global} ({len(glob)} rows)")

    meta = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "input": str(src),
        "baseline": [args.ref_start, args.ref_end],
        "future_from": args.future_from,
        "rows_input": int(len(df)),
        "countries": int(country["CountryName"].nunique()),
        "years": [int(glob["year"].min()), int(glob["year"].max())] if len(glob) else None,
    }
    print(json.dumps(meta, indent=2))

if __name__ == "__main__":
    main()
