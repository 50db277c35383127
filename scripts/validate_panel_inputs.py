#!/usr/bin/env python
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse, json
from pathlib import Path
import pandas as pd
from datetime import datetime, timezone

from climate_story.choropleth import ChoroplethUpdater
from climate_story.config import DATA_DIR, GEOJSON_PATH, SCENARIO_LABELS, DataPaths
from climate_story.data import DataLoadError, load_country_rows, load_geometry

# input attribute on DataPaths -> columns the panel reads
SCHEMAS = {
    "co2_historical": ["time", "co2mass"],
    "co2_predictions": ["time", *SCENARIO_LABELS.values()],
    "scenario_temps": ["year", "historical", *SCENARIO_LABELS.values()],
    "country_temps": ["country", "year", "anom"],
    "global_stripes": ["year", "anomaly", "is_future"],
    "country_anomalies": ["CountryName", "year", "anomaly"],
    "sea_ice": ["year", "extent", "is_future"],
    "co2_vs_temp": ["year", "co2_ppm", "anomaly"],
}

def check_table(path: Path, cols: list) -> dict:
    row = {"file": str(path), "exists": path.exists(), "rows": 0, "missing_columns": [], "ok": False}
    if not row["exists"]:
        return row
    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        row["error"] = str(e)
        return row
    row["rows"] = int(len(df))
    row["missing_columns"] = [c for c in cols if c not in df.columns]
    if "year" in df.columns or "time" in df.columns:
        yrs = pd.to_numeric(df["year" if "year" in df.columns else "time"], errors="coerce")
        row["unparsable_years"] = int(yrs.isna().sum())
        if yrs.notna().any():
            row["years"] = [int(yrs.min()), int(yrs.max())]
    row["ok"] = row["rows"] > 0 and not row["missing_columns"]
    return row

def name_coverage(paths: DataPaths, year: int | None) -> dict:
    try:
        regions = load_geometry(paths.world_geojson)
        rows = load_country_rows(paths.country_anomalies)
    except DataLoadError as e:
        print(f"[WARN] coverage skipped: {e}")
        return {"skipped": str(e)}
    upd = ChoroplethUpdater(regions, rows)
    if year is None:
        year = int(rows["year"].min()) if len(rows) else 0
    cov = upd.coverage(year)
    return {
        "year": year,
        "color_domain": list(upd.domain),
        "matched": len(cov["matched"]),
        "geometry_only": cov["geometry_only"],
        "table_only": cov["table_only"],
    }

def main():
    ap = argparse.ArgumentParser(description="Validate the panel input files and map name coverage.")
    ap.add_argument("--data_dir", default=str(DATA_DIR))
    ap.add_argument("--geojson", default=str(GEOJSON_PATH))
    ap.add_argument("--year", type=int, default=None, help="Year used for the map name coverage check.")
    ap.add_argument("--report_json", required=True, help="Output JSON with per-file checks and coverage")
    args = ap.parse_args()

    paths = DataPaths.from_root(Path(args.data_dir), Path(args.geojson))
    files = {}
    for attr, cols in SCHEMAS.items():
        files[attr] = check_table(getattr(paths, attr), cols)
        tag = "[OK]" if files[attr]["ok"] else "[WARN]"
        print(f"{tag} {attr}: {files[attr]['file']}")

    coverage = name_coverage(paths, args.year)
    if coverage.get("table_only"):
        print(f"[WARN] {len(coverage['table_only'])} table names have no polygon")

    meta = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data_dir": args.data_dir,
        "geojson": args.geojson,
        "files": files,
        "share_files_ok": sum(1 for f in files.values() if f["ok"]) / len(files),
        "coverage": coverage,
    }
    out_json = Path(args.report_json)
    out_json.parent.mkdir(parents=True, exist_ok=True)
    with open(out_json, "w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2)

    print("[OK] panel input validation written:", str(out_json))

if __name__ == "__main__":
    main()
