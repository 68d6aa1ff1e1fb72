"""
SAFI Sample Data Generator

Builds a small extract of the SAFI (Studying African Farmer-led Irrigation)
household survey used throughout the lesson: the flat CSV version and the
nested JSON version of the same interviews.

Usage:
    python -m tidyshape generate [output_dir]
"""

import json
import logging
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

log = logging.getLogger("tidyshape.lesson.sample_data")

COLUMNS = [
    "key_ID", "village", "interview_date", "no_membrs", "years_liv",
    "respondent_wall_type", "rooms", "memb_assoc", "affect_conflicts",
    "liv_count", "items_owned", "no_meals", "months_lack_food", "instanceID",
]

# key_ID, village, interview_date, no_membrs, years_liv, wall, rooms,
# memb_assoc, affect_conflicts, liv_count, items_owned, no_meals,
# months_lack_food, instanceID
_ROWS = [
    (1, "God", "2016-11-17", 3, 4, "muddaub", 1, None, None, 1,
     "bicycle;television;solar_panel;table", 2, "Jan",
     "uuid:ec241f2c-0609-46ed-b5e8-fe575f6cefef"),
    (2, "God", "2016-11-17", 7, 9, "muddaub", 1, None, None, 3,
     "cow_cart;bicycle;radio;cow_plough;solar_panel;mobile_phone", 2, "Jan;Sept;Oct;Nov;Dec",
     "uuid:099de9c9-3e5e-427b-8452-26250e840d6e"),
    (3, "God", "2016-11-17", 10, 15, "burntbricks", 1, None, None, 1,
     "solar_torch", 2, "Jan;Feb;Mar;Oct;Nov;Dec",
     "uuid:193d7daf-9582-409b-bf09-027dd36f9007"),
    (6, "God", "2016-11-17", 3, 3, "muddaub", 1, None, None, 1,
     None, 2, "Aug;Sept;Oct;Nov",
     "uuid:0a42c9ac-bc84-4ab4-bb1c-1ff7b6a5a3c0"),
    (8, "Chirodzo", "2016-11-16", 12, 70, "burntbricks", 3, "yes", "never", 2,
     "motorcyle;bicycle;television;radio;cow_plough;solar_panel;solar_torch;table;fridge", 2, "Jan",
     "uuid:d6cee930-7be1-4fd9-88c0-82a08f90fb5a"),
    (9, "Chirodzo", "2016-11-16", 8, 6, "burntbricks", 1, "no", "never", 3,
     "television;solar_panel;solar_torch", 3, "Jan;Dec",
     "uuid:846103d2-b1db-4055-b502-9cd510bb7b37"),
    (12, "Ruaca", "2016-11-21", 7, 20, "sunbricks", 2, "yes", "once", 4,
     "radio;mobile_phone", 3, "none",
     "uuid:7c3e1f55-3d6d-4b37-9c8e-4f2d3a6b9e21"),
    (14, "Ruaca", "2016-11-21", 4, 5, "cement", 1, "no", "never", 2,
     None, 2, "none",
     "uuid:e5a8d4c2-1f0b-4a6e-8d3c-7b9f2e1a0c54"),
]

# Livestock detail per household, only present in the JSON export.
_LIVESTOCK = {
    1: [("poultry", 1)],
    2: [("oxen", 2), ("cows", 4), ("goats", 6)],
    3: [("poultry", 3)],
    6: [("goats", 2)],
    8: [("oxen", 4), ("cows", 10)],
    9: [("oxen", 2), ("cows", 3), ("goats", 5)],
    12: [("oxen", 2), ("cows", 6), ("goats", 8), ("poultry", 12)],
    14: [("cows", 1), ("goats", 3)],
}

_GPS = {
    "God": (-19.11225943, 33.48345609, 698),
    "Chirodzo": (-19.11213617, 33.48358438, 701),
    "Ruaca": (-19.11221722, 33.48352983, 679),
}


def interviews() -> pd.DataFrame:
    """The flat interviews table, as read from SAFI_clean.csv."""
    df = pd.DataFrame.from_records(_ROWS, columns=COLUMNS)
    for col in ("memb_assoc", "affect_conflicts", "items_owned"):
        df[col] = df[col].astype(object)
    return df


def json_records() -> list:
    """The nested JSON version: items as arrays, livestock as objects, gps as an object."""
    records = []
    for row in _ROWS:
        rec = dict(zip(COLUMNS, row))
        items = rec["items_owned"]
        rec["items_owned"] = items.split(";") if items else []
        lat, lon, alt = _GPS[rec["village"]]
        rec["gps"] = {"latitude": lat, "longitude": lon, "altitude": alt}
        rec["F_liv"] = [
            {"F_curr_liv": kind, "F_liv_count": count}
            for kind, count in _LIVESTOCK[rec["key_ID"]]
        ]
        records.append(rec)
    return records


def generate_all(output_dir: str = "data"):
    """Write SAFI_clean.csv, SAFI.json and SAFI_clean.parquet with a manifest."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    df = interviews()
    csv_path = out / "SAFI_clean.csv"
    df.to_csv(csv_path, index=False, na_rep="NA")

    json_path = out / "SAFI.json"
    with open(json_path, "w") as f:
        json.dump(json_records(), f, indent=2)

    parquet_path = out / "SAFI_clean.parquet"
    table = pa.Table.from_pandas(df, preserve_index=False)
    pq.write_table(table, str(parquet_path))

    manifest = [
        {"name": "interviews", "path": csv_path.name, "rows": len(df)},
        {"name": "interviews_json", "path": json_path.name, "rows": len(df)},
        {"name": "interviews_parquet", "path": parquet_path.name, "rows": len(df)},
    ]
    manifest_path = out / "manifest.json"
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    log.info("Generated %d sample files in %s", len(manifest), out)
    return manifest
