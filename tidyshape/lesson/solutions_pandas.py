"""
Lesson Solutions: pandas

Worked examples and exercise solutions for the reshaping lesson. Each
function takes the interviews table (or the output of an earlier step) and
returns a new DataFrame; inputs are never modified.
"""

import pandas as pd

from tidyshape import json_flatten
from tidyshape.reshape import (
    NA_NAME, count_flags, flag_longer, flag_wider, pivot_longer, pivot_wider)


NO_ITEMS = "no_listed_items"
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "June",
          "July", "Aug", "Sept", "Oct", "Nov", "Dec"]


def added_columns(wide: pd.DataFrame, original: pd.DataFrame) -> list:
    """Columns a pivot created, in the order they appear."""
    return [c for c in wide.columns if c not in original.columns]


# ============================================================================
# 1. Wall type: long <-> wide
# ============================================================================

def wall_types(interviews: pd.DataFrame) -> list:
    """Wall types in order of first appearance, named as wall_type_wide names its columns."""
    ser = interviews["respondent_wall_type"]
    return list(pd.unique(ser.astype(object).where(ser.notna(), NA_NAME)))


def wall_type_wide(interviews: pd.DataFrame) -> pd.DataFrame:
    df = interviews.assign(wall_type_logical=True)
    return pivot_wider(df, names_from="respondent_wall_type",
                       values_from="wall_type_logical", values_fill=False)


def wall_type_long(wide: pd.DataFrame, types: list) -> pd.DataFrame:
    return flag_longer(wide, types, names_to="respondent_wall_type",
                       values_to="wall_type_logical")


# ============================================================================
# 2. Items owned
# ============================================================================

def items_owned_wide(interviews: pd.DataFrame) -> pd.DataFrame:
    return flag_wider(interviews, "items_owned", sep=";", na_label=NO_ITEMS)


def items_owned_long(items_wide: pd.DataFrame, item_cols: list) -> pd.DataFrame:
    return flag_longer(items_wide, item_cols, names_to="items_owned")


def number_items(items_wide: pd.DataFrame, item_cols: list) -> pd.DataFrame:
    owned = [c for c in item_cols if c != NO_ITEMS]
    return count_flags(items_wide, owned, "number_items")


def mean_items_by_village(with_counts: pd.DataFrame) -> pd.DataFrame:
    return (with_counts.groupby("village", dropna=False)["number_items"]
            .mean().reset_index(name="mean_items"))


def item_counts_by_village(items_wide: pd.DataFrame, item_cols: list) -> pd.DataFrame:
    """Number of households owning each item, per village."""
    long = pivot_longer(items_wide, item_cols, names_to="items_owned",
                        values_to="items_owned_logical")
    counts = (long.groupby(["village", "items_owned"], dropna=False)["items_owned_logical"]
              .sum().reset_index(name="households"))
    counts["households"] = counts["households"].astype("int64")
    return counts


# ============================================================================
# 3. Months lacking food (exercise)
# ============================================================================

def months_lack_food_wide(interviews: pd.DataFrame) -> pd.DataFrame:
    wide = flag_wider(interviews, "months_lack_food", sep=";")
    added = added_columns(wide, interviews)
    months = [m for m in MONTHS if m in added]
    others = [c for c in added if c not in MONTHS]
    kept = [c for c in wide.columns if c not in added]
    return wide[kept + months + others]


def number_months_lack_food(months_wide: pd.DataFrame) -> pd.DataFrame:
    months = [m for m in MONTHS if m in months_wide.columns]
    return count_flags(months_wide, months, "number_months_lack_food")


def mean_months_by_memb_assoc(with_counts: pd.DataFrame) -> pd.DataFrame:
    return (with_counts.groupby("memb_assoc", dropna=False)["number_months_lack_food"]
            .mean().reset_index(name="mean_months"))


# ============================================================================
# 4. Export table for the plotting episode
# ============================================================================

def interviews_plotting(interviews: pd.DataFrame) -> pd.DataFrame:
    items_wide = items_owned_wide(interviews)
    item_cols = added_columns(items_wide, interviews)
    both_wide = months_lack_food_wide(items_wide)
    with_months = number_months_lack_food(both_wide)
    return number_items(with_months, item_cols)


# ============================================================================
# 5. Nested JSON
# ============================================================================

def livestock_long(json_df: pd.DataFrame) -> pd.DataFrame:
    return json_flatten.unnest(json_df, "F_liv")


def json_for_csv(json_df: pd.DataFrame) -> pd.DataFrame:
    return json_flatten.stringify_nested(json_flatten.flatten_objects(json_df))
