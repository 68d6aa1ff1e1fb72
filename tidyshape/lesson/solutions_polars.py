"""
Lesson Solutions: polars

Same steps as solutions_pandas, written against polars. Group summaries are
sorted explicitly since polars group_by does not order its output.
"""

import polars as pl

from tidyshape import polars_json_flatten
from tidyshape.polars_reshape import (
    NA_NAME, count_flags, flag_longer, flag_wider, pivot_longer, pivot_wider)
from tidyshape.lesson.solutions_pandas import MONTHS, NO_ITEMS


def added_columns(wide: pl.DataFrame, original: pl.DataFrame) -> list:
    return [c for c in wide.columns if c not in original.columns]


# ============================================================================
# 1. Wall type: long <-> wide
# ============================================================================

def wall_types(interviews: pl.DataFrame) -> list:
    return (interviews["respondent_wall_type"].cast(pl.Utf8).fill_null(NA_NAME)
            .unique(maintain_order=True).to_list())


def wall_type_wide(interviews: pl.DataFrame) -> pl.DataFrame:
    df = interviews.with_columns(pl.lit(True).alias("wall_type_logical"))
    return pivot_wider(df, names_from="respondent_wall_type",
                       values_from="wall_type_logical", values_fill=False)


def wall_type_long(wide: pl.DataFrame, types: list) -> pl.DataFrame:
    return flag_longer(wide, types, names_to="respondent_wall_type",
                       values_to="wall_type_logical")


# ============================================================================
# 2. Items owned
# ============================================================================

def items_owned_wide(interviews: pl.DataFrame) -> pl.DataFrame:
    return flag_wider(interviews, "items_owned", sep=";", na_label=NO_ITEMS)


def items_owned_long(items_wide: pl.DataFrame, item_cols: list) -> pl.DataFrame:
    return flag_longer(items_wide, item_cols, names_to="items_owned")


def number_items(items_wide: pl.DataFrame, item_cols: list) -> pl.DataFrame:
    owned = [c for c in item_cols if c != NO_ITEMS]
    return count_flags(items_wide, owned, "number_items")


def mean_items_by_village(with_counts: pl.DataFrame) -> pl.DataFrame:
    return (with_counts.group_by("village")
            .agg(pl.col("number_items").mean().alias("mean_items"))
            .sort("village", nulls_last=True))


def item_counts_by_village(items_wide: pl.DataFrame, item_cols: list) -> pl.DataFrame:
    long = pivot_longer(items_wide, item_cols, names_to="items_owned",
                        values_to="items_owned_logical")
    return (long.group_by(["village", "items_owned"])
            .agg(pl.col("items_owned_logical").cast(pl.Int64).sum().alias("households"))
            .sort(["village", "items_owned"], nulls_last=True))


# ============================================================================
# 3. Months lacking food (exercise)
# ============================================================================

def months_lack_food_wide(interviews: pl.DataFrame) -> pl.DataFrame:
    wide = flag_wider(interviews, "months_lack_food", sep=";")
    added = added_columns(wide, interviews)
    months = [m for m in MONTHS if m in added]
    others = [c for c in added if c not in MONTHS]
    kept = [c for c in wide.columns if c not in added]
    return wide.select(kept + months + others)


def number_months_lack_food(months_wide: pl.DataFrame) -> pl.DataFrame:
    months = [m for m in MONTHS if m in months_wide.columns]
    return count_flags(months_wide, months, "number_months_lack_food")


def mean_months_by_memb_assoc(with_counts: pl.DataFrame) -> pl.DataFrame:
    return (with_counts.group_by("memb_assoc")
            .agg(pl.col("number_months_lack_food").mean().alias("mean_months"))
            .sort("memb_assoc", nulls_last=True))


# ============================================================================
# 4. Export table for the plotting episode
# ============================================================================

def interviews_plotting(interviews: pl.DataFrame) -> pl.DataFrame:
    items_wide = items_owned_wide(interviews)
    item_cols = added_columns(items_wide, interviews)
    both_wide = months_lack_food_wide(items_wide)
    with_months = number_months_lack_food(both_wide)
    return number_items(with_months, item_cols)


# ============================================================================
# 5. Nested JSON
# ============================================================================

def livestock_long(json_df: pl.DataFrame) -> pl.DataFrame:
    return polars_json_flatten.unnest(json_df, "F_liv")


def json_for_csv(json_df: pl.DataFrame) -> pl.DataFrame:
    return polars_json_flatten.stringify_nested(polars_json_flatten.flatten_objects(json_df))
