"""Flatten nested JSON records into pandas tables.

JSON arrays and objects land in a DataFrame as list and dict cells. CSV has
no way to hold them, so before export they must be unnested into rows,
expanded into ``parent.child`` columns, JSON-encoded to strings or dropped.
"""
import logging

import numpy as np
import pandas as pd

from tidyshape.serialization_utils import _json_encode_cell, is_nested_value

log = logging.getLogger("tidyshape.json_flatten")


def records_to_frame(records) -> pd.DataFrame:
    """Build a DataFrame from a list of JSON objects, keeping nested values as cells."""
    return pd.DataFrame(list(records))


def _is_nested_column(ser: pd.Series) -> bool:
    if ser.dtype != object:
        return False
    return bool(ser.map(is_nested_value).any())


def _is_object_column(ser: pd.Series) -> bool:
    present = ser[ser.map(lambda v: v is not None and (is_nested_value(v) or not pd.isna(v)))]
    return len(present) > 0 and bool(present.map(lambda v: isinstance(v, dict)).all())


def nested_columns(df: pd.DataFrame) -> list:
    return [col for col in df.columns if _is_nested_column(df[col])]


def _as_list(val):
    if isinstance(val, dict):
        return [val]
    if isinstance(val, (tuple, np.ndarray)):
        return list(val)
    return val


def unnest(df: pd.DataFrame, column, keep=None, keep_empty: bool = False) -> pd.DataFrame:
    """One row per element of the list column ``column``.

    Elements that are objects are expanded into one column per key; a list of
    scalars stays in a single column named ``column``. Rows whose list is empty
    or missing are dropped unless ``keep_empty`` is set.
    """
    if column not in df.columns:
        raise ValueError(f"Column {column!r} not found, available columns are {list(df.columns)}")
    if keep is None:
        nested = set(nested_columns(df))
        keep = [c for c in df.columns if c != column and c not in nested]
    else:
        keep = [c for c in keep if c != column]

    sub = df[keep + [column]].copy()
    sub[column] = sub[column].map(_as_list)
    if not keep_empty:
        has_items = sub[column].map(lambda v: isinstance(v, list) and len(v) > 0)
        sub = sub[has_items]
    exploded = sub.explode(column, ignore_index=True)

    elements = exploded[column]
    if not elements.map(lambda v: isinstance(v, dict)).any():
        log.debug("unnest %r: %d rows -> %d rows of scalars", column, len(df), len(exploded))
        return exploded

    inner = pd.json_normalize([v if isinstance(v, dict) else {} for v in elements])
    clashes = [c for c in inner.columns if c in keep]
    if clashes:
        raise ValueError(f"Unnesting {column!r} would overwrite existing columns {clashes}")
    out = pd.concat([exploded.drop(columns=[column]), inner], axis=1)
    log.debug("unnest %r: %d rows -> %d rows, new columns %s",
              column, len(df), len(out), list(inner.columns))
    return out


def flatten_objects(df: pd.DataFrame, sep: str = ".") -> pd.DataFrame:
    """Expand every object (dict) column into ``parent<sep>child`` columns, in place."""
    pieces = []
    for col in df.columns:
        ser = df[col]
        if ser.dtype == object and _is_object_column(ser):
            inner = pd.json_normalize([v if isinstance(v, dict) else {} for v in ser], sep=sep)
            inner.columns = [f"{col}{sep}{k}" for k in inner.columns]
            inner.index = df.index
            pieces.append(inner)
        else:
            pieces.append(df[[col]])
    if not pieces:
        return df.copy()
    return pd.concat(pieces, axis=1)


def stringify_nested(df: pd.DataFrame) -> pd.DataFrame:
    """JSON-encode every nested column so the table can be written to CSV."""
    df = df.copy()
    for col in nested_columns(df):
        df[col] = df[col].map(_json_encode_cell)
    return df


def drop_nested(df: pd.DataFrame) -> pd.DataFrame:
    cols = nested_columns(df)
    if cols:
        log.info("Dropping nested columns %s", cols)
    return df.drop(columns=cols)
