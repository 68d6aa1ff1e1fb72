"""Flatten nested JSON records into polars tables.

Mirrors json_flatten.py. Polars infers ``List`` and ``Struct`` dtypes for
JSON arrays and objects, so nesting is read off the schema instead of the
cells.
"""
import logging

import polars as pl

from tidyshape.serialization_utils import _json_encode_cell

log = logging.getLogger("tidyshape.polars_json_flatten")

_NESTED_TYPES = (pl.List, pl.Array, pl.Struct)


def records_to_frame(records) -> pl.DataFrame:
    return pl.DataFrame(list(records), infer_schema_length=None)


def nested_columns(df: pl.DataFrame) -> list:
    return [name for name, dtype in df.schema.items() if isinstance(dtype, _NESTED_TYPES)]


def unnest(df: pl.DataFrame, column, keep=None, keep_empty: bool = False) -> pl.DataFrame:
    if column not in df.columns:
        raise ValueError(f"Column {column!r} not found, available columns are {df.columns}")
    if keep is None:
        nested = set(nested_columns(df))
        keep = [c for c in df.columns if c != column and c not in nested]
    else:
        keep = [c for c in keep if c != column]

    dtype = df.schema[column]
    sub = df.select(keep + [column])
    if isinstance(dtype, (pl.List, pl.Array)):
        if isinstance(dtype, pl.Array):
            sub = sub.with_columns(pl.col(column).arr.to_list())
        if not keep_empty:
            sub = sub.filter(pl.col(column).list.len() > 0)
        sub = sub.explode(column)
        inner = dtype.inner
    elif isinstance(dtype, pl.Struct):
        inner = dtype
    else:
        raise ValueError(f"Column {column!r} has dtype {dtype}, which is not a list or struct")

    if not isinstance(inner, pl.Struct):
        log.debug("unnest %r: %d rows -> %d rows of scalars", column, df.height, sub.height)
        return sub

    field_names = [f.name for f in inner.fields]
    clashes = [c for c in field_names if c in keep]
    if clashes:
        raise ValueError(f"Unnesting {column!r} would overwrite existing columns {clashes}")
    out = sub.unnest(column)
    log.debug("unnest %r: %d rows -> %d rows, new columns %s",
              column, df.height, out.height, field_names)
    return out


def flatten_objects(df: pl.DataFrame, sep: str = ".") -> pl.DataFrame:
    """Expand struct columns into ``parent<sep>child`` columns until none are left."""
    while True:
        struct_cols = [name for name, dtype in df.schema.items() if isinstance(dtype, pl.Struct)]
        if not struct_cols:
            return df
        for col in struct_cols:
            fields = [f.name for f in df.schema[col].fields]
            df = df.with_columns(
                pl.col(col).struct.rename_fields([f"{col}{sep}{f}" for f in fields])
            ).unnest(col)


def stringify_nested(df: pl.DataFrame) -> pl.DataFrame:
    """JSON-encode every nested column.

    Struct values carry every field of the column, so keys absent from the
    source object are written as ``null``.
    """
    replaced = [
        pl.Series(col, [_json_encode_cell(v) for v in df[col].to_list()], dtype=pl.Utf8)
        for col in nested_columns(df)
    ]
    if not replaced:
        return df
    return df.with_columns(replaced)


def drop_nested(df: pl.DataFrame) -> pl.DataFrame:
    cols = nested_columns(df)
    if cols:
        log.info("Dropping nested columns %s", cols)
    return df.drop(cols)
