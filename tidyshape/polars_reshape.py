"""Long <-> wide reshaping for polars DataFrames.

Mirrors reshape.py using ``str.split``/``explode``, ``pivot`` and
``unpivot``. Results match the pandas versions row for row.
"""
import logging

import polars as pl

log = logging.getLogger("tidyshape.polars_reshape")

_ROW_COL = "__tidyshape_row"
NA_NAME = "NA"


def _check_sentinel(df):
    if _ROW_COL in df.columns:
        raise ValueError(
            f"{_ROW_COL} is a sentinel column name used by this tool, "
            f"and can't be used in a dataframe passed in")


def _require_columns(df, cols):
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Columns {missing} not found, available columns are {df.columns}")


def separate_rows(df: pl.DataFrame, column, sep: str = ";") -> pl.DataFrame:
    """Split a string ``column`` into one row per piece; other dtypes pass through."""
    _require_columns(df, [column])
    dtype = df.schema[column]
    if dtype in (pl.Utf8, pl.Null):
        out = df.with_columns(pl.col(column).cast(pl.Utf8).str.split(sep)).explode(column)
    elif isinstance(dtype, pl.List):
        out = df.explode(column)
    else:
        out = df.clone()
    log.debug("separate_rows %r: %d rows -> %d rows", column, df.height, out.height)
    return out


def replace_na(df: pl.DataFrame, replacements: dict) -> pl.DataFrame:
    _require_columns(df, list(replacements))
    return df.with_columns([pl.col(col).fill_null(value) for col, value in replacements.items()])


def column_span(df: pl.DataFrame, first, last) -> list:
    cols = df.columns
    _require_columns(df, [first, last])
    start, end = cols.index(first), cols.index(last)
    if start > end:
        raise ValueError(f"Column {first!r} comes after {last!r}, can't build a span")
    return cols[start:end + 1]


def pivot_wider(df: pl.DataFrame, names_from, values_from, values_fill=None,
                id_cols=None, names_prefix: str = "") -> pl.DataFrame:
    """Spread ``names_from``/``values_from`` pairs into one column per name.

    Same contract as ``tidyshape.reshape.pivot_wider``. New column names are
    always strings since polars column names must be.
    """
    _check_sentinel(df)
    _require_columns(df, [names_from, values_from])
    if id_cols is None:
        id_cols = [c for c in df.columns if c not in (names_from, values_from)]
    else:
        id_cols = list(id_cols)
        _require_columns(df, id_cols)

    null_names = df[names_from].null_count()
    if null_names:
        log.warning("pivot_wider: %d missing values in %r become column %r",
                    null_names, names_from, NA_NAME)
    name_expr = pl.col(names_from).cast(pl.Utf8).fill_null(NA_NAME)
    if names_prefix:
        name_expr = pl.concat_str([pl.lit(names_prefix), name_expr])

    index_cols = id_cols
    keyed = df.select(id_cols + [name_expr.alias(names_from), pl.col(values_from)])
    if not id_cols:
        keyed = keyed.with_columns(pl.lit(0).alias(_ROW_COL))
        index_cols = [_ROW_COL]

    dupes = keyed.select(index_cols + [names_from]).is_duplicated()
    if dupes.any():
        raise ValueError(
            f"Values in {values_from!r} are not uniquely identified by {id_cols} and "
            f"{names_from!r}; {int(dupes.sum())} duplicate rows found, e.g. "
            f"{keyed.filter(dupes)[names_from][0]!r}")

    new_names = keyed[names_from].unique(maintain_order=True).to_list()
    clashes = [n for n in new_names if n in id_cols]
    if clashes:
        raise ValueError(f"New column names {clashes} clash with existing id columns")

    wide = keyed.pivot(on=names_from, index=index_cols, values=values_from,
                       aggregate_function=None, maintain_order=True)
    wide = wide.select(id_cols + new_names)
    if values_fill is not None:
        wide = wide.with_columns([pl.col(n).fill_null(values_fill) for n in new_names])
    log.debug("pivot_wider %r: %d rows -> %d rows x %d new columns",
              names_from, df.height, wide.height, len(new_names))
    return wide


def pivot_longer(df: pl.DataFrame, cols, names_to="name", values_to="value",
                 values_drop_na: bool = False) -> pl.DataFrame:
    _check_sentinel(df)
    cols = list(cols)
    _require_columns(df, cols)
    for new_col in (names_to, values_to):
        if new_col in df.columns:
            raise ValueError(f"Output column {new_col!r} already exists in the dataframe")

    id_cols = [c for c in df.columns if c not in cols]
    long = (
        df.with_row_index(_ROW_COL)
        .unpivot(on=cols, index=[_ROW_COL] + id_cols,
                 variable_name=names_to, value_name=values_to)
        .sort(_ROW_COL, maintain_order=True)
        .drop(_ROW_COL)
    )
    if values_drop_na:
        long = long.filter(pl.col(values_to).is_not_null())
    log.debug("pivot_longer %d columns: %d rows -> %d rows", len(cols), df.height, long.height)
    return long


def count_flags(df: pl.DataFrame, cols, name) -> pl.DataFrame:
    cols = list(cols)
    _require_columns(df, cols)
    return df.with_columns(
        pl.sum_horizontal([pl.col(c).fill_null(False).cast(pl.Int64) for c in cols]).alias(name)
    )


def flag_wider(df: pl.DataFrame, column, sep: str = ";", na_label=None,
               flag_name=None) -> pl.DataFrame:
    flag_name = flag_name or f"{column}_logical"
    long = separate_rows(df, column, sep=sep)
    if na_label is not None:
        long = replace_na(long, {column: na_label})
    long = long.with_columns(pl.lit(True).alias(flag_name))
    return pivot_wider(long, names_from=column, values_from=flag_name, values_fill=False)


def flag_longer(df: pl.DataFrame, cols, names_to, values_to=None,
                keep_true_only: bool = True) -> pl.DataFrame:
    values_to = values_to or f"{names_to}_logical"
    long = pivot_longer(df, cols, names_to=names_to, values_to=values_to)
    if keep_true_only:
        long = long.filter(pl.col(values_to).fill_null(False)).drop(values_to)
    return long
