"""Long <-> wide reshaping for pandas DataFrames.

Thin wrappers around ``DataFrame.explode``, ``DataFrame.pivot`` and
``DataFrame.melt`` that follow tidyr's conventions: rows keep their order,
new columns appear in order of first appearance, and missing values in the
id columns still identify a row.
"""
import logging

import pandas as pd

from tidyshape.serialization_utils import check_and_fix_df

log = logging.getLogger("tidyshape.reshape")

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
        raise ValueError(f"Columns {missing} not found, available columns are {list(df.columns)}")


def separate_rows(df: pd.DataFrame, column, sep: str = ";") -> pd.DataFrame:
    """Split delimited strings in ``column`` into one row per piece."""
    _require_columns(df, [column])
    df = df.copy()
    df[column] = df[column].map(lambda v: v.split(sep) if isinstance(v, str) else v)
    out = df.explode(column, ignore_index=True)
    log.debug("separate_rows %r: %d rows -> %d rows", column, len(df), len(out))
    return out


def replace_na(df: pd.DataFrame, replacements: dict) -> pd.DataFrame:
    _require_columns(df, list(replacements))
    df = df.copy()
    for col, value in replacements.items():
        ser = df[col]
        df[col] = ser.astype(object).where(ser.notna(), value).infer_objects()
    return df


def column_span(df: pd.DataFrame, first, last) -> list:
    """Column labels from ``first`` through ``last`` inclusive, like tidyselect's ``first:last``."""
    cols = list(df.columns)
    _require_columns(df, [first, last])
    start, end = cols.index(first), cols.index(last)
    if start > end:
        raise ValueError(f"Column {first!r} comes after {last!r}, can't build a span")
    return cols[start:end + 1]


def pivot_wider(df: pd.DataFrame, names_from, values_from, values_fill=None,
                id_cols=None, names_prefix: str = "") -> pd.DataFrame:
    """Spread ``names_from``/``values_from`` pairs into one column per name.

    Parameters
    ----------
    df : pd.DataFrame
        Long-format data.
    names_from : str
        Column whose distinct values become the new column names.
    values_from : str
        Column holding the cell values.
    values_fill : scalar, optional
        Value for (row, name) combinations that were never observed.
    id_cols : list, optional
        Columns identifying a row. Defaults to every other column.
    names_prefix : str
        Prepended to each new column name.

    Returns
    -------
    pd.DataFrame
        One row per distinct id combination, in order of first appearance.
    """
    check_and_fix_df(df)
    _check_sentinel(df)
    _require_columns(df, [names_from, values_from])
    if id_cols is None:
        id_cols = [c for c in df.columns if c not in (names_from, values_from)]
    else:
        id_cols = list(id_cols)
        _require_columns(df, id_cols)

    names = df[names_from]
    if names.isna().any():
        log.warning("pivot_wider: %d missing values in %r become column %r",
                    int(names.isna().sum()), names_from, NA_NAME)
        names = names.astype(object).where(names.notna(), NA_NAME)
    if names_prefix:
        names = names.map(lambda n: f"{names_prefix}{n}")

    if id_cols:
        row_id = df.groupby(id_cols, dropna=False, sort=False).ngroup()
    else:
        row_id = pd.Series(0, index=df.index)

    keyed = pd.DataFrame({_ROW_COL: row_id.to_numpy(), names_from: names.to_numpy(),
                          values_from: df[values_from].astype(object).to_numpy()})
    dupes = keyed.duplicated([_ROW_COL, names_from])
    if dupes.any():
        raise ValueError(
            f"Values in {values_from!r} are not uniquely identified by {id_cols} and "
            f"{names_from!r}; {int(dupes.sum())} duplicate rows found, e.g. "
            f"{keyed.loc[dupes, names_from].iloc[0]!r}")

    new_names = list(pd.unique(keyed[names_from]))
    clashes = [n for n in new_names if n in id_cols]
    if clashes:
        raise ValueError(f"New column names {clashes} clash with existing id columns")

    wide = keyed.pivot(index=_ROW_COL, columns=names_from, values=values_from)
    wide = wide.reindex(columns=new_names)
    wide.columns.name = None
    if values_fill is not None:
        wide = wide.astype(object).where(wide.notna(), values_fill)
    wide = wide.infer_objects()

    ids = df[id_cols].assign(**{_ROW_COL: row_id.to_numpy()})
    ids = ids.drop_duplicates(_ROW_COL).set_index(_ROW_COL)
    out = ids.join(wide).reset_index(drop=True)
    log.debug("pivot_wider %r: %d rows -> %d rows x %d new columns",
              names_from, len(df), len(out), len(new_names))
    return out


def pivot_longer(df: pd.DataFrame, cols, names_to="name", values_to="value",
                 values_drop_na: bool = False) -> pd.DataFrame:
    """Gather ``cols`` into ``names_to``/``values_to`` pairs, one input row expanding in place."""
    check_and_fix_df(df)
    _check_sentinel(df)
    cols = list(cols)
    _require_columns(df, cols)
    for new_col in (names_to, values_to):
        if new_col in df.columns:
            raise ValueError(f"Output column {new_col!r} already exists in the dataframe")

    id_cols = [c for c in df.columns if c not in cols]
    positioned = df.assign(**{_ROW_COL: range(len(df))})
    long = positioned.melt(id_vars=id_cols + [_ROW_COL], value_vars=cols,
                           var_name=names_to, value_name=values_to)
    long = long.sort_values(_ROW_COL, kind="stable").drop(columns=[_ROW_COL])
    if values_drop_na:
        long = long[long[values_to].notna()]
    long = long.reset_index(drop=True)
    log.debug("pivot_longer %d columns: %d rows -> %d rows", len(cols), len(df), len(long))
    return long


def count_flags(df: pd.DataFrame, cols, name) -> pd.DataFrame:
    """Add ``name`` holding the number of true flags across ``cols``, like ``rowSums``."""
    cols = list(cols)
    _require_columns(df, cols)
    df = df.copy()
    flags = df[cols].astype(object).where(df[cols].notna(), False).astype(bool)
    df[name] = flags.sum(axis=1).astype("int64")
    return df


def flag_wider(df: pd.DataFrame, column, sep: str = ";", na_label=None,
               flag_name=None) -> pd.DataFrame:
    """Separate ``column`` and spread it into one True/False column per value."""
    flag_name = flag_name or f"{column}_logical"
    long = separate_rows(df, column, sep=sep)
    if na_label is not None:
        long = replace_na(long, {column: na_label})
    long[flag_name] = True
    return pivot_wider(long, names_from=column, values_from=flag_name, values_fill=False)


def flag_longer(df: pd.DataFrame, cols, names_to, values_to=None,
                keep_true_only: bool = True) -> pd.DataFrame:
    """Gather flag columns back into one row per true flag."""
    values_to = values_to or f"{names_to}_logical"
    long = pivot_longer(df, cols, names_to=names_to, values_to=values_to)
    if keep_true_only:
        long = long[long[values_to].eq(True)].drop(columns=[values_to]).reset_index(drop=True)
    return long
