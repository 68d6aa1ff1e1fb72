import json
import logging
from typing import Any, List

import numpy as np
import pandas as pd

logger = logging.getLogger("tidyshape.serialization_utils")


class DuplicateColumnsException(Exception):
    pass


class NestedColumnsException(TypeError):
    """Raised when a table holding lists or mappings is written to a flat format."""

    def __init__(self, columns: List[str]):
        self.columns = list(columns)
        super().__init__(
            "Cannot write nested columns %r to CSV. Unnest them, drop them, or "
            "call stringify_nested() first." % (self.columns,))


def check_and_fix_df(df: pd.DataFrame) -> pd.DataFrame:
    if not df.columns.is_unique:
        dupes = df.columns[df.columns.duplicated()].tolist()
        raise DuplicateColumnsException(
            f"Your dataframe has duplicate columns {dupes}. tidyshape requires distinct column names")
    return df


def is_nested_value(val: Any) -> bool:
    return isinstance(val, (list, tuple, dict, np.ndarray))


def _make_json_safe(val):
    """Recursively convert non-JSON-serializable values (numpy arrays, non-str keys) to plain types."""
    if isinstance(val, dict):
        return {str(k): _make_json_safe(v) for k, v in val.items()}
    if isinstance(val, np.ndarray):
        return [_make_json_safe(v) for v in val.tolist()]
    if isinstance(val, (list, tuple)):
        return [_make_json_safe(v) for v in val]
    if isinstance(val, np.generic):
        return val.item()
    if val is not None and not isinstance(val, str) and pd.isna(val):
        return None
    return val


def _json_encode_cell(val):
    """JSON-encode a single cell value for flat (CSV) transport."""
    if val is None:
        return None
    if not is_nested_value(val) and pd.isna(val):
        return None
    return json.dumps(_make_json_safe(val), default=str)


def force_to_pandas(df_pd_or_pl) -> pd.DataFrame:
    if isinstance(df_pd_or_pl, pd.DataFrame):
        return df_pd_or_pl

    import polars as pl

    if isinstance(df_pd_or_pl, pl.DataFrame):
        return df_pd_or_pl.to_pandas()
    else:
        raise Exception("unexpected type for dataframe, got %r" % (type(df_pd_or_pl)))
