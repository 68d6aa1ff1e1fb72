import json
import logging
import os
from io import BytesIO
from urllib.request import urlopen

import pandas as pd
import polars as pl

from tidyshape import json_flatten, polars_json_flatten
from tidyshape.serialization_utils import NestedColumnsException, check_and_fix_df

log = logging.getLogger("tidyshape.data_loading")

DEFAULT_OUTPUT_DIR = os.environ.get("TIDYSHAPE_OUTPUT_DIR", "data_output")
NA_VALUES = ["NA", ""]
URL_TIMEOUT_S = 30
SUPPORTED_EXTENSIONS = (".csv", ".tsv", ".parquet", ".parq", ".json")


def _is_url(path) -> bool:
    return str(path).startswith(("http://", "https://"))


def _ext(path) -> str:
    return os.path.splitext(str(path).split("?")[0])[1].lower()


def _read_bytes(path) -> bytes:
    if _is_url(path):
        log.info("Fetching %s", path)
        with urlopen(str(path), timeout=URL_TIMEOUT_S) as resp:
            return resp.read()
    with open(path, "rb") as f:
        return f.read()


def load_json_records(path) -> list:
    """Parse a JSON file (or URL) holding an array of objects."""
    data = json.loads(_read_bytes(path))
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise ValueError(f"Expected a JSON array of objects in {path}, got {type(data).__name__}")
    log.info("Loaded %d JSON records from %s", len(data), path)
    return data


def load_file(path) -> pd.DataFrame:
    ext = _ext(path)
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file format: {ext}")
    if ext == ".json":
        df = json_flatten.records_to_frame(load_json_records(path))
    else:
        source = BytesIO(_read_bytes(path)) if _is_url(path) else path
        if ext == ".csv":
            df = pd.read_csv(source, na_values=NA_VALUES, keep_default_na=False)
        elif ext == ".tsv":
            df = pd.read_csv(source, sep="\t", na_values=NA_VALUES, keep_default_na=False)
        else:
            df = pd.read_parquet(source)
    log.info("Loaded %s: %d rows x %d columns", path, len(df), len(df.columns))
    return check_and_fix_df(df)


def load_file_pl(path) -> pl.DataFrame:
    """Polars counterpart of load_file. URLs are fetched into memory first."""
    ext = _ext(path)
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file format: {ext}")
    if ext == ".json":
        df = polars_json_flatten.records_to_frame(load_json_records(path))
    else:
        source = BytesIO(_read_bytes(path)) if _is_url(path) else path
        if ext == ".csv":
            df = pl.read_csv(source, null_values=NA_VALUES, infer_schema_length=None)
        elif ext == ".tsv":
            df = pl.read_csv(source, separator="\t", null_values=NA_VALUES, infer_schema_length=None)
        else:
            df = pl.read_parquet(source)
    log.info("Loaded %s: %d rows x %d columns", path, df.height, df.width)
    return df


def _resolve_output(path, output_dir):
    if output_dir is not None and not os.path.isabs(path):
        path = os.path.join(output_dir, path)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return path


def write_csv(df, path, output_dir=None) -> str:
    """Write a pandas or polars table to CSV with missing values as ``NA``.

    Nested columns (lists, dicts, structs) are refused; see
    ``stringify_nested`` and ``drop_nested``.
    """
    if isinstance(df, pl.DataFrame):
        nested = polars_json_flatten.nested_columns(df)
    else:
        nested = json_flatten.nested_columns(df)
    if nested:
        raise NestedColumnsException(nested)

    path = _resolve_output(str(path), output_dir)
    if isinstance(df, pl.DataFrame):
        df.write_csv(path, null_value="NA")
    else:
        df.to_csv(path, index=False, na_rep="NA")
    log.info("Wrote %s (%d rows)", path, len(df))
    return path


def get_metadata(df, path) -> dict:
    if isinstance(df, pl.DataFrame):
        columns = [{"name": n, "dtype": str(d)} for n, d in df.schema.items()]
    else:
        columns = [{"name": str(col), "dtype": str(df[col].dtype)} for col in df.columns]
    return {
        "path": str(path),
        "rows": len(df),
        "columns": columns,
    }
