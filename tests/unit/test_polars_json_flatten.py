"""Tests for the polars JSON flattening helpers.

Mirrors json_flatten_test.py; polars carries nesting in the schema
(List / Struct) rather than in object cells.
"""
import json

import polars as pl
import pytest

from tidyshape import json_flatten
from tidyshape.polars_json_flatten import (
    drop_nested, flatten_objects, nested_columns, records_to_frame,
    stringify_nested, unnest)


RECORDS = [
    {
        "id": 1,
        "tags": ["x", "y"],
        "pets": [{"kind": "cat", "n": 1}, {"kind": "dog", "n": 2}],
        "loc": {"lat": 1.0, "lon": 2.0},
    },
    {
        "id": 2,
        "tags": [],
        "pets": [],
        "loc": {"lat": 3.0, "lon": 4.0},
    },
]


@pytest.fixture
def nested_df():
    return records_to_frame(RECORDS)


def test_nested_columns(nested_df):
    assert nested_columns(nested_df) == ["tags", "pets", "loc"]


def test_unnest_list_of_structs(nested_df):
    out = unnest(nested_df, "pets")

    assert out.columns == ["id", "kind", "n"]
    assert out["id"].to_list() == [1, 1]
    assert out["kind"].to_list() == ["cat", "dog"]


def test_unnest_keep_empty(nested_df):
    out = unnest(nested_df, "pets", keep_empty=True)
    assert out["id"].to_list() == [1, 1, 2]
    assert out["kind"].to_list() == ["cat", "dog", None]


def test_unnest_list_of_scalars(nested_df):
    out = unnest(nested_df, "tags", keep=["id"])
    assert out.columns == ["id", "tags"]
    assert out["tags"].to_list() == ["x", "y"]


def test_unnest_struct_column(nested_df):
    out = unnest(nested_df, "loc")
    assert out.columns == ["id", "lat", "lon"]


def test_unnest_flat_column_rejected(nested_df):
    with pytest.raises(ValueError, match="not a list or struct"):
        unnest(nested_df, "id")


def test_unnest_key_clash_rejected():
    df = records_to_frame([{"id": 1, "pets": [{"id": 7}]}])
    with pytest.raises(ValueError, match="overwrite"):
        unnest(df, "pets")


def test_flatten_objects(nested_df):
    out = flatten_objects(nested_df)
    assert out.columns == ["id", "tags", "pets", "loc.lat", "loc.lon"]
    assert out["loc.lon"].to_list() == [2.0, 4.0]


def test_flatten_objects_recurses():
    df = records_to_frame([{"id": 1, "a": {"b": {"c": 5}}}])
    out = flatten_objects(df)
    assert out.columns == ["id", "a.b.c"]
    assert out["a.b.c"].to_list() == [5]


def test_stringify_nested(nested_df):
    out = stringify_nested(flatten_objects(nested_df))

    assert nested_columns(out) == []
    assert out["tags"].to_list() == ['["x", "y"]', "[]"]
    assert json.loads(out["pets"][0]) == RECORDS[0]["pets"]


def test_drop_nested(nested_df):
    assert drop_nested(nested_df).columns == ["id"]


def test_stringify_nested_matches_pandas(nested_df):
    pl_out = stringify_nested(flatten_objects(nested_df))
    pd_out = json_flatten.stringify_nested(
        json_flatten.flatten_objects(json_flatten.records_to_frame(RECORDS)))

    assert pl_out.columns == list(pd_out.columns)
    for col in ("tags", "pets"):
        assert pl_out[col].to_list() == pd_out[col].tolist()


def test_stringify_nested_ragged_objects_get_null_keys():
    records = [{"id": 1, "pets": [{"kind": "cat"}, {"kind": "dog", "n": 2}]}]

    pl_text = stringify_nested(records_to_frame(records))["pets"][0]
    pd_text = json_flatten.stringify_nested(json_flatten.records_to_frame(records))["pets"].iloc[0]

    assert pd_text == '[{"kind": "cat"}, {"kind": "dog", "n": 2}]'
    assert pl_text == '[{"kind": "cat", "n": null}, {"kind": "dog", "n": 2}]'
