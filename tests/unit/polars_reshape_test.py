import pandas as pd
import polars as pl
import pytest

from tidyshape import reshape
from tidyshape.polars_reshape import (
    column_span, count_flags, flag_longer, flag_wider,
    pivot_longer, pivot_wider, replace_na, separate_rows)


def test_separate_rows_splits_and_keeps_missing():
    df = pl.DataFrame({"id": [1, 2, 3], "s": ["a;b", None, "c"]})

    out = separate_rows(df, "s")

    assert out["id"].to_list() == [1, 1, 2, 3]
    assert out["s"].to_list() == ["a", "b", None, "c"]


def test_separate_rows_unknown_column():
    with pytest.raises(ValueError, match="not found"):
        separate_rows(pl.DataFrame({"id": [1]}), "s")


def test_replace_na():
    df = pl.DataFrame({"id": [1, 2], "s": ["a", None]})
    out = replace_na(df, {"s": "none_given"})
    assert out["s"].to_list() == ["a", "none_given"]


def test_column_span():
    df = pl.DataFrame({"a": [1], "b": [2], "c": [3]})
    assert column_span(df, "a", "b") == ["a", "b"]
    with pytest.raises(ValueError, match="comes after"):
        column_span(df, "c", "a")


def test_pivot_wider_basic():
    df = pl.DataFrame({"id": [1, 1, 2], "k": ["a", "b", "a"], "v": [1, 2, 3]})

    wide = pivot_wider(df, names_from="k", values_from="v", values_fill=0)

    assert wide.columns == ["id", "a", "b"]
    assert wide["a"].to_list() == [1, 3]
    assert wide["b"].to_list() == [2, 0]


def test_pivot_wider_first_appearance_order():
    df = pl.DataFrame({"id": ["z", "y", "z"], "k": ["q", "p", "p"], "v": [True, True, True]})

    wide = pivot_wider(df, names_from="k", values_from="v", values_fill=False)

    assert wide.columns == ["id", "q", "p"]
    assert wide["id"].to_list() == ["z", "y"]
    assert wide["q"].to_list() == [True, False]
    assert wide["q"].dtype == pl.Boolean


def test_pivot_wider_missing_names_become_na_column():
    df = pl.DataFrame({"id": [1, 2], "k": ["a", None], "v": [True, True]})
    wide = pivot_wider(df, names_from="k", values_from="v", values_fill=False)
    assert wide.columns == ["id", "a", "NA"]
    assert wide["NA"].to_list() == [False, True]


def test_pivot_wider_no_id_cols():
    df = pl.DataFrame({"k": ["a", "b"], "v": [1, 2]})
    wide = pivot_wider(df, names_from="k", values_from="v")
    assert wide.columns == ["a", "b"]
    assert wide.height == 1


def test_pivot_wider_duplicates_rejected():
    df = pl.DataFrame({"id": [1, 1], "k": ["a", "a"], "v": [1, 2]})
    with pytest.raises(ValueError, match="not uniquely identified"):
        pivot_wider(df, names_from="k", values_from="v")


def test_pivot_wider_name_clash_rejected():
    df = pl.DataFrame({"id": [1, 2], "k": ["id", "b"], "v": [1, 2]})
    with pytest.raises(ValueError, match="clash"):
        pivot_wider(df, names_from="k", values_from="v")


def test_pivot_longer_row_major():
    df = pl.DataFrame({"id": [1, 2], "a": [10, 30], "b": [20, 40]})

    long = pivot_longer(df, ["a", "b"], names_to="key", values_to="val")

    assert long.columns == ["id", "key", "val"]
    assert long["id"].to_list() == [1, 1, 2, 2]
    assert long["key"].to_list() == ["a", "b", "a", "b"]
    assert long["val"].to_list() == [10, 20, 30, 40]


def test_pivot_longer_drop_na():
    df = pl.DataFrame({"id": [1, 2], "a": [1.0, None], "b": [2.0, 3.0]})
    long = pivot_longer(df, ["a", "b"], values_drop_na=True)
    assert long["name"].to_list() == ["a", "b", "b"]


def test_count_flags():
    df = pl.DataFrame({"a": [True, False], "b": [True, None]})
    out = count_flags(df, ["a", "b"], "n")
    assert out["n"].to_list() == [2, 0]


def test_flag_wider_then_longer_round_trip():
    df = pl.DataFrame({"id": [1, 2, 3], "items": ["x;y", None, "y"]})

    wide = flag_wider(df, "items", na_label="nothing")
    assert wide.columns == ["id", "x", "y", "nothing"]
    assert wide["y"].to_list() == [True, False, True]

    long = flag_longer(wide, ["x", "y", "nothing"], names_to="items")
    assert long.columns == ["id", "items"]
    assert long["id"].to_list() == [1, 1, 2, 3]
    assert long["items"].to_list() == ["x", "y", "nothing", "y"]


def test_wide_long_wide_is_stable():
    df = pl.DataFrame({"id": [1, 2], "items": ["x;y", "y"]})

    wide = flag_wider(df, "items")
    again = flag_wider(flag_longer(wide, ["x", "y"], names_to="items"), "items")

    assert again.equals(wide)


def test_flag_longer_missing_flag_is_not_true():
    df = pl.DataFrame({"id": [1, 2], "x": [True, None], "y": [False, True]})

    long = flag_longer(df, ["x", "y"], names_to="item")

    assert long.rows() == [(1, "x"), (2, "y")]


def test_pivot_longer_output_name_reused_from_cols():
    df = pl.DataFrame({"id": [1], "a": [1], "value": [2]})
    with pytest.raises(ValueError, match="'value' already exists"):
        pivot_longer(df, ["a", "value"])


def test_separate_rows_leaves_non_strings_alone():
    data = {"id": [1, 2], "s": [5, 6]}

    out = separate_rows(pl.DataFrame(data), "s")

    assert out["s"].to_list() == [5, 6]
    assert out["s"].to_list() == reshape.separate_rows(pd.DataFrame(data), "s")["s"].tolist()


def test_separate_rows_explodes_list_column():
    df = pl.DataFrame({"id": [1, 2], "s": [["a", "b"], ["c"]]})
    out = separate_rows(df, "s")
    assert out.rows() == [(1, "a"), (1, "b"), (2, "c")]
