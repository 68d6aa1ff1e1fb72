import io
import json

import pandas as pd
import polars as pl
import pytest

from tidyshape import data_loading
from tidyshape.data_loading import (
    get_metadata, load_file, load_file_pl, load_json_records, write_csv)
from tidyshape.lesson import sample_data
from tidyshape.serialization_utils import NestedColumnsException


@pytest.fixture
def sample_dir(tmp_path):
    sample_data.generate_all(str(tmp_path))
    return tmp_path


def test_generate_all_writes_files(sample_dir):
    for name in ("SAFI_clean.csv", "SAFI.json", "SAFI_clean.parquet", "manifest.json"):
        assert (sample_dir / name).exists()
    manifest = json.loads((sample_dir / "manifest.json").read_text())
    assert [m["rows"] for m in manifest] == [8, 8, 8]


def test_load_csv_reads_na_as_missing(sample_dir):
    df = load_file(str(sample_dir / "SAFI_clean.csv"))

    assert df.shape == (8, 14)
    assert int(df["memb_assoc"].isna().sum()) == 4
    assert int(df["items_owned"].isna().sum()) == 2
    # "none" is an answer, not a missing value
    assert (df["months_lack_food"] == "none").sum() == 2


def test_load_csv_polars(sample_dir):
    df = load_file_pl(str(sample_dir / "SAFI_clean.csv"))

    assert df.shape == (8, 14)
    assert df["memb_assoc"].null_count() == 4
    assert df["items_owned"].null_count() == 2


def test_load_parquet(sample_dir):
    df = load_file(str(sample_dir / "SAFI_clean.parquet"))
    assert df.shape == (8, 14)
    assert load_file_pl(str(sample_dir / "SAFI_clean.parquet")).shape == (8, 14)


def test_load_json_keeps_nesting(sample_dir):
    df = load_file(str(sample_dir / "SAFI.json"))
    assert isinstance(df["F_liv"].iloc[0], list)

    pl_df = load_file_pl(str(sample_dir / "SAFI.json"))
    assert isinstance(pl_df.schema["F_liv"], pl.List)


def test_load_json_records_rejects_non_array(tmp_path):
    path = tmp_path / "obj.json"
    path.write_text(json.dumps({"a": 1}))
    with pytest.raises(ValueError, match="array of objects"):
        load_json_records(str(path))


def test_unsupported_format(tmp_path):
    with pytest.raises(ValueError, match="Unsupported file format"):
        load_file(str(tmp_path / "data.xlsx"))
    with pytest.raises(ValueError, match="Unsupported file format"):
        load_file_pl(str(tmp_path / "data.xlsx"))


def test_write_csv_creates_output_dir(tmp_path):
    df = pd.DataFrame({"a": [1, None], "b": ["x", "y"]})

    path = write_csv(df, "out.csv", output_dir=str(tmp_path / "data_output"))

    text = open(path).read().splitlines()
    assert text == ["a,b", "1.0,x", "NA,y"]


def test_write_csv_polars(tmp_path):
    df = pl.DataFrame({"a": [1, None], "b": ["x", "y"]})
    path = write_csv(df, str(tmp_path / "nested" / "out.csv"))
    assert open(path).read().splitlines() == ["a,b", "1,x", "NA,y"]


def test_write_csv_refuses_nested(tmp_path):
    df = pd.DataFrame({"a": [1], "b": [[1, 2]]})
    with pytest.raises(NestedColumnsException, match="'b'"):
        write_csv(df, str(tmp_path / "out.csv"))
    # the exception is a TypeError, like the library error it stands for
    with pytest.raises(TypeError):
        write_csv(pl.DataFrame({"a": [1], "b": [[1, 2]]}), str(tmp_path / "out.csv"))


def test_get_metadata():
    df = pd.DataFrame({"a": [1, 2], "b": ["x", "y"]})
    meta = get_metadata(df, "some.csv")
    assert meta["rows"] == 2
    assert [c["name"] for c in meta["columns"]] == ["a", "b"]
    assert get_metadata(pl.from_pandas(df), "some.csv")["columns"][0] == {"name": "a", "dtype": "Int64"}


@pytest.fixture
def served(sample_dir, monkeypatch):
    """Answer urlopen from the generated sample files, recording each URL fetched."""
    fetched = []

    def fake_urlopen(url, timeout=None):
        fetched.append(url)
        return io.BytesIO((sample_dir / url.rsplit("/", 1)[1]).read_bytes())

    monkeypatch.setattr(data_loading, "urlopen", fake_urlopen)
    return fetched


BASE_URL = "https://example.org/safi"


@pytest.mark.parametrize("loader", [load_file, load_file_pl])
def test_load_csv_from_url(served, loader):
    df = loader(f"{BASE_URL}/SAFI_clean.csv")

    assert df.shape == (8, 14)
    assert served == [f"{BASE_URL}/SAFI_clean.csv"]


@pytest.mark.parametrize("loader", [load_file, load_file_pl])
def test_load_parquet_from_url(served, loader):
    assert loader(f"{BASE_URL}/SAFI_clean.parquet").shape == (8, 14)


def test_load_json_from_url(served):
    df = load_file(f"{BASE_URL}/SAFI.json")
    assert isinstance(df["F_liv"].iloc[0], list)

    pl_df = load_file_pl(f"{BASE_URL}/SAFI.json")
    assert isinstance(pl_df.schema["F_liv"], pl.List)

    assert len(load_json_records(f"{BASE_URL}/SAFI.json")) == 8
    assert served == [f"{BASE_URL}/SAFI.json"] * 3


def test_unsupported_url_is_not_fetched(served):
    with pytest.raises(ValueError, match="Unsupported file format"):
        load_file(f"{BASE_URL}/data.xlsx")
    assert served == []
