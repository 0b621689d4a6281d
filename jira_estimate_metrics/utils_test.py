"""Tests for utility functions in Jira Estimate Metrics."""

import datetime
import json
import math

import numpy as np
import pandas as pd

from .utils import extend_dict, get_extension, to_plain, to_utc, write_data_frame


def test_extend_dict():
    """Test extend_dict function."""
    original = {"one": 1}
    assert extend_dict(original, {"two": 2}) == {"one": 1, "two": 2}
    assert original == {"one": 1}


def test_get_extension():
    """Test get_extension function."""
    assert get_extension("foo.csv") == ".csv"
    assert get_extension("/path/to/foo.csv") == ".csv"
    assert get_extension("foo") == ""
    assert get_extension("foo.JSON") == ".json"


def test_to_utc():
    """Test conversion of naive, aware and pandas times to UTC."""
    utc = datetime.timezone.utc

    naive = datetime.datetime(2024, 3, 15, 12, 0)
    assert to_utc(naive) == datetime.datetime(2024, 3, 15, 12, 0, tzinfo=utc)

    plus_two = datetime.timezone(datetime.timedelta(hours=2))
    aware = datetime.datetime(2024, 3, 15, 14, 0, tzinfo=plus_two)
    assert to_utc(aware) == datetime.datetime(2024, 3, 15, 12, 0, tzinfo=utc)
    assert to_utc(aware).tzinfo == utc

    stamp = pd.Timestamp("2024-03-15T12:00:00Z")
    assert to_utc(stamp) == datetime.datetime(2024, 3, 15, 12, 0, tzinfo=utc)


def test_to_plain():
    """Test conversion of numpy values to builtins."""
    assert to_plain(np.int64(3)) == 3
    assert isinstance(to_plain(np.int64(3)), int)
    assert isinstance(to_plain(np.float64(1.5)), float)
    assert to_plain(math.nan) is None
    assert to_plain([np.float64(1.0), (np.int64(2), np.nan)]) == [1.0, [2, None]]
    assert to_plain("foo") == "foo"


def test_write_data_frame_csv_and_json(tmp_path):
    """Test writing CSV and JSON files with and without the index."""
    data = pd.DataFrame(
        {"count": [1, 2]}, index=pd.Index([1.0, 3.0], name="estimate")
    )
    csv_file = str(tmp_path / "data.csv")
    json_file = str(tmp_path / "data.json")

    write_data_frame(data, [csv_file, json_file], "Test")

    df = pd.read_csv(csv_file)
    assert list(df.columns) == ["estimate", "count"]
    assert df["count"].tolist() == [1, 2]

    with open(json_file, encoding="utf-8") as f:
        assert json.load(f) == [
            {"estimate": 1.0, "count": 1},
            {"estimate": 3.0, "count": 2},
        ]


def test_write_data_frame_without_index(tmp_path):
    """Test that index=False leaves the index out of the file."""
    data = pd.DataFrame({"key": ["A-1"], "estimate": [1.0]})
    csv_file = str(tmp_path / "data.csv")

    write_data_frame(data, [csv_file], "Test", index=False)

    assert list(pd.read_csv(csv_file).columns) == ["key", "estimate"]
