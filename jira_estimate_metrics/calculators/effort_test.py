"""Tests for the effort data calculator in Jira Estimate Metrics."""

import datetime
import json
import os

import pandas as pd

from ..sources import StaticRecordSource
from ..test_data import make_issue
from ..utils import extend_dict
from ..window import TimeWindow
from .effort import EffortDataCalculator, effort_only_records, paired_records


def test_columns(common_results):
    """Test the effort data columns and types."""
    data = common_results[EffortDataCalculator]

    assert list(data.columns) == ["key", "estimate", "actual_hours", "updated"]
    assert str(data["estimate"].dtype) == "float64"
    assert str(data["actual_hours"].dtype) == "float64"


def test_drops_issues_without_estimate_or_effort(common_results):
    """Test that only issues with an estimate or effort are kept."""
    data = common_results[EffortDataCalculator]

    assert data["key"].tolist() == [
        "A-1",
        "A-2",
        "A-3",
        "A-4",
        "A-5",
        "A-6",
        "A-7",
        "A-8",
        "A-10",
    ]
    assert data.attrs["total_records"] == 10
    assert data.attrs["skipped_records"] == 0


def test_values(common_results):
    """Test estimate and hour values of the first issue."""
    data = common_results[EffortDataCalculator]

    assert data.iloc[0]["estimate"] == 1.0
    assert data.iloc[0]["actual_hours"] == 2.0
    assert data.iloc[0]["updated"] == pd.Timestamp("2024-03-15T11:30:00Z")


def test_paired_and_effort_only(common_results):
    """Test splitting records by which values they carry."""
    data = common_results[EffortDataCalculator]

    assert paired_records(data)["key"].tolist() == [
        "A-1",
        "A-2",
        "A-3",
        "A-4",
        "A-5",
        "A-6",
        "A-10",
    ]
    assert effort_only_records(data)["key"].tolist() == ["A-7"]


def test_window(common_issues, base_minimal_settings):
    """Test that the window setting filters issues by update time."""
    settings = extend_dict(base_minimal_settings, {"window": TimeWindow.PAST_WEEK})

    data = EffortDataCalculator(StaticRecordSource(common_issues), settings, {}).run()

    assert data["key"].tolist() == ["A-1", "A-2", "A-3", "A-7", "A-8"]
    assert data.attrs["total_records"] == 10


def test_skipped_records_counted(base_minimal_settings):
    """Test that malformed issues are skipped and counted."""
    issues = [make_issue("A-1", estimate=1, seconds=3600), {"fields": {}}]

    data = EffortDataCalculator(
        StaticRecordSource(issues), base_minimal_settings, {}
    ).run()

    assert data["key"].tolist() == ["A-1"]
    assert data.attrs["total_records"] == 2
    assert data.attrs["skipped_records"] == 1


def test_empty(base_minimal_settings):
    """Test that no issues give an empty frame with the right columns."""
    data = EffortDataCalculator(StaticRecordSource([]), base_minimal_settings, {}).run()

    assert len(data.index) == 0
    assert list(data.columns) == ["key", "estimate", "actual_hours", "updated"]


def test_defaults_now_to_current_time(base_minimal_settings):
    """Test that a missing `now` uses the current time."""
    recent = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(
        minutes=5
    )
    issues = [make_issue("A-1", recent.isoformat(), 1, 3600)]
    settings = extend_dict(
        base_minimal_settings, {"now": None, "window": TimeWindow.PAST_HOUR}
    )

    data = EffortDataCalculator(StaticRecordSource(issues), settings, {}).run()

    assert data["key"].tolist() == ["A-1"]


def test_write_json(common_issues, base_minimal_settings, tmp_path):
    """Test writing effort data to a JSON file."""
    output_file = str(tmp_path / "effort.json")
    settings = extend_dict(base_minimal_settings, {"effort_data": [output_file]})
    results = {}

    calculator = EffortDataCalculator(
        StaticRecordSource(common_issues), settings, results
    )
    results[EffortDataCalculator] = calculator.run()
    calculator.write()

    assert os.path.exists(output_file)
    with open(output_file, encoding="utf-8") as f:
        data = json.load(f)

    assert len(data) == 9
    assert set(data[0].keys()) == {"key", "estimate", "actual_hours", "updated"}
    assert data[0]["key"] == "A-1"
