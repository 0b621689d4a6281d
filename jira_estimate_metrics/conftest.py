"""Test configuration and fixtures for Jira Estimate Metrics.

This module provides fixtures with raw issue data, settings and calculator
results for testing the metrics calculations.
"""

import datetime

import pytest
from mock import Mock

from .calculator import run_calculators
from .dashboard import ANALYSIS_CALCULATORS
from .sources import StaticRecordSource
from .test_data import COMMON_ISSUES, HOUR, make_issue
from .window import TimeWindow

# Fixtures


@pytest.fixture(name="now")
def fixture_now():
    """The fixed `now` the common issues are dated against."""
    return datetime.datetime(2024, 3, 15, 12, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture(name="base_minimal_settings")
def minimal_settings(now):
    """The smallest `settings` required to run the analysis calculators."""
    return {
        "window": TimeWindow.ALL,
        "now": now,
        "estimate_fields": None,
        "estimate_field": None,
        "estimate_heuristic": True,
        "custom_field_pattern": None,
    }


@pytest.fixture(name="common_issues")
def fixture_common_issues():
    """Raw issues with a mix of estimates, effort and update times."""
    return list(COMMON_ISSUES)


@pytest.fixture(name="example_issues")
def fixture_example_issues():
    """Three 1-point issues of 2, 3 and 4 hours and one 3-point issue of 9."""
    return [
        make_issue("E-1", estimate=1, seconds=2 * HOUR),
        make_issue("E-2", estimate=1, seconds=3 * HOUR),
        make_issue("E-3", estimate=1, seconds=4 * HOUR),
        make_issue("E-4", estimate=3, seconds=9 * HOUR),
    ]


def _run_analysis(issues, settings):
    return run_calculators(
        ANALYSIS_CALCULATORS, StaticRecordSource(issues), settings, write=False
    )


@pytest.fixture(name="common_results")
def fixture_common_results(common_issues, base_minimal_settings):
    """Analysis results for the common issues over all time."""
    return _run_analysis(common_issues, base_minimal_settings)


@pytest.fixture(name="example_results")
def fixture_example_results(example_issues, base_minimal_settings):
    """Analysis results for the example issues."""
    return _run_analysis(example_issues, base_minimal_settings)


@pytest.fixture(name="empty_results")
def fixture_empty_results(base_minimal_settings):
    """Analysis results when there are no issues at all."""
    return _run_analysis([], base_minimal_settings)


@pytest.fixture(name="mock_jira")
def fixture_mock_jira(common_issues):
    """A JIRA client whose searches return the common issues."""
    jira = Mock()
    jira.search_issues = Mock(
        return_value=[Mock(raw=raw, key=raw["key"]) for raw in common_issues]
    )
    return jira
