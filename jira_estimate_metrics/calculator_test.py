"""Tests for calculator functionality in Jira Estimate Metrics.

This module contains unit tests for the base Calculator class and calculator utilities.
"""

import pytest

from .calculator import Calculator, run_calculators


def test_run_calculator():
    """Test run_calculator functionality."""
    written = []

    class Enabled(Calculator):
        """Test calculator that is enabled."""

        def run(self):
            return "Enabled"

        def write(self):
            written.append("Enabled")

    class Disabled(Calculator):
        """Test calculator that is disabled."""

        def run(self):
            return "Disabled"

        def write(self):
            pass

    class GetPreviousResult(Calculator):
        """Test calculator that gets previous results."""

        def run(self):
            return self.get_result(Enabled) + " " + self.settings["foo"]

        def write(self):
            written.append(self.get_result())

    calculators = [Enabled, Disabled, GetPreviousResult]
    record_source = object()
    settings = {"foo": "bar"}

    results = run_calculators(calculators, record_source, settings)

    assert results == {
        Enabled: "Enabled",
        Disabled: "Disabled",
        GetPreviousResult: "Enabled bar",
    }

    assert written == ["Enabled", "Enabled bar"]


def test_run_calculators_without_writing():
    """Test that write=False skips all writers."""
    written = []

    class Writer(Calculator):
        """Test calculator that records writes."""

        def run(self):
            return 1

        def write(self):
            written.append(1)

    results = run_calculators([Writer], None, {}, write=False)

    assert results == {Writer: 1}
    assert written == []


def test_failing_writer_does_not_stop_others():
    """Test that an OSError in one writer is logged and later writers run."""
    written = []

    class Broken(Calculator):
        """Test calculator whose writer fails."""

        def write(self):
            raise OSError("disk full")

    class Working(Calculator):
        """Test calculator whose writer succeeds."""

        def write(self):
            written.append("Working")

    run_calculators([Broken, Working], None, {})

    assert written == ["Working"]


def test_failing_run_propagates():
    """Test that errors raised while running are not swallowed."""

    class Failing(Calculator):
        """Test calculator that fails to run."""

        def run(self):
            raise ValueError("bad input")

    with pytest.raises(ValueError):
        run_calculators([Failing], None, {})
