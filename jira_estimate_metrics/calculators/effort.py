"""Effort data calculator for Jira Estimate Metrics.

This module fetches raw issues from the record source, extracts estimate and
effort values and applies the configured time window.
"""

import datetime
import logging

import pandas as pd

from ..calculator import Calculator
from ..common_constants import EFFORT_DATA_COLUMNS
from ..extractor import ExtractionSettings, extract_records
from ..utils import write_data_frame
from ..window import TimeWindow, filter_by_window

logger = logging.getLogger(__name__)


def records_to_data_frame(records):
    """Build the effort data frame for a list of `EffortRecord`s."""
    return pd.DataFrame(
        {
            "key": pd.Series([r.key for r in records], dtype="object"),
            "estimate": pd.Series([r.estimate for r in records], dtype="float64"),
            "actual_hours": pd.Series(
                [r.actual_hours for r in records], dtype="float64"
            ),
            "updated": pd.to_datetime(
                pd.Series([r.updated for r in records], dtype="object"), utc=True
            ),
        },
        columns=EFFORT_DATA_COLUMNS,
    )


def paired_records(effort_data):
    """Rows with both a positive estimate and positive logged effort."""
    mask = (effort_data["estimate"] > 0) & (effort_data["actual_hours"] > 0)
    return effort_data[mask]


def effort_only_records(effort_data):
    """Rows with logged effort but no usable estimate."""
    mask = (effort_data["estimate"] <= 0) & (effort_data["actual_hours"] > 0)
    return effort_data[mask]


class EffortDataCalculator(Calculator):
    """Build a data frame with one row per issue that carries an estimate
    and/or logged effort, with the columns `key`, `estimate`,
    `actual_hours` and `updated`.

    Only issues updated within the `window` setting (relative to the `now`
    setting, or the current time) are included. Issues with neither an
    estimate nor logged effort are dropped. The number of raw issues and of
    malformed issues skipped during extraction are recorded in the data
    frame's `attrs` as `total_records` and `skipped_records`.
    """

    def run(self):
        window = self.settings.get("window")
        if window is None:
            window = TimeWindow.ALL
        now = self.settings.get("now") or datetime.datetime.now(datetime.timezone.utc)

        raw_records = list(self.record_source.fetch_records(window))
        extraction = extract_records(
            raw_records, ExtractionSettings.from_settings(self.settings)
        )

        records = filter_by_window(extraction.records, window, now)
        records = [r for r in records if r.has_estimate or r.has_effort]

        logger.info(
            "%d of %d issues have an estimate or logged effort in window %s",
            len(records),
            len(raw_records),
            window,
        )

        data = records_to_data_frame(records)
        data.attrs["total_records"] = len(raw_records)
        data.attrs["skipped_records"] = extraction.skipped
        return data

    def write(self):
        output_files = self.settings.get("effort_data")
        if not output_files:
            logger.debug("No output file specified for effort data")
            return

        write_data_frame(self.get_result(), output_files, "Effort", index=False)
