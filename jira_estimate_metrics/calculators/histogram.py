"""Histogram calculator for Jira Estimate Metrics.

This module buckets logged effort into fixed hour ranges, with one series per
estimate value.
"""

import logging

import pandas as pd

from ..calculator import Calculator
from ..common_constants import HISTOGRAM_BUCKETS, NO_ESTIMATE_SERIES
from ..stats import bucket_counts
from ..utils import write_data_frame
from .effort import EffortDataCalculator, effort_only_records, paired_records

logger = logging.getLogger(__name__)


def format_estimate(estimate):
    """Label an estimate group, e.g. `3 SP` or `0.5 SP`.

    The number is written in full so that distinct estimates never share a
    label.
    """
    text = repr(float(estimate))
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text} SP"


class HistogramCalculator(Calculator):
    """Build a histogram of `actual_hours` over the fixed buckets in
    `HISTOGRAM_BUCKETS`.

    Returns a data frame indexed by bucket label with one integer column per
    estimate value (ascending, labelled e.g. `3 SP`) and a final `No estimate`
    column for issues with logged effort but no estimate. Columns without any
    items are left out.
    """

    def run(self):
        effort_data = self.get_result(EffortDataCalculator)
        paired = paired_records(effort_data)

        series = {}
        for estimate, group in paired.groupby("estimate", sort=True):
            series[format_estimate(estimate)] = bucket_counts(
                group["actual_hours"].tolist()
            )

        series[NO_ESTIMATE_SERIES] = bucket_counts(
            effort_only_records(effort_data)["actual_hours"].tolist()
        )

        data = pd.DataFrame(
            {name: counts for name, counts in series.items() if any(counts)},
            index=pd.Index([label for label, _, _ in HISTOGRAM_BUCKETS], name="range"),
            dtype="int64",
        )
        logger.debug("Histogram has %d series", len(data.columns))
        return data

    def write(self):
        output_files = self.settings.get("histogram_data")
        if not output_files:
            logger.debug("No output file specified for histogram data")
            return

        write_data_frame(self.get_result(), output_files, "Histogram")
