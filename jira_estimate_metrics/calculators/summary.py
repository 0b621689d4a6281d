"""Summary calculator for Jira Estimate Metrics.

This module compares each estimate group's mean effort with what the global
hours-per-point ratio predicts for it.
"""

import logging

import pandas as pd

from ..calculator import Calculator
from ..stats import (
    classify_deviation,
    expected_hours_per_point,
    percent_difference,
)
from ..utils import write_data_frame
from .effort import EffortDataCalculator, paired_records

logger = logging.getLogger(__name__)


class SummaryCalculator(Calculator):
    """Build one summary row per estimate with `mean_hours`,
    `std_dev_hours` (population standard deviation), `count`,
    `percent_diff` and `classification`.

    The expected hours for an estimate are the estimate multiplied by the
    total hours over the total points of all issues with both values.
    """

    SUMMARY_COLUMNS = [
        "mean_hours",
        "std_dev_hours",
        "count",
        "percent_diff",
        "classification",
    ]

    def run(self):
        effort_data = self.get_result(EffortDataCalculator)
        paired = paired_records(effort_data)

        hours_per_point = expected_hours_per_point(
            paired["actual_hours"].sum(), paired["estimate"].sum()
        )
        logger.debug("Expected hours per point: %.2f", hours_per_point)

        estimates = []
        rows = []
        for estimate, group in paired.groupby("estimate", sort=True):
            mean_hours = float(group["actual_hours"].mean())
            percent_diff = percent_difference(mean_hours, estimate, hours_per_point)
            estimates.append(estimate)
            rows.append(
                {
                    "mean_hours": mean_hours,
                    "std_dev_hours": float(group["actual_hours"].std(ddof=0)),
                    "count": len(group),
                    "percent_diff": percent_diff,
                    "classification": classify_deviation(percent_diff),
                }
            )

        data = pd.DataFrame(
            rows,
            index=pd.Index(estimates, name="estimate", dtype="float64"),
            columns=self.SUMMARY_COLUMNS,
        )
        data.attrs["expected_hours_per_point"] = hours_per_point
        return data

    def write(self):
        output_files = self.settings.get("summary_data")
        if not output_files:
            logger.debug("No output file specified for summary data")
            return

        write_data_frame(self.get_result(), output_files, "Summary")
