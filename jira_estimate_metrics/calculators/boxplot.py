"""Boxplot calculator for Jira Estimate Metrics.

This module groups issues by estimate and computes nearest-rank boxplot
statistics of the logged hours in each group.
"""

import logging

import pandas as pd

from ..calculator import Calculator
from ..stats import boxplot_stats
from ..utils import write_data_frame
from .effort import EffortDataCalculator, paired_records

logger = logging.getLogger(__name__)


class BoxplotCalculator(Calculator):
    """Build boxplot statistics of `actual_hours` for each distinct estimate.

    Returns a data frame indexed by estimate (ascending) with the columns in
    `BOXPLOT_COLUMNS`. Only issues with both an estimate and logged effort
    take part.
    """

    BOXPLOT_COLUMNS = [
        "count",
        "lower_whisker",
        "q1",
        "median",
        "q3",
        "upper_whisker",
        "iqr",
        "outliers",
    ]

    def run(self):
        effort_data = self.get_result(EffortDataCalculator)
        paired = paired_records(effort_data)

        estimates = []
        rows = []
        for estimate, group in paired.groupby("estimate", sort=True):
            stats = boxplot_stats(group["actual_hours"].tolist())
            estimates.append(estimate)
            rows.append(
                {
                    "count": stats.count,
                    "lower_whisker": stats.lower_whisker,
                    "q1": stats.q1,
                    "median": stats.median,
                    "q3": stats.q3,
                    "upper_whisker": stats.upper_whisker,
                    "iqr": stats.iqr,
                    "outliers": stats.outliers,
                }
            )

        logger.debug("Calculated boxplot statistics for %d estimates", len(rows))

        return pd.DataFrame(
            rows,
            index=pd.Index(estimates, name="estimate", dtype="float64"),
            columns=self.BOXPLOT_COLUMNS,
        )

    def write(self):
        output_files = self.settings.get("boxplot_data")
        if not output_files:
            logger.debug("No output file specified for boxplot data")
            return

        write_data_frame(self.get_result(), output_files, "Boxplot")
