"""Scatterplot and trend line calculators for Jira Estimate Metrics.

This module provides the estimate vs. actual hours points and the ordinary
least squares trend line fitted through them.
"""

import logging

from ..calculator import Calculator
from ..errors import UndefinedRegressionError
from ..stats import fit_trend_line
from ..utils import write_data_frame
from .effort import EffortDataCalculator, paired_records

logger = logging.getLogger(__name__)


class ScatterplotCalculator(Calculator):
    """Build a data frame of `key`, `estimate` and `actual_hours` for every
    issue with both an estimate and logged effort, in input order.
    """

    SCATTERPLOT_COLUMNS = ["key", "estimate", "actual_hours"]

    def run(self):
        effort_data = self.get_result(EffortDataCalculator)
        return paired_records(effort_data)[self.SCATTERPLOT_COLUMNS].reset_index(
            drop=True
        )

    def write(self):
        output_files = self.settings.get("scatterplot_data")
        if not output_files:
            logger.debug("No output file specified for scatterplot data")
            return

        write_data_frame(self.get_result(), output_files, "Scatterplot", index=False)


class TrendLineCalculator(Calculator):
    """Fit a `TrendLine` through the scatterplot points.

    Returns None when no trend can be fitted, e.g. when every issue has the
    same estimate.
    """

    def run(self):
        points = self.get_result(ScatterplotCalculator)

        try:
            trend = fit_trend_line(
                points["estimate"].tolist(), points["actual_hours"].tolist()
            )
        except UndefinedRegressionError as e:
            logger.info("No trend line available: %s", e)
            return None

        logger.debug(
            "Fitted trend line y = %.2fx + %.2f", trend.slope, trend.intercept
        )
        return trend
