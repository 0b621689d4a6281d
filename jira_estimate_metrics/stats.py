"""Statistics for estimate vs. actual effort analysis.

This module holds the pure numeric algorithms used by the calculators:

- Nearest-rank quartiles with clamped whiskers and outliers (boxplots).
- Ordinary least squares trend lines (scatterplots).
- Fixed-bucket effort histograms.
- Deviation of each estimate group from the global hours-per-point ratio.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .common_constants import (
    DEVIATION_THRESHOLDS,
    HIGH_DEVIATION,
    HISTOGRAM_BUCKETS,
    TREND_LINE_PADDING,
    UNDEFINED_DEVIATION,
    WHISKER_IQR_FACTOR,
)
from .errors import InvalidArgumentError, UndefinedRegressionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoxplotStats:
    """Boxplot statistics for one group of samples."""

    count: int
    q1: float
    median: float
    q3: float
    iqr: float
    lower_whisker: float
    upper_whisker: float
    outliers: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class TrendLine:
    """A fitted line `y = slope * x + intercept` and the two points used to
    draw it.
    """

    slope: float
    intercept: float
    start: Tuple[float, float]
    end: Tuple[float, float]

    def predict(self, x):
        """Evaluate the fitted line at `x`."""
        return self.slope * x + self.intercept


def nearest_rank_quartiles(sorted_values: Sequence[float]) -> Tuple[float, float, float]:
    """Return `(q1, median, q3)` of an ascending sequence by nearest rank.

    The quartiles are the elements at indices `floor(n * 0.25)`,
    `floor(n * 0.5)` and `floor(n * 0.75)`. No interpolation takes place, so
    e.g. for `[1, 2, 3, 4]` the median is 3, not 2.5.
    """
    n = len(sorted_values)
    if n == 0:
        raise InvalidArgumentError("Cannot compute quartiles of an empty sample")

    return (
        sorted_values[math.floor(n * 0.25)],
        sorted_values[math.floor(n * 0.5)],
        sorted_values[math.floor(n * 0.75)],
    )


def boxplot_stats(values: Sequence[float]) -> BoxplotStats:
    """Compute nearest-rank boxplot statistics for `values`.

    Whiskers reach 1.5 IQR beyond the quartiles but are clamped to the
    observed minimum and maximum. Outliers are the values strictly outside
    the whiskers.
    """
    hours = sorted(values)
    q1, median, q3 = nearest_rank_quartiles(hours)
    iqr = q3 - q1

    lower_whisker = max(hours[0], q1 - WHISKER_IQR_FACTOR * iqr)
    upper_whisker = min(hours[-1], q3 + WHISKER_IQR_FACTOR * iqr)

    return BoxplotStats(
        count=len(hours),
        q1=q1,
        median=median,
        q3=q3,
        iqr=iqr,
        lower_whisker=lower_whisker,
        upper_whisker=upper_whisker,
        outliers=[h for h in hours if h < lower_whisker or h > upper_whisker],
    )


def linear_regression(xs: Sequence[float], ys: Sequence[float]) -> Tuple[float, float]:
    """Fit `y = slope * x + intercept` by ordinary least squares.

    Returns `(slope, intercept)`. Raises `UndefinedRegressionError` when there
    are fewer than two points or the x values do not vary.
    """
    if len(xs) != len(ys):
        raise InvalidArgumentError(
            f"x and y must have the same length, got {len(xs)} and {len(ys)}"
        )

    n = len(xs)
    if n < 2 or len(set(xs)) < 2:
        raise UndefinedRegressionError(
            f"Need at least two distinct estimate values to fit a trend, "
            f"got {len(set(xs))}"
        )

    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)

    with np.errstate(over="ignore", invalid="ignore"):
        sum_x = x.sum()
        sum_y = y.sum()
        sum_xy = (x * y).sum()
        sum_xx = (x * x).sum()
        denominator = n * sum_xx - sum_x**2

    if not math.isfinite(denominator):
        raise UndefinedRegressionError("Estimate values are too large to fit a trend")
    if denominator == 0:
        raise UndefinedRegressionError("Estimate values have zero variance")

    with np.errstate(over="ignore", invalid="ignore"):
        slope = (n * sum_xy - sum_x * sum_y) / denominator
        intercept = (sum_y - slope * sum_x) / n

    if not (math.isfinite(slope) and math.isfinite(intercept)):
        raise UndefinedRegressionError("Trend line is not finite")
    return float(slope), float(intercept)


def fit_trend_line(xs: Sequence[float], ys: Sequence[float]) -> TrendLine:
    """Fit a trend line and work out where to draw it.

    The line spans the observed x range extended by 10% of that range on each
    side, never starting below zero. A zero range counts as 1. Drawn y values
    are clamped at zero.
    """
    slope, intercept = linear_regression(xs, ys)

    min_x = float(min(xs))
    max_x = float(max(xs))
    padding = ((max_x - min_x) or 1) * TREND_LINE_PADDING
    start_x = max(0.0, min_x - padding)
    end_x = max_x + padding

    return TrendLine(
        slope=slope,
        intercept=intercept,
        start=(start_x, max(0.0, slope * start_x + intercept)),
        end=(end_x, max(0.0, slope * end_x + intercept)),
    )


def bucket_index(hours: float, buckets=HISTOGRAM_BUCKETS) -> Optional[int]:
    """Return the index of the first bucket with `min <= hours < max`, or
    None if no bucket contains `hours`.
    """
    for i, (_, lower, upper) in enumerate(buckets):
        if lower <= hours < upper:
            return i
    return None


def bucket_counts(values: Sequence[float], buckets=HISTOGRAM_BUCKETS) -> List[int]:
    """Count how many of `values` fall into each bucket."""
    counts = [0] * len(buckets)
    for value in values:
        index = bucket_index(value, buckets)
        if index is not None:
            counts[index] += 1
    return counts


def expected_hours_per_point(total_hours: float, total_points: float) -> float:
    """Global hours-per-point ratio, or 0.0 when there are no points."""
    if total_points <= 0:
        return 0.0
    return total_hours / total_points


def percent_difference(
    mean_hours: float, estimate: float, hours_per_point: float
) -> Optional[float]:
    """Relative difference between a group's mean hours and the hours its
    estimate should take at `hours_per_point`, or None if that is zero.
    """
    expected = estimate * hours_per_point
    if expected == 0:
        return None
    return abs(mean_hours - expected) / expected


def classify_deviation(percent_diff: Optional[float]) -> str:
    """Classify a percent difference as on-target, moderate or high deviation."""
    if percent_diff is None or math.isnan(percent_diff):
        return UNDEFINED_DEVIATION

    for classification, upper in DEVIATION_THRESHOLDS:
        if percent_diff < upper:
            return classification

    return HIGH_DEVIATION
