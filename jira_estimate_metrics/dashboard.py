"""Dashboard data for Jira Estimate Metrics.

`recompute` is the single entry point for callers that redraw a dashboard
whenever the issue set or the time window changes. It runs the analysis
calculators over an in-memory list of raw issues and returns chart-ready
series as plain Python data.

Each chart has the shape::

    {"labels": [str, ...], "series": [{"name": str, "values": [...], "meta": {...}}]}

where `meta` is only present on some series.
"""

import json
import logging

from .calculator import Calculator, run_calculators
from .calculators.boxplot import BoxplotCalculator
from .calculators.effort import EffortDataCalculator
from .calculators.histogram import HistogramCalculator, format_estimate
from .calculators.scatterplot import ScatterplotCalculator, TrendLineCalculator
from .calculators.summary import SummaryCalculator
from .sources import StaticRecordSource
from .utils import extend_dict, get_extension, to_plain
from .window import TimeWindow, describe_window

logger = logging.getLogger(__name__)

ANALYSIS_CALCULATORS = (
    EffortDataCalculator,  # should come first
    # -- others depend on results from this one
    BoxplotCalculator,
    ScatterplotCalculator,
    TrendLineCalculator,  # needs the scatterplot points
    HistogramCalculator,
    SummaryCalculator,
)

BOXPLOT_SERIES = [
    ("Lower whisker", "lower_whisker"),
    ("Q1", "q1"),
    ("Median", "median"),
    ("Q3", "q3"),
    ("Upper whisker", "upper_whisker"),
]


def _empty_chart():
    return {"labels": [], "series": []}


def boxplot_chart(boxplot_data):
    """Shape boxplot statistics as one series per statistic, plus an
    `Outliers` series counting outliers with the values themselves in `meta`.
    """
    if len(boxplot_data.index) == 0:
        return _empty_chart()

    series = [
        {"name": name, "values": to_plain(boxplot_data[column].tolist())}
        for name, column in BOXPLOT_SERIES
    ]
    series.append(
        {
            "name": "Outliers",
            "values": [len(o) for o in boxplot_data["outliers"]],
            "meta": {
                "outliers": [to_plain(o) for o in boxplot_data["outliers"]],
                "counts": to_plain(boxplot_data["count"].tolist()),
            },
        }
    )

    return {
        "labels": [format_estimate(e) for e in boxplot_data.index],
        "series": series,
    }


def scatter_chart(points, trend):
    """Shape scatterplot points (labelled by issue key) and the trend line."""
    if len(points.index) == 0:
        return _empty_chart()

    series = [
        {
            "name": "Estimate vs actual hours",
            "values": to_plain(points["actual_hours"].tolist()),
            "meta": {"x": to_plain(points["estimate"].tolist())},
        }
    ]

    if trend is not None:
        series.append(
            {
                "name": "Trend line",
                "values": [trend.start[1], trend.end[1]],
                "meta": {
                    "x": [trend.start[0], trend.end[0]],
                    "slope": trend.slope,
                    "intercept": trend.intercept,
                },
            }
        )

    return {"labels": points["key"].tolist(), "series": series}


def histogram_chart(histogram_data):
    """Shape the histogram as one series of bucket counts per column."""
    if len(histogram_data.columns) == 0:
        return _empty_chart()

    return {
        "labels": list(histogram_data.index),
        "series": [
            {"name": name, "values": to_plain(histogram_data[name].tolist())}
            for name in histogram_data.columns
        ],
    }


def trend_summary(trend):
    """Return the trend line as a dict, or None when there is no trend."""
    if trend is None:
        return None
    return {
        "slope": trend.slope,
        "intercept": trend.intercept,
        "start": list(trend.start),
        "end": list(trend.end),
    }


def summary_boxes(summary_data):
    """Return one summary dict per estimate group."""
    return [
        {
            "estimate_value": float(estimate),
            "mean_hours": to_plain(row["mean_hours"]),
            "std_dev_hours": to_plain(row["std_dev_hours"]),
            "count": int(row["count"]),
            "percent_diff": to_plain(row["percent_diff"]),
            "classification": row["classification"],
        }
        for estimate, row in summary_data.iterrows()
    ]


def build_dashboard(results, window):
    """Assemble the dashboard document from calculator `results`."""
    effort_data = results[EffortDataCalculator]

    return {
        "window": describe_window(window),
        "total_records": effort_data.attrs.get("total_records", 0),
        "skipped_records": effort_data.attrs.get("skipped_records", 0),
        "filtered_records": len(effort_data.index),
        "boxplot": boxplot_chart(results[BoxplotCalculator]),
        "scatter": scatter_chart(
            results[ScatterplotCalculator], results[TrendLineCalculator]
        ),
        "histogram": histogram_chart(results[HistogramCalculator]),
        "trend": trend_summary(results[TrendLineCalculator]),
        "summary_boxes": summary_boxes(results[SummaryCalculator]),
    }


def recompute(records, window=TimeWindow.ALL, now=None, settings=None):
    """Recompute all dashboard data for the raw issues in `records`.

    Args:
        records: Raw issue mappings, as returned by the JIRA REST API.
        window: A `TimeWindow` (or alias such as `1w`) or a non-negative
            `datetime.timedelta`.
        now: End of the time window. Defaults to the current time.
        settings: Optional extraction settings such as `estimate_fields`.

    Returns:
        Dict with `boxplot`, `scatter` and `histogram` charts, the `trend`
        line (None if no trend could be fitted), `summary_boxes` and record
        counts. Calling this twice with the same arguments gives equal results.
    """
    settings = extend_dict(settings or {}, {"window": window, "now": now})
    results = run_calculators(
        ANALYSIS_CALCULATORS, StaticRecordSource(records), settings, write=False
    )
    return build_dashboard(results, window)


class DashboardCalculator(Calculator):
    """Assemble the complete dashboard document from the analysis results,
    for writing to `dashboard_data` JSON files.
    """

    def run(self):
        results = {c: self.get_result(c) for c in ANALYSIS_CALCULATORS}
        window = self.settings.get("window")
        return build_dashboard(results, TimeWindow.ALL if window is None else window)

    def write(self):
        output_files = self.settings.get("dashboard_data")
        if not output_files:
            logger.debug("No output file specified for dashboard data")
            return

        for output_file in output_files:
            if get_extension(output_file) != ".json":
                logger.warning(
                    "Dashboard data can only be written as JSON, not to %s",
                    output_file,
                )
                continue

            logger.info("Writing dashboard data to %s", output_file)
            with open(output_file, "w", encoding="utf-8") as out:
                json.dump(self.get_result(), out, indent=2)
