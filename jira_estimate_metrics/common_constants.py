"""Common constants used across Jira Estimate Metrics modules."""

from typing import Final, List, Tuple

# Story point field ids tried in order before falling back to field detection
DEFAULT_ESTIMATE_FIELDS: Final[List[str]] = [
    "customfield_10016",
    "customfield_10004",
    "customfield_10002",
    "customfield_10003",
    "customfield_10005",
]

DEFAULT_CUSTOM_FIELD_PATTERN: Final[str] = r"^customfield_\d+$"

# Range a detected custom field value must fall in to pass as an estimate
HEURISTIC_ESTIMATE_RANGE: Final[Tuple[float, float]] = (0.0, 100.0)

SECONDS_PER_HOUR: Final[int] = 3600

# Effort histogram buckets as (label, inclusive min, exclusive max)
HISTOGRAM_BUCKETS: Final[List[Tuple[str, float, float]]] = [
    ("0-5h", 0.0, 5.0),
    ("5-10h", 5.0, 10.0),
    ("10-20h", 10.0, 20.0),
    ("20-40h", 20.0, 40.0),
    ("40+h", 40.0, float("inf")),
]

NO_ESTIMATE_SERIES: Final[str] = "No estimate"

# Whisker reach as a multiple of the inter-quartile range
WHISKER_IQR_FACTOR: Final[float] = 1.5

# Fraction of the estimate range the trend line extends past the data
TREND_LINE_PADDING: Final[float] = 0.1

# Deviation classifications by ascending upper bound (exclusive)
DEVIATION_THRESHOLDS: Final[List[Tuple[str, float]]] = [
    ("on-target", 0.15),
    ("moderate-deviation", 0.30),
]
HIGH_DEVIATION: Final[str] = "high-deviation"
UNDEFINED_DEVIATION: Final[str] = "undefined"

# Columns of the extracted effort data frame
EFFORT_DATA_COLUMNS: Final[List[str]] = [
    "key",
    "estimate",
    "actual_hours",
    "updated",
]

# Data filename keys used in config parsing
DATA_FILENAME_KEYS: Final[List[str]] = [
    "effort_data",
    "boxplot_data",
    "scatterplot_data",
    "histogram_data",
    "summary_data",
    "dashboard_data",
]
