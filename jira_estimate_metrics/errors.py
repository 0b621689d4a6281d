"""Exception types for Jira Estimate Metrics."""


class EstimateMetricsError(Exception):
    """Base exception for all estimate metrics errors."""


class InvalidArgumentError(EstimateMetricsError, ValueError):
    """Raised when a caller violates a function contract, e.g. passes a
    negative time window or asks for quartiles of an empty sample.
    """


class MalformedRecordError(EstimateMetricsError):
    """Raised when a raw issue record lacks its identity or `updated` timestamp."""


class UndefinedRegressionError(EstimateMetricsError):
    """Raised when a trend line cannot be fitted (fewer than two distinct
    estimate values).
    """
