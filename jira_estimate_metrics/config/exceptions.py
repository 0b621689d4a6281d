"""Configuration exceptions for Jira Estimate Metrics."""

from ..errors import EstimateMetricsError


class ConfigError(EstimateMetricsError):
    """
    Exception raised for errors in the configuration or input sources.
    """
