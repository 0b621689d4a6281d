"""Configuration module for Jira Estimate Metrics.

This module provides YAML configuration loading and its error type.
"""

from .exceptions import ConfigError
from .loader import config_to_options

__all__ = ["config_to_options", "ConfigError"]
