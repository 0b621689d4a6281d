"""Type utilities for configuration processing.

This module converts and validates raw YAML values, raising `ConfigError`
with the offending key on failure.
"""

from ..errors import InvalidArgumentError
from ..window import TimeWindow
from .exceptions import ConfigError


def force_list(val) -> list:
    """
    Ensure the value is a list.
    """
    return list(val) if isinstance(val, (list, tuple)) else [val]


def force_int(key, value) -> int:
    """
    Convert value to int, raise ConfigError on failure.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"Could not convert value `{value}` for key `{expand_key(key)}` to integer"
        ) from None


def force_bool(key, value) -> bool:
    """
    Accept YAML booleans and the strings yes/no/true/false/on/off.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("yes", "true", "on", "1"):
        return True
    if text in ("no", "false", "off", "0"):
        return False
    raise ConfigError(
        f"Could not convert value `{value}` for key `{expand_key(key)}` to true/false"
    )


def force_window(key, value) -> TimeWindow:
    """
    Convert a window name or alias (e.g. `1w`, `past week`) to a TimeWindow.
    """
    if isinstance(value, TimeWindow):
        return value
    try:
        return TimeWindow.parse(str(value).strip().replace(" ", "_"))
    except InvalidArgumentError as e:
        raise ConfigError(f"Invalid value for key `{expand_key(key)}`: {e}") from None


def expand_key(key) -> str:
    """
    Expand config key for display.
    """
    return str(key).replace("_", " ").lower()
