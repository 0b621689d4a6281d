"""Utility functions for Jira Estimate Metrics.

This module provides small helpers shared by the calculators, including
output file handling and JSON value conversion.
"""

import datetime
import logging
import math
import os.path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def extend_dict(d, e):
    """Extend dictionary d with entries from e, returning a new dictionary."""
    r = d.copy()
    r.update(e)
    return r


def get_extension(filename):
    """Get file extension from filename."""
    return os.path.splitext(filename)[1].lower()


def to_utc(value):
    """Return `value` as a timezone-aware UTC datetime. Naive values are
    assumed to already be in UTC.
    """
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def to_plain(value):
    """Convert numpy scalars to the equivalent builtin Python values, and NaN
    to None, so results compare and serialise as plain data.
    """
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        value = float(value)
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _to_excel_frame(data):
    """Return a copy of `data` that Excel can store: timezones dropped from
    datetime columns and list values joined into strings.
    """
    data = data.copy()
    for column in data.columns:
        if isinstance(data[column].dtype, pd.DatetimeTZDtype):
            data[column] = data[column].dt.tz_localize(None)
        elif data[column].dtype == object:
            data[column] = data[column].map(
                lambda v: ", ".join(map(str, v)) if isinstance(v, list) else v
            )
    return data


def write_data_frame(data, output_files, sheet_name, index=True):
    """Write `data` to each file in `output_files`, choosing the format
    from the file extension: `.json`, `.xlsx` or CSV for anything else.
    """
    for output_file in output_files:
        output_extension = get_extension(output_file)
        logger.info("Writing %s data to %s", sheet_name.lower(), output_file)

        if output_extension == ".json":
            file_data = data.reset_index() if index else data
            file_data.to_json(output_file, orient="records", date_format="iso")
        elif output_extension == ".xlsx":
            _to_excel_frame(data).to_excel(
                output_file, sheet_name=sheet_name, index=index
            )
        else:
            data.to_csv(output_file, header=True, index=index)
