"""Record extraction for Jira Estimate Metrics.

This module normalises raw JIRA issue payloads into `EffortRecord` values
holding the story point estimate, the logged effort in hours and the time the
issue was last updated.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import dateutil.parser

from .common_constants import (
    DEFAULT_CUSTOM_FIELD_PATTERN,
    DEFAULT_ESTIMATE_FIELDS,
    HEURISTIC_ESTIMATE_RANGE,
    SECONDS_PER_HOUR,
)
from .errors import MalformedRecordError
from .utils import to_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffortRecord:
    """Estimate and actual effort for a single issue."""

    key: str
    estimate: float
    actual_hours: float
    updated: Optional[datetime]

    @property
    def has_estimate(self) -> bool:
        """True if the record carries a usable estimate."""
        return self.estimate > 0

    @property
    def has_effort(self) -> bool:
        """True if the record carries logged effort."""
        return self.actual_hours > 0


@dataclass(frozen=True)
class ExtractionSettings:
    """Read-only settings controlling where estimates are looked for."""

    estimate_fields: Tuple[str, ...] = tuple(DEFAULT_ESTIMATE_FIELDS)
    use_heuristic: bool = True
    custom_field_pattern: str = DEFAULT_CUSTOM_FIELD_PATTERN

    @classmethod
    def from_settings(cls, settings):
        """Build extraction settings from a calculator `settings` dict.

        An explicit `estimate_field` replaces the candidate list and turns off
        heuristic field detection.
        """
        if not settings:
            return cls()

        pattern = settings.get("custom_field_pattern") or DEFAULT_CUSTOM_FIELD_PATTERN

        if settings.get("estimate_field"):
            return cls(
                estimate_fields=(settings["estimate_field"],),
                use_heuristic=False,
                custom_field_pattern=pattern,
            )

        return cls(
            estimate_fields=tuple(
                settings.get("estimate_fields") or DEFAULT_ESTIMATE_FIELDS
            ),
            use_heuristic=bool(settings.get("estimate_heuristic", True)),
            custom_field_pattern=pattern,
        )


@dataclass
class ExtractionResult:
    """Records extracted from a batch, and how many were skipped."""

    records: List[EffortRecord] = field(default_factory=list)
    skipped: int = 0


def _to_number(value) -> Optional[float]:
    """Return `value` as a finite float if it is numeric (or a numeric
    string), otherwise None. Booleans, infinities and NaN are not numbers here.
    """
    if isinstance(value, bool) or value is None:
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _issue_fields(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    fields = raw.get("fields")
    return fields if isinstance(fields, Mapping) else raw


def find_custom_field_estimate(fields, pattern=DEFAULT_CUSTOM_FIELD_PATTERN):
    """Best-effort estimate detection: return the first numeric value in
    `(0, 100]` among fields whose name matches `pattern`, or None.

    Fields are scanned in mapping order, so when an issue has several numeric
    custom fields the result depends on the order the payload lists them in.
    """
    lower, upper = HEURISTIC_ESTIMATE_RANGE
    matcher = re.compile(pattern)

    for name, value in fields.items():
        if not matcher.match(name):
            continue
        # Only genuine numbers count here, not numeric strings
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if lower < value <= upper:
            logger.debug("Detected estimate %s in field %s", value, name)
            return float(value)

    return None


def extract_estimate(fields, extraction_settings=None) -> float:
    """Return the story point estimate from an issue's fields, or 0.0."""
    extraction_settings = extraction_settings or ExtractionSettings()

    for field_id in extraction_settings.estimate_fields:
        value = _to_number(fields.get(field_id))
        if value is not None and value > 0:
            return value

    if extraction_settings.use_heuristic:
        value = find_custom_field_estimate(
            fields, extraction_settings.custom_field_pattern
        )
        if value is not None:
            return value

    return 0.0


def _worklog_seconds(fields) -> float:
    worklog = fields.get("worklog")
    if not isinstance(worklog, Mapping):
        return 0.0

    total = 0.0
    for entry in worklog.get("worklogs") or []:
        seconds = _to_number(entry.get("timeSpentSeconds"))
        if seconds:
            total += seconds
    return total


def extract_effort_hours(fields) -> float:
    """Return logged effort in hours from an issue's fields, or 0.0.

    Sources are tried in order and the first positive one wins:
    `timespent`, then `timetracking.timeSpentSeconds`, then the sum of the
    individual work log entries.
    """
    timetracking = fields.get("timetracking")
    if not isinstance(timetracking, Mapping):
        timetracking = {}

    sources = (
        lambda: _to_number(fields.get("timespent")),
        lambda: _to_number(timetracking.get("timeSpentSeconds")),
        lambda: _worklog_seconds(fields),
    )

    for source in sources:
        seconds = source()
        if seconds is not None and seconds > 0:
            return seconds / SECONDS_PER_HOUR

    return 0.0


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into a UTC datetime, or return None if it
    cannot be parsed.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    try:
        return to_utc(dateutil.parser.isoparse(str(value)))
    except (ValueError, OverflowError):
        logger.debug("Could not parse timestamp %r", value)
        return None


def _first_present(*values):
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


def extract_record(raw, extraction_settings=None) -> EffortRecord:
    """Normalise one raw issue into an `EffortRecord`.

    Raises `MalformedRecordError` if the issue has no key/id or no `updated`
    timestamp.
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecordError(f"Issue record is not a mapping: {raw!r}")

    fields = _issue_fields(raw)

    key = _first_present(
        raw.get("key"), raw.get("id"), fields.get("key"), fields.get("id")
    )
    if key is None:
        raise MalformedRecordError("Issue record has no key or id")

    updated = _first_present(fields.get("updated"), raw.get("updated"))
    if updated is None:
        raise MalformedRecordError(f"Issue {key} has no updated timestamp")

    return EffortRecord(
        key=str(key),
        estimate=extract_estimate(fields, extraction_settings),
        actual_hours=extract_effort_hours(fields),
        updated=parse_timestamp(updated),
    )


def extract_records(
    raws: Iterable[Dict[str, Any]], extraction_settings=None
) -> ExtractionResult:
    """Extract every record in `raws`, skipping (and counting) malformed ones."""
    result = ExtractionResult()

    for raw in raws:
        try:
            result.records.append(extract_record(raw, extraction_settings))
        except MalformedRecordError as e:
            logger.warning("Skipping malformed issue record: %s", e)
            result.skipped += 1

    if result.skipped:
        logger.warning(
            "Skipped %d of %d issue records",
            result.skipped,
            result.skipped + len(result.records),
        )

    return result
