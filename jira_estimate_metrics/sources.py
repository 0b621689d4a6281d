"""Record sources for Jira Estimate Metrics.

A record source supplies raw issue payloads (mappings shaped like the JIRA
REST API's issue JSON) through `fetch_records(window)`. The calculators only
ever talk to this interface, so issues can come from JIRA, from an exported
JSON file or from memory.
"""

import json
import logging
import math
import os
from datetime import timedelta

from jira.exceptions import JIRAError

from .config import ConfigError
from .window import TimeWindow

logger = logging.getLogger(__name__)

# JQL relative dates at least as wide as each window (months vary in length)
WINDOW_JQL_OFFSETS = {
    TimeWindow.PAST_HOUR: "-1h",
    TimeWindow.PAST_DAY: "-1d",
    TimeWindow.PAST_WEEK: "-1w",
    TimeWindow.PAST_MONTH: "-31d",
    TimeWindow.PAST_3_MONTHS: "-92d",
}

ISSUE_FIELDS = "*navigable,timetracking,worklog"

# Words in a field name suggesting it holds story points
ESTIMATE_FIELD_NAME_HINTS = ("story", "point")


class StaticRecordSource:
    """Serve a fixed, in-memory list of raw issues."""

    def __init__(self, records):
        self.records = list(records)

    def fetch_records(self, window=TimeWindow.ALL):  # pylint: disable=unused-argument
        """Return a copy of the stored issues; filtering happens downstream."""
        return list(self.records)


class FileRecordSource:
    """Read raw issues from a JSON file holding either a list of issues or a
    JIRA search response (`{"issues": [...]}`).
    """

    def __init__(self, path):
        self.path = path

    def fetch_records(self, window=TimeWindow.ALL):  # pylint: disable=unused-argument
        """Load and return the issues in the file."""
        logger.info("Loading issues from %s", self.path)
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Input file `{self.path}` not found") from None
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Failed to parse JSON from input file `{self.path}`: "
                f"line {e.lineno}, column {e.colno}: {e.msg}"
            ) from e

        if isinstance(data, dict):
            data = data.get("issues", [])

        if not isinstance(data, list):
            raise ConfigError(
                f"Input file `{self.path}` must contain a list of issues"
            )

        logger.info("Loaded %d issues", len(data))
        return data


def window_to_jql(window):
    """Return a JQL clause selecting issues updated within `window`, or None
    for `TimeWindow.ALL`. The clause may select slightly more than the window.
    """
    if isinstance(window, timedelta):
        minutes = max(1, math.ceil(window.total_seconds() / 60))
        return f'updated >= "-{minutes}m"'

    offset = WINDOW_JQL_OFFSETS.get(TimeWindow.parse(window))
    if offset is None:
        return None
    return f'updated >= "{offset}"'


class JiraRecordSource:
    """Fetch issues from JIRA for each configured JQL query."""

    settings = {
        "queries": [],
        "max_results": None,
    }

    def __init__(self, jira, settings):
        self.jira = jira
        self.settings = self.settings.copy()
        self.settings.update(settings)

        if not self.settings["queries"]:
            raise ConfigError(
                "No `Query` value or `Queries` section found. "
                "A query is required to fetch issues from JIRA."
            )

    def build_jql(self, jql, window=TimeWindow.ALL):
        """Narrow `jql` to issues updated within `window`."""
        window_clause = window_to_jql(window)
        if window_clause is None:
            return jql
        return f"({jql}) AND {window_clause}"

    def find_issues(self, jql, max_results=None):
        """Return the raw JSON of the issues matching `jql`.

        Args:
            jql: JQL query string
            max_results: Optional limit on number of results. If None, uses
                settings["max_results"]. If False, no limit.
        """
        if max_results is None:
            max_results = self.settings["max_results"]

        logger.info("Fetching issues with query `%s`", jql)
        if max_results:
            logger.info("Limiting to %d results", max_results)

        try:
            # Convert False to None for jira library - False means "no limit"
            issues = self.jira.search_issues(
                jql,
                fields=ISSUE_FIELDS,
                maxResults=None if max_results is False else max_results,
            )
        except JIRAError as e:
            logger.error(
                "JIRA API error while fetching issues with query `%s`: %s (Status: %s)",
                jql,
                getattr(e, "text", str(e)),
                getattr(e, "status_code", "Unknown"),
            )
            raise

        logger.info("Fetched %d issues", len(issues))
        if len(issues) == 0:
            logger.warning("Query `%s` returned 0 issues", jql)
        return [issue.raw for issue in issues]

    def fetch_records(self, window=TimeWindow.ALL):
        """Return the raw issues of all queries, without duplicates."""
        records = []
        seen = set()

        for jql in self.settings["queries"]:
            for raw in self.find_issues(self.build_jql(jql, window)):
                key = raw.get("key")
                if key is None:
                    key = raw.get("id")
                if key is not None:
                    if key in seen:
                        continue
                    seen.add(key)
                records.append(raw)

        return records


def find_estimate_fields(jira):
    """Return the JIRA fields that look like story point estimates, as
    `{"id", "name", "custom"}` dicts sorted by name.

    A field qualifies when its name contains one of
    `ESTIMATE_FIELD_NAME_HINTS` (case insensitive). Use the `id` of the right
    one as `Estimate: <id>` in the configuration file.
    """
    logger.debug("Fetching JIRA fields")
    jira_fields = jira.fields()

    if len(jira_fields) == 0:
        raise ConfigError(
            "No field data retrieved from JIRA. "
            "This likely means a problem with the JIRA API."
        ) from None

    candidates = [
        {
            "id": field["id"],
            "name": field["name"],
            "custom": bool(field.get("custom", False)),
        }
        for field in jira_fields
        if any(hint in field["name"].lower() for hint in ESTIMATE_FIELD_NAME_HINTS)
    ]

    logger.info(
        "%d of %d fields look like estimate fields", len(candidates), len(jira_fields)
    )
    return sorted(candidates, key=lambda f: (f["name"].lower(), f["id"]))
