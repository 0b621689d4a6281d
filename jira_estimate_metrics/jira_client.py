"""JIRA client utilities for Jira Estimate Metrics.

This module creates and configures the `jira.JIRA` client used by
`JiraRecordSource`.
"""

import logging
import os

from jira import JIRA

logger = logging.getLogger(__name__)


def normalize_value(value):
    """Strip whitespace and surrounding quotes from a connection value.

    Docker's --env-file keeps quotes from .env files, which breaks
    authentication. Returns None for empty values.
    """
    if not value:
        return None

    value = value.strip()
    while value and (value[0] in "'\"" or value[-1] in "'\""):
        stripped = value.strip('"').strip("'")
        if stripped == value:
            break
        value = stripped

    value = value.strip()
    return value if value else None


def get_jira_connection_params(connection):
    """Extract JIRA connection parameters from connection configuration,
    falling back to the `JIRA_URL`, `JIRA_USERNAME` and `JIRA_PASSWORD`
    environment variables.
    """
    url = normalize_value(connection.get("domain") or os.environ.get("JIRA_URL"))
    username = normalize_value(
        connection.get("username") or os.environ.get("JIRA_USERNAME")
    )
    password = normalize_value(
        connection.get("password") or os.environ.get("JIRA_PASSWORD")
    )

    missing_params = [
        name
        for name, value in (("url", url), ("username", username), ("password", password))
        if not value
    ]

    if missing_params:
        raise ValueError(
            f"Missing required JIRA connection parameters: "
            f"{', '.join(missing_params)}. "
            f"Provide them via connection config or environment variables "
            f"(JIRA_URL, JIRA_USERNAME, JIRA_PASSWORD)."
        )

    return url, username, password


def create_jira_client(connection):
    """Create a JIRA client with the given connection options."""
    url, username, password = get_jira_connection_params(connection)

    jira_options = {"server": url, "rest_api_version": 3}
    jira_options.update(connection.get("jira_client_options") or {})

    logger.info("Connecting to %s", url)

    return JIRA(
        options=jira_options,
        basic_auth=(username, password),
    )
