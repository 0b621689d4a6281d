"""Raw JIRA issue payloads shared by the Jira Estimate Metrics tests."""

NOW = "2024-03-15T12:00:00.000+0000"

HOUR = 3600


def make_issue(key, updated=NOW, estimate=None, seconds=None, **fields):
    """Build a raw issue the way the JIRA REST API returns it, with the
    estimate in the default story points field and effort in `timespent`.
    """
    issue_fields = {"summary": f"Issue {key}", "updated": updated}
    if estimate is not None:
        issue_fields["customfield_10016"] = estimate
    if seconds is not None:
        issue_fields["timespent"] = seconds
    issue_fields.update(fields)
    return {"id": "1" + key.split("-")[-1], "key": key, "fields": issue_fields}


# Issues updated at various points before NOW
COMMON_ISSUES = [
    make_issue("A-1", "2024-03-15T11:30:00.000+0000", 1, 2 * HOUR),
    make_issue("A-2", "2024-03-15T08:00:00.000+0000", 1, 3 * HOUR),
    make_issue("A-3", "2024-03-12T10:00:00.000+0000", 1, 4 * HOUR),
    make_issue("A-4", "2024-03-01T10:00:00.000+0000", 3, 9 * HOUR),
    make_issue("A-5", "2024-02-01T10:00:00.000+0000", 3, 12 * HOUR),
    make_issue("A-6", "2024-01-02T10:00:00.000+0000", 5, 25 * HOUR),
    # effort but no estimate
    make_issue("A-7", "2024-03-14T10:00:00.000+0000", None, 6 * HOUR),
    # estimate but no effort
    make_issue("A-8", "2024-03-14T10:00:00.000+0000", 2, None),
    # neither
    make_issue("A-9", "2024-03-14T10:00:00.000+0000"),
    # very old
    make_issue("A-10", "2023-06-01T10:00:00.000+0000", 5, 45 * HOUR),
]
