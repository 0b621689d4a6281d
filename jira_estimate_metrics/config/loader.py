"""Configuration loader for Jira Estimate Metrics.

Parses a YAML configuration file such as::

    Connection:
        Domain: https://example.atlassian.net
        Username: me@example.com

    Query: project = ABC AND statusCategory = Done

    Estimate:
        Fields:
            - customfield_10016
        Heuristic: yes

    Output:
        Window: 3m
        Boxplot data: boxplot.csv
        Summary data:
            - summary.csv
            - summary.json

into an options dict with `connection` and `settings` sections. Mapping keys
are case insensitive.
"""

import logging
import os.path

import yaml
from pydicti import odicti

from ..common_constants import DATA_FILENAME_KEYS
from ..window import TimeWindow
from .exceptions import ConfigError
from .type_utils import expand_key, force_bool, force_int, force_list, force_window

logger = logging.getLogger(__name__)


def ordered_load(stream, loader=yaml.SafeLoader):
    """
    Load YAML with every mapping as a case-insensitive ordered dict.
    """

    class CaseInsensitiveLoader(loader):  # pylint: disable=too-many-ancestors
        """Loader building `odicti` mappings, leaving `loader` untouched."""

    def construct_mapping(yaml_loader, node):
        yaml_loader.flatten_mapping(node)
        return odicti(yaml_loader.construct_pairs(node))

    CaseInsensitiveLoader.add_constructor(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping
    )

    return yaml.load(stream, CaseInsensitiveLoader)


def _create_default_options():
    """Create default options dictionary."""
    return {
        "connection": {
            "domain": None,
            "username": None,
            "password": None,
            "jira_client_options": {},
        },
        "settings": {
            "queries": [],
            "max_results": None,
            "input_file": None,
            "estimate_field": None,
            "estimate_fields": None,
            "estimate_heuristic": True,
            "custom_field_pattern": None,
            "window": TimeWindow.ALL,
            "now": None,
            "effort_data": None,
            "boxplot_data": None,
            "scatterplot_data": None,
            "histogram_data": None,
            "summary_data": None,
            "dashboard_data": None,
        },
    }


def _parse_connection_config(config, options):
    """Parse connection configuration."""
    if "connection" not in config:
        return

    conn_config = config["connection"]
    conn_options = options["connection"]

    for key in ("domain", "username", "password"):
        if key in conn_config:
            conn_options[key] = conn_config[key]

    if expand_key("jira_client_options") in conn_config:
        conn_options["jira_client_options"] = dict(
            conn_config[expand_key("jira_client_options")] or {}
        )


def _parse_queries_config(config, options):
    """Parse `Query` (one JQL string) or `Queries` (a list of them)."""
    if "query" in config and "queries" in config:
        raise ConfigError("Use either `Query` or `Queries`, not both.")

    if "query" in config:
        options["settings"]["queries"] = [str(config["query"])]
    elif "queries" in config:
        options["settings"]["queries"] = [str(q) for q in force_list(config["queries"])]


def _parse_input_config(config, options, cwd):
    """Parse `Input`, a JSON file of issues to use instead of JIRA."""
    if "input" not in config:
        return

    input_file = str(config["input"])
    if cwd is not None and not os.path.isabs(input_file):
        input_file = os.path.join(cwd, input_file)
    options["settings"]["input_file"] = input_file


def _parse_estimate_config(config, options):
    """Parse the `Estimate` section: where story points are read from."""
    if "estimate" not in config:
        return

    estimate_config = config["estimate"]
    settings = options["settings"]

    if not isinstance(estimate_config, dict):
        # `Estimate: customfield_10016` is shorthand for an explicit field
        settings["estimate_field"] = str(estimate_config)
        return

    if "field" in estimate_config:
        settings["estimate_field"] = str(estimate_config["field"])
    if "fields" in estimate_config:
        settings["estimate_fields"] = [
            str(f) for f in force_list(estimate_config["fields"])
        ]
    if "heuristic" in estimate_config:
        settings["estimate_heuristic"] = force_bool(
            "estimate_heuristic", estimate_config["heuristic"]
        )
    if expand_key("custom_field_pattern") in estimate_config:
        settings["custom_field_pattern"] = str(
            estimate_config[expand_key("custom_field_pattern")]
        )


def _parse_output_config(config, options):
    """Parse output configuration."""
    if "output" not in config:
        return

    output_config = config["output"]
    settings = options["settings"]

    # Output directory support
    if expand_key("output_directory") in output_config:
        options["output_directory"] = output_config[expand_key("output_directory")]

    if "window" in output_config:
        settings["window"] = force_window("window", output_config["window"])

    if expand_key("max_results") in output_config:
        settings["max_results"] = force_int(
            "max_results", output_config[expand_key("max_results")]
        )

    for key in DATA_FILENAME_KEYS:
        if expand_key(key) in output_config:
            settings[key] = list(
                map(os.path.basename, map(str, force_list(output_config[expand_key(key)])))
            )


def config_to_options(data, cwd=None, extended=False, _visited_files=None):
    """
    Parse YAML config data and return options dict.
    """
    if _visited_files is None:
        _visited_files = set()

    try:
        config = ordered_load(data, yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise ConfigError("Unable to parse YAML configuration file.") from e

    if config is None:
        raise ConfigError("Configuration file is empty") from None

    if not isinstance(config, dict):
        raise ConfigError("Configuration file must contain a mapping") from None

    options = _create_default_options()

    # Handle extends configuration
    if "extends" in config:
        if cwd is None:
            raise ConfigError("`extends` is not supported here.")

        extends_filename = os.path.abspath(
            os.path.normpath(
                os.path.join(cwd, config["extends"].replace("/", os.path.sep))
            )
        )

        if not os.path.exists(extends_filename):
            raise ConfigError(
                f"File `{extends_filename}` referenced in `extends` not found."
            ) from None

        if extends_filename in _visited_files:
            raise ConfigError(
                f"Circular extends reference detected: {extends_filename}"
            ) from None

        _visited_files.add(extends_filename)

        logger.debug("Extending file %s", extends_filename)
        with open(extends_filename, encoding="utf-8") as extends_file:
            options = config_to_options(
                extends_file.read(),
                cwd=os.path.dirname(extends_filename),
                extended=True,
                _visited_files=_visited_files,
            )

    _parse_connection_config(config, options)
    _parse_queries_config(config, options)
    _parse_input_config(config, options, cwd)
    _parse_estimate_config(config, options)
    _parse_output_config(config, options)

    if (
        not extended
        and not options["settings"]["queries"]
        and not options["settings"]["input_file"]
    ):
        logger.warning(
            "No `Query`, `Queries` or `Input` found. "
            "Issues can only be fetched with one of these."
        )

    return options
