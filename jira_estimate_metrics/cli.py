import argparse
import logging
import os

from dotenv import load_dotenv

from .calculator import run_calculators
from .config import ConfigError, config_to_options
from .config.type_utils import force_window
from .config_main import CALCULATORS
from .jira_client import create_jira_client
from .sources import FileRecordSource, JiraRecordSource, find_estimate_fields

load_dotenv()

logger = logging.getLogger(__name__)


def configure_argument_parser():
    """Configure an ArgumentParser that manages command line options."""

    parser = argparse.ArgumentParser(
        description=(
            "Compare story point estimates with logged effort in JIRA "
            "and produce boxplot, scatterplot, histogram and summary data."
        )
    )

    # Basic options
    parser.add_argument("config", metavar="config.yml", nargs="?", help="Configuration file")
    parser.add_argument("-v", dest="verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-vv",
        dest="very_verbose",
        action="store_true",
        help="Even more verbose output",
    )
    parser.add_argument(
        "-n",
        metavar="N",
        dest="max_results",
        type=int,
        help="Only fetch N most recently updated issues",
    )
    parser.add_argument(
        "--window",
        metavar="1w",
        help=(
            "Only analyse issues updated within this window: "
            "all, 1h, 1d, 1w, 1m or 3m"
        ),
    )
    parser.add_argument(
        "--input",
        metavar="issues.json",
        dest="input_file",
        help="Read issues from this JSON file instead of querying JIRA",
    )
    parser.add_argument(
        "--list-estimate-fields",
        action="store_true",
        help=(
            "List the JIRA fields that may hold story points, with the id to "
            "use as `Estimate`, then exit"
        ),
    )

    # Output directory
    parser.add_argument(
        "--output-directory",
        "-o",
        metavar="metrics",
        help=("Write output files to this directory, rather than the current working directory."),
    )

    # Connection options
    parser.add_argument("--domain", metavar="https://my.jira.com", help="JIRA domain name")
    parser.add_argument("--username", metavar="user", help="JIRA user name")
    parser.add_argument("--password", metavar="password", help="JIRA password or API token")

    return parser


def main():
    parser = configure_argument_parser()
    args = parser.parse_args()
    run_command_line(parser, args)


def run_command_line(parser, args):
    if not args.config and not args.list_estimate_fields:
        parser.print_usage()
        return

    logging.basicConfig(
        format="[%(asctime)s %(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=(
            logging.DEBUG
            if args.very_verbose
            else logging.INFO if args.verbose else logging.WARNING
        ),
    )

    # Configuration and settings
    # (command line arguments override config file options)

    options = {
        "connection": {
            "domain": None,
            "username": None,
            "password": None,
            "jira_client_options": {},
        },
        "settings": {},
    }

    if args.config:
        logger.debug("Parsing options from %s", args.config)
        try:
            with open(args.config, encoding="utf-8") as config:
                options = config_to_options(
                    config.read(), cwd=os.path.dirname(os.path.abspath(args.config))
                )
        except FileNotFoundError:
            print(
                f"Error: Configuration file '{args.config}' not found. "
                "Please provide a valid config file."
            )
            return

    # Allow command line arguments to override options
    override_options(options["connection"], args)
    override_options(options["settings"], args)

    if args.list_estimate_fields:
        list_estimate_fields(options["connection"])
        return

    settings = options["settings"]
    settings["window"] = force_window("window", settings["window"])
    if settings["input_file"]:
        settings["input_file"] = os.path.abspath(settings["input_file"])

    # Set output directory if required
    output_dir = options.get("output_directory")
    if args.output_directory:
        output_dir = args.output_directory
    if output_dir:
        logger.info("Changing working directory to %s", output_dir)
        os.makedirs(output_dir, exist_ok=True)
        os.chdir(output_dir)

    record_source = get_record_source(options)

    logger.info("Running calculators")
    run_calculators(CALCULATORS, record_source, settings)


def override_options(options, arguments):
    """Update `options` dict with settings from `arguments`
    with the same key.
    """
    for key in options.keys():
        if getattr(arguments, key, None) is not None:
            options[key] = getattr(arguments, key)


def list_estimate_fields(connection):
    """Print the id and name of each JIRA field that may hold story points."""
    fields = find_estimate_fields(create_jira_client(connection))

    if not fields:
        print("No story point fields found")
        return

    for field in fields:
        print(f"{field['id']}\t{field['name']}")


def get_record_source(options):
    """Read issues from the configured input file if there is one, otherwise
    from JIRA.
    """
    settings = options["settings"]

    if settings["input_file"]:
        return FileRecordSource(settings["input_file"])

    if not settings["queries"]:
        raise ConfigError("Either a `Query` or an `Input` file is required")

    return JiraRecordSource(create_jira_client(options["connection"]), settings)


if __name__ == "__main__":
    main()
