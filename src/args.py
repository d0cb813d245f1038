"""Argument parsing functionality for orbsync."""

import argparse

from cli_config import non_negative_float, positive_int
from constants import Commands, Constants


def _add_collect_options(parser):
    parser.add_argument("--slow",
                        dest="SLOW",
                        help="Use slower strategy to avoid errors on big orbs",
                        action="store_true")
    parser.add_argument("--include-uncertified",
                        dest="INCLUDE_UNCERTIFIED",
                        help="Fetch uncertified orbs as well",
                        action="store_true")
    parser.add_argument("--must-include",
                        dest="MUST_INCLUDE",
                        help="Orbs to include regardless of listings, e.g. well-known hidden orbs "
                             "(repeatable or comma-separated; defaults to the known hidden orbs)",
                        action="append",
                        type=str)


def _add_retry_options(parser):
    parser.add_argument("--max-attempts",
                        dest="MAX_ATTEMPTS",
                        help="Attempts per orb before dropping it or aborting",
                        action="store",
                        type=positive_int)
    parser.add_argument("--retry-delay",
                        dest="RETRY_DELAY",
                        help="Seconds to wait between attempts",
                        action="store",
                        type=non_negative_float)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="orbsync",
        description="orbsync - Copy orbs between registry instances in dependency order",
        add_help=True,
    )

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help=f"Set the logging level (default: ${Constants.ENV_LOG_LEVEL} or INFO)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="action", metavar="command")
    subparsers.required = True

    collect = subparsers.add_parser(Commands.COLLECT.value, help="List and fetch orbs")
    collect.add_argument("--host",
                         dest="HOST",
                         help="Hostname of the registry instance to communicate with",
                         default=None)
    collect.add_argument("--token",
                         dest="TOKEN",
                         help=f"Token for the registry instance (or ${Constants.ENV_TOKEN})")
    collect.add_argument("--list",
                         dest="LIST_PATH",
                         help="Path to the file to put the list of orbs",
                         default=Constants.ORB_LIST_FILE)
    collect.add_argument("--src",
                         dest="SRC_DIR",
                         help="Path to the directory to put fetched orb sources",
                         default=Constants.ORB_SRC_DIR)
    collect.add_argument("--list-only",
                         dest="LIST_ONLY",
                         help="Do not fetch orb sources; just list names and versions",
                         action="store_true")
    _add_collect_options(collect)

    resolve = subparsers.add_parser(
        Commands.RESOLVE_DEPENDENCIES.value,
        help="Resolve dependencies between orbs and return the order of orbs to import",
    )
    resolve.add_argument("--src",
                         dest="SRC_DIR",
                         help="Path to the directory containing orb sources",
                         default=Constants.ORB_SRC_DIR)
    resolve.add_argument("--ordered",
                         dest="ORDERED_PATH",
                         help="Path to the file to list resolved/ordered orbs",
                         default=Constants.RESOLVED_LIST_FILE)
    resolve.add_argument("--illegible",
                         dest="ILLEGIBLE_PATH",
                         help="Path to the file to list orbs that caused YAML parser errors",
                         default=Constants.ILLEGIBLE_LIST_FILE)
    resolve.add_argument("--unresolved",
                         dest="UNRESOLVED_PATH",
                         help="Path to the file to dump the map of unresolved orbs",
                         default=Constants.UNRESOLVED_MAP_FILE)

    bulk_import = subparsers.add_parser(Commands.BULK_IMPORT.value, help="Import multiple orbs at once")
    bulk_import.add_argument("--host",
                             dest="HOST",
                             help="Hostname of the registry instance to import into",
                             required=True)
    bulk_import.add_argument("--token",
                             dest="TOKEN",
                             help=f"Token for the registry instance (or ${Constants.ENV_TOKEN})")
    bulk_import.add_argument("--list",
                             dest="LIST_PATH",
                             help="Path to the file containing the list of resolved/ordered orbs",
                             default=Constants.RESOLVED_LIST_FILE)
    bulk_import.add_argument("--src",
                             dest="SRC_DIR",
                             help="Path to the directory containing orb sources",
                             default=Constants.ORB_SRC_DIR)
    bulk_import.add_argument("--available",
                             dest="AVAILABLE_PATH",
                             help="Path to the file to list orbs ensured to be available by import",
                             default=Constants.AVAILABLE_LIST_FILE)
    bulk_import.add_argument("--dropped",
                             dest="DROPPED_PATH",
                             help="Path to the file to list orbs dropped while importing",
                             default=Constants.DROPPED_LIST_FILE)
    _add_retry_options(bulk_import)

    sync = subparsers.add_parser(Commands.SYNC.value, help="Sync orbs from one registry to another")
    sync.add_argument("--src-host",
                      dest="SRC_HOST",
                      help="Hostname of the registry instance orbs are coming from",
                      default=None)
    sync.add_argument("--src-token",
                      dest="SRC_TOKEN",
                      help=f"Token for the source registry (or ${Constants.ENV_SRC_TOKEN})")
    sync.add_argument("--dst-host",
                      dest="DST_HOST",
                      help="Hostname of the registry instance orbs are going to",
                      required=True)
    sync.add_argument("--dst-token",
                      dest="DST_TOKEN",
                      help=f"Token for the destination registry (or ${Constants.ENV_DST_TOKEN})")
    _add_collect_options(sync)
    _add_retry_options(sync)

    return parser.parse_args(argv)
