"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    IMPORT_ERROR = 3


class Commands(Enum):
    """Subcommands supported by the program.

    Args:
        Enum (string): Subcommand names as typed on the command line.
    """

    COLLECT = "collect"
    RESOLVE_DEPENDENCIES = "resolve-dependencies"
    BULK_IMPORT = "bulk-import"
    SYNC = "sync"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    Values may be overridden at runtime from a YAML config (see cli_config).
    """

    DEFAULT_SOURCE_HOST = "https://circleci.com"
    GRAPHQL_ENDPOINT = "graphql-unstable"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "orbsync/1.0"

    # Import retry policy
    IMPORT_MAX_ATTEMPTS = 3
    IMPORT_RETRY_DELAY_SEC = 0.2

    # Source listing
    FAST_STRATEGY_BULKINESS = 4
    VERSIONS_PER_ORB = 200
    ORB_LIST_PAGE_SIZE = 20
    KNOWN_HIDDEN_ORBS = [
        "circleci/welcome-orb",
        "circleci/artifactory",
        "circleci/hello-build",
    ]

    # Default file locations
    ORB_SRC_DIR = "orbs"
    ORB_LIST_FILE = "orbs.txt"
    RESOLVED_LIST_FILE = "orbs-resolved.txt"
    ILLEGIBLE_LIST_FILE = "orbs-illegible.txt"
    UNRESOLVED_MAP_FILE = "orbs-unresolved.txt"
    AVAILABLE_LIST_FILE = "orbs-available.txt"
    DROPPED_LIST_FILE = "orbs-dropped.txt"
    ORB_SRC_SUFFIX = ".yml"

    # Environment variables
    ENV_LOG_LEVEL = "ORBSYNC_LOG_LEVEL"
    ENV_TOKEN = "CIRCLECI_TOKEN"
    ENV_SRC_TOKEN = "ORBSYNC_SRC_TOKEN"
    ENV_DST_TOKEN = "ORBSYNC_DST_TOKEN"

    LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
