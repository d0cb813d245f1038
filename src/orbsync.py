"""orbsync - copy orbs between registry instances in dependency order."""
import logging
import sys

from args import parse_args
from constants import ExitCodes
from cli_config import ConfigError, load_config
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from importer.errors import ImportAbortedError
from registry.errors import RegistryError


def _setup_logging(args) -> None:
    """Configure logging from CLI arguments; the CLI level always wins."""
    configure_logging(getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        add_file_handler(log_file)


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    _setup_logging(args)

    # kept out of module scope so --help does not load the registry stack
    from cli_commands import COMMANDS  # pylint: disable=import-outside-toplevel

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action),
        )

    try:
        load_config(getattr(args, "CONFIG", None))
        COMMANDS[args.action](args)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except OSError as e:
        logger.error("File error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except ImportAbortedError as e:
        logger.error("import failed: %s (%s)", e, e.__cause__)
        sys.exit(ExitCodes.IMPORT_ERROR.value)
    except RegistryError as e:
        logger.error("registry communication failed: %s", e)
        sys.exit(ExitCodes.CONNECTION_ERROR.value)

    logger.info("%s completed", args.action)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
