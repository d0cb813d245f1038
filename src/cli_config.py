"""Runtime configuration: YAML config file and token lookup.

Values from the config file are applied onto ``Constants``; CLI flags are
applied afterwards by the command handlers and therefore win.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

CONFIG_SECTION = "orbsync"


class ConfigError(Exception):
    """The configuration file cannot be read or has an invalid value."""


def str_list(value: Any) -> list:
    """Accept a list or a comma-separated string of names."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise TypeError("expected a list of strings")


def positive_int(value: Any) -> int:
    """Integer of at least 1; also used as an argparse type."""
    number = int(value)
    if number < 1:
        raise ValueError("must be at least 1")
    return number


def non_negative_float(value: Any) -> float:
    """Float of at least 0; also used as an argparse type."""
    number = float(value)
    if number < 0:
        raise ValueError("must not be negative")
    return number


# config key -> (Constants attribute, converter)
CONFIG_KEYS: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "source_host": ("DEFAULT_SOURCE_HOST", str),
    "graphql_endpoint": ("GRAPHQL_ENDPOINT", str),
    "request_timeout": ("REQUEST_TIMEOUT", non_negative_float),
    "import_max_attempts": ("IMPORT_MAX_ATTEMPTS", positive_int),
    "import_retry_delay": ("IMPORT_RETRY_DELAY_SEC", non_negative_float),
    "fast_strategy_bulkiness": ("FAST_STRATEGY_BULKINESS", positive_int),
    "versions_per_orb": ("VERSIONS_PER_ORB", positive_int),
    "orb_list_page_size": ("ORB_LIST_PAGE_SIZE", positive_int),
    "known_hidden_orbs": ("KNOWN_HIDDEN_ORBS", str_list),
}


def apply_config(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply known keys of a config mapping onto ``Constants``.

    Args:
        data: Either ``{"orbsync": {...}}`` or the flat mapping itself.

    Returns:
        dict: The attributes that were set, by Constants name.

    Raises:
        ConfigError: If a known key has a value of the wrong type.
    """
    section = data.get(CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"'{CONFIG_SECTION}' section must be a mapping")

    applied = {}
    for key, value in section.items():
        target = CONFIG_KEYS.get(key)
        if target is None:
            logger.warning("ignoring unknown config key %r", key)
            continue
        attr, convert = target
        try:
            converted = convert(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid value for {key!r}: {exc}") from exc
        setattr(Constants, attr, converted)
        applied[attr] = converted
    return applied


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML config file and apply it.

    Returns:
        dict: The attributes that were set; empty when no path is given.

    Raises:
        ConfigError: If the file is missing, unreadable or malformed.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"could not read config file {path!r}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"config file {path!r} is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path!r} must contain a mapping")

    applied = apply_config(data)
    logger.info("Loaded config from: %s", path)
    return applied


def resolve_token(cli_value: Optional[str], *env_names: str) -> Optional[str]:
    """Pick a token from the CLI flag, else from the first set env variable."""
    if cli_value and cli_value.strip():
        return cli_value.strip()
    for name in env_names:
        env_value = os.environ.get(name)
        if env_value and env_value.strip():
            return env_value.strip()
    return None
