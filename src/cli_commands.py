"""Handlers of the orbsync subcommands.

Each handler takes the parsed CLI namespace and raises on failure; the
entry point maps exceptions to exit codes.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from constants import Commands, Constants
from cli_config import ConfigError, resolve_token, str_list
from common import orb_files
from importer import import_orbs_with_retries
from importer.models import ImportOutcome
from registry.circleci import OrbRegistryWriter, list_all_versioned_orbs
from registry.graphql import GraphQLClient
from resolver import ResolutionResult, VersionedOrb, resolve

logger = logging.getLogger(__name__)


def _hidden_orbs(args) -> List[str]:
    must_include = getattr(args, "MUST_INCLUDE", None)
    if not must_include:
        return list(Constants.KNOWN_HIDDEN_ORBS)
    return [name for value in must_include for name in str_list(value)]


def _require_token(token: Optional[str], what: str) -> str:
    if not token:
        raise ConfigError(f"a token is required to write to the {what} registry")
    return token


def _import(writer: OrbRegistryWriter, orbs: List[VersionedOrb], args) -> ImportOutcome:
    return import_orbs_with_retries(
        writer,
        orbs,
        max_attempts=getattr(args, "MAX_ATTEMPTS", None),
        retry_delay=getattr(args, "RETRY_DELAY", None),
    )


def run_collect(args) -> List[VersionedOrb]:
    """List (and unless --list-only, fetch) all orbs of a registry to disk."""
    host = args.HOST or Constants.DEFAULT_SOURCE_HOST
    client = GraphQLClient(host, resolve_token(args.TOKEN, Constants.ENV_TOKEN))

    logger.info("start collecting orbs from %s", host)
    try:
        orbs = list_all_versioned_orbs(
            client,
            hidden_orbs=_hidden_orbs(args),
            include_source=not args.LIST_ONLY,
            include_uncertified=args.INCLUDE_UNCERTIFIED,
            slow=args.SLOW,
        )
    finally:
        client.close()

    logger.info("collection done; writing %d orbs", len(orbs))
    orb_files.write_ref_list(args.LIST_PATH, (orb.ref for orb in orbs))
    if not args.LIST_ONLY:
        orb_files.dump_orb_sources(orbs, args.SRC_DIR)
    return orbs


def run_resolve_dependencies(args) -> ResolutionResult:
    """Order the orbs found in a source directory and write the reports."""
    logger.info("loading orbs from %s", args.SRC_DIR)
    orbs = orb_files.load_orbs_in_dir(args.SRC_DIR)

    logger.info("resolving dependencies")
    result = resolve(orbs)

    orb_files.write_ref_list(args.ORDERED_PATH, result.ordered_refs())
    orb_files.write_ref_list(args.ILLEGIBLE_PATH, result.illegible)
    orb_files.write_unresolved_map(args.UNRESOLVED_PATH, result.unresolved)
    return result


def run_bulk_import(args) -> ImportOutcome:
    """Import the listed orbs, in list order, and write the outcome lists."""
    token = _require_token(resolve_token(args.TOKEN, Constants.ENV_TOKEN), "target")

    logger.info("loading orbs listed in %s", args.LIST_PATH)
    orbs = orb_files.load_listed_orbs(args.LIST_PATH, args.SRC_DIR)

    logger.info("starting import")
    client = GraphQLClient(args.HOST, token)
    try:
        outcome = _import(OrbRegistryWriter(client), orbs, args)
    finally:
        client.close()

    logger.info("outputting results")
    orb_files.write_ref_list(args.AVAILABLE_PATH, outcome.available)
    orb_files.write_ref_list(args.DROPPED_PATH, outcome.dropped)
    return outcome


def orbs_except(orbs: Iterable[VersionedOrb], excluded: Iterable[VersionedOrb]) -> List[VersionedOrb]:
    """Keep the orbs whose ref is not among ``excluded``, preserving order."""
    excluded_refs = {orb.ref for orb in excluded}
    return [orb for orb in orbs if orb.ref not in excluded_refs]


def run_sync(args) -> ImportOutcome:
    """Collect from the source, resolve, and import what the destination lacks."""
    dst_token = _require_token(resolve_token(args.DST_TOKEN, Constants.ENV_DST_TOKEN), "destination")
    src_host = args.SRC_HOST or Constants.DEFAULT_SOURCE_HOST
    src_client = GraphQLClient(src_host, resolve_token(args.SRC_TOKEN, Constants.ENV_SRC_TOKEN))
    dst_client = GraphQLClient(args.DST_HOST, dst_token)
    hidden = _hidden_orbs(args)

    try:
        logger.info("fetching orbs from source %s", src_host)
        src_orbs = list_all_versioned_orbs(
            src_client, hidden, include_source=True,
            include_uncertified=args.INCLUDE_UNCERTIFIED, slow=args.SLOW,
        )

        logger.info("listing orbs on destination %s", args.DST_HOST)
        dst_orbs = list_all_versioned_orbs(
            dst_client, hidden, include_source=False,
            include_uncertified=args.INCLUDE_UNCERTIFIED, slow=args.SLOW,
        )

        result = resolve(src_orbs)
        pending = orbs_except(result.ordered, dst_orbs)
        logger.info(
            "%d orbs resolved, %d already on destination, %d to import",
            len(result.ordered),
            len(result.ordered) - len(pending),
            len(pending),
        )

        outcome = _import(OrbRegistryWriter(dst_client), pending, args)
    finally:
        src_client.close()
        dst_client.close()

    logger.info("here is the list of orbs that caused YAML parser errors\n\n%s\n",
                "\n".join(result.illegible))
    logger.info("here is the map of orbs with unresolvable dependencies\n\n%s\n",
                orb_files.format_unresolved_map(result.unresolved))
    logger.info("here is the list of orbs dropped during import\n\n%s\n",
                "\n".join(outcome.dropped))
    logger.info("sync completed!")
    return outcome


COMMANDS = {
    Commands.COLLECT.value: run_collect,
    Commands.RESOLVE_DEPENDENCIES.value: run_resolve_dependencies,
    Commands.BULK_IMPORT.value: run_bulk_import,
    Commands.SYNC.value: run_sync,
}
