"""Collect versioned orbs from a registry instance.

Two listing strategies are offered. The fast one pages through every orb
together with its versions (and optionally sources) a few orbs at a time.
The slow one lists orb names first and then fetches each orb separately,
falling back to one request per version when an orb is too big to fetch
in one go.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import yaml

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from registry.errors import GraphQLError, RegistryError
from registry.graphql import GraphQLClient
from resolver.models import VersionedOrb

logger = logging.getLogger(__name__)

_VERSION_FIELDS_WITH_SOURCE = "version\n                        source"
_VERSION_FIELDS_WITHOUT_SOURCE = "version"

LIST_ALL_VERSIONED_ORBS_QUERY = """
query ListOrbsWithAllVersions($first: Int!, $after: String!, $certifiedOnly: Boolean!, $count: Int!) {
    orbs(first: $first, after: $after, certifiedOnly: $certifiedOnly) {
        totalCount
        edges {
            cursor
            node {
                name
                versions(count: $count) {
                    %s
                }
            }
        }
        pageInfo {
            hasNextPage
        }
    }
}
"""

LIST_VERSIONS_FOR_ONE_QUERY = """
query ($name: String!, $count: Int!) {
    orb(name: $name) {
        name
        versions(count: $count) {
            %s
        }
    }
}
"""

LIST_ORB_NAMES_QUERY = """
query ListOrbs($first: Int!, $after: String!, $certifiedOnly: Boolean!) {
    orbs(first: $first, after: $after, certifiedOnly: $certifiedOnly) {
        totalCount
        edges {
            cursor
            node {
                name
            }
        }
        pageInfo {
            hasNextPage
        }
    }
}
"""

ORB_SOURCE_QUERY = """
query ($orbVersionRef: String!) {
    orbVersion(orbVersionRef: $orbVersionRef) {
        id
        version
        source
    }
}
"""


def _version_fields(include_source: bool) -> str:
    return _VERSION_FIELDS_WITH_SOURCE if include_source else _VERSION_FIELDS_WITHOUT_SOURCE


def process_versioned_orb(name: str, version: Dict[str, Any]) -> Optional[VersionedOrb]:
    """Turn one API version entry into an orb, or None if its source is corrupt."""
    ref = f"{name}@{version.get('version', '')}"
    source = version.get("source") or ""
    logger.debug("discovered %r", ref)
    try:
        document = next(yaml.safe_load_all(source), None)
    except yaml.YAMLError as exc:
        logger.warning("corrupt orb %r detected; skipping: %s", ref, exc)
        return None
    if document is not None and not isinstance(document, dict):
        logger.warning(
            "corrupt orb %r detected; skipping: expected a mapping, got %s",
            ref,
            type(document).__name__,
        )
        return None
    return VersionedOrb.from_ref(ref, source)


def _orbs_from_versions(name: str, versions: Iterable[Dict[str, Any]]) -> List[VersionedOrb]:
    orbs = []
    for version in versions or []:
        orb = process_versioned_orb(name, version)
        if orb is not None:
            orbs.append(orb)
    return orbs


def fetch_versions_for_one(
    client: GraphQLClient, name: str, include_source: bool
) -> List[VersionedOrb]:
    """List the versions of one orb.

    Returns:
        list: Versioned orbs; empty when the orb does not exist.
    """
    logger.info(
        "listing versions of orb %r %s source", name, "with" if include_source else "without"
    )
    data = client.run(
        LIST_VERSIONS_FOR_ONE_QUERY % _version_fields(include_source),
        {"name": name, "count": Constants.VERSIONS_PER_ORB},
    )
    orb = data.get("orb")
    if not orb:
        return []
    return _orbs_from_versions(orb.get("name") or name, orb.get("versions"))


def fetch_orb_source(client: GraphQLClient, ref: str) -> str:
    """Fetch the source of a single orb version."""
    data = client.run(ORB_SOURCE_QUERY, {"orbVersionRef": ref})
    orb_version = data.get("orbVersion")
    if not orb_version or not orb_version.get("id"):
        raise GraphQLError(f"orb version {ref!r} does not exist")
    return orb_version.get("source") or ""


def _paginate(client: GraphQLClient, query: str, variables: Dict[str, Any]):
    """Yield orb nodes page by page, following the edge cursors."""
    cursor = ""
    while True:
        data = client.run(query, {**variables, "after": cursor})
        listing = data.get("orbs") or {}
        for edge in listing.get("edges") or []:
            cursor = edge.get("cursor", cursor)
            yield edge.get("node") or {}
        if not (listing.get("pageInfo") or {}).get("hasNextPage"):
            return


def list_orb_names(client: GraphQLClient, include_uncertified: bool) -> List[str]:
    """List the names of all orbs visible on the registry."""
    variables = {
        "first": Constants.ORB_LIST_PAGE_SIZE,
        "certifiedOnly": not include_uncertified,
    }
    return [node["name"] for node in _paginate(client, LIST_ORB_NAMES_QUERY, variables) if node.get("name")]


def list_known_hidden_orbs(
    client: GraphQLClient, names: Iterable[str], include_source: bool
) -> List[VersionedOrb]:
    """Fetch orbs hidden from listings but commonly referenced."""
    logger.info("injecting known hidden orbs")
    orbs: List[VersionedOrb] = []
    for name in names:
        logger.info("revealing %r", name)
        versions = fetch_versions_for_one(client, name, include_source)
        if not versions:
            logger.warning("hidden orb %r does not exist on %s; skipping", name, client.host)
        orbs.extend(versions)
    return orbs


def list_all_versioned_orbs_fast(
    client: GraphQLClient,
    hidden_orbs: Iterable[str],
    include_source: bool,
    include_uncertified: bool,
) -> List[VersionedOrb]:
    """Page through all orbs with their versions in small batches."""
    orbs = list_known_hidden_orbs(client, hidden_orbs, include_source)

    logger.info("fetching all versioned orbs at once")
    variables = {
        "first": Constants.FAST_STRATEGY_BULKINESS,
        "certifiedOnly": not include_uncertified,
        "count": Constants.VERSIONS_PER_ORB,
    }
    query = LIST_ALL_VERSIONED_ORBS_QUERY % _version_fields(include_source)
    for node in _paginate(client, query, variables):
        orbs.extend(_orbs_from_versions(node.get("name", ""), node.get("versions")))
    return orbs


def list_all_versioned_orbs_slow(
    client: GraphQLClient,
    hidden_orbs: Iterable[str],
    include_source: bool,
    include_uncertified: bool,
) -> List[VersionedOrb]:
    """Fetch each orb on its own, then each version if the orb is too big."""
    orbs = list_known_hidden_orbs(client, hidden_orbs, include_source)

    logger.info("listing all orb names")
    names = list_orb_names(client, include_uncertified)

    logger.info("fetching all versions of each orb")
    for name in names:
        logger.info("working on %r", name)
        try:
            orbs.extend(fetch_versions_for_one(client, name, include_source))
            continue
        except RegistryError as exc:
            logger.warning(
                "could not fetch versions of orb %r at once (%s); fetching each version one-by-one",
                name,
                exc,
            )

        for listed in fetch_versions_for_one(client, name, False):
            logger.info("fetching source of orb %s", listed.ref)
            orbs.append(VersionedOrb.from_ref(listed.ref, fetch_orb_source(client, listed.ref)))
    return orbs


def deduplicate(orbs: Iterable[VersionedOrb]) -> List[VersionedOrb]:
    """Drop repeated refs, keeping the first occurrence."""
    seen = set()
    unique = []
    for orb in orbs:
        if orb.ref in seen:
            continue
        seen.add(orb.ref)
        unique.append(orb)
    return unique


def list_all_versioned_orbs(
    client: GraphQLClient,
    hidden_orbs: Optional[Iterable[str]] = None,
    include_source: bool = True,
    include_uncertified: bool = False,
    slow: bool = False,
) -> List[VersionedOrb]:
    """List every versioned orb on a registry, de-duplicated by ref.

    Args:
        client: GraphQL client bound to the source registry.
        hidden_orbs: Orb names always included; defaults to the known hidden orbs.
        include_source: Whether to fetch orb sources as well.
        include_uncertified: Whether to include uncertified orbs.
        slow: Use the per-orb strategy instead of bulk pages.

    Returns:
        list: Versioned orbs.
    """
    hidden = list(Constants.KNOWN_HIDDEN_ORBS if hidden_orbs is None else hidden_orbs)
    strategy = list_all_versioned_orbs_slow if slow else list_all_versioned_orbs_fast
    orbs = deduplicate(strategy(client, hidden, include_source, include_uncertified))
    if is_debug_enabled(logger):
        logger.debug(
            "Collected orbs",
            extra=extra_context(
                event="function_exit",
                component="collector",
                action="list_all_versioned_orbs",
                target=client.host,
                count=len(orbs),
            ),
        )
    return orbs
