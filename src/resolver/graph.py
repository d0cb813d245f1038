"""Dependency graph state for a single resolution run."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Set

from resolver.manifest import ManifestParseError, parse_manifest
from resolver.models import VersionedOrb

logger = logging.getLogger(__name__)

VOLATILE = "volatile"

_TRAILING_VERSION_PART = re.compile(r"\.?\d+$")
_TRAILING_DIGITS = re.compile(r"\d+$")
_VERSION_SUFFIX = re.compile(r"@[^@]*$")


def truncated_refs(ref: str) -> List[str]:
    """Version-truncated forms of a ref, most specific first.

    ``ns/orb@1.2.3`` yields ``["ns/orb@1.2", "ns/orb@1"]``; truncation stops
    once the remainder no longer ends in a digit.
    """
    forms = []
    partial = _TRAILING_VERSION_PART.sub("", ref)
    while _TRAILING_DIGITS.search(partial):
        forms.append(partial)
        partial = _TRAILING_VERSION_PART.sub("", partial)
    return forms


def volatile_ref(ref: str) -> str:
    """The floating alias of a ref, e.g. ``ns/orb@volatile``."""
    return _VERSION_SUFFIX.sub("@" + VOLATILE, ref)


def satisfied_identifiers(ref: str) -> List[str]:
    """Every identifier a resolved ref satisfies: itself, its prefixes, its alias."""
    return [ref, *truncated_refs(ref), volatile_ref(ref)]


class ResolutionGraph:
    """Forward and reverse dependency maps, owned by one resolve call.

    Attributes:
        orbs: Ref -> orb for every legible orb.
        dependencies: Ref -> identifiers still unmet (forward map).
        dependents: Identifier -> refs declaring it (reverse map).
        illegible: Refs whose source failed to parse, in input order.
    """

    def __init__(self) -> None:
        self.orbs: Dict[str, VersionedOrb] = {}
        self.dependencies: Dict[str, Set[str]] = {}
        self.dependents: Dict[str, Set[str]] = {}
        self.illegible: List[str] = []

    @classmethod
    def build(cls, orbs: Iterable[VersionedOrb]) -> "ResolutionGraph":
        """Parse every orb and register its edges.

        Illegible orbs are recorded but never become nodes.
        """
        graph = cls()
        for orb in orbs:
            logger.debug("initializing %r", orb.ref)
            try:
                manifest = parse_manifest(orb.source)
            except ManifestParseError as exc:
                logger.warning("ignoring orb %r because of YAML parser error: %s", orb.ref, exc)
                graph.illegible.append(orb.ref)
                continue
            graph.add(orb, manifest.dependency_identifiers())
        return graph

    def add(self, orb: VersionedOrb, identifiers: Iterable[str]) -> None:
        """Register one orb as a node with the given dependency identifiers."""
        unmet = set(identifiers)
        self.orbs[orb.ref] = orb
        self.dependencies[orb.ref] = unmet
        for identifier in unmet:
            self.dependents.setdefault(identifier, set()).add(orb.ref)

    def __len__(self) -> int:
        return len(self.dependencies)

    def ready_frontier(self) -> List[str]:
        """Refs with no unmet identifier, sorted for a deterministic order."""
        return sorted(ref for ref, unmet in self.dependencies.items() if not unmet)

    def remove(self, ref: str) -> VersionedOrb:
        """Take a ready ref out of the graph and clear what it satisfies.

        Returns:
            VersionedOrb: The orb registered under ``ref``.
        """
        del self.dependencies[ref]
        for identifier in satisfied_identifiers(ref):
            self._clear(identifier)
        return self.orbs[ref]

    def _clear(self, identifier: str) -> None:
        for dependent in self.dependents.get(identifier, ()):
            unmet = self.dependencies.get(dependent)
            if unmet is not None:
                unmet.discard(identifier)

    def unresolved(self) -> Dict[str, List[str]]:
        """Residual forward map with sorted identifier lists."""
        return {ref: sorted(unmet) for ref, unmet in sorted(self.dependencies.items())}
