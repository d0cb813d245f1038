"""Orb manifest parser.

Only the ``orbs`` block of an orb source is interpreted. Each entry of that
block is either a reference to another orb (a string such as
``circleci/node@5.0.2``) or an inline orb definition, which may declare its
own ``orbs`` block, nested to any depth::

    orbs:
      node: circleci/node@5.0.2
      helper:
        orbs:
          slack: circleci/slack@volatile

The YAML is parsed once into ``OrbReference``/``InlineOrb`` entries; the
flattened set of identifiers is what the dependency graph consumes.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Optional, Set, Tuple, Union

import yaml

ORBS_KEY = "orbs"


class ManifestParseError(ValueError):
    """The source is not valid YAML or does not have the expected shape."""


@dataclass(frozen=True)
class OrbReference:
    """A dependency written as an identifier string."""
    identifier: str


@dataclass(frozen=True)
class InlineOrb:
    """An orb defined in place, carrying its own dependency entries."""
    entries: Tuple["DependencyEntry", ...] = ()


DependencyEntry = Union[OrbReference, InlineOrb]


@dataclass(frozen=True)
class Manifest:
    """Parsed dependency declarations of one orb source."""
    entries: Tuple[DependencyEntry, ...] = ()

    def dependency_identifiers(self) -> Set[str]:
        """Flatten all nested entries into one set of identifiers."""
        identifiers: Set[str] = set()
        queue: Deque[DependencyEntry] = deque(self.entries)
        while queue:
            entry = queue.popleft()
            if isinstance(entry, OrbReference):
                identifiers.add(entry.identifier)
            else:
                queue.extend(entry.entries)
        return identifiers


def _entries_from_block(block: Dict[Any, Any]) -> Tuple[DependencyEntry, ...]:
    entries = []
    for value in block.values():
        if isinstance(value, str):
            entries.append(OrbReference(value))
        elif isinstance(value, dict):
            nested = value.get(ORBS_KEY)
            entries.append(
                InlineOrb(_entries_from_block(nested) if isinstance(nested, dict) else ())
            )
        # Other scalar or list values carry no dependency.
    return tuple(entries)


def parse_manifest(source: Optional[str]) -> Manifest:
    """Parse the ``orbs`` block of an orb source.

    Args:
        source: Raw YAML text; empty or None yields an empty manifest.
            Only the first document of a multi-document stream is read.

    Returns:
        Manifest: The parsed dependency tree.

    Raises:
        ManifestParseError: If the YAML is malformed, the document is not a
            mapping, or its ``orbs`` value is not a mapping.
    """
    try:
        document = next(yaml.safe_load_all(source or ""), None)
    except yaml.YAMLError as exc:
        raise ManifestParseError(f"invalid YAML: {exc}") from exc

    if document is None:
        return Manifest()
    if not isinstance(document, dict):
        raise ManifestParseError(
            f"expected a mapping at the top level, got {type(document).__name__}"
        )

    block = document.get(ORBS_KEY)
    if block is None:
        return Manifest()
    if not isinstance(block, dict):
        raise ManifestParseError(
            f"expected '{ORBS_KEY}' to be a mapping, got {type(block).__name__}"
        )
    return Manifest(_entries_from_block(block))
