"""Data models shared by the resolver and the importer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class VersionedOrb:
    """One published version of an orb.

    Attributes:
        ref: Globally unique ``name@version`` identifier.
        name: ``namespace/shortname``.
        version: Version string, e.g. "1.2.3".
        source: Raw YAML source of the orb.
    """
    ref: str
    name: str
    version: str
    source: str = ""

    @classmethod
    def from_ref(cls, ref: str, source: str = "") -> "VersionedOrb":
        """Build an orb from its ref, splitting at the first ``@``."""
        name, _, version = ref.partition("@")
        return cls(ref=ref, name=name, version=version, source=source)

    @property
    def namespace(self) -> str:
        return self.name.split("/", 1)[0]

    @property
    def shortname(self) -> str:
        parts = self.name.split("/", 1)
        return parts[1] if len(parts) > 1 else ""


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of one dependency resolution run.

    Attributes:
        ordered: Orbs in dependency-first order.
        illegible: Refs whose source could not be parsed, in input order.
        unresolved: Ref -> identifiers it could never clear (sorted).
    """
    ordered: List[VersionedOrb] = field(default_factory=list)
    illegible: List[str] = field(default_factory=list)
    unresolved: Dict[str, List[str]] = field(default_factory=dict)

    def ordered_refs(self) -> List[str]:
        return [orb.ref for orb in self.ordered]
