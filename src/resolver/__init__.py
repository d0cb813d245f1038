"""Dependency resolution for orbs.

Parses orb manifests, builds the dependency graph and produces a
dependency-first import order with diagnostics for illegible and
unresolvable orbs.
"""

from .models import VersionedOrb, ResolutionResult
from .manifest import Manifest, ManifestParseError, parse_manifest
from .graph import ResolutionGraph
from .ordering import resolve

__all__ = [
    "VersionedOrb",
    "ResolutionResult",
    "Manifest",
    "ManifestParseError",
    "parse_manifest",
    "ResolutionGraph",
    "resolve",
]
