"""Per-run cache of target registry lookups."""

from __future__ import annotations

from typing import Dict, Optional, Set


class ImportSession:
    """Remembers what one import run already learned about the target.

    Namespaces are checked (and created if needed) once per run; orb ids are
    looked up (or registered) once per orb name. Nothing is shared between
    runs and no I/O happens here.
    """

    def __init__(self) -> None:
        self._namespaces_seen: Set[str] = set()
        self._orb_ids: Dict[str, str] = {}

    def has_checked_namespace(self, namespace: str) -> bool:
        return namespace in self._namespaces_seen

    def mark_namespace_checked(self, namespace: str) -> None:
        self._namespaces_seen.add(namespace)

    def cached_orb_id(self, name: str) -> Optional[str]:
        """Return the cached id of an orb, or None if not looked up yet."""
        return self._orb_ids.get(name)

    def cache_orb_id(self, name: str, orb_id: str) -> None:
        self._orb_ids[name] = orb_id
