"""Interface of a target registry, as used by the bulk importer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class RegistryWriter(ABC):
    """Operations the importer needs from the registry it writes to.

    Implementations raise ``registry.errors.RegistryError`` (or a subclass)
    on failure.
    """

    @abstractmethod
    def namespace_exists(self, name: str) -> bool:
        """Return True if the namespace is registered."""

    @abstractmethod
    def create_namespace(self, name: str) -> str:
        """Create an imported namespace and return its id."""

    @abstractmethod
    def find_orb_id(self, name: str) -> Optional[str]:
        """Return the id of orb ``namespace/shortname``, or None if absent."""

    @abstractmethod
    def create_orb(self, namespace: str, shortname: str) -> str:
        """Register an imported orb under a namespace and return its id."""

    @abstractmethod
    def version_exists(self, ref: str) -> bool:
        """Return True if ``name@version`` is published, False if not found."""

    @abstractmethod
    def publish_version(self, source: str, orb_id: str, version: str) -> str:
        """Publish one version of an orb; return the published version."""
