"""CircleCI orb registry: collecting orbs from a source, writing to a target."""

from .collector import list_all_versioned_orbs
from .writer import OrbRegistryWriter

__all__ = ["list_all_versioned_orbs", "OrbRegistryWriter"]
