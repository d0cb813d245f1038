"""Registry writer backed by the CircleCI GraphQL API."""
from __future__ import annotations

import logging
from typing import Optional

from registry.base import RegistryWriter
from registry.errors import GraphQLError
from registry.graphql import GraphQLClient, raise_for_payload_errors

logger = logging.getLogger(__name__)

NAMESPACE_QUERY = """
query ($name: String!) {
    registryNamespace(name: $name) {
        id
    }
}
"""

IMPORT_NAMESPACE_MUTATION = """
mutation ($name: String!) {
    importNamespace(name: $name) {
        namespace {
            id
        }
        errors {
            message
            type
        }
    }
}
"""

ORB_ID_QUERY = """
query ($name: String!) {
    orb(name: $name) {
        id
    }
}
"""

IMPORT_ORB_MUTATION = """
mutation ($orbName: String!, $registryNamespaceId: UUID!) {
    importOrb(name: $orbName, registryNamespaceId: $registryNamespaceId) {
        orb {
            id
        }
        errors {
            message
            type
        }
    }
}
"""

ORB_VERSION_QUERY = """
query ($orbVersionRef: String!) {
    orbVersion(orbVersionRef: $orbVersionRef) {
        id
        version
    }
}
"""

IMPORT_ORB_VERSION_MUTATION = """
mutation ($orbId: UUID!, $orbSource: String!, $orbVersion: String!) {
    importOrbVersion(orbId: $orbId, orbSource: $orbSource, orbVersion: $orbVersion) {
        orb {
            version
        }
        errors {
            message
            type
        }
    }
}
"""


def _node_id(node) -> str:
    if isinstance(node, dict):
        return node.get("id") or ""
    return ""


class OrbRegistryWriter(RegistryWriter):
    """Writes namespaces, orbs and orb versions to a registry instance.

    Args:
        client: GraphQL client bound to the target registry.
    """

    def __init__(self, client: GraphQLClient):
        self.client = client

    def _namespace_id(self, name: str) -> str:
        data = self.client.run(NAMESPACE_QUERY, {"name": name})
        return _node_id(data.get("registryNamespace"))

    def namespace_exists(self, name: str) -> bool:
        return bool(self._namespace_id(name))

    def create_namespace(self, name: str) -> str:
        data = self.client.run(IMPORT_NAMESPACE_MUTATION, {"name": name})
        payload = data.get("importNamespace")
        raise_for_payload_errors(payload, f"could not create namespace {name!r}")
        namespace_id = _node_id((payload or {}).get("namespace"))
        if not namespace_id:
            raise GraphQLError(f"registry returned no id for namespace {name!r}")
        return namespace_id

    def find_orb_id(self, name: str) -> Optional[str]:
        data = self.client.run(ORB_ID_QUERY, {"name": name})
        return _node_id(data.get("orb")) or None

    def create_orb(self, namespace: str, shortname: str) -> str:
        namespace_id = self._namespace_id(namespace)
        if not namespace_id:
            raise GraphQLError(f"namespace {namespace!r} does not exist")
        data = self.client.run(
            IMPORT_ORB_MUTATION,
            {"orbName": shortname, "registryNamespaceId": namespace_id},
        )
        payload = data.get("importOrb")
        raise_for_payload_errors(payload, f"could not register orb {namespace}/{shortname}")
        orb_id = _node_id((payload or {}).get("orb"))
        if not orb_id:
            raise GraphQLError(f"registry returned no id for orb {namespace}/{shortname}")
        return orb_id

    def version_exists(self, ref: str) -> bool:
        data = self.client.run(ORB_VERSION_QUERY, {"orbVersionRef": ref})
        return bool(_node_id(data.get("orbVersion")))

    def publish_version(self, source: str, orb_id: str, version: str) -> str:
        data = self.client.run(
            IMPORT_ORB_VERSION_MUTATION,
            {"orbId": orb_id, "orbSource": source, "orbVersion": version},
        )
        payload = data.get("importOrbVersion")
        raise_for_payload_errors(payload, f"could not publish version {version!r}")
        orb = (payload or {}).get("orb") or {}
        return orb.get("version") or version
