"""Minimal GraphQL client for the orb registry API."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from constants import Constants
from common import http_client
from registry.errors import GraphQLError

logger = logging.getLogger(__name__)


def build_endpoint_url(host: str, endpoint: str = "") -> str:
    """Join a registry host and the GraphQL endpoint path.

    A host given without a scheme is assumed to be https.
    """
    base = host.strip().rstrip("/")
    if "://" not in base:
        base = f"https://{base}"
    path = (endpoint or Constants.GRAPHQL_ENDPOINT).strip("/")
    return f"{base}/{path}"


def _error_messages(errors: Any) -> List[str]:
    messages = []
    for err in errors or []:
        if isinstance(err, dict):
            messages.append(str(err.get("message", err)))
        else:
            messages.append(str(err))
    return messages


class GraphQLClient:
    """Sends GraphQL queries to one registry instance.

    Args:
        host: Registry host, e.g. "https://circleci.com".
        token: API token; optional for read-only public queries.
        endpoint: Path of the GraphQL endpoint below the host.
        session: Optional pre-built requests session.
    """

    def __init__(
        self,
        host: str,
        token: Optional[str] = None,
        endpoint: str = "",
        session: Optional[requests.Session] = None,
    ):
        self.host = host
        self.url = build_endpoint_url(host, endpoint)
        self._session = session if session is not None else http_client.new_session(token)

    def run(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a query and return its ``data`` member.

        Args:
            query: GraphQL document.
            variables: Query variables.

        Returns:
            dict: The ``data`` object of the response (empty if null).

        Raises:
            GraphQLError: Non-200 status, undecodable body or reported errors.
            RegistryConnectionError: Transport failure.
        """
        res = http_client.safe_post(
            self._session,
            self.url,
            context="graphql",
            payload={"query": query, "variables": variables or {}},
        )
        if res.status_code != 200:
            raise GraphQLError(
                f"GraphQL endpoint returned HTTP {res.status_code}",
                status_code=res.status_code,
            )
        try:
            body = res.json()
        except ValueError as exc:
            raise GraphQLError(
                "GraphQL endpoint returned a non-JSON body",
                status_code=res.status_code,
            ) from exc
        if not isinstance(body, dict):
            raise GraphQLError("GraphQL response is not an object", status_code=res.status_code)

        messages = _error_messages(body.get("errors"))
        if messages:
            raise GraphQLError(
                "GraphQL query failed: " + "; ".join(messages),
                status_code=res.status_code,
                messages=messages,
            )
        return body.get("data") or {}

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self._session.close()


def raise_for_payload_errors(payload: Optional[Dict[str, Any]], action: str) -> None:
    """Raise GraphQLError when a mutation payload reports errors.

    Args:
        payload: The mutation result object, e.g. ``data["importOrb"]``.
        action: Human-readable description used in the message.
    """
    messages = _error_messages((payload or {}).get("errors"))
    if messages:
        raise GraphQLError(f"{action}: " + "; ".join(messages), messages=messages)
