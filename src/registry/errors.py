"""Errors raised by registry clients."""

from __future__ import annotations

from typing import List, Optional


class RegistryError(Exception):
    """Base class for any failure talking to an orb registry."""


class RegistryConnectionError(RegistryError):
    """The registry could not be reached (timeout, refused connection, ...)."""


class GraphQLError(RegistryError):
    """The registry answered, but the GraphQL request did not succeed.

    Args:
        message: Summary of the failure.
        status_code: HTTP status of the response, when known.
        messages: Individual error messages reported by the server.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        messages: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.messages = list(messages or [])
