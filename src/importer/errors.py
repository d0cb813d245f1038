"""Errors raised while importing orbs into a target registry."""

from __future__ import annotations


class BulkImportError(Exception):
    """Base class for importer failures."""


class RegistryTransientError(BulkImportError):
    """Namespace, orb id or version lookup failed; fatal once retries run out."""


class PublishError(BulkImportError):
    """Publishing one orb version failed; the orb is dropped once retries run out."""


class ImportAbortedError(BulkImportError):
    """The whole import run was abandoned.

    Args:
        ref: Ref of the orb being imported when the run gave up.
        attempts: Number of attempts spent on that orb.
    """

    def __init__(self, ref: str, attempts: int):
        super().__init__(
            f"attempted import of {ref!r} {attempts} time(s), but couldn't complete"
        )
        self.ref = ref
        self.attempts = attempts
