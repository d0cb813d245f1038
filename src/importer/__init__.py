"""Bulk import of dependency-ordered orbs into a target registry."""

from .bulk import import_orb, import_orbs_with_retries
from .errors import BulkImportError, ImportAbortedError, PublishError, RegistryTransientError
from .models import ImportOutcome
from .session import ImportSession

__all__ = [
    "import_orb",
    "import_orbs_with_retries",
    "BulkImportError",
    "ImportAbortedError",
    "PublishError",
    "RegistryTransientError",
    "ImportOutcome",
    "ImportSession",
]
