"""Result of a bulk import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class ImportOutcome:
    """Refs ensured to be on the target, and refs given up on."""
    available: List[str] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)
