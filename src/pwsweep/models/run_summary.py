"""Counters and modes for one scan pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ExecutionMode(str, Enum):
    DRY_RUN = "dry_run"
    COMMIT = "commit"


class Outcome(str, Enum):
    SKIPPED = "skipped"
    WOULD_REMOVE = "would_remove"
    REMOVED = "removed"
    FAILED = "failed"


@dataclass(slots=True)
class RunSummary:
    """Aggregate counters of a single pass. Never shared between passes."""

    items_found: int = 0
    items_removed: int = 0
    total_size_bytes: int = 0
    skipped: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
