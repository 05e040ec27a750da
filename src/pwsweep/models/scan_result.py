"""Per-candidate classification result."""

from __future__ import annotations

from dataclasses import dataclass

from pwsweep.models.candidate import CandidatePath


@dataclass(slots=True)
class ScanResult:
    """A candidate after classification and sizing.

    ``size_bytes`` stays None for excluded candidates: they are never
    measured.
    """

    candidate: CandidatePath
    included: bool
    size_bytes: int | None = None
    protected_by: str | None = None
