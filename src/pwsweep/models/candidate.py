"""Candidate path dataclass."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class DiscoverySource(str, Enum):
    """How a candidate was found."""

    KNOWN_LOCATION = "known_location"
    PATTERN_SEARCH = "pattern_search"
    PACKAGE_MANAGER_QUERY = "package_manager_query"
    SYMLINK_PROBE = "symlink_probe"


@dataclass(frozen=True, slots=True)
class CandidatePath:
    """Absolute path that may belong to the Playwright footprint.

    ``source_id`` names the source plugin that found it and therefore
    knows how to remove it. ``package`` is set for globally installed
    packages that are removed through their package manager.
    """

    path: Path
    source: DiscoverySource
    description: str
    is_directory: bool = False
    source_id: str = ""
    package: str | None = None

    def __post_init__(self) -> None:
        if not str(self.path) or not self.path.is_absolute():
            raise ValueError(f"Candidate path must be absolute: {self.path!r}")

    @property
    def resolved(self) -> Path:
        """Path with symlinked parent directories resolved.

        The final component is kept as-is so a symlink candidate still
        refers to the link itself.
        """
        parent = self.path.parent
        try:
            return Path(os.path.realpath(parent)) / self.path.name
        except (OSError, ValueError):
            return self.path
