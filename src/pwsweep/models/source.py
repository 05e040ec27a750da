"""Base candidate source interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pwsweep.models.candidate import CandidatePath, DiscoverySource
from pwsweep.utils import has_command, remove_path, run_command

if TYPE_CHECKING:
    from pwsweep.config import ScanConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceGroup:
    """Display grouping for related sources."""

    id: str
    name: str
    description: str = ""


class CandidateSource(ABC):
    """Base class for all candidate sources.

    A source knows where one kind of Playwright artifact lives, how to
    find it and how to remove it. Discovery never modifies anything;
    classification and sizing happen in the engine, not here.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier, e.g. 'npm_cache'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name, e.g. 'npm Cache'."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this source finds."""

    @property
    def strategy(self) -> DiscoverySource:
        return DiscoverySource.KNOWN_LOCATION

    @property
    def group(self) -> SourceGroup | None:
        """Display group for related sources. None means standalone."""
        return None

    @property
    def sort_order(self) -> int:
        """Position in the scan sequence (lower = earlier). Default 50."""
        return 50

    @abstractmethod
    def discover(self, config: ScanConfig) -> list[CandidatePath]:
        """Find candidates. MUST NOT modify anything."""

    def unavailable_reason(self, config: ScanConfig) -> str | None:
        """Why this source has nothing to look at, or None if usable."""
        return None

    def is_available(self, config: ScanConfig) -> bool:
        return self.unavailable_reason(config) is None

    def describe_removal(self, candidate: CandidatePath) -> str:
        """Command-style description of what ``remove`` would do."""
        if candidate.is_directory:
            return f"rm -rf {candidate.path}"
        return f"rm {candidate.path}"

    def remove(self, candidate: CandidatePath) -> list[str]:
        """Remove a candidate and return error messages.

        A target that is already gone is not an error. Override in
        sources that remove through an external command.
        """
        error = remove_path(candidate.path)
        return [error] if error else []

    def _candidate(self, path: Path, description: str | None = None, **extra) -> CandidatePath:
        return CandidatePath(
            path=path,
            source=self.strategy,
            description=description or self.description,
            is_directory=path.is_dir() and not path.is_symlink(),
            source_id=self.id,
            **extra,
        )


class KnownLocationSource(CandidateSource, ABC):
    """Base class for sources that probe a fixed list of paths.

    Subclasses define metadata properties and _locations.
    """

    @abstractmethod
    def _locations(self, config: ScanConfig) -> tuple[Path, ...]:
        """Absolute paths to probe."""

    def _describe(self, path: Path) -> str:
        return self.description

    def discover(self, config: ScanConfig) -> list[CandidatePath]:
        from pwsweep.core.locator import probe_known

        return [self._candidate(p, self._describe(p)) for p in probe_known(self._locations(config))]


class PatternSearchSource(CandidateSource, ABC):
    """Base class for sources that search one root directory by name.

    Subclasses only need metadata properties and _search_root. Depth,
    result cap and patterns have bounded defaults.
    """

    _max_depth: int | None = 4
    _limit: int | None = 20
    _dirs_only: bool = False

    @property
    def strategy(self) -> DiscoverySource:
        return DiscoverySource.PATTERN_SEARCH

    @abstractmethod
    def _search_root(self, config: ScanConfig) -> Path:
        """Directory to search."""

    def _patterns(self, config: ScanConfig) -> tuple[str, ...]:
        return config.patterns

    def unavailable_reason(self, config: ScanConfig) -> str | None:
        if not self._search_root(config).is_dir():
            return f"{self.name} not found"
        return None

    def discover(self, config: ScanConfig) -> list[CandidatePath]:
        from pwsweep.core.locator import search

        matches = search(
            self._search_root(config),
            self._patterns(config),
            max_depth=self._max_depth,
            limit=self._limit,
            dirs_only=self._dirs_only,
        )
        return [self._candidate(p) for p in matches]


class GlobalPackageSource(CandidateSource, ABC):
    """Base class for sources that ask a package manager for global packages.

    A missing executable makes the source unavailable; it is skipped,
    not treated as an error.
    """

    @property
    def strategy(self) -> DiscoverySource:
        return DiscoverySource.PACKAGE_MANAGER_QUERY

    @property
    @abstractmethod
    def executable(self) -> str:
        """Package manager command, e.g. 'npm'."""

    @property
    @abstractmethod
    def _list_args(self) -> list[str]:
        """Command listing global packages."""

    @property
    @abstractmethod
    def _root_args(self) -> list[str]:
        """Command printing the global node_modules directory."""

    @abstractmethod
    def _parse(self, stdout: str) -> list[str]:
        """Extract Playwright package names from the list output."""

    @abstractmethod
    def _uninstall_args(self, package: str) -> list[str]:
        """Command removing one global package."""

    def _global_root(self, stdout: str) -> Path | None:
        line = stdout.strip().splitlines()[-1] if stdout.strip() else ""
        path = Path(line)
        return path if line and path.is_absolute() else None

    def unavailable_reason(self, config: ScanConfig) -> str | None:
        if not has_command(self.executable):
            return f"{self.executable} not installed"
        return None

    def discover(self, config: ScanConfig) -> list[CandidatePath]:
        listing = run_command(self._list_args)
        packages = self._parse(listing.stdout)
        if not packages:
            return []

        root = self._global_root(run_command(self._root_args).stdout)
        if root is None:
            log.warning("Could not determine %s global directory, skipping %s", self.executable, packages)
            return []

        return [
            self._candidate(root / pkg, f"{self.executable} global package {pkg}", package=pkg)
            for pkg in packages
        ]

    def describe_removal(self, candidate: CandidatePath) -> str:
        if candidate.package is None:
            return super().describe_removal(candidate)
        return " ".join(self._uninstall_args(candidate.package))

    def remove(self, candidate: CandidatePath) -> list[str]:
        if candidate.package is None:
            return super().remove(candidate)
        result = run_command(self._uninstall_args(candidate.package))
        if not result.ok:
            log.info(
                "%s exited with %d, treating %s as already absent",
                " ".join(result.args), result.returncode, candidate.package,
            )
        return []
