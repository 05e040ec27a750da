"""Source for stale `playwright` binaries on common bin paths."""

from __future__ import annotations

from pathlib import Path

from pwsweep.config import ScanConfig
from pwsweep.core.locator import probe_symlink
from pwsweep.models.candidate import CandidatePath, DiscoverySource
from pwsweep.models.source import CandidateSource


class OrphanedSymlinksSource(CandidateSource):
    """Finds broken or Playwright-owned `playwright` links and stray binaries."""

    id = "orphaned_symlinks"
    name = "Orphaned Symlinks"
    description = "playwright binary link"
    sort_order = 190

    @property
    def strategy(self) -> DiscoverySource:
        return DiscoverySource.SYMLINK_PROBE

    def locations(self, config: ScanConfig) -> tuple[Path, ...]:
        return (
            *(prefix / "bin" / "playwright" for prefix in reversed(config.brew_prefixes)),
            config.home / ".yarn" / "bin" / "playwright",
            config.library / "pnpm" / "playwright",
        )

    def discover(self, config: ScanConfig) -> list[CandidatePath]:
        found: list[CandidatePath] = []
        for path in self.locations(config):
            reason = probe_symlink(path)
            if reason:
                found.append(self._candidate(path, reason))
        return found
