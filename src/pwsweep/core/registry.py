"""Central source registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator

from pwsweep.models.source import CandidateSource

if TYPE_CHECKING:
    from pwsweep.config import ScanConfig

log = logging.getLogger(__name__)


class SourceRegistry:
    """Stores and retrieves registered candidate sources."""

    def __init__(self) -> None:
        self._sources: dict[str, CandidateSource] = {}

    def register(self, source: CandidateSource) -> None:
        """Register a source instance."""
        if source.id in self._sources:
            log.warning("Source '%s' already registered, skipping duplicate", source.id)
            return
        self._sources[source.id] = source
        log.debug("Registered source: %s (%s)", source.id, source.name)

    def get(self, source_id: str) -> CandidateSource | None:
        """Get a source by its ID."""
        return self._sources.get(source_id)

    def get_all(self) -> list[CandidateSource]:
        """All registered sources in scan order."""
        return sorted(self._sources.values(), key=lambda s: (s.sort_order, s.id))

    def get_available(self, config: ScanConfig) -> list[CandidateSource]:
        """Sources that have something to look at on this system, in scan order."""
        available = []
        for source in self.get_all():
            try:
                reason = source.unavailable_reason(config)
            except Exception:
                log.exception("Error checking availability for source '%s'", source.id)
                continue
            if reason is None:
                available.append(source)
            else:
                log.info("Skipping %s: %s", source.id, reason)
        return available

    def get_groups(self) -> dict[str, list[CandidateSource]]:
        """Group sources by their SourceGroup id."""
        groups: dict[str, list[CandidateSource]] = {}
        for source in self.get_all():
            if source.group is not None:
                groups.setdefault(source.group.id, []).append(source)
        return groups

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[CandidateSource]:
        return iter(self.get_all())

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._sources
