"""Sources for leftovers in temporary and tool directories."""

from __future__ import annotations

from pathlib import Path

from pwsweep.config import ScanConfig
from pwsweep.models.source import PatternSearchSource, SourceGroup

_GROUP = SourceGroup("leftovers", "Leftovers", "Temporary files and tool caches")


class TempFilesSource(PatternSearchSource):
    """Finds Playwright temp files in $TMPDIR."""

    id = "temp_files"
    name = "Temporary Files"
    description = "temp file"
    group = _GROUP
    sort_order = 80
    _max_depth = 2

    def _search_root(self, config: ScanConfig) -> Path:
        return config.temp_dir


class ClaudeCacheSource(PatternSearchSource):
    """Finds Playwright plugins and caches under ~/.claude."""

    id = "claude_cache"
    name = "Claude Cache"
    description = "Claude cache"
    group = _GROUP
    sort_order = 110
    _max_depth = 6

    def _search_root(self, config: ScanConfig) -> Path:
        return config.home / ".claude"


class SystemTempSource(PatternSearchSource):
    """Finds WebKit and browser caches in the per-user system temp folders."""

    id = "system_temp"
    name = "System Temp Caches"
    description = "system temp cache"
    group = _GROUP
    sort_order = 140
    _max_depth = 5

    def _search_root(self, config: ScanConfig) -> Path:
        return config.system_temp

    def _patterns(self, config: ScanConfig) -> tuple[str, ...]:
        return ("org.webkit.playwright", "ms-playwright")
