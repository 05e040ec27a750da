"""Sources for Playwright entries inside package manager caches.

Only entries named after Playwright are reported; the caches themselves
stay in place.
"""

from __future__ import annotations

from pathlib import Path

from pwsweep.config import ScanConfig
from pwsweep.models.source import PatternSearchSource, SourceGroup
from pwsweep.utils import has_command, run_command

_GROUP = SourceGroup("caches", "Package Manager Caches", "Cached tarballs and store entries")


def _reported_dir(args: list[str], fallback: Path) -> Path:
    """Directory printed by a package manager command, or *fallback*."""
    result = run_command(args)
    line = result.stdout.strip().splitlines()[-1] if result.ok and result.stdout.strip() else ""
    if line and Path(line).is_absolute():
        return Path(line)
    return fallback


class _ToolCacheSource(PatternSearchSource):
    """Cache whose location is reported by its package manager."""

    _tool: str = ""

    def unavailable_reason(self, config: ScanConfig) -> str | None:
        if not has_command(self._tool):
            return f"{self._tool} not installed"
        return super().unavailable_reason(config)


class NpmCacheSource(_ToolCacheSource):
    """Finds Playwright entries in the npm cache."""

    id = "npm_cache"
    name = "npm Cache"
    description = "npm cache"
    group = _GROUP
    sort_order = 50
    _tool = "npm"
    _dirs_only = True

    def _search_root(self, config: ScanConfig) -> Path:
        return _reported_dir(["npm", "config", "get", "cache"], config.home / ".npm")


class YarnCacheSource(_ToolCacheSource):
    """Finds Playwright entries in the yarn cache."""

    id = "yarn_cache"
    name = "yarn Cache"
    description = "yarn cache"
    group = _GROUP
    sort_order = 60
    _tool = "yarn"
    _dirs_only = True

    def _search_root(self, config: ScanConfig) -> Path:
        return _reported_dir(["yarn", "cache", "dir"], config.library / "Caches" / "Yarn")


class PnpmStoreSource(_ToolCacheSource):
    """Finds Playwright entries in the pnpm content store."""

    id = "pnpm_store"
    name = "pnpm Store"
    description = "pnpm store"
    group = _GROUP
    sort_order = 70
    _tool = "pnpm"
    _dirs_only = True

    def _search_root(self, config: ScanConfig) -> Path:
        return _reported_dir(["pnpm", "store", "path"], config.library / "pnpm" / "store")


class NpxCacheSource(PatternSearchSource):
    """Finds Playwright packages fetched by npx."""

    id = "npx_cache"
    name = "npx Cache"
    description = "npx cache"
    group = _GROUP
    sort_order = 90
    _max_depth = 6
    _dirs_only = True

    def _search_root(self, config: ScanConfig) -> Path:
        return config.home / ".npm" / "_npx"


class BunCacheSource(PatternSearchSource):
    """Finds Playwright packages in the bun install cache."""

    id = "bun_cache"
    name = "bun Cache"
    description = "bun cache"
    group = _GROUP
    sort_order = 100
    _max_depth = 2
    _dirs_only = True

    def _search_root(self, config: ScanConfig) -> Path:
        return config.home / ".bun" / "install" / "cache"


class PnpmMetadataSource(PatternSearchSource):
    """Finds Playwright entries in the pnpm v10 metadata index."""

    id = "pnpm_metadata"
    name = "pnpm Metadata Index"
    description = "pnpm metadata"
    group = _GROUP
    sort_order = 150
    _max_depth = 6

    def _search_root(self, config: ScanConfig) -> Path:
        return config.library / "pnpm" / "store" / "v10" / "index"
