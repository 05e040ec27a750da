"""Sources for package directories inside Node.js installations.

These are probed directly rather than through a package manager, so
they are found even when the owning runtime is no longer on PATH.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pwsweep.config import PACKAGE_DIRS, ScanConfig
from pwsweep.models.source import KnownLocationSource, SourceGroup

log = logging.getLogger(__name__)

_GROUP = SourceGroup("global", "Global Packages", "playwright and @playwright/* installed with -g")


def _package_dirs(node_modules: Path) -> tuple[Path, ...]:
    return tuple(node_modules / pkg for pkg in PACKAGE_DIRS)


class NvmGlobalSource(KnownLocationSource):
    """Finds global packages in every nvm-managed Node version."""

    id = "nvm_global"
    name = "nvm Global Packages"
    description = "nvm global package"
    group = _GROUP
    sort_order = 160

    def _versions_dir(self, config: ScanConfig) -> Path:
        return config.nvm_dir / "versions" / "node"

    def unavailable_reason(self, config: ScanConfig) -> str | None:
        if not self._versions_dir(config).is_dir():
            return "nvm not installed or no Node versions"
        return None

    def _locations(self, config: ScanConfig) -> tuple[Path, ...]:
        paths: list[Path] = []
        try:
            versions = sorted(p for p in self._versions_dir(config).iterdir() if p.is_dir())
        except OSError:
            log.debug("Cannot read nvm versions under %s", config.nvm_dir)
            return ()
        for version in versions:
            paths.extend(_package_dirs(version / "lib" / "node_modules"))
        return tuple(paths)

    def _describe(self, path: Path) -> str:
        # <nvm>/versions/node/<version>/lib/node_modules/<pkg>
        return f"nvm Node {path.parents[2].name}: {path.name}"


class HomebrewGlobalSource(KnownLocationSource):
    """Finds global packages of the Homebrew Node.js (Apple Silicon and Intel)."""

    id = "homebrew_global"
    name = "Homebrew Global Packages"
    description = "Homebrew global package"
    group = _GROUP
    sort_order = 170

    def _locations(self, config: ScanConfig) -> tuple[Path, ...]:
        paths: list[Path] = []
        for prefix in config.brew_prefixes:
            paths.extend(_package_dirs(prefix / "lib" / "node_modules"))
        return tuple(paths)


class GlobalPackageDirsSource(KnownLocationSource):
    """Finds yarn classic and pnpm global directories left behind by their tools."""

    id = "global_package_dirs"
    name = "yarn/pnpm Global Directories"
    description = "global package directory"
    group = _GROUP
    sort_order = 180

    def _locations(self, config: ScanConfig) -> tuple[Path, ...]:
        return (
            *_package_dirs(config.home / ".config" / "yarn" / "global" / "node_modules"),
            *_package_dirs(config.library / "pnpm" / "global" / "5" / "node_modules"),
        )

    def _describe(self, path: Path) -> str:
        tool = "yarn" if ".config" in path.parts else "pnpm"
        return f"{tool} global directory: {path.name}"
