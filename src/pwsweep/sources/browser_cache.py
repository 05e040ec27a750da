"""Sources for downloaded browser binaries and browser engine data."""

from __future__ import annotations

import logging
from pathlib import Path

from pwsweep.config import ScanConfig
from pwsweep.models.candidate import CandidatePath
from pwsweep.models.source import KnownLocationSource, SourceGroup
from pwsweep.utils import has_command, remove_path, run_command

log = logging.getLogger(__name__)

_GROUP = SourceGroup("browsers", "Browser Binaries", "Browsers downloaded by Playwright and their data")

_OFFICIAL_UNINSTALL = ["npx", "--no", "playwright", "uninstall", "--all"]


def installed_browsers(cache: Path) -> list[str]:
    """Names of the browser builds inside a cache directory."""
    try:
        return sorted(p.name for p in cache.iterdir() if p.is_dir())
    except OSError:
        return []


class BrowserCacheSource(KnownLocationSource):
    """Finds the shared browser cache and hermetic project installs.

    The cache under ~/Library/Caches/ms-playwright is shared with the
    Python, .NET and Java distributions; they need to reinstall browsers
    after it is removed.
    """

    id = "browser_cache"
    name = "Browser Binaries"
    description = "Browser cache"
    group = _GROUP
    sort_order = 10

    def __init__(self) -> None:
        self._primary: Path | None = None

    def _locations(self, config: ScanConfig) -> tuple[Path, ...]:
        self._primary = config.browser_cache
        return (config.browser_cache, config.hermetic_browsers)

    def _describe(self, path: Path) -> str:
        if path != self._primary:
            return "Hermetic browsers (node_modules)"
        browsers = installed_browsers(path)
        if browsers:
            return f"Browser cache ({', '.join(browsers)})"
        return "Browser cache"

    def _is_primary(self, candidate: CandidatePath) -> bool:
        return candidate.path == self._primary

    def describe_removal(self, candidate: CandidatePath) -> str:
        base = super().describe_removal(candidate)
        if self._is_primary(candidate) and has_command("npx"):
            return f"{' '.join(_OFFICIAL_UNINSTALL)} && {base}"
        return base

    def remove(self, candidate: CandidatePath) -> list[str]:
        if self._is_primary(candidate) and has_command("npx"):
            result = run_command(_OFFICIAL_UNINSTALL)
            if not result.ok:
                log.info("Official uninstall failed (exit %d), removing cache directly", result.returncode)
        error = remove_path(candidate.path)
        return [error] if error else []


class PlaywrightGoCacheSource(KnownLocationSource):
    """Finds browsers downloaded by playwright-go."""

    id = "playwright_go"
    name = "Playwright Go Cache"
    description = "Playwright Go browser cache"
    group = _GROUP
    sort_order = 120

    def _locations(self, config: ScanConfig) -> tuple[Path, ...]:
        return (config.library / "Caches" / "ms-playwright-go",)


class WebKitDataSource(KnownLocationSource):
    """Finds caches, preferences and data written by Playwright's WebKit."""

    id = "webkit_data"
    name = "WebKit Playwright Data"
    description = "WebKit Playwright data"
    group = _GROUP
    sort_order = 130

    def _locations(self, config: ScanConfig) -> tuple[Path, ...]:
        lib = config.library
        return (
            lib / "Caches" / "org.webkit.Playwright",
            lib / "Preferences" / "org.webkit.Playwright.plist",
            lib / "WebKit" / "org.webkit.Playwright",
        )

    def _describe(self, path: Path) -> str:
        if path.suffix == ".plist":
            return "WebKit Playwright preferences"
        if path.parent.name == "Caches":
            return "WebKit Playwright cache"
        return "WebKit Playwright data"
