"""Post-install verification."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from pwsweep.core.locator import search
from pwsweep.utils import CommandResult, run_command

log = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]

# Executable (file) or bundle (directory) names per browser.
BROWSER_EXECUTABLES: dict[str, tuple[tuple[str, ...], bool]] = {
    "chromium": (("chrome", "Chromium", "Google Chrome for Testing"), False),
    "firefox": (("firefox",), False),
    "webkit": (("Playwright.app",), True),
}


@dataclass(slots=True)
class Check:
    name: str
    ok: bool
    detail: str = ""


@dataclass(slots=True)
class VerificationReport:
    """Verification outcome. Only a missing version string fails it."""

    version: str = ""
    checks: list[Check] = field(default_factory=list)
    browser_list: str = ""

    @property
    def ok(self) -> bool:
        return bool(self.version)

    @property
    def warnings(self) -> list[Check]:
        return [c for c in self.checks if not c.ok]


def find_browser(cache: Path, browser: str) -> Path | None:
    """Locate the executable or app bundle of *browser* under *cache*."""
    names, is_bundle = BROWSER_EXECUTABLES[browser]
    wanted = {n.lower() for n in names}
    for match in search(cache, names, max_depth=12):
        if match.name.lower() not in wanted:
            continue
        if is_bundle:
            if match.is_dir():
                return match
        elif match.is_file() and os.access(match, os.X_OK):
            return match
    return None


class InstallationVerifier:
    """Checks that a fresh install is invokable and browsers are in place."""

    def __init__(self, browser_cache: Path, run: Runner = run_command) -> None:
        self.browser_cache = browser_cache
        self._run = run

    def verify(self, browsers: list[str], cwd: Path | None = None) -> VerificationReport:
        report = VerificationReport()

        result = self._run(["npx", "--no", "playwright", "--version"], cwd=cwd)
        report.version = result.stdout.strip() if result.ok else ""
        report.checks.append(Check("version", bool(report.version), report.version or "playwright not invokable"))
        if not report.version:
            log.error("Could not verify Playwright installation: %s", result.stderr.strip())

        cache_ok = self.browser_cache.is_dir()
        report.checks.append(Check("browser cache", cache_ok, str(self.browser_cache)))

        listing = self._run(["npx", "--no", "playwright", "install", "--list"], cwd=cwd)
        report.browser_list = listing.stdout.strip() if listing.ok else ""

        for browser in browsers:
            if browser not in BROWSER_EXECUTABLES:
                continue
            found = find_browser(self.browser_cache, browser) if cache_ok else None
            report.checks.append(
                Check(browser, found is not None, str(found) if found else "not found in cache")
            )

        return report
