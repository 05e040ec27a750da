"""Per-run scan configuration.

There is no configuration file: everything is derived from the home
directory, the working directory and a few environment variables
(``PLAYWRIGHT_BROWSERS_PATH``, ``NVM_DIR``, ``TMPDIR``). The resulting
``ScanConfig`` is immutable and shared by every component of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pwsweep.core.classifier import ProtectedRules, default_protected_rules
from pwsweep.utils import browser_cache_dir, nvm_dir, temp_dir

# Name fragments identifying Playwright artifacts (matched case-insensitively).
PATTERNS: tuple[str, ...] = ("playwright", "ms-playwright", "@playwright")

# Package directory names installed by the Node.js distribution.
PACKAGE_DIRS: tuple[str, ...] = ("playwright", "playwright-core", "@playwright")

# Homebrew prefixes (Apple Silicon first, then Intel).
BREW_PREFIXES: tuple[Path, ...] = (Path("/opt/homebrew"), Path("/usr/local"))


@dataclass(frozen=True)
class ScanConfig:
    """Locations and rules used for one invocation."""

    home: Path
    cwd: Path
    browser_cache: Path
    nvm_dir: Path
    temp_dir: Path
    rules: ProtectedRules
    system_temp: Path = Path("/private/var/folders")
    brew_prefixes: tuple[Path, ...] = BREW_PREFIXES
    patterns: tuple[str, ...] = field(default=PATTERNS)

    @classmethod
    def from_environment(cls, home: Path | None = None, cwd: Path | None = None) -> ScanConfig:
        """Build the configuration for the current user and environment."""
        home = home or Path.home()
        return cls(
            home=home,
            cwd=cwd or Path.cwd(),
            browser_cache=browser_cache_dir(home),
            nvm_dir=nvm_dir(home),
            temp_dir=temp_dir(),
            rules=default_protected_rules(home),
        )

    @property
    def library(self) -> Path:
        return self.home / "Library"

    @property
    def hermetic_browsers(self) -> Path:
        """Browsers installed with PLAYWRIGHT_BROWSERS_PATH=0 in the current project."""
        return self.cwd / "node_modules" / "playwright-core" / ".local-browsers"
