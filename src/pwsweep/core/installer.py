"""Fresh Playwright installation: prerequisites, packages, browsers."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from pwsweep.config import ScanConfig
from pwsweep.core.locator import parse_npm_list
from pwsweep.utils import CommandResult, has_command, run_command

log = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]

BROWSERS: tuple[str, ...] = ("chromium", "firefox", "webkit")
DEFAULT_BROWSERS: tuple[str, ...] = ("chromium",)
PACKAGES: tuple[str, ...] = ("playwright", "@playwright/test")

MIN_NODE_VERSION = "16.0.0"
MIN_NPM_VERSION = "7.0.0"

# Interactive menu: choice -> (label, browsers). "5" asks for a list.
BROWSER_MENU: dict[str, tuple[str, tuple[str, ...]]] = {
    "1": ("Chromium only (recommended, fastest)", ("chromium",)),
    "2": ("Chromium + Firefox", ("chromium", "firefox")),
    "3": ("Chromium + WebKit", ("chromium", "webkit")),
    "4": ("All browsers (Chromium, Firefox, WebKit)", BROWSERS),
    "5": ("Custom selection", ()),
}

# Browser downloads take a while on slow connections.
_INSTALL_TIMEOUT = 1800


def _version_tuple(version: str) -> tuple[int, ...]:
    parts = []
    for piece in version.strip().lstrip("v").split("."):
        m = re.match(r"\d+", piece)
        parts.append(int(m.group()) if m else 0)
    return tuple(parts)


def version_at_least(found: str, minimum: str) -> bool:
    """Numeric dotted comparison, ``v`` prefix and suffixes ignored."""
    a, b = _version_tuple(found), _version_tuple(minimum)
    width = max(len(a), len(b))
    return a + (0,) * (width - len(a)) >= b + (0,) * (width - len(b))


@dataclass(slots=True)
class Prerequisite:
    name: str
    ok: bool
    detail: str
    fatal: bool = True


@dataclass(slots=True)
class PrerequisiteReport:
    checks: list[Prerequisite] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(c.ok for c in self.checks if c.fatal)


def _check_tool(run: Runner, name: str, minimum: str) -> Prerequisite:
    if not has_command(name):
        return Prerequisite(name, False, f"{name} is not installed")
    result = run([name, "--version"])
    version = result.stdout.strip().lstrip("v")
    if not result.ok or not version:
        return Prerequisite(name, False, f"could not determine {name} version")
    if not version_at_least(version, minimum):
        return Prerequisite(name, False, f"{name} {version} is too old (need {minimum}+)")
    return Prerequisite(name, True, version)


def check_prerequisites(run: Runner = run_command) -> PrerequisiteReport:
    """Node.js and npm versions are required; Xcode tools only recommended."""
    report = PrerequisiteReport()
    report.checks.append(_check_tool(run, "node", MIN_NODE_VERSION))
    report.checks.append(_check_tool(run, "npm", MIN_NPM_VERSION))

    xcode = run(["xcode-select", "-p"])
    report.checks.append(
        Prerequisite(
            "xcode-select",
            xcode.ok,
            xcode.stdout.strip() if xcode.ok else "Xcode command line tools not found "
            "(install with: xcode-select --install)",
            fatal=False,
        )
    )
    for check in report.checks:
        log.debug("Prerequisite %s: ok=%s (%s)", check.name, check.ok, check.detail)
    return report


@dataclass(slots=True)
class ExistingInstall:
    browser_cache: Path | None = None
    global_packages: list[str] = field(default_factory=list)
    project_manifest: Path | None = None

    @property
    def found(self) -> bool:
        return bool(self.browser_cache or self.global_packages or self.project_manifest)


def detect_existing(config: ScanConfig, run: Runner = run_command, cwd: Path | None = None) -> ExistingInstall:
    """Look for traces of a previous installation."""
    existing = ExistingInstall()
    if config.browser_cache.is_dir():
        existing.browser_cache = config.browser_cache

    if has_command("npm"):
        listing = run(["npm", "list", "-g", "--depth=0", "--json"])
        existing.global_packages = parse_npm_list(listing.stdout)

    manifest = (cwd or config.cwd) / "package.json"
    try:
        if manifest.is_file() and "playwright" in manifest.read_text(errors="replace"):
            existing.project_manifest = manifest
    except OSError as e:
        log.debug("Could not read %s: %s", manifest, e)
    return existing


def parse_browsers(value: str | None) -> list[str] | None:
    """Parse a ``--browsers`` value.

    Returns None for ``prompt`` (caller shows the menu) and the default
    selection when *value* is empty. Unknown names are dropped.
    """
    if value is None or not value.strip():
        return list(DEFAULT_BROWSERS)
    if value.strip().lower() == "prompt":
        return None

    selected: list[str] = []
    for name in re.split(r"[,\s]+", value.strip().lower()):
        if not name:
            continue
        if name == "all":
            selected.extend(BROWSERS)
        elif name in BROWSERS:
            selected.append(name)
        else:
            log.warning("Unknown browser: %s, skipping", name)
    return list(dict.fromkeys(selected))


def install_packages(run: Runner = run_command, project_dir: Path | None = None) -> CommandResult:
    """Install the npm packages globally, or as dev dependencies of *project_dir*."""
    if project_dir is None:
        result = run(["npm", "install", "-g", *PACKAGES], timeout=_INSTALL_TIMEOUT)
    else:
        if not (project_dir / "package.json").exists():
            log.info("No package.json found in %s, creating one", project_dir)
            init = run(["npm", "init", "-y"], cwd=project_dir)
            if not init.ok:
                log.warning("npm init failed: %s", init.stderr.strip())
        result = run(["npm", "install", "-D", *PACKAGES], cwd=project_dir, timeout=_INSTALL_TIMEOUT)
    if not result.ok:
        log.warning("Package installation exited with %d: %s", result.returncode, result.stderr.strip())
    return result


def install_browsers(
    run: Runner = run_command,
    browsers: list[str] | tuple[str, ...] = DEFAULT_BROWSERS,
    project_dir: Path | None = None,
) -> CommandResult:
    """Download browsers together with their system dependencies."""
    args = ["npx", "--no", "playwright", "install", "--with-deps", *browsers]
    result = run(args, cwd=project_dir, timeout=_INSTALL_TIMEOUT)
    if not result.ok:
        log.warning("Browser installation exited with %d: %s", result.returncode, result.stderr.strip())
    return result
