"""Read-only system-wide report of Playwright traces."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable

from pwsweep.config import PACKAGE_DIRS, ScanConfig
from pwsweep.core.classifier import is_excluded
from pwsweep.core.locator import search

log = logging.getLogger(__name__)

SEARCH_DEPTH = 24
SEARCH_LIMIT = 10000


def known_locations(config: ScanConfig) -> list[Path]:
    """Fixed paths checked before the full scan."""
    home, lib = config.home, config.library
    paths = [config.browser_cache, lib / "Caches" / "ms-playwright-go"]
    for prefix in config.brew_prefixes:
        paths += [prefix / "lib" / "node_modules" / pkg for pkg in PACKAGE_DIRS]
        paths.append(prefix / "bin" / "playwright")
    paths += [home / ".config" / "yarn" / "global" / "node_modules" / pkg for pkg in PACKAGE_DIRS]
    paths += [home / ".yarn" / "bin" / "playwright", home / ".yarn" / "berry" / "global"]
    paths += [lib / "pnpm" / "global" / "5" / "node_modules" / pkg for pkg in PACKAGE_DIRS]
    paths += [
        lib / "pnpm" / "playwright",
        lib / "Caches" / "org.webkit.Playwright",
        lib / "Preferences" / "org.webkit.Playwright.plist",
        lib / "WebKit" / "org.webkit.Playwright",
        home / ".npm" / "_npx",
        home / ".bun" / "install" / "cache",
    ]
    return paths


def prune_dirs(config: ScanConfig) -> tuple[Path, ...]:
    return (
        config.home / ".Trash",
        Path("/System/Volumes/Data"),
        Path("/System"),
        Path("/private/var/db"),
        Path("/private/var/folders/zz"),
        Path("/dev"),
    )


def _nvm_packages(config: ScanConfig) -> list[Path]:
    versions = config.nvm_dir / "versions" / "node"
    if not versions.is_dir():
        return []
    return [
        version / "lib" / "node_modules" / pkg
        for version in sorted(versions.iterdir())
        for pkg in PACKAGE_DIRS
        if (version / "lib" / "node_modules" / pkg).is_dir()
    ]


@dataclass
class TraceReport:
    paths: list[Path] = field(default_factory=list)
    started: datetime = field(default_factory=datetime.now)
    duration: float = 0.0
    roots: tuple[str, ...] = ("/",)
    known_locations: list[Path] = field(default_factory=list)
    patterns: tuple[str, ...] = ()
    rules: tuple[str, ...] = ()


def find_traces(config: ScanConfig, roots: Iterable[str | Path] = ("/",)) -> TraceReport:
    """Collect every non-protected path related to Playwright. Never modifies anything."""
    roots = tuple(str(r) for r in roots)
    report = TraceReport(
        roots=roots,
        known_locations=known_locations(config),
        patterns=config.patterns,
        rules=tuple(config.rules),
    )
    start = time.monotonic()

    found: list[Path] = [p for p in report.known_locations if p.exists()]
    found += _nvm_packages(config)

    prune = prune_dirs(config)
    for root in roots:
        log.info("Searching %s", root)
        matches = search(root, config.patterns, max_depth=SEARCH_DEPTH, limit=SEARCH_LIMIT, prune=prune)
        if len(matches) >= SEARCH_LIMIT:
            log.warning("Stopped after %d matches under %s, results are incomplete", SEARCH_LIMIT, root)
        found += matches

    unique = {os.path.normpath(str(p)) for p in found if not is_excluded(p, config.rules)}
    report.paths = sorted(Path(p) for p in unique)
    report.duration = time.monotonic() - start
    return report


def write_report(report: TraceReport, directory: Path) -> Path:
    """Write the plain-text report and return its path."""
    out = directory / f"playwright-traces-{report.started:%Y%m%d-%H%M%S}.txt"
    rule = "=" * 79

    def section(title: str) -> list[str]:
        return [rule, title, rule, ""]

    lines = section("PLAYWRIGHT TRACES FINDER - SCAN REPORT")
    lines += [
        "Scope:          Playwright for Node.js ONLY",
        f"Search roots:   {', '.join(report.roots)}",
        f"Scan date:      {report.started:%Y-%m-%d %H:%M:%S}",
        f"Scan duration:  {int(report.duration)}s",
        f"Files found:    {len(report.paths)}",
        "",
    ]
    lines += section("SCOPE INFORMATION")
    lines += [
        "This report covers Playwright for Node.js (npm/yarn/pnpm) installations.",
        "Playwright for Python, .NET, Java and embedded copies are not covered.",
        "",
        "WARNING: the browser cache ~/Library/Caches/ms-playwright/ is SHARED between",
        "Node.js, Python, .NET and Java. Deleting it affects ALL languages.",
        "",
    ]
    lines += section("SEARCH CONFIGURATION")
    lines += ["Search patterns used:"] + [f"  - *{p}*" for p in report.patterns] + [""]
    lines += ["Excluded directories:"] + [f"  - {r}" for r in report.rules] + [""]
    lines += [f"Known locations checked ({len(report.known_locations)} paths):"]
    lines += [f"  - {p}" for p in report.known_locations] + [""]
    lines += ["nvm installations checked: $NVM_DIR/versions/node/*/lib/node_modules/playwright*", ""]
    lines += section("RESULTS")
    if report.paths:
        lines += [f"Found {len(report.paths)} file(s)/folder(s) related to Playwright:", ""]
        lines += [str(p) for p in report.paths]
    else:
        lines.append("No Playwright traces found. The system is clean.")
    lines += [""] + section("END OF REPORT")

    out.write_text("\n".join(lines).rstrip() + "\n")
    log.info("Report written to %s", out)
    return out
