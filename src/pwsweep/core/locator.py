"""Candidate discovery strategies.

Sources combine these building blocks: probing fixed locations,
bounded name searches under a root, symlink probes and parsing the
output of package-manager "list global packages" commands.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Iterable

from pwsweep.models.candidate import CandidatePath

log = logging.getLogger(__name__)

# yarn classic: info "@playwright/test@1.40.0" has binaries:
_YARN_INFO_RE = re.compile(r'info "(@?[^@"\s]+)@[^"]*"')


def probe_known(paths: Iterable[Path]) -> list[Path]:
    """Return the paths that exist (dangling symlinks included)."""
    return [p for p in paths if os.path.lexists(p)]


def search(
    root: Path | str,
    patterns: Iterable[str],
    *,
    max_depth: int | None = None,
    limit: int | None = None,
    dirs_only: bool = False,
    prune: Iterable[Path | str] = (),
) -> list[Path]:
    """Find entries under *root* whose name contains any of *patterns*.

    Matching is case-insensitive. Depth counts like ``find -maxdepth``:
    direct children of *root* are at depth 1. Symlinks are not followed,
    pruned subtrees are neither reported nor entered, unreadable
    directories are skipped. Stops after *limit* matches.
    """
    root_str = os.fspath(root)
    if not os.path.isdir(root_str):
        return []
    if max_depth is not None and max_depth < 1:
        return []

    needles = tuple(p.lower() for p in patterns)
    pruned = {os.path.normpath(os.fspath(p)) for p in prune}
    found: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root_str):
        rel = os.path.relpath(dirpath, root_str)
        depth = 0 if rel == "." else rel.count(os.sep) + 1

        dirnames[:] = sorted(d for d in dirnames if os.path.join(dirpath, d) not in pruned)
        names = dirnames if dirs_only else sorted(dirnames + filenames)
        for name in names:
            if any(n in name.lower() for n in needles):
                found.append(Path(dirpath) / name)
                if limit is not None and len(found) >= limit:
                    log.debug("Result cap %d reached under %s", limit, root_str)
                    return found

        if max_depth is not None and depth + 1 >= max_depth:
            dirnames[:] = []

    return found


def probe_symlink(path: Path) -> str | None:
    """Describe *path* if it is a stale or Playwright binary link.

    A broken symlink always qualifies, an intact one only when its target
    mentions Playwright, and a regular file sitting at a binary location
    qualifies as a manual install.
    """
    if path.is_symlink():
        try:
            target = os.readlink(path)
        except OSError:
            return None
        if not path.exists():
            return f"broken symlink -> {target}"
        if "playwright" in target.lower():
            return f"symlink -> {target}"
        return None
    if path.is_file():
        return "playwright binary"
    return None


def is_playwright_package(name: str) -> bool:
    """True for ``playwright``, ``playwright-*`` and ``@playwright/*``."""
    return name == "playwright" or name.startswith("playwright-") or name.startswith("@playwright/")


def _dependency_names(node: Any) -> list[str]:
    names: list[str] = []
    if not isinstance(node, dict):
        return names
    for key in ("dependencies", "devDependencies"):
        deps = node.get(key)
        if isinstance(deps, dict):
            names.extend(deps)
    return names


def parse_npm_list(stdout: str) -> list[str]:
    """Parse ``npm list -g --depth=0 --json`` (pnpm's list form as well)."""
    try:
        data = json.loads(stdout or "{}")
    except json.JSONDecodeError:
        log.debug("Unparseable package list output")
        return []
    nodes = data if isinstance(data, list) else [data]
    names: list[str] = []
    for node in nodes:
        names.extend(_dependency_names(node))
    return list(dict.fromkeys(n for n in names if is_playwright_package(n)))


def parse_yarn_list(stdout: str) -> list[str]:
    """Parse ``yarn global list`` text output."""
    names = _YARN_INFO_RE.findall(stdout or "")
    return list(dict.fromkeys(n for n in names if is_playwright_package(n)))


def merge_candidates(candidates: Iterable[CandidatePath]) -> list[CandidatePath]:
    """Drop candidates whose resolved path was already discovered."""
    seen: dict[str, CandidatePath] = {}
    for candidate in candidates:
        key = os.path.normpath(str(candidate.resolved))
        if key in seen:
            log.debug("Duplicate candidate %s (already found by %s)", candidate.path, seen[key].source_id)
            continue
        seen[key] = candidate
    return list(seen.values())
