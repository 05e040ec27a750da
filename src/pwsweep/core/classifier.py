"""Protected-prefix path classification.

Every candidate goes through ``is_excluded`` before it is sized or
removed. Matching is a literal string prefix test on lexically
normalized absolute paths, so a rule ``/Users/me/Projects`` also covers
``/Users/me/ProjectsBackup``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)


class ClassificationError(ValueError):
    """Raised when a path cannot be normalized for comparison."""


def normalize(path: Path | str) -> str:
    """Return the lexically normalized absolute form of *path*.

    Collapses ``.``, ``..``, repeated and trailing separators without
    touching the filesystem.

    Raises:
        ClassificationError: If *path* is empty, relative or malformed.
    """
    try:
        raw = os.fspath(path)
    except TypeError as e:
        raise ClassificationError(f"Not a path: {path!r}") from e
    if not isinstance(raw, str) or not raw:
        raise ClassificationError(f"Not a usable path: {path!r}")
    if "\x00" in raw:
        raise ClassificationError(f"Path contains NUL byte: {raw!r}")
    if not os.path.isabs(raw):
        raise ClassificationError(f"Path is not absolute: {raw}")
    normalized = os.path.normpath(raw)
    # POSIX keeps a leading "//" as-is
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


@dataclass(frozen=True)
class ProtectedRules:
    """Static set of protected path prefixes for one run."""

    prefixes: tuple[str, ...]

    @classmethod
    def from_paths(cls, paths: list[Path | str] | tuple[Path | str, ...]) -> ProtectedRules:
        prefixes: list[str] = []
        for p in paths:
            try:
                prefixes.append(normalize(p))
            except ClassificationError:
                log.warning("Ignoring invalid protected rule: %r", p)
        return cls(tuple(dict.fromkeys(prefixes)))

    def __iter__(self):
        return iter(self.prefixes)

    def __len__(self) -> int:
        return len(self.prefixes)


def default_protected_rules(home: Path) -> ProtectedRules:
    """Locations that are never reported or removed."""
    lib = home / "Library"
    return ProtectedRules.from_paths((
        # User content
        home / "Projects",
        home / ".Trash",
        home / "Downloads",
        home / "IdeaProjects",
        home / "WebstormProjects",
        home / "Applications",
        "/Applications",
        # Playwright for Python
        "/Library/Frameworks/Python.framework",
        "/usr/local/lib/python",
        "/opt/homebrew/lib/python",
        home / ".local" / "lib" / "python",
        lib / "Python",
        home / ".virtualenvs",
        home / ".pyenv",
        # Embedded copies (editor extensions)
        home / ".vscode" / "extensions",
        home / ".vscode-server" / "extensions",
        home / ".cursor" / "extensions",
        # Unrelated tool caches sharing directory names
        home / ".antigravity",
        home / ".cache" / "github-copilot",
        lib / "Application Support" / "JetBrains",
        lib / "Caches" / "JetBrains",
        lib / "Caches" / "pypoetry",
        lib / "Logs" / "JetBrains",
        lib / "Caches" / "claude-cli-nodejs",
        "/private/tmp/claude",
    ))


def matching_rule(path: Path | str, rules: ProtectedRules) -> str | None:
    """Return the first rule prefix covering *path*, or None.

    A path that cannot be normalized is reported as covered by ``"<invalid>"``.
    """
    try:
        target = normalize(path)
    except ClassificationError as e:
        log.debug("Excluding unclassifiable path: %s", e)
        return "<invalid>"
    for prefix in rules.prefixes:
        if target.startswith(prefix):
            return prefix
    return None


def is_excluded(path: Path | str, rules: ProtectedRules) -> bool:
    """True if *path* equals or lies under (by string prefix) any rule."""
    return matching_rule(path, rules) is not None


def shields_protected(path: Path | str, rules: ProtectedRules) -> str | None:
    """Return a protected prefix that lies strictly inside *path*, if any.

    Removing such a directory would take protected content with it.
    """
    try:
        target = normalize(path)
    except ClassificationError:
        return "<invalid>"
    base = target if target.endswith(os.sep) else target + os.sep
    for prefix in rules.prefixes:
        if prefix.startswith(base):
            return prefix
    return None
