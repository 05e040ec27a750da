"""Disk usage of included candidates."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pwsweep.core.classifier import ClassificationError, normalize
from pwsweep.models.scan_result import ScanResult
from pwsweep.utils import tree_size

log = logging.getLogger(__name__)


def size_of(path: Path) -> int:
    """Recursive size in bytes; 0 if missing or unreadable."""
    try:
        st = path.lstat()
    except OSError:
        return 0
    if path.is_dir() and not path.is_symlink():
        return tree_size(path)
    return st.st_size


def _under(path: str, ancestor: str) -> bool:
    return path == ancestor or path.startswith(ancestor.rstrip(os.sep) + os.sep)


def collapse_nested(results: list[ScanResult]) -> list[ScanResult]:
    """Drop included results lying inside another included result.

    Removing the ancestor removes them as well, so they would only be
    counted twice. Excluded results are kept untouched.
    """
    keys: dict[int, str] = {}
    for i, result in enumerate(results):
        if not result.included:
            continue
        try:
            keys[i] = normalize(result.candidate.resolved)
        except ClassificationError:
            continue

    ancestors = sorted(set(keys.values()), key=len)
    kept: list[ScanResult] = []
    for i, result in enumerate(results):
        key = keys.get(i)
        if key is not None and any(a != key and _under(key, a) for a in ancestors):
            log.debug("Folding %s into an enclosing candidate", result.candidate.path)
            continue
        kept.append(result)
    return kept


def annotate(results: list[ScanResult]) -> list[ScanResult]:
    """Measure included results after folding nested ones.

    Excluded results are never measured and keep ``size_bytes=None``.
    """
    kept = collapse_nested(results)
    for result in kept:
        if result.included:
            result.size_bytes = size_of(result.candidate.path)
    return kept
