"""Preview-then-commit cleanup flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from pwsweep.config import ScanConfig
from pwsweep.core.engine import OutcomeCallback, SweepEngine
from pwsweep.models.run_summary import ExecutionMode, RunSummary

log = logging.getLogger(__name__)

Confirm = Callable[[int], bool]  # (estimated_bytes) -> proceed?
SummaryCallback = Callable[[ExecutionMode, RunSummary], None]


class CleanupState(str, Enum):
    NOTHING_FOUND = "nothing_found"
    PREVIEWED = "previewed"
    DECLINED = "declined"
    COMPLETED = "completed"


@dataclass(slots=True)
class CleanupReport:
    state: CleanupState
    preview: RunSummary
    commit: RunSummary | None = None


def run_cleanup(
    engine: SweepEngine,
    config: ScanConfig,
    *,
    dry_run: bool,
    confirm: Confirm,
    on_outcome: OutcomeCallback | None = None,
    on_summary: SummaryCallback | None = None,
) -> CleanupReport:
    """Preview pass, then (unless *dry_run*) confirmation and a commit pass.

    The preview always runs first so the confirmation can show an
    accurate size. The commit pass rescans from scratch with its own
    counters. Nothing is modified unless *confirm* returns True.
    """
    _, preview = engine.run(config, ExecutionMode.DRY_RUN, on_outcome=on_outcome)
    if on_summary:
        on_summary(ExecutionMode.DRY_RUN, preview)

    if preview.items_found == 0:
        return CleanupReport(CleanupState.NOTHING_FOUND, preview)
    if dry_run:
        return CleanupReport(CleanupState.PREVIEWED, preview)

    if not confirm(preview.total_size_bytes):
        log.info("Removal declined by user")
        return CleanupReport(CleanupState.DECLINED, preview)

    _, committed = engine.run(config, ExecutionMode.COMMIT, on_outcome=on_outcome)
    if on_summary:
        on_summary(ExecutionMode.COMMIT, committed)
    return CleanupReport(CleanupState.COMPLETED, preview, committed)
