"""Scan and removal orchestration engine."""

from __future__ import annotations

import logging
from typing import Callable

from pwsweep.config import ScanConfig
from pwsweep.core.classifier import matching_rule, shields_protected
from pwsweep.core.locator import merge_candidates
from pwsweep.core.registry import SourceRegistry
from pwsweep.core.sizing import annotate
from pwsweep.models.candidate import CandidatePath
from pwsweep.models.run_summary import ExecutionMode, Outcome, RunSummary
from pwsweep.models.scan_result import ScanResult
from pwsweep.utils import remove_path

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (source_id, status)
OutcomeCallback = Callable[[ScanResult, Outcome, str], None]  # (result, outcome, action)


class SweepEngine:
    """Runs discovery, classification, sizing and removal over all sources.

    Everything is sequential. A pass never shares counters with another
    pass: ``run`` always starts from a fresh ``RunSummary``.
    """

    def __init__(self, registry: SourceRegistry) -> None:
        self.registry = registry

    def discover(
        self,
        config: ScanConfig,
        on_progress: ProgressCallback | None = None,
    ) -> list[CandidatePath]:
        """Collect candidates from every available source, de-duplicated."""
        candidates: list[CandidatePath] = []
        for source in self.registry.get_available(config):
            if on_progress:
                on_progress(source.id, "scanning")
            try:
                found = source.discover(config)
            except Exception:
                log.exception("Source '%s' failed during discovery", source.id)
                if on_progress:
                    on_progress(source.id, "error")
                continue
            log.debug("Source '%s' found %d candidates", source.id, len(found))
            candidates.extend(found)
            if on_progress:
                on_progress(source.id, "done")
        return merge_candidates(candidates)

    @staticmethod
    def classify(candidates: list[CandidatePath], config: ScanConfig) -> list[ScanResult]:
        """Mark each candidate included or excluded. No filesystem access."""
        results: list[ScanResult] = []
        for candidate in candidates:
            rule = (
                matching_rule(candidate.path, config.rules)
                or matching_rule(candidate.resolved, config.rules)
                or shields_protected(candidate.path, config.rules)
            )
            if rule is not None:
                log.debug("Protected: %s (rule %s)", candidate.path, rule)
            results.append(ScanResult(candidate=candidate, included=rule is None, protected_by=rule))
        return results

    def scan(
        self,
        config: ScanConfig,
        on_progress: ProgressCallback | None = None,
    ) -> list[ScanResult]:
        """Discover, classify and size. MUST NOT modify anything."""
        return annotate(self.classify(self.discover(config, on_progress), config))

    def apply(self, result: ScanResult, mode: ExecutionMode, summary: RunSummary) -> Outcome:
        """Act on one classified result and update *summary*."""
        candidate = result.candidate
        if not result.included:
            summary.skipped.append(candidate.path)
            return Outcome.SKIPPED

        size = result.size_bytes or 0
        summary.items_found += 1
        summary.total_size_bytes += size

        if mode is ExecutionMode.DRY_RUN:
            return Outcome.WOULD_REMOVE

        source = self.registry.get(candidate.source_id)
        try:
            if source is not None:
                errors = source.remove(candidate)
            else:
                error = remove_path(candidate.path)
                errors = [error] if error else []
        except Exception as e:
            log.exception("Source '%s' crashed removing %s", candidate.source_id, candidate.path)
            errors = [f"{candidate.path}: {e}"]

        if errors:
            for error in errors:
                log.warning("Could not remove %s", error)
            summary.errors.extend(errors)
            return Outcome.FAILED
        summary.items_removed += 1
        return Outcome.REMOVED

    def describe_action(self, result: ScanResult) -> str:
        """Command-style text for what removal of *result* does."""
        source = self.registry.get(result.candidate.source_id)
        if source is None:
            return f"rm -rf {result.candidate.path}"
        return source.describe_removal(result.candidate)

    def run(
        self,
        config: ScanConfig,
        mode: ExecutionMode,
        on_outcome: OutcomeCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[list[ScanResult], RunSummary]:
        """One complete pass over a fresh scan."""
        summary = RunSummary()
        results = self.scan(config, on_progress)
        for result in results:
            action = self.describe_action(result) if result.included else ""
            outcome = self.apply(result, mode, summary)
            if on_outcome:
                on_outcome(result, outcome, action)
        log.info(
            "%s pass: %d found, %d removed, %d bytes, %d protected",
            mode.value, summary.items_found, summary.items_removed,
            summary.total_size_bytes, len(summary.skipped),
        )
        return results, summary
