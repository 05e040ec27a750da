"""Tests for the scan/removal engine."""

from __future__ import annotations

import pytest

from pwsweep.core.engine import SweepEngine
from pwsweep.core.registry import SourceRegistry
from pwsweep.core.sizing import annotate, collapse_nested, size_of
from pwsweep.models.candidate import CandidatePath, DiscoverySource
from pwsweep.models.run_summary import ExecutionMode, Outcome, RunSummary
from pwsweep.models.scan_result import ScanResult


@pytest.fixture
def layout(config, make_tree):
    """A cache to remove and a protected project copy."""
    make_tree(config.browser_cache, {"chromium-1/chrome": 1000, "firefox-1/firefox": 500})
    make_tree(config.home, {"Projects/app/node_modules/playwright/index.js": 300})
    return config


@pytest.fixture
def engine(layout, fake_source):
    registry = SourceRegistry()
    registry.register(fake_source("cache", [layout.browser_cache]))
    registry.register(fake_source("project", [layout.home / "Projects/app/node_modules/playwright"]))
    registry.register(fake_source("disabled", [layout.browser_cache], available=False))
    return SweepEngine(registry)


def _result(path, included=True) -> ScanResult:
    return ScanResult(CandidatePath(path, DiscoverySource.KNOWN_LOCATION, "x"), included=included)


class TestScan:
    def test_classifies_and_sizes(self, engine, layout):
        results = engine.scan(layout)
        by_path = {r.candidate.path: r for r in results}
        cache = by_path[layout.browser_cache]
        project = by_path[layout.home / "Projects/app/node_modules/playwright"]

        assert cache.included and cache.size_bytes == 1500
        assert not project.included
        assert project.protected_by == str(layout.home / "Projects")
        assert project.size_bytes is None

    def test_unavailable_sources_skipped(self, engine, layout):
        ids = {r.candidate.source_id for r in engine.scan(layout)}
        assert "disabled" not in ids

    def test_source_errors_do_not_stop_scan(self, layout, fake_source):
        registry = SourceRegistry()
        registry.register(fake_source("bad", fail=True))
        registry.register(fake_source("good", [layout.browser_cache]))
        results = SweepEngine(registry).scan(layout)
        assert [r.candidate.source_id for r in results] == ["good"]

    def test_progress_callback(self, engine, layout):
        events: list[tuple[str, str]] = []
        engine.scan(layout, on_progress=lambda sid, status: events.append((sid, status)))
        assert ("cache", "scanning") in events
        assert ("cache", "done") in events

    def test_duplicate_discovery_counted_once(self, layout, fake_source):
        registry = SourceRegistry()
        registry.register(fake_source("first", [layout.browser_cache], sort=1))
        registry.register(fake_source("second", [layout.browser_cache], sort=2))
        _, summary = SweepEngine(registry).run(layout, ExecutionMode.DRY_RUN)
        assert summary.items_found == 1
        assert summary.total_size_bytes == 1500

    def test_ancestor_of_protected_excluded(self, layout, fake_source):
        registry = SourceRegistry()
        registry.register(fake_source("home", [layout.home]))
        (result,) = SweepEngine(registry).scan(layout)
        assert not result.included


class TestDryRun:
    def test_reports_without_mutation(self, engine, layout):
        outcomes = []
        results, summary = engine.run(
            layout, ExecutionMode.DRY_RUN,
            on_outcome=lambda r, o, action: outcomes.append((r.candidate.source_id, o, action)),
        )
        assert layout.browser_cache.exists()
        assert summary.items_found == 1
        assert summary.items_removed == 0
        assert summary.total_size_bytes == 1500
        assert summary.skipped == [layout.home / "Projects/app/node_modules/playwright"]
        assert ("cache", Outcome.WOULD_REMOVE, f"rm -rf {layout.browser_cache}") in outcomes
        assert ("project", Outcome.SKIPPED, "") in outcomes

    def test_repeatable(self, engine, layout):
        _, first = engine.run(layout, ExecutionMode.DRY_RUN)
        _, second = engine.run(layout, ExecutionMode.DRY_RUN)
        assert first == second


class TestCommit:
    def test_removes_included_only(self, engine, layout):
        _, summary = engine.run(layout, ExecutionMode.COMMIT)
        assert not layout.browser_cache.exists()
        assert (layout.home / "Projects/app/node_modules/playwright/index.js").exists()
        assert summary.items_found == summary.items_removed == 1
        assert summary.errors == []
        assert engine.registry.get("project").removed == []

    def test_idempotent(self, engine, layout):
        engine.run(layout, ExecutionMode.COMMIT)
        _, second = engine.run(layout, ExecutionMode.COMMIT)
        assert second.items_found == 0
        assert second.items_removed == 0
        assert second.errors == []

    def test_removal_errors_recorded(self, layout, fake_source, monkeypatch):
        registry = SourceRegistry()
        source = fake_source("cache", [layout.browser_cache])
        monkeypatch.setattr(source, "remove", lambda candidate: [f"{candidate.path}: Permission denied"])
        registry.register(source)
        outcomes = []
        _, summary = SweepEngine(registry).run(
            layout, ExecutionMode.COMMIT, on_outcome=lambda r, o, a: outcomes.append(o)
        )
        assert outcomes == [Outcome.FAILED]
        assert summary.items_found == 1
        assert summary.items_removed == 0
        assert summary.errors == [f"{layout.browser_cache}: Permission denied"]

    def test_crashing_remove_recorded(self, layout, fake_source, monkeypatch):
        registry = SourceRegistry()
        source = fake_source("cache", [layout.browser_cache])

        def boom(candidate):
            raise RuntimeError("boom")

        monkeypatch.setattr(source, "remove", boom)
        registry.register(source)
        _, summary = SweepEngine(registry).run(layout, ExecutionMode.COMMIT)
        assert summary.errors == [f"{layout.browser_cache}: boom"]

    def test_excluded_never_touched(self, layout):
        summary = RunSummary()
        result = _result(layout.home / "Projects", included=False)
        outcome = SweepEngine(SourceRegistry()).apply(result, ExecutionMode.COMMIT, summary)
        assert outcome is Outcome.SKIPPED
        assert (layout.home / "Projects").exists()
        assert summary.items_found == 0


class TestSizing:
    def test_size_of_missing_is_zero(self, tmp_path):
        assert size_of(tmp_path / "missing") == 0

    def test_size_of_file(self, tmp_path):
        (tmp_path / "f").write_bytes(b"x" * 42)
        assert size_of(tmp_path / "f") == 42

    def test_nested_candidates_folded(self, tmp_path, make_tree):
        make_tree(tmp_path, {"a/b/f": 100, "a/g": 50})
        results = annotate([_result(tmp_path / "a"), _result(tmp_path / "a" / "b")])
        assert [r.candidate.path for r in results] == [tmp_path / "a"]
        assert results[0].size_bytes == 150

    def test_excluded_results_kept_and_unmeasured(self, tmp_path):
        results = collapse_nested([_result(tmp_path / "a"), _result(tmp_path / "a" / "b", included=False)])
        assert len(results) == 2
        assert results[1].size_bytes is None

    def test_sibling_prefix_not_nested(self, tmp_path):
        results = collapse_nested([_result(tmp_path / "a"), _result(tmp_path / "ab")])
        assert len(results) == 2

    def test_nested_under_symlinked_parent_folded(self, tmp_path, make_tree):
        real = tmp_path / "private" / "var"
        make_tree(real, {"T/ms-playwright-x/g": 1000, "T/ms-playwright-x/ms-playwright-y/f": 500})
        (tmp_path / "var").symlink_to(real)
        results = annotate([
            _result(tmp_path / "var" / "T" / "ms-playwright-x"),
            _result(real / "T" / "ms-playwright-x" / "ms-playwright-y"),
        ])
        assert [r.candidate.path for r in results] == [tmp_path / "var" / "T" / "ms-playwright-x"]
        assert results[0].size_bytes == 1500

    def test_symlinked_spellings_counted_once(self, config, make_tree, fake_source):
        real = config.temp_dir / "private" / "var"
        make_tree(real, {"T/ms-playwright-x/g": 1000, "T/ms-playwright-x/ms-playwright-y/f": 500})
        (config.temp_dir / "var").symlink_to(real)
        registry = SourceRegistry()
        registry.register(fake_source("a", [config.temp_dir / "var" / "T" / "ms-playwright-x"]))
        registry.register(fake_source("b", [real / "T" / "ms-playwright-x" / "ms-playwright-y"]))
        _, summary = SweepEngine(registry).run(config, ExecutionMode.DRY_RUN)
        assert summary.items_found == 1
        assert summary.total_size_bytes == 1500
