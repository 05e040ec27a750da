"""Tests for built-in candidate sources."""

from __future__ import annotations

import json
import os

import pytest

from pwsweep.core.registry import SourceRegistry
from pwsweep.core.source_loader import load_sources
from pwsweep.models.candidate import DiscoverySource
from pwsweep.sources.browser_cache import BrowserCacheSource, WebKitDataSource, installed_browsers
from pwsweep.sources.global_packages import NpmGlobalSource, YarnGlobalSource
from pwsweep.sources.node_installs import GlobalPackageDirsSource, HomebrewGlobalSource, NvmGlobalSource
from pwsweep.sources.package_caches import BunCacheSource, NpxCacheSource
from pwsweep.sources.symlinks import OrphanedSymlinksSource
from pwsweep.sources.temp_files import SystemTempSource, TempFilesSource
from pwsweep.utils import CommandResult


def _paths(candidates):
    return [c.path for c in candidates]


class TestLoader:
    def test_loads_every_builtin_source(self):
        registry = SourceRegistry()
        load_sources(registry)
        assert len(registry) == 19
        assert "browser_cache" in registry
        assert "orphaned_symlinks" in registry

    def test_scan_order(self):
        registry = SourceRegistry()
        load_sources(registry)
        ids = [s.id for s in registry]
        assert ids[0] == "browser_cache"
        assert ids[-1] == "orphaned_symlinks"

    def test_no_tools_means_package_managers_skipped(self, config, no_tools):
        registry = SourceRegistry()
        load_sources(registry)
        available = {s.id for s in registry.get_available(config)}
        assert not available & {"npm_global", "yarn_global", "pnpm_global", "npm_cache", "yarn_cache", "pnpm_store"}


class TestBrowserCache:
    def test_finds_cache_and_lists_browsers(self, config, make_tree):
        make_tree(config.browser_cache, {"chromium-1091/chrome": 10, "webkit-1944/x": 5})
        source = BrowserCacheSource()
        (candidate,) = source.discover(config)
        assert candidate.path == config.browser_cache
        assert candidate.is_directory
        assert candidate.description == "Browser cache (chromium-1091, webkit-1944)"
        assert installed_browsers(config.browser_cache) == ["chromium-1091", "webkit-1944"]

    def test_hermetic_browsers(self, config, make_tree):
        make_tree(config.hermetic_browsers, {"chromium-1/chrome": 1})
        (candidate,) = BrowserCacheSource().discover(config)
        assert candidate.path == config.hermetic_browsers
        assert "Hermetic" in candidate.description

    def test_remove_without_npx(self, config, make_tree, no_tools):
        make_tree(config.browser_cache, {"chromium-1/chrome": 1})
        source = BrowserCacheSource()
        (candidate,) = source.discover(config)
        assert source.describe_removal(candidate) == f"rm -rf {config.browser_cache}"
        assert source.remove(candidate) == []
        assert not config.browser_cache.exists()

    def test_official_uninstall_runs_first(self, config, make_tree, monkeypatch):
        make_tree(config.browser_cache, {"chromium-1/chrome": 1})
        calls = []
        monkeypatch.setattr("pwsweep.sources.browser_cache.has_command", lambda name: True)
        monkeypatch.setattr(
            "pwsweep.sources.browser_cache.run_command",
            lambda args, **kw: calls.append(args) or CommandResult(args, 1),
        )
        source = BrowserCacheSource()
        (candidate,) = source.discover(config)
        assert source.describe_removal(candidate).startswith("npx --no playwright uninstall --all && rm -rf")
        assert source.remove(candidate) == []
        assert calls == [["npx", "--no", "playwright", "uninstall", "--all"]]
        assert not config.browser_cache.exists()

    def test_webkit_descriptions(self, config, make_tree):
        lib = config.library
        make_tree(lib, {"Caches/org.webkit.Playwright/a": 1, "Preferences/org.webkit.Playwright.plist": 1})
        found = {c.path.name: c.description for c in WebKitDataSource().discover(config)}
        assert found == {
            "org.webkit.Playwright": "WebKit Playwright cache",
            "org.webkit.Playwright.plist": "WebKit Playwright preferences",
        }


class TestGlobalPackages:
    def _fake_run(self, outputs):
        calls = []

        def run(args, **kwargs):
            calls.append(args)
            return CommandResult(args, 0, outputs.get(" ".join(args), ""))

        return run, calls

    def test_npm_global(self, tmp_path, config, monkeypatch):
        root = tmp_path / "lib" / "node_modules"
        run, calls = self._fake_run({
            "npm list -g --depth=0 --json": json.dumps({"dependencies": {"playwright": {}, "npm": {}}}),
            "npm root -g": f"{root}\n",
        })
        monkeypatch.setattr("pwsweep.models.source.run_command", run)
        source = NpmGlobalSource()
        (candidate,) = source.discover(config)
        assert candidate.path == root / "playwright"
        assert candidate.package == "playwright"
        assert candidate.source is DiscoverySource.PACKAGE_MANAGER_QUERY
        assert source.describe_removal(candidate) == "npm uninstall -g playwright"

        source.remove(candidate)
        assert calls[-1] == ["npm", "uninstall", "-g", "playwright"]

    def test_uninstall_failure_is_tolerated(self, tmp_path, config, monkeypatch):
        monkeypatch.setattr("pwsweep.models.source.run_command", lambda args, **kw: CommandResult(args, 1, "", "not installed"))
        source = NpmGlobalSource()
        candidate = source._candidate(tmp_path / "playwright", package="playwright")
        assert source.remove(candidate) == []

    def test_nothing_listed_skips_root_query(self, config, monkeypatch):
        run, calls = self._fake_run({"npm list -g --depth=0 --json": "{}"})
        monkeypatch.setattr("pwsweep.models.source.run_command", run)
        assert NpmGlobalSource().discover(config) == []
        assert calls == [["npm", "list", "-g", "--depth=0", "--json"]]

    def test_unknown_root_skips(self, config, monkeypatch):
        run, _ = self._fake_run({"npm list -g --depth=0 --json": json.dumps({"dependencies": {"playwright": {}}})})
        monkeypatch.setattr("pwsweep.models.source.run_command", run)
        assert NpmGlobalSource().discover(config) == []

    def test_yarn_root_is_node_modules(self, tmp_path, config, monkeypatch):
        run, _ = self._fake_run({
            "yarn global list": 'info "@playwright/test@1.40.0" has binaries:\n',
            "yarn global dir": str(tmp_path / "yarn-global"),
        })
        monkeypatch.setattr("pwsweep.models.source.run_command", run)
        (candidate,) = YarnGlobalSource().discover(config)
        assert candidate.path == tmp_path / "yarn-global" / "node_modules" / "@playwright/test"

    def test_unavailable_without_executable(self, config, no_tools):
        assert NpmGlobalSource().unavailable_reason(config) == "npm not installed"


class TestNodeInstalls:
    def test_nvm_versions(self, config, make_tree):
        versions = config.nvm_dir / "versions" / "node"
        make_tree(versions, {
            "v18.19.0/lib/node_modules/playwright/package.json": 10,
            "v20.10.0/lib/node_modules/@playwright/test/package.json": 10,
            "v20.10.0/lib/node_modules/typescript/package.json": 10,
        })
        source = NvmGlobalSource()
        assert source.is_available(config)
        found = {c.path.relative_to(versions).as_posix(): c.description for c in source.discover(config)}
        assert found == {
            "v18.19.0/lib/node_modules/playwright": "nvm Node v18.19.0: playwright",
            "v20.10.0/lib/node_modules/@playwright": "nvm Node v20.10.0: @playwright",
        }

    def test_nvm_unavailable(self, config):
        assert NvmGlobalSource().unavailable_reason(config) is not None

    def test_homebrew_prefixes(self, config, make_tree):
        make_tree(config.brew_prefixes[0], {"lib/node_modules/playwright-core/package.json": 1})
        make_tree(config.brew_prefixes[1], {"lib/node_modules/playwright/package.json": 1})
        paths = _paths(HomebrewGlobalSource().discover(config))
        assert paths == [
            config.brew_prefixes[0] / "lib/node_modules/playwright-core",
            config.brew_prefixes[1] / "lib/node_modules/playwright",
        ]

    def test_yarn_and_pnpm_dirs(self, config, make_tree):
        make_tree(config.home, {".config/yarn/global/node_modules/playwright/a": 1})
        make_tree(config.library, {"pnpm/global/5/node_modules/@playwright/test/a": 1})
        found = [c.description for c in GlobalPackageDirsSource().discover(config)]
        assert found == ["yarn global directory: playwright", "pnpm global directory: @playwright"]


class TestPatternSources:
    def test_temp_files_depth(self, config, make_tree):
        make_tree(config.temp_dir, {
            "playwright-artifacts-abc/trace.zip": 5,
            "x/playwright_chromiumdev_profile-1": 5,
            "x/y/playwright-too-deep": 5,
        })
        paths = _paths(TempFilesSource().discover(config))
        assert config.temp_dir / "playwright-artifacts-abc" in paths
        assert config.temp_dir / "x" / "playwright_chromiumdev_profile-1" in paths
        assert config.temp_dir / "x" / "y" / "playwright-too-deep" not in paths

    def test_system_temp_patterns(self, config, make_tree):
        make_tree(config.system_temp, {"ab/cd/C/org.webkit.Playwright/x": 1, "ab/cd/C/playwright-other": 1})
        paths = _paths(SystemTempSource().discover(config))
        assert paths == [config.system_temp / "ab/cd/C/org.webkit.Playwright"]

    def test_npx_cache_dirs_only(self, config, make_tree):
        make_tree(config.home, {".npm/_npx/1a2b/node_modules/playwright/package.json": 1})
        paths = _paths(NpxCacheSource().discover(config))
        assert paths == [config.home / ".npm/_npx/1a2b/node_modules/playwright"]

    def test_missing_root_unavailable(self, config):
        assert not BunCacheSource().is_available(config)


class TestOrphanedSymlinks:
    @pytest.fixture
    def bin_dir(self, config):
        path = config.brew_prefixes[0] / "bin"
        path.mkdir(parents=True)
        return path

    def test_broken_link(self, config, bin_dir):
        os.symlink("/nowhere/playwright/cli.js", bin_dir / "playwright")
        (candidate,) = OrphanedSymlinksSource().discover(config)
        assert candidate.path == bin_dir / "playwright"
        assert candidate.description.startswith("broken symlink")
        assert candidate.source is DiscoverySource.SYMLINK_PROBE
        assert not candidate.is_directory

    def test_remove_link_only(self, config, bin_dir, tmp_path, make_tree):
        make_tree(tmp_path, {"node_modules/playwright/cli.js": 1})
        target = tmp_path / "node_modules/playwright/cli.js"
        os.symlink(target, bin_dir / "playwright")
        source = OrphanedSymlinksSource()
        (candidate,) = source.discover(config)
        assert source.remove(candidate) == []
        assert not os.path.lexists(bin_dir / "playwright")
        assert target.exists()
