"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from pwsweep.config import ScanConfig
from pwsweep.core.classifier import default_protected_rules
from pwsweep.models.candidate import CandidatePath
from pwsweep.models.source import CandidateSource


class FakeSource(CandidateSource):
    """Test source returning a fixed list of paths."""

    def __init__(
        self,
        source_id: str = "fake",
        paths: list[Path] | None = None,
        available: bool = True,
        fail: bool = False,
        sort: int = 50,
    ):
        self._id = source_id
        self._paths = paths or []
        self._available = available
        self._fail = fail
        self._sort = sort
        self.removed: list[Path] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return f"Fake Source ({self._id})"

    @property
    def description(self) -> str:
        return "A fake source for testing"

    @property
    def sort_order(self) -> int:
        return self._sort

    def unavailable_reason(self, config) -> str | None:
        return None if self._available else "disabled"

    def discover(self, config) -> list[CandidatePath]:
        if self._fail:
            raise RuntimeError("discover failed")
        return [self._candidate(p) for p in self._paths if p.exists() or p.is_symlink()]

    def remove(self, candidate: CandidatePath) -> list[str]:
        self.removed.append(candidate.path)
        return super().remove(candidate)


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Fake home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", staticmethod(lambda: home))
    return home


@pytest.fixture
def no_tools(monkeypatch):
    """Pretend no package manager or npx is installed."""
    monkeypatch.setattr("shutil.which", lambda name: None)


@pytest.fixture
def config(tmp_path, home):
    """ScanConfig with every location inside tmp_path."""
    for d in ("project", "tmp", "folders"):
        (tmp_path / d).mkdir()
    return ScanConfig(
        home=home,
        cwd=tmp_path / "project",
        browser_cache=home / "Library" / "Caches" / "ms-playwright",
        nvm_dir=home / ".nvm",
        temp_dir=tmp_path / "tmp",
        rules=default_protected_rules(home),
        system_temp=tmp_path / "folders",
        brew_prefixes=(tmp_path / "opt" / "homebrew", tmp_path / "usr" / "local"),
    )


def _make_tree(root: Path, files: dict[str, int]) -> None:
    """Create files of the given sizes below *root*."""
    for rel, size in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)


@pytest.fixture
def make_tree():
    return _make_tree


@pytest.fixture
def fake_source():
    """Factory for FakeSource instances."""
    return FakeSource
