"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

# Default timeout for external package-manager commands (seconds).
_COMMAND_TIMEOUT = 300


@dataclass(slots=True)
class CommandResult:
    """Outcome of an external command. ``returncode`` 127 means not found."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def has_command(name: str) -> bool:
    """Check if a command exists on the search path."""
    return shutil.which(name) is not None


def run_command(
    args: list[str],
    *,
    cwd: Path | str | None = None,
    timeout: float = _COMMAND_TIMEOUT,
) -> CommandResult:
    """Run an external command and capture its output.

    Never raises: a missing executable, a timeout or an OS error are all
    reported through the returned ``CommandResult``.
    """
    log.debug("Running: %s", " ".join(args))
    try:
        proc = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return CommandResult(args=args, returncode=127, stderr=f"{args[0]}: command not found")
    except subprocess.TimeoutExpired:
        log.warning("Command timed out after %ss: %s", timeout, " ".join(args))
        return CommandResult(args=args, returncode=124, stderr="timed out")
    except OSError as e:
        return CommandResult(args=args, returncode=126, stderr=str(e))

    if proc.returncode != 0:
        log.debug("Command exited with %d: %s", proc.returncode, proc.stderr.strip())
    return CommandResult(args=args, returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def is_supported_platform() -> bool:
    """The filesystem layout handled here is the macOS one."""
    return platform.system() == "Darwin"


def library_dir(home: Path | None = None) -> Path:
    """Return ~/Library."""
    return (home or Path.home()) / "Library"


def browser_cache_dir(home: Path | None = None) -> Path:
    """Return PLAYWRIGHT_BROWSERS_PATH, defaulting to ~/Library/Caches/ms-playwright."""
    override = os.environ.get("PLAYWRIGHT_BROWSERS_PATH")
    # "0" selects hermetic installs inside node_modules, not a directory
    if override and override != "0":
        return Path(override).expanduser()
    return library_dir(home) / "Caches" / "ms-playwright"


def nvm_dir(home: Path | None = None) -> Path:
    """Return NVM_DIR, defaulting to ~/.nvm."""
    override = os.environ.get("NVM_DIR")
    if override:
        return Path(override).expanduser()
    return (home or Path.home()) / ".nvm"


def temp_dir() -> Path:
    """Return TMPDIR, defaulting to /tmp."""
    return Path(os.environ.get("TMPDIR") or "/tmp")


def remove_path(path: Path) -> str | None:
    """Remove a file, symlink or directory tree.

    Returns an error message, or None on success. A path that is already
    gone counts as success.
    """
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif os.path.lexists(path):
            path.unlink()
    except FileNotFoundError:
        return None
    except OSError as e:
        return f"{path}: {e}"
    return None


def tree_size(path: Path | str) -> int:
    """Total size in bytes of the regular files below *path*.

    GNU ``find -printf`` does the walk when it is available. macOS ships
    BSD find, which rejects ``-printf``, so the walk falls back to
    ``os.scandir``. Unreadable entries are left out of the total.
    """
    try:
        return _tree_size_find(os.fspath(path))
    except (OSError, ValueError, subprocess.SubprocessError):
        return _tree_size_scandir(os.fspath(path))


def _tree_size_find(root: str) -> int:
    proc = subprocess.run(
        ["find", root, "-type", "f", "-printf", "%s\n"],
        capture_output=True, timeout=60,
    )
    if proc.returncode != 0 and not proc.stdout:
        raise OSError(proc.stderr.decode(errors="replace").strip())
    return sum(int(line) for line in proc.stdout.split() if line)


def _tree_size_scandir(root: str) -> int:
    total = 0
    pending = [root]
    while pending:
        try:
            with os.scandir(pending.pop()) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError as e:
            log.debug("Skipping unreadable directory: %s", e)
    return total


def bytes_to_human(size_bytes: int) -> str:
    """1536 -> '1.5 KB'. Binary multiples, one decimal above bytes."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    value = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{int(value)} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def format_elapsed(seconds: float) -> str:
    """Whole seconds below a minute, minutes and seconds above."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"
