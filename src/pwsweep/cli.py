"""CLI interface for pwsweep."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from pwsweep import __version__
from pwsweep.config import ScanConfig
from pwsweep.core.cleanup import CleanupState, run_cleanup
from pwsweep.core.confirm import ConfirmationGate
from pwsweep.core.engine import SweepEngine
from pwsweep.core.installer import (
    BROWSER_MENU,
    check_prerequisites,
    detect_existing,
    install_browsers,
    install_packages,
    parse_browsers,
)
from pwsweep.core.registry import SourceRegistry
from pwsweep.core.source_loader import load_sources
from pwsweep.core.traces import find_traces, write_report
from pwsweep.core.verifier import InstallationVerifier
from pwsweep.models.run_summary import ExecutionMode, Outcome, RunSummary
from pwsweep.models.scan_result import ScanResult
from pwsweep.utils import bytes_to_human, format_elapsed, is_supported_platform


class Command(click.Command):
    """Command whose usage errors exit with status 1."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_engine() -> SweepEngine:
    registry = SourceRegistry()
    load_sources(registry)
    return SweepEngine(registry)


def _build_config() -> ScanConfig:
    return ScanConfig.from_environment()


def _require_macos() -> None:
    if not is_supported_platform():
        click.echo("Error: this tool only supports macOS.", err=True)
        sys.exit(1)


def _header(title: str) -> None:
    click.echo()
    click.echo(click.style(title, fg="cyan", bold=True))
    click.echo(click.style("=" * len(title), fg="cyan"))
    click.echo()


_verbose_option = click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")


# ── uninstall ────────────────────────────────────────────────────────────

def _echo_outcome(result: ScanResult, outcome: Outcome, action: str) -> None:
    candidate = result.candidate
    match outcome:
        case Outcome.SKIPPED:
            click.echo(f"  {click.style('✓', fg='green')} Skipped (protected): {candidate.path}")
        case Outcome.WOULD_REMOVE:
            size = bytes_to_human(result.size_bytes or 0)
            click.echo(f"  {click.style('[DRY-RUN]', fg='cyan')} Would remove: {candidate.description} ({size})")
            click.echo(click.style(f"      {action}", fg="bright_black"))
        case Outcome.REMOVED:
            size = bytes_to_human(result.size_bytes or 0)
            click.echo(f"  {click.style('[REMOVED]', fg='red')} {candidate.description} ({size})")
            click.echo(click.style(f"      {action}", fg="bright_black"))
        case Outcome.FAILED:
            click.echo(f"  {click.style('[FAILED]', fg='yellow')} {candidate.description}, see errors below")
            click.echo(click.style(f"      {action}", fg="bright_black"))


def _echo_summary(mode: ExecutionMode, summary: RunSummary) -> None:
    click.echo()
    if mode is ExecutionMode.DRY_RUN:
        click.echo(click.style("Summary (preview)", bold=True))
        click.echo(f"  Items found:        {summary.items_found}")
        click.echo(f"  Estimated size:     {click.style(bytes_to_human(summary.total_size_bytes), fg='green', bold=True)}")
    else:
        click.echo(click.style("Summary", bold=True))
        click.echo(f"  Items removed:      {summary.items_removed} of {summary.items_found}")
        click.echo(f"  Space recovered:    {click.style(bytes_to_human(summary.total_size_bytes), fg='green', bold=True)}")
    click.echo(f"  Protected, skipped: {len(summary.skipped)}")
    for error in summary.errors:
        click.echo(f"  {click.style('!', fg='yellow')} {error}")


def _cleanup(engine: SweepEngine, config: ScanConfig, dry_run: bool) -> CleanupState:
    click.echo(f"{click.style('Scanning', bold=True)} for Playwright artifacts...\n")
    report = run_cleanup(
        engine,
        config,
        dry_run=dry_run,
        confirm=ConfirmationGate(),
        on_outcome=_echo_outcome,
        on_summary=_echo_summary,
    )
    click.echo()
    match report.state:
        case CleanupState.NOTHING_FOUND:
            click.echo(click.style("No Playwright installation found. System is clean.", fg="green"))
        case CleanupState.PREVIEWED:
            click.echo("(dry run, nothing was removed)")
        case CleanupState.DECLINED:
            click.echo("Aborted. Nothing was removed.")
        case CleanupState.COMPLETED:
            if report.commit and report.commit.errors:
                click.echo(click.style("Cleanup finished with errors.", fg="yellow"))
            else:
                click.echo(click.style("Cleanup complete.", fg="green", bold=True))
    return report.state


def _list_sources(engine: SweepEngine, config: ScanConfig) -> None:
    def _format(source, indent: str = "  ") -> None:
        reason = source.unavailable_reason(config)
        status = click.style("available", fg="green") if reason is None else click.style(reason, fg="bright_black")
        click.echo(f"{indent}{click.style(f'{source.id:30s}', fg='cyan', bold=True)}  {source.name} ({status})")
        click.echo(f"{indent}  {source.description}")

    grouped = engine.registry.get_groups()
    for members in grouped.values():
        click.echo(f"\n  {click.style(members[0].group.name, fg='blue', bold=True)}")
        for source in members:
            _format(source, indent="    ")
    standalone = [s for s in engine.registry if s.group is None]
    if standalone:
        click.echo()
        for source in standalone:
            _format(source)


@click.command(cls=Command)
@click.option("--dry-run", is_flag=True, help="Show what would be removed without removing anything")
@click.option("--list-sources", is_flag=True, help="List candidate sources and exit")
@_verbose_option
@click.version_option(__version__, prog_name="pw-uninstall")
def uninstall(dry_run: bool, list_sources: bool, verbose: int) -> None:
    """Remove every trace of Playwright for Node.js from this Mac."""
    _setup_logging(verbose)
    _require_macos()
    engine = _build_engine()
    config = _build_config()
    if list_sources:
        _list_sources(engine, config)
        return

    _header("PLAYWRIGHT DEEP UNINSTALL" + (" (DRY RUN)" if dry_run else ""))
    click.echo(
        f"{click.style('Note:', fg='yellow', bold=True)} the browser cache is shared with "
        "Playwright for Python, .NET and Java.\n"
    )
    _cleanup(engine, config, dry_run)


# ── install ──────────────────────────────────────────────────────────────

def _validate_browsers(ctx, param, value: str | None) -> list[str] | None:
    browsers = parse_browsers(value)
    if browsers is not None and not browsers:
        raise click.BadParameter("no known browser given (chromium, firefox, webkit, all, prompt)")
    return browsers


def _choose_browsers() -> list[str]:
    click.echo(click.style("Select browsers to install:", bold=True))
    click.echo()
    for key, (label, _) in BROWSER_MENU.items():
        click.echo(f"  {key}) {label}")
    click.echo()
    choice = click.prompt("Your choice", default="1")
    label, browsers = BROWSER_MENU.get(choice.strip(), BROWSER_MENU["1"])
    if not browsers:
        raw = click.prompt("Enter browsers separated by space (chromium firefox webkit)", default="chromium")
        browsers = tuple(parse_browsers(raw) or ("chromium",))
    return list(browsers)


def _check_line(ok: bool, name: str, detail: str, fatal: bool = True) -> None:
    if ok:
        mark = click.style("✓", fg="green")
    elif fatal:
        mark = click.style("✗", fg="red")
    else:
        mark = click.style("!", fg="yellow")
    click.echo(f"  {mark} {name:15s} {detail}")


@click.command(cls=Command)
@click.option("--local", is_flag=True, help="Install as a dev dependency of the current directory")
@click.option(
    "--project", "project",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Install in this project directory (implies --local)",
)
@click.option(
    "--browsers", default=None, callback=_validate_browsers,
    help="Browsers to install: chromium, firefox, webkit, all or prompt (default: chromium)",
)
@click.option("--check", is_flag=True, help="Check prerequisites only, install nothing")
@click.option("--skip-cleanup", is_flag=True, help="Do not offer to clean up an existing installation")
@_verbose_option
@click.version_option(__version__, prog_name="pw-install")
def install(
    local: bool,
    project: Path | None,
    browsers: list[str] | None,
    check: bool,
    skip_cleanup: bool,
    verbose: int,
) -> None:
    """Install Playwright for Node.js and its browsers.

    Installs globally with npm unless --local or --project is given.
    """
    _setup_logging(verbose)
    _require_macos()
    _header("PLAYWRIGHT INSTALLER")

    config = _build_config()
    project_dir = project.resolve() if project else (config.cwd if local else None)

    click.echo(click.style("Prerequisites", bold=True))
    prereqs = check_prerequisites()
    for p in prereqs.checks:
        _check_line(p.ok, p.name, p.detail, p.fatal)
    if not prereqs.ok:
        click.echo("\nSome prerequisite checks failed.", err=True)
        sys.exit(1)

    existing = detect_existing(config, cwd=project_dir)
    if existing.found:
        click.echo(click.style("\nExisting installation detected:", fg="yellow"))
        if existing.browser_cache:
            click.echo(f"  browser cache: {existing.browser_cache}")
        for pkg in existing.global_packages:
            click.echo(f"  global package: {pkg}")
        if existing.project_manifest:
            click.echo(f"  project manifest: {existing.project_manifest}")
    else:
        click.echo(f"\n  {click.style('✓', fg='green')} No existing Playwright installation detected")

    if check:
        click.echo("\nCheck-only mode complete.")
        return

    if existing.found and not skip_cleanup:
        click.echo("\nIt is recommended to clean up before a fresh install.")
        if click.confirm("Run a deep uninstall first?", default=False):
            _cleanup(_build_engine(), config, dry_run=False)

    if browsers is None:
        click.echo()
        browsers = _choose_browsers()
    click.echo(f"\nSelected browsers: {', '.join(browsers)}")

    where = f"in {project_dir}" if project_dir else "globally"
    click.echo(f"\n{click.style('Installing', bold=True)} Playwright {where}...")
    install_packages(project_dir=project_dir)
    click.echo(f"{click.style('Installing', bold=True)} browsers...")
    install_browsers(browsers=browsers, project_dir=project_dir)

    click.echo(click.style("\nVerification", bold=True))
    report = InstallationVerifier(config.browser_cache).verify(browsers, cwd=project_dir)
    for c in report.checks:
        _check_line(c.ok, c.name, c.detail, fatal=c.name == "version")
    if report.browser_list:
        click.echo(click.style(report.browser_list, fg="bright_black"))
    if not report.ok:
        click.echo("\nInstallation verification failed. Try pw-uninstall and reinstall.", err=True)
        sys.exit(1)

    click.echo(click.style(f"\nPlaywright {report.version} is ready.", fg="green", bold=True))
    click.echo("\nNext steps:")
    click.echo("  npx playwright test")
    click.echo("  npx playwright test --ui")
    click.echo("  npx playwright codegen example.com")


# ── traces ───────────────────────────────────────────────────────────────

@click.command(cls=Command)
@_verbose_option
@click.version_option(__version__, prog_name="pw-traces")
def traces(verbose: int) -> None:
    """Report every Playwright-related path on this Mac (read-only)."""
    _setup_logging(verbose)
    _require_macos()
    _header("PLAYWRIGHT TRACES FINDER")

    config = _build_config()
    click.echo(f"Searching the entire system, {len(config.rules)} protected locations excluded.")
    click.echo(click.style("This may take several minutes.\n", fg="bright_black"))

    report = find_traces(config)
    if report.paths:
        click.echo(click.style(f"Found {len(report.paths)} file(s)/folder(s) related to Playwright:\n", fg="yellow"))
        for path in report.paths:
            click.echo(f"  {click.style('→', fg='red')} {path}")
    else:
        click.echo(click.style("No Playwright traces found. Your system is clean.", fg="green"))

    out = write_report(report, config.cwd)
    click.echo(f"\nScan duration: {format_elapsed(report.duration)}")
    click.echo(f"Report saved to: {click.style(str(out), fg='green')}")
