"""Two-phrase confirmation and countdown before destructive removal."""

from __future__ import annotations

import logging
import time
from typing import Callable

import click

from pwsweep.utils import bytes_to_human

log = logging.getLogger(__name__)

FIRST_PHRASE = "YES"
FINAL_PHRASE = "DELETE PLAYWRIGHT"
COUNTDOWN_SECONDS = 5

ReadLine = Callable[[str], str]


def _prompt_line(text: str) -> str:
    return click.prompt(text, default="", show_default=False, prompt_suffix="\n")


class ConfirmationGate:
    """Callable gate: ``gate(estimated_bytes) -> bool``.

    Both phrases must be typed exactly. Any mismatch, end of input, or
    Ctrl+C during the countdown declines; declining is not an error.
    """

    def __init__(
        self,
        read_line: ReadLine = _prompt_line,
        countdown_seconds: int = COUNTDOWN_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._read_line = read_line
        self._countdown_seconds = countdown_seconds
        self._sleep = sleep

    def __call__(self, estimated_bytes: int) -> bool:
        click.echo()
        click.echo(click.style("WARNING - DESTRUCTIVE ACTION", fg="red", bold=True))
        click.echo()
        click.echo("This will permanently remove all Playwright-related files.")
        click.echo("This action CANNOT be undone.")
        click.echo()
        click.echo(f"Estimated space to recover: {click.style(bytes_to_human(estimated_bytes), fg='green')}")
        click.echo()

        if not self._ask(f"Type '{FIRST_PHRASE}' to confirm:", FIRST_PHRASE):
            return False
        click.echo()
        if not self._ask(f"Type '{FINAL_PHRASE}' to proceed:", FINAL_PHRASE):
            return False
        return self._countdown()

    def _ask(self, text: str, expected: str) -> bool:
        try:
            answer = self._read_line(click.style(text, fg="yellow"))
        except (click.Abort, EOFError, KeyboardInterrupt):
            click.echo()
            log.info("Confirmation aborted at prompt")
            return False
        if answer != expected:
            log.info("Confirmation phrase mismatch")
            return False
        return True

    def _countdown(self) -> bool:
        click.echo()
        click.echo(
            f"{click.style('[WARNING]', fg='yellow')} Starting removal in "
            f"{self._countdown_seconds} seconds... Press Ctrl+C to cancel."
        )
        try:
            for remaining in range(self._countdown_seconds, 0, -1):
                click.echo(f"\r   Countdown: {remaining} ", nl=False)
                self._sleep(1)
        except KeyboardInterrupt:
            click.echo()
            log.info("Countdown cancelled")
            return False
        click.echo()
        return True
