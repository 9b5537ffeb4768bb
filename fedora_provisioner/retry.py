from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Callable, Optional, TextIO

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    ABORT = "abort"
    WARN = "warn-and-continue"
    INTERACTIVE = "interactive"


class RetryDecision(str, Enum):
    RETRY = "retry"
    SKIP = "skip"
    ABORT = "abort"


PROMPT = "Do you want to try again, skip, or quit? (t/s/q): "

_CHOICES = {
    "t": RetryDecision.RETRY,
    "r": RetryDecision.RETRY,
    "s": RetryDecision.SKIP,
    "q": RetryDecision.ABORT,
}


class RetryPolicy:
    """Turns an operation failure into a retry/skip/abort decision.

    The interactive policy reads operator answers from ``stdin``. A stream that
    is not a TTY (or hits EOF) raises ConfigurationError instead of blocking.
    ``assume_interactive`` overrides the TTY check, which is what tests use with
    scripted input.
    """

    def __init__(
        self,
        *,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        assume_interactive: Optional[bool] = None,
        downgrade_interactive: bool = False,
    ) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._assume_interactive = assume_interactive
        self.downgrade_interactive = downgrade_interactive

    def _is_interactive(self) -> bool:
        if self._assume_interactive is not None:
            return self._assume_interactive
        isatty: Callable[[], bool] | None = getattr(self._stdin, "isatty", None)
        try:
            return bool(isatty and isatty())
        except ValueError:
            # closed stream
            return False

    def decide(self, policy: FailurePolicy, attempt: int, last_error: str | None) -> RetryDecision:
        policy = FailurePolicy(policy)
        if policy is FailurePolicy.INTERACTIVE and self.downgrade_interactive:
            policy = FailurePolicy.WARN

        if policy is FailurePolicy.ABORT:
            return RetryDecision.ABORT

        if policy is FailurePolicy.WARN:
            logger.warning("Continuing after failure (attempt %d): %s", attempt, last_error or "no detail")
            return RetryDecision.SKIP

        return self._prompt(attempt)

    def _prompt(self, attempt: int) -> RetryDecision:
        if not self._is_interactive():
            raise ConfigurationError(
                "Interactive failure policy needs an interactive terminal; "
                "rerun from a terminal or use --on-failure warn"
            )

        while True:
            self._stdout.write(PROMPT)
            self._stdout.flush()
            line = self._stdin.readline()
            if line == "":
                raise ConfigurationError("Input closed while waiting for a retry decision")

            choice = _CHOICES.get(line.strip()[:1].lower())
            if choice is None:
                self._stdout.write("Invalid choice. Please enter t, s, or q.\n")
                continue

            logger.info("Operator chose %s after attempt %d", choice.value, attempt)
            return choice
