from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import OperationFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandError(OperationFailure):
    def __init__(self, result: CmdResult) -> None:
        self.result = result
        msg = f"Command failed ({result.returncode}): {fmt_argv(result.argv)}"
        tail = (result.stderr or "").strip().splitlines()[-3:]
        if tail:
            msg += "\n" + "\n".join(tail)
        super().__init__(msg)


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Execute ``argv`` and return its CmdResult.

    The command line is logged at INFO and captured output at DEBUG. In a dry
    run nothing executes and a zero result is returned. An executable that
    cannot be found yields returncode 127; with ``check`` any non-zero code
    raises CommandError.
    """

    argv_list = [str(a) for a in argv]
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
        result = CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
    except FileNotFoundError as e:
        result = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

    if result.stdout:
        logger.debug("STDOUT %s", result.stdout.strip())
    if result.stderr:
        logger.debug("STDERR %s", result.stderr.strip())

    if check and not result.ok:
        raise CommandError(result)

    return result


def run_as_user(user: str, script: str, *, check: bool = True, dry_run: bool = False) -> CmdResult:
    """Run a bash login script as ``user`` (the invoking, non-root account)."""

    return run_cmd(["sudo", "-u", user, "bash", "-lc", script], check=check, dry_run=dry_run)
