from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {fmt_argv(self.argv)}"
        if stderr:
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


# Signature shared by run_cmd and the fakes injected in tests.
Runner = Callable[..., CmdResult]


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    capture: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False streams output to the terminal (long installs, git log).
    - env is an overlay on top of os.environ for this call only.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        # Mirror the shell's "command not found" status.
        raise CommandError(argv_list, 127, str(e)) from e

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(argv_list, p.returncode, stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)


def exit_status(returncode: int) -> int:
    """Process exit status for a failed command; signal N maps to 128 + N."""

    if returncode < 0:
        return 128 - returncode
    return returncode or 1
