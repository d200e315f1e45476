"""Rebase a range of commits onto another branch.

The base commit is the commit *before* the earliest commit to move::

    Branch A                    Branch B <target-branch>
    | 2bce381                   | a7da927
    | 895eb6d                   | e069629
    | f50f78b                   | ...
    | 95f677a <base-commit>     | ...

``grut-rebase B 95f677a`` replays f50f78b..2bce381 on top of B.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .lib import git
from .lib.command import CommandError, Runner, run_cmd
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


def rebase(target: str, base: str, *, runner: Runner = run_cmd) -> int:
    """List ``base..HEAD`` then run ``git rebase --onto target base``; returns git's status."""

    logger.info("Commits to be rebased:")
    try:
        runner(git.log_range(base), capture=False)
    except CommandError as e:
        logger.error("Cannot list commits since %s: %s", base, e)
        return e.returncode or 1

    logger.info("Start rebasing")
    r = runner(git.rebase_onto(target, base), check=False, capture=False)
    if r.returncode != 0:
        logger.error("git rebase exited with status %d", r.returncode)
    return r.returncode


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="grut-rebase",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("target", nargs="?", help="Branch to rebase onto")
    p.add_argument("base", nargs="?", help="Commit prior to the earliest commit to rebase")

    args = p.parse_args(argv)

    if not args.target or not args.base:
        print(f"Usage: {p.prog} <target-branch> <base-commit>", file=sys.stderr)
        return 1

    configure_logging(log_path=None)
    return rebase(args.target, args.base)


if __name__ == "__main__":
    raise SystemExit(main())
