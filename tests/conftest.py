"""
Shared fixtures: fake command runner and PATH lookup.

No test spawns a package manager, compiler or git; every external tool is
replaced by ``FakeRunner`` and ``fake_which``.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from grut_bootstrap.lib.command import CmdResult, CommandError


@dataclass
class Call:
    argv: List[str]
    env: Dict[str, str] = field(default_factory=dict)
    cwd: Optional[str] = None
    dry_run: bool = False


class FakeRunner:
    """Stand-in for ``run_cmd``.

    ``outputs`` maps an argv tuple or argv[0] to stdout; ``fail_on`` maps a
    substring of the joined command line to the return code it fails with.
    """

    def __init__(self, outputs=None, fail_on=None):
        self.calls: List[Call] = []
        self.outputs = dict(outputs or {})
        self.fail_on = dict(fail_on or {})

    def __call__(self, argv, *, check=True, env=None, cwd=None, capture=True, dry_run=False):
        argv = list(argv)
        self.calls.append(Call(argv=argv, env=dict(env or {}), cwd=cwd, dry_run=dry_run))
        if dry_run:
            return CmdResult(argv=argv, returncode=0, stdout="", stderr="")

        joined = " ".join(argv)
        for needle, rc in self.fail_on.items():
            if needle in joined:
                if check:
                    raise CommandError(argv, rc, "boom")
                return CmdResult(argv=argv, returncode=rc, stdout="", stderr="boom")

        stdout = self.outputs.get(tuple(argv), self.outputs.get(argv[0], ""))
        return CmdResult(argv=argv, returncode=0, stdout=stdout, stderr="")

    @property
    def argvs(self) -> List[List[str]]:
        return [c.argv for c in self.calls]


def make_which(tools: Dict[str, str]):
    return lambda name: tools.get(name)


@pytest.fixture
def runner():
    return FakeRunner(outputs={"/usr/bin/gcc": "10.5.0\n", "/usr/bin/gcc-11": "11\n"})


@pytest.fixture
def which():
    return make_which(
        {
            "gcc": "/usr/bin/gcc",
            "g++": "/usr/bin/g++",
            "gcc-11": "/usr/bin/gcc-11",
            "g++-11": "/usr/bin/g++-11",
        }
    )


@pytest.fixture
def reset_logging():
    """Undo configure_logging() so each test starts from a clean root logger."""

    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(saved_level)
    for attr in ("_grut_bootstrap_configured", "_grut_bootstrap_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
