"""Compiler toolchain selection.

nvcc refuses host compilers newer than GCC 11 for the CUDA releases we
support. The default compiler is only checked and reported; an explicitly
requested alternate compiler must satisfy the limit.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .errors import CompilerUnavailable, CompilerVersionTooNew
from .lib.command import CommandError, Runner, run_cmd
from .params import ALTERNATE_COMPILER_FLAG, BootstrapParameters

logger = logging.getLogger(__name__)

MAX_COMPILER_MAJOR = 11

DEFAULT_COMPILERS = ("gcc", "g++")
ALTERNATE_COMPILERS = ("gcc-11", "g++-11")

Which = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class ToolchainSelection:
    cc_path: str
    cxx_path: str
    version_major: int
    alternate: bool = False

    def env(self) -> Dict[str, str]:
        # The default toolchain is picked up from PATH; only the override is exported.
        if not self.alternate:
            return {}
        return {"CC": self.cc_path, "CXX": self.cxx_path}


def compiler_major_version(cc_path: str, *, runner: Runner = run_cmd) -> int:
    """Major version from ``<cc> -dumpversion`` (prints e.g. ``11`` or ``11.4.0``)."""

    try:
        r = runner([cc_path, "-dumpversion"])
    except CommandError as e:
        raise CompilerUnavailable(f"Could not query {cc_path} version: {e}") from e

    raw = r.stdout.strip()
    try:
        return int(raw.split(".", 1)[0])
    except ValueError as e:
        raise CompilerUnavailable(f"Unrecognized {cc_path} -dumpversion output: {raw!r}") from e


def _locate(name: str, which: Which, hint: str) -> str:
    path = which(name)
    if not path:
        raise CompilerUnavailable(f"{name} could not be found. {hint}")
    return path


def resolve_toolchain(
    params: BootstrapParameters,
    *,
    which: Which = shutil.which,
    runner: Runner = run_cmd,
) -> ToolchainSelection:
    if params.use_alternate_compiler:
        hint = "Perhaps you need to run 'sudo apt-get install gcc-11 g++-11'?"
        cc = _locate(ALTERNATE_COMPILERS[0], which, hint)
        cxx = _locate(ALTERNATE_COMPILERS[1], which, hint)

        major = compiler_major_version(cc, runner=runner)
        logger.info("Using CC=%s and CXX=%s (gcc_version=%d)", cc, cxx, major)
        if major > MAX_COMPILER_MAJOR:
            raise CompilerVersionTooNew(cc, major, MAX_COMPILER_MAJOR)
        return ToolchainSelection(cc_path=cc, cxx_path=cxx, version_major=major, alternate=True)

    hint = "Install a C/C++ toolchain (e.g. 'sudo apt-get install build-essential')."
    cc = _locate(DEFAULT_COMPILERS[0], which, hint)
    cxx = _locate(DEFAULT_COMPILERS[1], which, hint)

    major = compiler_major_version(cc, runner=runner)
    if major > MAX_COMPILER_MAJOR:
        logger.warning(
            "Default gcc version %d is higher than %d. CUDA requires GCC %d or lower.",
            major,
            MAX_COMPILER_MAJOR,
            MAX_COMPILER_MAJOR,
        )
        logger.warning(
            "Consider rerunning with: grut-bootstrap %s %s",
            params.environment_name,
            ALTERNATE_COMPILER_FLAG,
        )
    return ToolchainSelection(cc_path=cc, cxx_path=cxx, version_major=major, alternate=False)
