from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping

from .config import DEFAULT_PYTHON_VERSION
from .lib.command import Runner, run_cmd
from .lib.env import PATHS, prepend_path
from .lib.pkg import uv_venv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvironmentHandle:
    name: str
    path: Path
    created: bool

    @property
    def bin_dir(self) -> Path:
        return self.path / "bin"

    @property
    def python(self) -> str:
        return str(self.bin_dir / "python")

    def env(self, base: Mapping[str, str]) -> Dict[str, str]:
        """Overlay equivalent to sourcing ``bin/activate`` for a single call."""

        return {
            "VIRTUAL_ENV": str(self.path),
            "PATH": prepend_path("PATH", [str(self.bin_dir)], base),
        }


def ensure_isolated_environment(
    name: str,
    *,
    path: str = PATHS.venv,
    python_version: str = DEFAULT_PYTHON_VERSION,
    runner: Runner = run_cmd,
    dry_run: bool = False,
) -> EnvironmentHandle:
    """Create the uv virtual environment unless it already exists."""

    venv = Path(path).absolute()
    if venv.is_dir():
        logger.info("NOTE: uv environment already exists at %s, skipping environment creation", venv)
        return EnvironmentHandle(name=name, path=venv, created=False)

    logger.info("uv environment not found, creating it at %s", venv)
    runner(uv_venv(str(venv), python_version=python_version, prompt=name), dry_run=dry_run)
    return EnvironmentHandle(name=name, path=venv, created=not dry_run)
