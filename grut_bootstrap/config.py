from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .lib.env import PATHS

DEFAULT_PYTHON_VERSION = "3.11"


@dataclass(frozen=True)
class BootstrapConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def python_version(self) -> str:
        return str(self.raw.get("python_version") or DEFAULT_PYTHON_VERSION)

    @property
    def venv_path(self) -> str:
        return str(self.raw.get("venv_path") or PATHS.venv)

    @property
    def project_dir(self) -> str:
        # Absolute: derived paths are passed as argv to steps run with cwd=project_dir.
        return str(Path(self.raw.get("project_dir") or PATHS.project_dir).absolute())

    @property
    def thirdparty_dir(self) -> str:
        return str(self.raw.get("thirdparty_dir") or PATHS.thirdparty_dir)

    @property
    def use_sudo(self) -> bool:
        value = self.raw.get("use_sudo")
        if value is None:
            return True
        if not isinstance(value, bool):
            raise ValueError(f"use_sudo must be true or false, got {value!r}")
        return value

    @property
    def log_path(self) -> str:
        return str(self.raw.get("log_path") or PATHS.log_default)


def load_bootstrap_config(path: Optional[str]) -> BootstrapConfig:
    """Load the optional YAML config; no path means all defaults."""

    if path is None:
        return BootstrapConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("bootstrap config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("bootstrap config must contain a mapping/object")

    cfg = BootstrapConfig(raw=raw)
    cfg.use_sudo  # validate eagerly so a bad value fails before any step runs
    return cfg
