from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Sequence


@dataclass(frozen=True)
class Paths:
    venv: str = ".venv"
    project_dir: str = "."
    thirdparty_dir: str = "thirdparty"
    log_default: str = "logs/grut-bootstrap.log"


PATHS = Paths()


def prepend_path(var: str, entries: Sequence[str], base: Mapping[str, str]) -> str:
    """Return ``var`` from ``base`` with ``entries`` in front, os.pathsep-joined."""

    current = base.get(var, "")
    parts = [e for e in entries if e]
    if current:
        parts.append(current)
    return os.pathsep.join(parts)
