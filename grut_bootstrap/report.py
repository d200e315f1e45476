from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def new_report() -> Dict[str, Any]:
    return {
        "parameters": {},
        "arch_profile": None,
        "toolchain": None,
        "environment": None,
        "plan": [],
        "ran_steps": [],
        "dry_run": False,
        "success": False,
        "error": None,
    }


def record_error(report: Dict[str, Any], error: BaseException, **details: Any) -> None:
    report["success"] = False
    report["error"] = {"type": type(error).__name__, "message": str(error), **details}


def save_report(path: str, report: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(report, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.info("Run report written to %s", p)
