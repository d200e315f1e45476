from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class PatchError(RuntimeError):
    pass


@dataclass(frozen=True)
class TextSubstitution:
    """Replace every occurrence of ``old`` with ``new`` in one source file."""

    path: str
    old: str
    new: str

    def apply(self, root: str | Path = ".") -> int:
        return apply_substitution(Path(root) / self.path, self.old, self.new)


def apply_substitution(path: str | Path, old: str, new: str) -> int:
    """Apply a global textual substitution; returns the number of replacements.

    A file that already contains ``new`` but no ``old`` counts as patched and
    returns 0. A file containing neither raises PatchError.
    """

    if not old:
        raise PatchError("Empty substitution pattern")

    p = Path(path)
    if not p.is_file():
        raise PatchError(f"Patch target not found: {p}")

    original = p.read_text(encoding="utf-8")
    count = original.count(old)
    if count == 0:
        if new in original:
            logger.info("Patch already applied: %s", p)
            return 0
        raise PatchError(f"Failed to apply patch: pattern not found in {p}")

    p.write_text(original.replace(old, new), encoding="utf-8")
    logger.info("Patched %s (%d replacement%s)", p, count, "" if count == 1 else "s")
    return count
