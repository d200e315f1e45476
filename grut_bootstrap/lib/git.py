from __future__ import annotations


def clone(url: str, dest: str, *, recursive: bool = True) -> list[str]:
    argv = ["git", "clone"]
    if recursive:
        argv.append("--recursive")
    return [*argv, url, dest]


def checkout(revision: str) -> list[str]:
    return ["git", "checkout", revision]


def submodule_update() -> list[str]:
    return ["git", "submodule", "update", "--init", "--recursive"]


def log_range(base: str, head: str = "HEAD") -> list[str]:
    return ["git", "log", "--oneline", f"{base}..{head}"]


def rebase_onto(target: str, base: str) -> list[str]:
    return ["git", "rebase", "--onto", target, base]
