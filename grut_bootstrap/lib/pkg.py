from __future__ import annotations

from typing import Sequence


def _sudo(argv: list[str], use_sudo: bool) -> list[str]:
    return ["sudo", *argv] if use_sudo else argv


def apt_update(*, use_sudo: bool = True) -> list[str]:
    return _sudo(["apt-get", "update"], use_sudo)


def apt_install(packages: Sequence[str], *, use_sudo: bool = True) -> list[str]:
    if not packages:
        raise ValueError("apt_install requires at least one package")
    return _sudo(["apt-get", "install", "-y", *packages], use_sudo)


def uv_venv(path: str, *, python_version: str, prompt: str | None = None) -> list[str]:
    argv = ["uv", "venv", "--python", python_version]
    if prompt:
        argv += ["--prompt", prompt]
    argv.append(path)
    return argv


def uv_pip_install(
    *packages: str,
    requirements: Sequence[str] = (),
    torch_backend: str | None = None,
    find_links: str | None = None,
    upgrade: bool = False,
    force_reinstall: bool = False,
    no_cache: bool = False,
    editable: str | None = None,
) -> list[str]:
    """Build a ``uv pip install`` command line.

    uv targets the environment named by VIRTUAL_ENV, which the caller passes
    in the step's environment overlay.
    """

    argv = ["uv", "pip", "install"]
    if upgrade:
        argv.append("--upgrade")
    if force_reinstall:
        argv.append("--force-reinstall")
    if no_cache:
        argv.append("--no-cache-dir")
    if find_links:
        argv += ["--find-links", find_links]
    for req in requirements:
        argv += ["-r", req]
    if editable:
        argv += ["-e", editable]
    argv += list(packages)
    if torch_backend:
        argv += ["--torch-backend", torch_backend]
    if len(argv) == 3:
        raise ValueError("uv_pip_install requires packages, requirements or an editable path")
    return argv
