"""
Test Suite for isolated environment creation.
"""

from pathlib import Path

import pytest
from conftest import FakeRunner

from grut_bootstrap.environment import ensure_isolated_environment


class CreatingRunner(FakeRunner):
    """Creates the venv directory the way ``uv venv`` would."""

    def __call__(self, argv, **kwargs):
        result = super().__call__(argv, **kwargs)
        if argv[:2] == ["uv", "venv"] and not kwargs.get("dry_run"):
            Path(argv[-1]).mkdir(parents=True)
        return result


@pytest.mark.unit
def test_creates_environment_when_absent(tmp_path):
    runner = CreatingRunner()
    venv = tmp_path / ".venv"

    handle = ensure_isolated_environment("myenv", path=str(venv), python_version="3.11", runner=runner)

    assert handle.created is True
    assert handle.path == venv
    assert runner.argvs == [["uv", "venv", "--python", "3.11", "--prompt", "myenv", str(venv)]]


@pytest.mark.unit
def test_second_call_reuses_environment(tmp_path):
    runner = CreatingRunner()
    venv = str(tmp_path / ".venv")

    first = ensure_isolated_environment("myenv", path=venv, runner=runner)
    second = ensure_isolated_environment("myenv", path=venv, runner=runner)

    assert first.created is True
    assert second.created is False
    assert len(runner.calls) == 1


@pytest.mark.unit
def test_existing_directory_is_not_recreated(tmp_path, caplog):
    venv = tmp_path / ".venv"
    venv.mkdir()
    runner = FakeRunner()

    with caplog.at_level("INFO"):
        handle = ensure_isolated_environment("myenv", path=str(venv), runner=runner)

    assert handle.created is False
    assert runner.calls == []
    assert "already exists" in caplog.text


@pytest.mark.unit
def test_dry_run_does_not_create(tmp_path):
    runner = FakeRunner()
    handle = ensure_isolated_environment("myenv", path=str(tmp_path / ".venv"), runner=runner, dry_run=True)
    assert handle.created is False
    assert runner.calls[0].dry_run is True


@pytest.mark.unit
def test_activation_overlay(tmp_path):
    venv = tmp_path / ".venv"
    venv.mkdir()
    handle = ensure_isolated_environment("myenv", path=str(venv), runner=FakeRunner())

    env = handle.env({"PATH": "/usr/bin"})

    assert env["VIRTUAL_ENV"] == str(venv)
    assert env["PATH"].split(":") == [str(venv / "bin"), "/usr/bin"]
    assert handle.python == str(venv / "bin" / "python")
