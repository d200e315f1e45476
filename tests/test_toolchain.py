"""
Test Suite for compiler toolchain selection.

Covers the advisory default path and the fatal alternate-compiler path.
"""

import logging

import pytest
from conftest import FakeRunner, make_which

from grut_bootstrap.errors import CompilerUnavailable, CompilerVersionTooNew
from grut_bootstrap.params import BootstrapParameters
from grut_bootstrap.toolchain import compiler_major_version, resolve_toolchain

ALT = BootstrapParameters(use_alternate_compiler=True)
DEFAULT = BootstrapParameters()


@pytest.mark.unit
def test_default_compiler_selected(runner, which):
    tc = resolve_toolchain(DEFAULT, which=which, runner=runner)
    assert tc.cc_path == "/usr/bin/gcc"
    assert tc.cxx_path == "/usr/bin/g++"
    assert tc.version_major == 10
    assert tc.alternate is False
    assert tc.env() == {}


@pytest.mark.unit
def test_default_compiler_too_new_only_warns(which, caplog):
    runner = FakeRunner(outputs={"/usr/bin/gcc": "13\n"})
    with caplog.at_level(logging.WARNING):
        tc = resolve_toolchain(DEFAULT, which=which, runner=runner)
    assert tc.version_major == 13
    assert "higher than 11" in caplog.text
    assert "WITH_GCC11" in caplog.text


@pytest.mark.unit
def test_alternate_compiler_selected(runner, which):
    tc = resolve_toolchain(ALT, which=which, runner=runner)
    assert tc.alternate is True
    assert tc.version_major == 11
    assert tc.env() == {"CC": "/usr/bin/gcc-11", "CXX": "/usr/bin/g++-11"}
    assert runner.argvs == [["/usr/bin/gcc-11", "-dumpversion"]]


@pytest.mark.unit
def test_alternate_compiler_missing_entirely():
    runner = FakeRunner()
    with pytest.raises(CompilerUnavailable, match="gcc-11 could not be found"):
        resolve_toolchain(ALT, which=make_which({}), runner=runner)
    assert runner.calls == []


@pytest.mark.unit
def test_alternate_cxx_missing():
    runner = FakeRunner()
    which = make_which({"gcc-11": "/usr/bin/gcc-11"})
    with pytest.raises(CompilerUnavailable, match="g\\+\\+-11"):
        resolve_toolchain(ALT, which=which, runner=runner)


@pytest.mark.unit
def test_alternate_compiler_still_too_new_is_fatal(which):
    runner = FakeRunner(outputs={"/usr/bin/gcc-11": "12.3.0"})
    with pytest.raises(CompilerVersionTooNew) as exc:
        resolve_toolchain(ALT, which=which, runner=runner)
    assert exc.value.version_major == 12
    assert exc.value.exit_code == 1


@pytest.mark.unit
def test_missing_default_compiler_is_unavailable():
    with pytest.raises(CompilerUnavailable):
        resolve_toolchain(DEFAULT, which=make_which({}), runner=FakeRunner())


@pytest.mark.unit
@pytest.mark.parametrize("output, expected", [("11", 11), ("11.4.0\n", 11), ("9.5", 9)])
def test_major_version_parsing(output, expected):
    runner = FakeRunner(outputs={"cc": output})
    assert compiler_major_version("cc", runner=runner) == expected


@pytest.mark.unit
def test_unparseable_version_raises():
    runner = FakeRunner(outputs={"cc": "clang"})
    with pytest.raises(CompilerUnavailable, match="Unrecognized"):
        compiler_major_version("cc", runner=runner)


@pytest.mark.unit
def test_failing_dumpversion_raises():
    runner = FakeRunner(fail_on={"-dumpversion": 1})
    with pytest.raises(CompilerUnavailable, match="Could not query"):
        compiler_major_version("cc", runner=runner)
