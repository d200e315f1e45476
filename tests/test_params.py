"""
Test Suite for positional parameter parsing.
"""

import pytest

from grut_bootstrap.params import BootstrapParameters, parse_parameters


@pytest.mark.unit
def test_defaults_when_no_arguments():
    params = parse_parameters([])
    assert params == BootstrapParameters("3dgrut", "12.8.1", False)


@pytest.mark.unit
def test_env_name_and_cuda_version():
    params = parse_parameters(["myenv", "11.8.0"])
    assert params.environment_name == "myenv"
    assert params.cuda_version == "11.8.0"
    assert params.use_alternate_compiler is False


@pytest.mark.unit
def test_flag_in_cuda_slot_keeps_default_version():
    params = parse_parameters(["3dgrut", "WITH_GCC11"])
    assert params.use_alternate_compiler is True
    assert params.cuda_version == "12.8.1"


@pytest.mark.unit
def test_flag_after_cuda_version():
    params = parse_parameters(["myenv", "11.8.0", "WITH_GCC11"])
    assert params.cuda_version == "11.8.0"
    assert params.use_alternate_compiler is True


@pytest.mark.unit
def test_unsupported_version_is_not_rejected_here():
    """Validation belongs to the arch-profile lookup."""
    assert parse_parameters(["myenv", "99.0.0"]).cuda_version == "99.0.0"


@pytest.mark.unit
def test_empty_strings_fall_back_to_defaults():
    params = parse_parameters(["", ""])
    assert params.environment_name == "3dgrut"
    assert params.cuda_version == "12.8.1"


@pytest.mark.unit
def test_parameters_are_immutable():
    params = parse_parameters(["myenv"])
    with pytest.raises(AttributeError):
        params.cuda_version = "11.8.0"
