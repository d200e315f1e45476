from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

DEFAULT_ENV_NAME = "3dgrut"
DEFAULT_CUDA_VERSION = "12.8.1"
ALTERNATE_COMPILER_FLAG = "WITH_GCC11"


@dataclass(frozen=True)
class BootstrapParameters:
    environment_name: str = DEFAULT_ENV_NAME
    cuda_version: str = DEFAULT_CUDA_VERSION
    use_alternate_compiler: bool = False


def parse_parameters(args: Sequence[str]) -> BootstrapParameters:
    """Interpret the positional arguments ``[ENV_NAME] [CUDA_VERSION|WITH_GCC11] [WITH_GCC11]``.

    Never fails: validation of the CUDA version happens later. The literal
    WITH_GCC11 may appear anywhere after the environment name; when it takes
    the CUDA version's slot the default version is kept.
    """

    positional = [str(a).strip() for a in args]

    env_name = positional[0] if positional and positional[0] else DEFAULT_ENV_NAME
    rest = positional[1:]

    use_alternate = ALTERNATE_COMPILER_FLAG in rest
    versions = [a for a in rest if a and a != ALTERNATE_COMPILER_FLAG]
    cuda_version = versions[0] if versions else DEFAULT_CUDA_VERSION

    return BootstrapParameters(
        environment_name=env_name,
        cuda_version=cuda_version,
        use_alternate_compiler=use_alternate,
    )
