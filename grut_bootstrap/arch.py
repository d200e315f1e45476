from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

from .errors import UnsupportedCudaVersion
from .lib.command import CommandError, Runner, run_cmd
from .lib.env import prepend_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchProfile:
    cuda_version: str
    cuda_home: str
    arch_list: Tuple[str, ...]
    torch_backend: str

    @property
    def torch_cuda_arch_list(self) -> str:
        return ";".join(self.arch_list)

    def env(self, base: Mapping[str, str]) -> Dict[str, str]:
        """Environment overlay pointing builds at this CUDA install."""

        return {
            "TORCH_CUDA_ARCH_LIST": self.torch_cuda_arch_list,
            "CUDA_HOME": self.cuda_home,
            "PATH": prepend_path("PATH", [f"{self.cuda_home}/bin"], base),
            "LD_LIBRARY_PATH": prepend_path("LD_LIBRARY_PATH", [f"{self.cuda_home}/lib64"], base),
        }


# Arch lists match the published PyTorch wheels for each CUDA release:
#   11.8 -> sm_70 .. sm_90
#   12.8 -> sm_75 .. sm_120
ARCH_PROFILES: Dict[str, ArchProfile] = {
    "11.8.0": ArchProfile(
        cuda_version="11.8.0",
        cuda_home="/usr/local/cuda-11.8",
        arch_list=("7.0", "7.5", "8.0", "8.6", "9.0"),
        torch_backend="cu118",
    ),
    "12.8.1": ArchProfile(
        cuda_version="12.8.1",
        cuda_home="/usr/local/cuda-12.8",
        arch_list=("7.5", "8.0", "8.6", "9.0", "10.0", "12.0"),
        torch_backend="cu128",
    ),
}

SUPPORTED_CUDA_VERSIONS: Tuple[str, ...] = tuple(ARCH_PROFILES)


def resolve_arch_profile(cuda_version: str) -> ArchProfile:
    profile = ARCH_PROFILES.get(cuda_version)
    if profile is None:
        raise UnsupportedCudaVersion(cuda_version, SUPPORTED_CUDA_VERSIONS)
    logger.info("TORCH_CUDA_ARCH_LIST=%s", profile.torch_cuda_arch_list)
    return profile


def detect_driver_cuda(
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
    runner: Runner = run_cmd,
) -> Optional[bool]:
    """Report whether the NVIDIA driver exposes a CUDA runtime.

    Advisory only: returns None when nvidia-smi is absent, otherwise whether
    its output mentions a CUDA version. Never raises when the check fails.
    """

    if not which("nvidia-smi"):
        return None

    logger.info("NVIDIA driver detected. Checking CUDA runtime availability...")
    try:
        r = runner(["nvidia-smi"], check=False)
    except CommandError as e:
        logger.warning("nvidia-smi could not be run: %s", e)
        return False

    available = r.returncode == 0 and "CUDA Version" in r.stdout
    if available:
        logger.info("CUDA runtime available from driver")
    else:
        logger.warning("CUDA runtime not detected")
    return available
