from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .arch import ArchProfile
from .config import BootstrapConfig
from .environment import EnvironmentHandle
from .errors import UnsupportedCudaVersion
from .lib import git
from .lib.command import Runner
from .lib.patch import TextSubstitution
from .lib.pkg import apt_install, apt_update, uv_pip_install
from .toolchain import ToolchainSelection

logger = logging.getLogger(__name__)


KAOLIN_REPO = "https://github.com/NVIDIAGameWorks/kaolin.git"
# Pinned for reproducibility until a cu128 wheel is published.
KAOLIN_REVISION = "c2da967b9e0d8e3ebdbd65d3e8464d7e39005203"
KAOLIN_CU118_WHEELS = "https://nvidia-kaolin.s3.us-east-2.amazonaws.com/torch-2.1.2_cu118.html"
KAOLIN_RAYTRACE_PATCH = TextSubstitution(
    path="kaolin/csrc/render/spc/raytrace_cuda.cu",
    old="AT_DISPATCH_FLOATING_TYPES_AND_HALF(feats_in.type()",
    new="AT_DISPATCH_FLOATING_TYPES_AND_HALF(feats_in.scalar_type()",
)


@dataclass(frozen=True)
class ProvisioningStep:
    """One external tool invocation (``argv``) or in-process ``action``."""

    step_id: str
    description: str
    argv: Optional[List[str]] = None
    action: Optional[Callable[[], object]] = None
    env: Dict[str, str] = field(default_factory=dict)
    cwd: Optional[str] = None
    is_fatal_on_failure: bool = True

    def __post_init__(self) -> None:
        if (self.argv is None) == (self.action is None):
            raise ValueError(f"Step {self.step_id} needs exactly one of argv or action")

    def run(self, runner: Runner, *, dry_run: bool = False) -> None:
        if self.argv is not None:
            runner(self.argv, env=self.env, cwd=self.cwd, capture=False, dry_run=dry_run)
            return
        if dry_run:
            logger.info("DRY-RUN %s", self.description)
        elif self.action is not None:
            self.action()


@dataclass(frozen=True)
class PlanContext:
    toolchain: ToolchainSelection
    arch: ArchProfile
    environment: EnvironmentHandle
    config: BootstrapConfig
    env: Dict[str, str]

    @property
    def project_dir(self) -> str:
        return self.config.project_dir

    @property
    def kaolin_dir(self) -> str:
        return str(Path(self.config.project_dir) / self.config.thirdparty_dir / "kaolin")

    def step(self, step_id: str, description: str, argv: Sequence[str], *, cwd: Optional[str] = None) -> ProvisioningStep:
        return ProvisioningStep(
            step_id=step_id,
            description=description,
            argv=list(argv),
            env=dict(self.env),
            cwd=cwd or self.project_dir,
        )


def build_step_env(
    toolchain: ToolchainSelection,
    arch: ArchProfile,
    environment: EnvironmentHandle,
    base: Mapping[str, str],
) -> Dict[str, str]:
    """Per-step environment overlay; the process environment is left untouched."""

    overlay: Dict[str, str] = dict(environment.env(base))
    overlay.update(arch.env(dict(base, **overlay)))
    overlay.update(toolchain.env())
    return overlay


def _cuda118_steps(ctx: PlanContext) -> List[ProvisioningStep]:
    sudo = ctx.config.use_sudo
    backend = ctx.arch.torch_backend
    return [
        ctx.step("apt_update", "Refresh apt package index", apt_update(use_sudo=sudo)),
        ctx.step(
            "apt_build_tools",
            "Install cmake and ninja",
            apt_install(["cmake", "ninja-build"], use_sudo=sudo),
        ),
        ctx.step(
            "install_torch",
            f"Install PyTorch 2.1.2 ({backend})",
            uv_pip_install("torch==2.1.2", "torchvision==0.16.2", "torchaudio==2.1.2", torch_backend=backend),
        ),
        ctx.step("pin_numpy", "Pin numpy below 2.0", uv_pip_install("numpy<2.0")),
        ctx.step(
            "install_kaolin",
            "Install Kaolin 0.17.0 wheel",
            uv_pip_install("kaolin==0.17.0", find_links=KAOLIN_CU118_WHEELS),
        ),
    ]


def _cuda128_steps(ctx: PlanContext) -> List[ProvisioningStep]:
    sudo = ctx.config.use_sudo
    backend = ctx.arch.torch_backend
    gcc_major = ctx.toolchain.version_major
    kaolin = ctx.kaolin_dir

    return [
        ctx.step("apt_update", "Refresh apt package index", apt_update(use_sudo=sudo)),
        ctx.step(
            "apt_build_tools",
            f"Install cmake, ninja and gcc-{gcc_major}",
            apt_install(["cmake", "ninja-build", f"gcc-{gcc_major}", f"g++-{gcc_major}"], use_sudo=sudo),
        ),
        ctx.step(
            "install_torch",
            f"Install PyTorch ({backend})",
            uv_pip_install("torch", "torchvision", "torchaudio", torch_backend=backend),
        ),
        ctx.step("pin_numpy", "Reinstall numpy below 2", uv_pip_install("numpy<2", force_reinstall=True)),
        # TODO: switch to a Kaolin wheel once one is published for cu128.
        ctx.step("remove_kaolin_checkout", "Remove stale Kaolin checkout", ["rm", "-rf", kaolin]),
        ctx.step("clone_kaolin", "Clone Kaolin", git.clone(KAOLIN_REPO, kaolin)),
        ctx.step("checkout_kaolin", f"Checkout Kaolin {KAOLIN_REVISION[:10]}", git.checkout(KAOLIN_REVISION), cwd=kaolin),
        ProvisioningStep(
            step_id="patch_kaolin",
            description=f"Patch {KAOLIN_RAYTRACE_PATCH.path} (type() -> scalar_type())",
            action=lambda: KAOLIN_RAYTRACE_PATCH.apply(kaolin),
        ),
        ctx.step("upgrade_pip", "Upgrade pip", uv_pip_install("pip", upgrade=True), cwd=kaolin),
        ctx.step(
            "kaolin_build_tools",
            "Install Kaolin build tools",
            uv_pip_install("ninja", "imageio", "imageio-ffmpeg", no_cache=True),
            cwd=kaolin,
        ),
        ctx.step(
            "kaolin_requirements",
            "Install Kaolin requirements",
            uv_pip_install(
                requirements=[
                    "tools/viz_requirements.txt",
                    "tools/requirements.txt",
                    "tools/build_requirements.txt",
                ],
                no_cache=True,
            ),
            cwd=kaolin,
        ),
        ProvisioningStep(
            step_id="build_kaolin",
            description="Build and install Kaolin",
            argv=[ctx.environment.python, "setup.py", "install"],
            env=dict(ctx.env, IGNORE_TORCH_VER="1"),
            cwd=kaolin,
        ),
        ctx.step("cleanup_kaolin_checkout", "Remove Kaolin checkout", ["rm", "-rf", kaolin]),
    ]


def _common_tail(ctx: PlanContext) -> List[ProvisioningStep]:
    return [
        ctx.step(
            "apt_gl_headers",
            "Install OpenGL headers for the playground",
            apt_install(["libgl1-mesa-dev", "libglu1-mesa-dev"], use_sudo=ctx.config.use_sudo),
        ),
        ctx.step("git_submodules", "Initialize git submodules", git.submodule_update()),
        ctx.step("install_requirements", "Install project requirements", uv_pip_install(requirements=["requirements.txt"])),
        ctx.step("install_project", "Install project (editable)", uv_pip_install(editable=".")),
    ]


PlanBuilder = Callable[[PlanContext], List[ProvisioningStep]]

# Keys must match arch.ARCH_PROFILES.
PLAN_BUILDERS: Dict[str, PlanBuilder] = {
    "11.8.0": _cuda118_steps,
    "12.8.1": _cuda128_steps,
}


def build_provisioning_plan(
    toolchain: ToolchainSelection,
    arch: ArchProfile,
    cuda_version: str,
    environment: EnvironmentHandle,
    config: Optional[BootstrapConfig] = None,
    *,
    base_env: Optional[Mapping[str, str]] = None,
) -> List[ProvisioningStep]:
    builder = PLAN_BUILDERS.get(cuda_version)
    if builder is None:
        raise UnsupportedCudaVersion(cuda_version, tuple(PLAN_BUILDERS))

    ctx = PlanContext(
        toolchain=toolchain,
        arch=arch,
        environment=environment,
        config=config or BootstrapConfig(),
        env=build_step_env(toolchain, arch, environment, os.environ if base_env is None else base_env),
    )
    logger.info("Installing CUDA %s ...", cuda_version)
    return builder(ctx) + _common_tail(ctx)
