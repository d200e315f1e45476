"""Bootstrap error hierarchy.

BootstrapError (base, RuntimeError)
├── UnsupportedCudaVersion(BootstrapError, ValueError)
├── CompilerUnavailable(BootstrapError)
├── CompilerVersionTooNew(BootstrapError)
└── StepExecutionFailed(BootstrapError)

Every BootstrapError is fatal; ``exit_code`` is what the CLI returns.
"""

from __future__ import annotations

from typing import Optional

from .lib.command import exit_status


class BootstrapError(RuntimeError):
    exit_code: int = 1


class UnsupportedCudaVersion(BootstrapError, ValueError):
    def __init__(self, cuda_version: str, supported: tuple[str, ...]):
        self.cuda_version = cuda_version
        self.supported = supported
        super().__init__(
            f"Unsupported CUDA version: {cuda_version}, available options are {' and '.join(supported)}"
        )


class CompilerUnavailable(BootstrapError):
    pass


class CompilerVersionTooNew(BootstrapError):
    def __init__(self, compiler: str, version_major: int, max_major: int):
        self.compiler = compiler
        self.version_major = version_major
        self.max_major = max_major
        super().__init__(
            f"{compiler} version {version_major} is still higher than {max_major}, "
            f"selecting the alternate compiler failed"
        )


class StepExecutionFailed(BootstrapError):
    def __init__(self, step_index: int, step_id: str, cause: Optional[BaseException] = None):
        self.step_index = step_index
        self.step_id = step_id
        self.cause = cause
        returncode = getattr(cause, "returncode", None)
        if isinstance(returncode, int) and returncode != 0:
            self.exit_code = exit_status(returncode)
        super().__init__(f"Provisioning step {step_index} ({step_id}) failed: {cause}")
