from __future__ import annotations

import argparse
import logging
import shutil
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .arch import detect_driver_cuda, resolve_arch_profile
from .config import BootstrapConfig, load_bootstrap_config
from .environment import ensure_isolated_environment
from .errors import BootstrapError, StepExecutionFailed
from .lib.command import CommandError, Runner, exit_status, run_cmd
from .logging_utils import configure_logging
from .params import ALTERNATE_COMPILER_FLAG, BootstrapParameters, parse_parameters
from .pipeline import execute
from .plan import build_provisioning_plan
from .report import new_report, record_error, save_report
from .toolchain import Which, resolve_toolchain

logger = logging.getLogger(__name__)


def _failure_details(error: BaseException) -> Dict[str, Any]:
    if isinstance(error, StepExecutionFailed):
        return {"step_index": error.step_index, "step_id": error.step_id}
    return {}


def run(
    params: BootstrapParameters,
    *,
    config: Optional[BootstrapConfig] = None,
    dry_run: bool = False,
    report_path: Optional[str] = None,
    runner: Runner = run_cmd,
    which: Which = shutil.which,
    base_env: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Resolve and execute the bootstrap; raises BootstrapError on the first failure.

    Arch profile and toolchain are resolved before anything touches the disk.
    """

    cfg = config or BootstrapConfig()
    report = new_report()
    report["parameters"] = asdict(params)
    report["dry_run"] = dry_run

    logger.info("Arguments:")
    logger.info("  environment: %s", params.environment_name)
    logger.info("  %s: %s", ALTERNATE_COMPILER_FLAG, params.use_alternate_compiler)
    logger.info("  CUDA version: %s", params.cuda_version)

    try:
        arch = resolve_arch_profile(params.cuda_version)
        report["arch_profile"] = {
            "cuda_version": arch.cuda_version,
            "cuda_home": arch.cuda_home,
            "torch_cuda_arch_list": arch.torch_cuda_arch_list,
            "torch_backend": arch.torch_backend,
        }

        toolchain = resolve_toolchain(params, which=which, runner=runner)
        report["toolchain"] = asdict(toolchain)

        detect_driver_cuda(which=which, runner=runner)

        environment = ensure_isolated_environment(
            params.environment_name,
            path=str(Path(cfg.project_dir) / cfg.venv_path),
            python_version=cfg.python_version,
            runner=runner,
            dry_run=dry_run,
        )
        report["environment"] = {
            "name": environment.name,
            "path": str(environment.path),
            "created": environment.created,
        }

        plan = build_provisioning_plan(
            toolchain,
            arch,
            params.cuda_version,
            environment,
            cfg,
            base_env=base_env,
        )
        report["plan"] = [s.step_id for s in plan]

        result = execute(plan, runner=runner, dry_run=dry_run)
        report["ran_steps"] = list(result.ran_steps)
        result.raise_for_failure()

        report["success"] = True
        logger.info("Setup completed successfully!")
        return report
    except Exception as e:
        record_error(report, e, **_failure_details(e))
        raise
    finally:
        if report_path:
            try:
                save_report(report_path, report)
            except OSError:
                logger.exception("Could not write run report to %s", report_path)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="grut-bootstrap",
        description="Provision the uv environment with the CUDA, PyTorch and Kaolin toolchain.",
    )
    p.add_argument(
        "args",
        nargs="*",
        metavar="ARG",
        help=f"ENV_NAME [CUDA_VERSION|{ALTERNATE_COMPILER_FLAG}] [{ALTERNATE_COMPILER_FLAG}]",
    )
    p.add_argument("--config", default=None, help="Optional YAML config")
    p.add_argument("--log", default=None, help="Path to bootstrap log (overrides config)")
    p.add_argument("--report", default=None, help="Write a run report (json|yaml)")
    p.add_argument("--dry-run", action="store_true", help="Resolve and log the plan without executing it")
    p.add_argument("--verbose", action="store_true", help="Log captured command output")

    args = p.parse_args(argv)

    try:
        cfg = load_bootstrap_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        p.error(f"cannot load config {args.config}: {e}")

    configure_logging(
        log_path=args.log or cfg.log_path,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    params = parse_parameters(args.args)

    try:
        run(params, config=cfg, dry_run=bool(args.dry_run), report_path=args.report)
    except BootstrapError as e:
        logger.error("%s", e)
        return e.exit_code
    except CommandError as e:
        logger.error("%s", e)
        return exit_status(e.returncode)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
