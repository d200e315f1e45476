from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .errors import StepExecutionFailed
from .lib.command import Runner, run_cmd
from .plan import ProvisioningStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    ran_steps: List[str] = field(default_factory=list)
    failed_at: Optional[int] = None
    failed_step: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.failed_at is None

    def raise_for_failure(self) -> None:
        if self.failed_at is not None:
            raise StepExecutionFailed(self.failed_at, self.failed_step or "?", self.error)


def execute(
    plan: Sequence[ProvisioningStep],
    *,
    runner: Runner = run_cmd,
    dry_run: bool = False,
) -> ExecutionResult:
    """Run steps in order, stopping at the first failure.

    ``failed_at`` is 1-based. Completed steps are not rolled back; re-running
    the bootstrap is expected to be a no-op for already installed pins.
    """

    ran: List[str] = []
    total = len(plan)

    for index, step in enumerate(plan, start=1):
        logger.info("[%d/%d] %s", index, total, step.description)
        try:
            step.run(runner, dry_run=dry_run)
        except Exception as e:
            if not step.is_fatal_on_failure:
                logger.warning("Step %s failed (non-fatal): %s", step.step_id, e)
                ran.append(step.step_id)
                continue
            logger.error("Step %d/%d (%s) failed: %s", index, total, step.step_id, e)
            return ExecutionResult(ran_steps=ran, failed_at=index, failed_step=step.step_id, error=e)
        ran.append(step.step_id)

    return ExecutionResult(ran_steps=ran)
