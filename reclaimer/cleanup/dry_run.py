"""Dry-run execution mode for safe plan inspection.

Dry-run walks the same plan the live executor would run, logs every action
that would be taken and records it as a successful "would ..." result. No
backing-system command is ever issued.
"""

import logging
from typing import Callable, Optional

from reclaimer.models import ExecutionResult, ReclaimAction, ReclaimPlan, RunReport
from reclaimer.utils.logging import ReclaimerLogger, action_type_for

logger = logging.getLogger(__name__)


class DryRunExecutor:
    """Simulates a reclaim plan without touching any backing system."""

    def __init__(self, reclaimer_logger: Optional[ReclaimerLogger] = None):
        self.reclaimer_logger = reclaimer_logger or ReclaimerLogger(dry_run=True)

    def execute_dry_run(
        self,
        plan: ReclaimPlan,
        on_result: Optional[Callable[[ExecutionResult], None]] = None,
    ) -> RunReport:
        """
        Simulate a plan.

        Args:
            plan: Ordered actions from the policy selector
            on_result: Called with each simulated result

        Returns:
            RunReport with dry_run=True and one result per planned action
        """
        report = RunReport(level=plan.level, dry_run=True)
        logger.info(f"[DRY RUN] Starting simulation of {len(plan.actions)} actions")

        for action in plan.actions:
            self.reclaimer_logger.log_action_planned(
                action_type_for(action.kind),
                action.target.value,
                action.subject or "*",
                action.description,
            )
            result = ExecutionResult(
                action=action, succeeded=True, detail=describe_planned(action)
            )
            report.results.append(result)
            if on_result is not None:
                on_result(result)

        self._log_dry_run_summary(report)
        return report

    def _log_dry_run_summary(self, report: RunReport) -> None:
        destructive = sum(1 for r in report.results if r.action.destructive)
        logger.info("[DRY RUN] " + "=" * 50)
        logger.info(f"[DRY RUN] Level: {report.level.name}")
        logger.info(f"[DRY RUN] Actions that would run: {report.total_count()}")
        logger.info(f"[DRY RUN] Destructive actions: {destructive}")
        logger.info("[DRY RUN] No resources were modified")
        logger.info("[DRY RUN] " + "=" * 50)


def describe_planned(action: ReclaimAction) -> str:
    """Human-readable line for an action that was only planned."""
    marker = " (destructive)" if action.destructive else ""
    return f"would {action.description}{marker}"
