"""
Step Order Resolver

Determines the single linear execution order of a workflow's steps, either
from an explicit order list or from document order, and checks referential
integrity of both.
"""

import logging
from collections import Counter
from typing import List, Optional

from core.validator.models import CompilePhase, DiagnosticKind
from core.workflow.models import Step
from .base import CompilerStage, CompilerReport

logger = logging.getLogger(__name__)


class StepOrderResolver(CompilerStage):
    """Steps (+ explicit order) → ordered chain"""

    phase = CompilePhase.ORDERING

    def run(self, steps: List[Step], explicit_order: Optional[List[str]] = None, *,
            report: CompilerReport) -> Optional[List[Step]]:
        return self.resolve(steps, explicit_order, report)

    def resolve(self, steps: List[Step], explicit_order: Optional[List[str]],
                report: CompilerReport) -> Optional[List[Step]]:
        """
        Resolve the execution order

        Returns:
            The ordered steps, or None when an ordering error was recorded
        """
        errors_before = len(report.errors)

        self._check_duplicate_ids(steps, report)

        # An empty order list is what a fresh editor document carries
        if not explicit_order:
            ordered = list(steps)
        else:
            ordered = self._apply_explicit_order(steps, explicit_order, report)

        if len(report.errors) > errors_before:
            logger.info(f"Step ordering failed with {len(report.errors) - errors_before} errors")
            return None

        logger.debug(f"Resolved step order: {[step.id for step in ordered]}")
        return ordered

    def _check_duplicate_ids(self, steps: List[Step], report: CompilerReport):
        counts = Counter(step.id for step in steps)
        reported = set()
        for step in steps:
            if counts[step.id] > 1 and step.id not in reported:
                reported.add(step.id)
                report.add_error(
                    DiagnosticKind.DUPLICATE_STEP_ID,
                    f"Step id '{step.id}' is declared {counts[step.id]} times",
                    step_id=step.id,
                    path=f"steps.{step.id}",
                    hint="Step ids must be unique within a workflow",
                )

    def _apply_explicit_order(self, steps: List[Step], explicit_order: List[str],
                              report: CompilerReport) -> List[Step]:
        by_id = {}
        for step in steps:
            by_id.setdefault(step.id, step)

        ordered = []
        seen = set()
        for index, step_id in enumerate(explicit_order):
            if step_id not in by_id:
                report.add_error(
                    DiagnosticKind.UNKNOWN_STEP_REFERENCE,
                    f"Execution order references unknown step '{step_id}'",
                    step_id=step_id,
                    path=f"order[{index}]",
                )
                continue
            if step_id in seen:
                report.add_error(
                    DiagnosticKind.DUPLICATE_ORDER_ENTRY,
                    f"Step '{step_id}' appears more than once in the execution order",
                    step_id=step_id,
                    path=f"order[{index}]",
                )
                continue
            seen.add(step_id)
            ordered.append(by_id[step_id])

        for step_id in by_id:
            if step_id not in seen:
                report.add_error(
                    DiagnosticKind.INCOMPLETE_ORDER,
                    f"Step '{step_id}' is missing from the execution order",
                    step_id=step_id,
                    path="order",
                    hint="The execution order must list every step exactly once",
                )

        return ordered
