"""
Toolkit requirement scanner: which external integrations does a workflow need?
"""

import logging
from typing import Dict, List

from core.validator.models import CompilePhase, DiagnosticKind
from core.workflow.models import Step, StepKind, ToolkitRequirement
from .base import CompilerStage, CompilerReport

logger = logging.getLogger(__name__)


def default_display_name(toolkit_slug: str) -> str:
    return toolkit_slug.replace("_", " ").replace("-", " ").title()


class ToolkitRequirementScanner(CompilerStage):
    """Groups integration calls by toolkit, in first-seen order"""

    phase = CompilePhase.SCANNING

    def run(self, steps: List[Step], *, report: CompilerReport) -> List[ToolkitRequirement]:
        return self.scan(steps, report)

    def scan(self, steps: List[Step], report: CompilerReport) -> List[ToolkitRequirement]:
        tool_ids: Dict[str, set] = {}
        display_names: Dict[str, str] = {}

        for step in steps:
            if step.kind != StepKind.INTEGRATION_CALL:
                continue

            if not step.toolkit_slug or not step.tool_id:
                missing = "toolkit slug" if not step.toolkit_slug else "tool id"
                report.add_warning(
                    DiagnosticKind.MISSING_TOOL_IDENTIFIER,
                    f"Integration step '{step.id}' has no {missing}",
                    step_id=step.id,
                    path=f"steps.{step.id}",
                    hint="Pick a tool for the step in the editor",
                )
                continue

            slug = step.toolkit_slug
            tool_ids.setdefault(slug, set()).add(step.tool_id)
            if step.toolkit_name and slug not in display_names:
                display_names[slug] = step.toolkit_name

        requirements = [
            ToolkitRequirement(
                toolkit_slug=slug,
                display_name=display_names.get(slug) or default_display_name(slug),
                tool_ids=sorted(ids),
            )
            for slug, ids in tool_ids.items()
        ]
        logger.debug(f"Workflow requires {len(requirements)} toolkits")
        return requirements
