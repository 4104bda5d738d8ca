"""
Pipeline Emitter

Assembles the CompiledPipeline value object from the ordered steps, their
translated schemas and the resolved field bindings.
"""

import logging
from typing import Dict, List

from core.validator.models import CompilePhase
from core.workflow.models import OUTPUT_TARGET, Step, StepKind, ToolkitRequirement, WorkflowDefinition
from .base import CompilerStage, CompilerReport, sanitize_identifier
from .models import (
    BodyTemplate,
    ChainEntry,
    ChainEntryType,
    CompiledPipeline,
    ExecutionBody,
    StepBlock,
    StepMappings,
)
from .schema_translator import TranslatedSchemas

logger = logging.getLogger(__name__)

BODY_TEMPLATES = {
    StepKind.INTEGRATION_CALL: BodyTemplate.TOOL_INVOCATION,
    StepKind.CUSTOM_CODE: BodyTemplate.CUSTOM_CODE,
    StepKind.TABLE_QUERY: BodyTemplate.TABLE_QUERY,
    StepKind.TABLE_WRITE: BodyTemplate.TABLE_WRITE,
    StepKind.PASSTHROUGH: BodyTemplate.PASSTHROUGH,
}


def table_placeholder(table_ref: str) -> str:
    """Placeholder the runtime swaps for the concrete table id at install time"""
    return "{{tableId:%s}}" % (table_ref or "")


class PipelineEmitter(CompilerStage):
    """Ordered steps + bindings → CompiledPipeline"""

    phase = CompilePhase.EMITTING

    def run(self, workflow: WorkflowDefinition, ordered_steps: List[Step], schemas: TranslatedSchemas,
            mappings: Dict[str, StepMappings], requirements: List[ToolkitRequirement],
            content_hash: str, *, report: CompilerReport) -> CompiledPipeline:
        return self.emit(workflow, ordered_steps, schemas, mappings, requirements, content_hash)

    def emit(self, workflow: WorkflowDefinition, ordered_steps: List[Step], schemas: TranslatedSchemas,
             mappings: Dict[str, StepMappings], requirements: List[ToolkitRequirement],
             content_hash: str) -> CompiledPipeline:
        identifiers = self._assign_identifiers(ordered_steps)

        blocks = []
        chain = []
        for step in ordered_steps:
            step_mappings = mappings.get(step.id)
            bindings = step_mappings.bindings if step_mappings else {}

            blocks.append(StepBlock(
                step_id=step.id,
                identifier=identifiers[step.id],
                kind=step.kind,
                label=step.label,
                description=step.description,
                input_schema=schemas.step_inputs[step.id],
                output_schema=schemas.step_outputs[step.id],
                body=self._build_body(step, list(bindings.keys())),
            ))

            if bindings:
                chain.append(ChainEntry(type=ChainEntryType.MAP, step_id=step.id, mappings=dict(bindings)))
            chain.append(ChainEntry(type=ChainEntryType.STEP, step_id=step.id))

        output_mappings = mappings.get(OUTPUT_TARGET)
        if output_mappings and output_mappings.bindings:
            chain.append(ChainEntry(type=ChainEntryType.OUTPUT, mappings=dict(output_mappings.bindings)))

        pipeline = CompiledPipeline(
            workflow_id=workflow.id,
            name=workflow.name or workflow.id,
            description=workflow.description,
            content_hash=content_hash,
            input_schema=schemas.input_schema,
            config_schema=schemas.config_schema,
            output_schema=schemas.output_schema,
            steps=blocks,
            chain=chain,
            toolkit_requirements=requirements,
        )
        logger.debug(f"Emitted pipeline with {len(blocks)} steps and {len(chain)} chain entries")
        return pipeline

    def _assign_identifiers(self, ordered_steps: List[Step]) -> Dict[str, str]:
        """Sanitised, unique Python names for the step functions"""
        identifiers = {}
        taken = set()
        for step in ordered_steps:
            base = sanitize_identifier(step.id)
            identifier = base
            counter = 2
            while identifier in taken:
                identifier = f"{base}_{counter}"
                counter += 1
            taken.add(identifier)
            identifiers[step.id] = identifier
        return identifiers

    def _build_body(self, step: Step, arguments: List[str]) -> ExecutionBody:
        template = BODY_TEMPLATES[step.kind]

        if template == BodyTemplate.TOOL_INVOCATION:
            return ExecutionBody(
                template=template,
                toolkit_slug=step.toolkit_slug,
                tool_id=step.tool_id,
                arguments=arguments,
            )
        if template == BodyTemplate.CUSTOM_CODE:
            return ExecutionBody(template=template, code=step.code)
        if template in (BodyTemplate.TABLE_QUERY, BodyTemplate.TABLE_WRITE):
            return ExecutionBody(
                template=template,
                table_ref=table_placeholder(step.table_ref),
                table_options=dict(step.table_config or {}),
            )
        return ExecutionBody(template=template)
