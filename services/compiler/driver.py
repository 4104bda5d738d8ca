"""
Compile Driver

State machine that runs the compiler stages in order, collects their
diagnostics and decides between aborting and returning a pipeline:

    ordering → translating → mapping → scanning → emitting → done
                                                 (aborted from ordering/mapping)
"""

import time
from typing import Any, Dict, Optional, Union

from core.config import Settings, settings as default_settings
from core.logging_config import get_logger, get_section_logger
from core.validator.models import CompilePhase, DiagnosticKind
from core.workflow.models import WorkflowDefinition
from .base import CompilerReport, content_hash
from .field_mapping import FieldMappingResolver
from .models import CompileResult
from .pipeline_emitter import PipelineEmitter
from .schema_translator import SchemaTranslator
from .source_renderer import SourceRenderer
from .step_order import StepOrderResolver
from .toolkit_scanner import ToolkitRequirementScanner

logger = get_logger(__name__)
section_logger = get_section_logger(__name__)


class CompileDriver:
    """
    Compiles workflow definitions into pipelines.

    The driver holds no state between calls; every ``compile`` uses a fresh
    report, so one instance can be shared.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.order_resolver = StepOrderResolver(self.settings)
        self.translator = SchemaTranslator(self.settings)
        self.mapping_resolver = FieldMappingResolver(self.settings)
        self.toolkit_scanner = ToolkitRequirementScanner(self.settings)
        self.emitter = PipelineEmitter(self.settings)
        self.renderer = SourceRenderer(self.settings)

    def compile(self, workflow: Union[WorkflowDefinition, Dict[str, Any]],
                render_source: Optional[bool] = None) -> CompileResult:
        """
        Compile a workflow definition

        Args:
            workflow: Definition model or raw editor document
            render_source: Also render the pipeline as module text; defaults
                to ``Settings.render_source_by_default``

        Returns:
            CompileResult; ``pipeline`` is None when the compile aborted

        Raises:
            pydantic.ValidationError: If a raw document is structurally malformed
        """
        if isinstance(workflow, dict):
            workflow = WorkflowDefinition.model_validate(workflow)
        if render_source is None:
            render_source = self.settings.render_source_by_default

        start_time = time.time()
        report = CompilerReport()
        digest = content_hash(workflow.model_dump(mode="json", by_alias=True))
        section_logger.log_compile_start(workflow.id, len(workflow.steps))

        state = CompilePhase.ORDERING
        pipeline = None
        source = None
        try:
            ordered = self.order_resolver.run(workflow.steps, workflow.order, report=report)
            if ordered is None:
                state = CompilePhase.ABORTED
            else:
                state = CompilePhase.TRANSLATING
                schemas = self.translator.translate_workflow(workflow, ordered, report)

                state = CompilePhase.MAPPING
                mappings = self.mapping_resolver.run(
                    ordered,
                    workflow.data_mappings,
                    workflow.runtime_inputs,
                    workflow.configs,
                    workflow.output_schema,
                    report=report,
                )
                if mappings is None:
                    state = CompilePhase.ABORTED
                else:
                    state = CompilePhase.SCANNING
                    requirements = self.toolkit_scanner.run(ordered, report=report)

                    state = CompilePhase.EMITTING
                    pipeline = self.emitter.run(
                        workflow, ordered, schemas, mappings, requirements, digest, report=report
                    )
                    if render_source:
                        source = self.renderer.run(pipeline, report=report)

                    state = CompilePhase.DONE

        except Exception as e:
            logger.error(f"Compile of workflow '{workflow.id}' failed during {state.value}: {e}", exc_info=True)
            report.add_error(
                DiagnosticKind.INTERNAL_ERROR,
                f"Internal error during {state.value}: {str(e)}",
                meta={"phase": state.value, "exception": type(e).__name__},
            )
            state = CompilePhase.ABORTED
            pipeline = None
            source = None

        section_logger.log_compile_end(
            workflow.id,
            state.value,
            len(report.errors),
            len(report.warnings),
            duration_ms=(time.time() - start_time) * 1000,
        )

        return CompileResult(
            ok=state == CompilePhase.DONE,
            state=state,
            content_hash=digest,
            pipeline=pipeline,
            diagnostics=list(report.diagnostics),
            source=source,
        )


def compile_workflow(workflow: Union[WorkflowDefinition, Dict[str, Any]],
                     render_source: Optional[bool] = None,
                     settings: Optional[Settings] = None) -> CompileResult:
    """Compile a workflow with a one-off driver"""
    return CompileDriver(settings).compile(workflow, render_source=render_source)
