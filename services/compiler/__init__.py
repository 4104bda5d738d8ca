"""
Workflow compiler: turns a linear step graph into a CompiledPipeline.
"""

from .base import CompilerReport, CompilerStage, content_hash
from .driver import CompileDriver, compile_workflow
from .field_mapping import FieldMappingResolver, classify_type_match
from .json_output import JSONFormatter, format_compile_result_json, format_validation_json
from .models import (
    BodyTemplate,
    ChainEntry,
    ChainEntryType,
    CompiledPipeline,
    CompileResult,
    ExecutionBody,
    StepBlock,
    StepMappings,
    ValueExpr,
    ValueSource,
)
from .pipeline_emitter import PipelineEmitter
from .schema_translator import SchemaTranslator, TranslatedSchemas, translate
from .source_renderer import SourceRenderer, render_source
from .step_order import StepOrderResolver
from .toolkit_scanner import ToolkitRequirementScanner

__all__ = [
    "CompilerReport",
    "CompilerStage",
    "content_hash",
    "CompileDriver",
    "compile_workflow",
    "FieldMappingResolver",
    "classify_type_match",
    "JSONFormatter",
    "format_compile_result_json",
    "format_validation_json",
    "BodyTemplate",
    "ChainEntry",
    "ChainEntryType",
    "CompiledPipeline",
    "CompileResult",
    "ExecutionBody",
    "StepBlock",
    "StepMappings",
    "ValueExpr",
    "ValueSource",
    "PipelineEmitter",
    "SchemaTranslator",
    "TranslatedSchemas",
    "translate",
    "SourceRenderer",
    "render_source",
    "StepOrderResolver",
    "ToolkitRequirementScanner",
]
