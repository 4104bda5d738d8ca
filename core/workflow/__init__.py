"""
Workflow document model

The structures an editor session hands to the compiler: steps, schemas,
data mappings, runtime inputs and configs.
"""

from .models import (
    INPUT_SOURCE,
    OUTPUT_TARGET,
    SCALAR_TYPES,
    SchemaType,
    SchemaNode,
    StepKind,
    Step,
    TypeMatch,
    FieldMapping,
    DataMapping,
    RuntimeInput,
    WorkflowConfig,
    WorkflowDefinition,
    ToolkitRequirement,
    empty_object_schema,
    normalize_type_name,
)

__all__ = [
    "INPUT_SOURCE",
    "OUTPUT_TARGET",
    "SCALAR_TYPES",
    "SchemaType",
    "SchemaNode",
    "StepKind",
    "Step",
    "TypeMatch",
    "FieldMapping",
    "DataMapping",
    "RuntimeInput",
    "WorkflowConfig",
    "WorkflowDefinition",
    "ToolkitRequirement",
    "empty_object_schema",
    "normalize_type_name",
]
