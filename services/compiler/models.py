"""
Models for compiled pipelines and compile results
"""

from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from enum import Enum

from core.validator.models import CompilePhase, Diagnostic, Severity
from core.workflow.models import SchemaType, StepKind, ToolkitRequirement, TypeMatch


class ValueSource(str, Enum):
    RUNTIME_INPUT = "runtime_input"
    CONFIG = "config"
    STATIC = "static"
    STEP_OUTPUT = "step_output"


# Sources that read from the workflow invocation rather than a prior step
DIRECT_INPUT_SOURCES = frozenset({ValueSource.RUNTIME_INPUT, ValueSource.CONFIG, ValueSource.STATIC})


class ValueExpr(BaseModel):
    """A resolved binding for one target field"""
    source: ValueSource
    key: Optional[str] = None
    path: List[str] = Field(default_factory=list)
    value: Optional[Any] = None
    step_id: Optional[str] = None
    source_type: Optional[SchemaType] = None
    target_type: Optional[SchemaType] = None
    type_match: TypeMatch = TypeMatch.UNKNOWN
    resolved: bool = True

    @property
    def is_direct_input(self) -> bool:
        return self.source in DIRECT_INPUT_SOURCES


class StepMappings(BaseModel):
    """Resolved bindings for one mapping target, keyed by target field"""
    target_id: str
    bindings: Dict[str, ValueExpr] = Field(default_factory=dict)


class BodyTemplate(str, Enum):
    TOOL_INVOCATION = "tool_invocation"
    CUSTOM_CODE = "custom_code"
    TABLE_QUERY = "table_query"
    TABLE_WRITE = "table_write"
    PASSTHROUGH = "passthrough"


class ExecutionBody(BaseModel):
    template: BodyTemplate
    toolkit_slug: Optional[str] = None
    tool_id: Optional[str] = None
    arguments: List[str] = Field(default_factory=list)
    code: Optional[str] = None
    table_ref: Optional[str] = None
    table_options: Dict[str, Any] = Field(default_factory=dict)


class StepBlock(BaseModel):
    step_id: str
    identifier: str
    kind: StepKind
    label: str
    description: Optional[str] = None
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    body: ExecutionBody


class ChainEntryType(str, Enum):
    MAP = "map"
    STEP = "step"
    OUTPUT = "output"


class ChainEntry(BaseModel):
    type: ChainEntryType
    step_id: Optional[str] = None
    mappings: Dict[str, ValueExpr] = Field(default_factory=dict)


class CompiledPipeline(BaseModel):
    workflow_id: str
    name: str
    description: str = ""
    content_hash: str
    input_schema: Dict[str, Any]
    config_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    steps: List[StepBlock] = Field(default_factory=list)
    chain: List[ChainEntry] = Field(default_factory=list)
    toolkit_requirements: List[ToolkitRequirement] = Field(default_factory=list)

    def step_block(self, step_id: str) -> Optional[StepBlock]:
        return next((block for block in self.steps if block.step_id == step_id), None)


class CompileResult(BaseModel):
    """Outcome of one compile invocation"""
    ok: bool
    state: CompilePhase
    content_hash: str
    pipeline: Optional[CompiledPipeline] = None
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    source: Optional[str] = None

    def by_severity(self, severity: Severity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    @property
    def errors(self) -> List[Diagnostic]:
        return self.by_severity(Severity.ERROR)

    @property
    def warnings(self) -> List[Diagnostic]:
        return self.by_severity(Severity.WARNING)

    @property
    def infos(self) -> List[Diagnostic]:
        return self.by_severity(Severity.INFO)
