"""
Type definitions for compile diagnostics
"""

from typing import List, Dict, Any, Optional
from enum import Enum
from dataclasses import dataclass, field as dataclass_field, asdict


class CompilePhase(str, Enum):
    """Compile driver states"""
    ORDERING = "ordering"
    TRANSLATING = "translating"
    MAPPING = "mapping"
    SCANNING = "scanning"
    EMITTING = "emitting"
    DONE = "done"
    ABORTED = "aborted"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticKind(str, Enum):
    # Document boundary
    INVALID_DOCUMENT = "InvalidDocument"

    # Ordering
    DUPLICATE_STEP_ID = "DuplicateStepId"
    UNKNOWN_STEP_REFERENCE = "UnknownStepReference"
    INCOMPLETE_ORDER = "IncompleteOrder"
    DUPLICATE_ORDER_ENTRY = "DuplicateOrderEntry"

    # Mapping
    FORWARD_OR_UNKNOWN_REFERENCE = "ForwardOrUnknownReference"
    UNRESOLVED_SOURCE_PATH = "UnresolvedSourcePath"
    UNMAPPED_REQUIRED_FIELD = "UnmappedRequiredField"
    DUPLICATE_FIELD_MAPPING = "DuplicateFieldMapping"
    UNKNOWN_TARGET_FIELD = "UnknownTargetField"
    TYPE_MISMATCH = "TypeMismatch"

    # Schemas
    UNKNOWN_SCHEMA_TYPE = "UnknownSchemaType"
    SCHEMA_DEPTH_EXCEEDED = "SchemaDepthExceeded"

    # Toolkits
    MISSING_TOOL_IDENTIFIER = "MissingToolIdentifier"

    INTERNAL_ERROR = "InternalError"


@dataclass
class Diagnostic:
    """A structured compile-time finding"""
    kind: DiagnosticKind
    severity: Severity
    message: str
    step_id: Optional[str] = None
    field: Optional[str] = None
    path: Optional[str] = None
    hint: Optional[str] = None
    meta: Dict[str, Any] = dataclass_field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        data["severity"] = self.severity.value
        return data


@dataclass
class ValidateResponse:
    """Response from document validation"""
    ok: bool
    errors: List[Diagnostic]
