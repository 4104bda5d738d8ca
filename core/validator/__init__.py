"""
Workflow document validation and compile diagnostics.

Validates raw workflow documents against the bundled JSON Schema and defines
the diagnostic types shared by the compiler.
"""

from .models import (
    CompilePhase,
    Severity,
    DiagnosticKind,
    Diagnostic,
    ValidateResponse,
)
from .schema_validator import (
    SchemaValidator,
    validate_document,
)

__version__ = "1.0.0"
__all__ = [
    "CompilePhase",
    "Severity",
    "DiagnosticKind",
    "Diagnostic",
    "ValidateResponse",
    "SchemaValidator",
    "validate_document",
]
