"""
API models for the workflow compiler service
"""

from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional

# ============================================================================
# Compile Models
# ============================================================================

class DiagnosticModel(BaseModel):
    kind: str
    severity: str = Field(..., enum=["error", "warning", "info"])
    message: str
    step_id: Optional[str] = None
    field: Optional[str] = None
    path: Optional[str] = None
    hint: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)

class CompileSummary(BaseModel):
    compilation_successful: bool
    total_errors: int
    total_warnings: int
    total_infos: int
    step_count: int
    chain_length: int
    has_pipeline: bool

class CompileResponse(BaseModel):
    success: bool
    stage: str = "compilation"
    state: str
    content_hash: str
    diagnostics: List[DiagnosticModel]
    pipeline: Optional[Dict[str, Any]] = None
    source: Optional[str] = None
    summary: CompileSummary
    cached: bool = False

class ValidationSummary(BaseModel):
    total_errors: int
    validation_passed: bool

class ValidationResponse(BaseModel):
    success: bool
    stage: str = "validation"
    errors: List[DiagnosticModel]
    summary: ValidationSummary

# ============================================================================
# System Models
# ============================================================================

class CacheStatusResponse(BaseModel):
    entries: int
    max_entries: int
    ttl_seconds: int
    hits: int
    misses: int

class CacheClearResponse(BaseModel):
    status: str = "success"
    cleared: int

class HealthResponse(BaseModel):
    status: str
    version: str
    schema_loaded: bool
    max_schema_depth: int
