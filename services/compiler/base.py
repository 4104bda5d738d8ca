"""
Base compiler stage class and the diagnostics report shared by all stages.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
import hashlib
import json
import logging
import re

from core.config import Settings, settings as default_settings
from core.validator.models import CompilePhase, Diagnostic, DiagnosticKind, Severity

logger = logging.getLogger(__name__)


@dataclass
class CompilerReport:
    """Ordered diagnostics collected during one compile invocation"""
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def add(
        self,
        kind: DiagnosticKind,
        severity: Severity,
        message: str,
        step_id: Optional[str] = None,
        field: Optional[str] = None,
        path: Optional[str] = None,
        hint: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            kind=kind,
            severity=severity,
            message=message,
            step_id=step_id,
            field=field,
            path=path,
            hint=hint,
            meta=meta or {},
        )
        self.diagnostics.append(diagnostic)
        return diagnostic

    def add_error(self, kind: DiagnosticKind, message: str, **kwargs) -> Diagnostic:
        """Add an error to the report"""
        return self.add(kind, Severity.ERROR, message, **kwargs)

    def add_warning(self, kind: DiagnosticKind, message: str, **kwargs) -> Diagnostic:
        """Add a warning to the report"""
        return self.add(kind, Severity.WARNING, message, **kwargs)

    def add_info(self, kind: DiagnosticKind, message: str, **kwargs) -> Diagnostic:
        """Add an informational finding to the report"""
        return self.add(kind, Severity.INFO, message, **kwargs)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        """Check if there are any errors"""
        return len(self.errors) > 0

    @property
    def is_success(self) -> bool:
        """Check if compilation was successful"""
        return not self.has_errors


class CompilerStage(ABC):
    """Base class for compiler stages"""

    phase: CompilePhase

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    @abstractmethod
    def run(self, *args, report: CompilerReport, **kwargs) -> Any:
        """Execute the stage, recording findings on the report"""
        pass


def content_hash(document: Dict[str, Any]) -> str:
    """Stable SHA-256 over the canonical JSON form of a document"""
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def sanitize_identifier(name: str, suffix: str = "") -> str:
    """Turn a step id into a valid Python identifier"""
    identifier = re.sub(r"[^0-9a-zA-Z_]", "_", name).lower()
    if not identifier or identifier[0].isdigit():
        identifier = f"_{identifier}"
    return f"{identifier}{suffix}"


def split_path(path: str) -> List[str]:
    """Split a dot-separated source path, ignoring empty segments"""
    return [segment for segment in path.split(".") if segment]
