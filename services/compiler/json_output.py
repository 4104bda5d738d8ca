"""
JSON output formatting for compile and validation results
"""

import json
from typing import Dict, Any, List

from core.validator.models import Diagnostic, Severity, ValidateResponse
from core.workflow.models import ToolkitRequirement
from .models import CompileResult


class JSONFormatter:
    """Formats compile and validation results as structured JSON"""

    @staticmethod
    def format_diagnostics(diagnostics: List[Diagnostic]) -> List[Dict[str, Any]]:
        return [diagnostic.to_dict() for diagnostic in diagnostics]

    @staticmethod
    def format_validation_response(response: ValidateResponse) -> Dict[str, Any]:
        """Format validation response as JSON"""
        return {
            "success": response.ok,
            "stage": "validation",
            "errors": JSONFormatter.format_diagnostics(response.errors),
            "summary": {
                "total_errors": len(response.errors),
                "validation_passed": response.ok
            }
        }

    @staticmethod
    def format_compile_result(result: CompileResult, include_source: bool = True) -> Dict[str, Any]:
        """Format a compile result as JSON"""
        formatted = {
            "success": result.ok,
            "stage": "compilation",
            "state": result.state.value,
            "content_hash": result.content_hash,
            "diagnostics": JSONFormatter.format_diagnostics(result.diagnostics),
        }

        if result.pipeline is not None:
            formatted["pipeline"] = result.pipeline.model_dump(mode="json")

        if include_source and result.source is not None:
            formatted["source"] = result.source

        formatted["summary"] = {
            "compilation_successful": result.ok,
            "total_errors": len(result.errors),
            "total_warnings": len(result.warnings),
            "total_infos": len(result.infos),
            "step_count": len(result.pipeline.steps) if result.pipeline else 0,
            "chain_length": len(result.pipeline.chain) if result.pipeline else 0,
            "has_pipeline": result.pipeline is not None
        }
        return formatted

    @staticmethod
    def format_requirements(requirements: List[ToolkitRequirement]) -> Dict[str, Any]:
        """Format toolkit requirements as JSON"""
        return {
            "toolkits": [requirement.model_dump(mode="json") for requirement in requirements],
            "summary": {
                "total_toolkits": len(requirements),
                "total_tools": sum(len(requirement.tool_ids) for requirement in requirements)
            }
        }

    @staticmethod
    def format_diagnostic_lines(diagnostics: List[Diagnostic]) -> List[str]:
        """One human readable line per diagnostic, errors first"""
        rank = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}
        ordered = sorted(diagnostics, key=lambda d: rank[d.severity])
        lines = []
        for diagnostic in ordered:
            location = diagnostic.path or diagnostic.step_id or "workflow"
            lines.append(
                f"{diagnostic.severity.value.upper():7} {diagnostic.kind.value} at {location}: {diagnostic.message}"
            )
        return lines

    @staticmethod
    def to_json_string(data: Dict[str, Any], pretty: bool = True) -> str:
        """Convert data to JSON string"""
        if pretty:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, ensure_ascii=False)


# Convenience functions
def format_compile_result_json(result: CompileResult, pretty: bool = True) -> str:
    """Format a compile result as a JSON string"""
    formatter = JSONFormatter()
    data = formatter.format_compile_result(result)
    return formatter.to_json_string(data, pretty)


def format_validation_json(response: ValidateResponse, pretty: bool = True) -> str:
    """Format a validation response as a JSON string"""
    formatter = JSONFormatter()
    data = formatter.format_validation_response(response)
    return formatter.to_json_string(data, pretty)
