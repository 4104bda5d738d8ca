"""
JSON Schema validation for workflow documents at the compiler's input boundary
"""

import json
import logging
from typing import List, Dict, Any, Optional, Union
from jsonschema.exceptions import ValidationError as JSONSchemaValidationError
from jsonschema.validators import Draft202012Validator
from pathlib import Path

from .models import Diagnostic, DiagnosticKind, Severity, ValidateResponse

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).parent.parent / "dsl" / "workflow_schema.json"


class SchemaValidator:
    """Validates workflow documents against the bundled document schema"""

    def __init__(self, schema_path: Optional[Union[str, Path]] = None):
        self.schema = None
        self.validator = None
        self._load_schema(schema_path)

    def _load_schema(self, schema_path: Optional[Union[str, Path]] = None):
        """Load the JSON schema from file or use default path"""
        if schema_path is None:
            schema_path = DEFAULT_SCHEMA_PATH

        try:
            with open(schema_path, 'r') as f:
                self.schema = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load schema from {schema_path}: {e}")
            raise

        Draft202012Validator.check_schema(self.schema)
        self.validator = Draft202012Validator(self.schema)
        logger.debug(f"Schema loaded successfully from {schema_path}")

    def validate_document(self, doc: Any) -> ValidateResponse:
        """
        Validate a raw workflow document against the schema

        Args:
            doc: The decoded JSON document

        Returns:
            Validation response; every violation becomes an InvalidDocument error
        """
        if not self.validator:
            raise RuntimeError("Schema not loaded")

        errors = [
            self._convert_jsonschema_error(error)
            for error in sorted(
                self.validator.iter_errors(doc),
                key=lambda e: [str(part) for part in e.absolute_path]
            )
        ]

        if errors:
            logger.info(f"Document validation failed with {len(errors)} errors")

        return ValidateResponse(ok=not errors, errors=errors)

    def _convert_jsonschema_error(self, error: JSONSchemaValidationError) -> Diagnostic:
        """Convert a JSON Schema validation error to a diagnostic"""
        return Diagnostic(
            kind=DiagnosticKind.INVALID_DOCUMENT,
            severity=Severity.ERROR,
            message=error.message,
            path=self._format_error_path(error.absolute_path),
            meta={
                "schema_path": [str(part) for part in error.absolute_schema_path],
                "validator": error.validator,
            }
        )

    def _format_error_path(self, path) -> str:
        """Format the error path for display"""
        parts = list(path)
        if not parts:
            return "root"

        formatted_path = ""
        for i, part in enumerate(parts):
            if isinstance(part, int):
                formatted_path += f"[{part}]"
            else:
                if i == 0:
                    formatted_path += part
                else:
                    formatted_path += f".{part}"

        return formatted_path

    def get_schema_info(self) -> Dict[str, Any]:
        """Get information about the loaded schema"""
        if not self.schema:
            return {}

        return {
            "title": self.schema.get("title"),
            "description": self.schema.get("description"),
            "id": self.schema.get("$id"),
            "schema": self.schema.get("$schema"),
        }


# Global schema validator instance
schema_validator = SchemaValidator()


def validate_document(doc: Any) -> ValidateResponse:
    """Validate a raw workflow document with the global validator"""
    return schema_validator.validate_document(doc)
