"""
Tests for workflow document validation.
"""
import pytest

from core.validator import SchemaValidator, validate_document
from core.validator.models import Diagnostic, DiagnosticKind, Severity


@pytest.mark.unit
@pytest.mark.core
class TestSchemaValidator:
    """Validation of raw editor documents."""

    def test_schema_loads(self):
        info = SchemaValidator().get_schema_info()
        assert info["title"] == "Workflow Definition"
        assert info["schema"] == "https://json-schema.org/draft/2020-12/schema"

    def test_valid_documents(self, two_step_workflow, mixed_workflow, runtime_input_workflow):
        for document in (two_step_workflow, mixed_workflow, runtime_input_workflow):
            response = validate_document(document)
            assert response.ok, response.errors

    def test_missing_id(self):
        response = validate_document({"steps": []})
        assert not response.ok
        error = response.errors[0]
        assert error.kind == DiagnosticKind.INVALID_DOCUMENT
        assert error.severity == Severity.ERROR
        assert error.path == "root"

    def test_unknown_step_kind(self, two_step_workflow):
        two_step_workflow["steps"][1]["type"] = "teleport"
        response = validate_document(two_step_workflow)
        assert not response.ok
        assert response.errors[0].path == "steps[1].type"
        assert response.errors[0].meta["validator"] == "enum"

    def test_step_without_kind(self):
        response = validate_document({"id": "wf", "steps": [{"id": "s1"}]})
        assert not response.ok
        assert response.errors[0].path == "steps[0]"

    def test_mapping_needs_source_and_target(self):
        response = validate_document({"id": "wf", "dataMappings": [{"sourceStepId": "a"}]})
        assert not response.ok
        assert response.errors[0].path == "dataMappings[0]"

    def test_not_an_object(self):
        assert not validate_document(["not", "a", "workflow"]).ok

    def test_errors_are_ordered_by_path(self):
        response = validate_document({
            "id": "wf",
            "steps": [{"id": "b", "type": "nope"}, {"id": 5, "type": "custom"}],
        })
        paths = [error.path for error in response.errors]
        assert paths == sorted(paths)


@pytest.mark.unit
@pytest.mark.core
class TestDiagnostic:
    """Diagnostic records."""

    def test_field_and_meta_defaults(self):
        first = Diagnostic(DiagnosticKind.UNKNOWN_TARGET_FIELD, Severity.WARNING, "ignored", field="q")
        second = Diagnostic(DiagnosticKind.TYPE_MISMATCH, Severity.INFO, "mismatch")
        first.meta["seen"] = True
        assert first.field == "q"
        assert second.field is None
        assert second.meta == {}

    def test_to_dict(self):
        diagnostic = Diagnostic(
            DiagnosticKind.INTERNAL_ERROR, Severity.ERROR, "boom", step_id="a", meta={"phase": "mapping"}
        )
        data = diagnostic.to_dict()
        assert data["kind"] == "InternalError"
        assert data["severity"] == "error"
        assert data["meta"] == {"phase": "mapping"}
        assert diagnostic.is_error
