"""
Tests for execution order resolution.
"""
import pytest

from core.validator.models import DiagnosticKind
from core.workflow.models import Step
from services.compiler.step_order import StepOrderResolver


def make_steps(*ids):
    return [Step(id=step_id, kind="passthrough") for step_id in ids]


@pytest.mark.unit
@pytest.mark.services
class TestStepOrderResolver:
    """Explicit and document ordering."""

    def test_document_order_without_explicit_order(self, report):
        ordered = StepOrderResolver().run(make_steps("a", "b", "c"), None, report=report)
        assert [step.id for step in ordered] == ["a", "b", "c"]
        assert report.diagnostics == []

    def test_empty_order_falls_back_to_document_order(self, report):
        ordered = StepOrderResolver().run(make_steps("a", "b"), [], report=report)
        assert [step.id for step in ordered] == ["a", "b"]

    def test_explicit_order_is_followed(self, report):
        ordered = StepOrderResolver().run(make_steps("a", "b", "c"), ["c", "a", "b"], report=report)
        assert [step.id for step in ordered] == ["c", "a", "b"]
        assert report.is_success

    def test_duplicate_step_id(self, report):
        ordered = StepOrderResolver().run(make_steps("fetch", "fetch"), None, report=report)
        assert ordered is None
        assert [d.kind for d in report.errors] == [DiagnosticKind.DUPLICATE_STEP_ID]
        assert report.errors[0].step_id == "fetch"

    def test_unknown_step_reference(self, report):
        ordered = StepOrderResolver().run(make_steps("a"), ["a", "ghost"], report=report)
        assert ordered is None
        assert [d.kind for d in report.errors] == [DiagnosticKind.UNKNOWN_STEP_REFERENCE]
        assert report.errors[0].path == "order[1]"

    def test_incomplete_order(self, report):
        ordered = StepOrderResolver().run(make_steps("a", "b"), ["a"], report=report)
        assert ordered is None
        assert [d.kind for d in report.errors] == [DiagnosticKind.INCOMPLETE_ORDER]
        assert report.errors[0].step_id == "b"

    def test_duplicate_order_entry(self, report):
        ordered = StepOrderResolver().run(make_steps("a", "b"), ["a", "b", "a"], report=report)
        assert ordered is None
        assert [d.kind for d in report.errors] == [DiagnosticKind.DUPLICATE_ORDER_ENTRY]

    def test_all_errors_collected_before_abort(self, report):
        steps = make_steps("a", "a", "b", "c")
        ordered = StepOrderResolver().run(steps, ["a", "x", "a", "b"], report=report)
        assert ordered is None
        kinds = [d.kind for d in report.errors]
        assert kinds == [
            DiagnosticKind.DUPLICATE_STEP_ID,
            DiagnosticKind.UNKNOWN_STEP_REFERENCE,
            DiagnosticKind.DUPLICATE_ORDER_ENTRY,
            DiagnosticKind.INCOMPLETE_ORDER,
        ]
