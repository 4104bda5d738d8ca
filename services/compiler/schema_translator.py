"""
Schema Translator

Converts SchemaNode trees into JSON Schema (draft 2020-12) validation
expressions for the pipeline runtime. Translation never fails: anything it
cannot describe becomes the permissive schema ``{}``.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from core.validator.models import CompilePhase, DiagnosticKind
from core.workflow.models import (
    RuntimeInput,
    SchemaNode,
    SchemaType,
    Step,
    WorkflowConfig,
    WorkflowDefinition,
)
from .base import CompilerStage, CompilerReport

logger = logging.getLogger(__name__)

# Editor format hints mapped onto JSON Schema format names
FORMAT_NAMES = {
    "email": "email",
    "url": "uri",
    "uri": "uri",
    "date": "date",
    "datetime": "date-time",
    "date-time": "date-time",
}

ANY_SCHEMA: Dict[str, Any] = {}


@dataclass
class TranslatedSchemas:
    """Translated schemas of one workflow, keyed by step id"""
    step_inputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    step_outputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    input_schema: Dict[str, Any] = field(default_factory=dict)
    config_schema: Dict[str, Any] = field(default_factory=dict)
    output_schema: Dict[str, Any] = field(default_factory=dict)


def runtime_inputs_node(runtime_inputs: List[RuntimeInput]) -> SchemaNode:
    """Object schema of the values supplied when a workflow is started"""
    return SchemaNode(
        type=SchemaType.OBJECT,
        properties={item.key: item.to_schema_node() for item in runtime_inputs},
        required=[item.key for item in runtime_inputs if item.required],
    )


def configs_node(configs: List[WorkflowConfig]) -> SchemaNode:
    """Object schema of the values fixed when a workflow is configured"""
    return SchemaNode(
        type=SchemaType.OBJECT,
        properties={item.key: item.to_schema_node() for item in configs},
        required=[item.key for item in configs if item.required],
    )


def _with_defaults(schema: Dict[str, Any], entries) -> Dict[str, Any]:
    properties = schema.get("properties", {})
    for entry in entries:
        if entry.default is not None and entry.key in properties:
            properties[entry.key]["default"] = entry.default
    return schema


class SchemaTranslator(CompilerStage):
    """SchemaNode → JSON Schema expression"""

    phase = CompilePhase.TRANSLATING

    def run(self, node: SchemaNode, *, report: CompilerReport,
            step_id: Optional[str] = None, path: str = "") -> Dict[str, Any]:
        return self.translate(node, report=report, step_id=step_id, path=path)

    def translate_workflow(self, workflow: WorkflowDefinition, ordered_steps: List[Step],
                           report: CompilerReport) -> TranslatedSchemas:
        """Translate every schema a pipeline carries"""
        translated = TranslatedSchemas()
        for step in ordered_steps:
            translated.step_inputs[step.id] = self.translate(
                step.input_schema, report, step.id, "inputSchema"
            )
            translated.step_outputs[step.id] = self.translate(
                step.output_schema, report, step.id, "outputSchema"
            )

        translated.input_schema = _with_defaults(
            self.translate(runtime_inputs_node(workflow.runtime_inputs), report, path="runtimeInputs"),
            workflow.runtime_inputs,
        )
        translated.config_schema = _with_defaults(
            self.translate(configs_node(workflow.configs), report, path="configs"),
            workflow.configs,
        )
        translated.output_schema = self.translate(workflow.output_schema, report, path="outputSchema")
        return translated

    def translate(self, node: Optional[SchemaNode], report: Optional[CompilerReport] = None,
                  step_id: Optional[str] = None, path: str = "") -> Dict[str, Any]:
        """
        Translate a schema tree

        Args:
            node: Root of the tree; None is treated as an unknown type
            report: Optional collector for informational findings
            step_id: Step the schema belongs to, for diagnostics
            path: Field path of ``node`` within its root, for diagnostics

        Returns:
            JSON Schema dict
        """
        return self._translate(node, report, step_id, path, depth=0)

    def _translate(self, node: Optional[SchemaNode], report: Optional[CompilerReport],
                   step_id: Optional[str], path: str, depth: int) -> Dict[str, Any]:
        if depth >= self.settings.max_schema_depth:
            if report is not None:
                report.add_info(
                    DiagnosticKind.SCHEMA_DEPTH_EXCEEDED,
                    f"Schema nesting deeper than {self.settings.max_schema_depth} levels; accepting any value",
                    step_id=step_id,
                    path=path or "root",
                )
            return dict(ANY_SCHEMA)

        if node is None or node.type == SchemaType.UNKNOWN:
            if report is not None:
                report.add_info(
                    DiagnosticKind.UNKNOWN_SCHEMA_TYPE,
                    "Schema type is unknown or missing; accepting any value",
                    step_id=step_id,
                    path=path or "root",
                )
            expr = dict(ANY_SCHEMA)
        elif node.enum:
            expr = {"enum": list(node.enum)}
        elif node.type == SchemaType.STRING:
            expr = {"type": "string"}
            if node.format:
                expr["format"] = FORMAT_NAMES.get(node.format.lower(), node.format)
        elif node.type == SchemaType.ARRAY:
            expr = {
                "type": "array",
                "items": self._translate(node.items, report, step_id, _join(path, "[]"), depth + 1)
                if node.items is not None else dict(ANY_SCHEMA),
            }
        elif node.type == SchemaType.OBJECT:
            expr = {"type": "object"}
            if node.properties:
                expr["properties"] = {
                    name: self._translate(child, report, step_id, _join(path, name), depth + 1)
                    for name, child in node.properties.items()
                }
                expr["required"] = [name for name in node.properties if name in node.required]
        else:
            expr = {"type": node.type.value}

        if node is not None and node.description:
            expr["description"] = node.description
        return expr


def _join(path: str, name: str) -> str:
    if not path:
        return name
    if name == "[]":
        return f"{path}[]"
    return f"{path}.{name}"


def translate(node: Optional[SchemaNode]) -> Dict[str, Any]:
    """Translate a schema tree with default settings"""
    return SchemaTranslator().translate(node)
