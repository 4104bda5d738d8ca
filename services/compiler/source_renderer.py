"""
Source Renderer

Renders a CompiledPipeline as the text of a standalone Python module. The
module validates with jsonschema at every step boundary and expects a
``runtime`` object providing ``tools``, ``tables`` and ``run_code``.

Output is a pure function of the pipeline: no timestamps, no environment.
"""

import logging
import pprint
from typing import Any, List

from core.validator.models import CompilePhase
from .base import CompilerStage, CompilerReport
from .models import BodyTemplate, ChainEntryType, CompiledPipeline, StepBlock, ValueExpr, ValueSource

logger = logging.getLogger(__name__)

INDENT = "    "


def _literal(value: Any) -> str:
    return pprint.pformat(value, sort_dicts=False, width=88)


def _constant(name: str, value: Any) -> str:
    return f"{name} = {_literal(value)}"


def _docstring(text: str, indent: str = "") -> List[str]:
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    lines = text.strip().splitlines() or [""]
    if len(lines) == 1:
        return [f'{indent}"""{lines[0]}"""']
    return [f'{indent}"""'] + [f"{indent}{line}".rstrip() for line in lines] + [f'{indent}"""']


def render_value(expr: ValueExpr) -> str:
    """Python expression reading one bound value inside ``run``"""
    if expr.source == ValueSource.STATIC:
        return repr(expr.value)
    if expr.source == ValueSource.RUNTIME_INPUT:
        root, segments = "inputs", [expr.key] + list(expr.path)
    elif expr.source == ValueSource.CONFIG:
        root, segments = "config", [expr.key] + list(expr.path)
    else:
        root, segments = f"outputs.get({expr.step_id!r})", list(expr.path)

    if len(segments) == 1 and not root.startswith("outputs"):
        return f"{root}.get({segments[0]!r})"
    return f"_get_path({root}, {segments!r})"


class SourceRenderer(CompilerStage):
    """CompiledPipeline → Python module text"""

    phase = CompilePhase.EMITTING

    def run(self, pipeline: CompiledPipeline, *, report: CompilerReport) -> str:
        return self.render(pipeline)

    def render(self, pipeline: CompiledPipeline) -> str:
        lines: List[str] = []
        lines += self._render_header(pipeline)
        for block in pipeline.steps:
            lines += [""]
            lines += self._render_step(block)
        lines += [""]
        lines += self._render_run(pipeline)
        logger.debug(f"Rendered pipeline '{pipeline.workflow_id}' as {len(lines)} lines of source")
        return "\n".join(lines) + "\n"

    def _render_header(self, pipeline: CompiledPipeline) -> List[str]:
        doc = f"Generated pipeline: {pipeline.name}\n\nWorkflow id: {pipeline.workflow_id}\n" \
              f"Content hash: {pipeline.content_hash}"
        if pipeline.description:
            doc += f"\n\n{pipeline.description}"

        requirements = [
            {"toolkit_slug": r.toolkit_slug, "display_name": r.display_name, "tool_ids": list(r.tool_ids)}
            for r in pipeline.toolkit_requirements
        ]
        return _docstring(doc) + [
            "",
            "from jsonschema import Draft202012Validator",
            "",
            _constant("WORKFLOW_ID", pipeline.workflow_id),
            "",
            _constant("INPUT_SCHEMA", pipeline.input_schema),
            "",
            _constant("CONFIG_SCHEMA", pipeline.config_schema),
            "",
            _constant("OUTPUT_SCHEMA", pipeline.output_schema),
            "",
            _constant("TOOLKIT_REQUIREMENTS", requirements),
            "",
            "",
            "def _get_path(value, path):",
            f"{INDENT}for segment in path:",
            f"{INDENT * 2}if isinstance(value, dict):",
            f"{INDENT * 3}value = value.get(segment)",
            f"{INDENT * 2}elif isinstance(value, list) and segment.isdigit() and int(segment) < len(value):",
            f"{INDENT * 3}value = value[int(segment)]",
            f"{INDENT * 2}else:",
            f"{INDENT * 3}return None",
            f"{INDENT}return value",
            "",
            "",
            "def _apply_defaults(schema, values):",
            f"{INDENT}merged = {{",
            f"{INDENT * 2}name: prop['default']",
            f"{INDENT * 2}for name, prop in schema.get('properties', {{}}).items()",
            f"{INDENT * 2}if 'default' in prop",
            f"{INDENT}}}",
            f"{INDENT}merged.update(values)",
            f"{INDENT}return merged",
            "",
            "",
            "def _present(values):",
            f"{INDENT}return {{name: value for name, value in values.items() if value is not None}}",
            "",
        ]

    def _render_step(self, block: StepBlock) -> List[str]:
        prefix = block.identifier.upper()
        body = block.body
        lines = [
            _constant(f"{prefix}_INPUT_SCHEMA", block.input_schema),
            "",
            _constant(f"{prefix}_OUTPUT_SCHEMA", block.output_schema),
        ]
        if body.template == BodyTemplate.CUSTOM_CODE and body.code:
            lines += ["", _constant(f"{prefix}_CODE", body.code)]

        lines += [
            "",
            "",
            f"def {block.identifier}_step(input_data, runtime):",
        ]
        lines += _docstring(block.description or block.label, INDENT)
        lines.append(f"{INDENT}Draft202012Validator({prefix}_INPUT_SCHEMA).validate(input_data)")

        if body.template == BodyTemplate.TOOL_INVOCATION:
            if body.arguments:
                arguments = (
                    f"{{name: input_data[name] for name in {tuple(body.arguments)!r} if name in input_data}}"
                )
            else:
                arguments = "dict(input_data)"
            lines.append(
                f"{INDENT}result = runtime.tools.execute({body.toolkit_slug!r}, {body.tool_id!r}, {arguments})"
            )
        elif body.template == BodyTemplate.CUSTOM_CODE:
            if body.code:
                lines.append(f"{INDENT}result = runtime.run_code({prefix}_CODE, input_data)")
            else:
                lines.append(f"{INDENT}result = input_data")
        elif body.template == BodyTemplate.TABLE_QUERY:
            lines.append(
                f"{INDENT}result = runtime.tables.query({body.table_ref!r}, input_data, "
                f"{_literal(body.table_options)})"
            )
        elif body.template == BodyTemplate.TABLE_WRITE:
            lines.append(
                f"{INDENT}result = runtime.tables.write({body.table_ref!r}, input_data, "
                f"{_literal(body.table_options)})"
            )
        else:
            lines.append(f"{INDENT}result = input_data")

        lines += [
            f"{INDENT}Draft202012Validator({prefix}_OUTPUT_SCHEMA).validate(result)",
            f"{INDENT}return result",
            "",
        ]
        return lines

    def _render_run(self, pipeline: CompiledPipeline) -> List[str]:
        identifiers = {block.step_id: block.identifier for block in pipeline.steps}
        lines = [
            "def run(inputs, config=None, runtime=None):",
        ]
        lines += _docstring(f"Execute {pipeline.name} as a linear chain", INDENT)
        lines += [
            f"{INDENT}inputs = _apply_defaults(INPUT_SCHEMA, inputs or {{}})",
            f"{INDENT}config = _apply_defaults(CONFIG_SCHEMA, config or {{}})",
            f"{INDENT}Draft202012Validator(INPUT_SCHEMA).validate(inputs)",
            f"{INDENT}Draft202012Validator(CONFIG_SCHEMA).validate(config)",
            f"{INDENT}outputs = {{}}",
            f"{INDENT}current = inputs",
        ]

        for entry in pipeline.chain:
            if entry.type == ChainEntryType.MAP:
                lines += self._render_mapping("current", entry.mappings)
            elif entry.type == ChainEntryType.STEP:
                lines += [
                    f"{INDENT}current = {identifiers[entry.step_id]}_step(current, runtime)",
                    f"{INDENT}outputs[{entry.step_id!r}] = current",
                ]
            elif entry.type == ChainEntryType.OUTPUT:
                lines += self._render_mapping("current", entry.mappings)
                lines.append(f"{INDENT}Draft202012Validator(OUTPUT_SCHEMA).validate(current)")

        lines.append(f"{INDENT}return current")
        return lines

    def _render_mapping(self, target: str, mappings) -> List[str]:
        # Absent values stay unset instead of becoming null
        lines = [f"{INDENT}{target} = _present({{"]
        for field_name, expr in mappings.items():
            lines.append(f"{INDENT * 2}{field_name!r}: {render_value(expr)},")
        lines.append(f"{INDENT}}})")
        return lines


def render_source(pipeline: CompiledPipeline) -> str:
    return SourceRenderer().render(pipeline)
