"""
Field Mapping Resolver

Resolves every top-level input field of every step to its producer: a prior
step's output path, a workflow runtime input, a config value or a static
literal. This is the only place data dependencies are checked against the
step order and the only place type mismatches are surfaced.
"""

import logging
from typing import Dict, List, Optional, Tuple

from core.validator.models import CompilePhase, DiagnosticKind
from core.workflow.models import (
    INPUT_SOURCE,
    OUTPUT_TARGET,
    SCALAR_TYPES,
    DataMapping,
    FieldMapping,
    RuntimeInput,
    SchemaNode,
    SchemaType,
    Step,
    TypeMatch,
    WorkflowConfig,
)
from .base import CompilerStage, CompilerReport, split_path
from .models import StepMappings, ValueExpr, ValueSource

logger = logging.getLogger(__name__)

ResolvedMappings = Dict[str, StepMappings]


def classify_type_match(source_type: Optional[SchemaType], target_type: Optional[SchemaType]) -> TypeMatch:
    """exact / coercible (different scalars) / unknown"""
    if source_type is None or target_type is None:
        return TypeMatch.UNKNOWN
    if SchemaType.UNKNOWN in (source_type, target_type):
        return TypeMatch.UNKNOWN
    if source_type == target_type:
        return TypeMatch.EXACT
    if source_type in SCALAR_TYPES and target_type in SCALAR_TYPES:
        return TypeMatch.COERCIBLE
    return TypeMatch.UNKNOWN


class FieldMappingResolver(CompilerStage):
    """Ordered steps + data mappings → per-target field bindings"""

    phase = CompilePhase.MAPPING

    def run(self, ordered_steps: List[Step], data_mappings: List[DataMapping],
            runtime_inputs: List[RuntimeInput], configs: List[WorkflowConfig],
            output_schema: Optional[SchemaNode] = None, *,
            report: CompilerReport) -> Optional[ResolvedMappings]:
        return self.resolve(ordered_steps, data_mappings, runtime_inputs, configs, output_schema, report)

    def resolve(self, ordered_steps: List[Step], data_mappings: List[DataMapping],
                runtime_inputs: List[RuntimeInput], configs: List[WorkflowConfig],
                output_schema: Optional[SchemaNode], report: CompilerReport) -> Optional[ResolvedMappings]:
        """
        Resolve all data mappings

        Returns:
            Bindings keyed by target id (step ids plus ``__output__`` when the
            workflow output is mapped), or None when a reference error was
            recorded
        """
        positions = {step.id: index for index, step in enumerate(ordered_steps)}
        steps_by_id = {step.id: step for step in ordered_steps}

        if not self._check_references(data_mappings, positions, report):
            return None

        inputs_by_key = {item.key: item for item in runtime_inputs}
        configs_by_key = {item.key: item for item in configs}

        resolved: ResolvedMappings = {}
        targets: List[Tuple[str, SchemaNode]] = [(step.id, step.input_schema) for step in ordered_steps]
        if output_schema is not None:
            targets.append((OUTPUT_TARGET, output_schema))

        for target_id, schema in targets:
            candidates = self._candidates_for(target_id, data_mappings)
            self._check_target_fields(target_id, schema, candidates, report)

            bindings: Dict[str, ValueExpr] = {}
            for field_name in schema.top_level_fields():
                field_schema = schema.properties[field_name]
                matches = [(row, fm) for row, fm in candidates if fm.target_field == field_name]

                if not matches:
                    if schema.is_required(field_name):
                        report.add_warning(
                            DiagnosticKind.UNMAPPED_REQUIRED_FIELD,
                            f"Required field '{field_name}' of '{target_id}' has no data mapping",
                            step_id=target_id,
                            field=field_name,
                            path=f"{target_id}.{field_name}",
                            hint="Map the field from a prior step, a runtime input or a config value",
                        )
                    continue

                if len(matches) > 1:
                    report.add_warning(
                        DiagnosticKind.DUPLICATE_FIELD_MAPPING,
                        f"Field '{field_name}' of '{target_id}' is mapped {len(matches)} times; "
                        f"the last declared mapping wins",
                        step_id=target_id,
                        field=field_name,
                        path=f"{target_id}.{field_name}",
                        meta={"sources": [row.source_step_id for row, _ in matches]},
                    )

                row, field_mapping = matches[-1]
                expr = self._resolve_source(
                    row, field_mapping, field_schema, steps_by_id, inputs_by_key, configs_by_key,
                    target_id, report
                )
                bindings[field_name] = expr

            if bindings:
                resolved[target_id] = StepMappings(target_id=target_id, bindings=bindings)

        logger.debug(f"Resolved mappings for {len(resolved)} targets")
        return resolved

    def _check_references(self, data_mappings: List[DataMapping], positions: Dict[str, int],
                          report: CompilerReport) -> bool:
        """Every mapping must point backwards along the chain"""
        ok = True
        for index, row in enumerate(data_mappings):
            path = f"dataMappings[{index}]"
            target = row.target_step_id

            if target != OUTPUT_TARGET and target not in positions:
                ok = False
                report.add_error(
                    DiagnosticKind.FORWARD_OR_UNKNOWN_REFERENCE,
                    f"Data mapping targets unknown step '{target}'",
                    step_id=target,
                    path=path,
                )
                continue

            source = row.source_step_id
            if source == INPUT_SOURCE:
                continue

            if source not in positions:
                ok = False
                report.add_error(
                    DiagnosticKind.FORWARD_OR_UNKNOWN_REFERENCE,
                    f"Data mapping into '{target}' reads from unknown step '{source}'",
                    step_id=target,
                    path=path,
                    meta={"source_step_id": source},
                )
            elif target != OUTPUT_TARGET and positions[source] >= positions[target]:
                ok = False
                report.add_error(
                    DiagnosticKind.FORWARD_OR_UNKNOWN_REFERENCE,
                    f"Data mapping into '{target}' reads from '{source}', which does not run before it",
                    step_id=target,
                    path=path,
                    hint="A step can only read outputs of steps earlier in the chain",
                    meta={
                        "source_step_id": source,
                        "source_position": positions[source],
                        "target_position": positions[target],
                    },
                )
        return ok

    def _candidates_for(self, target_id: str,
                        data_mappings: List[DataMapping]) -> List[Tuple[DataMapping, FieldMapping]]:
        """All field mappings into a target, in declaration order"""
        return [
            (row, field_mapping)
            for row in data_mappings
            if row.target_step_id == target_id
            for field_mapping in row.field_mappings
        ]

    def _check_target_fields(self, target_id: str, schema: SchemaNode,
                             candidates: List[Tuple[DataMapping, FieldMapping]], report: CompilerReport):
        declared = set(schema.top_level_fields())
        reported = set()
        for _, field_mapping in candidates:
            name = field_mapping.target_field
            if name in declared or name in reported:
                continue
            reported.add(name)
            if schema.type != SchemaType.OBJECT:
                message = f"'{target_id}' declares no input fields; the mapping to '{name}' is ignored"
                hint = "Give the step an object input schema that declares the field"
            else:
                message = f"'{target_id}' has no input field '{name}'; the mapping is ignored"
                hint = None
            report.add_warning(
                DiagnosticKind.UNKNOWN_TARGET_FIELD,
                message,
                step_id=target_id,
                field=name,
                path=f"{target_id}.{name}",
                hint=hint,
            )

    def _resolve_source(self, row: DataMapping, field_mapping: FieldMapping, field_schema: SchemaNode,
                        steps_by_id: Dict[str, Step], inputs_by_key: Dict[str, RuntimeInput],
                        configs_by_key: Dict[str, WorkflowConfig], target_id: str,
                        report: CompilerReport) -> ValueExpr:
        target_type = field_schema.type if field_schema.type != SchemaType.UNKNOWN else field_mapping.target_type
        field_name = field_mapping.target_field

        if row.source_step_id == INPUT_SOURCE:
            expr = self._resolve_direct_input(field_mapping, inputs_by_key, configs_by_key)
        else:
            source_step = steps_by_id[row.source_step_id]
            segments = split_path(field_mapping.source_path)
            source_node = source_step.output_schema.resolve_path(segments) if segments else None
            if source_node is None:
                report.add_warning(
                    DiagnosticKind.UNRESOLVED_SOURCE_PATH,
                    f"'{field_mapping.source_path}' is not a declared output of step '{source_step.id}'",
                    step_id=target_id,
                    field=field_name,
                    path=f"{source_step.id}.{field_mapping.source_path}",
                    hint="The value is read on a best-effort basis at run time",
                )
            expr = ValueExpr(
                source=ValueSource.STEP_OUTPUT,
                step_id=source_step.id,
                path=segments,
                source_type=_known_type(source_node),
                resolved=source_node is not None,
            )

        if expr.source_type is None:
            expr.source_type = field_mapping.source_type
        expr.target_type = target_type
        expr.type_match = classify_type_match(expr.source_type, expr.target_type)

        if expr.type_match != TypeMatch.EXACT:
            source_label = expr.source_type.value if expr.source_type else "unknown"
            target_label = expr.target_type.value if expr.target_type else "unknown"
            report.add_info(
                DiagnosticKind.TYPE_MISMATCH,
                f"Field '{field_name}' of '{target_id}' receives {source_label} "
                f"but declares {target_label} ({expr.type_match.value})",
                step_id=target_id,
                field=field_name,
                path=f"{target_id}.{field_name}",
                meta={"type_match": expr.type_match.value},
            )
        return expr

    def _resolve_direct_input(self, field_mapping: FieldMapping, inputs_by_key: Dict[str, RuntimeInput],
                              configs_by_key: Dict[str, WorkflowConfig]) -> ValueExpr:
        segments = split_path(field_mapping.source_path)
        head, rest = (segments[0], segments[1:]) if segments else ("", [])

        if head in inputs_by_key:
            runtime_input = inputs_by_key[head]
            return ValueExpr(
                source=ValueSource.RUNTIME_INPUT,
                key=head,
                path=rest,
                source_type=runtime_input.type if not rest else None,
            )

        if head in configs_by_key:
            config = configs_by_key[head]
            return ValueExpr(
                source=ValueSource.CONFIG,
                key=head,
                path=rest,
                source_type=config.type if not rest else None,
            )

        return ValueExpr(source=ValueSource.STATIC, value=field_mapping.source_path)


def _known_type(node: Optional[SchemaNode]) -> Optional[SchemaType]:
    if node is None or node.type == SchemaType.UNKNOWN:
        return None
    return node.type
