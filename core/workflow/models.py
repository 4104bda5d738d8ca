"""
Workflow document models consumed by the compiler.

Documents arrive from the editor with camelCase keys; snake_case field names
are accepted as well.
"""

from pydantic import BaseModel, Field, AliasChoices, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Dict, Any, Optional
from enum import Enum

INPUT_SOURCE = "__input__"
OUTPUT_TARGET = "__output__"


class SchemaType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


SCALAR_TYPES = frozenset({SchemaType.STRING, SchemaType.NUMBER, SchemaType.BOOLEAN})

# Type names used by catalog schemas and editor panels
TYPE_ALIASES = {
    "integer": "number",
    "int": "number",
    "float": "number",
    "bool": "boolean",
    "text": "string",
    "select": "string",
    "date": "string",
    "any": "unknown",
}


def normalize_type_name(value: Any) -> SchemaType:
    """Map a loosely typed schema type name onto SchemaType"""
    if isinstance(value, SchemaType):
        return value
    if isinstance(value, (list, tuple)):
        value = next((item for item in value if item != "null"), None)
    if not isinstance(value, str):
        return SchemaType.UNKNOWN
    name = value.strip().lower()
    name = TYPE_ALIASES.get(name, name)
    try:
        return SchemaType(name)
    except ValueError:
        return SchemaType.UNKNOWN


class StepKind(str, Enum):
    INTEGRATION_CALL = "integration_call"
    CUSTOM_CODE = "custom_code"
    TABLE_QUERY = "table_query"
    TABLE_WRITE = "table_write"
    PASSTHROUGH = "passthrough"


STEP_KIND_ALIASES = {
    "composio": StepKind.INTEGRATION_CALL,
    "integration": StepKind.INTEGRATION_CALL,
    "tool": StepKind.INTEGRATION_CALL,
    "custom": StepKind.CUSTOM_CODE,
    "code": StepKind.CUSTOM_CODE,
    "query_table": StepKind.TABLE_QUERY,
    "write_table": StepKind.TABLE_WRITE,
}


class TypeMatch(str, Enum):
    EXACT = "exact"
    COERCIBLE = "coercible"
    UNKNOWN = "unknown"


class DocumentModel(BaseModel):
    """Base for models read from editor documents"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SchemaNode(DocumentModel):
    """Recursive structural description of a value's shape"""
    type: SchemaType = SchemaType.UNKNOWN
    properties: Dict[str, "SchemaNode"] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)
    items: Optional["SchemaNode"] = None
    format: Optional[str] = None
    enum: Optional[List[Any]] = None
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _read_json_schema(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        # Infer the container type when a catalog schema leaves it out
        if data.get("type") is None:
            if data.get("properties"):
                data["type"] = SchemaType.OBJECT
            elif data.get("items"):
                data["type"] = SchemaType.ARRAY

        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            properties = {}
        properties = {name: prop for name, prop in properties.items() if prop is not None}
        data["properties"] = properties

        # Legacy field lists mark required-ness on the property itself
        required = data.get("required")
        required = list(required) if isinstance(required, (list, tuple)) else []
        for name, prop in properties.items():
            if isinstance(prop, dict) and prop.get("required") is True and name not in required:
                required.append(name)
        data["required"] = required
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> SchemaType:
        return normalize_type_name(value)

    @property
    def is_scalar(self) -> bool:
        return self.type in SCALAR_TYPES

    def top_level_fields(self) -> List[str]:
        """Directly mappable field names, in declaration order"""
        if self.type != SchemaType.OBJECT:
            return []
        return list(self.properties.keys())

    def is_required(self, name: str) -> bool:
        return name in self.required

    def resolve_path(self, segments: List[str]) -> Optional["SchemaNode"]:
        """Walk a dot path through object properties and array items"""
        node = self
        for segment in segments:
            if node.type == SchemaType.ARRAY and (segment.isdigit() or segment in ("[]", "*")):
                node = node.items or SchemaNode()
                continue
            wants_items = segment.endswith("[]")
            name = segment[:-2] if wants_items else segment
            if node.type != SchemaType.OBJECT or name not in node.properties:
                return None
            node = node.properties[name]
            if wants_items:
                if node.type != SchemaType.ARRAY:
                    return None
                node = node.items or SchemaNode()
        return node


def empty_object_schema() -> SchemaNode:
    return SchemaNode(type=SchemaType.OBJECT)


TABLE_OUTPUT_SCHEMAS = {
    StepKind.TABLE_QUERY: {
        "type": "object",
        "properties": {
            "rows": {"type": "array", "items": {"type": "object"}},
            "count": {"type": "number"},
        },
        "required": ["rows", "count"],
    },
    StepKind.TABLE_WRITE: {
        "type": "object",
        "properties": {
            "success": {"type": "boolean"},
            "rowId": {"type": "string"},
        },
        "required": ["success"],
    },
}


class Step(DocumentModel):
    id: str
    kind: StepKind = Field(validation_alias=AliasChoices("kind", "type"))
    name: Optional[str] = None
    description: Optional[str] = None
    input_schema: SchemaNode = Field(default_factory=empty_object_schema)
    output_schema: SchemaNode = Field(default_factory=empty_object_schema)

    # integration_call
    tool_id: Optional[str] = None
    toolkit_slug: Optional[str] = None
    toolkit_name: Optional[str] = None

    # custom_code
    code: Optional[str] = None

    # table_query / table_write
    table_ref: Optional[str] = None
    table_config: Optional[Dict[str, Any]] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            name = value.strip().lower().replace("-", "_")
            return STEP_KIND_ALIASES.get(name, name)
        return value

    @field_validator("input_schema", "output_schema", mode="before")
    @classmethod
    def _default_schema(cls, value: Any) -> Any:
        if value is None:
            return empty_object_schema()
        return value

    @model_validator(mode="after")
    def _default_table_output(self) -> "Step":
        # Table steps have a fixed result shape unless the document declares one
        if self.kind in TABLE_OUTPUT_SCHEMAS and not self.output_schema.properties:
            self.output_schema = SchemaNode.model_validate(TABLE_OUTPUT_SCHEMAS[self.kind])
        return self

    @property
    def label(self) -> str:
        return self.name or self.id


class FieldMapping(DocumentModel):
    source_path: str
    target_field: str
    source_type: Optional[SchemaType] = None
    target_type: Optional[SchemaType] = None
    type_match: Optional[TypeMatch] = None

    @field_validator("source_type", "target_type", mode="before")
    @classmethod
    def _normalize_declared_type(cls, value: Any) -> Any:
        if value is None:
            return None
        return normalize_type_name(value)

    @field_validator("type_match", mode="before")
    @classmethod
    def _normalize_type_match(cls, value: Any) -> Any:
        if value == "incompatible":
            return TypeMatch.UNKNOWN
        return value


class DataMapping(DocumentModel):
    id: Optional[str] = None
    source_step_id: str
    target_step_id: str
    field_mappings: List[FieldMapping] = Field(default_factory=list)


class RuntimeInput(DocumentModel):
    key: str
    type: SchemaType = SchemaType.STRING
    required: bool = False
    description: Optional[str] = None
    default: Optional[Any] = None
    format: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_validation_format(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("format"):
            validation = data.get("validation")
            if isinstance(validation, dict) and validation.get("format"):
                data = dict(data)
                data["format"] = validation["format"]
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> SchemaType:
        return normalize_type_name(value)

    def to_schema_node(self) -> SchemaNode:
        return SchemaNode(type=self.type, format=self.format, description=self.description)


class WorkflowConfig(DocumentModel):
    key: str
    type: SchemaType = SchemaType.STRING
    options: Optional[List[Any]] = None
    default: Optional[Any] = None
    required: bool = False
    description: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> SchemaType:
        return normalize_type_name(value)

    def to_schema_node(self) -> SchemaNode:
        return SchemaNode(
            type=self.type,
            enum=list(self.options) if self.options else None,
            description=self.description,
        )


class WorkflowDefinition(DocumentModel):
    id: str
    name: str = ""
    description: str = ""
    steps: List[Step] = Field(default_factory=list)
    data_mappings: List[DataMapping] = Field(
        default_factory=list,
        validation_alias=AliasChoices("dataMappings", "data_mappings", "mappings"),
    )
    runtime_inputs: List[RuntimeInput] = Field(default_factory=list)
    configs: List[WorkflowConfig] = Field(default_factory=list)
    output_schema: SchemaNode = Field(default_factory=empty_object_schema)
    order: Optional[List[str]] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_control_flow_order(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("order") is None:
            control_flow = data.get("controlFlow") or data.get("control_flow")
            if isinstance(control_flow, dict) and control_flow.get("order") is not None:
                data = dict(data)
                data["order"] = control_flow["order"]
        return data

    @field_validator("name", "description", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("output_schema", mode="before")
    @classmethod
    def _default_output_schema(cls, value: Any) -> Any:
        if value is None:
            return empty_object_schema()
        return value


class ToolkitRequirement(DocumentModel):
    """Derived summary of an external integration the workflow depends on"""
    toolkit_slug: str
    display_name: str
    tool_ids: List[str] = Field(default_factory=list)
