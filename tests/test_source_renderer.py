"""
Tests for the generated Python module.
"""
import ast
import copy
import pytest
from types import SimpleNamespace

from jsonschema.exceptions import ValidationError as JSONSchemaValidationError

from services.compiler.driver import compile_workflow
from services.compiler.models import ValueExpr, ValueSource
from services.compiler.source_renderer import SourceRenderer, render_source, render_value


def load_module(source):
    namespace = {}
    exec(compile(source, "<pipeline>", "exec"), namespace)
    return namespace


class RecordingTools:
    """Stands in for the integration runtime."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def execute(self, toolkit_slug, tool_id, arguments):
        self.calls.append((toolkit_slug, tool_id, arguments))
        return self.responses.get(tool_id, {})


@pytest.mark.unit
@pytest.mark.services
class TestRenderValue:
    """Expressions for bound values."""

    def test_runtime_input(self):
        assert render_value(ValueExpr(source=ValueSource.RUNTIME_INPUT, key="url")) == "inputs.get('url')"

    def test_nested_config(self):
        expr = ValueExpr(source=ValueSource.CONFIG, key="auth", path=["token"])
        assert render_value(expr) == "_get_path(config, ['auth', 'token'])"

    def test_static(self):
        assert render_value(ValueExpr(source=ValueSource.STATIC, value="it's")) == '"it\'s"'

    def test_step_output(self):
        expr = ValueExpr(source=ValueSource.STEP_OUTPUT, step_id="fetch", path=["a", "b"])
        assert render_value(expr) == "_get_path(outputs.get('fetch'), ['a', 'b'])"


@pytest.mark.unit
@pytest.mark.services
class TestSourceRenderer:
    """Rendered module text."""

    def test_source_is_valid_python(self, mixed_workflow):
        result = compile_workflow(mixed_workflow, render_source=True)
        tree = ast.parse(result.source)
        functions = [node.name for node in tree.body if isinstance(node, ast.FunctionDef)]
        assert functions == [
            "_get_path", "_apply_defaults", "_present",
            "query_leads_step", "enrich_step", "save_step", "notify_step", "run",
        ]

    def test_render_is_deterministic(self, two_step_workflow):
        pipeline = compile_workflow(two_step_workflow).pipeline
        assert render_source(pipeline) == SourceRenderer().render(pipeline)
        assert pipeline.content_hash in render_source(pipeline)

    def test_source_not_rendered_by_default(self, two_step_workflow):
        assert compile_workflow(two_step_workflow).source is None

    def test_generated_pipeline_runs(self, two_step_workflow):
        result = compile_workflow(two_step_workflow, render_source=True)
        module = load_module(result.source)
        tools = RecordingTools({
            "NOTION_FETCH_PAGE": {"content": "Hello"},
            "GMAIL_SEND_EMAIL": {"messageId": "m-1"},
        })

        output = module["run"]({}, runtime=SimpleNamespace(tools=tools))

        assert output == {"messageId": "m-1"}
        assert tools.calls == [
            ("notion", "NOTION_FETCH_PAGE", {}),
            ("gmail", "GMAIL_SEND_EMAIL", {"body": "Hello"}),
        ]

    def test_generated_pipeline_validates_step_output(self, two_step_workflow):
        module = load_module(compile_workflow(two_step_workflow, render_source=True).source)
        tools = RecordingTools({"NOTION_FETCH_PAGE": {"content": 42}})

        with pytest.raises(JSONSchemaValidationError):
            module["run"]({}, runtime=SimpleNamespace(tools=tools))

    def test_every_step_kind_runs(self, mixed_workflow):
        module = load_module(compile_workflow(mixed_workflow, render_source=True).source)
        table_calls = []

        def query(table_id, input_data, options):
            table_calls.append(("query", table_id, input_data, options))
            return {"rows": [{"id": 1}, {"id": 2}], "count": 2}

        def write(table_id, input_data, options):
            table_calls.append(("write", table_id, input_data, options))
            return {"success": True, "rowId": "r-1"}

        def run_code(code, input_data):
            return {"score": len(input_data["rows"])}

        tools = RecordingTools({})
        runtime = SimpleNamespace(
            tools=tools,
            tables=SimpleNamespace(query=query, write=write),
            run_code=run_code,
        )

        output = module["run"]({"status": "new"}, {"channel": "#ops", "threshold": 3}, runtime)

        assert output == {"finalScore": 2}
        assert table_calls[0][:3] == ("query", "{{tableId:leads}}", {"status": "new"})
        assert table_calls[1] == (
            "write", "{{tableId:scores}}", {"score": 2, "source": "nightly-sync"},
            {"mode": "upsert", "upsertKey": "id"},
        )
        assert tools.calls == [("slack", "SLACK_POST_MESSAGE", {"channel": "#ops"})]

    def test_runtime_input_is_validated(self, runtime_input_workflow):
        module = load_module(compile_workflow(runtime_input_workflow, render_source=True).source)
        with pytest.raises(JSONSchemaValidationError):
            module["run"]({}, runtime=SimpleNamespace(tools=RecordingTools({})))

    def test_config_defaults_are_applied(self, mixed_workflow):
        module = load_module(compile_workflow(mixed_workflow, render_source=True).source)
        code_inputs = []

        def run_code(code, input_data):
            code_inputs.append(input_data)
            return {"score": len(input_data["rows"])}

        runtime = SimpleNamespace(
            tools=RecordingTools({}),
            tables=SimpleNamespace(
                query=lambda table_id, input_data, options: {"rows": [{"id": 1}], "count": 1},
                write=lambda table_id, input_data, options: {"success": True},
            ),
            run_code=run_code,
        )

        output = module["run"]({"status": "new"}, {"channel": "#ops"}, runtime)

        assert output == {"finalScore": 1}
        assert code_inputs == [{"rows": [{"id": 1}], "threshold": 5}]

    def test_omitted_optional_input_stays_unset(self, runtime_input_workflow):
        workflow = copy.deepcopy(runtime_input_workflow)
        workflow["runtimeInputs"][0]["required"] = False
        workflow["steps"][0]["inputSchema"]["required"] = []
        module = load_module(compile_workflow(workflow, render_source=True).source)
        tools = RecordingTools({})

        module["run"]({}, runtime=SimpleNamespace(tools=tools))

        assert tools.calls == [("firecrawl", "FIRECRAWL_SCRAPE", {})]

    def test_runtime_input_default_is_applied(self, runtime_input_workflow):
        workflow = copy.deepcopy(runtime_input_workflow)
        workflow["runtimeInputs"][0].update({"required": False, "default": "https://example.com"})
        module = load_module(compile_workflow(workflow, render_source=True).source)
        tools = RecordingTools({})

        module["run"]({}, runtime=SimpleNamespace(tools=tools))

        assert tools.calls == [("firecrawl", "FIRECRAWL_SCRAPE", {"url": "https://example.com"})]
