"""
Pytest configuration and fixtures for the workflow compiler tests.
"""
import copy
import pytest
import sys
from pathlib import Path
from fastapi.testclient import TestClient

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from api.main import app
from api.cache_service import get_compile_cache
from core.config import Settings
from services.compiler.base import CompilerReport


@pytest.fixture
def test_client():
    """Create a test client for the FastAPI application."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_compile_cache():
    """Start every test with an empty compile cache."""
    get_compile_cache().clear()
    yield
    get_compile_cache().clear()


@pytest.fixture
def report():
    """Fresh diagnostics report."""
    return CompilerReport()


@pytest.fixture
def test_settings():
    """Settings with defaults, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def two_step_workflow():
    """Fetch an email body with one integration and send it with another."""
    return {
        "id": "wf-digest",
        "name": "Daily Digest",
        "description": "Fetch content and email it",
        "steps": [
            {
                "id": "Step1",
                "type": "composio",
                "name": "Fetch content",
                "toolkitSlug": "notion",
                "toolkitName": "Notion",
                "toolId": "NOTION_FETCH_PAGE",
                "inputSchema": {"type": "object", "properties": {}},
                "outputSchema": {
                    "type": "object",
                    "properties": {"content": {"type": "string"}},
                    "required": ["content"],
                },
            },
            {
                "id": "Step2",
                "type": "composio",
                "name": "Send email",
                "toolkitSlug": "gmail",
                "toolId": "GMAIL_SEND_EMAIL",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "body": {"type": "string"},
                        "subject": {"type": "string"},
                    },
                    "required": ["body"],
                },
                "outputSchema": {
                    "type": "object",
                    "properties": {"messageId": {"type": "string"}},
                },
            },
        ],
        "dataMappings": [
            {
                "id": "m1",
                "sourceStepId": "Step1",
                "targetStepId": "Step2",
                "fieldMappings": [
                    {
                        "sourcePath": "content",
                        "targetField": "body",
                        "sourceType": "string",
                        "targetType": "string",
                        "typeMatch": "exact",
                    }
                ],
            }
        ],
        "runtimeInputs": [],
        "configs": [],
    }


@pytest.fixture
def unmapped_workflow(two_step_workflow):
    """The two step workflow without any data mappings."""
    workflow = copy.deepcopy(two_step_workflow)
    workflow["dataMappings"] = []
    return workflow


@pytest.fixture
def runtime_input_workflow():
    """A single step fed directly from a runtime input."""
    return {
        "id": "wf-scrape",
        "name": "Scrape",
        "steps": [
            {
                "id": "Step1",
                "type": "composio",
                "toolkitSlug": "firecrawl",
                "toolId": "FIRECRAWL_SCRAPE",
                "inputSchema": {
                    "type": "object",
                    "properties": {"url": {"type": "string", "format": "url"}},
                    "required": ["url"],
                },
                "outputSchema": {
                    "type": "object",
                    "properties": {"markdown": {"type": "string"}},
                },
            }
        ],
        "dataMappings": [
            {
                "sourceStepId": "__input__",
                "targetStepId": "Step1",
                "fieldMappings": [{"sourcePath": "url", "targetField": "url"}],
            }
        ],
        "runtimeInputs": [
            {"key": "url", "type": "string", "required": True, "validation": {"format": "url"}}
        ],
        "configs": [],
    }


@pytest.fixture
def mixed_workflow():
    """Every step kind, runtime inputs, configs and a mapped workflow output."""
    return {
        "id": "wf-leads",
        "name": "Lead Sync",
        "description": "Query leads, enrich them and write them back",
        "steps": [
            {
                "id": "query-leads",
                "type": "query_table",
                "tableRef": "leads",
                "tableConfig": {"limit": 10, "sort": [{"field": "created", "direction": "desc"}]},
                "inputSchema": {"type": "object", "properties": {"status": {"type": "string"}}},
            },
            {
                "id": "enrich",
                "type": "custom",
                "description": "Score each lead",
                "code": "return {\"score\": inputData.rows.length}",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "rows": {"type": "array", "items": {"type": "object"}},
                        "threshold": {"type": "number"},
                    },
                    "required": ["rows"],
                },
                "outputSchema": {
                    "type": "object",
                    "properties": {"score": {"type": "number"}},
                },
            },
            {
                "id": "save",
                "type": "write_table",
                "tableRef": "scores",
                "tableConfig": {"mode": "upsert", "upsertKey": "id"},
                "inputSchema": {
                    "type": "object",
                    "properties": {"score": {"type": "number"}, "source": {"type": "string"}},
                },
            },
            {
                "id": "notify",
                "type": "composio",
                "toolkitSlug": "slack",
                "toolId": "SLACK_POST_MESSAGE",
                "inputSchema": {
                    "type": "object",
                    "properties": {"channel": {"type": "string", "enum": ["#sales", "#ops"]}},
                },
            },
        ],
        "dataMappings": [
            {
                "sourceStepId": "__input__",
                "targetStepId": "query-leads",
                "fieldMappings": [{"sourcePath": "status", "targetField": "status"}],
            },
            {
                "sourceStepId": "query-leads",
                "targetStepId": "enrich",
                "fieldMappings": [{"sourcePath": "rows", "targetField": "rows"}],
            },
            {
                "sourceStepId": "__input__",
                "targetStepId": "enrich",
                "fieldMappings": [{"sourcePath": "threshold", "targetField": "threshold"}],
            },
            {
                "sourceStepId": "enrich",
                "targetStepId": "save",
                "fieldMappings": [{"sourcePath": "score", "targetField": "score"}],
            },
            {
                "sourceStepId": "__input__",
                "targetStepId": "save",
                "fieldMappings": [{"sourcePath": "nightly-sync", "targetField": "source"}],
            },
            {
                "sourceStepId": "__input__",
                "targetStepId": "notify",
                "fieldMappings": [{"sourcePath": "channel", "targetField": "channel"}],
            },
            {
                "sourceStepId": "enrich",
                "targetStepId": "__output__",
                "fieldMappings": [{"sourcePath": "score", "targetField": "finalScore"}],
            },
        ],
        "runtimeInputs": [
            {"key": "status", "type": "string", "required": True, "description": "Lead status"},
        ],
        "configs": [
            {"key": "threshold", "type": "number", "default": 5},
            {"key": "channel", "type": "select", "options": ["#sales", "#ops"], "required": True},
        ],
        "outputSchema": {
            "type": "object",
            "properties": {"finalScore": {"type": "number"}},
            "required": ["finalScore"],
        },
        "controlFlow": {"order": ["query-leads", "enrich", "save", "notify"]},
    }
