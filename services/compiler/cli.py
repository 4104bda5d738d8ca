#!/usr/bin/env python3
"""
Command-line interface for the workflow compiler
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, Any

from pydantic import ValidationError

from core.config import settings
from core.logging_config import configure_logging_from_settings, get_logger
from core.validator.schema_validator import SchemaValidator
from core.workflow.models import WorkflowDefinition
from .base import CompilerReport
from .driver import CompileDriver
from .json_output import JSONFormatter
from .step_order import StepOrderResolver
from .toolkit_scanner import ToolkitRequirementScanner

logger = get_logger(__name__)


class CLIError(Exception):
    """Raised when a command cannot proceed"""


def load_json_file(file_path: str) -> Dict[str, Any]:
    """Load JSON from file"""
    try:
        with open(file_path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        raise CLIError(f"File not found: {file_path}")
    except json.JSONDecodeError as e:
        raise CLIError(f"Invalid JSON in {file_path}: {e}")


def write_text_file(content: str, file_path: str):
    """Write text output, creating parent directories"""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    logger.info(f"Output saved to: {file_path}")


def load_validated_document(file_path: str) -> Dict[str, Any]:
    """Load a workflow document and check it against the document schema"""
    document = load_json_file(file_path)
    response = SchemaValidator().validate_document(document)
    if not response.ok:
        for line in JSONFormatter.format_diagnostic_lines(response.errors):
            print(line, file=sys.stderr)
        raise CLIError(f"{file_path} is not a valid workflow document")
    return document


def cmd_compile(args) -> int:
    document = load_validated_document(args.input)
    render_source = True if args.source_out else None
    result = CompileDriver(settings).compile(document, render_source=render_source)

    for line in JSONFormatter.format_diagnostic_lines(result.diagnostics):
        print(line, file=sys.stderr)

    output = JSONFormatter.to_json_string(
        JSONFormatter.format_compile_result(result, include_source=not args.source_out),
        pretty=args.pretty,
    )
    if args.output:
        write_text_file(output + "\n", args.output)
    else:
        print(output)

    if args.source_out and result.source is not None:
        write_text_file(result.source, args.source_out)

    if not result.ok:
        logger.error(f"Compilation {result.state.value} with {len(result.errors)} errors")
        return 1
    return 0


def cmd_validate(args) -> int:
    document = load_json_file(args.input)
    response = SchemaValidator().validate_document(document)
    print(JSONFormatter.to_json_string(JSONFormatter.format_validation_response(response)))
    return 0 if response.ok else 1


def cmd_requirements(args) -> int:
    document = load_validated_document(args.input)
    workflow = WorkflowDefinition.model_validate(document)
    report = CompilerReport()
    ordered = StepOrderResolver(settings).run(workflow.steps, workflow.order, report=report)
    requirements = None
    if ordered is not None:
        requirements = ToolkitRequirementScanner(settings).run(ordered, report=report)

    for line in JSONFormatter.format_diagnostic_lines(report.diagnostics):
        print(line, file=sys.stderr)
    if requirements is None:
        raise CLIError(f"Step order of {args.input} could not be resolved")
    print(JSONFormatter.to_json_string(JSONFormatter.format_requirements(requirements)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-compiler",
        description="Compile workflow step graphs into executable pipelines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compile a workflow and print the pipeline JSON
  workflow-compiler compile --in workflow.json --pretty

  # Also write the generated Python module
  workflow-compiler compile --in workflow.json --out pipeline.json --source-out pipeline.py

  # Check a document against the workflow schema
  workflow-compiler validate --in workflow.json

  # List the toolkits a workflow needs
  workflow-compiler requirements --in workflow.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    compile_parser = subparsers.add_parser("compile", help="Compile a workflow document")
    compile_parser.add_argument("--in", dest="input", required=True, help="Input workflow file")
    compile_parser.add_argument("--out", dest="output", help="Output pipeline file (default: stdout)")
    compile_parser.add_argument("--source-out", dest="source_out", help="Write the generated module here")
    compile_parser.add_argument("--pretty", action="store_true", help="Indent JSON output")
    compile_parser.set_defaults(func=cmd_compile)

    validate_parser = subparsers.add_parser("validate", help="Validate a workflow document")
    validate_parser.add_argument("--in", dest="input", required=True, help="Input workflow file")
    validate_parser.set_defaults(func=cmd_validate)

    requirements_parser = subparsers.add_parser("requirements", help="List required toolkits")
    requirements_parser.add_argument("--in", dest="input", required=True, help="Input workflow file")
    requirements_parser.set_defaults(func=cmd_requirements)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging_from_settings(settings)

    try:
        return args.func(args)
    except CLIError as e:
        logger.error(str(e))
        return 1
    except ValidationError as e:
        logger.error(f"Workflow document could not be loaded: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Compilation interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
