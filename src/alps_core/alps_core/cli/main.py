# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Command line entry point: ``alps-diagram``."""

import argparse
import json
import os
import sys
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from alps_common.profile import (
    AlpsError,
    DotGenerator,
    GeneratorOptions,
    IssueSeverity,
    ParseError,
    ProfileValidator,
    SvgGenerator,
    ValidationResult,
    detect_format,
    extract_id_lines,
)
from alps_core.cli.config import AlpsEditorConfig, load_and_validate_config
from alps_core.cli.errors import show_error, show_success
from alps_core.cli.logging import log
from alps_core.logconfig import configure_logging

console = Console()

PROFILE_EXTENSIONS = (".json", ".xml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ALPS profile diagram tools",
        prog="alps-diagram",
    )
    subparsers = parser.add_subparsers(dest="action", help="Action to perform", required=True)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate ALPS profiles",
        description=(
            "Check ALPS profiles for syntax errors, schema violations, duplicate ids "
            "and unresolved references."
        ),
    )
    validate_parser.add_argument(
        "paths",
        nargs="+",
        help="Profile files, or directories searched for *.json and *.xml profiles",
    )
    validate_parser.add_argument(
        "--format",
        choices=["text", "table"],
        default="text",
        help="Output format (default: text)",
    )
    validate_parser.add_argument(
        "--warnings-as-errors",
        "-W",
        action="store_true",
        help="Treat warnings as errors (affects exit code)",
    )
    validate_parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only output errors and summary",
    )

    dot_parser = subparsers.add_parser("dot", help="Print the state diagram as DOT text")
    dot_parser.add_argument("path", help="Profile file")
    dot_parser.add_argument("--output", "-o", default=None, help="Write to this file instead of stdout")
    dot_parser.add_argument(
        "--label",
        choices=["title", "id"],
        default=None,
        help="Label state nodes with their title or their id (default: from config)",
    )
    dot_parser.add_argument(
        "--no-plain-pass",
        action="store_true",
        help="Do not re-declare state nodes after the edges",
    )

    render_parser = subparsers.add_parser("render", help="Render the state diagram to SVG")
    render_parser.add_argument("path", help="Profile file")
    render_parser.add_argument("--output", "-o", required=True, help="SVG file to write")
    render_parser.add_argument("--engine", default=None, help="Graphviz layout engine")
    render_parser.add_argument("--label", choices=["title", "id"], default=None)

    rel_parser = subparsers.add_parser(
        "relationships", help="Print the parent/child descriptor index as JSON"
    )
    rel_parser.add_argument("path", help="Profile file")

    locate_parser = subparsers.add_parser("locate", help="Print the line declaring a descriptor id")
    locate_parser.add_argument("path", help="Profile file")
    locate_parser.add_argument("id", help="Descriptor id")

    serve_parser = subparsers.add_parser("serve", help="Run the diagram HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: from config)")

    return parser


def _read(path: str) -> str:
    with open(path, encoding="utf-8") as fh:
        return fh.read()


def _read_quietly(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    try:
        return _read(path)
    except OSError:
        return None


def _collect_profiles(paths: List[str]) -> List[str]:
    files: List[str] = []
    for path in paths:
        if os.path.isdir(path):
            for root, _dirs, filenames in os.walk(path):
                for fname in sorted(filenames):
                    if fname.endswith(PROFILE_EXTENSIONS):
                        files.append(os.path.join(root, fname))
        else:
            files.append(path)
    return sorted(files)


def print_result_text(result: ValidationResult, quiet: bool = False):
    for issue in result.issues:
        if quiet and issue.severity == IssueSeverity.WARNING:
            continue
        style = "red" if issue.severity == IssueSeverity.ERROR else "yellow"
        console.print(str(issue), style=style, markup=False, highlight=False, soft_wrap=True)


def print_result_table(result: ValidationResult, quiet: bool = False):
    if not result.issues:
        return

    table = Table(title="Validation Results")
    table.add_column("File", style="cyan")
    table.add_column("Line", style="magenta")
    table.add_column("Severity", style="bold")
    table.add_column("Message")
    table.add_column("Suggestion", style="green")

    for issue in result.issues:
        if quiet and issue.severity == IssueSeverity.WARNING:
            continue
        severity_style = "red" if issue.severity == IssueSeverity.ERROR else "yellow"
        table.add_row(
            issue.file,
            str(issue.line) if issue.line else "-",
            f"[{severity_style}]{issue.severity.value}[/{severity_style}]",
            issue.message + (f" (in {issue.context})" if issue.context else ""),
            issue.suggestion or "-",
        )

    console.print(table)


def cmd_validate(args: argparse.Namespace, config: AlpsEditorConfig) -> int:
    validator = ProfileValidator()
    combined = ValidationResult()

    files = _collect_profiles(args.paths)
    if not files:
        console.print("[red]Error: no profiles found[/red]")
        return 1

    for path in files:
        if not args.quiet:
            console.print(f"Validating: {path}", markup=False, highlight=False, soft_wrap=True)
        try:
            content = _read(path)
        except OSError as exc:
            combined.add_error(path, str(exc))
            continue
        combined.issues.extend(validator.validate(content, file=path).issues)

    if args.format == "table":
        print_result_table(combined, args.quiet)
    else:
        print_result_text(combined, args.quiet)

    error_count = len(combined.errors)
    warning_count = len(combined.warnings)

    if error_count == 0 and warning_count == 0:
        if not args.quiet:
            console.print("[green]All profiles valid.[/green]")
        return 0

    summary_parts = []
    if error_count > 0:
        summary_parts.append(f"[red]{error_count} error{'s' if error_count != 1 else ''}[/red]")
    if warning_count > 0:
        summary_parts.append(
            f"[yellow]{warning_count} warning{'s' if warning_count != 1 else ''}[/yellow]"
        )
    console.print(f"\nValidation complete: {', '.join(summary_parts)}")

    if combined.has_errors:
        return 1
    if args.warnings_as_errors and combined.has_warnings:
        return 1
    return 0


def _write_output(body: str, output: Optional[str]):
    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(body)
    else:
        sys.stdout.write(body + "\n")


def cmd_dot(args: argparse.Namespace, config: AlpsEditorConfig) -> int:
    options = config.generator_options()
    generator = DotGenerator(
        GeneratorOptions(
            label_mode=args.label or options.label_mode,
            plain_pass=not args.no_plain_pass,
            engine=options.engine,
        )
    )
    artifact = generator.generate(_read(args.path))
    for warning in artifact.warnings:
        log(warning, level="warning")
    _write_output(artifact.body, args.output)
    if args.output:
        show_success(f"Wrote {args.output}")
    return 0


def cmd_render(args: argparse.Namespace, config: AlpsEditorConfig) -> int:
    options = config.generator_options()
    generator = SvgGenerator(
        GeneratorOptions(
            label_mode=args.label or options.label_mode,
            engine=args.engine or options.engine,
        )
    )
    artifact = generator.generate(_read(args.path))
    for warning in artifact.warnings:
        log(warning, level="warning")
    _write_output(artifact.body, args.output)
    show_success(f"Rendered {artifact.title!r} to {args.output}")
    return 0


def cmd_relationships(args: argparse.Namespace, config: AlpsEditorConfig) -> int:
    artifact = DotGenerator(config.generator_options()).generate(_read(args.path))
    sys.stdout.write(json.dumps(artifact.relationships, indent=2) + "\n")
    return 0


def cmd_locate(args: argparse.Namespace, config: AlpsEditorConfig) -> int:
    content = _read(args.path)
    line = extract_id_lines(content, detect_format(content)).get(args.id)
    if line is None:
        log(f"Descriptor '{args.id}' not found in {args.path}", level="error")
        return 1
    sys.stdout.write(f"{args.path}:{line}\n")
    return 0


def cmd_serve(args: argparse.Namespace, config: AlpsEditorConfig) -> int:
    import uvicorn

    from alps_server.app import create_app

    host = args.host or config.host
    port = args.port or config.port
    log(f"Serving ALPS diagram API on http://{host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port, log_config=None)
    return 0


COMMANDS: Dict[str, Callable[[argparse.Namespace, AlpsEditorConfig], int]] = {
    "validate": cmd_validate,
    "dot": cmd_dot,
    "render": cmd_render,
    "relationships": cmd_relationships,
    "locate": cmd_locate,
    "serve": cmd_serve,
}


def dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the command handler, reporting failures with rich."""
    try:
        config = load_and_validate_config()
    except ValidationError as exc:
        show_error("Invalid configuration", str(exc))
        return 1

    configure_logging(
        config.log_level,
        config.log_file,
        json_logs=config.json_logs,
        max_log_file_bytes=config.max_log_file_bytes,
        log_backup_count=config.log_backup_count,
    )

    handler = COMMANDS.get(args.action)
    if handler is None:
        console.print(f"[red]Unknown action: {args.action}[/red]")
        return 1

    path = getattr(args, "path", None)
    try:
        return handler(args, config)
    except ParseError as exc:
        show_error(
            f"Failed to parse {path}",
            str(exc),
            log_file=config.log_file,
            source=_read_quietly(path),
            line=exc.line,
        )
        return 1
    except AlpsError as exc:
        show_error(f"Failed to process {path or 'profile'}", str(exc), log_file=config.log_file)
        return 1
    except OSError as exc:
        show_error("File error", str(exc), log_file=config.log_file)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return dispatch(args)


if __name__ == "__main__":
    sys.exit(main())
