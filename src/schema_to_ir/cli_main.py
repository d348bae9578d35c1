"""Command-line interface for the schema-to-IR converter."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from schema_to_ir import __version__
from schema_to_ir.cli.exception_handler import handle_exceptions
from schema_to_ir.config import get_settings
from schema_to_ir.logging import configure_logging
from schema_to_ir.models.loader import (
    DESCRIPTOR_SUFFIXES,
    SchemaFormat,
    detect_format,
    infer_service_name,
    load_descriptor_set,
    load_document,
)

# Create Typer app
app = typer.Typer(
    name="schema-to-ir",
    help="Compile API schema documents into a provider-neutral resource IR.",
    add_completion=True,
    no_args_is_help=True,
)

# Rich consoles for output
console = Console()
error_console = Console(stderr=True, style="bold red")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"schema-to-ir version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Log level (DEBUG, INFO, WARNING, ERROR). Defaults to SCHEMA_TO_IR_LOG_LEVEL.",
        ),
    ] = None,
) -> None:
    """Compile Smithy, OpenAPI, Discovery, protobuf or reflection schemas to IR.

    The IR lists the CRUD resources of a service with their fields, nested
    blocks, outputs and the operations that implement them.
    """
    configure_logging(log_level or get_settings().log_level)


@app.command()
@handle_exceptions()
def convert(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Schema document (.json, .yaml) or descriptor set (.pb, .desc, .binpb).",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the IR to this .json, .yaml or .yml file.",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    schema_format: Annotated[
        SchemaFormat | None,
        typer.Option(
            "--format",
            "-f",
            help="Source format. Detected from the file when omitted.",
            case_sensitive=False,
        ),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option(
            "--name",
            "-n",
            help="Service name. Defaults to the file name up to the first '-' or '.'.",
        ),
    ] = None,
    api_version: Annotated[
        str | None,
        typer.Option(
            "--version",
            help="Schema/API version. Defaults to the version declared in the document.",
        ),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option(
            "--provider",
            "-p",
            help="Provider to tag the service with (aws, gcp, azure, kubernetes).",
        ),
    ] = None,
    issues_format: Annotated[
        str,
        typer.Option(
            "--issues",
            help="How to show conversion issues: text, table, tree.",
        ),
    ] = "text",
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Exit with an error when the conversion has warnings.",
        ),
    ] = False,
) -> None:
    """Convert a schema document into IR.

    Prints a summary of the resources found and the conversion warnings,
    and writes the IR when --output is given.

    Examples
    --------
        schema-to-ir convert s3-2006-03-01.json
        schema-to-ir convert storage-v1.json --format discovery -o storage.ir.json
        schema-to-ir convert k8s-openapi.yaml --provider kubernetes -o k8s.ir.yaml
        schema-to-ir convert pubsub.pb --name pubsub --version v1

    """
    from schema_to_ir.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree, ResourceTable
    from schema_to_ir.converters import IRWriter
    from schema_to_ir.convert import convert as convert_document

    document: Any
    if schema_format is SchemaFormat.PROTOBUF or (
        schema_format is None and input_file.suffix.lower() in DESCRIPTOR_SUFFIXES
    ):
        document = load_descriptor_set(input_file)
        schema_format = SchemaFormat.PROTOBUF
    else:
        document = load_document(input_file)
        schema_format = schema_format or detect_format(input_file, document)

    service_name = name or infer_service_name(input_file)
    version = api_version or _declared_version(document, schema_format) or "unknown"

    result = convert_document(document, schema_format, service_name, version, provider)

    ResourceTable(console).print_service(result.service)
    if result.report.warnings:
        if issues_format == "table":
            ErrorTable(error_console).print_report(result.report)
        elif issues_format == "tree":
            ErrorTree(error_console).print_report(result.report)
        else:
            ErrorFormatter(error_console).format_report(result.report, input_file)

    if output is not None:
        IRWriter().write(result.service, output)
        console.print(f"\n[bold green]✓ Wrote IR to {output}[/bold green]\n")

    if strict and result.report.warnings:
        raise typer.Exit(code=1)


@app.command()
@handle_exceptions()
def validate(
    ir_file: Annotated[
        Path,
        typer.Argument(
            help="Serialized IR file (.json, .yaml, .yml) to check.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Treat warnings as errors.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only output errors, no success messages.",
        ),
    ] = False,
) -> None:
    """Check a serialized IR file against the IR invariants.

    Examples
    --------
        schema-to-ir validate storage.ir.json
        schema-to-ir validate storage.ir.yaml --strict

    """
    from schema_to_ir.cli.error_formatter import ErrorFormatter, ResourceTable
    from schema_to_ir.converters import load_ir_file
    from schema_to_ir.validation import IRValidator

    service = load_ir_file(ir_file)
    report = IRValidator(strict=strict).validate(service)

    if not report.is_valid or report.warnings:
        ErrorFormatter(error_console).format_report(report, ir_file)
        if not report.is_valid or strict:
            raise typer.Exit(code=1)

    if not quiet:
        ResourceTable(console).print_service(service)
        if report.warnings:
            console.print(f"\n[bold yellow]⚠ {ir_file.name} is valid with warnings[/bold yellow]\n")
        else:
            console.print(f"\n[bold green]✓ {ir_file.name} is valid[/bold green]\n")


def _declared_version(document: Any, schema_format: SchemaFormat) -> str | None:
    """Version the document declares for its API, if any."""
    if not isinstance(document, dict):
        return None
    if schema_format is SchemaFormat.OPENAPI:
        info = document.get("info")
        version = info.get("version") if isinstance(info, dict) else None
    elif schema_format is SchemaFormat.SMITHY:
        shapes = document.get("shapes")
        services = (
            [s for s in shapes.values() if isinstance(s, dict) and s.get("type") == "service"]
            if isinstance(shapes, dict)
            else []
        )
        version = services[0].get("version") if services else None
    else:
        version = document.get("version")
    return str(version) if version is not None else None


if __name__ == "__main__":
    app()
