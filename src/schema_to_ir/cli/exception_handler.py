"""CLI exception handling."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

import typer
from rich.console import Console
from rich.panel import Panel

from schema_to_ir.ir.serialization import IRDecodeError
from schema_to_ir.models.loader import LoaderError
from schema_to_ir.validation.errors import DocumentMalformedError, UnknownFormatError
from schema_to_ir.validation.validator import InvalidIRError

T = TypeVar("T")

console = Console(stderr=True)


def handle_exceptions(
    verbose: bool = False,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Handle exceptions in CLI commands with formatted output.

    Args:
    ----
        verbose: Whether to show full tracebacks.

    Returns:
    -------
        Decorator function.

    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: object, **kwargs: object) -> T:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except DocumentMalformedError as e:
                _handle_malformed_document(e)
                raise typer.Exit(1) from None
            except InvalidIRError as e:
                _handle_invalid_ir(e)
                raise typer.Exit(1) from None
            except (LoaderError, IRDecodeError, UnknownFormatError) as e:
                _print_panel(str(e), "Error")
                raise typer.Exit(1) from None
            except FileNotFoundError as e:
                _print_panel(
                    f"File not found: {e.filename or 'unknown'}\n\n"
                    "Please check that the file path is correct.",
                    "Error",
                )
                raise typer.Exit(1) from None
            except PermissionError as e:
                _print_panel(
                    f"Permission denied: {e.filename or 'unknown'}\n\n"
                    "Check file permissions and try again.",
                    "Error",
                )
                raise typer.Exit(1) from None
            except Exception as e:
                _handle_generic_error(e, verbose)
                raise typer.Exit(1) from None

        return wrapper

    return decorator


def _handle_malformed_document(error: DocumentMalformedError) -> None:
    """Print the reason and each individual problem of a malformed document."""
    console.print(f"[red bold]✗ \\[{error.code}] Malformed document[/red bold]")
    if error.path:
        console.print(f"  [dim]at {error.path}[/dim]")
    console.print(f"  {error.reason}")
    for detail in error.details:
        console.print(f"  [red]•[/red] {detail}")


def _handle_invalid_ir(error: InvalidIRError) -> None:
    """Print the broken IR invariants."""
    from schema_to_ir.cli.error_formatter import ErrorFormatter

    ErrorFormatter(console).format_report(error.report)


def _print_panel(message: str, title: str) -> None:
    console.print(Panel(f"[red]{message}[/red]", title=title, border_style="red"))


def _handle_generic_error(error: Exception, verbose: bool) -> None:
    """Handle unexpected errors."""
    console.print(
        Panel(
            f"[red]An unexpected error occurred:[/red]\n{error}",
            title="Error",
            border_style="red",
        )
    )

    if verbose:
        console.print("\n[dim]Traceback:[/dim]")
        console.print(traceback.format_exc())
    else:
        console.print("\n[dim]Set SCHEMA_TO_IR_LOG_LEVEL=DEBUG for details[/dim]")
