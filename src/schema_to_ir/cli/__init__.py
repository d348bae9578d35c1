"""CLI module for schema-to-ir.

The typer application lives in :mod:`schema_to_ir.cli_main`, which imports
from this package.
"""

from schema_to_ir.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree, ResourceTable
from schema_to_ir.cli.exception_handler import handle_exceptions

__all__ = [
    "ErrorFormatter",
    "ErrorTable",
    "ErrorTree",
    "ResourceTable",
    "handle_exceptions",
]
