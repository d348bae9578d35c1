"""Conversion issues and IR invariant checks.

This module provides:
- Issue, report and exception types shared by every conversion
- Validators checking an assembled ServiceDefinition against the IR invariants
"""

from schema_to_ir.validation.base import BaseValidator, CompositeValidator
from schema_to_ir.validation.errors import (
    ConversionError,
    ConversionIssue,
    ConversionReport,
    DocumentMalformedError,
    ErrorCodes,
    IssueLocation,
    IssueSeverity,
    UnknownFormatError,
)
from schema_to_ir.validation.validator import InvalidIRError, IRValidator

__all__ = [
    "BaseValidator",
    "CompositeValidator",
    "ConversionError",
    "ConversionIssue",
    "ConversionReport",
    "DocumentMalformedError",
    "ErrorCodes",
    "InvalidIRError",
    "IRValidator",
    "IssueLocation",
    "IssueSeverity",
    "UnknownFormatError",
]
