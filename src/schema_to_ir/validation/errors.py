"""Conversion issues, reports and exceptions.

Only a malformed document aborts a conversion. Everything else is recorded
as an issue on a :class:`ConversionReport` and the conversion continues
with a best-effort substitution.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class IssueSeverity(Enum):
    """Severity level for conversion issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_LOG_LEVELS = {
    IssueSeverity.ERROR: logging.ERROR,
    IssueSeverity.WARNING: logging.WARNING,
    IssueSeverity.INFO: logging.DEBUG,
}


@dataclass(frozen=True)
class IssueLocation:
    """Location in the source document or IR where an issue was found."""

    path: str
    """Dotted path to the issue (e.g., 'bucket.fields.owner.owner')."""

    def __str__(self) -> str:
        """Format location as string."""
        return self.path


@dataclass(frozen=True)
class ConversionIssue:
    """A single conversion issue."""

    code: str
    """Unique issue code (e.g., 'E001', 'W002')."""

    message: str
    """Human-readable message."""

    severity: IssueSeverity
    """Severity level."""

    location: IssueLocation | None = None
    """Where the issue was found."""

    suggestion: str | None = None
    """Suggested fix."""

    context: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    """Additional context for debugging."""

    def __str__(self) -> str:
        """Format issue as string."""
        parts = [f"[{self.code}]", self.severity.value.upper(), self.message]
        if self.location:
            parts.append(f"at {self.location}")
        if self.suggestion:
            parts.append(f"(hint: {self.suggestion})")
        return " ".join(parts)


@dataclass
class ConversionReport:
    """All issues collected while converting or checking one service.

    Every issue added is also logged at the level matching its severity.
    """

    issues: list[ConversionIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ConversionIssue]:
        """Get only error-level issues."""
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> list[ConversionIssue]:
        """Get only warning-level issues."""
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    @property
    def infos(self) -> list[ConversionIssue]:
        """Get only info-level issues."""
        return [i for i in self.issues if i.severity == IssueSeverity.INFO]

    @property
    def is_valid(self) -> bool:
        """Check if there are no errors (warnings are OK)."""
        return len(self.errors) == 0

    def add(self, issue: ConversionIssue) -> None:
        """Add an issue to the report."""
        self.issues.append(issue)
        logger.log(_LOG_LEVELS[issue.severity], "%s", issue)

    def _add(
        self,
        severity: IssueSeverity,
        code: str,
        message: str,
        path: str | None,
        suggestion: str | None,
        context: dict[str, Any],
    ) -> None:
        self.add(
            ConversionIssue(
                code=code,
                message=message,
                severity=severity,
                location=IssueLocation(path=path) if path else None,
                suggestion=suggestion,
                context=context,
            )
        )

    def add_error(
        self,
        code: str,
        message: str,
        path: str | None = None,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Add an error issue."""
        self._add(IssueSeverity.ERROR, code, message, path, suggestion, context)

    def add_warning(
        self,
        code: str,
        message: str,
        path: str | None = None,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Add a warning issue."""
        self._add(IssueSeverity.WARNING, code, message, path, suggestion, context)

    def add_info(
        self,
        code: str,
        message: str,
        path: str | None = None,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Add an info issue."""
        self._add(IssueSeverity.INFO, code, message, path, suggestion, context)

    def has_code(self, code: str) -> bool:
        """Check whether any issue carries the given code."""
        return any(issue.code == code for issue in self.issues)

    def with_code(self, code: str) -> list[ConversionIssue]:
        """Get all issues carrying the given code."""
        return [issue for issue in self.issues if issue.code == code]

    def merge(self, other: ConversionReport) -> None:
        """Merge another report into this one."""
        self.issues.extend(other.issues)


class ErrorCodes:
    """Standard conversion and IR check codes."""

    # E0xx - Fatal conversion errors
    E001_DOCUMENT_MALFORMED = "E001"

    # W0xx - Degraded conversion
    W001_NO_RESOURCES_FOUND = "W001"
    W002_UNRESOLVED_REFERENCE = "W002"
    W003_RECURSION_LIMIT_EXCEEDED = "W003"
    W004_UNSUPPORTED_NATIVE_TYPE = "W004"

    # I0xx - Informational
    I001_SUPPLEMENTARY_OPERATION = "I001"
    I002_UNCLASSIFIED_OPERATION = "I002"

    # E1xx - IR invariant violations
    E101_DUPLICATE_RESOURCE = "E101"
    E102_NO_OPERATIONS = "E102"
    E103_INPUT_WITH_ACCESSOR = "E103"
    E104_INVALID_CARDINALITY = "E104"

    # W1xx - IR consistency warnings
    W101_UNKNOWN_ID_FIELD = "W101"


class ConversionError(Exception):
    """Base class for errors that abort a conversion."""


class DocumentMalformedError(ConversionError):
    """Raised when a document violates the structure its format requires.

    No partial IR is produced for a malformed document.
    """

    def __init__(
        self,
        reason: str,
        path: str | None = None,
        details: list[str] | None = None,
    ) -> None:
        """Initialize with the reason and optional document location.

        Args:
        ----
            reason: What is wrong with the document.
            path: Location in the document, if known.
            details: Individual problems, e.g. one per schema violation.

        """
        self.reason = reason
        self.path = path
        self.details = details or []
        self.code = ErrorCodes.E001_DOCUMENT_MALFORMED
        message = f"{path}: {reason}" if path else reason
        if self.details:
            message += "\n" + "\n".join(f"  - {d}" for d in self.details)
        super().__init__(message)


class UnknownFormatError(ConversionError):
    """Raised when a conversion is requested for a format that does not exist."""

    def __init__(self, format_name: str) -> None:
        """Initialize with the requested format name."""
        self.format_name = format_name
        super().__init__(f"Unknown schema format: {format_name!r}")
