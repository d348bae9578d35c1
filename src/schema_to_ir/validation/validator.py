"""Main validator combining all IR invariant checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from schema_to_ir.validation.base import CompositeValidator
from schema_to_ir.validation.errors import ConversionReport
from schema_to_ir.validation.ir_validators import (
    BlockCardinalityValidator,
    IdentifierFieldValidator,
    InputAccessorValidator,
    OperationsPresentValidator,
    UniqueResourceNameValidator,
)

if TYPE_CHECKING:
    from schema_to_ir.ir.service import ServiceDefinition


class IRValidator:
    """Checks a ServiceDefinition against the IR invariants."""

    def __init__(self, strict: bool = False) -> None:
        """Initialize validator.

        Args:
        ----
            strict: If True, treat warnings as errors.

        """
        self.strict = strict
        self._validator = CompositeValidator(
            [
                UniqueResourceNameValidator(),
                OperationsPresentValidator(),
                InputAccessorValidator(),
                BlockCardinalityValidator(),
                IdentifierFieldValidator(),
            ]
        )

    def validate(self, service: ServiceDefinition) -> ConversionReport:
        """Validate a service.

        Args:
        ----
            service: The service to check.

        Returns:
        -------
            ConversionReport with all issues found.

        """
        report = ConversionReport()
        self._validator.validate(service, report)
        return report

    def validate_and_raise(self, service: ServiceDefinition) -> ConversionReport:
        """Validate and raise if any invariant is broken.

        Raises
        ------
            InvalidIRError: If validation fails.

        """
        report = self.validate(service)

        if not report.is_valid:
            raise InvalidIRError(report)

        if self.strict and report.warnings:
            raise InvalidIRError(report)

        return report


class InvalidIRError(Exception):
    """Raised when a service breaks an IR invariant."""

    def __init__(self, report: ConversionReport) -> None:
        """Initialize with the report containing the issues."""
        self.report = report
        parts = []
        if report.errors:
            parts.append(f"{len(report.errors)} error(s)")
        if report.warnings:
            parts.append(f"{len(report.warnings)} warning(s)")

        super().__init__(f"IR validation failed: {', '.join(parts)}")
