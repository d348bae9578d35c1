"""Base validator class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from schema_to_ir.ir.service import ServiceDefinition
    from schema_to_ir.validation.errors import ConversionReport


class BaseValidator(ABC):
    """Base class for IR validators."""

    @abstractmethod
    def validate(
        self,
        service: ServiceDefinition,
        report: ConversionReport,
    ) -> None:
        """Check the service and add issues to the report.

        Args:
        ----
            service: The assembled service to check.
            report: The report to add issues to.

        """
        ...


class CompositeValidator(BaseValidator):
    """Combines multiple validators."""

    def __init__(self, validators: list[BaseValidator] | None = None) -> None:
        """Initialize with optional list of validators.

        Args:
        ----
            validators: List of validators to combine.

        """
        self.validators = validators or []

    def add(self, validator: BaseValidator) -> None:
        """Add a validator."""
        self.validators.append(validator)

    def validate(
        self,
        service: ServiceDefinition,
        report: ConversionReport,
    ) -> None:
        """Run all validators in order."""
        for validator in self.validators:
            validator.validate(service, report)
