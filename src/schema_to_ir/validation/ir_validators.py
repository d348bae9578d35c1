"""Validators for IR invariants.

The assembler is expected to uphold all of these; a failure here means
an adapter produced inconsistent IR.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from schema_to_ir.ir.fields import BlockDefinition, NestingMode
from schema_to_ir.validation.base import BaseValidator
from schema_to_ir.validation.errors import ConversionReport, ErrorCodes

if TYPE_CHECKING:
    from schema_to_ir.ir.service import ServiceDefinition


class UniqueResourceNameValidator(BaseValidator):
    """Validates that resource and data source names are unique."""

    def validate(self, service: ServiceDefinition, report: ConversionReport) -> None:
        """Check for duplicate names."""
        for kind, names in (
            ("resources", [r.name for r in service.resources]),
            ("data_sources", [d.name for d in service.data_sources]),
        ):
            seen: set[str] = set()
            for name in names:
                if name in seen:
                    report.add_error(
                        code=ErrorCodes.E101_DUPLICATE_RESOURCE,
                        message=f"Name '{name}' is used by more than one entry",
                        path=f"{kind}.{name}",
                    )
                seen.add(name)


class OperationsPresentValidator(BaseValidator):
    """Validates that every resource binds at least one CRUD operation."""

    def validate(self, service: ServiceDefinition, report: ConversionReport) -> None:
        """Check each resource's operations."""
        for resource in service.resources:
            if not resource.operations.has_crud:
                report.add_error(
                    code=ErrorCodes.E102_NO_OPERATIONS,
                    message=f"Resource '{resource.name}' has no create/read/update/delete binding",
                    path=f"resources.{resource.name}.operations",
                    suggestion="Resources without operations must be dropped during assembly",
                )


class InputAccessorValidator(BaseValidator):
    """Validates that only output fields carry a response accessor."""

    def validate(self, service: ServiceDefinition, report: ConversionReport) -> None:
        """Check input fields, block attributes and data source arguments."""
        for resource in service.resources:
            inputs = list(resource.fields)
            for block in resource.blocks:
                for nested in block.walk():
                    inputs.extend(nested.attributes)
            for field_def in inputs:
                if field_def.response_accessor is not None:
                    report.add_error(
                        code=ErrorCodes.E103_INPUT_WITH_ACCESSOR,
                        message=f"Input field '{field_def.name}' carries a response accessor",
                        path=f"resources.{resource.name}.fields.{field_def.name}",
                    )
        for data_source in service.data_sources:
            for field_def in data_source.arguments:
                if field_def.response_accessor is not None:
                    report.add_error(
                        code=ErrorCodes.E103_INPUT_WITH_ACCESSOR,
                        message=f"Argument '{field_def.name}' carries a response accessor",
                        path=f"data_sources.{data_source.name}.arguments.{field_def.name}",
                    )


class BlockCardinalityValidator(BaseValidator):
    """Validates min/max item counts of every block."""

    def validate(self, service: ServiceDefinition, report: ConversionReport) -> None:
        """Check every block, nested ones included."""
        for resource in service.resources:
            for block in resource.blocks:
                for nested in block.walk():
                    self._check(nested, f"resources.{resource.name}.blocks.{nested.name}", report)

    def _check(self, block: BlockDefinition, path: str, report: ConversionReport) -> None:
        if block.min_items < 0 or block.max_items < 0:
            report.add_error(
                code=ErrorCodes.E104_INVALID_CARDINALITY,
                message=f"Block '{block.name}' has a negative item bound",
                path=path,
            )
        elif not block.is_unbounded and block.min_items > block.max_items:
            report.add_error(
                code=ErrorCodes.E104_INVALID_CARDINALITY,
                message=(
                    f"Block '{block.name}' requires at least {block.min_items} items "
                    f"but allows at most {block.max_items}"
                ),
                path=path,
            )
        elif block.nesting_mode == NestingMode.SINGLE and block.max_items != 1:
            report.add_error(
                code=ErrorCodes.E104_INVALID_CARDINALITY,
                message=f"Single block '{block.name}' must allow exactly one item",
                path=path,
            )


class IdentifierFieldValidator(BaseValidator):
    """Validates that a declared id field exists on the resource."""

    def validate(self, service: ServiceDefinition, report: ConversionReport) -> None:
        """Check id_field against fields and outputs."""
        for resource in service.resources:
            if resource.id_field is None:
                continue
            if resource.get_field(resource.id_field) or resource.get_output(resource.id_field):
                continue
            report.add_warning(
                code=ErrorCodes.W101_UNKNOWN_ID_FIELD,
                message=(
                    f"Resource '{resource.name}' names '{resource.id_field}' as its id "
                    "but has no such field"
                ),
                path=f"resources.{resource.name}.id_field",
            )
