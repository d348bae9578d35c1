"""IR models for resource fields and nested blocks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from schema_to_ir.ir.types import FieldType


class NestingMode(Enum):
    """How many nested objects a block holds."""

    SINGLE = "single"
    LIST = "list"


@dataclass(frozen=True)
class FieldDefinition:
    """A single input or output field of a resource.

    Attributes
    ----------
        name: Normalized (snake_case) field name.
        field_type: Resolved field type.
        required: Whether the source schema lists the member as required.
        sensitive: Whether the source marks the value as secret. Values of
            sensitive fields must never be logged or displayed.
        immutable: Whether changing the value forces resource replacement.
        description: Human-readable description from the source schema.
        response_accessor: How to read the value from a backend response.
            Only output fields carry one.

    """

    name: str
    field_type: FieldType
    required: bool = False
    sensitive: bool = False
    immutable: bool = False
    description: str | None = None
    response_accessor: str | None = None

    @property
    def is_output(self) -> bool:
        """Check whether this field was extracted from a response."""
        return self.response_accessor is not None


@dataclass(frozen=True)
class BlockDefinition:
    """A nested attribute group of a resource.

    Attributes
    ----------
        name: Normalized block name.
        description: Human-readable description.
        attributes: Scalar-ish members of the nested object.
        blocks: Nested blocks, arbitrarily deep.
        nesting_mode: SINGLE for one object, LIST for repeated objects.
        min_items: Minimum number of nested objects.
        max_items: Maximum number of nested objects, 0 for unbounded.
        sdk_type_name: Native type name used to build the nested value.
        sdk_accessor_method: Accessor used to read the nested value back.

    """

    name: str
    description: str | None = None
    attributes: tuple[FieldDefinition, ...] = ()
    blocks: tuple[BlockDefinition, ...] = ()
    nesting_mode: NestingMode = NestingMode.SINGLE
    min_items: int = 0
    max_items: int = 0
    sdk_type_name: str | None = None
    sdk_accessor_method: str | None = None

    @property
    def is_unbounded(self) -> bool:
        """Check whether the block accepts any number of items."""
        return self.max_items == 0

    def walk(self) -> list[BlockDefinition]:
        """Return this block and all nested blocks, depth first."""
        result = [self]
        for block in self.blocks:
            result.extend(block.walk())
        return result
