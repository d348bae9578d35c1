"""IR models for field types.

This module defines the closed, recursive set of field types every source
format is reduced to. Scalars are singletons; container types wrap other
field types. Recursion depth is bounded by the resolver that builds them,
never by these classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class StringType:
    """Text value. Also the fallback for anything that cannot be resolved."""

    tag: ClassVar[str] = "string"


@dataclass(frozen=True)
class IntegerType:
    """Integer value of any width."""

    tag: ClassVar[str] = "integer"


@dataclass(frozen=True)
class BooleanType:
    """True/false value."""

    tag: ClassVar[str] = "boolean"


@dataclass(frozen=True)
class FloatType:
    """Floating point or decimal value."""

    tag: ClassVar[str] = "float"


@dataclass(frozen=True)
class DateTimeType:
    """Timestamp or calendar date."""

    tag: ClassVar[str] = "datetime"


@dataclass(frozen=True)
class ListType:
    """Ordered repetition of one item type.

    Attributes
    ----------
        item: Type of every element.

    """

    item: FieldType
    tag: ClassVar[str] = "list"


@dataclass(frozen=True)
class MapType:
    """Dictionary keyed by one type.

    Attributes
    ----------
        key: Key type. String for every format that exposes maps today.
        value: Value type.

    """

    key: FieldType
    value: FieldType
    tag: ClassVar[str] = "map"


@dataclass(frozen=True)
class EnumType:
    """Closed set of string variants.

    Attributes
    ----------
        variants: Variant names in declaration order, without duplicates.

    """

    variants: tuple[str, ...] = ()
    tag: ClassVar[str] = "enum"

    def __post_init__(self) -> None:
        """Drop duplicate variants while keeping their first position."""
        if len(set(self.variants)) != len(self.variants):
            object.__setattr__(self, "variants", tuple(dict.fromkeys(self.variants)))


@dataclass(frozen=True)
class ObjectType:
    """Structured value with named members.

    Attributes
    ----------
        fields: (name, type) pairs in source order.

    """

    fields: tuple[tuple[str, FieldType], ...] = ()
    tag: ClassVar[str] = "object"

    def get(self, name: str) -> FieldType | None:
        """Get a member type by name."""
        for member_name, member_type in self.fields:
            if member_name == name:
                return member_type
        return None

    @property
    def field_names(self) -> tuple[str, ...]:
        """Member names in source order."""
        return tuple(name for name, _ in self.fields)


FieldType = Union[
    StringType,
    IntegerType,
    BooleanType,
    FloatType,
    DateTimeType,
    ListType,
    MapType,
    EnumType,
    ObjectType,
]

STRING = StringType()
INTEGER = IntegerType()
BOOLEAN = BooleanType()
FLOAT = FloatType()
DATETIME = DateTimeType()

# Substituted for unresolved references, cycles and unmapped native types
FALLBACK_TYPE: FieldType = STRING

SCALAR_TYPES: tuple[type, ...] = (StringType, IntegerType, BooleanType, FloatType, DateTimeType)


def is_scalar(field_type: FieldType) -> bool:
    """Check whether a field type carries no nested types."""
    return isinstance(field_type, SCALAR_TYPES) or isinstance(field_type, EnumType)


def is_container(field_type: FieldType) -> bool:
    """Check whether a field type is a list, map or object."""
    return isinstance(field_type, (ListType, MapType, ObjectType))
