"""Intermediate Representation (IR) of a compiled API schema.

The IR is the single hand-off format between the format adapters and
any code generator:

1. Every record is a frozen dataclass with tuple collections
2. Field types form a closed, recursive tagged union
3. Identical input documents produce equal IR values
4. ``serialization`` gives a stable plain-data encoding
"""

from schema_to_ir.ir.fields import BlockDefinition, FieldDefinition, NestingMode
from schema_to_ir.ir.resources import (
    OPERATION_SLOTS,
    DataSourceDefinition,
    OperationMapping,
    Operations,
    ResourceDefinition,
)
from schema_to_ir.ir.service import Provider, ServiceDefinition
from schema_to_ir.ir.types import (
    BOOLEAN,
    DATETIME,
    FALLBACK_TYPE,
    FLOAT,
    INTEGER,
    STRING,
    BooleanType,
    DateTimeType,
    EnumType,
    FieldType,
    FloatType,
    IntegerType,
    ListType,
    MapType,
    ObjectType,
    StringType,
)

__all__ = [
    # Types
    "BOOLEAN",
    "DATETIME",
    "FALLBACK_TYPE",
    "FLOAT",
    "INTEGER",
    "STRING",
    "BooleanType",
    "DateTimeType",
    "EnumType",
    "FieldType",
    "FloatType",
    "IntegerType",
    "ListType",
    "MapType",
    "ObjectType",
    "StringType",
    # Fields
    "BlockDefinition",
    "FieldDefinition",
    "NestingMode",
    # Resources
    "OPERATION_SLOTS",
    "DataSourceDefinition",
    "OperationMapping",
    "Operations",
    "ResourceDefinition",
    # Service
    "Provider",
    "ServiceDefinition",
]
