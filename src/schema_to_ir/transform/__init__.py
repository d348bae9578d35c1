"""Shared conversion pipeline.

This module provides:
- Identifier normalization and CRUD classification
- Resolver scaffolding with cycle protection
- The adapter contract and the format-agnostic transformer
"""

from schema_to_ir.transform.classifier import (
    Classification,
    CrudOperation,
    classify_operation,
)
from schema_to_ir.transform.naming import singularize, to_pascal_case, to_snake_case
from schema_to_ir.transform.pipeline import (
    ConversionResult,
    FormatAdapter,
    OperationRef,
    SchemaMember,
)
from schema_to_ir.transform.resolver import ResolutionContext, SchemaResolver
from schema_to_ir.transform.transformer import IRTransformer

__all__ = [
    "Classification",
    "ConversionResult",
    "CrudOperation",
    "FormatAdapter",
    "IRTransformer",
    "OperationRef",
    "ResolutionContext",
    "SchemaMember",
    "SchemaResolver",
    "classify_operation",
    "singularize",
    "to_pascal_case",
    "to_snake_case",
]
