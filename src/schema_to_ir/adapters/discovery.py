"""Adapter for Google API Discovery documents."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from schema_to_ir.ir.service import Provider
from schema_to_ir.ir.types import (
    BOOLEAN,
    DATETIME,
    FLOAT,
    INTEGER,
    STRING,
    EnumType,
    FieldType,
    ListType,
    MapType,
    ObjectType,
)
from schema_to_ir.models.discovery import (
    DiscoveryDocument,
    DiscoveryResource,
    DiscoverySchema,
    Method,
    Parameter,
)
from schema_to_ir.transform.pipeline import FormatAdapter, OperationRef, SchemaMember
from schema_to_ir.transform.resolver import SchemaResolver
from schema_to_ir.validation.errors import DocumentMalformedError

if TYPE_CHECKING:
    from schema_to_ir.config import ConverterSettings
    from schema_to_ir.transform.resolver import ResolutionContext

DATETIME_FORMATS = frozenset({"date-time", "google-datetime", "date"})
# 64-bit integers travel as JSON strings
INTEGER_STRING_FORMATS = frozenset({"int64", "uint64"})


def parse_discovery_document(document: dict[str, Any]) -> DiscoveryDocument:
    """Validate a parsed document into a DiscoveryDocument.

    Raises
    ------
        DocumentMalformedError: If the document does not have the Discovery shape.

    """
    if not isinstance(document, dict):
        raise DocumentMalformedError("Discovery document must be a JSON object")
    try:
        return DiscoveryDocument.model_validate(document)
    except ValidationError as e:
        raise DocumentMalformedError(
            "Document is not a valid Discovery document",
            details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e


@dataclass(frozen=True)
class SchemaNode:
    """A schema together with the method whose body it describes."""

    schema: DiscoverySchema
    method_id: str | None = None
    name: str | None = None


def scalar_type(type_name: str | None, format_name: str | None) -> FieldType | None:
    """Map a scalar type/format pair, or return None for non-scalars."""
    if type_name == "string":
        if format_name in DATETIME_FORMATS:
            return DATETIME
        if format_name in INTEGER_STRING_FORMATS:
            return INTEGER
        return STRING
    if type_name == "integer":
        return INTEGER
    if type_name == "number":
        return FLOAT
    if type_name == "boolean":
        return BOOLEAN
    if type_name == "any":
        return STRING
    return None


class DiscoveryResolver(SchemaResolver[DiscoverySchema]):
    """Resolves ``$ref`` schema names and maps schemas to types."""

    def __init__(self, document: DiscoveryDocument) -> None:
        """Initialize with the document whose schemas are resolved."""
        self.document = document

    def lookup(self, reference: str) -> DiscoverySchema | None:
        """Find a top-level schema by name."""
        return self.document.schemas.get(reference)

    def reference_of(self, node: DiscoverySchema) -> str | None:
        """Follow schemas that only point at another schema."""
        return node.ref

    def deref(self, schema: DiscoverySchema) -> DiscoverySchema | None:
        """Return the concrete schema behind a possibly referencing one."""
        return self.resolve(schema.ref) if schema.ref else schema

    def field_type(self, node: DiscoverySchema, context: ResolutionContext) -> FieldType:
        """Map a schema to a field type."""
        if node.ref:
            return self.resolve_type(node.ref, context)
        if node.type == "string" and node.enum:
            return EnumType(tuple(node.enum))
        scalar = scalar_type(node.type, node.format)
        if scalar is not None:
            return scalar
        if node.type == "array":
            if node.items is None:
                return ListType(STRING)
            return ListType(self.field_type(node.items, context.child("items")))
        if node.type == "object" or (node.type is None and node.properties):
            if node.properties:
                with context.guard() as allowed:
                    if not allowed:
                        return STRING
                    return ObjectType(
                        tuple(
                            (name, self.field_type(prop, context.child(name)))
                            for name, prop in node.properties.items()
                        )
                    )
            if node.additional_properties is not None:
                return MapType(
                    STRING,
                    self.field_type(
                        node.additional_properties, context.child("additionalProperties")
                    ),
                )
            return MapType(STRING, STRING)
        if node.type is None:
            return STRING
        return context.unsupported(node.type)


class DiscoveryAdapter(FormatAdapter):
    """Exposes a Discovery document's collections and schemas to the pipeline.

    Each collection (``buckets``, ``objects``...) becomes one resource
    candidate named after the collection, singular.
    """

    format_name = "discovery"
    default_provider = Provider.GCP

    def __init__(
        self,
        document: DiscoveryDocument,
        settings: ConverterSettings | None = None,
    ) -> None:
        """Initialize the adapter with a parsed document."""
        super().__init__(settings)
        self.document = document
        self.resolver = DiscoveryResolver(document)

    def enumerate_operations(self) -> Iterator[OperationRef]:
        """Yield collection methods depth first, then root-level methods."""
        yield from self._collection_methods(self.document.resources)
        for name, method in self.document.methods.items():
            yield self._operation(name, method, _collection_from_id(method.id))

    def _collection_methods(
        self,
        resources: dict[str, DiscoveryResource],
    ) -> Iterator[OperationRef]:
        for collection, resource in resources.items():
            for name, method in resource.methods.items():
                yield self._operation(name, method, collection)
            yield from self._collection_methods(resource.resources)

    @staticmethod
    def _operation(name: str, method: Method, collection: str | None) -> OperationRef:
        return OperationRef(
            identifier=name,
            verb=method.http_method,
            resource=collection,
            description=method.description,
            source=method,
        )

    def input_schema(self, operation: OperationRef) -> SchemaNode | None:
        """Request body schema of a method."""
        method: Method = operation.source
        return self._body(method, method.request.ref if method.request else None)

    def output_schema(self, operation: OperationRef) -> SchemaNode | None:
        """Response body schema of a method."""
        method: Method = operation.source
        return self._body(method, method.response.ref if method.response else None)

    def _body(self, method: Method, ref: str | None) -> SchemaNode | None:
        if ref is None:
            return None
        return SchemaNode(schema=DiscoverySchema(ref=ref), method_id=method.id, name=ref)

    def members(self, node: SchemaNode, context: ResolutionContext) -> list[SchemaMember]:
        """List the properties of an object schema."""
        schema = self.resolver.deref(node.schema)
        if schema is None:
            self.resolver.unresolved(node.schema.ref or "", context)
            return []

        members = []
        for name, prop in schema.properties.items():
            member_context = context.for_field(name)
            resolved = self.resolver.deref(prop)
            nested, type_name = self._nested_object(prop)
            members.append(
                SchemaMember(
                    name=name,
                    field_type=self.resolver.field_type(prop, member_context),
                    required=schema.is_required(name, prop, node.method_id),
                    description=prop.description or (resolved.description if resolved else None),
                    schema=SchemaNode(nested, node.method_id, type_name) if nested else None,
                    type_name=type_name,
                )
            )
        return members

    def parameters(self, operation: OperationRef, context: ResolutionContext) -> list[SchemaMember]:
        """Path parameters of a method, in declared parameter order."""
        method: Method = operation.source
        order = [name for name in method.parameter_order if name in method.parameters]
        order += [name for name in method.parameters if name not in order]

        members = []
        for name in order:
            param = method.parameters[name]
            if param.location != "path":
                continue
            members.append(
                SchemaMember(
                    name=name,
                    field_type=_parameter_type(param),
                    required=param.required,
                    immutable=True,
                    description=param.description,
                )
            )
        return members

    def _nested_object(self, prop: DiscoverySchema) -> tuple[DiscoverySchema | None, str | None]:
        """Object schema a property holds directly or as array items."""
        type_name = prop.ref
        resolved = self.resolver.deref(prop)
        if resolved is not None and resolved.type == "array" and resolved.items is not None:
            type_name = resolved.items.ref
            resolved = self.resolver.deref(resolved.items)
        if resolved is None or not resolved.properties:
            return None, None
        return resolved, type_name or resolved.id


def _parameter_type(param: Parameter) -> FieldType:
    if param.enum:
        base: FieldType = EnumType(tuple(param.enum))
    else:
        base = scalar_type(param.type, param.format) or STRING
    return ListType(base) if param.repeated else base


def _collection_from_id(method_id: str | None) -> str | None:
    """Collection named by a method id such as ``storage.buckets.insert``."""
    if not method_id:
        return None
    parts = method_id.split(".")
    return parts[-2] if len(parts) >= 2 else None
