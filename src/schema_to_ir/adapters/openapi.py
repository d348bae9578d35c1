"""Adapter for OpenAPI 3.0 documents (Kubernetes, Azure and generic REST APIs)."""

from __future__ import annotations

import logging
from collections.abc import Iterator
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
from schema_to_ir.models.openapi import (
    PARAMETER_REF_PREFIX,
    REQUEST_BODY_REF_PREFIX,
    RESPONSE_REF_PREFIX,
    SCHEMA_REF_PREFIX,
    OpenApiDocument,
    Operation,
    Parameter,
    PathItem,
    Response,
    Schema,
)
from schema_to_ir.transform.pipeline import FormatAdapter, OperationRef, SchemaMember
from schema_to_ir.transform.resolver import SchemaResolver
from schema_to_ir.validation.errors import DocumentMalformedError

if TYPE_CHECKING:
    from schema_to_ir.config import ConverterSettings
    from schema_to_ir.transform.resolver import ResolutionContext

logger = logging.getLogger(__name__)

DATETIME_FORMATS = frozenset({"date-time", "date"})
SENSITIVE_FORMATS = frozenset({"password"})
SENSITIVE_EXTENSION = "x-sensitive"

SUCCESS_STATUS_CODES = ("200", "201")


def parse_openapi_document(document: dict[str, Any]) -> OpenApiDocument:
    """Validate a parsed document into an OpenApiDocument.

    Raises
    ------
        DocumentMalformedError: If the document is not an OpenAPI 3 document.

    """
    if not isinstance(document, dict):
        raise DocumentMalformedError("OpenAPI document must be a JSON object")
    try:
        return OpenApiDocument.model_validate(document)
    except ValidationError as e:
        raise DocumentMalformedError(
            "Document is not a valid OpenAPI 3 document",
            details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e


def fallback_operation_id(method: str, path: str) -> str:
    """Build an identifier for an operation without ``operationId``."""
    segments = [s for s in path.strip("/").split("/") if s and not s.startswith("{")]
    return "_".join([method, *segments]) if segments else f"{method}_root"


def resource_from_path(path: str) -> str | None:
    """Resource name implied by a path: its last non-template segment."""
    for segment in reversed(path.strip("/").split("/")):
        if segment and not segment.startswith("{"):
            return segment
    return None


def is_sensitive(schema: Schema | None) -> bool:
    """Check a schema for an explicit sensitivity marker."""
    if schema is None:
        return False
    return schema.format in SENSITIVE_FORMATS or schema.extension(SENSITIVE_EXTENSION) is True


class OpenApiResolver(SchemaResolver[Schema]):
    """Resolves ``#/components/schemas/`` references and maps schemas to types."""

    def __init__(self, document: OpenApiDocument) -> None:
        """Initialize with the document whose components are resolved."""
        self.document = document

    def lookup(self, reference: str) -> Schema | None:
        """Find a component schema by reference."""
        if not reference.startswith(SCHEMA_REF_PREFIX):
            return None
        return self.document.components.schemas.get(reference[len(SCHEMA_REF_PREFIX) :])

    def reference_of(self, node: Schema) -> str | None:
        """Follow schemas that only point at another schema."""
        return node.ref

    def deref(self, schema: Schema) -> Schema | None:
        """Return the concrete schema behind a possibly referencing one."""
        return self.resolve(schema.ref) if schema.ref else schema

    def field_type(self, node: Schema, context: ResolutionContext) -> FieldType:
        """Map a schema to a field type."""
        if node.ref:
            return self.resolve_type(node.ref, context)
        if node.all_of:
            return self._merge_all_of(node, context)
        if node.one_of or node.any_of:
            return self._collapse_alternatives(node.one_of or node.any_of, context)

        schema_type = node.primary_type
        if schema_type == "string":
            if node.format in DATETIME_FORMATS:
                return DATETIME
            if node.enum:
                return _enum_type(node.enum)
            return STRING
        if schema_type == "integer":
            return INTEGER
        if schema_type == "number":
            return FLOAT
        if schema_type == "boolean":
            return BOOLEAN
        if schema_type == "array":
            if node.items is None:
                return ListType(STRING)
            return ListType(self.field_type(node.items, context.child("items")))
        is_free_form = schema_type is None and (node.properties or node.additional_properties)
        if schema_type == "object" or is_free_form:
            return self._object_type(node, context)
        if schema_type is None:
            return _enum_type(node.enum) if node.enum else STRING
        return context.unsupported(schema_type)

    def _object_type(self, node: Schema, context: ResolutionContext) -> FieldType:
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
        if isinstance(node.additional_properties, Schema):
            return MapType(
                STRING,
                self.field_type(node.additional_properties, context.child("additionalProperties")),
            )
        if node.additional_properties is False:
            return ObjectType()
        return MapType(STRING, STRING)

    def _merge_all_of(self, node: Schema, context: ResolutionContext) -> FieldType:
        parts = [self.field_type(part, context) for part in node.all_of]
        if node.properties:
            parts.append(self._object_type(node, context))
        objects = [part for part in parts if isinstance(part, ObjectType)]
        if not objects:
            return parts[0] if parts else STRING
        merged: dict[str, FieldType] = {}
        for part in objects:
            for name, member_type in part.fields:
                merged.setdefault(name, member_type)
        return ObjectType(tuple(merged.items()))

    def _collapse_alternatives(
        self,
        alternatives: list[Schema],
        context: ResolutionContext,
    ) -> FieldType:
        types = [
            self.field_type(alt, context) for alt in alternatives if alt.primary_type != "null"
        ]
        if types and all(t == types[0] for t in types):
            return types[0]
        return STRING


class OpenApiAdapter(FormatAdapter):
    """Exposes an OpenAPI document's paths and schemas to the pipeline.

    Operations are grouped by the last static segment of their path, so
    ``/namespaces/{namespace}/pods`` and ``/namespaces/{namespace}/pods/{name}``
    both contribute to ``pod``.
    """

    format_name = "openapi"
    default_provider = Provider.KUBERNETES

    def __init__(
        self,
        document: OpenApiDocument,
        settings: ConverterSettings | None = None,
    ) -> None:
        """Initialize the adapter with a parsed document."""
        super().__init__(settings)
        self.document = document
        self.resolver = OpenApiResolver(document)

    @property
    def provider(self) -> Provider:
        """Provider configured for OpenAPI documents."""
        return self.settings.default_openapi_provider

    def enumerate_operations(self) -> Iterator[OperationRef]:
        """Yield operations in path order, then method order."""
        for path, item in self.document.paths.items():
            for method, operation in item.operations():
                yield OperationRef(
                    identifier=operation.operation_id or fallback_operation_id(method, path),
                    verb=method.upper(),
                    resource=resource_from_path(path),
                    description=operation.description or operation.summary,
                    source=(path, item, operation),
                )

    def input_schema(self, operation: OperationRef) -> Schema | None:
        """JSON schema of the request body."""
        _, _, op = self._source(operation)
        body = op.request_body
        if body is not None and body.ref:
            body = self._component(
                body.ref, REQUEST_BODY_REF_PREFIX, self.document.components.request_bodies
            )
        return _json_schema(body.content) if body is not None else None

    def output_schema(self, operation: OperationRef) -> Schema | None:
        """JSON schema of the first successful response."""
        _, _, op = self._source(operation)
        codes = [code for code in SUCCESS_STATUS_CODES if code in op.responses]
        codes += [
            code for code in op.responses if code.startswith("2") and code not in SUCCESS_STATUS_CODES
        ]
        for code in codes:
            response: Response | None = op.responses[code]
            if response is not None and response.ref:
                response = self._component(
                    response.ref, RESPONSE_REF_PREFIX, self.document.components.responses
                )
            if response is None:
                continue
            schema = _json_schema(response.content)
            if schema is not None:
                return schema
        return None

    def members(self, node: Schema, context: ResolutionContext) -> list[SchemaMember]:
        """List the properties of an object schema, ``allOf`` parts included."""
        schema = self.resolver.deref(node)
        if schema is None:
            self.resolver.unresolved(node.ref or "", context)
            return []

        members: list[SchemaMember] = []
        for part in schema.all_of:
            with context.guard(part.ref) as allowed:
                if allowed:
                    members.extend(self.members(part, context))

        for name, prop in schema.properties.items():
            member_context = context.for_field(name)
            resolved = self.resolver.deref(prop)
            nested, type_name = self._nested_object(prop)
            members.append(
                SchemaMember(
                    name=name,
                    field_type=self.resolver.field_type(prop, member_context),
                    required=name in schema.required,
                    sensitive=is_sensitive(prop) or is_sensitive(resolved),
                    description=prop.description or (resolved.description if resolved else None),
                    schema=nested,
                    type_name=type_name,
                )
            )
        return members

    def parameters(self, operation: OperationRef, context: ResolutionContext) -> list[SchemaMember]:
        """Path parameters, path-level ones first, operation-level ones overriding."""
        _, item, op = self._source(operation)
        merged: dict[tuple[str, str], Parameter] = {}
        for param in [*item.parameters, *op.parameters]:
            if param.ref:
                resolved = self._component(
                    param.ref, PARAMETER_REF_PREFIX, self.document.components.parameters
                )
                if resolved is None:
                    context.unresolved(param.ref)
                    continue
                param = resolved
            if not param.name or not param.location:
                continue
            merged[(param.name, param.location)] = param

        members = []
        for param in merged.values():
            if param.location != "path":
                continue
            param_context = context.for_field(param.name or "")
            field_type = (
                self.resolver.field_type(param.schema_, param_context) if param.schema_ else STRING
            )
            members.append(
                SchemaMember(
                    name=param.name or "",
                    field_type=field_type,
                    required=True,
                    sensitive=is_sensitive(param.schema_),
                    immutable=True,
                    description=param.description,
                )
            )
        return members

    def _nested_object(self, prop: Schema) -> tuple[Schema | None, str | None]:
        """Object schema a property holds directly or as array items."""
        resolved = self.resolver.deref(prop)
        type_name = prop.ref_name
        if resolved is not None and resolved.primary_type == "array" and resolved.items:
            type_name = resolved.items.ref_name
            resolved = self.resolver.deref(resolved.items)
        if resolved is None or not (resolved.properties or resolved.all_of):
            return None, None
        return resolved, type_name

    def _component(self, ref: str, prefix: str, components: dict[str, Any]) -> Any | None:
        if not ref.startswith(prefix):
            logger.warning("Unsupported reference %s", ref)
            return None
        return components.get(ref[len(prefix) :])

    @staticmethod
    def _source(operation: OperationRef) -> tuple[str, PathItem, Operation]:
        return operation.source


def _json_schema(content: dict[str, Any]) -> Schema | None:
    """Schema of the JSON media type, or of the first one declared."""
    if not content:
        return None
    media = content.get("application/json")
    if media is None:
        media = next((m for t, m in content.items() if "json" in t), None)
    if media is None:
        media = next(iter(content.values()))
    return media.schema_


def _enum_type(values: list[Any]) -> EnumType:
    return EnumType(tuple(str(v) for v in values if v is not None))
