"""Adapter for Smithy JSON AST models (AWS service models)."""

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
from schema_to_ir.models.smithy import (
    DOCUMENTATION_TRAIT,
    ENUM_TRAIT,
    ENUM_VALUE_TRAIT,
    HTTP_LABEL_TRAIT,
    HTTP_TRAIT,
    REQUIRED_TRAIT,
    SENSITIVE_TRAIT,
    Shape,
    SmithyModel,
    is_prelude,
    shape_name,
)
from schema_to_ir.transform.pipeline import FormatAdapter, OperationRef, SchemaMember
from schema_to_ir.transform.resolver import SchemaResolver
from schema_to_ir.validation.errors import DocumentMalformedError

if TYPE_CHECKING:
    from schema_to_ir.config import ConverterSettings
    from schema_to_ir.transform.resolver import ResolutionContext

logger = logging.getLogger(__name__)

# Simple shape types by their AST type tag
SCALAR_SHAPE_TYPES: dict[str, FieldType] = {
    "string": STRING,
    "blob": STRING,
    "boolean": BOOLEAN,
    "byte": INTEGER,
    "short": INTEGER,
    "integer": INTEGER,
    "long": INTEGER,
    "bigInteger": INTEGER,
    "intEnum": INTEGER,
    "float": FLOAT,
    "double": FLOAT,
    "bigDecimal": FLOAT,
    "timestamp": DATETIME,
    "document": MapType(STRING, STRING),
}

# Prelude shapes by local name (smithy.api#String, smithy.api#PrimitiveLong, ...)
PRELUDE_TYPES: dict[str, FieldType] = {
    "String": STRING,
    "Blob": STRING,
    "Boolean": BOOLEAN,
    "PrimitiveBoolean": BOOLEAN,
    "Byte": INTEGER,
    "PrimitiveByte": INTEGER,
    "Short": INTEGER,
    "PrimitiveShort": INTEGER,
    "Integer": INTEGER,
    "PrimitiveInteger": INTEGER,
    "Long": INTEGER,
    "PrimitiveLong": INTEGER,
    "BigInteger": INTEGER,
    "Float": FLOAT,
    "PrimitiveFloat": FLOAT,
    "Double": FLOAT,
    "PrimitiveDouble": FLOAT,
    "BigDecimal": FLOAT,
    "Timestamp": DATETIME,
    "Document": MapType(STRING, STRING),
    "Unit": ObjectType(),
}

STRUCTURED_SHAPE_TYPES = frozenset({"structure", "union"})


def parse_smithy_model(document: dict[str, Any]) -> SmithyModel:
    """Validate a parsed JSON AST into a SmithyModel.

    Raises
    ------
        DocumentMalformedError: If the document is not a Smithy JSON AST.

    """
    if not isinstance(document, dict):
        raise DocumentMalformedError("Smithy model must be a JSON object")
    try:
        return SmithyModel.model_validate(document)
    except ValidationError as e:
        raise DocumentMalformedError(
            "Document is not a valid Smithy JSON AST",
            details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e


class SmithyResolver(SchemaResolver[Shape]):
    """Resolves shape ids to shapes and shapes to field types."""

    def __init__(self, model: SmithyModel) -> None:
        """Initialize with the model whose shapes are resolved."""
        self.model = model

    def lookup(self, reference: str) -> Shape | None:
        """Find a shape by id or by local name."""
        found = self.model.find_shape(reference)
        return found[1] if found else None

    def resolve_type(self, reference: str, context: ResolutionContext) -> FieldType:
        """Resolve a shape id, mapping prelude shapes by name."""
        if is_prelude(reference) and reference not in self.model.shapes:
            prelude = PRELUDE_TYPES.get(shape_name(reference))
            return prelude if prelude is not None else context.unsupported(reference)
        return super().resolve_type(reference, context)

    def field_type(self, node: Shape, context: ResolutionContext) -> FieldType:
        """Map a shape to a field type by its type tag."""
        shape_type = node.type

        if shape_type == "string" and node.has_trait(ENUM_TRAIT):
            values = node.traits[ENUM_TRAIT]
            return EnumType(
                tuple(str(v["value"]) for v in values if isinstance(v, dict) and "value" in v)
            )
        if shape_type == "enum":
            return EnumType(
                tuple(
                    str(member.traits.get(ENUM_VALUE_TRAIT, name))
                    for name, member in node.members.items()
                )
            )
        if shape_type in SCALAR_SHAPE_TYPES:
            return SCALAR_SHAPE_TYPES[shape_type]
        if shape_type in ("list", "set"):
            if node.member is None:
                return ListType(STRING)
            return ListType(self.resolve_type(node.member.target, context.child("member")))
        if shape_type == "map":
            key = (
                self.resolve_type(node.key.target, context.child("key")) if node.key else STRING
            )
            value = (
                self.resolve_type(node.value.target, context.child("value"))
                if node.value
                else STRING
            )
            return MapType(key, value)
        if shape_type in STRUCTURED_SHAPE_TYPES:
            return ObjectType(
                tuple(
                    (name, self.resolve_type(member.target, context.child(name)))
                    for name, member in node.members.items()
                )
            )
        return context.unsupported(shape_type)


class SmithyAdapter(FormatAdapter):
    """Exposes a Smithy service's operations and shapes to the pipeline.

    Operations bound to a resource shape are grouped under that resource;
    operations listed directly on the service are grouped by the resource
    token of their name.
    """

    format_name = "smithy"
    default_provider = Provider.AWS

    def __init__(
        self,
        model: SmithyModel,
        settings: ConverterSettings | None = None,
        service_id: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
        ----
            model: Parsed Smithy model.
            settings: Converter settings.
            service_id: Service shape to convert; the first one by default.

        Raises:
        ------
            DocumentMalformedError: If the model has no such service shape.

        """
        super().__init__(settings)
        self.model = model
        self.resolver = SmithyResolver(model)
        self.service_id, self.service = self._select_service(service_id)

    def _select_service(self, service_id: str | None) -> tuple[str, Shape]:
        if service_id is not None:
            found = self.model.find_shape(service_id)
            if found is None or found[1].type != "service":
                raise DocumentMalformedError(f"Service shape {service_id!r} not found", "shapes")
            return found
        services = self.model.services()
        if not services:
            raise DocumentMalformedError("Model contains no service shape", "shapes")
        return services[0]

    @property
    def service_version(self) -> str | None:
        """Version declared on the service shape."""
        return self.service.version

    def enumerate_operations(self) -> Iterator[OperationRef]:
        """Yield service operations, then resource-bound operations."""
        seen: set[str] = set()
        for ref in self.service.operations:
            yield from self._operation(ref.target, None, seen)
        for ref in self.service.resources:
            yield from self._resource_operations(ref.target, seen, set())

    def _resource_operations(
        self,
        resource_id: str,
        seen: set[str],
        visited: set[str],
    ) -> Iterator[OperationRef]:
        if resource_id in visited:
            return
        visited.add(resource_id)
        found = self.model.find_shape(resource_id)
        if found is None:
            logger.warning("Resource shape %s is not defined", resource_id)
            return
        resource = found[1]
        hint = shape_name(found[0])
        for ref in [
            *resource.lifecycle_bindings(),
            *resource.operations,
            *resource.collection_operations,
        ]:
            yield from self._operation(ref.target, hint, seen)
        for ref in resource.resources:
            yield from self._resource_operations(ref.target, seen, visited)

    def _operation(
        self,
        operation_id: str,
        resource_hint: str | None,
        seen: set[str],
    ) -> Iterator[OperationRef]:
        if operation_id in seen:
            return
        seen.add(operation_id)
        found = self.model.find_shape(operation_id)
        shape = found[1] if found else None
        if shape is None:
            logger.warning("Operation shape %s is not defined; no fields extracted", operation_id)
        http = shape.traits.get(HTTP_TRAIT) if shape else None
        yield OperationRef(
            identifier=shape_name(operation_id),
            verb=http.get("method") if isinstance(http, dict) else None,
            resource=resource_hint,
            description=shape.documentation if shape else None,
            source=shape,
        )

    def input_schema(self, operation: OperationRef) -> str | None:
        """Shape id of the operation input."""
        shape: Shape | None = operation.source
        return shape.input.target if shape and shape.input else None

    def output_schema(self, operation: OperationRef) -> str | None:
        """Shape id of the operation output."""
        shape: Shape | None = operation.source
        return shape.output.target if shape and shape.output else None

    def members(self, node: str, context: ResolutionContext) -> list[SchemaMember]:
        """List the members of a structure shape."""
        shape = self.resolver.resolve(node)
        if shape is None:
            if not is_prelude(node):
                self.resolver.unresolved(node, context)
            return []
        if shape.type not in STRUCTURED_SHAPE_TYPES:
            return []

        members = []
        for name, member in shape.members.items():
            member_context = context.for_field(name)
            target = self.resolver.lookup(member.target) if not is_prelude(member.target) else None
            nested_id = self._nested_structure(member.target, target)
            description = member.traits.get(DOCUMENTATION_TRAIT) or (
                target.documentation if target else None
            )
            members.append(
                SchemaMember(
                    name=name,
                    field_type=self.resolver.resolve_type(member.target, member_context),
                    required=REQUIRED_TRAIT in member.traits,
                    sensitive=SENSITIVE_TRAIT in member.traits
                    or (target is not None and target.has_trait(SENSITIVE_TRAIT)),
                    immutable=HTTP_LABEL_TRAIT in member.traits,
                    description=description,
                    schema=nested_id,
                    type_name=shape_name(nested_id) if nested_id else None,
                )
            )
        return members

    def _nested_structure(self, target_id: str, target: Shape | None) -> str | None:
        """Shape id of the structure a member holds directly or as list items."""
        if target is None:
            return None
        if target.type in STRUCTURED_SHAPE_TYPES:
            return target_id
        if target.type in ("list", "set") and target.member is not None:
            item = self.resolver.lookup(target.member.target)
            if item is not None and item.type in STRUCTURED_SHAPE_TYPES:
                return target.member.target
        return None
