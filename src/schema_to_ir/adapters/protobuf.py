"""Adapter for compiled protobuf descriptor sets (gRPC APIs).

Works directly on ``descriptor_pb2`` messages rather than a descriptor
pool, so descriptor sets that omit their imports still convert; types
from missing files degrade to the fallback type.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

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
from schema_to_ir.transform.classifier import resource_suffix
from schema_to_ir.transform.pipeline import FormatAdapter, OperationRef, SchemaMember
from schema_to_ir.transform.resolver import SchemaResolver
from schema_to_ir.validation.errors import DocumentMalformedError

if TYPE_CHECKING:
    from schema_to_ir.config import ConverterSettings
    from schema_to_ir.transform.resolver import ResolutionContext

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

SCALAR_FIELD_TYPES: dict[int, FieldType] = {
    FieldDescriptorProto.TYPE_DOUBLE: FLOAT,
    FieldDescriptorProto.TYPE_FLOAT: FLOAT,
    FieldDescriptorProto.TYPE_INT64: INTEGER,
    FieldDescriptorProto.TYPE_UINT64: INTEGER,
    FieldDescriptorProto.TYPE_INT32: INTEGER,
    FieldDescriptorProto.TYPE_FIXED64: INTEGER,
    FieldDescriptorProto.TYPE_FIXED32: INTEGER,
    FieldDescriptorProto.TYPE_UINT32: INTEGER,
    FieldDescriptorProto.TYPE_SFIXED32: INTEGER,
    FieldDescriptorProto.TYPE_SFIXED64: INTEGER,
    FieldDescriptorProto.TYPE_SINT32: INTEGER,
    FieldDescriptorProto.TYPE_SINT64: INTEGER,
    FieldDescriptorProto.TYPE_BOOL: BOOLEAN,
    FieldDescriptorProto.TYPE_STRING: STRING,
    FieldDescriptorProto.TYPE_BYTES: STRING,
}

WELL_KNOWN_TYPES: dict[str, FieldType] = {
    ".google.protobuf.Timestamp": DATETIME,
    ".google.protobuf.Duration": STRING,
    ".google.protobuf.FieldMask": STRING,
    ".google.protobuf.Any": STRING,
    ".google.protobuf.Value": STRING,
    ".google.protobuf.Struct": MapType(STRING, STRING),
    ".google.protobuf.ListValue": ListType(STRING),
    ".google.protobuf.Empty": ObjectType(),
    ".google.protobuf.DoubleValue": FLOAT,
    ".google.protobuf.FloatValue": FLOAT,
    ".google.protobuf.Int64Value": INTEGER,
    ".google.protobuf.UInt64Value": INTEGER,
    ".google.protobuf.Int32Value": INTEGER,
    ".google.protobuf.UInt32Value": INTEGER,
    ".google.protobuf.BoolValue": BOOLEAN,
    ".google.protobuf.StringValue": STRING,
    ".google.protobuf.BytesValue": STRING,
}

# FileDescriptorProto / DescriptorProto / ServiceDescriptorProto field numbers,
# as used in SourceCodeInfo.Location.path
_FILE_MESSAGE = 4
_FILE_ENUM = 5
_FILE_SERVICE = 6
_MESSAGE_FIELD = 2
_MESSAGE_NESTED = 3
_SERVICE_METHOD = 2


def parse_descriptor_set(
    data: bytes | descriptor_pb2.FileDescriptorSet,
) -> descriptor_pb2.FileDescriptorSet:
    """Return a FileDescriptorSet, decoding serialized bytes if needed.

    Raises
    ------
        DocumentMalformedError: If the bytes are not a FileDescriptorSet.

    """
    if isinstance(data, descriptor_pb2.FileDescriptorSet):
        return data
    if not isinstance(data, (bytes, bytearray)):
        raise DocumentMalformedError(
            f"Expected a FileDescriptorSet or its serialized bytes, got {type(data).__name__}"
        )
    try:
        return descriptor_pb2.FileDescriptorSet.FromString(bytes(data))
    except DecodeError as e:
        raise DocumentMalformedError(f"Cannot decode descriptor set: {e}") from e


def full_name(type_name: str) -> str:
    """Fully qualified name with the leading dot protoc uses."""
    return type_name if type_name.startswith(".") else f".{type_name}"


@dataclass(frozen=True)
class IndexedMessage:
    """A message descriptor with the context needed to describe it."""

    descriptor: descriptor_pb2.DescriptorProto
    file_name: str
    path: tuple[int, ...]


class DescriptorIndex:
    """Messages, enums and comments of a descriptor set, by qualified name."""

    def __init__(self, descriptor_set: descriptor_pb2.FileDescriptorSet) -> None:
        """Index every file of the set."""
        self.messages: dict[str, IndexedMessage] = {}
        self.enums: dict[str, descriptor_pb2.EnumDescriptorProto] = {}
        self.comments: dict[tuple[str, tuple[int, ...]], str] = {}

        for file in descriptor_set.file:
            prefix = f".{file.package}" if file.package else ""
            for location in file.source_code_info.location:
                comment = location.leading_comments.strip()
                if comment:
                    self.comments[(file.name, tuple(location.path))] = comment
            for i, message in enumerate(file.message_type):
                self._add_message(message, prefix, file.name, (_FILE_MESSAGE, i))
            for enum in file.enum_type:
                self.enums[f"{prefix}.{enum.name}"] = enum

    def _add_message(
        self,
        message: descriptor_pb2.DescriptorProto,
        prefix: str,
        file_name: str,
        path: tuple[int, ...],
    ) -> None:
        name = f"{prefix}.{message.name}"
        self.messages[name] = IndexedMessage(message, file_name, path)
        for i, nested in enumerate(message.nested_type):
            self._add_message(nested, name, file_name, (*path, _MESSAGE_NESTED, i))
        for enum in message.enum_type:
            self.enums[f"{name}.{enum.name}"] = enum

    def comment(self, file_name: str, path: tuple[int, ...]) -> str | None:
        """Leading comment attached to a source location."""
        return self.comments.get((file_name, path))


class ProtobufResolver(SchemaResolver[IndexedMessage]):
    """Resolves message names and maps message fields to types."""

    def __init__(self, index: DescriptorIndex) -> None:
        """Initialize with an index of the descriptor set."""
        self.index = index

    def lookup(self, reference: str) -> IndexedMessage | None:
        """Find a message by qualified name."""
        return self.index.messages.get(full_name(reference))

    def resolve_type(self, reference: str, context: ResolutionContext) -> FieldType:
        """Resolve a message name, mapping well-known types first."""
        well_known = WELL_KNOWN_TYPES.get(full_name(reference))
        if well_known is not None:
            return well_known
        return super().resolve_type(full_name(reference), context)

    def field_type(self, node: IndexedMessage, context: ResolutionContext) -> FieldType:
        """Map a message to an object of its fields."""
        return ObjectType(
            tuple(
                (field.name, self.descriptor_type(field, context.child(field.name)))
                for field in node.descriptor.field
            )
        )

    def descriptor_type(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        context: ResolutionContext,
    ) -> FieldType:
        """Map a single field descriptor, repetition and maps included."""
        map_entry = self.map_entry(field)
        if map_entry is not None:
            key_field, value_field = _map_fields(map_entry)
            key = SCALAR_FIELD_TYPES.get(key_field.type, STRING) if key_field else STRING
            value = self._base_type(value_field, context) if value_field else STRING
            return MapType(key, value)

        base = self._base_type(field, context)
        if field.label == FieldDescriptorProto.LABEL_REPEATED:
            return ListType(base)
        return base

    def map_entry(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
    ) -> descriptor_pb2.DescriptorProto | None:
        """The synthetic map entry message behind a map field, if it is one."""
        if field.type != FieldDescriptorProto.TYPE_MESSAGE:
            return None
        indexed = self.lookup(field.type_name)
        if indexed is not None and indexed.descriptor.options.map_entry:
            return indexed.descriptor
        return None

    def _base_type(
        self,
        field: descriptor_pb2.FieldDescriptorProto,
        context: ResolutionContext,
    ) -> FieldType:
        if field.type in SCALAR_FIELD_TYPES:
            return SCALAR_FIELD_TYPES[field.type]
        if field.type == FieldDescriptorProto.TYPE_ENUM:
            enum = self.index.enums.get(full_name(field.type_name))
            if enum is None:
                return context.unresolved(field.type_name)
            return EnumType(tuple(value.name for value in enum.value))
        if field.type == FieldDescriptorProto.TYPE_MESSAGE:
            return self.resolve_type(field.type_name, context)
        return context.unsupported(FieldDescriptorProto.Type.Name(field.type))


class ProtobufAdapter(FormatAdapter):
    """Exposes the RPC methods and messages of a descriptor set to the pipeline."""

    format_name = "protobuf"
    default_provider = Provider.GCP

    def __init__(
        self,
        descriptor_set: descriptor_pb2.FileDescriptorSet,
        settings: ConverterSettings | None = None,
    ) -> None:
        """Initialize the adapter with a descriptor set."""
        super().__init__(settings)
        self.descriptor_set = descriptor_set
        self.index = DescriptorIndex(descriptor_set)
        self.resolver = ProtobufResolver(self.index)

    def enumerate_operations(self) -> Iterator[OperationRef]:
        """Yield every RPC method, file by file, service by service."""
        for file in self.descriptor_set.file:
            for s, service in enumerate(file.service):
                for m, method in enumerate(service.method):
                    path = (_FILE_SERVICE, s, _SERVICE_METHOD, m)
                    yield OperationRef(
                        identifier=method.name,
                        resource=resource_suffix(method.name),
                        description=self.index.comment(file.name, path),
                        source=method,
                    )

    def input_schema(self, operation: OperationRef) -> str | None:
        """Qualified name of the request message."""
        method: descriptor_pb2.MethodDescriptorProto = operation.source
        return method.input_type or None

    def output_schema(self, operation: OperationRef) -> str | None:
        """Qualified name of the response message."""
        method: descriptor_pb2.MethodDescriptorProto = operation.source
        return method.output_type or None

    def members(self, node: str, context: ResolutionContext) -> list[SchemaMember]:
        """List the fields of a message."""
        indexed = self.resolver.lookup(node)
        if indexed is None:
            if full_name(node) not in WELL_KNOWN_TYPES:
                context.unresolved(node)
            return []

        members = []
        for i, field in enumerate(indexed.descriptor.field):
            field_context = context.for_field(field.name)
            nested = self._nested_message(field)
            members.append(
                SchemaMember(
                    name=field.name,
                    field_type=self.resolver.descriptor_type(field, field_context),
                    required=field.label == FieldDescriptorProto.LABEL_REQUIRED,
                    sensitive=field.options.debug_redact,
                    description=self.index.comment(
                        indexed.file_name, (*indexed.path, _MESSAGE_FIELD, i)
                    ),
                    schema=nested,
                    type_name=nested.rsplit(".", 1)[-1] if nested else None,
                )
            )
        return members

    def _nested_message(self, field: descriptor_pb2.FieldDescriptorProto) -> str | None:
        """Qualified name of a user-defined message held by a field."""
        if field.type != FieldDescriptorProto.TYPE_MESSAGE:
            return None
        name = full_name(field.type_name)
        if name in WELL_KNOWN_TYPES or self.resolver.map_entry(field) is not None:
            return None
        return name if name in self.index.messages else None


def _map_fields(
    entry: descriptor_pb2.DescriptorProto,
) -> tuple[
    descriptor_pb2.FieldDescriptorProto | None,
    descriptor_pb2.FieldDescriptorProto | None,
]:
    by_name = {field.name: field for field in entry.field}
    return by_name.get("key"), by_name.get("value")
