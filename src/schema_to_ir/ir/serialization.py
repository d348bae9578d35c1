"""Stable plain-data encoding of the IR.

Field types use a tagged union keyed by ``"type"``; every other record is a
flat mapping of its attributes. The encoding only contains JSON-compatible
values so it can be written as JSON or YAML without custom hooks.

Example:
-------
    >>> field_type_to_dict(ListType(STRING))
    {'type': 'list', 'item': {'type': 'string'}}

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

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
    FLOAT,
    INTEGER,
    STRING,
    EnumType,
    FieldType,
    ListType,
    MapType,
    ObjectType,
)

FORMAT_VERSION = 1

_SCALARS: dict[str, FieldType] = {
    STRING.tag: STRING,
    INTEGER.tag: INTEGER,
    BOOLEAN.tag: BOOLEAN,
    FLOAT.tag: FLOAT,
    DATETIME.tag: DATETIME,
}


class IRDecodeError(ValueError):
    """Raised when serialized IR cannot be decoded."""

    def __init__(self, message: str, path: str = "") -> None:
        """Initialize with a message and the offending location."""
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


# -- field types ---------------------------------------------------------------


def field_type_to_dict(field_type: FieldType) -> dict[str, Any]:
    """Encode a field type as a tagged mapping."""
    if isinstance(field_type, ListType):
        return {"type": field_type.tag, "item": field_type_to_dict(field_type.item)}
    if isinstance(field_type, MapType):
        return {
            "type": field_type.tag,
            "key": field_type_to_dict(field_type.key),
            "value": field_type_to_dict(field_type.value),
        }
    if isinstance(field_type, EnumType):
        return {"type": field_type.tag, "variants": list(field_type.variants)}
    if isinstance(field_type, ObjectType):
        return {
            "type": field_type.tag,
            "fields": {name: field_type_to_dict(member) for name, member in field_type.fields},
        }
    return {"type": field_type.tag}


def field_type_from_dict(data: Mapping[str, Any], path: str = "field_type") -> FieldType:
    """Decode a tagged mapping into a field type."""
    if not isinstance(data, Mapping):
        raise IRDecodeError("expected a mapping", path)
    tag = data.get("type")
    if tag in _SCALARS:
        return _SCALARS[tag]
    if tag == ListType.tag:
        return ListType(field_type_from_dict(_require(data, "item", path), f"{path}.item"))
    if tag == MapType.tag:
        return MapType(
            key=field_type_from_dict(_require(data, "key", path), f"{path}.key"),
            value=field_type_from_dict(_require(data, "value", path), f"{path}.value"),
        )
    if tag == EnumType.tag:
        return EnumType(tuple(str(v) for v in data.get("variants", [])))
    if tag == ObjectType.tag:
        members = data.get("fields", {})
        if not isinstance(members, Mapping):
            raise IRDecodeError("object fields must be a mapping", path)
        return ObjectType(
            tuple(
                (name, field_type_from_dict(member, f"{path}.fields.{name}"))
                for name, member in members.items()
            )
        )
    raise IRDecodeError(f"unknown field type tag {tag!r}", path)


# -- records -------------------------------------------------------------------


def field_to_dict(field_def: FieldDefinition) -> dict[str, Any]:
    """Encode a field definition."""
    return {
        "name": field_def.name,
        "field_type": field_type_to_dict(field_def.field_type),
        "required": field_def.required,
        "sensitive": field_def.sensitive,
        "immutable": field_def.immutable,
        "description": field_def.description,
        "response_accessor": field_def.response_accessor,
    }


def field_from_dict(data: Mapping[str, Any], path: str = "field") -> FieldDefinition:
    """Decode a field definition."""
    return FieldDefinition(
        name=_require(data, "name", path),
        field_type=field_type_from_dict(_require(data, "field_type", path), f"{path}.field_type"),
        required=bool(data.get("required", False)),
        sensitive=bool(data.get("sensitive", False)),
        immutable=bool(data.get("immutable", False)),
        description=data.get("description"),
        response_accessor=data.get("response_accessor"),
    )


def block_to_dict(block: BlockDefinition) -> dict[str, Any]:
    """Encode a block definition, including nested blocks."""
    return {
        "name": block.name,
        "description": block.description,
        "attributes": [field_to_dict(attr) for attr in block.attributes],
        "blocks": [block_to_dict(nested) for nested in block.blocks],
        "nesting_mode": block.nesting_mode.value,
        "min_items": block.min_items,
        "max_items": block.max_items,
        "sdk_type_name": block.sdk_type_name,
        "sdk_accessor_method": block.sdk_accessor_method,
    }


def block_from_dict(data: Mapping[str, Any], path: str = "block") -> BlockDefinition:
    """Decode a block definition."""
    try:
        nesting_mode = NestingMode(data.get("nesting_mode", NestingMode.SINGLE.value))
    except ValueError as e:
        raise IRDecodeError(str(e), f"{path}.nesting_mode") from None
    return BlockDefinition(
        name=_require(data, "name", path),
        description=data.get("description"),
        attributes=_decode_list(data, "attributes", path, field_from_dict),
        blocks=_decode_list(data, "blocks", path, block_from_dict),
        nesting_mode=nesting_mode,
        min_items=int(data.get("min_items", 0)),
        max_items=int(data.get("max_items", 0)),
        sdk_type_name=data.get("sdk_type_name"),
        sdk_accessor_method=data.get("sdk_accessor_method"),
    )


def mapping_to_dict(mapping: OperationMapping | None) -> dict[str, Any] | None:
    """Encode an operation mapping, keeping None as None."""
    if mapping is None:
        return None
    return {
        "sdk_operation": mapping.sdk_operation,
        "additional_operations": list(mapping.additional_operations),
    }


def mapping_from_dict(data: Mapping[str, Any] | None, path: str) -> OperationMapping | None:
    """Decode an operation mapping."""
    if data is None:
        return None
    return OperationMapping(
        sdk_operation=_require(data, "sdk_operation", path),
        additional_operations=tuple(data.get("additional_operations", [])),
    )


def operations_to_dict(operations: Operations) -> dict[str, Any]:
    """Encode all five slots, unbound ones as None."""
    return {slot: mapping_to_dict(operations.get(slot)) for slot in OPERATION_SLOTS}


def operations_from_dict(data: Mapping[str, Any], path: str = "operations") -> Operations:
    """Decode operation slots."""
    return Operations(
        create=mapping_from_dict(data.get("create"), f"{path}.create"),
        read=mapping_from_dict(data.get("read"), f"{path}.read"),
        update=mapping_from_dict(data.get("update"), f"{path}.update"),
        delete=mapping_from_dict(data.get("delete"), f"{path}.delete"),
        import_=mapping_from_dict(data.get("import"), f"{path}.import"),
    )


def resource_to_dict(resource: ResourceDefinition) -> dict[str, Any]:
    """Encode a resource definition."""
    return {
        "name": resource.name,
        "description": resource.description,
        "fields": [field_to_dict(f) for f in resource.fields],
        "outputs": [field_to_dict(f) for f in resource.outputs],
        "blocks": [block_to_dict(b) for b in resource.blocks],
        "id_field": resource.id_field,
        "operations": operations_to_dict(resource.operations),
    }


def resource_from_dict(data: Mapping[str, Any], path: str = "resource") -> ResourceDefinition:
    """Decode a resource definition."""
    return ResourceDefinition(
        name=_require(data, "name", path),
        description=data.get("description"),
        fields=_decode_list(data, "fields", path, field_from_dict),
        outputs=_decode_list(data, "outputs", path, field_from_dict),
        blocks=_decode_list(data, "blocks", path, block_from_dict),
        id_field=data.get("id_field"),
        operations=operations_from_dict(data.get("operations") or {}, f"{path}.operations"),
    )


def data_source_to_dict(data_source: DataSourceDefinition) -> dict[str, Any]:
    """Encode a data source definition."""
    return {
        "name": data_source.name,
        "description": data_source.description,
        "arguments": [field_to_dict(f) for f in data_source.arguments],
        "outputs": [field_to_dict(f) for f in data_source.outputs],
        "read": mapping_to_dict(data_source.read),
        "list": mapping_to_dict(data_source.list),
    }


def data_source_from_dict(
    data: Mapping[str, Any], path: str = "data_source"
) -> DataSourceDefinition:
    """Decode a data source definition."""
    return DataSourceDefinition(
        name=_require(data, "name", path),
        description=data.get("description"),
        arguments=_decode_list(data, "arguments", path, field_from_dict),
        outputs=_decode_list(data, "outputs", path, field_from_dict),
        read=mapping_from_dict(data.get("read"), f"{path}.read"),
        list=mapping_from_dict(data.get("list"), f"{path}.list"),
    )


def service_to_dict(service: ServiceDefinition) -> dict[str, Any]:
    """Encode a whole service, ready for JSON or YAML output."""
    return {
        "format_version": FORMAT_VERSION,
        "provider": service.provider.value,
        "name": service.name,
        "sdk_version": service.sdk_version,
        "resources": [resource_to_dict(r) for r in service.resources],
        "data_sources": [data_source_to_dict(d) for d in service.data_sources],
    }


def service_from_dict(data: Mapping[str, Any]) -> ServiceDefinition:
    """Decode a whole service.

    Raises
    ------
        IRDecodeError: If the mapping is not a valid encoded service.

    """
    if not isinstance(data, Mapping):
        raise IRDecodeError("expected a mapping at the top level")
    version = data.get("format_version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise IRDecodeError(f"unsupported format_version {version!r}", "format_version")
    try:
        provider = Provider.parse(_require(data, "provider", "service"))
    except ValueError as e:
        raise IRDecodeError(str(e), "provider") from None
    return ServiceDefinition(
        provider=provider,
        name=_require(data, "name", "service"),
        sdk_version=str(_require(data, "sdk_version", "service")),
        resources=_decode_list(data, "resources", "service", resource_from_dict),
        data_sources=_decode_list(data, "data_sources", "service", data_source_from_dict),
    )


def _require(data: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise IRDecodeError(f"missing required key {key!r}", path)
    return data[key]


def _decode_list(
    data: Mapping[str, Any],
    key: str,
    path: str,
    decode: Callable[[Mapping[str, Any], str], Any],
) -> tuple[Any, ...]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise IRDecodeError(f"{key!r} must be a list", path)
    return tuple(decode(item, f"{path}.{key}[{i}]") for i, item in enumerate(items))
