"""Format adapters: the format-specific half of each conversion."""

from schema_to_ir.adapters.discovery import DiscoveryAdapter, parse_discovery_document
from schema_to_ir.adapters.openapi import OpenApiAdapter, parse_openapi_document
from schema_to_ir.adapters.protobuf import ProtobufAdapter, parse_descriptor_set
from schema_to_ir.adapters.reflection import ReflectionAdapter, parse_client_snapshot
from schema_to_ir.adapters.smithy import SmithyAdapter, parse_smithy_model

__all__ = [
    "DiscoveryAdapter",
    "OpenApiAdapter",
    "ProtobufAdapter",
    "ReflectionAdapter",
    "SmithyAdapter",
    "parse_client_snapshot",
    "parse_descriptor_set",
    "parse_discovery_document",
    "parse_openapi_document",
    "parse_smithy_model",
]
