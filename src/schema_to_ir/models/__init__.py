"""Pydantic models for the pre-parsed source documents.

Each supported format has its own module describing the parts of the
document the converter reads:

- smithy: Smithy JSON AST (AWS service models)
- openapi: OpenAPI 3.0 documents
- discovery: Google API Discovery documents
- reflection: snapshots of compiled client libraries

Protobuf descriptor sets use the ``descriptor_pb2`` messages directly.
The loader module reads any of them from disk and detects their format.
"""

from schema_to_ir.models.discovery import DiscoveryDocument
from schema_to_ir.models.loader import (
    LoaderError,
    SchemaFormat,
    detect_format,
    infer_service_name,
    load_descriptor_set,
    load_document,
)
from schema_to_ir.models.openapi import OpenApiDocument
from schema_to_ir.models.reflection import ClientSnapshot, snapshot_from_module
from schema_to_ir.models.smithy import SmithyModel

__all__ = [
    "ClientSnapshot",
    "DiscoveryDocument",
    "LoaderError",
    "OpenApiDocument",
    "SchemaFormat",
    "SmithyModel",
    "detect_format",
    "infer_service_name",
    "load_descriptor_set",
    "load_document",
    "snapshot_from_module",
]
