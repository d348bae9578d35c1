"""Conversion entry points.

``convert`` takes one already parsed document, builds the adapter for its
format and runs the shared pipeline:

    >>> from schema_to_ir.convert import convert
    >>> result = convert(document, "discovery", "storage", "v1")
    >>> [r.name for r in result.service.resources]
    ['bucket']

Only a structurally invalid document raises; everything else ends up as
issues on the returned :class:`ConversionResult`.
"""

from __future__ import annotations

import logging
from typing import Any

from google.protobuf import descriptor_pb2

from schema_to_ir.adapters.discovery import DiscoveryAdapter, parse_discovery_document
from schema_to_ir.adapters.openapi import OpenApiAdapter, parse_openapi_document
from schema_to_ir.adapters.protobuf import ProtobufAdapter, parse_descriptor_set
from schema_to_ir.adapters.reflection import ReflectionAdapter, parse_client_snapshot
from schema_to_ir.adapters.smithy import SmithyAdapter, parse_smithy_model
from schema_to_ir.config import ConverterSettings, get_settings
from schema_to_ir.ir.service import Provider
from schema_to_ir.models.loader import SchemaFormat
from schema_to_ir.models.reflection import ClientSnapshot
from schema_to_ir.transform.pipeline import ConversionResult, FormatAdapter
from schema_to_ir.transform.transformer import IRTransformer
from schema_to_ir.validation.errors import UnknownFormatError

logger = logging.getLogger(__name__)


def build_adapter(
    document: Any,
    fmt: SchemaFormat | str,
    settings: ConverterSettings | None = None,
) -> FormatAdapter:
    """Parse a document into the adapter for its format.

    Raises
    ------
        UnknownFormatError: If ``fmt`` names no supported format.
        DocumentMalformedError: If the document does not have its format's structure.

    """
    schema_format = _schema_format(fmt)
    settings = settings or get_settings()

    if schema_format is SchemaFormat.SMITHY:
        return SmithyAdapter(parse_smithy_model(document), settings)
    if schema_format is SchemaFormat.OPENAPI:
        return OpenApiAdapter(parse_openapi_document(document), settings)
    if schema_format is SchemaFormat.DISCOVERY:
        return DiscoveryAdapter(parse_discovery_document(document), settings)
    if schema_format is SchemaFormat.PROTOBUF:
        return ProtobufAdapter(parse_descriptor_set(document), settings)
    return ReflectionAdapter(parse_client_snapshot(document), settings)


def convert(
    document: Any,
    fmt: SchemaFormat | str,
    service_name: str,
    version: str,
    provider_hint: Provider | str | None = None,
    settings: ConverterSettings | None = None,
) -> ConversionResult:
    """Convert one pre-parsed document into a ServiceDefinition.

    Args:
    ----
        document: The parsed document: a dict for the JSON/YAML formats, a
            FileDescriptorSet (or its bytes) for protobuf, a dict or
            ClientSnapshot for reflection.
        fmt: Source format.
        service_name: Name given to the service.
        version: Schema/API version recorded on the service.
        provider_hint: Provider to tag the service with instead of the
            format's default.
        settings: Converter settings; read from the environment if omitted.

    Returns:
    -------
        ConversionResult with the service and its warnings.

    Raises:
    ------
        UnknownFormatError: If ``fmt`` names no supported format.
        DocumentMalformedError: If the document cannot be read as ``fmt``.
        InvalidIRError: If the assembled IR breaks an invariant.

    """
    settings = settings or get_settings()
    adapter = build_adapter(document, fmt, settings)
    provider = Provider.parse(provider_hint) if provider_hint is not None else None
    logger.debug("Converting %s document as service %r", adapter.format_name, service_name)
    return IRTransformer(settings).transform(adapter, service_name, version, provider)


def convert_smithy(
    document: dict[str, Any],
    service_name: str,
    version: str,
    provider_hint: Provider | str | None = None,
    settings: ConverterSettings | None = None,
    service_id: str | None = None,
) -> ConversionResult:
    """Convert a Smithy JSON AST; ``service_id`` picks one of several services."""
    settings = settings or get_settings()
    adapter = SmithyAdapter(parse_smithy_model(document), settings, service_id=service_id)
    provider = Provider.parse(provider_hint) if provider_hint is not None else None
    return IRTransformer(settings).transform(adapter, service_name, version, provider)


def convert_openapi(
    document: dict[str, Any],
    service_name: str,
    version: str,
    provider_hint: Provider | str | None = None,
    settings: ConverterSettings | None = None,
) -> ConversionResult:
    """Convert an OpenAPI 3.0 document."""
    return convert(document, SchemaFormat.OPENAPI, service_name, version, provider_hint, settings)


def convert_discovery(
    document: dict[str, Any],
    service_name: str,
    version: str,
    provider_hint: Provider | str | None = None,
    settings: ConverterSettings | None = None,
) -> ConversionResult:
    """Convert a Google Discovery document."""
    return convert(document, SchemaFormat.DISCOVERY, service_name, version, provider_hint, settings)


def convert_protobuf(
    descriptor_set: descriptor_pb2.FileDescriptorSet | bytes,
    service_name: str,
    version: str,
    provider_hint: Provider | str | None = None,
    settings: ConverterSettings | None = None,
) -> ConversionResult:
    """Convert a compiled protobuf descriptor set."""
    return convert(
        descriptor_set, SchemaFormat.PROTOBUF, service_name, version, provider_hint, settings
    )


def convert_reflection(
    snapshot: ClientSnapshot | dict[str, Any],
    service_name: str,
    version: str,
    provider_hint: Provider | str | None = None,
    settings: ConverterSettings | None = None,
) -> ConversionResult:
    """Convert a reflection snapshot of a compiled client."""
    return convert(snapshot, SchemaFormat.REFLECTION, service_name, version, provider_hint, settings)


def _schema_format(fmt: SchemaFormat | str) -> SchemaFormat:
    if isinstance(fmt, SchemaFormat):
        return fmt
    try:
        return SchemaFormat(fmt.strip().lower())
    except ValueError:
        raise UnknownFormatError(fmt) from None
