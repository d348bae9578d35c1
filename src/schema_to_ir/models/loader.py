"""Schema file loading and format detection."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = frozenset({".yaml", ".yml", ".json"})
DESCRIPTOR_SUFFIXES = frozenset({".pb", ".desc", ".binpb"})


class SchemaFormat(str, Enum):
    """Source schema formats the converter understands."""

    SMITHY = "smithy"
    OPENAPI = "openapi"
    DISCOVERY = "discovery"
    PROTOBUF = "protobuf"
    REFLECTION = "reflection"


# Substrings of a file name that give its format away, checked in order.
FILENAME_HINTS: tuple[tuple[str, SchemaFormat], ...] = (
    ("openapi", SchemaFormat.OPENAPI),
    ("swagger", SchemaFormat.OPENAPI),
    ("discovery", SchemaFormat.DISCOVERY),
    ("smithy", SchemaFormat.SMITHY),
    ("snapshot", SchemaFormat.REFLECTION),
    ("reflection", SchemaFormat.REFLECTION),
)


class LoaderError(Exception):
    """Error during schema file loading."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize LoaderError.

        Args:
        ----
            message: Error message describing what went wrong.
            path: Optional path to the file that caused the error.

        """
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def load_document(path: Path) -> dict[str, Any]:
    """Load a YAML or JSON schema document and return the raw dictionary.

    Args:
    ----
        path: Path to the document.

    Returns:
    -------
        Parsed dictionary from the file.

    Raises:
    ------
        LoaderError: If the file cannot be loaded or parsed.

    """
    _check_file(path)

    suffix = path.suffix.lower()
    if suffix not in DOCUMENT_SUFFIXES:
        raise LoaderError(
            f"Unsupported file extension: {suffix}. Use .yaml, .yml, or .json",
            path,
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LoaderError(f"YAML parsing error: {e}", path) from e
    except OSError as e:
        raise LoaderError(f"File read error: {e}", path) from e

    if data is None:
        raise LoaderError("File is empty", path)

    if not isinstance(data, dict):
        raise LoaderError(
            f"Expected dictionary at root level, got {type(data).__name__}",
            path,
        )

    return data


def load_descriptor_set(path: Path) -> descriptor_pb2.FileDescriptorSet:
    """Load a compiled descriptor set (``protoc --descriptor_set_out``).

    Raises
    ------
        LoaderError: If the file cannot be read or is not a descriptor set.

    """
    _check_file(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise LoaderError(f"File read error: {e}", path) from e

    try:
        return descriptor_pb2.FileDescriptorSet.FromString(data)
    except DecodeError as e:
        raise LoaderError(f"Not a FileDescriptorSet: {e}", path) from e


def detect_format(path: Path, document: dict[str, Any] | None = None) -> SchemaFormat:
    """Guess the format of a schema file.

    Binary descriptor suffixes win, then hints in the file name, then
    markers in the document content. Anything else is taken for Smithy.
    """
    if path.suffix.lower() in DESCRIPTOR_SUFFIXES:
        return SchemaFormat.PROTOBUF

    name = path.name.lower()
    for hint, schema_format in FILENAME_HINTS:
        if hint in name:
            return schema_format

    if document is not None:
        if "openapi" in document or "swagger" in document:
            return SchemaFormat.OPENAPI
        if "discoveryVersion" in document or str(document.get("kind", "")).startswith(
            "discovery#"
        ):
            return SchemaFormat.DISCOVERY
        if "shapes" in document:
            return SchemaFormat.SMITHY
        if {"package", "operations", "types"} <= document.keys():
            return SchemaFormat.REFLECTION

    logger.debug("No format markers in %s; assuming smithy", path)
    return SchemaFormat.SMITHY


def infer_service_name(path: Path) -> str:
    """Derive a service name from a file name.

    ``s3-2006-03-01.json`` gives ``s3`` and ``storage.v1.json`` gives
    ``storage``.
    """
    stem = path.stem
    stem = stem.split("-", 1)[0]
    return stem.split(".", 1)[0]


def _check_file(path: Path) -> None:
    if not path.exists():
        raise LoaderError(f"File not found: {path}", path)

    if not path.is_file():
        raise LoaderError(f"Not a file: {path}", path)
