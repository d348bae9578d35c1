"""Tests for the Google Discovery adapter."""

from typing import Any

import pytest
from schema_to_ir.adapters.discovery import (
    DiscoveryAdapter,
    parse_discovery_document,
    scalar_type,
)
from schema_to_ir.convert import convert_discovery
from schema_to_ir.ir import (
    BOOLEAN,
    DATETIME,
    FLOAT,
    INTEGER,
    STRING,
    MapType,
    ObjectType,
    OperationMapping,
    Provider,
)
from schema_to_ir.validation.errors import DocumentMalformedError, ErrorCodes


class TestParseDiscoveryDocument:
    """Tests for parse_discovery_document."""

    def test_valid(self, discovery_document: dict[str, Any]) -> None:
        """Should parse collections, methods and schemas."""
        document = parse_discovery_document(discovery_document)
        assert set(document.resources["buckets"].methods) == {
            "delete",
            "get",
            "insert",
            "list",
            "patch",
        }
        assert document.schemas["Bucket"].properties["timeCreated"].format == "date-time"

    def test_malformed_resources(self) -> None:
        """Should reject collections that are not mappings."""
        with pytest.raises(DocumentMalformedError) as exc_info:
            parse_discovery_document({"resources": {"buckets": ["get"]}})
        assert exc_info.value.details


class TestScalarType:
    """Tests for scalar type/format mapping."""

    @pytest.mark.parametrize(
        ("type_name", "format_name", "expected"),
        [
            ("string", None, STRING),
            ("string", "date-time", DATETIME),
            ("string", "google-datetime", DATETIME),
            ("string", "int64", INTEGER),
            ("integer", "int32", INTEGER),
            ("number", "double", FLOAT),
            ("boolean", None, BOOLEAN),
            ("any", None, STRING),
            ("object", None, None),
        ],
    )
    def test_mapping(self, type_name: str, format_name: str | None, expected: Any) -> None:
        """Should map Discovery scalar types."""
        assert scalar_type(type_name, format_name) == expected


class TestDiscoveryConversion:
    """Tests for converting the storage document end to end."""

    def test_bucket_resource(self, discovery_document: dict[str, Any]) -> None:
        """Should yield one bucket resource with all four operations."""
        result = convert_discovery(discovery_document, "storage", "v1")
        service = result.service
        assert service.provider is Provider.GCP
        assert service.resource_names == ("bucket",)
        operations = service.resources[0].operations
        assert operations.markers() == "CRUD"
        assert operations.create == OperationMapping("insert")
        assert operations.read == OperationMapping("get", ("list",))
        assert operations.update == OperationMapping("patch")
        assert operations.delete == OperationMapping("delete")

    def test_input_fields(self, discovery_document: dict[str, Any]) -> None:
        """Should extract body fields with method-specific required flags."""
        resource = convert_discovery(discovery_document, "storage", "v1").service.resources[0]
        name = resource.get_field("name")
        location = resource.get_field("location")
        storage_class = resource.get_field("storage_class")
        assert name is not None
        assert location is not None
        assert storage_class is not None
        assert name.required
        assert not location.required
        assert not storage_class.required
        assert name.description == "The name of the bucket."

    def test_field_types(self, discovery_document: dict[str, Any]) -> None:
        """Should map formats, maps and small objects."""
        resource = convert_discovery(discovery_document, "storage", "v1").service.resources[0]
        types = {f.name: f.field_type for f in resource.fields}
        assert types["time_created"] == DATETIME
        assert types["metageneration"] == INTEGER
        assert types["labels"] == MapType(STRING, STRING)
        assert types["owner"] == ObjectType((("entity", STRING), ("entityId", STRING)))
        assert resource.blocks == ()

    def test_outputs_and_identity(self, discovery_document: dict[str, Any]) -> None:
        """Should read outputs from get and identify buckets by name."""
        resource = convert_discovery(discovery_document, "storage", "v1").service.resources[0]
        assert resource.get_output("storage_class") is not None
        name = resource.get_output("name")
        assert name is not None
        assert not name.required
        assert resource.id_field == "name"
        assert resource.operations.import_ == OperationMapping("get")
        assert resource.description == "Creates a new bucket."

    def test_data_source(self, discovery_document: dict[str, Any]) -> None:
        """Should use path parameters of get as arguments."""
        service = convert_discovery(discovery_document, "storage", "v1").service
        data_source = service.get_data_source("bucket")
        assert data_source is not None
        assert [(a.name, a.required, a.immutable) for a in data_source.arguments] == [
            ("bucket", True, True)
        ]
        assert data_source.list == OperationMapping("list")

    def test_nested_collections(self) -> None:
        """Should name resources after nested collections."""
        document = {
            "resources": {
                "projects": {
                    "resources": {
                        "topics": {
                            "methods": {
                                "create": {"id": "pubsub.projects.topics.create", "httpMethod": "PUT"},
                                "get": {"id": "pubsub.projects.topics.get", "httpMethod": "GET"},
                            }
                        }
                    }
                }
            }
        }
        service = convert_discovery(document, "pubsub", "v1").service
        assert service.resource_names == ("topic",)

    def test_root_methods(self) -> None:
        """Should group root-level methods by the collection in their id."""
        adapter = DiscoveryAdapter(
            parse_discovery_document(
                {"methods": {"getWidget": {"id": "api.widgets.getWidget", "httpMethod": "GET"}}}
            )
        )
        [operation] = list(adapter.enumerate_operations())
        assert operation.resource == "widgets"
        assert operation.verb == "GET"

    def test_unresolved_schema(self, discovery_document: dict[str, Any]) -> None:
        """Should warn when a method body names a missing schema."""
        methods = discovery_document["resources"]["buckets"]["methods"]
        methods["insert"]["request"] = {"$ref": "MissingBucket"}
        result = convert_discovery(discovery_document, "storage", "v1")
        assert result.report.has_code(ErrorCodes.W002_UNRESOLVED_REFERENCE)
        assert result.service.resources[0].fields == ()

    def test_repeated_parameter(self) -> None:
        """Should turn repeated path parameters into lists."""
        document = {
            "resources": {
                "items": {
                    "methods": {
                        "get": {
                            "id": "api.items.get",
                            "httpMethod": "GET",
                            "parameters": {
                                "ids": {"type": "string", "location": "path", "repeated": True},
                            },
                        }
                    }
                }
            }
        }
        data_source = convert_discovery(document, "api", "v1").service.data_sources[0]
        assert data_source.arguments[0].field_type.tag == "list"
