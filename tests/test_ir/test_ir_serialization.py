"""Tests for the plain-data IR encoding."""

from typing import Any

import pytest
from schema_to_ir.ir import (
    DATETIME,
    INTEGER,
    STRING,
    BlockDefinition,
    DataSourceDefinition,
    EnumType,
    FieldDefinition,
    ListType,
    MapType,
    NestingMode,
    ObjectType,
    OperationMapping,
    Operations,
    Provider,
    ResourceDefinition,
    ServiceDefinition,
)
from schema_to_ir.ir.serialization import (
    FORMAT_VERSION,
    IRDecodeError,
    field_type_from_dict,
    field_type_to_dict,
    service_from_dict,
    service_to_dict,
)


@pytest.fixture
def bucket_service() -> ServiceDefinition:
    """Create a service with one fully populated resource."""
    tags = BlockDefinition(
        name="tags",
        attributes=(FieldDefinition("key", STRING, required=True), FieldDefinition("value", STRING)),
        nesting_mode=NestingMode.LIST,
        sdk_type_name="Tag",
        sdk_accessor_method="tags",
    )
    configuration = BlockDefinition(
        name="create_bucket_configuration",
        attributes=(FieldDefinition("location_constraint", STRING),),
        blocks=(tags,),
        min_items=1,
        max_items=1,
        sdk_type_name="CreateBucketConfiguration",
    )
    read = OperationMapping("get_bucket", ("list_buckets",))
    resource = ResourceDefinition(
        name="bucket",
        description="An S3 bucket.",
        fields=(
            FieldDefinition("bucket", STRING, required=True, immutable=True),
            FieldDefinition("acl", EnumType(("private", "public-read"))),
            FieldDefinition("session_token", STRING, sensitive=True),
        ),
        outputs=(
            FieldDefinition("creation_date", DATETIME, response_accessor="creation_date"),
            FieldDefinition(
                "metadata",
                MapType(STRING, ListType(INTEGER)),
                response_accessor="metadata",
            ),
        ),
        blocks=(configuration,),
        id_field="bucket",
        operations=Operations(
            create=OperationMapping("create_bucket"),
            read=read,
            delete=OperationMapping("delete_bucket"),
            import_=OperationMapping("get_bucket"),
        ),
    )
    data_source = DataSourceDefinition(
        name="bucket",
        arguments=(FieldDefinition("bucket", STRING, required=True),),
        outputs=resource.outputs,
        read=read,
        list=OperationMapping("list_buckets"),
    )
    return ServiceDefinition(
        provider=Provider.AWS,
        name="s3",
        sdk_version="2006-03-01",
        resources=(resource,),
        data_sources=(data_source,),
    )


class TestFieldTypeEncoding:
    """Tests for the tagged union of field types."""

    def test_scalar(self) -> None:
        """Should encode scalars by tag alone."""
        assert field_type_to_dict(DATETIME) == {"type": "datetime"}

    def test_nested(self) -> None:
        """Should encode containers recursively."""
        encoded = field_type_to_dict(
            ObjectType((("tags", ListType(STRING)), ("size", MapType(STRING, INTEGER))))
        )
        assert encoded == {
            "type": "object",
            "fields": {
                "tags": {"type": "list", "item": {"type": "string"}},
                "size": {
                    "type": "map",
                    "key": {"type": "string"},
                    "value": {"type": "integer"},
                },
            },
        }

    def test_enum(self) -> None:
        """Should keep variant order."""
        assert field_type_to_dict(EnumType(("b", "a"))) == {"type": "enum", "variants": ["b", "a"]}

    def test_decode_keeps_object_member_order(self) -> None:
        """Should decode object members in mapping order."""
        decoded = field_type_from_dict(
            {"type": "object", "fields": {"z": {"type": "string"}, "a": {"type": "boolean"}}}
        )
        assert isinstance(decoded, ObjectType)
        assert decoded.field_names == ("z", "a")

    def test_unknown_tag(self) -> None:
        """Should reject unknown tags with their location."""
        with pytest.raises(IRDecodeError, match="unknown field type tag") as exc_info:
            field_type_from_dict({"type": "list", "item": {"type": "tuple"}})
        assert exc_info.value.path == "field_type.item"

    def test_missing_item(self) -> None:
        """Should reject a list without an item type."""
        with pytest.raises(IRDecodeError, match="missing required key 'item'"):
            field_type_from_dict({"type": "list"})


class TestServiceEncoding:
    """Tests for whole-service encoding."""

    def test_round_trip(self, bucket_service: ServiceDefinition) -> None:
        """Should decode to a value equal to the original."""
        assert service_from_dict(service_to_dict(bucket_service)) == bucket_service

    def test_encoded_layout(self, bucket_service: ServiceDefinition) -> None:
        """Should use plain values and serialize every operation slot."""
        data = service_to_dict(bucket_service)
        assert data["format_version"] == FORMAT_VERSION
        assert data["provider"] == "aws"
        operations = data["resources"][0]["operations"]
        assert list(operations) == ["create", "read", "update", "delete", "import"]
        assert operations["update"] is None
        assert operations["read"] == {
            "sdk_operation": "get_bucket",
            "additional_operations": ["list_buckets"],
        }
        block = data["resources"][0]["blocks"][0]
        assert block["blocks"][0]["nesting_mode"] == "list"

    def test_decode_defaults(self) -> None:
        """Should fill optional keys with defaults."""
        data: dict[str, Any] = {
            "provider": "gcp",
            "name": "storage",
            "sdk_version": "v1",
            "resources": [
                {"name": "bucket", "operations": {"read": {"sdk_operation": "get"}}},
            ],
        }
        service = service_from_dict(data)
        resource = service.resources[0]
        assert resource.fields == ()
        assert resource.operations.read == OperationMapping("get")
        assert service.data_sources == ()

    def test_unsupported_format_version(self) -> None:
        """Should refuse encodings from a different format version."""
        with pytest.raises(IRDecodeError, match="format_version"):
            service_from_dict({"format_version": 99, "provider": "aws", "name": "s3"})

    def test_unknown_provider(self) -> None:
        """Should report unknown providers as decode errors."""
        with pytest.raises(IRDecodeError, match="provider"):
            service_from_dict({"provider": "openstack", "name": "x", "sdk_version": "1"})

    def test_bad_nesting_mode(self) -> None:
        """Should report the path of a bad nesting mode."""
        data = {
            "provider": "aws",
            "name": "s3",
            "sdk_version": "1",
            "resources": [{"name": "bucket", "blocks": [{"name": "b", "nesting_mode": "set"}]}],
        }
        with pytest.raises(IRDecodeError) as exc_info:
            service_from_dict(data)
        assert exc_info.value.path == "service.resources[0].blocks[0].nesting_mode"
