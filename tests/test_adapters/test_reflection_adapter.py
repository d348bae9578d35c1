"""Tests for the reflection snapshot adapter."""

from typing import Any

import pytest
from schema_to_ir.adapters.reflection import ReflectionResolver, parse_client_snapshot
from schema_to_ir.convert import convert_reflection
from schema_to_ir.ir import (
    BOOLEAN,
    DATETIME,
    INTEGER,
    STRING,
    EnumType,
    ListType,
    MapType,
    NestingMode,
    ObjectType,
    OperationMapping,
    Provider,
)
from schema_to_ir.models.reflection import ClientSnapshot
from schema_to_ir.transform.resolver import ResolutionContext
from schema_to_ir.validation.errors import ConversionReport, DocumentMalformedError, ErrorCodes


class TestParseClientSnapshot:
    """Tests for parse_client_snapshot."""

    def test_valid(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should parse operations and types."""
        snapshot = parse_client_snapshot(reflection_snapshot)
        assert [o.name for o in snapshot.operations][:2] == ["CreateBucket", "HeadBucket"]
        assert snapshot.types["BucketCannedAcl"].kind == "enum"

    def test_snapshot_passthrough(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should return snapshot models unchanged."""
        snapshot = ClientSnapshot.model_validate(reflection_snapshot)
        assert parse_client_snapshot(snapshot) is snapshot

    def test_missing_package(self) -> None:
        """Should reject snapshots without a package name."""
        with pytest.raises(DocumentMalformedError) as exc_info:
            parse_client_snapshot({"operations": []})
        assert any("package" in detail for detail in exc_info.value.details)

    def test_unknown_kind(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should reject type kinds other than struct and enum."""
        reflection_snapshot["types"]["Tag"]["kind"] = "union"
        with pytest.raises(DocumentMalformedError):
            parse_client_snapshot(reflection_snapshot)


class TestReflectionResolver:
    """Tests for mapping annotations to IR types."""

    @pytest.fixture
    def resolver(self, reflection_snapshot: dict[str, Any]) -> ReflectionResolver:
        """Create a resolver over the S3 snapshot."""
        return ReflectionResolver(parse_client_snapshot(reflection_snapshot))

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            ("String", (STRING, False)),
            ("Option<i64>", (INTEGER, True)),
            ("Optional[list[str]]", (ListType(STRING), True)),
            ("dict[str, int] | None", (MapType(STRING, INTEGER), True)),
            ("HashMap<String, Vec<bool>>", (MapType(STRING, ListType(BOOLEAN)), False)),
            ("Literal['on', 'off']", (EnumType(("on", "off")), False)),
            ("Box<aws_smithy_types::DateTime>", (DATETIME, False)),
            ("int | str", (STRING, False)),
            ("None", (STRING, True)),
        ],
    )
    def test_annotation_type(
        self,
        resolver: ReflectionResolver,
        annotation: str,
        expected: tuple[Any, bool],
    ) -> None:
        """Should map annotations in either syntax."""
        report = ConversionReport()
        assert resolver.annotation_type(annotation, ResolutionContext(report)) == expected
        assert not report.warnings

    def test_named_types(self, resolver: ReflectionResolver) -> None:
        """Should resolve struct and enum names from the snapshot."""
        context = ResolutionContext(ConversionReport())
        field_type, optional = resolver.annotation_type("Vec<Tag>", context)
        assert field_type == ListType(ObjectType((("key", STRING), ("value", STRING))))
        assert not optional
        assert resolver.annotation_type("crate::types::BucketCannedAcl", context)[0] == EnumType(
            ("private", "public-read", "public-read-write")
        )

    def test_unknown_generic(self, resolver: ReflectionResolver) -> None:
        """Should warn about generics it cannot map."""
        report = ConversionReport()
        field_type, _ = resolver.annotation_type("Result<String, Error>", ResolutionContext(report))
        assert field_type == STRING
        assert report.has_code(ErrorCodes.W004_UNSUPPORTED_NATIVE_TYPE)

    def test_unparseable(self, resolver: ReflectionResolver) -> None:
        """Should warn about text that is not a type expression."""
        report = ConversionReport()
        field_type, optional = resolver.annotation_type("list[str", ResolutionContext(report))
        assert field_type == STRING
        assert optional
        assert report.has_code(ErrorCodes.W004_UNSUPPORTED_NATIVE_TYPE)

    def test_unknown_name(self, resolver: ReflectionResolver) -> None:
        """Should warn about type names missing from the snapshot."""
        report = ConversionReport()
        field_type, _ = resolver.annotation_type("Grant", ResolutionContext(report))
        assert field_type == STRING
        assert report.has_code(ErrorCodes.W002_UNRESOLVED_REFERENCE)

    def test_struct_name(self, resolver: ReflectionResolver) -> None:
        """Should find struct names through optional and list wrappers."""
        from schema_to_ir.adapters.reflection import parse_type_expression

        assert resolver.struct_name(parse_type_expression("Option<Vec<Tag>>")) == "Tag"
        assert resolver.struct_name(parse_type_expression("BucketCannedAcl")) is None
        assert resolver.struct_name(parse_type_expression("Tag | None")) == "Tag"


class TestReflectionConversion:
    """Tests for converting the S3 snapshot end to end."""

    def test_bucket_resource(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should group operations by the resource in their names."""
        service = convert_reflection(reflection_snapshot, "s3", "1.14.0").service
        assert service.provider is Provider.AWS
        assert service.resource_names == ("bucket",)
        operations = service.resources[0].operations
        assert operations.create == OperationMapping("create_bucket", ("put_bucket_versioning",))
        assert operations.read == OperationMapping("head_bucket", ("list_buckets",))
        assert operations.update is None
        assert operations.delete == OperationMapping("delete_bucket")

    def test_fields(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should treat optional wrappers as not required."""
        resource = convert_reflection(reflection_snapshot, "s3", "1").service.resources[0]
        assert [f.name for f in resource.fields] == [
            "bucket",
            "acl",
            "grant_full_control",
            "object_lock_enabled_for_bucket",
        ]
        bucket = resource.get_field("bucket")
        assert bucket is not None
        assert not bucket.required
        assert bucket.description == "The name of the bucket."
        acl = resource.get_field("acl")
        assert acl is not None
        assert acl.field_type == EnumType(("private", "public-read", "public-read-write"))
        grant = resource.get_field("grant_full_control")
        assert grant is not None
        assert grant.sensitive
        lock = resource.get_field("object_lock_enabled_for_bucket")
        assert lock is not None
        assert lock.field_type == BOOLEAN

    def test_blocks(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should nest the configuration struct and its tag list."""
        resource = convert_reflection(reflection_snapshot, "s3", "1").service.resources[0]
        [configuration] = resource.blocks
        assert configuration.name == "create_bucket_configuration"
        assert configuration.sdk_type_name == "CreateBucketConfiguration"
        assert [a.name for a in configuration.attributes] == ["location_constraint"]
        [tags] = configuration.blocks
        assert tags.nesting_mode is NestingMode.LIST
        assert [(a.name, a.required) for a in tags.attributes] == [("key", True), ("value", True)]

    def test_outputs(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should read outputs from the HeadBucket output type."""
        resource = convert_reflection(reflection_snapshot, "s3", "1").service.resources[0]
        assert [(o.name, o.field_type) for o in resource.outputs] == [
            ("bucket_region", STRING),
            ("access_point_alias", BOOLEAN),
            ("creation_date", DATETIME),
        ]
        assert resource.id_field is None
        assert resource.operations.import_ is None

    def test_data_source(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should use the HeadBucket input as arguments."""
        data_source = convert_reflection(reflection_snapshot, "s3", "1").service.data_sources[0]
        assert [(a.name, a.required) for a in data_source.arguments] == [("bucket", True)]
        assert data_source.list == OperationMapping("list_buckets")

    def test_unsupported_field(self, reflection_snapshot: dict[str, Any]) -> None:
        """Should keep fields with unmappable annotations as strings."""
        fields = reflection_snapshot["types"]["CreateBucketInput"]["fields"]
        fields["checksum"] = {"annotation": "Result<String, Error>"}
        result = convert_reflection(reflection_snapshot, "s3", "1")
        checksum = result.service.resources[0].get_field("checksum")
        assert checksum is not None
        assert checksum.field_type == STRING
        assert result.report.has_code(ErrorCodes.W004_UNSUPPORTED_NATIVE_TYPE)

    def test_declared_input_type(self) -> None:
        """Should prefer declared input types over the naming convention."""
        snapshot = {
            "package": "widgets",
            "operations": [{"name": "create_widget", "input": "WidgetSpec"}],
            "types": {"WidgetSpec": {"fields": {"size": {"annotation": "int"}}}},
        }
        service = convert_reflection(snapshot, "widgets", "1").service
        [size] = service.resources[0].fields
        assert size.field_type == INTEGER
        assert size.required
