"""Pytest configuration and shared fixtures.

Each fixture returns a small but realistic document in one source format,
already parsed (a dict, or a FileDescriptorSet for protobuf).
"""

from pathlib import Path
from typing import Any

import pytest
from google.protobuf import descriptor_pb2

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


@pytest.fixture
def tmp_output(tmp_path: Path) -> Path:
    """Return a directory for files written by a test."""
    output = tmp_path / "out"
    output.mkdir()
    return output


# -- Smithy -------------------------------------------------------------------


@pytest.fixture
def smithy_s3_model() -> dict[str, Any]:
    """Return a trimmed-down S3 Smithy JSON AST."""
    return {
        "smithy": "2.0",
        "shapes": {
            "com.amazonaws.s3#AmazonS3": {
                "type": "service",
                "version": "2006-03-01",
                "operations": [
                    {"target": "com.amazonaws.s3#CreateBucket"},
                    {"target": "com.amazonaws.s3#GetBucket"},
                    {"target": "com.amazonaws.s3#ListBuckets"},
                    {"target": "com.amazonaws.s3#GetBucketLocation"},
                    {"target": "com.amazonaws.s3#PutBucketTagging"},
                    {"target": "com.amazonaws.s3#DeleteBucket"},
                ],
            },
            "com.amazonaws.s3#CreateBucket": {
                "type": "operation",
                "input": {"target": "com.amazonaws.s3#CreateBucketRequest"},
                "output": {"target": "com.amazonaws.s3#CreateBucketOutput"},
                "traits": {
                    "smithy.api#documentation": "Creates a new S3 bucket.",
                    "smithy.api#http": {"method": "PUT", "uri": "/{Bucket}"},
                },
            },
            "com.amazonaws.s3#GetBucket": {
                "type": "operation",
                "input": {"target": "com.amazonaws.s3#GetBucketRequest"},
                "output": {"target": "com.amazonaws.s3#GetBucketOutput"},
                "traits": {"smithy.api#http": {"method": "GET", "uri": "/{Bucket}"}},
            },
            "com.amazonaws.s3#ListBuckets": {
                "type": "operation",
                "output": {"target": "com.amazonaws.s3#ListBucketsOutput"},
                "traits": {"smithy.api#http": {"method": "GET", "uri": "/"}},
            },
            "com.amazonaws.s3#GetBucketLocation": {
                "type": "operation",
                "input": {"target": "com.amazonaws.s3#GetBucketRequest"},
            },
            "com.amazonaws.s3#PutBucketTagging": {
                "type": "operation",
                "input": {"target": "com.amazonaws.s3#PutBucketTaggingRequest"},
            },
            "com.amazonaws.s3#DeleteBucket": {
                "type": "operation",
                "input": {"target": "com.amazonaws.s3#GetBucketRequest"},
                "traits": {"smithy.api#http": {"method": "DELETE", "uri": "/{Bucket}"}},
            },
            "com.amazonaws.s3#CreateBucketRequest": {
                "type": "structure",
                "members": {
                    "Bucket": {
                        "target": "com.amazonaws.s3#BucketName",
                        "traits": {"smithy.api#required": {}, "smithy.api#httpLabel": {}},
                    },
                    "ACL": {"target": "com.amazonaws.s3#BucketCannedACL"},
                    "CreateBucketConfiguration": {
                        "target": "com.amazonaws.s3#CreateBucketConfiguration",
                    },
                    "SessionToken": {"target": "com.amazonaws.s3#SensitiveString"},
                },
            },
            "com.amazonaws.s3#CreateBucketOutput": {
                "type": "structure",
                "members": {"Location": {"target": "smithy.api#String"}},
            },
            "com.amazonaws.s3#GetBucketRequest": {
                "type": "structure",
                "members": {
                    "Bucket": {
                        "target": "com.amazonaws.s3#BucketName",
                        "traits": {"smithy.api#required": {}, "smithy.api#httpLabel": {}},
                    },
                },
            },
            "com.amazonaws.s3#GetBucketOutput": {
                "type": "structure",
                "members": {
                    "Bucket": {"target": "com.amazonaws.s3#BucketName"},
                    "CreationDate": {"target": "smithy.api#Timestamp"},
                    "Arn": {
                        "target": "smithy.api#String",
                        "traits": {"smithy.api#documentation": "ARN of the bucket."},
                    },
                },
            },
            "com.amazonaws.s3#ListBucketsOutput": {
                "type": "structure",
                "members": {"Buckets": {"target": "com.amazonaws.s3#BucketList"}},
            },
            "com.amazonaws.s3#BucketList": {
                "type": "list",
                "member": {"target": "com.amazonaws.s3#GetBucketOutput"},
            },
            "com.amazonaws.s3#PutBucketTaggingRequest": {
                "type": "structure",
                "members": {
                    "Bucket": {
                        "target": "com.amazonaws.s3#BucketName",
                        "traits": {"smithy.api#required": {}},
                    },
                    "Tagging": {"target": "com.amazonaws.s3#TagList"},
                },
            },
            "com.amazonaws.s3#CreateBucketConfiguration": {
                "type": "structure",
                "members": {
                    "LocationConstraint": {"target": "smithy.api#String"},
                    "Tags": {"target": "com.amazonaws.s3#TagList"},
                },
            },
            "com.amazonaws.s3#TagList": {
                "type": "list",
                "member": {"target": "com.amazonaws.s3#Tag"},
            },
            "com.amazonaws.s3#Tag": {
                "type": "structure",
                "members": {
                    "Key": {
                        "target": "smithy.api#String",
                        "traits": {"smithy.api#required": {}},
                    },
                    "Value": {"target": "smithy.api#String"},
                },
            },
            "com.amazonaws.s3#BucketName": {"type": "string"},
            "com.amazonaws.s3#SensitiveString": {
                "type": "string",
                "traits": {"smithy.api#sensitive": {}},
            },
            "com.amazonaws.s3#BucketCannedACL": {
                "type": "enum",
                "members": {
                    "PRIVATE": {
                        "target": "smithy.api#Unit",
                        "traits": {"smithy.api#enumValue": "private"},
                    },
                    "PUBLIC_READ": {
                        "target": "smithy.api#Unit",
                        "traits": {"smithy.api#enumValue": "public-read"},
                    },
                },
            },
        },
    }


@pytest.fixture
def smithy_cyclic_model() -> dict[str, Any]:
    """Return a Smithy model whose Node structure contains a list of itself."""
    return {
        "smithy": "2.0",
        "shapes": {
            "example.tree#TreeService": {
                "type": "service",
                "version": "2024-01-01",
                "operations": [{"target": "example.tree#CreateNode"}],
            },
            "example.tree#CreateNode": {
                "type": "operation",
                "input": {"target": "example.tree#CreateNodeInput"},
            },
            "example.tree#CreateNodeInput": {
                "type": "structure",
                "members": {
                    "Name": {
                        "target": "smithy.api#String",
                        "traits": {"smithy.api#required": {}},
                    },
                    "Root": {"target": "example.tree#Node"},
                },
            },
            "example.tree#Node": {
                "type": "structure",
                "members": {
                    "Label": {"target": "smithy.api#String"},
                    "Children": {"target": "example.tree#NodeList"},
                },
            },
            "example.tree#NodeList": {
                "type": "list",
                "member": {"target": "example.tree#Node"},
            },
        },
    }


# -- OpenAPI ------------------------------------------------------------------


@pytest.fixture
def openapi_document() -> dict[str, Any]:
    """Return a Kubernetes-style OpenAPI 3.0 document for ConfigMaps."""
    namespace = {
        "name": "namespace",
        "in": "path",
        "required": True,
        "schema": {"type": "string"},
    }
    return {
        "openapi": "3.0.0",
        "info": {"title": "Kubernetes", "version": "v1.29.0"},
        "paths": {
            "/api/v1/namespaces/{namespace}/configmaps": {
                "parameters": [namespace],
                "get": {
                    "operationId": "listCoreV1NamespacedConfigMap",
                    "parameters": [{"name": "limit", "in": "query", "schema": {"type": "integer"}}],
                    "responses": {
                        "200": {
                            "description": "OK",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/ConfigMapList"}
                                }
                            },
                        }
                    },
                },
                "post": {
                    "operationId": "createCoreV1NamespacedConfigMap",
                    "description": "create a ConfigMap",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/ConfigMap"}
                            }
                        }
                    },
                    "responses": {
                        "201": {
                            "description": "Created",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/ConfigMap"}
                                }
                            },
                        }
                    },
                },
            },
            "/api/v1/namespaces/{namespace}/configmaps/{name}": {
                "parameters": [
                    {"name": "name", "in": "path", "required": True, "schema": {"type": "string"}},
                    namespace,
                ],
                "get": {
                    "operationId": "readCoreV1NamespacedConfigMap",
                    "responses": {
                        "200": {
                            "description": "OK",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/ConfigMap"}
                                }
                            },
                        }
                    },
                },
                "put": {
                    "operationId": "replaceCoreV1NamespacedConfigMap",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/ConfigMap"}
                            }
                        }
                    },
                    "responses": {"200": {"description": "OK"}},
                },
                "delete": {
                    "operationId": "deleteCoreV1NamespacedConfigMap",
                    "responses": {"200": {"description": "OK"}},
                },
                "patch": {
                    "operationId": "patchCoreV1NamespacedConfigMap",
                    "responses": {"200": {"description": "OK"}},
                },
            },
            "/version": {
                "get": {
                    "operationId": "getCodeVersion",
                    "responses": {"200": {"description": "OK"}},
                }
            },
        },
        "components": {
            "schemas": {
                "ConfigMap": {
                    "type": "object",
                    "description": "ConfigMap holds configuration data for pods to consume.",
                    "properties": {
                        "apiVersion": {"type": "string"},
                        "kind": {"type": "string"},
                        "metadata": {"$ref": "#/components/schemas/ObjectMeta"},
                        "data": {
                            "type": "object",
                            "additionalProperties": {"type": "string"},
                        },
                        "immutable": {"type": "boolean"},
                    },
                },
                "ConfigMapList": {
                    "type": "object",
                    "properties": {
                        "items": {
                            "type": "array",
                            "items": {"$ref": "#/components/schemas/ConfigMap"},
                        }
                    },
                },
                "ObjectMeta": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "namespace": {"type": "string"},
                        "labels": {
                            "type": "object",
                            "additionalProperties": {"type": "string"},
                        },
                        "creationTimestamp": {"type": "string", "format": "date-time"},
                        "uid": {"type": "string", "readOnly": True},
                    },
                },
            }
        },
    }


@pytest.fixture
def openapi_cyclic_document() -> dict[str, Any]:
    """Return an OpenAPI document whose Node schema refers to itself."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Trees", "version": "1.0"},
        "paths": {
            "/nodes": {
                "post": {
                    "operationId": "createNode",
                    "requestBody": {
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/Node"}}
                        }
                    },
                    "responses": {"201": {"description": "Created"}},
                }
            }
        },
        "components": {
            "schemas": {
                "Node": {
                    "type": "object",
                    "properties": {
                        "label": {"type": "string"},
                        "parent": {"$ref": "#/components/schemas/Node"},
                        "children": {
                            "type": "array",
                            "items": {"$ref": "#/components/schemas/Node"},
                        },
                    },
                }
            }
        },
    }


# -- Google Discovery ---------------------------------------------------------


@pytest.fixture
def discovery_document() -> dict[str, Any]:
    """Return a trimmed-down Cloud Storage Discovery document."""
    bucket_param = {
        "bucket": {"type": "string", "location": "path", "required": True},
    }
    return {
        "kind": "discovery#restDescription",
        "discoveryVersion": "v1",
        "name": "storage",
        "version": "v1",
        "schemas": {
            "Bucket": {
                "id": "Bucket",
                "type": "object",
                "description": "A bucket.",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "The name of the bucket.",
                        "annotations": {"required": ["storage.buckets.insert"]},
                    },
                    "location": {"type": "string"},
                    "storageClass": {"type": "string"},
                    "timeCreated": {"type": "string", "format": "date-time"},
                    "metageneration": {"type": "string", "format": "int64"},
                    "labels": {
                        "type": "object",
                        "additionalProperties": {"type": "string"},
                    },
                    "owner": {
                        "type": "object",
                        "properties": {
                            "entity": {"type": "string"},
                            "entityId": {"type": "string"},
                        },
                    },
                },
            },
            "Buckets": {
                "id": "Buckets",
                "type": "object",
                "properties": {
                    "items": {"type": "array", "items": {"$ref": "Bucket"}},
                    "nextPageToken": {"type": "string"},
                },
            },
        },
        "resources": {
            "buckets": {
                "methods": {
                    "delete": {
                        "id": "storage.buckets.delete",
                        "path": "b/{bucket}",
                        "httpMethod": "DELETE",
                        "parameters": bucket_param,
                        "parameterOrder": ["bucket"],
                    },
                    "get": {
                        "id": "storage.buckets.get",
                        "path": "b/{bucket}",
                        "httpMethod": "GET",
                        "parameters": bucket_param,
                        "parameterOrder": ["bucket"],
                        "response": {"$ref": "Bucket"},
                    },
                    "insert": {
                        "id": "storage.buckets.insert",
                        "path": "b",
                        "httpMethod": "POST",
                        "description": "Creates a new bucket.",
                        "parameters": {
                            "project": {"type": "string", "location": "query", "required": True},
                        },
                        "parameterOrder": ["project"],
                        "request": {"$ref": "Bucket"},
                        "response": {"$ref": "Bucket"},
                    },
                    "list": {
                        "id": "storage.buckets.list",
                        "path": "b",
                        "httpMethod": "GET",
                        "parameters": {
                            "project": {"type": "string", "location": "query", "required": True},
                        },
                        "response": {"$ref": "Buckets"},
                    },
                    "patch": {
                        "id": "storage.buckets.patch",
                        "path": "b/{bucket}",
                        "httpMethod": "PATCH",
                        "parameters": bucket_param,
                        "parameterOrder": ["bucket"],
                        "request": {"$ref": "Bucket"},
                        "response": {"$ref": "Bucket"},
                    },
                }
            }
        },
    }


# -- Protobuf -----------------------------------------------------------------


def _field(
    name: str,
    number: int,
    field_type: int,
    type_name: str | None = None,
    repeated: bool = False,
) -> FieldDescriptorProto:
    field = FieldDescriptorProto(
        name=name,
        number=number,
        type=field_type,
        label=(
            FieldDescriptorProto.LABEL_REPEATED if repeated else FieldDescriptorProto.LABEL_OPTIONAL
        ),
    )
    if type_name is not None:
        field.type_name = type_name
    return field


@pytest.fixture
def library_descriptor_set() -> descriptor_pb2.FileDescriptorSet:
    """Return a descriptor set for a small library API with a Book resource."""
    pkg = ".example.library.v1"
    file = descriptor_pb2.FileDescriptorProto(
        name="example/library/v1/library.proto",
        package="example.library.v1",
        syntax="proto3",
    )

    book = file.message_type.add(name="Book")
    book.field.extend(
        [
            _field("name", 1, FieldDescriptorProto.TYPE_STRING),
            _field("title", 2, FieldDescriptorProto.TYPE_STRING),
            _field("page_count", 3, FieldDescriptorProto.TYPE_INT32),
            _field("tags", 4, FieldDescriptorProto.TYPE_STRING, repeated=True),
            _field(
                "published", 5, FieldDescriptorProto.TYPE_MESSAGE, ".google.protobuf.Timestamp"
            ),
            _field(
                "labels",
                6,
                FieldDescriptorProto.TYPE_MESSAGE,
                f"{pkg}.Book.LabelsEntry",
                repeated=True,
            ),
            _field("author", 7, FieldDescriptorProto.TYPE_MESSAGE, f"{pkg}.Author"),
            _field("state", 8, FieldDescriptorProto.TYPE_ENUM, f"{pkg}.Book.State"),
        ]
    )
    labels_entry = book.nested_type.add(name="LabelsEntry")
    labels_entry.options.map_entry = True
    labels_entry.field.extend(
        [
            _field("key", 1, FieldDescriptorProto.TYPE_STRING),
            _field("value", 2, FieldDescriptorProto.TYPE_STRING),
        ]
    )
    state = book.enum_type.add(name="State")
    for number, value in enumerate(["STATE_UNSPECIFIED", "DRAFT", "PUBLISHED"]):
        state.value.add(name=value, number=number)

    author = file.message_type.add(name="Author")
    author.field.extend(
        [
            _field("display_name", 1, FieldDescriptorProto.TYPE_STRING),
            _field("email", 2, FieldDescriptorProto.TYPE_STRING),
        ]
    )
    author.field[1].options.debug_redact = True

    create = file.message_type.add(name="CreateBookRequest")
    create.field.extend(
        [
            _field("parent", 1, FieldDescriptorProto.TYPE_STRING),
            _field("book", 2, FieldDescriptorProto.TYPE_MESSAGE, f"{pkg}.Book"),
            _field("book_id", 3, FieldDescriptorProto.TYPE_STRING),
        ]
    )
    get = file.message_type.add(name="GetBookRequest")
    get.field.append(_field("name", 1, FieldDescriptorProto.TYPE_STRING))
    list_request = file.message_type.add(name="ListBooksRequest")
    list_request.field.extend(
        [
            _field("parent", 1, FieldDescriptorProto.TYPE_STRING),
            _field("page_size", 2, FieldDescriptorProto.TYPE_INT32),
        ]
    )
    list_response = file.message_type.add(name="ListBooksResponse")
    list_response.field.append(
        _field("books", 1, FieldDescriptorProto.TYPE_MESSAGE, f"{pkg}.Book", repeated=True)
    )
    update = file.message_type.add(name="UpdateBookRequest")
    update.field.extend(
        [
            _field("book", 1, FieldDescriptorProto.TYPE_MESSAGE, f"{pkg}.Book"),
            _field(
                "update_mask", 2, FieldDescriptorProto.TYPE_MESSAGE, ".google.protobuf.FieldMask"
            ),
        ]
    )
    delete = file.message_type.add(name="DeleteBookRequest")
    delete.field.append(_field("name", 1, FieldDescriptorProto.TYPE_STRING))

    service = file.service.add(name="LibraryService")
    for method_name, input_type, output_type in [
        ("CreateBook", "CreateBookRequest", f"{pkg}.Book"),
        ("GetBook", "GetBookRequest", f"{pkg}.Book"),
        ("ListBooks", "ListBooksRequest", f"{pkg}.ListBooksResponse"),
        ("UpdateBook", "UpdateBookRequest", f"{pkg}.Book"),
        ("DeleteBook", "DeleteBookRequest", ".google.protobuf.Empty"),
    ]:
        service.method.add(
            name=method_name,
            input_type=f"{pkg}.{input_type}",
            output_type=output_type,
        )

    # leading comments on CreateBook and on Book.title
    file.source_code_info.location.add(path=[6, 0, 2, 0], leading_comments=" Creates a book.\n")
    file.source_code_info.location.add(
        path=[4, 0, 2, 1], leading_comments=" The title of the book.\n"
    )

    return descriptor_pb2.FileDescriptorSet(file=[file])


# -- Reflection ---------------------------------------------------------------


@pytest.fixture
def reflection_snapshot() -> dict[str, Any]:
    """Return a snapshot of a Rust-style S3 client."""
    return {
        "package": "aws_sdk_s3",
        "version": "1.14.0",
        "operations": [
            {"name": "CreateBucket", "doc": "Creates a new S3 bucket."},
            {"name": "HeadBucket"},
            {"name": "ListBuckets"},
            {"name": "PutBucketVersioning"},
            {"name": "DeleteBucket"},
        ],
        "types": {
            "CreateBucketInput": {
                "fields": {
                    "bucket": {"annotation": "Option<String>", "doc": "The name of the bucket."},
                    "acl": {"annotation": "Option<crate::types::BucketCannedAcl>"},
                    "create_bucket_configuration": {
                        "annotation": "Option<CreateBucketConfiguration>"
                    },
                    "grant_full_control": {"annotation": "Option<String>", "sensitive": True},
                    "object_lock_enabled_for_bucket": {"annotation": "Option<bool>"},
                }
            },
            "BucketCannedAcl": {
                "kind": "enum",
                "variants": ["private", "public-read", "public-read-write"],
            },
            "CreateBucketConfiguration": {
                "fields": {
                    "location_constraint": {"annotation": "Option<String>"},
                    "tags": {"annotation": "Option<Vec<Tag>>"},
                }
            },
            "Tag": {
                "fields": {
                    "key": {"annotation": "String"},
                    "value": {"annotation": "String"},
                }
            },
            "HeadBucketInput": {"fields": {"bucket": {"annotation": "String"}}},
            "HeadBucketOutput": {
                "fields": {
                    "bucket_region": {"annotation": "Option<String>"},
                    "access_point_alias": {"annotation": "Option<bool>"},
                    "creation_date": {"annotation": "Option<aws_smithy_types::DateTime>"},
                }
            },
            "ListBucketsOutput": {"fields": {"buckets": {"annotation": "Option<Vec<Bucket>>"}}},
            "Bucket": {
                "fields": {
                    "name": {"annotation": "Option<String>"},
                    "creation_date": {"annotation": "Option<DateTime>"},
                }
            },
            "DeleteBucketInput": {"fields": {"bucket": {"annotation": "Option<String>"}}},
        },
    }
