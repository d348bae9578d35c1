"""Pydantic models for OpenAPI 3.0 documents.

Covers paths, operations, parameters, request bodies, responses and
component schemas. Vendor extensions (``x-*``) are kept as extra fields.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEMA_REF_PREFIX = "#/components/schemas/"
PARAMETER_REF_PREFIX = "#/components/parameters/"
REQUEST_BODY_REF_PREFIX = "#/components/requestBodies/"
RESPONSE_REF_PREFIX = "#/components/responses/"

HTTP_METHODS = ("get", "put", "post", "delete", "patch")


class OpenApiModelBase(BaseModel):
    """Base for all OpenAPI models."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def extension(self, name: str) -> Any:
        """Value of a vendor extension such as ``x-sensitive``."""
        return (self.model_extra or {}).get(name)


class Schema(OpenApiModelBase):
    """A schema object, or a reference to one."""

    ref: Annotated[str | None, Field(alias="$ref")] = None
    type: str | list[str] | None = None
    format: str | None = None
    title: str | None = None
    description: str | None = None
    properties: dict[str, Schema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    items: Schema | None = None
    additional_properties: Annotated[
        bool | Schema | None, Field(alias="additionalProperties")
    ] = None
    enum: list[Any] | None = None
    all_of: Annotated[list[Schema], Field(alias="allOf", default_factory=list)]
    one_of: Annotated[list[Schema], Field(alias="oneOf", default_factory=list)]
    any_of: Annotated[list[Schema], Field(alias="anyOf", default_factory=list)]
    nullable: bool = False
    read_only: Annotated[bool, Field(alias="readOnly")] = False
    write_only: Annotated[bool, Field(alias="writeOnly")] = False

    @property
    def primary_type(self) -> str | None:
        """The declared type, skipping ``null`` in type lists."""
        if isinstance(self.type, list):
            return next((t for t in self.type if t != "null"), None)
        return self.type

    @property
    def ref_name(self) -> str | None:
        """Last path segment of the reference, if this is one."""
        return self.ref.rsplit("/", 1)[-1] if self.ref else None


class Parameter(OpenApiModelBase):
    """An operation parameter, or a reference to one."""

    ref: Annotated[str | None, Field(alias="$ref")] = None
    name: str | None = None
    location: Annotated[str | None, Field(alias="in")] = None
    description: str | None = None
    required: bool = False
    schema_: Annotated[Schema | None, Field(alias="schema")] = None


class MediaType(OpenApiModelBase):
    """Content of one media type."""

    schema_: Annotated[Schema | None, Field(alias="schema")] = None


class RequestBody(OpenApiModelBase):
    """A request body, or a reference to one."""

    ref: Annotated[str | None, Field(alias="$ref")] = None
    description: str | None = None
    required: bool = False
    content: dict[str, MediaType] = Field(default_factory=dict)


class Response(OpenApiModelBase):
    """A response, or a reference to one."""

    ref: Annotated[str | None, Field(alias="$ref")] = None
    description: str | None = None
    content: dict[str, MediaType] = Field(default_factory=dict)


class Operation(OpenApiModelBase):
    """An operation on a path."""

    operation_id: Annotated[str | None, Field(alias="operationId")] = None
    summary: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Annotated[RequestBody | None, Field(alias="requestBody")] = None
    responses: dict[str, Response] = Field(default_factory=dict)

    @field_validator("responses", mode="before")
    @classmethod
    def stringify_status_codes(cls, v: Any) -> Any:
        """YAML loads unquoted status codes as integers."""
        if isinstance(v, dict):
            return {str(k): value for k, value in v.items()}
        return v


class PathItem(OpenApiModelBase):
    """Operations available on one path template."""

    summary: str | None = None
    description: str | None = None
    parameters: list[Parameter] = Field(default_factory=list)
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    patch: Operation | None = None
    head: Operation | None = None
    options: Operation | None = None
    trace: Operation | None = None

    def operations(self) -> list[tuple[str, Operation]]:
        """(method, operation) pairs for the methods the converter uses."""
        pairs = []
        for method in HTTP_METHODS:
            operation = getattr(self, method)
            if operation is not None:
                pairs.append((method, operation))
        return pairs


class Components(OpenApiModelBase):
    """Reusable components."""

    schemas: dict[str, Schema] = Field(default_factory=dict)
    parameters: dict[str, Parameter] = Field(default_factory=dict)
    request_bodies: Annotated[
        dict[str, RequestBody], Field(alias="requestBodies", default_factory=dict)
    ]
    responses: dict[str, Response] = Field(default_factory=dict)


class Info(OpenApiModelBase):
    """API metadata."""

    title: str | None = None
    version: str | None = None
    description: str | None = None


class OpenApiDocument(OpenApiModelBase):
    """Root of an OpenAPI 3.0 document."""

    openapi: str
    info: Info = Field(default_factory=Info)
    paths: dict[str, PathItem] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)

    @field_validator("openapi", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        """Accept an unquoted YAML version number."""
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("openapi")
    @classmethod
    def require_version_3(cls, v: str) -> str:
        """Only OpenAPI 3.x documents are supported."""
        if not v.startswith("3."):
            raise ValueError(f"Unsupported OpenAPI version {v!r}; expected 3.x")
        return v
