"""Pydantic models for Google API Discovery documents.

Everything except the method and schema structure is optional, so
trimmed-down documents load as long as their shape is right.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class DiscoveryModelBase(BaseModel):
    """Base for all Discovery models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SchemaAnnotations(DiscoveryModelBase):
    """Per-property annotations; ``required`` lists method ids."""

    required: list[str] = Field(default_factory=list)


class DiscoverySchema(DiscoveryModelBase):
    """A JSON schema (draft 3 flavoured) as used by Discovery documents."""

    id: str | None = None
    ref: Annotated[str | None, Field(alias="$ref")] = None
    type: str | None = None
    format: str | None = None
    description: str | None = None
    properties: dict[str, DiscoverySchema] = Field(default_factory=dict)
    additional_properties: Annotated[
        DiscoverySchema | None, Field(alias="additionalProperties")
    ] = None
    items: DiscoverySchema | None = None
    enum: list[str] | None = None
    required: list[str] | bool | None = None
    annotations: SchemaAnnotations | None = None
    read_only: Annotated[bool, Field(alias="readOnly")] = False

    def is_required(self, name: str, prop: DiscoverySchema, method_id: str | None) -> bool:
        """Check whether a property is required.

        Accepts the schema-level ``required`` list, a property-level
        ``required: true`` and ``annotations.required`` naming the method.
        """
        if isinstance(self.required, list) and name in self.required:
            return True
        if prop.required is True:
            return True
        return bool(method_id and prop.annotations and method_id in prop.annotations.required)


class Parameter(DiscoveryModelBase):
    """A method parameter."""

    type: str | None = None
    format: str | None = None
    description: str | None = None
    location: str | None = None
    required: bool = False
    enum: list[str] | None = None
    repeated: bool = False


class SchemaRef(DiscoveryModelBase):
    """Request/response body reference."""

    ref: Annotated[str, Field(alias="$ref")]


class Method(DiscoveryModelBase):
    """A callable method of a collection."""

    id: str | None = None
    path: str | None = None
    flat_path: Annotated[str | None, Field(alias="flatPath")] = None
    http_method: Annotated[str | None, Field(alias="httpMethod")] = None
    description: str | None = None
    parameters: dict[str, Parameter] = Field(default_factory=dict)
    parameter_order: Annotated[list[str], Field(alias="parameterOrder", default_factory=list)]
    request: SchemaRef | None = None
    response: SchemaRef | None = None


class DiscoveryResource(DiscoveryModelBase):
    """A collection with its methods and nested collections."""

    methods: dict[str, Method] = Field(default_factory=dict)
    resources: dict[str, DiscoveryResource] = Field(default_factory=dict)


class DiscoveryDocument(DiscoveryModelBase):
    """Root of a Discovery document."""

    discovery_version: Annotated[str | None, Field(alias="discoveryVersion")] = None
    kind: str | None = None
    name: str | None = None
    version: str | None = None
    title: str | None = None
    description: str | None = None
    root_url: Annotated[str | None, Field(alias="rootUrl")] = None
    service_path: Annotated[str | None, Field(alias="servicePath")] = None
    parameters: dict[str, Parameter] = Field(default_factory=dict)
    schemas: dict[str, DiscoverySchema] = Field(default_factory=dict)
    resources: dict[str, DiscoveryResource] = Field(default_factory=dict)
    methods: dict[str, Method] = Field(default_factory=dict)
