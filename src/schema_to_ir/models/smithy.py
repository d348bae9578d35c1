"""Pydantic models for the Smithy JSON AST.

Only the parts of the AST the converter reads are modelled; unknown keys
are ignored so newer model files still load.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

# Trait ids read by the converter
DOCUMENTATION_TRAIT = "smithy.api#documentation"
REQUIRED_TRAIT = "smithy.api#required"
SENSITIVE_TRAIT = "smithy.api#sensitive"
HTTP_LABEL_TRAIT = "smithy.api#httpLabel"
ENUM_TRAIT = "smithy.api#enum"
ENUM_VALUE_TRAIT = "smithy.api#enumValue"
HTTP_TRAIT = "smithy.api#http"

PRELUDE_NAMESPACE = "smithy.api"


class SmithyModelBase(BaseModel):
    """Base for all Smithy AST models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ShapeRef(SmithyModelBase):
    """Reference to another shape (``{"target": "ns#Name"}``)."""

    target: str


class MemberShape(SmithyModelBase):
    """A member of a structure, union, list or map."""

    target: str
    traits: dict[str, Any] = Field(default_factory=dict)


class Shape(SmithyModelBase):
    """Any shape; which fields are populated depends on ``type``."""

    type: str
    traits: dict[str, Any] = Field(default_factory=dict)

    # structure, union, enum, intEnum
    members: dict[str, MemberShape] = Field(default_factory=dict)
    # list, set
    member: MemberShape | None = None
    # map
    key: MemberShape | None = None
    value: MemberShape | None = None

    # service
    version: str | None = None
    operations: list[ShapeRef] = Field(default_factory=list)
    resources: list[ShapeRef] = Field(default_factory=list)

    # operation
    input: ShapeRef | None = None
    output: ShapeRef | None = None

    # resource lifecycle bindings
    identifiers: dict[str, ShapeRef] = Field(default_factory=dict)
    create: ShapeRef | None = None
    put: ShapeRef | None = None
    read: ShapeRef | None = None
    update: ShapeRef | None = None
    delete: ShapeRef | None = None
    list_: Annotated[ShapeRef | None, Field(alias="list")] = None
    collection_operations: Annotated[
        list[ShapeRef], Field(alias="collectionOperations", default_factory=list)
    ]

    def has_trait(self, trait: str) -> bool:
        """Check whether the shape carries a trait."""
        return trait in self.traits

    @property
    def documentation(self) -> str | None:
        """Documentation trait value, if any."""
        value = self.traits.get(DOCUMENTATION_TRAIT)
        return value if isinstance(value, str) else None

    def lifecycle_bindings(self) -> list[ShapeRef]:
        """Lifecycle operations of a resource shape, in binding order."""
        return [
            ref
            for ref in (self.create, self.put, self.read, self.update, self.delete, self.list_)
            if ref is not None
        ]


class SmithyModel(SmithyModelBase):
    """Root of a Smithy JSON AST document."""

    smithy: str
    shapes: dict[str, Shape] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def services(self) -> list[tuple[str, Shape]]:
        """All service shapes with their ids, in document order."""
        return [(shape_id, shape) for shape_id, shape in self.shapes.items() if shape.type == "service"]

    def find_shape(self, name: str) -> tuple[str, Shape] | None:
        """Find a shape by absolute id, falling back to a ``#name`` suffix match."""
        if name in self.shapes:
            return name, self.shapes[name]
        suffix = f"#{name}"
        for shape_id, shape in self.shapes.items():
            if shape_id.endswith(suffix):
                return shape_id, shape
        return None


def shape_name(shape_id: str) -> str:
    """Local name of a shape id (``ns#Name`` -> ``Name``)."""
    return shape_id.rsplit("#", 1)[-1]


def is_prelude(shape_id: str) -> bool:
    """Check whether a shape id points into the Smithy prelude."""
    return shape_id.startswith(f"{PRELUDE_NAMESPACE}#")
