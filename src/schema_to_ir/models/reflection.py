"""Pydantic models for reflection snapshots of compiled client libraries.

A snapshot lists a client's operations (with their input and output type
names) and its types (with field annotations kept as text). Snapshots are
either loaded from JSON/YAML or taken from a live Python package with
:func:`snapshot_from_module`.
"""

from __future__ import annotations

import dataclasses
import enum
import inspect
import logging
import types
import typing
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

INPUT_SUFFIX = "Input"
OUTPUT_SUFFIX = "Output"


class ReflectionModelBase(BaseModel):
    """Base for all snapshot models."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class FieldSnapshot(ReflectionModelBase):
    """A field of a client type.

    Attributes
    ----------
        annotation: Type expression as written, e.g. ``Optional[str]`` or
            ``Option<Vec<String>>``.
        doc: Field documentation.
        sensitive: Whether the client marks the field as sensitive.

    """

    annotation: str
    doc: str | None = None
    sensitive: bool = False


class TypeSnapshot(ReflectionModelBase):
    """A struct-like or enum-like client type."""

    kind: Literal["struct", "enum"] = "struct"
    doc: str | None = None
    fields: dict[str, FieldSnapshot] = Field(default_factory=dict)
    variants: list[str] = Field(default_factory=list)


class OperationSnapshot(ReflectionModelBase):
    """A callable client operation."""

    name: str
    input: str | None = None
    output: str | None = None
    doc: str | None = None


class ClientSnapshot(ReflectionModelBase):
    """Root of a reflection snapshot."""

    package: str
    version: str | None = None
    operations: list[OperationSnapshot] = Field(default_factory=list)
    types: dict[str, TypeSnapshot] = Field(default_factory=dict)

    def input_type(self, operation: OperationSnapshot) -> str | None:
        """Declared input type, else the ``<Operation>Input`` type if present."""
        return operation.input or self._conventional(operation.name + INPUT_SUFFIX)

    def output_type(self, operation: OperationSnapshot) -> str | None:
        """Declared output type, else the ``<Operation>Output`` type if present."""
        return operation.output or self._conventional(operation.name + OUTPUT_SUFFIX)

    def _conventional(self, name: str) -> str | None:
        return name if name in self.types else None


# ---------------------------------------------------------------------------
# Live module inspection
# ---------------------------------------------------------------------------


def snapshot_from_module(module: types.ModuleType, version: str | None = None) -> ClientSnapshot:
    """Take a snapshot of a client package.

    The package must expose an ``operation`` submodule, holding one entry
    per operation (a submodule or class whose name is the operation name),
    and a ``types`` submodule holding the shapes. Input and output classes
    found inside an operation submodule are recorded as its types.

    Args:
    ----
        module: Imported client package.
        version: Version to record; ``module.__version__`` otherwise.

    Raises:
    ------
        ValueError: If the package has no ``operation`` submodule.

    """
    operation_module = getattr(module, "operation", None)
    if not isinstance(operation_module, types.ModuleType):
        raise ValueError(f"Package {module.__name__!r} has no 'operation' submodule")

    snapshot_types: dict[str, TypeSnapshot] = {}
    types_module = getattr(module, "types", None)
    if isinstance(types_module, types.ModuleType):
        for name, cls in _public_members(types_module):
            if inspect.isclass(cls):
                snapshot_types[name] = type_snapshot(cls)

    operations = []
    for name, entry in _public_members(operation_module):
        input_name = output_name = None
        if isinstance(entry, types.ModuleType):
            for member_name, cls in _public_members(entry):
                if not inspect.isclass(cls):
                    continue
                if member_name.endswith(INPUT_SUFFIX):
                    input_name = member_name
                elif member_name.endswith(OUTPUT_SUFFIX):
                    output_name = member_name
                else:
                    continue
                snapshot_types.setdefault(member_name, type_snapshot(cls))
        elif not inspect.isclass(entry):
            continue
        operations.append(
            OperationSnapshot(
                name=name,
                input=input_name,
                output=output_name,
                doc=_doc(entry),
            )
        )

    logger.debug(
        "Snapshot of %s: %d operation(s), %d type(s)",
        module.__name__,
        len(operations),
        len(snapshot_types),
    )
    return ClientSnapshot(
        package=module.__name__,
        version=version or getattr(module, "__version__", None),
        operations=operations,
        types=snapshot_types,
    )


def type_snapshot(cls: type) -> TypeSnapshot:
    """Describe one class: enums by their values, everything else by its fields."""
    if issubclass(cls, enum.Enum):
        return TypeSnapshot(
            kind="enum",
            doc=_doc(cls),
            variants=[str(member.value) for member in cls],
        )

    hints = _type_hints(cls)
    fields: dict[str, FieldSnapshot] = {}
    if dataclasses.is_dataclass(cls):
        for field in dataclasses.fields(cls):
            fields[field.name] = FieldSnapshot(
                annotation=annotation_text(hints.get(field.name, field.type)),
                doc=field.metadata.get("doc"),
                sensitive=bool(field.metadata.get("sensitive", False)),
            )
    else:
        for name, annotation in hints.items():
            if not name.startswith("_"):
                fields[name] = FieldSnapshot(annotation=annotation_text(annotation))
    return TypeSnapshot(kind="struct", doc=_doc(cls), fields=fields)


def annotation_text(annotation: Any) -> str:
    """Render an annotation object as a type expression string."""
    if isinstance(annotation, str):
        return annotation
    if annotation is None or annotation is type(None):
        return "None"

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is None:
        return getattr(annotation, "__name__", str(annotation))
    if origin is typing.Annotated:
        return annotation_text(args[0])
    if origin is typing.Union or origin is types.UnionType:
        return " | ".join(annotation_text(arg) for arg in args)
    if origin is Literal:
        return "Literal[" + ", ".join(repr(str(arg)) for arg in args) + "]"

    name = getattr(origin, "__name__", str(origin))
    if not args:
        return name
    return f"{name}[" + ", ".join(annotation_text(arg) for arg in args if arg is not Ellipsis) + "]"


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        # unresolvable forward references stay as their source text
        logger.debug("Keeping raw annotations of %s: %s", cls.__name__, e)
        return dict(getattr(cls, "__annotations__", {}))


def _public_members(module: types.ModuleType) -> list[tuple[str, Any]]:
    names = getattr(module, "__all__", None)
    if names is not None:
        return [(name, getattr(module, name)) for name in names]
    members = []
    for name, value in vars(module).items():
        if name.startswith("_"):
            continue
        # skip anything merely imported into the module
        owner = getattr(value, "__module__", None) or getattr(value, "__name__", "")
        if isinstance(owner, str) and owner.startswith(module.__name__):
            members.append((name, value))
    return members


def _doc(obj: Any) -> str | None:
    doc = obj.__doc__
    if doc:
        doc = inspect.cleandoc(doc)
    # dataclasses synthesize a signature docstring
    if not doc or doc.startswith(f"{getattr(obj, '__name__', '')}("):
        return None
    return doc
