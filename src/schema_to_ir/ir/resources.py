"""IR models for resources and their operation bindings.

Operation identifiers are stored exactly as the source document spells
them after identifier normalization.
"""

from __future__ import annotations

from dataclasses import dataclass

from schema_to_ir.ir.fields import BlockDefinition, FieldDefinition

OPERATION_SLOTS: tuple[str, ...] = ("create", "read", "update", "delete", "import")


@dataclass(frozen=True)
class OperationMapping:
    """Binding of one lifecycle action to backend operations.

    Attributes
    ----------
        sdk_operation: Primary operation identifier.
        additional_operations: Supplementary operations, in the order they
            were encountered, that complete the action.

    """

    sdk_operation: str
    additional_operations: tuple[str, ...] = ()

    @property
    def all_operations(self) -> tuple[str, ...]:
        """Primary operation followed by the supplementary ones."""
        return (self.sdk_operation, *self.additional_operations)


@dataclass(frozen=True)
class Operations:
    """Lifecycle bindings of a resource.

    Every slot is optional; a missing slot means the action is not
    supported, not that something went wrong.
    """

    create: OperationMapping | None = None
    read: OperationMapping | None = None
    update: OperationMapping | None = None
    delete: OperationMapping | None = None
    import_: OperationMapping | None = None

    def get(self, slot: str) -> OperationMapping | None:
        """Get a binding by its serialized slot name."""
        if slot not in OPERATION_SLOTS:
            raise KeyError(slot)
        return getattr(self, "import_" if slot == "import" else slot)

    def populated(self) -> list[tuple[str, OperationMapping]]:
        """Return the populated (slot, mapping) pairs in slot order."""
        pairs = []
        for slot in OPERATION_SLOTS:
            mapping = self.get(slot)
            if mapping is not None:
                pairs.append((slot, mapping))
        return pairs

    @property
    def has_crud(self) -> bool:
        """Check whether any of create/read/update/delete is bound."""
        return any(
            mapping is not None for mapping in (self.create, self.read, self.update, self.delete)
        )

    @property
    def is_empty(self) -> bool:
        """Check whether no slot is bound at all."""
        return not self.populated()

    def markers(self) -> str:
        """Short C/R/U/D marker string, '-' for unbound slots."""
        return "".join(
            letter if mapping is not None else "-"
            for letter, mapping in zip(
                "CRUD", (self.create, self.read, self.update, self.delete), strict=True
            )
        )


@dataclass(frozen=True)
class ResourceDefinition:
    """A CRUD-style resource.

    A ResourceDefinition with no populated CRUD operation can be built, but
    the assembler never lets one reach a ServiceDefinition.

    Attributes
    ----------
        name: Normalized, service-unique resource name.
        description: Human-readable description.
        fields: Input fields, from the create (or update) input.
        outputs: Output fields, from the read output.
        blocks: Nested attribute groups of the input.
        id_field: Name of the field identifying an instance, if known.
        operations: Lifecycle bindings.

    """

    name: str
    description: str | None = None
    fields: tuple[FieldDefinition, ...] = ()
    outputs: tuple[FieldDefinition, ...] = ()
    blocks: tuple[BlockDefinition, ...] = ()
    id_field: str | None = None
    operations: Operations = Operations()

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get an input field by name."""
        for field_def in self.fields:
            if field_def.name == name:
                return field_def
        return None

    def get_output(self, name: str) -> FieldDefinition | None:
        """Get an output field by name."""
        for field_def in self.outputs:
            if field_def.name == name:
                return field_def
        return None


@dataclass(frozen=True)
class DataSourceDefinition:
    """Read-only variant of a resource.

    Attributes
    ----------
        name: Normalized name, shared with the resource it derives from.
        description: Human-readable description.
        arguments: Lookup inputs, from the read operation's input.
        outputs: Returned fields.
        read: Operation fetching one instance.
        list: Operation listing instances, if the source has one.

    """

    name: str
    description: str | None = None
    arguments: tuple[FieldDefinition, ...] = ()
    outputs: tuple[FieldDefinition, ...] = ()
    read: OperationMapping | None = None
    list: OperationMapping | None = None
