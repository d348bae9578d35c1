"""Adapter contract between format-specific code and the shared pipeline.

A format adapter answers four questions about its document: which
operations exist, where an operation's input and output schemas live,
which members a schema node has, and (through its resolver) what IR type
each member has. Bucketing operations into resources and assembling the
service is done once, by :class:`schema_to_ir.transform.transformer.IRTransformer`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from schema_to_ir.config import ConverterSettings, get_settings
from schema_to_ir.ir.service import Provider, ServiceDefinition
from schema_to_ir.ir.types import FieldType
from schema_to_ir.validation.errors import ConversionIssue, ConversionReport

if TYPE_CHECKING:
    from schema_to_ir.transform.resolver import ResolutionContext


@dataclass(frozen=True)
class OperationRef:
    """One operation found while enumerating a document.

    Attributes
    ----------
        identifier: Source-native operation name.
        verb: Wire verb (HTTP method), if the format has one.
        resource: Resource name implied by the document structure (a
            collection, a path, a resource shape), if any. Takes precedence
            over the token derived from the operation name.
        description: Human-readable description.
        source: Format-native node the adapter needs to locate schemas.

    """

    identifier: str
    verb: str | None = None
    resource: str | None = None
    description: str | None = None
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class SchemaMember:
    """One member of a schema node, with its type already resolved.

    Attributes
    ----------
        name: Source-native member name.
        field_type: Resolved IR type.
        required: Whether the source lists the member as required.
        sensitive: Whether the source carries an explicit sensitivity trait.
        immutable: Whether the source binds the member as an identifier
            (path parameter, path label).
        description: Human-readable description.
        schema: Node of the nested object, or of the list item for lists,
            used to build nested blocks.
        type_name: Native name of the nested object type.

    """

    name: str
    field_type: FieldType
    required: bool = False
    sensitive: bool = False
    immutable: bool = False
    description: str | None = None
    schema: Any = field(default=None, compare=False, repr=False)
    type_name: str | None = None


class FormatAdapter(ABC):
    """Format-specific half of a conversion."""

    format_name: ClassVar[str]
    default_provider: ClassVar[Provider]

    def __init__(self, settings: ConverterSettings | None = None) -> None:
        """Initialize with converter settings."""
        self.settings = settings or get_settings()

    @property
    def provider(self) -> Provider:
        """Provider assumed when the caller gives no hint."""
        return self.default_provider

    @abstractmethod
    def enumerate_operations(self) -> Iterator[OperationRef]:
        """Yield every operation in document order."""
        ...

    @abstractmethod
    def input_schema(self, operation: OperationRef) -> Any | None:
        """Locate the node describing an operation's request body."""
        ...

    @abstractmethod
    def output_schema(self, operation: OperationRef) -> Any | None:
        """Locate the node describing an operation's response."""
        ...

    @abstractmethod
    def members(self, node: Any, context: ResolutionContext) -> list[SchemaMember]:
        """List the members of a schema node in source order."""
        ...

    def parameters(self, operation: OperationRef, context: ResolutionContext) -> list[SchemaMember]:
        """List inputs carried outside the request body (path, query)."""
        return []


@dataclass
class ConversionResult:
    """A converted service and everything noteworthy about its conversion."""

    service: ServiceDefinition
    report: ConversionReport = field(default_factory=ConversionReport)

    @property
    def warnings(self) -> list[ConversionIssue]:
        """Get the warning-level issues."""
        return self.report.warnings

    @property
    def issues(self) -> list[ConversionIssue]:
        """Get all issues."""
        return self.report.issues

    @property
    def is_empty(self) -> bool:
        """Check whether no resource was found."""
        return not self.service.resources
