"""Shared scaffolding for per-format schema resolvers.

A resolver turns format-native reference tokens into schema nodes and
schema nodes into IR field types. Source schema graphs may be cyclic, so
every resolution runs under a :class:`ResolutionContext` that tracks the
references currently being expanded and the nesting depth. A cycle or an
overly deep schema yields :data:`FALLBACK_TYPE` plus a warning instead of
an error.

Guard state belongs to one top-level field resolution. Contexts created
with :meth:`ResolutionContext.for_field` share the warning report but not
the guard.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from schema_to_ir.ir.types import FALLBACK_TYPE, FieldType
from schema_to_ir.validation.errors import ConversionReport, ErrorCodes

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT")

DEFAULT_MAX_DEPTH = 32


class ResolutionContext:
    """Cycle guard and warning sink for resolving one field's type."""

    def __init__(
        self,
        report: ConversionReport,
        max_depth: int = DEFAULT_MAX_DEPTH,
        path: str = "",
    ) -> None:
        """Initialize the context.

        Args:
        ----
            report: Report receiving non-fatal warnings.
            max_depth: Maximum number of nested expansions.
            path: Dotted location used in warnings.

        """
        self.report = report
        self.max_depth = max_depth
        self.path = path
        self._active: list[str | None] = []

    @property
    def depth(self) -> int:
        """Number of expansions currently in progress."""
        return len(self._active)

    @property
    def active_references(self) -> tuple[str, ...]:
        """References currently being expanded, outermost first."""
        return tuple(key for key in self._active if key is not None)

    def for_field(self, name: str) -> ResolutionContext:
        """Create a context with a fresh guard for one member."""
        path = f"{self.path}.{name}" if self.path else name
        return ResolutionContext(self.report, self.max_depth, path)

    def child(self, name: str) -> ResolutionContext:
        """Create a context sharing this guard, one path segment deeper."""
        nested = ResolutionContext(self.report, self.max_depth, f"{self.path}.{name}")
        nested._active = self._active
        return nested

    @contextmanager
    def guard(self, key: str | None = None) -> Iterator[bool]:
        """Enter one level of expansion.

        Yields True when expansion may proceed. Yields False, after
        recording a warning, when ``key`` is already being expanded or the
        depth bound is reached.

        Args:
        ----
            key: Identity of the node being expanded, or None for anonymous
                nesting that only counts towards depth.

        """
        if key is not None and key in self._active:
            chain = " -> ".join([*self.active_references, key])
            self.report.add_warning(
                ErrorCodes.W003_RECURSION_LIMIT_EXCEEDED,
                f"Cyclic reference {key!r}; substituting fallback type",
                self.path or None,
                chain=chain,
            )
            yield False
            return
        if len(self._active) >= self.max_depth:
            self.report.add_warning(
                ErrorCodes.W003_RECURSION_LIMIT_EXCEEDED,
                f"Schema nesting exceeds depth {self.max_depth}; substituting fallback type",
                self.path or None,
                reference=key,
            )
            yield False
            return

        self._active.append(key)
        try:
            yield True
        finally:
            self._active.pop()

    def unresolved(self, reference: str) -> FieldType:
        """Record an unresolved reference and return the fallback type."""
        self.report.add_warning(
            ErrorCodes.W002_UNRESOLVED_REFERENCE,
            f"Reference {reference!r} does not resolve; substituting fallback type",
            self.path or None,
            reference=reference,
        )
        return FALLBACK_TYPE

    def alias_loop(self, chain: tuple[str, ...]) -> FieldType:
        """Record a reference chain that loops back on itself."""
        self.report.add_warning(
            ErrorCodes.W003_RECURSION_LIMIT_EXCEEDED,
            f"Alias chain from {chain[0]!r} loops; substituting fallback type",
            self.path or None,
            chain=" -> ".join(chain),
        )
        return FALLBACK_TYPE

    def unsupported(self, native_type: str) -> FieldType:
        """Record an unmapped native type and return the fallback type."""
        self.report.add_warning(
            ErrorCodes.W004_UNSUPPORTED_NATIVE_TYPE,
            f"Native type {native_type!r} has no mapping; using string",
            self.path or None,
            native_type=native_type,
        )
        return FALLBACK_TYPE


class SchemaResolver(ABC, Generic[NodeT]):
    """Base class for format resolvers.

    Subclasses provide the lookup of a single reference token and the
    native type mapping; following alias chains and guarding against
    cycles is shared.
    """

    @abstractmethod
    def lookup(self, reference: str) -> NodeT | None:
        """Return the node a reference token names directly, or None."""
        ...

    @abstractmethod
    def field_type(self, node: NodeT, context: ResolutionContext) -> FieldType:
        """Map a resolved node to an IR field type."""
        ...

    def reference_of(self, node: NodeT) -> str | None:
        """Return the token a pure alias node points to, if it is one."""
        return None

    def follow(self, reference: str) -> tuple[NodeT | None, tuple[str, ...]]:
        """Follow a reference and any alias chain.

        Returns the concrete node, or None, together with the tokens visited
        in order. A chain that loops ends with the repeated token.
        """
        chain: list[str] = []
        current: str | None = reference
        node: NodeT | None = None
        while current is not None:
            if current in chain:
                logger.debug("Alias loop through %r", current)
                return None, (*chain, current)
            chain.append(current)
            node = self.lookup(current)
            if node is None:
                return None, tuple(chain)
            current = self.reference_of(node)
        return node, tuple(chain)

    def resolve(self, reference: str) -> NodeT | None:
        """Follow a reference and any alias chain to a concrete node.

        Returns None when the chain ends in nothing or loops on itself.
        """
        return self.follow(reference)[0]

    def unresolved(self, reference: str, context: ResolutionContext) -> FieldType:
        """Record why a reference has no node and return the fallback type.

        An alias chain that loops is a cycle (W003); anything else is a
        dangling reference (W002).
        """
        node, chain = self.follow(reference)
        if node is None and chain[-1] in chain[:-1]:
            return context.alias_loop(chain)
        return context.unresolved(reference)

    def resolve_type(self, reference: str, context: ResolutionContext) -> FieldType:
        """Resolve a reference token all the way to a field type."""
        with context.guard(reference) as allowed:
            if not allowed:
                return FALLBACK_TYPE
            node = self.resolve(reference)
            if node is None:
                return self.unresolved(reference, context)
            return self.field_type(node, context)


def node_key(node: Any) -> str:
    """Identity key for anonymous nodes."""
    return f"@{id(node):x}"
