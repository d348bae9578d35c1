"""Adapter for reflection snapshots of already compiled client libraries.

Field types arrive as type expressions in either Python syntax
(``Optional[list[str]]``, ``dict[str, int] | None``) or generic-angle
syntax (``Option<Vec<String>>``, ``HashMap<String, i64>``). Both parse into
the same :class:`TypeExpression` tree. An optional wrapper marks the field
as not required.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from schema_to_ir.ir.service import Provider
from schema_to_ir.ir.types import (
    BOOLEAN,
    DATETIME,
    FLOAT,
    INTEGER,
    STRING,
    EnumType,
    FieldType,
    ListType,
    MapType,
    ObjectType,
)
from schema_to_ir.models.reflection import ClientSnapshot, OperationSnapshot, TypeSnapshot
from schema_to_ir.transform.pipeline import FormatAdapter, OperationRef, SchemaMember
from schema_to_ir.transform.resolver import SchemaResolver
from schema_to_ir.validation.errors import DocumentMalformedError

if TYPE_CHECKING:
    from schema_to_ir.config import ConverterSettings
    from schema_to_ir.transform.resolver import ResolutionContext

SCALAR_NAMES: dict[str, FieldType] = {
    **dict.fromkeys(("str", "String", "string", "Str", "char", "bytes", "bytearray", "Blob"), STRING),
    **dict.fromkeys(("Any", "object", "Document", "UUID", "Uuid"), STRING),
    **dict.fromkeys(
        ("int", "Integer", "i8", "i16", "i32", "i64", "i128", "isize"),
        INTEGER,
    ),
    **dict.fromkeys(("u8", "u16", "u32", "u64", "u128", "usize"), INTEGER),
    **dict.fromkeys(("float", "Float", "f32", "f64", "Decimal", "BigDecimal"), FLOAT),
    **dict.fromkeys(("bool", "Boolean"), BOOLEAN),
    **dict.fromkeys(("datetime", "date", "DateTime", "Timestamp", "SystemTime"), DATETIME),
}

OPTIONAL_WRAPPERS = frozenset({"Optional", "Option"})
TRANSPARENT_WRAPPERS = frozenset({"Box", "Arc", "Rc", "Final", "ClassVar", "Required", "NotRequired"})
LIST_NAMES = frozenset(
    {
        "list",
        "List",
        "Sequence",
        "MutableSequence",
        "Iterable",
        "Collection",
        "tuple",
        "Tuple",
        "set",
        "Set",
        "frozenset",
        "FrozenSet",
        "AbstractSet",
        "Vec",
        "VecDeque",
        "HashSet",
        "BTreeSet",
    }
)
MAP_NAMES = frozenset(
    {"dict", "Dict", "Mapping", "MutableMapping", "OrderedDict", "HashMap", "BTreeMap", "IndexMap"}
)
NONE_NAMES = frozenset({"None", "NoneType"})
LITERAL = "Literal"

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<quoted>'[^'<>,&]*'|"[^"<>,&]*")
      | (?P<name>[A-Za-z_][\w]*(?:(?:::|\.)[A-Za-z_][\w]*)*)
      | (?P<punct>[\[\]<>,|&])
      | (?P<lifetime>'[A-Za-z_]\w*)
      | (?P<ellipsis>\.\.\.)
    )""",
    re.VERBOSE,
)


def parse_client_snapshot(document: dict[str, Any] | ClientSnapshot) -> ClientSnapshot:
    """Validate a parsed document into a ClientSnapshot.

    Raises
    ------
        DocumentMalformedError: If the document does not have the snapshot shape.

    """
    if isinstance(document, ClientSnapshot):
        return document
    if not isinstance(document, dict):
        raise DocumentMalformedError("Reflection snapshot must be a mapping")
    try:
        return ClientSnapshot.model_validate(document)
    except ValidationError as e:
        raise DocumentMalformedError(
            "Document is not a valid reflection snapshot",
            details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e


# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeExpression:
    """A parsed type expression.

    Attributes
    ----------
        name: Last path segment of the type name (``HashMap`` for
            ``std::collections::HashMap``); ``|`` for unions; the unquoted
            text for string literals.
        args: Generic arguments, or union alternatives.
        literal: Whether this node is a quoted string literal.

    """

    name: str
    args: tuple[TypeExpression, ...] = ()
    literal: bool = False

    @property
    def is_none(self) -> bool:
        """Check whether this is the ``None`` type."""
        return not self.literal and self.name in NONE_NAMES


class TypeExpressionError(ValueError):
    """Raised when a type expression cannot be parsed."""


def parse_type_expression(text: str) -> TypeExpression:
    """Parse a Python or generic-angle type expression.

    Raises
    ------
        TypeExpressionError: If the text is not a well-formed expression.

    """
    return _ExpressionParser(text).parse()


class _ExpressionParser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = self._tokenize(text)
        self.pos = 0

    def _tokenize(self, text: str) -> list[tuple[str, str]]:
        tokens = []
        pos = 0
        while pos < len(text):
            if text[pos:].strip() == "":
                break
            match = _TOKEN_RE.match(text, pos)
            if match is None or match.end() == pos or match.lastgroup is None:
                raise TypeExpressionError(f"Unexpected character at {pos} in {text!r}")
            pos = match.end()
            kind = match.lastgroup
            if kind in ("lifetime", "ellipsis"):
                continue
            tokens.append((kind, match.group(kind)))
        return tokens

    def _peek(self) -> str | None:
        return self.tokens[self.pos][1] if self.pos < len(self.tokens) else None

    def _take(self) -> tuple[str, str]:
        if self.pos >= len(self.tokens):
            raise TypeExpressionError(f"Unexpected end of {self.text!r}")
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def parse(self) -> TypeExpression:
        expression = self._union()
        if self.pos != len(self.tokens):
            raise TypeExpressionError(f"Trailing input {self._peek()!r} in {self.text!r}")
        return expression

    def _union(self) -> TypeExpression:
        alternatives = [self._term()]
        while self._peek() == "|":
            self._take()
            alternatives.append(self._term())
        if len(alternatives) == 1:
            return alternatives[0]
        return TypeExpression("|", tuple(alternatives))

    def _term(self) -> TypeExpression:
        while self._peek() == "&":
            self._take()
        kind, value = self._take()
        if kind == "quoted":
            return TypeExpression(value[1:-1], literal=True)
        if kind != "name":
            raise TypeExpressionError(f"Expected a type name, got {value!r} in {self.text!r}")

        name = re.split(r"::|\.", value)[-1]
        if name in ("mut", "dyn", "impl") and self._peek() not in (None, ",", "]", ">", "|"):
            return self._term()

        opener = self._peek()
        if opener not in ("[", "<"):
            return TypeExpression(name)
        self._take()
        closer = "]" if opener == "[" else ">"
        args = [self._union()]
        while self._peek() == ",":
            self._take()
            if self._peek() == closer:
                break
            args.append(self._union())
        _, value = self._take()
        if value != closer:
            raise TypeExpressionError(f"Expected {closer!r}, got {value!r} in {self.text!r}")
        return TypeExpression(name, tuple(args))


# ---------------------------------------------------------------------------
# Resolver and adapter
# ---------------------------------------------------------------------------


class ReflectionResolver(SchemaResolver[TypeSnapshot]):
    """Resolves type names of a snapshot and maps type expressions to types."""

    def __init__(self, snapshot: ClientSnapshot) -> None:
        """Initialize with the snapshot whose types are resolved."""
        self.snapshot = snapshot

    def lookup(self, reference: str) -> TypeSnapshot | None:
        """Find a type by name."""
        return self.snapshot.types.get(reference)

    def field_type(self, node: TypeSnapshot, context: ResolutionContext) -> FieldType:
        """Map an enum to its variants and a struct to an object of its fields."""
        if node.kind == "enum":
            return EnumType(tuple(node.variants))
        return ObjectType(
            tuple(
                (name, self.annotation_type(field.annotation, context.child(name))[0])
                for name, field in node.fields.items()
            )
        )

    def annotation_type(
        self,
        annotation: str,
        context: ResolutionContext,
    ) -> tuple[FieldType, bool]:
        """Map an annotation to a field type.

        Returns
        -------
            The field type and whether the annotation is optional.

        """
        try:
            expression = parse_type_expression(annotation)
        except TypeExpressionError:
            return context.unsupported(annotation), True
        return self.expression_type(expression, context)

    def expression_type(
        self,
        expression: TypeExpression,
        context: ResolutionContext,
    ) -> tuple[FieldType, bool]:
        """Map a parsed expression; see :meth:`annotation_type`."""
        name, args = expression.name, expression.args
        if expression.literal:
            return EnumType((name,)), False
        if expression.is_none:
            return STRING, True
        if name == "|":
            return self._union_type(args, context)
        if name in OPTIONAL_WRAPPERS:
            inner, _ = self.expression_type(args[0], context) if args else (STRING, True)
            return inner, True
        if name in TRANSPARENT_WRAPPERS and args:
            return self.expression_type(args[0], context)
        if name == LITERAL:
            variants = tuple(arg.name for arg in args if not arg.is_none)
            return EnumType(variants), any(arg.is_none for arg in args)
        if name in LIST_NAMES:
            if not args:
                return ListType(STRING), False
            item, _ = self.expression_type(args[0], context.child("item"))
            return ListType(item), False
        if name in MAP_NAMES:
            key, value = (args[0], args[1]) if len(args) == 2 else (None, None)
            key_type = self.expression_type(key, context)[0] if key else STRING
            value_type = (
                self.expression_type(value, context.child("value"))[0] if value else STRING
            )
            return MapType(key_type, value_type), False
        if name in SCALAR_NAMES:
            return SCALAR_NAMES[name], False
        if args:
            return context.unsupported(name), False
        return self.resolve_type(name, context), False

    def _union_type(
        self,
        alternatives: tuple[TypeExpression, ...],
        context: ResolutionContext,
    ) -> tuple[FieldType, bool]:
        optional = any(alt.is_none for alt in alternatives)
        types = [self.expression_type(alt, context)[0] for alt in alternatives if not alt.is_none]
        if types and all(t == types[0] for t in types):
            return types[0], optional
        return STRING, optional

    def struct_name(self, expression: TypeExpression) -> str | None:
        """Name of the struct an expression holds, directly or as list items."""
        name, args = expression.name, expression.args
        if expression.literal:
            return None
        if name == "|":
            named = [self.struct_name(alt) for alt in args if not alt.is_none]
            return named[0] if len(named) == 1 else None
        if name in OPTIONAL_WRAPPERS or name in TRANSPARENT_WRAPPERS or name in LIST_NAMES:
            return self.struct_name(args[0]) if args else None
        node = self.resolve(name)
        if node is not None and node.kind == "struct":
            return name
        return None


class ReflectionAdapter(FormatAdapter):
    """Exposes a client snapshot's operations and types to the pipeline.

    Operations carry no wire verb and no structural resource hint; both
    the category and the resource come from the operation name, so
    ``CreateBucket`` and ``GetBucketLocation`` both contribute to ``bucket``.
    """

    format_name = "reflection"
    default_provider = Provider.AWS

    def __init__(
        self,
        snapshot: ClientSnapshot,
        settings: ConverterSettings | None = None,
    ) -> None:
        """Initialize the adapter with a snapshot."""
        super().__init__(settings)
        self.snapshot = snapshot
        self.resolver = ReflectionResolver(snapshot)

    def enumerate_operations(self) -> Iterator[OperationRef]:
        """Yield operations in snapshot order."""
        for operation in self.snapshot.operations:
            yield OperationRef(
                identifier=operation.name,
                description=operation.doc,
                source=operation,
            )

    def input_schema(self, operation: OperationRef) -> str | None:
        """Name of the operation's input type."""
        source: OperationSnapshot = operation.source
        return self.snapshot.input_type(source)

    def output_schema(self, operation: OperationRef) -> str | None:
        """Name of the operation's output type."""
        source: OperationSnapshot = operation.source
        return self.snapshot.output_type(source)

    def members(self, node: str, context: ResolutionContext) -> list[SchemaMember]:
        """List the fields of a struct type."""
        type_snapshot = self.resolver.resolve(node)
        if type_snapshot is None:
            self.resolver.unresolved(node, context)
            return []

        members = []
        for name, field in type_snapshot.fields.items():
            field_context = context.for_field(name)
            try:
                expression = parse_type_expression(field.annotation)
            except TypeExpressionError:
                field_type, optional = field_context.unsupported(field.annotation), True
                nested = None
            else:
                field_type, optional = self.resolver.expression_type(expression, field_context)
                nested = self.resolver.struct_name(expression)
            members.append(
                SchemaMember(
                    name=name,
                    field_type=field_type,
                    required=not optional,
                    sensitive=field.sensitive,
                    description=field.doc,
                    schema=nested,
                    type_name=nested,
                )
            )
        return members
