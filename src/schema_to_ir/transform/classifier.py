"""CRUD classification of operations.

Operations are sorted into create/read/update/delete by their leading verb.
The alias table is checked category by category and the first category
with a matching alias wins, so a ``Put...`` operation is always a Create
even when it semantically updates. That ambiguity is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from schema_to_ir.transform.naming import singularize, to_snake_case


class CrudOperation(Enum):
    """Lifecycle category of an operation."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


# Checked in this order; the first category with a matching alias wins.
OPERATION_ALIASES: tuple[tuple[CrudOperation, tuple[str, ...]], ...] = (
    (CrudOperation.CREATE, ("create", "put", "insert")),
    (CrudOperation.READ, ("get", "describe", "head", "list")),
    (CrudOperation.UPDATE, ("update", "modify", "patch")),
    (CrudOperation.DELETE, ("delete", "remove")),
)

# Used only when no alias matches the name.
VERB_CATEGORIES: dict[str, CrudOperation] = {
    "POST": CrudOperation.CREATE,
    "GET": CrudOperation.READ,
    "HEAD": CrudOperation.READ,
    "PUT": CrudOperation.UPDATE,
    "PATCH": CrudOperation.UPDATE,
    "DELETE": CrudOperation.DELETE,
}

LIST_ALIAS = "list"


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one operation.

    Attributes
    ----------
        category: CRUD category, or None when unclassified.
        resource: Singular resource token, or None when the name carries none.
        is_list: Whether the operation lists instances rather than reading one.
        alias: The alias (or wire verb) that decided the category.

    """

    category: CrudOperation | None
    resource: str | None = None
    is_list: bool = False
    alias: str | None = None

    @property
    def is_classified(self) -> bool:
        """Check whether a category was found."""
        return self.category is not None


def match_alias(normalized: str) -> tuple[CrudOperation, str] | None:
    """Find the category and longest alias prefixing a normalized name."""
    for category, aliases in OPERATION_ALIASES:
        matches = [
            alias for alias in aliases if normalized == alias or normalized.startswith(f"{alias}_")
        ]
        if matches:
            return category, max(matches, key=len)
    return None


def extract_resource(suffix: str) -> str | None:
    """Take the first segment of a normalized suffix as the resource token."""
    segment = suffix.split("_", 1)[0]
    if not segment:
        return None
    return singularize(segment)


def resource_suffix(name: str) -> str | None:
    """Everything after the matched alias, for names that spell out the whole resource.

    gRPC method names carry no structural resource hint, so ``CreateServiceAccount``
    names the resource ``service_account`` rather than ``service``.
    """
    normalized = to_snake_case(name)
    matched = match_alias(normalized)
    if matched is None:
        return None
    suffix = normalized[len(matched[1]) :].lstrip("_")
    return suffix or None


def classify_operation(name: str, verb: str | None = None) -> Classification:
    """Classify an operation by name, falling back on its wire verb.

    Args:
    ----
        name: Source-native operation name in any case style.
        verb: HTTP method of the operation, if the format has one.

    Returns:
    -------
        The classification. Unclassified operations have ``category=None``.

    Example:
    -------
        >>> classify_operation("get_bucket_location")
        Classification(category=<CrudOperation.READ: 'read'>, resource='bucket', ...)

    """
    normalized = to_snake_case(name)
    matched = match_alias(normalized)

    if matched is not None:
        category, alias = matched
        suffix = normalized[len(alias) :].lstrip("_")
        return Classification(
            category=category,
            resource=extract_resource(suffix),
            is_list=alias == LIST_ALIAS,
            alias=alias,
        )

    if verb is not None:
        category = VERB_CATEGORIES.get(verb.upper())
        if category is not None:
            return Classification(category=category, alias=verb.upper())

    return Classification(category=None)
