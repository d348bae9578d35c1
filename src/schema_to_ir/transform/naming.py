"""Identifier normalization.

Every identifier taken from a source document (operation names, member
names, resource tokens) passes through :func:`to_snake_case` before it
lands in the IR.
"""

from __future__ import annotations

_SEPARATORS = frozenset("-_ ")
_NON_PLURAL_ENDINGS = ("ss", "us", "is")


def to_snake_case(name: str) -> str:
    """Convert an identifier in any common case style to snake_case.

    Hyphens and spaces act as separators. A separator goes before an
    uppercase letter when the previous character is lowercase or a digit,
    or when the next character is lowercase, so acronym runs stay
    together. Consecutive separators collapse and leading/trailing ones
    are trimmed. Other characters (dots, slashes) are kept as they are.

    Args:
    ----
        name: Source identifier.

    Returns:
    -------
        Lowercase, underscore-separated identifier.

    Example:
    -------
        >>> to_snake_case("HTTPServer")
        'http_server'
        >>> to_snake_case("createNamespacedPod")
        'create_namespaced_pod'

    """
    chars: list[str] = []
    length = len(name)

    for i, char in enumerate(name):
        if char in _SEPARATORS:
            chars.append("_")
            continue
        if char.isupper() and i > 0:
            prev_char = name[i - 1]
            next_char = name[i + 1] if i + 1 < length else ""
            if prev_char.islower() or prev_char.isdigit() or next_char.islower():
                chars.append("_")
        chars.append(char.lower())

    result = "".join(chars)
    while "__" in result:
        result = result.replace("__", "_")
    return result.strip("_")


def to_pascal_case(name: str) -> str:
    """Convert an identifier to PascalCase.

    Example:
    -------
        >>> to_pascal_case("create_bucket")
        'CreateBucket'

    """
    return "".join(part[:1].upper() + part[1:] for part in to_snake_case(name).split("_") if part)


def singularize(token: str) -> str:
    """Strip a trailing plural 's' from a resource token.

    Only a single trailing 's' is removed. Words ending in 'ss', 'us' or 'is'
    are left alone ('address', 'status', 'analysis').
    """
    if len(token) > 1 and token.endswith("s") and not token.endswith(_NON_PLURAL_ENDINGS):
        return token[:-1]
    return token


def resource_key(token: str) -> str:
    """Normalize a resource token into the key resources are grouped by."""
    return singularize(to_snake_case(token))
