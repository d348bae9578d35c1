"""Tests for the type expression parser."""

import pytest
from schema_to_ir.adapters.reflection import (
    TypeExpression,
    TypeExpressionError,
    parse_type_expression,
)

T = TypeExpression


class TestParseTypeExpression:
    """Tests for parse_type_expression."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("str", T("str")),
            ("Optional[list[str]]", T("Optional", (T("list", (T("str"),)),))),
            ("Option<Vec<String>>", T("Option", (T("Vec", (T("String"),)),))),
            ("dict[str, int]", T("dict", (T("str"), T("int")))),
            (
                "std::collections::HashMap<String, i64>",
                T("HashMap", (T("String"), T("i64"))),
            ),
            ("typing.Optional[int]", T("Optional", (T("int"),))),
            ("int | None", T("|", (T("int"), T("None")))),
            ("Literal['a', \"b\"]", T("Literal", (T("a", literal=True), T("b", literal=True)))),
            ("&'a str", T("str")),
            ("&mut Vec<u8>", T("Vec", (T("u8"),))),
            ("HashMap<&'a str, &'b str>", T("HashMap", (T("str"), T("str")))),
            ("Option<&'static str>", T("Option", (T("str"),))),
            ("HashMap<String, i64,>", T("HashMap", (T("String"), T("i64")))),
            ("Tuple[int, ...]", T("Tuple", (T("int"),))),
        ],
    )
    def test_valid(self, text: str, expected: TypeExpression) -> None:
        """Should parse both Python and generic-angle syntax."""
        assert parse_type_expression(text) == expected

    def test_union_inside_generic(self) -> None:
        """Should parse unions as generic arguments."""
        expression = parse_type_expression("list[int | str]")
        assert expression == T("list", (T("|", (T("int"), T("str"))),))

    def test_is_none(self) -> None:
        """Should recognize None but not the string literal 'None'."""
        assert T("None").is_none
        assert T("NoneType").is_none
        assert not T("None", literal=True).is_none

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("", "Unexpected end"),
            ("list[str", "Unexpected end"),
            ("list[str>", "Expected ']'"),
            ("int]", "Trailing input"),
            ("$int", "Unexpected character"),
            ("[int]", "Expected a type name"),
        ],
    )
    def test_invalid(self, text: str, message: str) -> None:
        """Should reject malformed expressions."""
        with pytest.raises(TypeExpressionError, match=message):
            parse_type_expression(text)

    def test_error_is_value_error(self) -> None:
        """Should raise a ValueError subclass."""
        with pytest.raises(ValueError):
            parse_type_expression("<")
