"""Tests for flattening attribute token trees."""

from __future__ import annotations

import pytest

from tests.conftest import attr
from validspec.syntax.schemas import Token


def _tokens(arguments: str) -> list[Token]:
    tokens = attr(f"validate({arguments})").arguments
    assert tokens is not None
    return tokens


def _kinds(arguments: str) -> list[tuple[str, str]]:
    return [(t.kind, t.value) for t in _tokens(arguments)]


def test_keyword_list() -> None:
    """Idents and commas come out in order, outer parens dropped."""
    assert _kinds("email, phone") == [
        ("ident", "email"),
        ("punct", ","),
        ("ident", "phone"),
    ]


def test_nested_group_keeps_its_delimiters() -> None:
    """``length(...)`` is spliced into the stream with its parens."""
    assert [t.text for t in _tokens("length(min = 1)")] == [
        "length",
        "(",
        "min",
        "=",
        "1",
        ")",
    ]


def test_negative_number_is_sign_then_literal() -> None:
    """``-1`` arrives as a ``-`` punct followed by an integer."""
    assert _kinds("length(min = -1, max = 10)")[3:6] == [
        ("punct", "="),
        ("punct", "-"),
        ("integer", "1"),
    ]


def test_adjacent_symbols_are_split() -> None:
    """``min=-1`` without spaces still yields ``=`` then ``-``."""
    assert _kinds("range(min=-1)") == [
        ("ident", "range"),
        ("punct", "("),
        ("ident", "min"),
        ("punct", "="),
        ("punct", "-"),
        ("integer", "1"),
        ("punct", ")"),
    ]


def test_escaped_string_is_decoded() -> None:
    """Escape sequences resolve into value; text is the literal."""
    code = _tokens('phone(code = "a\\"b")')[4]
    assert code.kind == "string"
    assert code.value == 'a"b'
    assert code.text == '"a\\"b"'


@pytest.mark.parametrize(
    ("literal", "value"),
    [
        ('"line\\n"', "line\n"),
        ('"tab\\there"', "tab\there"),
        ('"\\x41\\u{1F600}"', "A\U0001f600"),
        ('""', ""),
    ],
)
def test_string_escapes(literal: str, value: str) -> None:
    (tok,) = _tokens(literal)
    assert tok.value == value


def test_raw_string_keeps_backslashes() -> None:
    """Raw strings are not unescaped and may contain quotes."""
    (tok,) = _tokens('r#"^\\d+"x"#')
    assert tok.kind == "string"
    assert tok.value == '^\\d+"x'


def test_byte_and_char_literals_are_strings() -> None:
    """b"..", b'x' and 'x' all become string tokens."""
    assert [t for t in _kinds("b\"ab\", b'c', 'd'") if t[0] != "punct"] == [
        ("string", "ab"),
        ("string", "c"),
        ("string", "d"),
    ]


def test_raw_identifier_value_drops_prefix() -> None:
    """r#type has value type and text r#type."""
    (tok,) = _tokens("r#type")
    assert tok.kind == "ident"
    assert tok.value == "type"
    assert tok.text == "r#type"


def test_booleans_are_idents() -> None:
    assert _kinds("true") == [("ident", "true")]


@pytest.mark.parametrize(
    ("literal", "kind", "value"),
    [
        ("42", "integer", "42"),
        ("1_000u32", "integer", "1000"),
        ("0xff", "integer", "255"),
        ("0b101", "integer", "5"),
        ("2.5", "float", "2.5"),
    ],
)
def test_numbers(literal: str, kind: str, value: str) -> None:
    """Number literals normalise underscores, bases and suffixes."""
    (tok,) = _tokens(literal)
    assert (tok.kind, tok.value) == (kind, value)


def test_path_separator_is_one_token() -> None:
    """``::`` is a single punct token."""
    assert _kinds("crate::MAX") == [
        ("ident", "crate"),
        ("punct", "::"),
        ("ident", "MAX"),
    ]


def test_comments_produce_no_tokens() -> None:
    """Comments inside the argument list are dropped."""
    assert _kinds("email /* inline */, url") == [
        ("ident", "email"),
        ("punct", ","),
        ("ident", "url"),
    ]


def test_spans_point_into_the_file() -> None:
    """Token spans come from the tree, lines and columns 1-based."""
    tokens = attr("validate(phone,\n  url)", line=4).arguments
    assert tokens is not None

    assert str(tokens[0].span) == "model.rs:4:12"
    assert str(tokens[1].span) == "model.rs:4:17"
    assert str(tokens[2].span) == "model.rs:5:3"


def test_empty_and_missing_argument_lists() -> None:
    """``()`` has no tokens; a bare attribute has no argument list."""
    assert attr("validate()").arguments == []
    assert attr("validate").arguments is None
