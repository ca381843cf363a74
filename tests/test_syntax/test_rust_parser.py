"""Tests for the tree-sitter Rust front-end."""

from __future__ import annotations

import pytest

from tests.conftest import FIXTURE_DIR
from validspec.config import Settings
from validspec.constants import FieldLayout, ItemKind
from validspec.errors import GrammarUnavailableError, SourceParseError
from validspec.syntax.rust_parser import find_item, parse_file, parse_source
from validspec.syntax.schemas import (
    GroupType,
    OtherType,
    PathType,
    ReferenceType,
)

RUST_DIR = FIXTURE_DIR / "rust"


def test_parse_file_finds_items_in_order() -> None:
    """Top-level and inline-module items are returned in source order."""
    items = parse_file(RUST_DIR / "signup.rs")
    assert [i.name for i in items] == ["SignupForm", "Lookup", "Plain", "Inner"]


def test_derives_and_item_attributes() -> None:
    """Outer attributes attach to the item below them."""
    form = find_item(parse_file(RUST_DIR / "signup.rs"), "SignupForm")

    assert form.derives == ["Debug", "Deserialize", "Validify"]
    assert [a.path for a in form.attributes] == ["derive", "serde"]
    assert form.kind == ItemKind.STRUCT
    assert form.layout == FieldLayout.NAMED


def test_field_attributes_and_types() -> None:
    """Each field keeps its own attributes; comments are skipped."""
    form = find_item(parse_file(RUST_DIR / "signup.rs"), "SignupForm")
    names = [f.name for f in form.fields]
    assert names == [
        "email_address",
        "password",
        "password_confirm",
        "phone",
        "age",
        "tags",
    ]

    email = form.fields[0]
    assert [a.path for a in email.attributes] == ["modify", "validate"]
    assert email.attributes[0].arguments is not None
    assert [t.value for t in email.attributes[0].arguments] == [
        "trim",
        ",",
        "lowercase",
    ]

    phone = form.fields[3]
    assert [a.path for a in phone.attributes] == ["validate", "serde"]
    assert isinstance(phone.ty, PathType)
    assert phone.ty.text == "Option<String>"


def test_attribute_argument_spans_point_into_file() -> None:
    """Argument tokens carry file positions, not offsets in the attribute."""
    form = find_item(parse_file(RUST_DIR / "signup.rs"), "SignupForm")
    validate = form.fields[0].attributes[1]
    assert validate.arguments is not None
    first = validate.arguments[0]

    assert first.value == "email"
    assert first.span.file.endswith("signup.rs")
    assert first.span.start_line == validate.span.start_line
    assert first.span.start_column > validate.span.start_column


def test_reference_type_with_lifetime() -> None:
    """``&'a str`` becomes a ReferenceType with its lifetime."""
    lookup = find_item(parse_file(RUST_DIR / "signup.rs"), "Lookup")
    ty = lookup.fields[0].ty

    assert isinstance(ty, ReferenceType)
    assert ty.lifetime == "'a"
    assert isinstance(ty.elem, PathType)
    assert ty.elem.text == "str"


def test_mutable_reference_keeps_mut_in_text_only() -> None:
    """``&'a mut Vec<u8>`` keeps its referent; ``mut`` lives in the text."""
    (item,) = parse_source("struct A<'a> { m: &'a mut Vec<u8> }")
    ty = item.fields[0].ty

    assert isinstance(ty, ReferenceType)
    assert ty.lifetime == "'a"
    assert ty.elem.text == "Vec<u8>"
    assert ty.text == "&'a mut Vec<u8>"


def test_item_shapes() -> None:
    """Tuple, unit and enum items report their kind and layout."""
    items = parse_file(RUST_DIR / "shapes.rs")
    pair = find_item(items, "Pair")
    marker = find_item(items, "Marker")
    shape = find_item(items, "Shape")

    assert pair.layout == FieldLayout.TUPLE
    assert [f.name for f in pair.fields] == [None, None]
    assert marker.layout == FieldLayout.UNIT
    assert marker.fields == []
    assert shape.kind == ItemKind.ENUM


def test_scoped_derive_uses_last_segment() -> None:
    """``validify::Validify`` is recorded as Validify."""
    borrowed = find_item(parse_file(RUST_DIR / "shapes.rs"), "Borrowed")
    assert borrowed.derives == ["Validify"]


def test_group_and_other_types() -> None:
    """``(String)`` is a group; a function pointer keeps its shape."""
    borrowed = find_item(parse_file(RUST_DIR / "shapes.rs"), "Borrowed")
    grouped = borrowed.fields[1].ty
    callback = borrowed.fields[2].ty

    assert isinstance(grouped, GroupType)
    assert grouped.elem.text == "String"
    assert isinstance(callback, OtherType)
    assert callback.shape == "function_type"


def test_field_span_is_one_based() -> None:
    """Field spans use 1-based lines and columns."""
    borrowed = find_item(parse_file(RUST_DIR / "shapes.rs"), "Borrowed")
    assert borrowed.fields[0].span.start_line == 15
    assert borrowed.fields[0].span.start_column == 5


def test_syntax_error_raises() -> None:
    """Malformed source raises SourceParseError with a location."""
    with pytest.raises(SourceParseError) as exc_info:
        parse_file(RUST_DIR / "broken.rs")
    assert exc_info.value.span.file.endswith("broken.rs")
    assert exc_info.value.span.start_line >= 2


def test_parse_source_defaults_file_name() -> None:
    """Spans of in-memory sources use <input>."""
    (item,) = parse_source("struct A { a: u8 }")
    assert item.span.file == "<input>"
    assert item.fields[0].ty.text == "u8"


def test_find_item_missing_raises() -> None:
    """Looking up an unknown name raises LookupError."""
    with pytest.raises(LookupError, match="Nope"):
        find_item(parse_source("struct A;"), "Nope")


def test_unknown_grammar_module_raises() -> None:
    """A grammar package that cannot be imported is reported clearly."""
    settings = Settings(_env_file=None, grammar_module="no_such_grammar_pkg")
    with pytest.raises(GrammarUnavailableError, match="no_such_grammar_pkg"):
        parse_source("struct A;", settings=settings)


def test_items_inside_function_and_impl_bodies() -> None:
    """Structs declared in test functions and impl methods are found."""
    items = parse_file(RUST_DIR / "contact_tests.rs")
    assert [i.name for i in items] == ["Contact", "Contact", "Registry", "Fax"]

    first = items[0]
    assert first.derives == ["Debug", "Validate"]
    assert [a.path for a in first.attributes] == ["derive"]
    assert first.fields[0].attributes[0].path == "validate"


def test_attributes_on_functions_do_not_leak_into_bodies() -> None:
    """``#[test]`` above a function is not attached to items inside it."""
    source = (
        "#[test]\n"
        "fn f() {\n"
        "    #[derive(Validate)]\n"
        "    struct S { #[validate(phone)] val: String }\n"
        "}\n"
    )
    (item,) = parse_source(source)
    assert [a.path for a in item.attributes] == ["derive"]


def test_comments_are_cut_from_type_text() -> None:
    """A comment inside a type does not reach its text."""
    (item,) = parse_source(
        "struct A {\n"
        "    v: Vec</* names */ String>,\n"
        "    r: &'a /* borrowed */ str,\n"
        "}"
    )
    names, borrowed = (f.ty for f in item.fields)

    assert "".join(names.text.split()) == "Vec<String>"
    assert isinstance(borrowed, ReferenceType)
    assert "/*" not in borrowed.text
    assert borrowed.elem.text == "str"
