"""Shared test helpers: syntax-model builders and settings fixtures.

Analysis tests assemble items field by field; each attribute is parsed
from its source text so its tokens match what the front-end produces.
"""

from pathlib import Path

import pytest

from validspec.config import Settings
from validspec.constants import FieldLayout, ItemKind
from validspec.syntax.schemas import (
    Attribute,
    FieldDefinition,
    GroupType,
    ItemDefinition,
    OtherType,
    PathType,
    ReferenceType,
    Span,
    TypeExpr,
)
from validspec.syntax.rust_parser import parse_source

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


def span(line: int = 1, column: int = 1) -> Span:
    return Span(
        file="model.rs",
        start_line=line,
        start_column=column,
        end_line=line,
        end_column=column + 1,
    )


def path_type(text: str) -> PathType:
    return PathType(text=text)


def ref_type(
    inner: TypeExpr | str, lifetime: str | None = None
) -> ReferenceType:
    elem = path_type(inner) if isinstance(inner, str) else inner
    text = "&" + (f"{lifetime} " if lifetime else "") + elem.text
    return ReferenceType(elem=elem, lifetime=lifetime, text=text)


def group_type(inner: TypeExpr | str) -> GroupType:
    elem = path_type(inner) if isinstance(inner, str) else inner
    return GroupType(elem=elem, text=f"({elem.text})")


def other_type(shape: str, text: str) -> OtherType:
    return OtherType(shape=shape, text=text)


def attr(text: str, line: int = 1) -> Attribute:
    """Parse ``#[text]`` written on ``line`` of ``model.rs``.

    ``attr("validate(length(min = 1))")`` yields the attribute the parser
    would attach to the item below it, token spans included.
    """
    source = "\n" * (line - 1) + f"#[{text}]\nstruct Annotated;\n"
    (item,) = parse_source(source, "model.rs", Settings(_env_file=None))
    return item.attributes[0]


def field(
    name: str | None,
    ty: TypeExpr | str = "String",
    *attributes: str,
    line: int = 2,
) -> FieldDefinition:
    return FieldDefinition(
        name=name,
        ty=path_type(ty) if isinstance(ty, str) else ty,
        attributes=[attr(a, line) for a in attributes],
        span=span(line, 5),
    )


def struct(
    name: str,
    *fields: FieldDefinition,
    attributes: tuple[str, ...] = (),
    kind: ItemKind = ItemKind.STRUCT,
    layout: FieldLayout | None = None,
) -> ItemDefinition:
    if layout is None:
        positional = any(f.name is None for f in fields)
        layout = FieldLayout.TUPLE if positional else FieldLayout.NAMED
    return ItemDefinition(
        name=name,
        kind=kind,
        layout=layout,
        fields=list(fields),
        attributes=[attr(a) for a in attributes],
        span=span(1, 1),
        body_span=span(1, 12),
    )


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from the environment and any .env file."""
    return Settings(_env_file=None)
