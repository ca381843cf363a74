"""Pydantic models for the parsed item syntax.

These nodes are the read-only input of the analysis pipeline. They are
produced by the tree-sitter front-end, but anything that can build them
(tests, other front-ends) can drive the pipeline.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from validspec.constants import FieldLayout, ItemKind


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Span(_Node):
    """A source region. Lines and columns are 1-based."""

    file: str = "<input>"
    start_line: int = 1
    start_column: int = 1
    end_line: int = 1
    end_column: int = 1

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_column}"


class Token(_Node):
    """One lexeme of an attribute argument list."""

    kind: Literal["ident", "string", "integer", "float", "punct", "lifetime"]
    text: str  # source text as written
    value: str  # decoded string, normalised number, otherwise the text
    span: Span


class Attribute(_Node):
    """An outer attribute such as ``#[validate(phone)]``."""

    path: str
    arguments: list[Token] | None = None  # None: no argument list
    span: Span = Field(default_factory=Span)


# ── Type expressions ─────────────────────────────────────


class PathType(_Node):
    """Named, generic, scoped or primitive type: ``Option<String>``."""

    kind: Literal["path"] = "path"
    text: str
    span: Span = Field(default_factory=Span)


class ReferenceType(_Node):
    """Borrowed type: ``&'a str``, ``&mut Vec<u8>``."""

    kind: Literal["reference"] = "reference"
    elem: TypeExpr
    lifetime: str | None = None
    text: str
    span: Span = Field(default_factory=Span)


class GroupType(_Node):
    """Parenthesised type: ``(String)``."""

    kind: Literal["group"] = "group"
    elem: TypeExpr
    text: str
    span: Span = Field(default_factory=Span)


class OtherType(_Node):
    """Any other type form; ``shape`` is the grammar node kind."""

    kind: Literal["other"] = "other"
    shape: str
    text: str
    span: Span = Field(default_factory=Span)


TypeExpr = Annotated[
    PathType | ReferenceType | GroupType | OtherType,
    Field(discriminator="kind"),
]


# ── Items ────────────────────────────────────────────────


class FieldDefinition(_Node):
    """One field of an item. ``name`` is None for positional fields."""

    name: str | None
    ty: TypeExpr
    attributes: list[Attribute] = Field(
        default_factory=lambda: list[Attribute]()
    )
    span: Span = Field(default_factory=Span)


class ItemDefinition(_Node):
    """A struct, enum or union declaration with its outer attributes."""

    name: str
    kind: ItemKind = ItemKind.STRUCT
    layout: FieldLayout = FieldLayout.NAMED
    fields: list[FieldDefinition] = Field(
        default_factory=lambda: list[FieldDefinition]()
    )
    attributes: list[Attribute] = Field(
        default_factory=lambda: list[Attribute]()
    )
    derives: list[str] = Field(default_factory=lambda: list[str]())
    span: Span = Field(default_factory=Span)
    body_span: Span = Field(default_factory=Span)


ReferenceType.model_rebuild()
GroupType.model_rebuild()
FieldDefinition.model_rebuild()
