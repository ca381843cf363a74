"""Parsed item syntax: the input boundary of the analysis pipeline."""

from validspec.syntax.schemas import (
    Attribute,
    FieldDefinition,
    GroupType,
    ItemDefinition,
    OtherType,
    PathType,
    ReferenceType,
    Span,
    Token,
    TypeExpr,
)

__all__ = [
    "Attribute",
    "FieldDefinition",
    "GroupType",
    "ItemDefinition",
    "OtherType",
    "PathType",
    "ReferenceType",
    "Span",
    "Token",
    "TypeExpr",
]
