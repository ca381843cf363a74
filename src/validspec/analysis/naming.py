"""Resolve the serialised name of a field from serde attributes.

Generated errors are keyed by the name the data arrives under, so a
``#[serde(rename = "...")]`` on the field or a ``rename_all`` case
convention on the structure changes what the code generator reports.
Deserialisation names win over serialisation names.
"""

from __future__ import annotations

from collections.abc import Callable

from validspec.analysis.arguments import (
    ListMeta,
    LiteralValue,
    Meta,
    NameValueMeta,
    parse_meta_list,
)
from validspec.config import Settings
from validspec.constants import ErrorCategory, ValueKind
from validspec.errors import AnalysisError
from validspec.syntax.schemas import Attribute, FieldDefinition, Span


def _pascal(name: str) -> str:
    return "".join(word.capitalize() for word in name.split("_"))


def _camel(name: str) -> str:
    pascal = _pascal(name)
    return pascal[:1].lower() + pascal[1:]


CASE_CONVENTIONS: dict[str, Callable[[str], str]] = {
    "lowercase": str.lower,
    "UPPERCASE": str.upper,
    "PascalCase": _pascal,
    "camelCase": _camel,
    "snake_case": lambda name: name,
    "SCREAMING_SNAKE_CASE": str.upper,
    "kebab-case": lambda name: name.replace("_", "-"),
    "SCREAMING-KEBAB-CASE": lambda name: name.replace("_", "-").upper(),
}


def rename_all_convention(
    item_attributes: list[Attribute], settings: Settings | None = None
) -> tuple[str, Span] | None:
    """The structure's ``rename_all`` convention and where it is written."""
    cfg = settings or Settings()
    found: tuple[str, Span] | None = None
    for meta in _serde_items(item_attributes, cfg):
        name = _rename_target(meta, "rename_all")
        if name is not None:
            if name not in CASE_CONVENTIONS:
                raise _unknown_convention(name, meta.span)
            found = (name, meta.span)
    return found


def apply_convention(name: str, convention: str, span: Span) -> str:
    """Apply a serde case convention to a snake_case field name."""
    transform = CASE_CONVENTIONS.get(convention)
    if transform is None:
        raise _unknown_convention(convention, span)
    return transform(name)


def _unknown_convention(convention: str, span: Span) -> AnalysisError:
    known = ", ".join(f'"{c}"' for c in CASE_CONVENTIONS)
    return AnalysisError(
        f'unknown rename_all convention "{convention}", '
        f"expected one of {known}",
        span,
        ErrorCategory.ANNOTATION,
    )


def serialized_name(
    field: FieldDefinition,
    convention: tuple[str, Span] | None,
    settings: Settings | None = None,
) -> str:
    """The field's name as seen in serialised data."""
    cfg = settings or Settings()
    if field.name is None:
        raise ValueError("Found unnamed field")
    name = field.name.removeprefix("r#")

    renamed: str | None = None
    for meta in _serde_items(field.attributes, cfg):
        target = _rename_target(meta, "rename")
        if target is not None:
            renamed = target
    if renamed is not None:
        return renamed

    if convention is not None:
        return apply_convention(name, *convention)
    return name


def _serde_items(
    attributes: list[Attribute], cfg: Settings
) -> list[Meta]:
    items: list[Meta] = []
    for attr in attributes:
        if attr.path == cfg.serde_attribute and attr.arguments is not None:
            items.extend(parse_meta_list(attr.arguments, attr.span))
    return items


def _rename_target(meta: Meta, key: str) -> str | None:
    """Extract the deserialisation name from ``key = "x"`` or ``key(...)``."""
    if isinstance(meta, NameValueMeta) and meta.path == key:
        return _string(meta)
    if isinstance(meta, ListMeta) and meta.path == key:
        for item in meta.items:
            if isinstance(item, NameValueMeta) and item.path == "deserialize":
                return _string(item)
    return None


def _string(meta: NameValueMeta) -> str:
    value = meta.value
    if not isinstance(value, LiteralValue) or value.kind != ValueKind.STRING:
        raise AnalysisError(
            f"`{meta.path}` must be a string literal",
            meta.span,
            ErrorCategory.ANNOTATION,
        )
    return str(value.value)
