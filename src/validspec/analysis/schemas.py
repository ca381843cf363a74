"""Pydantic models for analysis output, the input of the code generator."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from validspec.constants import (
    COLLECTION_TYPES,
    NUMERIC_TYPES,
    OPTION_TYPES,
    STRING_TYPES,
    VALUE_PARAM,
    ModifierKind,
    RuleKind,
    ValueKind,
)
from validspec.syntax.schemas import FieldDefinition, Span

_LIFETIME_RE = re.compile(r"'([A-Za-z_][A-Za-z0-9_]*)")

# Lowercase type names that can follow a collapsed lifetime (`&'astr`)
_LOWER_TYPES = NUMERIC_TYPES | {"str", "bool", "char"}


class TypeSignature(BaseModel):
    """Canonical whitespace-free text of a field's declared type.

    The classification helpers work on the text alone; they answer the
    questions rule applicability needs ("is this string-like?") without
    modelling a type system.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    is_reference: bool = False

    def __str__(self) -> str:
        return self.text

    @property
    def is_option(self) -> bool:
        outer, _ = _split_generic(_strip_borrow(self.text))
        return outer in OPTION_TYPES

    @property
    def unwrapped(self) -> str:
        """The type with borrows and any ``Option<...>`` layers removed."""
        current = _strip_borrow(self.text)
        while True:
            outer, args = _split_generic(current)
            if outer not in OPTION_TYPES or args is None:
                return current
            current = _strip_borrow(args)

    @property
    def base_name(self) -> str:
        """Last path segment of the unwrapped type, without generics."""
        outer, _ = _split_generic(self.unwrapped)
        return outer.rsplit("::", 1)[-1]

    @property
    def is_string_like(self) -> bool:
        return self.base_name in STRING_TYPES

    @property
    def is_numeric(self) -> bool:
        return self.base_name in NUMERIC_TYPES

    @property
    def is_collection(self) -> bool:
        return self.base_name in COLLECTION_TYPES or self.unwrapped.startswith(
            "["
        )

    @property
    def has_length(self) -> bool:
        return self.is_string_like or self.is_collection

    @property
    def element(self) -> TypeSignature | None:
        """Element type of a collection (value type for maps)."""
        unwrapped = self.unwrapped
        if unwrapped.startswith("["):
            inner = unwrapped[1:-1]
            return TypeSignature(text=_split_top_level(inner, ";")[0])
        if self.base_name not in COLLECTION_TYPES:
            return None
        _, args = _split_generic(unwrapped)
        if not args:
            return None
        return TypeSignature(text=_split_top_level(args, ",")[-1])

    @property
    def is_string_collection(self) -> bool:
        element = self.element
        return element is not None and element.is_string_like


class ParamValue(BaseModel):
    """A rule or modifier parameter as written in the annotation."""

    model_config = ConfigDict(frozen=True)

    kind: ValueKind
    value: str | int | float | bool


class ValidationRule(BaseModel):
    """One declarative check to apply to a field."""

    model_config = ConfigDict(frozen=True)

    kind: RuleKind
    code: str | None = None
    message: str | None = None
    params: dict[str, ParamValue] = Field(
        default_factory=lambda: dict[str, ParamValue]()
    )
    span: Span = Field(default_factory=Span)

    @property
    def error_params(self) -> list[str]:
        """Keys the generated error's parameter map must carry."""
        if self.kind == RuleKind.NESTED:
            return []
        return [VALUE_PARAM, *(p for p in self.params if p != VALUE_PARAM)]


class Modifier(BaseModel):
    """One pre-processing transform to apply to a field."""

    model_config = ConfigDict(frozen=True)

    kind: ModifierKind
    params: dict[str, ParamValue] = Field(
        default_factory=lambda: dict[str, ParamValue]()
    )
    span: Span = Field(default_factory=Span)


class FieldDescriptor(BaseModel):
    """Everything the code generator needs to know about one field."""

    model_config = ConfigDict(frozen=True)

    field: FieldDefinition = Field(exclude=True, repr=False)
    name: str
    original_name: str
    field_type: TypeSignature
    validations: list[ValidationRule] = Field(
        default_factory=lambda: list[ValidationRule]()
    )
    modifiers: list[Modifier] = Field(
        default_factory=lambda: list[Modifier]()
    )
    span: Span = Field(default_factory=Span)


# ---------------------------------------------------------------------------
# Signature text helpers
# ---------------------------------------------------------------------------


def _strip_borrow(text: str) -> str:
    """Remove leading ``&``, lifetimes and ``mut`` from a signature."""
    while text.startswith("&"):
        text = text[1:]
        if text.startswith("'"):
            text = _strip_lifetime(text)
        elif text.startswith("mut") and _starts_with_type(text[3:]):
            text = text[3:]
    return text


def _strip_lifetime(text: str) -> str:
    """Drop a lifetime that whitespace stripping glued to the type name.

    ``&'a str`` serialises as ``&'astr``; the shortest lifetime prefix
    that leaves a recognisable type behind wins.
    """
    m = _LIFETIME_RE.match(text)
    if m is None:
        return text
    ident = m.group(1)
    for i in range(1, len(ident) + 1):
        rest = text[1 + i :]
        if rest.startswith("mut") and _starts_with_type(rest[3:]):
            return rest[3:]
        if _starts_with_type(rest):
            return rest
    return text[m.end() :]


def _starts_with_type(text: str) -> bool:
    if not text:
        return False
    if text[0] in "[(" or text[0].isupper():
        return True
    return any(
        text == name or text.startswith((name + "<", name + ">", name + ","))
        for name in _LOWER_TYPES
    )


def _split_generic(text: str) -> tuple[str, str | None]:
    """Split ``Outer<args>`` into ``("Outer", "args")``."""
    idx = text.find("<")
    if idx <= 0 or not text.endswith(">"):
        return text, None
    return text[:idx], text[idx + 1 : -1]


def _split_top_level(text: str, sep: str) -> list[str]:
    """Split on ``sep`` outside of ``<>``, ``()`` and ``[]``."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "<([":
            depth += 1
        elif char in ">)]":
            depth -= 1
        if char == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts
