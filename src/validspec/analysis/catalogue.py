"""Argument shapes and field-type requirements per rule and modifier kind.

Each kind has one spec: the parameters it accepts (and which one may be
written positionally), whether it takes ``code``/``message`` overrides,
which field types it applies to, and any cross-parameter checks. The
extractor is driven entirely by this table.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

from validspec.analysis.schemas import ParamValue, TypeSignature
from validspec.constants import (
    NO_DEFAULT_CODE,
    ModifierKind,
    RuleKind,
    ValueKind,
)

_INT_OR_PATH = frozenset({ValueKind.INTEGER, ValueKind.PATH})
_NUMBER_OR_PATH = frozenset({
    ValueKind.INTEGER,
    ValueKind.FLOAT,
    ValueKind.PATH,
})
_STRING_OR_PATH = frozenset({ValueKind.STRING, ValueKind.PATH})
_PATH_ONLY = frozenset({ValueKind.PATH})
_STRING_ONLY = frozenset({ValueKind.STRING})

IP_FORMATS = frozenset({"v4", "v6"})


@dataclass(frozen=True)
class ParamSpec:
    """One accepted parameter."""

    name: str
    kinds: frozenset[ValueKind]
    required: bool = False


@dataclass(frozen=True)
class TypeRequirement:
    """A predicate over the field's signature plus how to describe it."""

    description: str
    accepts: Callable[[TypeSignature], bool]


# Cross-parameter check: returns an error message or None
ParamCheck: TypeAlias = Callable[[dict[str, ParamValue]], str | None]


@dataclass(frozen=True)
class KindSpec:
    """Shape of one rule or modifier kind."""

    params: tuple[ParamSpec, ...] = ()
    positional: str | None = None  # parameter that may be written bare
    overridable: bool = True  # accepts code = "..." / message = "..."
    bare_only: bool = False  # no argument list at all
    requirement: TypeRequirement | None = None
    checks: tuple[ParamCheck, ...] = field(default_factory=tuple)

    def param(self, name: str) -> ParamSpec | None:
        return next((p for p in self.params if p.name == name), None)


# ── Type requirements ────────────────────────────────────

STRING_LIKE = TypeRequirement(
    "a string type (String, &str, Cow<str> or an Option of one)",
    lambda sig: sig.is_string_like,
)
HAS_LENGTH = TypeRequirement(
    "a type with a length (a string, collection or array)",
    lambda sig: sig.has_length,
)
NUMERIC = TypeRequirement(
    "a numeric type (integer or float, optionally in an Option)",
    lambda sig: sig.is_numeric,
)
OPTIONAL = TypeRequirement(
    "an Option<...> type",
    lambda sig: sig.is_option,
)
STRING_OR_COLLECTION = TypeRequirement(
    "a string or collection type",
    lambda sig: sig.is_string_like or sig.is_collection,
)
STRINGS = TypeRequirement(
    "a string type or a collection of strings",
    lambda sig: sig.is_string_like or sig.is_string_collection,
)


# ── Cross-parameter checks ───────────────────────────────


def _numeric(value: ParamValue | None) -> float | None:
    if value is None or value.kind not in (ValueKind.INTEGER, ValueKind.FLOAT):
        return None
    return float(value.value)


def _at_least_one(*names: str) -> ParamCheck:
    def check(params: dict[str, ParamValue]) -> str | None:
        if not any(n in params for n in names):
            listed = ", ".join(f"`{n}`" for n in names)
            return f"expected at least one of {listed}"
        return None

    return check


def _ordered(low: str, high: str) -> ParamCheck:
    def check(params: dict[str, ParamValue]) -> str | None:
        lo, hi = _numeric(params.get(low)), _numeric(params.get(high))
        if lo is not None and hi is not None and lo > hi:
            return f"`{low}` must not be greater than `{high}`"
        return None

    return check


def _non_negative(*names: str) -> ParamCheck:
    def check(params: dict[str, ParamValue]) -> str | None:
        for n in names:
            value = _numeric(params.get(n))
            if value is not None and value < 0:
                return f"`{n}` must not be negative"
        return None

    return check


def _equal_excludes_bounds(params: dict[str, ParamValue]) -> str | None:
    if "equal" in params and ("min" in params or "max" in params):
        return "`equal` cannot be combined with `min` or `max`"
    return None


def _exactly_one_regex_source(params: dict[str, ParamValue]) -> str | None:
    if ("path" in params) == ("pattern" in params):
        return "expected exactly one of `path` or `pattern`"
    return None


def _known_ip_format(params: dict[str, ParamValue]) -> str | None:
    fmt = params.get("format")
    if fmt is not None and str(fmt.value) not in IP_FORMATS:
        return f"unknown ip format `{fmt.value}`, expected `v4` or `v6`"
    return None


# ── Rule catalogue ───────────────────────────────────────

_FORMAT_RULE = KindSpec(requirement=STRING_LIKE)

RULES: dict[RuleKind, KindSpec] = {
    RuleKind.EMAIL: _FORMAT_RULE,
    RuleKind.URL: _FORMAT_RULE,
    RuleKind.PHONE: _FORMAT_RULE,
    RuleKind.CREDIT_CARD: _FORMAT_RULE,
    RuleKind.NON_CONTROL_CHARACTER: _FORMAT_RULE,
    RuleKind.LENGTH: KindSpec(
        params=(
            ParamSpec("min", _INT_OR_PATH),
            ParamSpec("max", _INT_OR_PATH),
            ParamSpec("equal", _INT_OR_PATH),
        ),
        requirement=HAS_LENGTH,
        checks=(
            _at_least_one("min", "max", "equal"),
            _equal_excludes_bounds,
            _non_negative("min", "max", "equal"),
            _ordered("min", "max"),
        ),
    ),
    RuleKind.RANGE: KindSpec(
        params=(
            ParamSpec("min", _NUMBER_OR_PATH),
            ParamSpec("max", _NUMBER_OR_PATH),
            ParamSpec("exclusive_min", _NUMBER_OR_PATH),
            ParamSpec("exclusive_max", _NUMBER_OR_PATH),
        ),
        requirement=NUMERIC,
        checks=(
            _at_least_one("min", "max", "exclusive_min", "exclusive_max"),
            _ordered("min", "max"),
            _ordered("exclusive_min", "exclusive_max"),
        ),
    ),
    RuleKind.MUST_MATCH: KindSpec(
        params=(ParamSpec("other", _STRING_OR_PATH, required=True),),
        positional="other",
    ),
    RuleKind.CONTAINS: KindSpec(
        params=(ParamSpec("value", _STRING_OR_PATH, required=True),),
        positional="value",
        requirement=STRING_OR_COLLECTION,
    ),
    RuleKind.DOES_NOT_CONTAIN: KindSpec(
        params=(ParamSpec("value", _STRING_OR_PATH, required=True),),
        positional="value",
        requirement=STRING_OR_COLLECTION,
    ),
    RuleKind.REGEX: KindSpec(
        params=(
            ParamSpec("path", _STRING_OR_PATH),
            ParamSpec("pattern", _STRING_ONLY),
        ),
        positional="path",
        requirement=STRING_LIKE,
        checks=(_exactly_one_regex_source,),
    ),
    RuleKind.CUSTOM: KindSpec(
        params=(ParamSpec("function", _STRING_OR_PATH, required=True),),
        positional="function",
    ),
    RuleKind.REQUIRED: KindSpec(requirement=OPTIONAL),
    RuleKind.NESTED: KindSpec(overridable=False, bare_only=True),
    RuleKind.IP: KindSpec(
        params=(ParamSpec("format", _STRING_OR_PATH),),
        positional="format",
        requirement=STRING_LIKE,
        checks=(_known_ip_format,),
    ),
    RuleKind.IS_IN: KindSpec(
        params=(ParamSpec("collection", _PATH_ONLY, required=True),),
        positional="collection",
    ),
    RuleKind.NOT_IN: KindSpec(
        params=(ParamSpec("collection", _PATH_ONLY, required=True),),
        positional="collection",
    ),
}


# ── Modifier catalogue ───────────────────────────────────

_CASE_MODIFIER = KindSpec(overridable=False, bare_only=True, requirement=STRINGS)

MODIFIERS: dict[ModifierKind, KindSpec] = {
    ModifierKind.TRIM: _CASE_MODIFIER,
    ModifierKind.UPPERCASE: _CASE_MODIFIER,
    ModifierKind.LOWERCASE: _CASE_MODIFIER,
    ModifierKind.CAPITALIZE: _CASE_MODIFIER,
    ModifierKind.CUSTOM: KindSpec(
        params=(ParamSpec("function", _STRING_OR_PATH, required=True),),
        positional="function",
        overridable=False,
    ),
    ModifierKind.NESTED: KindSpec(overridable=False, bare_only=True),
}


def default_code(kind: RuleKind) -> str | None:
    """The error code a rule reports when no ``code`` override is given."""
    if kind in NO_DEFAULT_CODE:
        return None
    return kind.value
