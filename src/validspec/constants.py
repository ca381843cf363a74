"""Shared constants: single source of truth for cross-module values.

Rule and modifier keywords double as the annotation vocabulary: the
member value is exactly the keyword written inside ``#[validate(...)]``
or ``#[modify(...)]``. StrEnum members are str-compatible, so descriptor
JSON carries the keyword unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class RuleKind(StrEnum):
    """Validation rule keywords accepted inside ``#[validate(...)]``."""

    EMAIL = "email"
    URL = "url"
    LENGTH = "length"
    RANGE = "range"
    MUST_MATCH = "must_match"
    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "does_not_contain"
    CUSTOM = "custom"
    REGEX = "regex"
    CREDIT_CARD = "credit_card"
    PHONE = "phone"
    NON_CONTROL_CHARACTER = "non_control_character"
    REQUIRED = "required"
    NESTED = "nested"
    IP = "ip"
    IS_IN = "is_in"
    NOT_IN = "not_in"


class ModifierKind(StrEnum):
    """Modifier keywords accepted inside ``#[modify(...)]``."""

    TRIM = "trim"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CAPITALIZE = "capitalize"
    CUSTOM = "custom"
    NESTED = "nested"


class ItemKind(StrEnum):
    """Kind of a parsed item declaration."""

    STRUCT = "struct"
    ENUM = "enum"
    UNION = "union"


class FieldLayout(StrEnum):
    """How an item declares its fields."""

    NAMED = "named"  # struct S { a: T }
    TUPLE = "tuple"  # struct S(T);
    UNIT = "unit"  # struct S;


class Consumer(StrEnum):
    """Derive targets that consume field descriptors.

    ``Validate`` only inspects fields, so borrowed data is fine.
    ``Validify`` also runs modifiers, which mutate fields in place.
    """

    VALIDATE = "Validate"
    VALIDIFY = "Validify"


class ErrorCategory(StrEnum):
    """Analysis error taxonomy."""

    STRUCTURE = "structure"
    OWNERSHIP = "ownership"
    ANNOTATION = "annotation"


class ValueKind(StrEnum):
    """Kinds of values in annotation arguments."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    PATH = "path"  # const, static or function path


# ── Named Constants ──────────────────────────────────────

# Key under which generated errors report the offending run-time value
VALUE_PARAM = "value"

# Overrides accepted by every rule kind that reports its own error
CODE_PARAM = "code"
MESSAGE_PARAM = "message"

# Rules without a default error code (errors come from the nested type)
NO_DEFAULT_CODE: frozenset[RuleKind] = frozenset({RuleKind.NESTED})

# Rule kinds that may appear more than once on one field
REPEATABLE_RULES: frozenset[RuleKind] = frozenset({RuleKind.CUSTOM})

# Marker prefixed to signatures of references with an explicit lifetime
REFERENCE_MARKER = "&"

OWNED_DATA_MESSAGE = (
    "Validify must be implemented for structs with owned data, "
    "if you just need validation and not modification, "
    "use Validate instead"
)

NAMED_FIELDS_MESSAGE = (
    "#[derive(Validate/Validify)] can only be used on structs "
    "with named fields"
)

# ── Type Vocabulary ──────────────────────────────────────

OPTION_TYPES = frozenset({"Option", "std::option::Option", "core::option::Option"})

STRING_TYPES = frozenset({"String", "str", "Cow"})

NUMERIC_TYPES = frozenset({
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "usize",
    "i8",
    "i16",
    "i32",
    "i64",
    "i128",
    "isize",
    "f32",
    "f64",
})

COLLECTION_TYPES = frozenset({
    "Vec",
    "VecDeque",
    "HashMap",
    "HashSet",
    "BTreeMap",
    "BTreeSet",
    "IndexMap",
    "IndexSet",
})

# Grammar node kinds treated as unusual by the strict type policy
UNUSUAL_TYPE_SHAPES = frozenset({
    "function_type",
    "pointer_type",
    "dynamic_type",
    "abstract_type",
    "never_type",
})
