"""Turn a field's annotations into validation rules and modifiers.

Rules come from the rule attribute (``#[validate(...)]``), modifiers
from the modifier attribute (``#[modify(...)]``). ``custom`` and
``nested`` exist in both vocabularies, so the attribute decides which
one applies. Every keyword must be known in its namespace; a typo is an
error rather than a silently skipped check.
"""

from __future__ import annotations

import logging

from validspec.analysis.arguments import (
    ListMeta,
    LiteralMeta,
    LiteralValue,
    Meta,
    NameValueMeta,
    PathMeta,
    PathValue,
    Value,
    parse_meta_list,
)
from validspec.analysis.catalogue import (
    MODIFIERS,
    RULES,
    KindSpec,
    default_code,
)
from validspec.analysis.schemas import (
    Modifier,
    ParamValue,
    TypeSignature,
    ValidationRule,
)
from validspec.config import Settings
from validspec.constants import (
    CODE_PARAM,
    MESSAGE_PARAM,
    REPEATABLE_RULES,
    ErrorCategory,
    ModifierKind,
    RuleKind,
    ValueKind,
)
from validspec.errors import AnalysisError
from validspec.syntax.schemas import Attribute, FieldDefinition, Span

logger = logging.getLogger(__name__)

_RULE_KEYWORDS = frozenset(k.value for k in RuleKind)
_MODIFIER_KEYWORDS = frozenset(k.value for k in ModifierKind)


def collect_field_attributes(
    field: FieldDefinition,
    field_types: dict[str, TypeSignature],
    settings: Settings | None = None,
) -> tuple[list[ValidationRule], list[Modifier]]:
    """Parse one field's annotations, preserving declaration order.

    ``field_types`` holds the signatures of every field of the structure;
    rules such as ``must_match`` check the field against its siblings.
    """
    cfg = settings or Settings()
    if field.name is None:
        raise ValueError("Found unnamed field")
    field_type = field_types[field.name]

    validations: list[ValidationRule] = []
    modifiers: list[Modifier] = []

    for attr in field.attributes:
        if attr.path == cfg.rule_attribute:
            for meta in _annotation_items(attr, "validation rules"):
                rule = _parse_rule(
                    meta, field.name, field_type, field_types, cfg
                )
                if rule.kind not in REPEATABLE_RULES and any(
                    r.kind == rule.kind for r in validations
                ):
                    raise _annotation_error(
                        f"duplicate `{rule.kind}` rule on field "
                        f"`{field.name}`",
                        rule.span,
                    )
                validations.append(rule)
        elif attr.path == cfg.modifier_attribute:
            for meta in _annotation_items(attr, "modifiers"):
                modifiers.append(
                    _parse_modifier(meta, field.name, field_type, cfg)
                )

    logger.debug(
        "Field %s: %d rule(s), %d modifier(s)",
        field.name,
        len(validations),
        len(modifiers),
    )
    return validations, modifiers


# ---------------------------------------------------------------------------
# Annotation dispatch
# ---------------------------------------------------------------------------


def _annotation_items(attr: Attribute, noun: str) -> list[Meta]:
    if attr.arguments is None:
        raise _annotation_error(
            f"expected `#[{attr.path}(...)]` with a list of {noun}",
            attr.span,
        )
    return parse_meta_list(attr.arguments, attr.span)


def _keyword(meta: Meta, noun: str) -> str:
    if isinstance(meta, LiteralMeta):
        raise _annotation_error(
            f"expected a {noun} keyword, found a literal", meta.span
        )
    return meta.path


def _parse_rule(
    meta: Meta,
    field_name: str,
    field_type: TypeSignature,
    field_types: dict[str, TypeSignature],
    cfg: Settings,
) -> ValidationRule:
    keyword = _keyword(meta, "validation rule")
    if keyword not in _RULE_KEYWORDS:
        message = f"unknown validation rule `{keyword}`"
        if keyword in _MODIFIER_KEYWORDS:
            message += (
                f"; `{keyword}` is a modifier, "
                f"use #[{cfg.modifier_attribute}({keyword})]"
            )
        raise _annotation_error(message, meta.span)

    kind = RuleKind(keyword)
    spec = RULES[kind]
    code, message_override, params = _parse_arguments(meta, keyword, spec)
    _check_applicable(spec, keyword, field_name, field_type, meta.span)
    _run_checks(spec, params, meta.span)

    if kind == RuleKind.MUST_MATCH:
        _check_must_match(
            str(params["other"].value),
            field_name,
            field_type,
            field_types,
            meta.span,
        )

    logger.debug("Field %s: rule %s", field_name, keyword)
    return ValidationRule(
        kind=kind,
        code=code if code is not None else default_code(kind),
        message=message_override,
        params=params,
        span=meta.span,
    )


def _parse_modifier(
    meta: Meta,
    field_name: str,
    field_type: TypeSignature,
    cfg: Settings,
) -> Modifier:
    keyword = _keyword(meta, "modifier")
    if keyword not in _MODIFIER_KEYWORDS:
        message = f"unknown modifier `{keyword}`"
        if keyword in _RULE_KEYWORDS:
            message += (
                f"; `{keyword}` is a validation rule, "
                f"use #[{cfg.rule_attribute}({keyword})]"
            )
        raise _annotation_error(message, meta.span)

    kind = ModifierKind(keyword)
    spec = MODIFIERS[kind]
    _, _, params = _parse_arguments(meta, keyword, spec)
    _check_applicable(spec, keyword, field_name, field_type, meta.span)
    _run_checks(spec, params, meta.span)

    logger.debug("Field %s: modifier %s", field_name, keyword)
    return Modifier(kind=kind, params=params, span=meta.span)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _parse_arguments(
    meta: Meta, keyword: str, spec: KindSpec
) -> tuple[str | None, str | None, dict[str, ParamValue]]:
    """Split an annotation's arguments into (code, message, params)."""
    code: str | None = None
    message: str | None = None
    params: dict[str, ParamValue] = {}

    items: tuple[Meta, ...] = ()
    if isinstance(meta, ListMeta):
        if spec.bare_only:
            raise _annotation_error(
                f"`{keyword}` does not take arguments", meta.span
            )
        items = meta.items
    elif isinstance(meta, NameValueMeta):
        # Shorthand: `custom = "function"`, `regex = "RE"`
        if spec.positional is None:
            raise _annotation_error(
                f"`{keyword}` cannot be assigned a value", meta.span
            )
        _set_param(params, spec, keyword, spec.positional, meta.value)

    for item in items:
        if isinstance(item, NameValueMeta):
            if item.path in (CODE_PARAM, MESSAGE_PARAM) and spec.overridable:
                text = _string_literal(item, keyword)
                if item.path == CODE_PARAM:
                    if code is not None:
                        raise _duplicate(item.path, keyword, item.span)
                    code = text
                else:
                    if message is not None:
                        raise _duplicate(item.path, keyword, item.span)
                    message = text
            elif spec.param(item.path) is not None:
                _set_param(params, spec, keyword, item.path, item.value)
            else:
                raise _annotation_error(
                    f"unknown parameter `{item.path}` for `{keyword}`",
                    item.span,
                )
        elif isinstance(item, PathMeta | LiteralMeta):
            if spec.positional is None:
                raise _annotation_error(
                    f"`{keyword}` does not take positional arguments",
                    item.span,
                )
            value: Value = (
                PathValue(path=item.path, span=item.span)
                if isinstance(item, PathMeta)
                else item.value
            )
            _set_param(params, spec, keyword, spec.positional, value)
        else:
            raise _annotation_error(
                f"unexpected nested list `{item.path}(...)` in `{keyword}`",
                item.span,
            )

    for param in spec.params:
        if param.required and param.name not in params:
            raise _annotation_error(
                f"`{keyword}` requires `{param.name}`", meta.span
            )

    return code, message, params


def _set_param(
    params: dict[str, ParamValue],
    spec: KindSpec,
    keyword: str,
    name: str,
    value: Value,
) -> None:
    param = spec.param(name)
    assert param is not None  # callers only pass declared names
    if name in params:
        raise _duplicate(name, keyword, value.span)

    if isinstance(value, PathValue):
        converted = ParamValue(kind=ValueKind.PATH, value=value.path)
    else:
        converted = ParamValue(kind=value.kind, value=value.value)

    if converted.kind not in param.kinds:
        expected = " or ".join(sorted(k.value for k in param.kinds))
        raise _annotation_error(
            f"`{name}` of `{keyword}` expects a {expected} value, "
            f"found {converted.kind.value}",
            value.span,
        )
    params[name] = converted


def _string_literal(item: NameValueMeta, keyword: str) -> str:
    value = item.value
    if not isinstance(value, LiteralValue) or value.kind != ValueKind.STRING:
        raise _annotation_error(
            f"`{item.path}` of `{keyword}` must be a string literal",
            item.span,
        )
    return str(value.value)


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _check_applicable(
    spec: KindSpec,
    keyword: str,
    field_name: str,
    field_type: TypeSignature,
    span: Span,
) -> None:
    requirement = spec.requirement
    if requirement is not None and not requirement.accepts(field_type):
        raise _annotation_error(
            f"`{keyword}` cannot be used on field `{field_name}` of type "
            f"`{field_type.text}`: expected {requirement.description}",
            span,
        )


def _run_checks(
    spec: KindSpec, params: dict[str, ParamValue], span: Span
) -> None:
    for check in spec.checks:
        problem = check(params)
        if problem is not None:
            raise _annotation_error(problem, span)


def _check_must_match(
    other: str,
    field_name: str,
    field_type: TypeSignature,
    field_types: dict[str, TypeSignature],
    span: Span,
) -> None:
    if other == field_name:
        raise _annotation_error(
            f"`must_match` on field `{field_name}` refers to itself", span
        )
    other_type = field_types.get(other)
    if other_type is None:
        raise _annotation_error(
            f"`must_match` refers to unknown field `{other}`", span
        )
    if other_type.text != field_type.text:
        raise _annotation_error(
            f"`must_match` requires `{field_name}` and `{other}` to have "
            f"the same type, found `{field_type.text}` and "
            f"`{other_type.text}`",
            span,
        )


def _duplicate(name: str, keyword: str, span: Span) -> AnalysisError:
    return _annotation_error(
        f"duplicate `{name}` in `{keyword}`", span
    )


def _annotation_error(message: str, span: Span) -> AnalysisError:
    return AnalysisError(message, span, ErrorCategory.ANNOTATION)
