"""Resolve field types into canonical text signatures.

Signatures are plain text rather than a type algebra: rule applicability
only needs equality and name tests. Resolution is total; the one failure
is the ownership check, raised when borrowed data meets a consumer that
mutates fields.
"""

from __future__ import annotations

import logging

from validspec.analysis.schemas import TypeSignature
from validspec.constants import (
    OWNED_DATA_MESSAGE,
    REFERENCE_MARKER,
    UNUSUAL_TYPE_SHAPES,
    ErrorCategory,
)
from validspec.errors import AnalysisError
from validspec.syntax.schemas import (
    FieldDefinition,
    GroupType,
    OtherType,
    PathType,
    ReferenceType,
    TypeExpr,
)

logger = logging.getLogger(__name__)


def canonical_text(text: str) -> str:
    """Remove every whitespace character from serialised type text."""
    return "".join(text.split())


def resolve_type(ty: TypeExpr) -> TypeSignature:
    """Compute the signature of one type expression. Never raises."""
    match ty:
        case PathType():
            text = canonical_text(ty.text)
            is_reference = False
        case ReferenceType():
            text = canonical_text(ty.elem.text)
            if ty.lifetime is not None:
                text = REFERENCE_MARKER + text
            is_reference = True
        case GroupType():
            text = canonical_text(ty.elem.text)
            is_reference = False
        case _:
            text = canonical_text(ty.text)
            is_reference = False

    # Borrowed data nested in a generic (`Option<&'a str>`) is still borrowed
    is_reference = is_reference or REFERENCE_MARKER in text
    return TypeSignature(text=text, is_reference=is_reference)


def map_field_types(
    fields: list[FieldDefinition],
    allow_references: bool,
    *,
    reject_unusual: bool = False,
) -> dict[str, TypeSignature]:
    """Resolve every field's signature, keyed by field name.

    Raises :class:`AnalysisError` at the field when a borrowed type is
    found and ``allow_references`` is False, or when ``reject_unusual``
    is set and the field has a function pointer, raw pointer, trait
    object, ``impl Trait`` or never type.
    """
    types: dict[str, TypeSignature] = {}

    for fld in fields:
        if fld.name is None:
            raise ValueError("Found unnamed field")

        if reject_unusual and _is_unusual(fld.ty):
            raise AnalysisError(
                f"Field `{fld.name}` has an unsupported type "
                f"`{canonical_text(fld.ty.text)}`",
                fld.span,
                ErrorCategory.STRUCTURE,
            )

        signature = resolve_type(fld.ty)
        if signature.is_reference and not allow_references:
            raise AnalysisError(
                OWNED_DATA_MESSAGE, fld.span, ErrorCategory.OWNERSHIP
            )

        logger.debug(
            "Resolved field %s as %s (reference=%s)",
            fld.name,
            signature.text,
            signature.is_reference,
        )
        types[fld.name] = signature

    return types


def _is_unusual(ty: TypeExpr) -> bool:
    match ty:
        case OtherType():
            return ty.shape in UNUSUAL_TYPE_SHAPES
        case ReferenceType() | GroupType():
            return _is_unusual(ty.elem)
        case _:
            return False
