"""Check that an item is eligible for analysis and list its fields."""

from __future__ import annotations

from validspec.constants import (
    NAMED_FIELDS_MESSAGE,
    ErrorCategory,
    ItemKind,
)
from validspec.errors import AnalysisError
from validspec.syntax.schemas import FieldDefinition, ItemDefinition


def collect_fields(item: ItemDefinition) -> list[FieldDefinition]:
    """Return the item's fields in declaration order.

    Only structs whose fields all have names are eligible. Enums,
    unions and structs with positional fields raise
    :class:`AnalysisError`; nothing past this check runs for them.
    """
    if item.kind != ItemKind.STRUCT:
        raise AnalysisError(
            NAMED_FIELDS_MESSAGE, item.span, ErrorCategory.STRUCTURE
        )

    if any(f.name is None for f in item.fields):
        raise AnalysisError(
            NAMED_FIELDS_MESSAGE, item.body_span, ErrorCategory.STRUCTURE
        )

    return list(item.fields)
