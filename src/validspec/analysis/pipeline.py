"""Field resolution pipeline: struct in, ordered field descriptors out.

Two phases, in this order:

1. Walk the structure and resolve every field's type signature.
2. For each field, in declaration order, extract its rules and
   modifiers and assemble a :class:`FieldDescriptor`.

Phase 1 must finish before phase 2 starts: rules may look at sibling
fields' signatures. The first error aborts the run; callers never see a
partial descriptor list.
"""

from __future__ import annotations

import logging

from validspec.analysis.extractor import collect_field_attributes
from validspec.analysis.naming import (
    rename_all_convention,
    serialized_name,
)
from validspec.analysis.schemas import FieldDescriptor
from validspec.analysis.type_resolver import map_field_types
from validspec.analysis.walker import collect_fields
from validspec.config import Settings
from validspec.syntax.schemas import ItemDefinition

logger = logging.getLogger(__name__)


def collect_field_info(
    item: ItemDefinition,
    allow_references: bool,
    settings: Settings | None = None,
) -> list[FieldDescriptor]:
    """Analyse ``item`` and return one descriptor per field.

    ``allow_references`` is True for read-only validation consumers and
    False for consumers that also modify fields.

    Raises :class:`AnalysisError` on the first structural, ownership or
    annotation problem.
    """
    cfg = settings or Settings()
    fields = collect_fields(item)

    # Phase 1: every signature before any rule extraction
    field_types = map_field_types(
        fields,
        allow_references,
        reject_unusual=cfg.reject_unusual_types,
    )
    convention = rename_all_convention(item.attributes, cfg)

    # Phase 2: per-field extraction in declaration order
    descriptors: list[FieldDescriptor] = []
    for fld in fields:
        assert fld.name is not None  # collect_fields rejects unnamed fields
        validations, modifiers = collect_field_attributes(
            fld, field_types, cfg
        )
        descriptors.append(
            FieldDescriptor(
                field=fld,
                name=fld.name,
                original_name=serialized_name(fld, convention, cfg),
                field_type=field_types[fld.name],
                validations=validations,
                modifiers=modifiers,
                span=fld.span,
            )
        )

    logger.info(
        "Analysed %s: %d field(s), %d rule(s), %d modifier(s)",
        item.name,
        len(descriptors),
        sum(len(d.validations) for d in descriptors),
        sum(len(d.modifiers) for d in descriptors),
    )
    return descriptors
