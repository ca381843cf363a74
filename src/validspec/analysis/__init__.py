"""Field-attribute resolution: walk, resolve types, extract annotations."""

from validspec.analysis.extractor import collect_field_attributes
from validspec.analysis.pipeline import collect_field_info
from validspec.analysis.schemas import (
    FieldDescriptor,
    Modifier,
    ParamValue,
    TypeSignature,
    ValidationRule,
)
from validspec.analysis.type_resolver import map_field_types, resolve_type
from validspec.analysis.walker import collect_fields

__all__ = [
    "FieldDescriptor",
    "Modifier",
    "ParamValue",
    "TypeSignature",
    "ValidationRule",
    "collect_field_attributes",
    "collect_field_info",
    "collect_fields",
    "map_field_types",
    "resolve_type",
]
