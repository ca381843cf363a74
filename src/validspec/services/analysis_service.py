"""Analyse Rust source: pick the derive targets and run the pipeline on each."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from validspec.analysis.pipeline import collect_field_info
from validspec.analysis.schemas import FieldDescriptor
from validspec.config import Settings
from validspec.constants import Consumer
from validspec.syntax.rust_parser import find_item, parse_source
from validspec.syntax.schemas import ItemDefinition

logger = logging.getLogger(__name__)


class StructAnalysis(BaseModel):
    """Descriptors for one structure and the consumer they were built for."""

    name: str
    consumer: Consumer
    fields: list[FieldDescriptor] = Field(
        default_factory=lambda: list[FieldDescriptor]()
    )


def consumer_for(item: ItemDefinition) -> Consumer | None:
    """The strictest consumer the item derives, if any."""
    if Consumer.VALIDIFY in item.derives:
        return Consumer.VALIDIFY
    if Consumer.VALIDATE in item.derives:
        return Consumer.VALIDATE
    return None


def analyze_item(
    item: ItemDefinition,
    consumer: Consumer,
    settings: Settings | None = None,
) -> StructAnalysis:
    """Run the pipeline with the ownership strictness of ``consumer``."""
    fields = collect_field_info(
        item,
        allow_references=consumer == Consumer.VALIDATE,
        settings=settings,
    )
    return StructAnalysis(name=item.name, consumer=consumer, fields=fields)


def analyze_source(
    source: str,
    *,
    file_path: str = "<input>",
    struct_name: str | None = None,
    consumer: Consumer | None = None,
    settings: Settings | None = None,
) -> list[StructAnalysis]:
    """Analyse every item deriving Validate/Validify, or one named item.

    ``consumer`` overrides what the derives say. A named item that
    derives neither trait falls back to ``Settings.allow_references``.
    """
    cfg = settings or Settings()
    items = parse_source(source, file_path, cfg)

    if struct_name is not None:
        item = find_item(items, struct_name)
        chosen = consumer or consumer_for(item)
        if chosen is None:
            logger.warning(
                "%s derives neither Validate nor Validify; "
                "analysing with allow_references=%s",
                item.name,
                cfg.allow_references,
            )
            chosen = (
                Consumer.VALIDATE if cfg.allow_references else Consumer.VALIDIFY
            )
        return [analyze_item(item, chosen, cfg)]

    results: list[StructAnalysis] = []
    for item in items:
        derived = consumer_for(item)
        if derived is None:
            continue
        results.append(analyze_item(item, consumer or derived, cfg))
    return results
