"""Source-level entry points."""

from validspec.services.analysis_service import (
    StructAnalysis,
    analyze_item,
    analyze_source,
    consumer_for,
)

__all__ = [
    "StructAnalysis",
    "analyze_item",
    "analyze_source",
    "consumer_for",
]
