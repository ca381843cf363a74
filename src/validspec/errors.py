"""Exception hierarchy for analysis failures.

Every analysis failure is fatal to the current run and carries the
source span it originates from, so callers can report it the way a
compiler would (``file:line:column: message``). Categories:

- structure: the item is not a struct with named fields
- ownership: a borrowed field type meets a consumer that mutates fields
- annotation: unknown keyword, malformed arguments, or a rule that does
  not apply to the field's type
"""

from __future__ import annotations

from validspec.constants import ErrorCategory
from validspec.syntax.schemas import Span

__all__ = [
    "AnalysisError",
    "ErrorCategory",
    "GrammarUnavailableError",
    "SourceParseError",
    "ValidspecError",
]


class ValidspecError(Exception):
    """Base class for all validspec errors."""


class AnalysisError(ValidspecError):
    """A located, fatal failure raised while analysing one structure."""

    def __init__(
        self,
        message: str,
        span: Span,
        category: ErrorCategory,
    ) -> None:
        super().__init__(f"{span}: {message}")
        self.message = message
        self.span = span
        self.category = category


class SourceParseError(ValidspecError):
    """tree-sitter found a syntax error in the source text."""

    def __init__(self, message: str, span: Span) -> None:
        super().__init__(f"{span}: {message}")
        self.message = message
        self.span = span


class GrammarUnavailableError(ValidspecError):
    """The tree-sitter grammar package could not be loaded."""

    def __init__(self, module_name: str) -> None:
        super().__init__(
            f"Grammar module {module_name!r} is not installed"
        )
        self.module_name = module_name
