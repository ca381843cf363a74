"""Parse annotation argument tokens into meta items.

Grammar (attribute meta syntax)::

    list   := [ item { "," item } [","] ]
    item   := literal | path [ "(" list ")" | "=" value ]
    value  := ["-"] number | string | bool | path
    path   := ["::"] ident { "::" ident }
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from validspec.constants import ErrorCategory, ValueKind
from validspec.errors import AnalysisError
from validspec.syntax.schemas import Span, Token


@dataclass(frozen=True)
class LiteralValue:
    kind: ValueKind
    value: str | int | float | bool
    span: Span


@dataclass(frozen=True)
class PathValue:
    path: str
    span: Span


Value: TypeAlias = LiteralValue | PathValue


@dataclass(frozen=True)
class PathMeta:
    """A bare keyword or path: ``phone``."""

    path: str
    span: Span


@dataclass(frozen=True)
class ListMeta:
    """A keyword with nested items: ``length(min = 1)``."""

    path: str
    items: tuple[Meta, ...]
    span: Span


@dataclass(frozen=True)
class NameValueMeta:
    """A keyword bound to a value: ``code = "oops"``."""

    path: str
    value: Value
    span: Span


@dataclass(frozen=True)
class LiteralMeta:
    """A bare literal in item position: ``contains("x")``."""

    value: LiteralValue
    span: Span


Meta: TypeAlias = PathMeta | ListMeta | NameValueMeta | LiteralMeta


def parse_meta_list(tokens: list[Token], span: Span) -> list[Meta]:
    """Parse a comma-separated list of meta items.

    ``span`` locates errors that occur past the last token.
    """
    parser = _MetaParser(tokens, span)
    items = parser.parse_list(closing=None)
    parser.expect_end()
    return items


def _annotation_error(message: str, span: Span) -> AnalysisError:
    return AnalysisError(message, span, ErrorCategory.ANNOTATION)


def _join(first: Span, last: Span) -> Span:
    return Span(
        file=first.file,
        start_line=first.start_line,
        start_column=first.start_column,
        end_line=last.end_line,
        end_column=last.end_column,
    )


class _MetaParser:
    """Recursive-descent parser over a flat token list."""

    def __init__(self, tokens: list[Token], span: Span) -> None:
        self._tokens = tokens
        self._pos = 0
        self._span = span

    # ── token access ─────────────────────────────────────

    def _peek(self, offset: int = 0) -> Token | None:
        idx = self._pos + offset
        return self._tokens[idx] if idx < len(self._tokens) else None

    def _next(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise _annotation_error(
                "unexpected end of annotation arguments", self._span
            )
        self._pos += 1
        return tok

    def _at_punct(self, text: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.kind == "punct" and tok.text == text

    def _eat_punct(self, text: str) -> Token:
        tok = self._next()
        if tok.kind != "punct" or tok.text != text:
            raise _annotation_error(
                f"expected `{text}`, found `{tok.text}`", tok.span
            )
        return tok

    def expect_end(self) -> None:
        tok = self._peek()
        if tok is not None:
            raise _annotation_error(
                f"unexpected `{tok.text}` in annotation arguments", tok.span
            )

    # ── grammar ──────────────────────────────────────────

    def parse_list(self, closing: str | None) -> list[Meta]:
        items: list[Meta] = []
        while True:
            if self._peek() is None or (
                closing is not None and self._at_punct(closing)
            ):
                return items
            items.append(self._parse_item())
            if self._at_punct(","):
                self._next()
                continue
            return items

    def _parse_item(self) -> Meta:
        tok = self._peek()
        if tok is not None and (
            tok.kind in ("string", "integer", "float")
            or (tok.kind == "punct" and tok.text == "-")
            or (tok.kind == "ident" and tok.value in ("true", "false"))
        ):
            literal = self._parse_literal()
            return LiteralMeta(value=literal, span=literal.span)

        path, start = self._parse_path()

        if self._at_punct("("):
            self._next()
            items = self.parse_list(closing=")")
            end = self._eat_punct(")")
            return ListMeta(
                path=path, items=tuple(items), span=_join(start, end.span)
            )

        if self._at_punct("="):
            self._next()
            value = self._parse_value()
            return NameValueMeta(
                path=path, value=value, span=_join(start, value.span)
            )

        return PathMeta(path=path, span=self._span_since(start))

    def _parse_path(self) -> tuple[str, Span]:
        segments: list[str] = []
        first = self._peek()
        if first is None:
            raise _annotation_error("expected an identifier", self._span)
        leading = ""
        if self._at_punct("::"):
            self._next()
            leading = "::"

        while True:
            tok = self._next()
            if tok.kind != "ident":
                raise _annotation_error(
                    f"expected an identifier, found `{tok.text}`", tok.span
                )
            segments.append(tok.value)
            if not self._at_punct("::"):
                break
            self._next()

        return leading + "::".join(segments), first.span

    def _parse_value(self) -> Value:
        tok = self._peek()
        if tok is not None and tok.kind == "ident" and tok.value not in (
            "true",
            "false",
        ):
            path, start = self._parse_path()
            return PathValue(path=path, span=self._span_since(start))
        return self._parse_literal()

    def _parse_literal(self) -> LiteralValue:
        tok = self._next()
        negative = False
        start = tok.span
        if tok.kind == "punct" and tok.text == "-":
            negative = True
            tok = self._next()
            if tok.kind not in ("integer", "float"):
                raise _annotation_error(
                    f"expected a number after `-`, found `{tok.text}`",
                    tok.span,
                )
        span = _join(start, tok.span)

        if tok.kind == "string":
            return LiteralValue(ValueKind.STRING, tok.value, span)
        if tok.kind == "integer":
            number = int(tok.value)
            return LiteralValue(
                ValueKind.INTEGER, -number if negative else number, span
            )
        if tok.kind == "float":
            number_f = float(tok.value)
            return LiteralValue(
                ValueKind.FLOAT, -number_f if negative else number_f, span
            )
        if tok.kind == "ident" and tok.value in ("true", "false"):
            return LiteralValue(ValueKind.BOOLEAN, tok.value == "true", span)

        raise _annotation_error(
            f"expected a literal or path, found `{tok.text}`", tok.span
        )

    def _span_since(self, start: Span) -> Span:
        last = self._tokens[self._pos - 1] if self._pos else None
        return _join(start, last.span) if last is not None else start
