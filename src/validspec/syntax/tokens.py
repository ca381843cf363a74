"""Flatten tree-sitter token trees into annotation tokens.

The Rust grammar already tokenises attribute arguments: a ``token_tree``
holds literal, identifier and punctuation leaves, with a nested
``token_tree`` for each bracketed group. The annotation parser wants a
flat stream, so nested groups are spliced in with their delimiters kept
as punctuation tokens.
"""

from __future__ import annotations

import tree_sitter

from validspec.syntax.schemas import Span, Token

_COMMENT_NODES = frozenset({"line_comment", "block_comment"})

# Named leaves that read as identifiers in a meta list: true, u8::MAX
_IDENT_NODES = frozenset({
    "identifier",
    "boolean_literal",
    "primitive_type",
    "self",
    "super",
    "crate",
    "mutable_specifier",
    "metavariable",
})

_STRING_NODES = frozenset({"string_literal", "raw_string_literal"})

_INT_SUFFIXES = tuple(
    f"{sign}{width}"
    for sign in "iu"
    for width in ("8", "16", "32", "64", "128", "size")
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "0": "\0",
    "'": "'",
    '"': '"',
}


def tree_tokens(node: tree_sitter.Node, file_path: str) -> list[Token]:
    """Tokens of a ``token_tree``, nested groups flattened in place."""
    tokens: list[Token] = []
    for child in node.children:
        if child.type in _COMMENT_NODES:
            continue
        if child.type == "token_tree":
            tokens.extend(tree_tokens(child, file_path))
        elif not child.is_named and _is_punct_run(_text(child)):
            tokens.extend(_punct_tokens(child, file_path))
        else:
            tokens.append(_token(child, file_path))
    return tokens


def strip_delimiters(tokens: list[Token]) -> list[Token]:
    """Drop one pair of enclosing ``()``, ``[]`` or ``{}`` tokens."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    if (
        len(tokens) >= 2
        and tokens[0].kind == "punct"
        and tokens[-1].kind == "punct"
        and pairs.get(tokens[0].text) == tokens[-1].text
    ):
        return tokens[1:-1]
    return tokens


def _token(node: tree_sitter.Node, file_path: str) -> Token:
    text = _text(node)
    span = _node_span(node, file_path)

    match node.type:
        case "integer_literal" | "float_literal":
            kind, value = _number(text, node.type)
        case t if t in _STRING_NODES:
            kind, value = "string", _string_value(node)
        case "char_literal":
            kind, value = "string", _char_value(text)
        case "lifetime":
            kind, value = "lifetime", text
        case t if t in _IDENT_NODES:
            kind, value = "ident", text.removeprefix("r#")
        case _ if text.isidentifier():
            # Keywords are anonymous leaves (fn, as, and true in some
            # grammar versions)
            kind, value = "ident", text
        case _:
            kind, value = "punct", text

    return Token(kind=kind, text=text, value=value, span=span)


def _is_punct_run(text: str) -> bool:
    return len(text) > 1 and text != "::" and not any(
        c.isalnum() or c in "\"'" for c in text
    )


def _punct_tokens(node: tree_sitter.Node, file_path: str) -> list[Token]:
    """Split a run of symbols (``=-``) into ``::`` and single characters.

    The grammar lexes adjacent symbols inside a token tree as one leaf;
    the annotation parser matches them one at a time.
    """
    text = _text(node)
    line = node.start_point[0] + 1
    column = node.start_point[1] + 1
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        width = 2 if text.startswith("::", pos) else 1
        piece = text[pos : pos + width]
        tokens.append(
            Token(
                kind="punct",
                text=piece,
                value=piece,
                span=Span(
                    file=file_path,
                    start_line=line,
                    start_column=column + pos,
                    end_line=line,
                    end_column=column + pos + width,
                ),
            )
        )
        pos += width
    return tokens


def _number(text: str, node_type: str) -> tuple[str, str]:
    """Normalise a numeric leaf to ``(kind, value)``.

    Integer leaves may carry a float suffix (``3f64``); hex digits are
    never read as one.
    """
    digits = text.replace("_", "")
    is_radix = digits[:2].lower() in ("0x", "0o", "0b")
    for suffix in _INT_SUFFIXES:
        if digits.endswith(suffix):
            digits = digits.removesuffix(suffix)
            return "integer", str(int(digits, 0 if is_radix else 10))
    if not is_radix and digits.endswith(("f32", "f64")):
        return "float", str(float(digits[:-3]))
    if node_type == "float_literal":
        return "float", str(float(digits))
    return "integer", str(int(digits, 0 if is_radix else 10))


def _string_value(node: tree_sitter.Node) -> str:
    """Decoded contents of a string or raw string literal."""
    if not node.named_children:
        # Raw strings without a content child in older grammars
        text = _text(node)
        return text[text.find('"') + 1 : text.rfind('"')]
    parts: list[str] = []
    continued = False
    for child in node.named_children:
        if child.type == "string_content":
            content = _text(child)
            parts.append(content.lstrip() if continued else content)
            continued = False
        elif child.type == "escape_sequence":
            escape = _text(child)
            continued = escape[1:2] in ("\n", "\r")
            parts.append("" if continued else _escape_value(escape))
    return "".join(parts)


def _char_value(text: str) -> str:
    body = text.removeprefix("b")[1:-1]
    return _escape_value(body) if body.startswith("\\") else body


def _escape_value(escape: str) -> str:
    """The character an ``escape_sequence`` leaf stands for."""
    code = escape[1:]
    if code.startswith("x"):
        return chr(int(code[1:3], 16))
    if code.startswith("u{"):
        return chr(int(code[2:-1].replace("_", ""), 16))
    return _SIMPLE_ESCAPES.get(code, escape)


def _node_span(node: tree_sitter.Node, file_path: str) -> Span:
    return Span(
        file=file_path,
        start_line=node.start_point[0] + 1,
        start_column=node.start_point[1] + 1,
        end_line=node.end_point[0] + 1,
        end_column=node.end_point[1] + 1,
    )


def _text(node: tree_sitter.Node) -> str:
    return node.text.decode("utf-8") if node.text else ""
