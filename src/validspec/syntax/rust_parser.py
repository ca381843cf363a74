"""Extract struct, enum and union declarations from Rust source via tree-sitter."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator
from pathlib import Path

import tree_sitter

from validspec.config import Settings
from validspec.constants import FieldLayout, ItemKind
from validspec.errors import GrammarUnavailableError, SourceParseError
from validspec.syntax.schemas import (
    Attribute,
    FieldDefinition,
    GroupType,
    ItemDefinition,
    OtherType,
    PathType,
    ReferenceType,
    Span,
    TypeExpr,
)
from validspec.syntax.tokens import strip_delimiters, tree_tokens

logger = logging.getLogger(__name__)

# Item node types, per item kind.
_ITEM_NODE_TYPES: dict[str, ItemKind] = {
    "struct_item": ItemKind.STRUCT,
    "enum_item": ItemKind.ENUM,
    "union_item": ItemKind.UNION,
}

# Type node types serialised as plain paths.
_PATH_TYPE_NODES = frozenset({
    "type_identifier",
    "scoped_type_identifier",
    "generic_type",
    "primitive_type",
})

_COMMENT_NODES = frozenset({"line_comment", "block_comment"})

# Nodes whose children are statements or items: `mod`/`impl` bodies and
# blocks, including function bodies.
_CONTAINER_NODES = frozenset({"declaration_list", "block"})

_BODY_NODES = frozenset({
    "field_declaration_list",
    "ordered_field_declaration_list",
    "enum_variant_list",
})


def parse_source(
    source: str,
    file_path: str = "<input>",
    settings: Settings | None = None,
) -> list[ItemDefinition]:
    """Parse Rust source and return every struct/enum/union declaration.

    Items nested in inline ``mod`` blocks, ``impl`` blocks and function
    bodies are included. Each item carries the outer attributes written
    directly above it.

    Raises :class:`SourceParseError` if the source has syntax errors.
    """
    cfg = settings or Settings()
    parser = _get_parser(cfg.grammar_module)
    tree = parser.parse(source.encode("utf-8"))
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root) or root
        raise SourceParseError(
            "source contains a syntax error", _span(bad, file_path)
        )

    items: list[ItemDefinition] = []
    _collect_items(root, file_path, items)
    logger.debug("Parsed %d item(s) from %s", len(items), file_path)
    return items


def parse_file(
    path: Path | str, settings: Settings | None = None
) -> list[ItemDefinition]:
    """Read a UTF-8 Rust file and parse its items."""
    path = Path(path)
    source = path.read_text(encoding="utf-8")
    return parse_source(source, str(path), settings)


def find_item(items: list[ItemDefinition], name: str) -> ItemDefinition:
    """Return the item called ``name``."""
    for item in items:
        if item.name == name:
            return item
    raise LookupError(f"No struct, enum or union named {name!r}")


def _collect_items(
    container: tree_sitter.Node,
    file_path: str,
    items: list[ItemDefinition],
) -> None:
    """Walk a file, module body or block, pairing items with attributes."""
    pending: list[Attribute] = []

    for child in container.children:
        if child.type == "attribute_item":
            pending.append(_attribute(child, file_path))
            continue
        if child.type in _COMMENT_NODES:
            continue

        if child.type in _ITEM_NODE_TYPES:
            items.append(_item(child, pending, file_path))
        else:
            _collect_nested(child, file_path, items)
        pending = []


def _collect_nested(
    node: tree_sitter.Node,
    file_path: str,
    items: list[ItemDefinition],
) -> None:
    """Find the item containers below ``node``: mod, impl and fn bodies."""
    for child in node.named_children:
        if child.type in _CONTAINER_NODES:
            _collect_items(child, file_path, items)
        else:
            _collect_nested(child, file_path, items)


def _item(
    node: tree_sitter.Node,
    attributes: list[Attribute],
    file_path: str,
) -> ItemDefinition:
    kind = _ITEM_NODE_TYPES[node.type]
    name_node = node.child_by_field_name("name")
    name = _text(name_node) if name_node is not None else ""

    # Attributes written inside the item node (grammar versions differ)
    attributes = attributes + [
        _attribute(c, file_path)
        for c in node.children
        if c.type == "attribute_item"
    ]

    body = node.child_by_field_name("body")
    if body is None:
        body = next(
            (c for c in node.children if c.type in _BODY_NODES), None
        )

    fields: list[FieldDefinition] = []
    if body is None:
        layout = FieldLayout.UNIT
    elif body.type == "ordered_field_declaration_list":
        layout = FieldLayout.TUPLE
        fields = _positional_fields(body, file_path)
    elif body.type == "field_declaration_list":
        layout = FieldLayout.NAMED
        fields = _named_fields(body, file_path)
    else:
        layout = FieldLayout.NAMED

    return ItemDefinition(
        name=name,
        kind=kind,
        layout=layout,
        fields=fields,
        attributes=attributes,
        derives=_derives(attributes),
        span=_span(node, file_path),
        body_span=_span(body if body is not None else node, file_path),
    )


def _named_fields(
    body: tree_sitter.Node, file_path: str
) -> list[FieldDefinition]:
    fields: list[FieldDefinition] = []
    pending: list[Attribute] = []

    for child in body.children:
        if child.type == "attribute_item":
            pending.append(_attribute(child, file_path))
        elif child.type == "field_declaration":
            name_node = child.child_by_field_name("name")
            type_node = child.child_by_field_name("type")
            own = [
                _attribute(c, file_path)
                for c in child.children
                if c.type == "attribute_item"
            ]
            fields.append(
                FieldDefinition(
                    name=_text(name_node) if name_node is not None else None,
                    ty=_type(type_node, file_path),
                    attributes=pending + own,
                    span=_span(child, file_path),
                )
            )
            pending = []

    return fields


def _positional_fields(
    body: tree_sitter.Node, file_path: str
) -> list[FieldDefinition]:
    fields: list[FieldDefinition] = []
    pending: list[Attribute] = []

    for child in body.children:
        if child.type == "attribute_item":
            pending.append(_attribute(child, file_path))
        elif (
            child.is_named
            and child.type not in _COMMENT_NODES
            and child.type != "visibility_modifier"
        ):
            fields.append(
                FieldDefinition(
                    name=None,
                    ty=_type(child, file_path),
                    attributes=pending,
                    span=_span(child, file_path),
                )
            )
            pending = []

    return fields


def _type(node: tree_sitter.Node | None, file_path: str) -> TypeExpr:
    """Convert a type node into the closed type-expression union."""
    if node is None:
        return OtherType(shape="missing", text="")

    text = _type_text(node)
    span = _span(node, file_path)

    if node.type == "reference_type":
        inner = node.child_by_field_name("type")
        if inner is None:
            inner = _named_children(node)[-1]
        lifetime = next(
            (_text(c) for c in node.children if c.type == "lifetime"), None
        )
        return ReferenceType(
            elem=_type(inner, file_path),
            lifetime=lifetime,
            text=text,
            span=span,
        )

    if node.type == "parenthesized_type" or _is_single_group(node):
        inner = _named_children(node)[0]
        return GroupType(elem=_type(inner, file_path), text=text, span=span)

    if node.type in _PATH_TYPE_NODES:
        return PathType(text=text, span=span)

    return OtherType(shape=node.type, text=text, span=span)


def _is_single_group(node: tree_sitter.Node) -> bool:
    """True for ``(T)``: a tuple type with one element and no comma."""
    if node.type != "tuple_type":
        return False
    has_comma = any(c.type == "," for c in node.children)
    return not has_comma and len(_named_children(node)) == 1


def _type_text(node: tree_sitter.Node) -> str:
    """Source text of a type with the comments inside it cut out."""
    source = node.text or b""
    pieces: list[bytes] = []
    cursor = 0
    for comment in _comments_within(node):
        pieces.append(source[cursor : comment.start_byte - node.start_byte])
        cursor = comment.end_byte - node.start_byte
    pieces.append(source[cursor:])
    return b"".join(pieces).decode("utf-8")


def _comments_within(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    for child in node.children:
        if child.type in _COMMENT_NODES:
            yield child
        else:
            yield from _comments_within(child)


def _named_children(node: tree_sitter.Node) -> list[tree_sitter.Node]:
    return [
        c for c in node.named_children if c.type not in _COMMENT_NODES
    ]


def _attribute(node: tree_sitter.Node, file_path: str) -> Attribute:
    """Convert an ``attribute_item`` node into an :class:`Attribute`."""
    attr = next((c for c in node.named_children if c.type == "attribute"), node)

    path = ""
    for child in attr.named_children:
        if child.type in ("identifier", "scoped_identifier", "crate", "self"):
            path = "".join(_text(child).split())
            break

    args_node = attr.child_by_field_name("arguments")
    if args_node is None:
        args_node = next(
            (c for c in attr.children if c.type == "token_tree"), None
        )

    arguments = None
    if args_node is not None:
        arguments = strip_delimiters(tree_tokens(args_node, file_path))

    return Attribute(
        path=path,
        arguments=arguments,
        span=_span(node, file_path),
    )


def _derives(attributes: list[Attribute]) -> list[str]:
    """Names listed in ``#[derive(...)]``, last path segment only."""
    names: list[str] = []
    for attr in attributes:
        if attr.path != "derive" or not attr.arguments:
            continue
        current: str | None = None
        for tok in attr.arguments:
            if tok.kind == "ident":
                current = tok.value
            elif tok.text == ",":
                if current:
                    names.append(current)
                current = None
        if current:
            names.append(current)
    return names


def _first_error(node: tree_sitter.Node) -> tree_sitter.Node | None:
    """Depth-first search for the first ERROR or missing node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _text(node: tree_sitter.Node) -> str:
    return node.text.decode("utf-8") if node.text else ""


def _span(node: tree_sitter.Node, file_path: str) -> Span:
    return Span(
        file=file_path,
        start_line=node.start_point[0] + 1,
        start_column=node.start_point[1] + 1,
        end_line=node.end_point[0] + 1,
        end_column=node.end_point[1] + 1,
    )


# ---------------------------------------------------------------------------
# Parser cache
# ---------------------------------------------------------------------------

_parser_cache: dict[str, tree_sitter.Parser] = {}


def _get_parser(module_name: str) -> tree_sitter.Parser:
    """Get or create a cached tree-sitter parser."""
    if module_name in _parser_cache:
        return _parser_cache[module_name]

    try:
        mod = importlib.import_module(module_name)
    except ImportError as exc:
        raise GrammarUnavailableError(module_name) from exc

    capsule: object = mod.language()
    lang = tree_sitter.Language(capsule)
    parser = tree_sitter.Parser(lang)
    _parser_cache[module_name] = parser
    return parser
