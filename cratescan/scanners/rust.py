"""Tree-sitter powered scanner for Rust entry points."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

from .base import Scanner
from ..errors import ParseError
from ..models import Item, ItemKind, ScanResult, Statement, StatementKind, Visibility

RUST_LANGUAGE = Language(tree_sitter_rust.language())

# `cargo new` template body.
DEFAULT_GREETINGS: Tuple[str, ...] = ("Hello, world!",)
DEFAULT_PRINT_MACROS: Tuple[str, ...] = ("println",)
DEFAULT_ENTRY_FUNCTION = "main"

_ITEM_KINDS = {
    "function_item": ItemKind.FUNCTION,
    "function_signature_item": ItemKind.FUNCTION,
    "struct_item": ItemKind.STRUCT,
    "enum_item": ItemKind.ENUM,
    "union_item": ItemKind.UNION,
    "type_item": ItemKind.TYPE_ALIAS,
    "const_item": ItemKind.CONSTANT,
    "static_item": ItemKind.STATIC,
    "trait_item": ItemKind.TRAIT,
    "impl_item": ItemKind.IMPL,
    "mod_item": ItemKind.MODULE,
    "use_declaration": ItemKind.USE,
    "extern_crate_declaration": ItemKind.EXTERN_CRATE,
    "foreign_mod_item": ItemKind.FOREIGN_MODULE,
    "macro_definition": ItemKind.MACRO_DEFINITION,
    "macro_invocation": ItemKind.MACRO_INVOCATION,
}

# Field holding the displayed name, for items that do not use `name`.
_NAME_FIELDS = {
    "use_declaration": "argument",
    "impl_item": "type",
    "macro_invocation": "macro",
}

_NON_STATEMENTS = {
    "line_comment",
    "block_comment",
    "empty_statement",
    "attribute_item",
    "inner_attribute_item",
}

_DELIMITERS = {"(", ")", "[", "]", "{", "}"}

_MACRO_EXPORT_RE = re.compile(r"^#\s*\[\s*macro_export\b")


class RustScanner(Scanner):
    """Extracts top-level items and the `main` body from Rust sources."""

    name = "rust"

    def __init__(
        self,
        greetings: Sequence[str] = DEFAULT_GREETINGS,
        print_macros: Sequence[str] = DEFAULT_PRINT_MACROS,
        entry_function: str = DEFAULT_ENTRY_FUNCTION,
    ) -> None:
        self.greetings = frozenset(greetings)
        self.print_macros = frozenset(print_macros)
        self.entry_function = entry_function

    def scan(self, source: str) -> ScanResult:
        source_bytes = source.encode("utf-8")
        # One parser per call keeps scans independent across worker threads.
        tree = Parser(RUST_LANGUAGE).parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            raise ParseError(_describe_syntax_error(root))
        return ScanResult(
            items=tuple(self._collect_items(root, source_bytes)),
            entry_body=self._entry_body(root, source_bytes),
        )

    def is_noop_statement(self, statement: Statement) -> bool:
        return (
            statement.kind is StatementKind.MACRO_CALL
            and statement.macro_name in self.print_macros
            and statement.argument_count == 1
            and statement.literal is not None
            and statement.literal in self.greetings
        )

    def is_exported(self, item: Item) -> bool:
        return item.visibility is Visibility.PUBLIC

    # ------------------------------------------------------------------
    # Items

    def _collect_items(self, root: Node, source_bytes: bytes) -> Iterator[Item]:
        attributes: List[str] = []
        for child in root.named_children:
            if child.type == "attribute_item":
                attributes.append(_node_text(child, source_bytes))
                continue
            kind = _ITEM_KINDS.get(child.type)
            if kind is None:
                continue
            yield Item(
                kind=kind,
                name=_item_name(child, source_bytes),
                visibility=_item_visibility(child, attributes, source_bytes),
            )
            attributes = []

    # ------------------------------------------------------------------
    # Entry function

    def _entry_body(self, root: Node, source_bytes: bytes) -> Optional[Tuple[Statement, ...]]:
        for child in root.named_children:
            if child.type != "function_item":
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None or _node_text(name_node, source_bytes) != self.entry_function:
                continue
            body = child.child_by_field_name("body")
            if body is None:
                return ()
            return tuple(self._statements(body.named_children, source_bytes))
        return None

    def _statements(self, nodes: Iterable[Node], source_bytes: bytes) -> Iterator[Statement]:
        for node in nodes:
            if node.type in _NON_STATEMENTS:
                continue
            yield _statement(node, source_bytes)


def _statement(node: Node, source_bytes: bytes) -> Statement:
    text = _node_text(node, source_bytes)
    inner = node
    if node.type == "expression_statement" and node.named_children:
        inner = node.named_children[0]

    if inner.type == "macro_invocation":
        return _macro_statement(inner, text, source_bytes)
    if node.type == "let_declaration":
        return Statement(kind=StatementKind.DECLARATION, text=text)
    if node.type in _ITEM_KINDS:
        return Statement(kind=StatementKind.ITEM, text=text)
    return Statement(kind=StatementKind.EXPRESSION, text=text)


def _macro_statement(node: Node, text: str, source_bytes: bytes) -> Statement:
    macro_node = node.child_by_field_name("macro")
    macro_path = _node_text(macro_node, source_bytes) if macro_node is not None else ""
    token_tree = next((child for child in node.named_children if child.type == "token_tree"), None)
    arguments = _macro_arguments(token_tree) if token_tree is not None else []

    literal = None
    if arguments and len(arguments[0]) == 1:
        literal = _string_value(arguments[0][0], source_bytes)

    return Statement(
        kind=StatementKind.MACRO_CALL,
        text=text,
        macro_name=macro_path.split("::")[-1].strip(),
        argument_count=len(arguments),
        literal=literal,
    )


def _macro_arguments(token_tree: Node) -> List[List[Node]]:
    """Split a macro token tree on its top-level commas."""
    tokens = list(token_tree.children)
    if tokens and tokens[0].type in _DELIMITERS:
        tokens = tokens[1:]
    if tokens and tokens[-1].type in _DELIMITERS:
        tokens = tokens[:-1]

    groups: List[List[Node]] = [[]]
    for token in tokens:
        if token.type == "," and not token.is_named:
            groups.append([])
            continue
        groups[-1].append(token)
    return [group for group in groups if group]


def _string_value(node: Node, source_bytes: bytes) -> Optional[str]:
    text = _node_text(node, source_bytes)
    if node.type == "string_literal" and text.startswith('"') and len(text) >= 2:
        return text[1:-1]
    if node.type == "raw_string_literal" and text.startswith("r"):
        body = text[1:]
        hashes = len(body) - len(body.lstrip("#"))
        return body[hashes + 1 : len(body) - hashes - 1]
    return None


def _item_name(node: Node, source_bytes: bytes) -> Optional[str]:
    name_node = node.child_by_field_name(_NAME_FIELDS.get(node.type, "name"))
    if name_node is None:
        return None
    return _node_text(name_node, source_bytes)


def _item_visibility(node: Node, attributes: Sequence[str], source_bytes: bytes) -> Visibility:
    if node.type == "macro_definition":
        exported = any(_MACRO_EXPORT_RE.match(attribute) for attribute in attributes)
        return Visibility.PUBLIC if exported else Visibility.PRIVATE
    if node.type == "foreign_mod_item":
        body = node.child_by_field_name("body")
        if body is None:
            body = next(
                (child for child in node.named_children if child.type == "declaration_list"),
                None,
            )
        if body is None:
            return Visibility.PRIVATE
        declared = {_declared_visibility(child, source_bytes) for child in body.named_children}
        for visibility in (Visibility.PUBLIC, Visibility.RESTRICTED):
            if visibility in declared:
                return visibility
        return Visibility.PRIVATE
    return _declared_visibility(node, source_bytes)


def _declared_visibility(node: Node, source_bytes: bytes) -> Visibility:
    for child in node.children:
        if child.type == "visibility_modifier":
            modifier = "".join(_node_text(child, source_bytes).split())
            # pub(crate), pub(super), pub(in path) and bare `crate` stay inside the crate.
            return Visibility.PUBLIC if modifier == "pub" else Visibility.RESTRICTED
    return Visibility.PRIVATE


def _describe_syntax_error(root: Node) -> str:
    node = _first_error(root)
    if node is None:
        return "syntax error"
    row, column = node.start_point[0], node.start_point[1]
    if node.is_missing:
        return f"missing {node.type!r} at line {row + 1}, column {column + 1}"
    return f"syntax error at line {row + 1}, column {column + 1}"


def _first_error(node: Node) -> Optional[Node]:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


__all__ = [
    "DEFAULT_ENTRY_FUNCTION",
    "DEFAULT_GREETINGS",
    "DEFAULT_PRINT_MACROS",
    "RUST_LANGUAGE",
    "RustScanner",
]
