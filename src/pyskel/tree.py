"""Shared helpers for reading the lark Tree/Token nodes produced by the grammar.

Lowering never looks at ``Tree.data`` or ``Token.type`` directly; it goes
through :func:`node_tag` so rule trees and terminals share one tag namespace.
"""
from __future__ import annotations
from typing import List, Optional, Tuple, TypeGuard, Union

from lark import Token, Tree
from typing_extensions import TypeAlias

Node: TypeAlias = Union[Tree, Token]

# Rule trees.
DOCUMENT = "document"
PART = "part"
BLOCK = "block"
LINE = "line"
ITEM = "item"
VARIABLE = "variable"
CLASS = "class"
CLASSNAME = "classname"
FUNCTION = "function"
FUNCTIONNAME = "functionname"
ARGUMENTS = "arguments"

# Terminals.
INDENT = "INDENT"
NEWLINE = "NEWLINE"
EOI = "EOI"


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def node_tag(node: Node) -> Optional[str]:
    if is_tree(node):
        return str(node.data)
    if is_token(node):
        return node.type
    return None

def is_end_marker(node: Node) -> bool:
    return node_tag(node) == EOI

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    children = getattr(node, "children", None)
    if children is None:
        return []

    return list(children)

def node_text(node: Node) -> str:
    """Raw source text covered by a name-bearing node."""
    if is_token(node):
        return str(node.value)

    return "".join(node_text(ch) for ch in tree_children(node))

def margin_depth(node: Node) -> int:
    """Indentation units in an ``INDENT`` margin: one per two spaces or per tab."""
    text = node_text(node)
    return (text.count(" ") + 2 * text.count("\t")) // 2

def node_position(node: Optional[Node]) -> Tuple[Optional[int], Optional[int]]:
    """Return ``(line, column)`` for a node, or ``(None, None)`` if unknown."""
    if node is None:
        return None, None

    if is_token(node):
        return node.line, node.column

    meta = getattr(node, "meta", None)
    if meta is not None and not getattr(meta, "empty", True):
        return meta.line, meta.column

    # Trees built by hand (tests, tools) carry no meta; borrow the first
    # positioned descendant instead.
    for child in tree_children(node):
        line, column = node_position(child)
        if line is not None:
            return line, column

    return None, None
