"""
Lowering: tagged lark tree -> pyskel.ast.

Block boundaries come from the shape of the tree, never from indentation.
What a block does with indentation is normalize the depth reported on its
lines: the first line's measured indentation is latched as the block's
canonical depth and every later line is stamped with it.

Trees from the strict grammar carry an ``INDENT`` token in front of each
indented block (as a sibling inside the part, class or function). Its margin
is the block's canonical depth; lines there have no markers of their own.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from .ast import (
    Block,
    Class,
    ClassDef,
    Document,
    Function,
    FunctionDef,
    Item,
    Line,
    Literal,
    Part,
    Variable,
)
from .config import DEFAULT_MAX_NESTING
from .errors import GrammarMismatch, NestingTooDeep
from .tree import (
    ARGUMENTS,
    BLOCK,
    CLASS,
    CLASSNAME,
    DOCUMENT,
    FUNCTION,
    FUNCTIONNAME,
    INDENT,
    ITEM,
    LINE,
    NEWLINE,
    PART,
    VARIABLE,
    Node,
    is_end_marker,
    margin_depth,
    node_tag,
    node_text,
    tree_children,
)

logger = logging.getLogger(__name__)

STACK_EXHAUSTED = "bodies nested deeper than the Python stack allows"


def lower_document(tree: Node, *, max_nesting: int = DEFAULT_MAX_NESTING) -> Document:
    """Lower a ``document`` tree (as returned by ``tokenize``) to a Document."""
    try:
        return Lowering(max_nesting=max_nesting).document(tree)
    except RecursionError as err:
        raise NestingTooDeep("document", max_nesting, tree, STACK_EXHAUSTED) from err


def lower_block(nodes: Iterable[Node], *, max_nesting: int = DEFAULT_MAX_NESTING) -> Block:
    """Lower a run of sibling ``line`` nodes, optionally ending in ``EOI``."""
    siblings = list(nodes)
    try:
        return Lowering(max_nesting=max_nesting).block(siblings, nesting=0)
    except RecursionError as err:
        first = siblings[0] if siblings else None
        raise NestingTooDeep("block", max_nesting, first, STACK_EXHAUSTED) from err


class Lowering:
    """One lowering run. Holds options only."""

    def __init__(self, max_nesting: int = DEFAULT_MAX_NESTING):
        self.max_nesting = max_nesting

    def document(self, node: Node) -> Document:
        if node_tag(node) != DOCUMENT:
            raise GrammarMismatch("document", node, f"unexpected {node_tag(node)}")

        parts: List[Part] = []

        for child in tree_children(node):
            tag = node_tag(child)
            if tag == PART:
                parts.append(self.part(child))
            elif is_end_marker(child):
                logger.debug("lowered %d part(s)", len(parts))
                return Document(tuple(parts))
            else:
                raise GrammarMismatch("document", child, f"unexpected {tag}")

        raise GrammarMismatch("document", node, "input ended without an end marker")

    def part(self, node: Node) -> Part:
        margin: Optional[int] = None

        for child in tree_children(node):
            tag = node_tag(child)
            if tag == INDENT:
                margin = margin_depth(child)
            elif tag == BLOCK:
                return Literal(self.block(tree_children(child), nesting=0, margin=margin, owner=child))
            else:
                raise GrammarMismatch("part", child, f"unexpected {tag}")

        raise GrammarMismatch("part", node, "no block")

    def block(self, nodes: Iterable[Node], nesting: int, margin: Optional[int] = None,
              owner: Optional[Node] = None) -> Block:
        canonical = margin
        lines: List[Line] = []

        for node in nodes:
            if is_end_marker(node):
                break
            if node_tag(node) != LINE:
                raise GrammarMismatch("block", node, f"unexpected {node_tag(node)}")

            line = self.line(node, nesting)
            if canonical is None:
                canonical = line.depth
            lines.append(replace(line, depth=canonical))
        else:
            if not lines:
                raise GrammarMismatch("block", owner, "no lines and no end marker")

        if canonical is None or not lines:
            return Block(0)
        return Block(canonical, tuple(lines))

    def line(self, node: Node, nesting: int) -> Line:
        depth = 0

        for child in tree_children(node):
            tag = node_tag(child)
            if tag == INDENT:
                depth += 1
            elif tag == NEWLINE:
                continue
            elif tag == ITEM:
                return Line(depth, self.item(child, nesting))
            else:
                raise GrammarMismatch("line", child, f"unexpected {tag}")

        raise GrammarMismatch("line", node, "no item")

    def item(self, node: Node, nesting: int) -> Item:
        children = tree_children(node)
        if not children:
            raise GrammarMismatch("item", node, "empty item")

        inner = children[0]
        tag = node_tag(inner)

        if tag == VARIABLE:
            return Variable(node_text(inner))
        if tag == CLASS:
            return ClassDef(self.class_def(inner, nesting))
        if tag == FUNCTION:
            return FunctionDef(self.function_def(inner, nesting))

        raise GrammarMismatch("item", inner, f"unexpected {tag}")

    def class_def(self, node: Node, nesting: int) -> Class:
        name: Optional[str] = None
        margin: Optional[int] = None

        for child in tree_children(node):
            tag = node_tag(child)
            if tag == CLASSNAME:
                name = node_text(child)
            elif tag == INDENT:
                margin = margin_depth(child)
            elif tag == BLOCK:
                if name is None:
                    raise GrammarMismatch("class", child, "body before class name")
                return Class(name, self.body("class", child, nesting, margin))
            elif tag == NEWLINE:
                continue
            else:
                raise GrammarMismatch("class", child, f"unexpected {tag}")

        raise GrammarMismatch("class", node, "no body")

    def function_def(self, node: Node, nesting: int) -> Function:
        name: Optional[str] = None
        parameters: Tuple[str, ...] = ()
        margin: Optional[int] = None

        for child in tree_children(node):
            tag = node_tag(child)
            if tag == FUNCTIONNAME:
                name = node_text(child)
            elif tag == ARGUMENTS:
                parameters = self.arguments(child)
            elif tag == INDENT:
                margin = margin_depth(child)
            elif tag == BLOCK:
                if name is None:
                    raise GrammarMismatch("function", child, "body before function name")
                return Function(name, self.body("function", child, nesting, margin), parameters)
            elif tag == NEWLINE:
                continue
            else:
                raise GrammarMismatch("function", child, f"unexpected {tag}")

        raise GrammarMismatch("function", node, "no body")

    def arguments(self, node: Node) -> Tuple[str, ...]:
        names: List[str] = []
        for child in tree_children(node):
            if node_tag(child) != VARIABLE:
                raise GrammarMismatch("arguments", child, f"unexpected {node_tag(child)}")
            names.append(node_text(child))
        return tuple(names)

    def body(self, stage: str, node: Node, nesting: int, margin: Optional[int]) -> Block:
        if nesting >= self.max_nesting:
            raise NestingTooDeep(stage, self.max_nesting, node)
        return self.block(tree_children(node), nesting + 1, margin=margin, owner=node)
