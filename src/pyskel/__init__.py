"""pyskel: lower an indentation-structured Python skeleton into a typed tree."""

from __future__ import annotations

from typing import Optional

from . import config
from .ast import (
    Block,
    Class,
    ClassDef,
    Document,
    Empty,
    Function,
    FunctionDef,
    Item,
    Line,
    Literal,
    Part,
    Variable,
    format_document,
)
from .errors import (
    EmptyInput,
    GrammarMismatch,
    InconsistentIndent,
    NestingTooDeep,
    PyskelError,
    TokenizeError,
)
from .lower import lower_block, lower_document
from .tokenizer import tokenize

__all__ = [
    "Block",
    "Class",
    "ClassDef",
    "Document",
    "Empty",
    "EmptyInput",
    "Function",
    "FunctionDef",
    "GrammarMismatch",
    "InconsistentIndent",
    "Item",
    "Line",
    "Literal",
    "NestingTooDeep",
    "Part",
    "PyskelError",
    "TokenizeError",
    "Variable",
    "format_document",
    "lower_block",
    "lower_document",
    "parse",
    "tokenize",
]


def parse(source: str, *, strict_dedent: Optional[bool] = None, max_nesting: Optional[int] = None,
          grammar_path: Optional[str] = None) -> Document:
    """Source text -> Document. Options left as None come from the environment."""
    tree = tokenize(source, grammar_path=grammar_path, strict=config.strict_dedent(strict_dedent))
    return lower_document(tree, max_nesting=config.max_nesting(max_nesting))
