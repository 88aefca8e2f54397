"""
Typed tree produced by lowering.

    Document
      Part (Literal)
        Block
          Line
            Item: Variable | ClassDef | FunctionDef | Empty
                  ClassDef / FunctionDef own a nested Block

Nodes are frozen and hold tuples, so a Document cannot change once built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from typing_extensions import TypeAlias


@dataclass(frozen=True)
class Block:
    """Lines sharing one canonical indentation depth."""
    depth: int
    lines: Tuple["Line", ...] = ()


@dataclass(frozen=True)
class Line:
    depth: int
    item: "Item"


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Class:
    name: str
    body: Block


@dataclass(frozen=True)
class Function:
    name: str
    body: Block
    parameters: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassDef:
    cls: Class


@dataclass(frozen=True)
class FunctionDef:
    function: Function


Item: TypeAlias = Union[Empty, Variable, ClassDef, FunctionDef]


@dataclass(frozen=True)
class Literal:
    block: Block


Part: TypeAlias = Literal


@dataclass(frozen=True)
class Document:
    parts: Tuple[Part, ...] = ()
    location: Optional[str] = None


def format_document(document: Document, indent: str = "  ") -> str:
    """Render a Document as an indented outline, one node per line."""
    out: List[str] = ["document"]
    for part in document.parts:
        out.append(f"{indent}literal")
        _format_block(part.block, indent, 2, out)
    return "\n".join(out)


def _format_block(block: Block, indent: str, level: int, out: List[str]) -> None:
    out.append(f"{indent * level}block depth={block.depth}")
    for line in block.lines:
        pad = indent * (level + 1)
        item = line.item
        match item:
            case Variable(name=name):
                out.append(f"{pad}{line.depth}: {name}")
            case ClassDef(cls=cls):
                out.append(f"{pad}{line.depth}: class {cls.name}")
                _format_block(cls.body, indent, level + 2, out)
            case FunctionDef(function=fn):
                params = ", ".join(fn.parameters)
                out.append(f"{pad}{line.depth}: def {fn.name}({params})")
                _format_block(fn.body, indent, level + 2, out)
            case Empty():
                out.append(f"{pad}{line.depth}: <empty>")
