"""Grammar engine adapter.

Wraps the lark parser that turns raw source text into the tagged node tree
consumed by :mod:`pyskel.lower`. The only change made to lark's output is the
``EOI`` token appended to the document node, which marks the end of input.

Two grammars ship with the package. ``grammar.lark`` keeps class and def bodies
greedy and reports indentation as per-line ``INDENT`` markers.
``grammar_strict.lark`` runs under :class:`SkeletonIndenter`, so blocks open and
close with the indentation the way Python's own offside rule does.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

from lark import Lark, Token, Tree, UnexpectedInput
from lark.indenter import DedentError, Indenter

from .errors import InconsistentIndent, TokenizeError
from .tree import EOI, INDENT

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).resolve().with_name("grammar.lark")
STRICT_GRAMMAR_PATH = Path(__file__).resolve().with_name("grammar_strict.lark")
START_SYMBOL = "document"


class SkeletonIndenter(Indenter):
    NL_type = "_NL"
    INDENT_type = "INDENT"
    DEDENT_type = "_DEDENT"
    OPEN_PAREN_types = ["LPAR"]
    CLOSE_PAREN_types = ["RPAR"]
    # One indentation unit is two columns, so a tab counts as one unit.
    tab_len = 2

    def handle_NL(self, token: Token) -> Iterator[Token]:
        # The margin before the first line arrives without its newline.
        if "\n" not in token:
            token = Token.new_borrow_pos(token.type, "\n" + token, token)

        try:
            yield from super().handle_NL(token)
        except DedentError:
            margin = token.rsplit("\n", 1)[1]
            raise InconsistentIndent(
                "unindent does not match any outer indentation level",
                line=token.end_line,
                column=len(margin) + 1,
            ) from None


def read_grammar(grammar_path: Optional[str] = None, strict: bool = False) -> str:
    if grammar_path:
        p = Path(grammar_path)
        if p.exists():
            return p.read_text(encoding="utf-8")
        raise FileNotFoundError(f"grammar not found: {grammar_path}")

    bundled = STRICT_GRAMMAR_PATH if strict else GRAMMAR_PATH
    return bundled.read_text(encoding="utf-8")


@lru_cache(maxsize=8)
def build_parser(grammar_text: str, strict: bool = False) -> Lark:
    logger.debug("building lalr parser (%d bytes of grammar, strict=%s)", len(grammar_text), strict)
    if strict:
        return Lark(
            grammar_text,
            parser="lalr",
            lexer="basic",
            postlex=SkeletonIndenter(),
            start=START_SYMBOL,
            maybe_placeholders=False,
            propagate_positions=True,
        )

    return Lark(
        grammar_text,
        parser="lalr",
        lexer="basic",
        start=START_SYMBOL,
        maybe_placeholders=False,
        propagate_positions=True,
    )


def tokenize(source: str, grammar_path: Optional[str] = None, strict: bool = False) -> Tree:
    """Parse ``source`` and return the document tree, ``EOI`` appended."""
    text = source
    if text and not text.endswith("\n"):
        text += "\n"

    parser = build_parser(read_grammar(grammar_path, strict), strict)

    try:
        tree = parser.parse(text)
    except UnexpectedInput as err:
        if strict:
            indent_error = _indent_error(err, text)
            if indent_error is not None:
                raise indent_error from err
        raise _tokenize_error(err, text) from err

    tree.children.append(_end_marker(text))
    return tree


def _end_marker(text: str) -> Token:
    line = text.count("\n") + 1
    column = len(text) - (text.rfind("\n") + 1) + 1
    return Token(EOI, "", start_pos=len(text), line=line, column=column,
                 end_line=line, end_column=column, end_pos=len(text))


def _indent_error(err: UnexpectedInput, text: str) -> Optional[InconsistentIndent]:
    """Name the indentation problem behind a strict-mode parse failure, if any."""
    token = getattr(err, "token", None)
    if token is None:
        return None

    ctx = err.get_context(text, span=40)
    if token.type == INDENT:
        # INDENT borrows its position from the newline; the margin is on end_line.
        return InconsistentIndent("unexpected indent", line=token.end_line,
                                  column=len(token) + 1, context=ctx)
    if set(getattr(err, "expected", None) or ()) == {INDENT}:
        return InconsistentIndent("expected an indented block", line=_positive(token.line),
                                  column=_positive(token.column), context=ctx)
    return None


def _tokenize_error(err: UnexpectedInput, text: str) -> TokenizeError:
    ctx = err.get_context(text, span=40)
    token = getattr(err, "token", None)
    if token is not None and token.type != "$END":
        saw = f"{token.type} {str(token)!r}"
    elif token is not None:
        saw = "end of input"
    else:
        char = getattr(err, "char", None)
        saw = repr(char) if char is not None else "end of input"

    expected = sorted(getattr(err, "expected", None) or getattr(err, "allowed", None) or [])
    message = f"unexpected {saw}"
    if expected:
        message += f"; expected one of: {', '.join(expected)}"

    return TokenizeError(message, line=_positive(err.line), column=_positive(err.column), context=ctx)


def _positive(value: object) -> Optional[int]:
    return value if isinstance(value, int) and value > 0 else None
