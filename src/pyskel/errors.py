from __future__ import annotations

from typing import Optional

from .tree import Node, node_position


def _where(line: Optional[int], column: Optional[int]) -> str:
    if line is None:
        return ""
    if column is None:
        return f" at line {line}"
    return f" at line {line}, col {column}"


class PyskelError(Exception):
    """Base class for everything raised while turning source into a Document."""
    pass


class TokenizeError(PyskelError):
    """The grammar engine rejected the raw text."""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None,
                 context: Optional[str] = None):
        self.message = message
        self.line = line
        self.column = column
        self.context = context
        super().__init__(f"{message}{_where(line, column)}")


class GrammarMismatch(PyskelError):
    """
    The tagged node tree did not have the shape a lowering stage expects.

    This is a contract violation between the grammar and the lowering code,
    not a problem with the user's source, so it is never worth retrying.
    """
    def __init__(self, stage: str, node: Optional[Node] = None, detail: Optional[str] = None):
        self.stage = stage
        self.node = node
        self.detail = detail
        self.line, self.column = node_position(node)
        message = f"grammar mismatch in {stage}"
        if detail:
            message += f": {detail}"
        super().__init__(f"{message}{_where(self.line, self.column)}")


class NestingTooDeep(GrammarMismatch):
    """Class/function bodies nested deeper than the limit, or than the Python stack allows."""
    def __init__(self, stage: str, limit: int, node: Optional[Node] = None,
                 detail: Optional[str] = None):
        self.limit = limit
        super().__init__(stage, node, detail or f"bodies nested deeper than {limit} levels")


class InconsistentIndent(TokenizeError):
    """Strict dedent mode: a line's margin does not fit any open block."""
    pass


class EmptyInput(PyskelError):
    """Reserved for zero-content input. Nothing raises it yet."""
    pass
