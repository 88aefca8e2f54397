from __future__ import annotations

import argparse
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from lark.exceptions import GrammarError

from . import config
from .ast import format_document
from .errors import PyskelError, TokenizeError
from .lower import lower_document
from .tokenizer import build_parser, read_grammar, tokenize


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pyskel", description="Lower a Python skeleton into its block tree")
    ap.add_argument("source", nargs="?", help="Path to a source file (defaults to stdin)")
    ap.add_argument("-g", "--grammar", default=None, help="Path to an alternative grammar file")
    ap.add_argument("--tree", action="store_true", help="Print the raw parse tree instead of the lowered one")
    ap.add_argument("--strict-dedent", action="store_true", default=None,
                    help="Close blocks on dedent (offside rule) instead of keeping bodies greedy")
    ap.add_argument("--max-nesting", type=int, default=None, help="Deepest allowed class/def nesting")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    strict = config.strict_dedent(args.strict_dedent)

    try:
        code = Path(args.source).read_text(encoding="utf-8") if args.source else sys.stdin.read()
    except OSError as err:
        print(f"Cannot read {args.source}: {err}", file=sys.stderr)
        return 1

    try:
        build_parser(read_grammar(args.grammar, strict), strict)
    except (OSError, GrammarError) as err:
        print(f"Cannot load grammar: {err}", file=sys.stderr)
        return 1

    try:
        tree = tokenize(code, grammar_path=args.grammar, strict=strict)
        if args.tree:
            print(tree.pretty(), end="")
            return 0

        document = lower_document(tree, max_nesting=config.max_nesting(args.max_nesting))
    except (PyskelError, ValueError) as err:
        _report(err)
        return 1

    print(format_document(document))
    return 0


def _report(err: Exception) -> None:
    print(f"Error: {err}", file=sys.stderr)
    if isinstance(err, TokenizeError) and err.context:
        print(err.context, file=sys.stderr, end="" if err.context.endswith("\n") else "\n")
    if config.debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(err.__traceback__)), file=sys.stderr, end="")
