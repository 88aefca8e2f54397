from __future__ import annotations

import io
from pathlib import Path

import pytest

from pyskel import format_document, parse
from pyskel.cli import main
from tests.support.harness import src

CLASS_SOURCE = "\nclass Test:\n  test\n  t123\n"

CLASS_OUTLINE = src(
    """\
    document
      literal
        block depth=0
          0: class Test
            block depth=1
              1: test
              1: t123"""
)


def test_format_document() -> None:
    assert format_document(parse(CLASS_SOURCE)) == CLASS_OUTLINE


def test_format_function() -> None:
    out = format_document(parse("def f(a, a):\n  a\n"))
    assert "0: def f(a, a)" in out


def test_main_reads_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "sample.py"
    source.write_text(CLASS_SOURCE, encoding="utf-8")

    assert main([str(source)]) == 0
    assert capsys.readouterr().out == CLASS_OUTLINE + "\n"


def test_main_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("  abcd\n"))

    assert main([]) == 0
    assert "1: abcd" in capsys.readouterr().out


def test_main_prints_raw_tree(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "sample.py"
    source.write_text("abcd\n", encoding="utf-8")

    assert main([str(source), "--tree"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("document")
    assert "variable" in out


def test_main_strict_dedent_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "sample.py"
    source.write_text("  a\nb\n", encoding="utf-8")

    assert main([str(source), "--strict-dedent"]) == 0
    assert capsys.readouterr().out.count("literal") == 2


def test_main_reports_tokenize_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "bad.py"
    source.write_text("a b\n", encoding="utf-8")

    assert main([str(source)]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: unexpected")
    assert "a b" in err
    assert "Python traceback" not in err


def test_main_reports_nesting_limit(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "deep.py"
    source.write_text("class A:\n  class B:\n    x\n", encoding="utf-8")

    assert main([str(source), "--max-nesting", "1"]) == 1
    assert "grammar mismatch in class" in capsys.readouterr().err


def test_main_debug_trace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("PYSKEL_DEBUG_PY_TRACE", "1")
    source = tmp_path / "bad.py"
    source.write_text("$\n", encoding="utf-8")

    assert main([str(source)]) == 1
    assert "Python traceback" in capsys.readouterr().err


def test_main_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "absent.py")]) == 1
    assert "Cannot read" in capsys.readouterr().err


def test_main_missing_grammar(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "sample.py"
    source.write_text("abcd\n", encoding="utf-8")

    assert main([str(source), "-g", str(tmp_path / "missing.lark")]) == 1
    assert "Cannot load grammar" in capsys.readouterr().err


def test_main_broken_grammar(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "sample.py"
    source.write_text("abcd\n", encoding="utf-8")
    grammar = tmp_path / "broken.lark"
    grammar.write_text("document: missing_rule\n", encoding="utf-8")

    assert main([str(source), "-g", str(grammar)]) == 1
    err = capsys.readouterr().err
    assert "Cannot load grammar" in err
    assert "missing_rule" in err


def test_main_reports_inconsistent_indent(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "sample.py"
    source.write_text("a\n  b\n", encoding="utf-8")

    assert main([str(source), "--strict-dedent"]) == 1
    assert capsys.readouterr().err.startswith("Error: unexpected indent at line 2")
