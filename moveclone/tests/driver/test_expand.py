# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json

from moveclone import driver
from moveclone.driver import ExpandOptions, expand_source
from moveclone.parser import parser as p
from moveclone.parser.printer import render_program

_MIXED = """
struct Handle { fd: Int }
fn f(a: String, b: String, h: Handle) {
	let g1 = move clone(a) || consume(a, b);
	let g2 = move clone(zzz) || a;
	let g3 = move clone(a, a) || a;
	let g4 = move clone || consume(h);
	let g5 = move clone || b;
}
"""


def test_expand_source_rewrites_literals() -> None:
	result = expand_source("let a = \"x\";\nlet g = move clone || a;\n")
	assert not result.has_errors
	assert result.expanded == 1
	expected = "let a = \"x\";\nlet g = {\n\tlet a = a.clone();\n\tmove || a\n};\n"
	assert result.source == expected


def test_invalid_literals_do_not_block_others() -> None:
	result = expand_source(_MIXED, path="mixed.mc")
	assert result.expanded == 2
	codes = [d.code for d in result.diagnostics]
	assert codes == ["E-CAPTURE-UNKNOWN", "E-CAPTURE-DUPLICATE", "E-CAPTURE-NOT-CLONABLE"]
	assert [d.phase for d in result.diagnostics] == ["capture", "parser", "capture"]
	assert all(d.span.file == "mixed.mc" for d in result.diagnostics)
	out = result.source
	# Rejected literals degrade to plain `move`; the rest are expanded.
	assert "clone(" not in out.replace(".clone()", "")
	assert "move || a" in out
	assert "let b = b.clone();" in out


def test_diagnostics_are_ordered_regardless_of_jobs() -> None:
	serial = expand_source(_MIXED, options=ExpandOptions(jobs=1))
	parallel = expand_source(_MIXED, options=ExpandOptions(jobs=4))
	key = lambda r: [(d.code, d.span.line, d.span.column) for d in r.diagnostics]
	assert key(serial) == key(parallel)
	lines = [d.span.line for d in parallel.diagnostics]
	assert lines == sorted(lines)
	assert serial.source == parallel.source


def test_host_syntax_error_yields_no_program() -> None:
	result = expand_source("fn f( {", path="bad.mc")
	assert result.program is None
	assert result.source is None
	assert result.has_errors
	assert result.diagnostics[0].phase == "parser"


def test_assume_clone_accepts_untyped_bindings() -> None:
	src = "fn f(a: Mystery) {\n\tlet g = move clone || a;\n}\n"
	strict = expand_source(src)
	assert [d.code for d in strict.diagnostics] == ["E-CAPTURE-NOT-CLONABLE"]
	relaxed = expand_source(src, options=ExpandOptions(assume_clone=True))
	assert not relaxed.diagnostics
	assert relaxed.expanded == 1


def test_plain_move_is_passthrough() -> None:
	src = "let a = 1;\nlet g = move || a;\n"
	result = expand_source(src)
	assert result.expanded == 0
	assert result.source == render_program(p.parse_program(src))


def test_cli_json_output(tmp_path, capsys) -> None:
	src = tmp_path / "main.mc"
	src.write_text("fn f(a: Int) {\n\tlet g = move clone(b) || a;\n}\n")
	rc = driver.main([str(src), "--json"])
	assert rc == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "E-CAPTURE-UNKNOWN"
	assert diag["phase"] == "capture"
	assert diag["file"] == str(src)
	assert diag["line"] == 2
	assert payload["source"] is not None


def test_cli_writes_output_file(tmp_path, capsys) -> None:
	src = tmp_path / "main.mc"
	out = tmp_path / "out.mc"
	src.write_text("fn f(a: Int) {\n\tlet g = move clone || a;\n}\n")
	rc = driver.main([str(src), "-o", str(out)])
	assert rc == 0
	assert "let a = a.clone();" in out.read_text()
	assert capsys.readouterr().out == ""


def test_cli_check_reports_without_source(tmp_path, capsys) -> None:
	src = tmp_path / "main.mc"
	src.write_text("let g = move clone() || 1;\n")
	rc = driver.main([str(src), "--check"])
	captured = capsys.readouterr()
	assert rc == 1
	assert captured.out == ""
	assert "E-CAPTURE-EMPTY" in captured.err


def test_cli_missing_file(tmp_path, capsys) -> None:
	rc = driver.main([str(tmp_path / "nope.mc")])
	assert rc == 1
	assert "error" in capsys.readouterr().err


def test_string_escapes_survive_expansion() -> None:
	result = expand_source('let s = "a\\rb";\nlet g = move clone || s;\n')
	assert not result.has_errors
	assert result.source.startswith('let s = "a\\rb";\n')
	assert p.parse_program(result.source).statements[0].value.value == "a\rb"
