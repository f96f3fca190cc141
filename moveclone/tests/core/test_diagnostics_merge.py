# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from moveclone.core.diagnostics import Diagnostic, DiagnosticReporter
from moveclone.core.span import Span
from moveclone.parser.ast import Located


def test_merge_orders_by_position_and_keeps_ties_stable() -> None:
	late = DiagnosticReporter(file="a.mc")
	late.error("late", code="E1", loc=Located(line=9, column=1))
	early = DiagnosticReporter(file="a.mc")
	early.error("first", code="E2", loc=Located(line=2, column=4))
	early.error("second", code="E3", loc=Located(line=2, column=4))
	unknown = DiagnosticReporter(file="a.mc")
	unknown.report(Diagnostic(message="nowhere"))
	merged = DiagnosticReporter.merge([unknown.diagnostics, late.diagnostics, early.diagnostics])
	assert [d.message for d in merged] == ["first", "second", "late", "nowhere"]


def test_reporter_fills_in_file_and_renders_notes() -> None:
	rep = DiagnosticReporter(file="x.mc")
	rep.report(Diagnostic(message="boom", span=Span(line=3, column=5), notes=["look here"]))
	assert rep.has_errors()
	assert len(rep) == 1
	(diag,) = rep.diagnostics
	assert diag.span.file == "x.mc"
	assert diag.render() == "x.mc:3:5: error: boom\n  note: look here"
