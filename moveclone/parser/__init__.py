# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Host-language front end: Lark grammar, capture-specifier post-lexer, AST
builder and printer.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from moveclone.core.diagnostics import Diagnostic
from moveclone.core.span import Span

from . import ast
from .parser import parse_expr, parse_program
from .printer import render_expr, render_program


def parse_source(source: str, *, path: Path | str | None = None) -> Tuple[Optional[ast.Program], List[Diagnostic]]:
	"""
	Parse a compilation unit, turning host syntax errors into diagnostics.

	Returns `(None, diagnostics)` when the unit cannot be parsed at all.
	Capture-specifier errors are not reported here; they stay on their literal.
	"""
	file = str(path) if path is not None else None
	try:
		return parse_program(source), []
	except UnexpectedInput as err:
		span = Span(
			file=file,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			raw=err,
		)
		return None, [Diagnostic(message=str(err), phase="parser", severity="error", span=span)]


__all__ = ["ast", "parse_expr", "parse_program", "parse_source", "render_expr", "render_program"]
