# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Expand one capture site: analyze, resolve, emit.

Each site gets its own `DiagnosticReporter`. Specifier parse errors (already
attached to the literal by the parser) and semantic capture errors become
diagnostics and leave the literal unexpanded; nothing here stops other
sites from being processed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from moveclone.core.diagnostics import Diagnostic, DiagnosticReporter
from moveclone.parser import ast as A
from moveclone.stage1.capture_errors import CaptureError
from moveclone.stage1.capture_resolve import resolve_capture_set
from moveclone.stage1.capture_sites import CaptureSite
from moveclone.stage1.clonability import CloneOracle
from moveclone.stage1.clone_desugar import ExpansionResult, emit_clone_expansion
from moveclone.stage1.free_vars import analyze_free_variables

logger = logging.getLogger(__name__)


@dataclass
class LiteralOutcome:
	site: CaptureSite
	expansion: Optional[ExpansionResult] = None
	diagnostics: List[Diagnostic] = field(default_factory=list)


def _literal_note(literal: A.CaptureLiteral) -> str:
	kind = "closure" if isinstance(literal, A.Closure) else "async block"
	return f"in the {kind} starting at {literal.loc.line}:{literal.loc.column}"


def expand_capture_literal(
	site: CaptureSite,
	oracle: CloneOracle,
	*,
	file: str | None = None,
) -> LiteralOutcome:
	literal = site.literal
	reporter = DiagnosticReporter(file=file)
	outcome = LiteralOutcome(site=site)

	if literal.capture_error is not None:
		err = literal.capture_error
		reporter.error(
			str(err),
			code=err.code,
			phase="parser",
			loc=err.loc or literal.loc,
			notes=[_literal_note(literal)],
		)
		logger.debug("capture specifier rejected at %s:%s: %s", literal.loc.line, literal.loc.column, err)
		outcome.diagnostics = reporter.diagnostics
		return outcome

	free_vars = analyze_free_variables(literal, site.enclosing)
	try:
		decision = resolve_capture_set(literal.capture, free_vars)
		outcome.expansion = emit_clone_expansion(literal, decision, free_vars, oracle)
	except CaptureError as err:
		reporter.error(
			str(err),
			code=err.code,
			phase="capture",
			loc=err.loc or literal.loc,
			notes=[_literal_note(literal)],
		)
		logger.debug("capture expansion rejected at %s:%s: %s", literal.loc.line, literal.loc.column, err)
	else:
		logger.debug(
			"expanded literal at %s:%s clone=%s move=%s",
			literal.loc.line,
			literal.loc.column,
			decision.clone_names,
			decision.move_names,
		)
	outcome.diagnostics = reporter.diagnostics
	return outcome


__all__ = ["LiteralOutcome", "expand_capture_literal"]
