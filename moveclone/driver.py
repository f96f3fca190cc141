# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
moveclone driver: parse a unit, expand every capture literal, print the result.

Literals are expanded independently against the original tree, optionally on
a thread pool; per-literal diagnostics are merged in source order so output
does not depend on `--jobs`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from moveclone.core.diagnostics import Diagnostic, DiagnosticReporter
from moveclone.parser import ast as A
from moveclone.parser import parse_source
from moveclone.parser.printer import render_program
from moveclone.stage1.capture_expand import LiteralOutcome, expand_capture_literal
from moveclone.stage1.capture_sites import collect_capture_sites
from moveclone.stage1.clonability import CloneOracle, TraitTableOracle
from moveclone.stage1.clone_desugar import ExpansionResult, apply_expansions

logger = logging.getLogger(__name__)


@dataclass
class ExpandOptions:
	jobs: int = 1
	assume_clone: bool = False


@dataclass
class ExpandResult:
	program: Optional[A.Program]
	diagnostics: List[Diagnostic] = field(default_factory=list)
	expanded: int = 0

	@property
	def has_errors(self) -> bool:
		return any(d.severity == "error" for d in self.diagnostics)

	@property
	def source(self) -> Optional[str]:
		return render_program(self.program) if self.program is not None else None


def expand_program(
	prog: A.Program,
	*,
	options: ExpandOptions | None = None,
	oracle: CloneOracle | None = None,
	file: str | None = None,
) -> ExpandResult:
	"""
	Expand every annotated literal of `prog`.

	A literal that fails (bad specifier, unknown capture, not clonable) keeps
	its original form minus the specifier; the others are still rewritten.
	"""
	options = options or ExpandOptions()
	if oracle is None:
		oracle = TraitTableOracle.from_program(prog, assume_clone=options.assume_clone)
	index = collect_capture_sites(prog)
	logger.debug("found %d capture site(s) in %s", len(index.sites), file or "<input>")

	def _run(site) -> LiteralOutcome:
		return expand_capture_literal(site, oracle, file=file)

	if options.jobs > 1 and len(index.sites) > 1:
		with ThreadPoolExecutor(max_workers=options.jobs) as pool:
			outcomes = list(pool.map(_run, index.sites))
	else:
		outcomes = [_run(site) for site in index.sites]

	expansions: Dict[int, ExpansionResult] = {}
	for outcome in outcomes:
		if outcome.expansion is not None:
			expansions[id(outcome.site.literal)] = outcome.expansion
	diagnostics = DiagnosticReporter.merge(o.diagnostics for o in outcomes)
	rejected = [id(o.site.literal) for o in outcomes if o.expansion is None]
	rewritten = apply_expansions(prog, expansions, rejected=rejected)
	logger.debug("expanded %d of %d literal(s)", len(expansions), len(outcomes))
	return ExpandResult(program=rewritten, diagnostics=diagnostics, expanded=len(expansions))


def expand_source(
	source: str,
	*,
	path: Path | str | None = None,
	options: ExpandOptions | None = None,
	oracle: CloneOracle | None = None,
) -> ExpandResult:
	"""Parse and expand one compilation unit; host syntax errors yield no program."""
	prog, parse_diags = parse_source(source, path=path)
	if prog is None:
		return ExpandResult(program=None, diagnostics=parse_diags)
	file = str(path) if path is not None else None
	return expand_program(prog, options=options, oracle=oracle, file=file)


def _diag_to_json(diag: Diagnostic, phase: str, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	file = diag.span.file if diag.span.file is not None else str(source)
	return {
		"phase": diag.phase or phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


def main(argv: list[str] | None = None) -> int:
	"""
	CLI: expands `move clone` literals in SOURCE and prints the rewritten unit.

	Exit code is 1 when any error diagnostic was produced.
	"""
	parser = argparse.ArgumentParser(prog="moveclone", description="Expand `move clone` closures and async blocks")
	parser.add_argument("source", type=Path, help="Path to the source file")
	parser.add_argument("-o", "--output", type=Path, help="Write the rewritten source to this path")
	parser.add_argument("--json", action="store_true", help="Emit diagnostics and result as JSON")
	parser.add_argument("--jobs", type=int, default=1, help="Expand literals on N worker threads")
	parser.add_argument(
		"--assume-clone",
		action="store_true",
		help="Treat bindings of unknown type as clonable",
	)
	parser.add_argument("--check", action="store_true", help="Only report diagnostics; do not print the rewritten source")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
		stream=sys.stderr,
	)
	if args.jobs < 1:
		parser.error("--jobs must be at least 1")

	source_path: Path = args.source
	try:
		text = source_path.read_text()
	except OSError as err:
		if args.json:
			diag = {"phase": "io", "code": None, "message": str(err), "severity": "error", "file": str(source_path), "line": None, "column": None, "notes": []}
			print(json.dumps({"exit_code": 1, "diagnostics": [diag], "source": None}))
		else:
			print(f"{source_path}: error: {err}", file=sys.stderr)
		return 1

	options = ExpandOptions(jobs=args.jobs, assume_clone=args.assume_clone)
	result = expand_source(text, path=source_path, options=options)
	exit_code = 1 if result.has_errors else 0
	rendered = result.source if not args.check else None

	if args.output is not None and rendered is not None:
		args.output.write_text(rendered)
		logger.debug("wrote %s", args.output)

	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [_diag_to_json(d, "capture", source_path) for d in result.diagnostics],
			"source": rendered if args.output is None else None,
		}
		print(json.dumps(payload))
		return exit_code

	for d in result.diagnostics:
		print(d.render(), file=sys.stderr)
	if rendered is not None and args.output is None:
		sys.stdout.write(rendered)
	return exit_code


__all__ = ["ExpandOptions", "ExpandResult", "expand_program", "expand_source", "main"]
