# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the capture pipeline.

`Diagnostic` is a message plus optional code/span/notes. `DiagnosticReporter`
is the sink each stage writes into; reporters are cheap, one is created per
literal task, and `merge` folds them back together in source order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label ("parser" for specifier syntax, "capture" for semantic
	# rejections). JSON output and tests key on it.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		head = f"{self.span}: {self.severity}: {self.message}"
		if not self.notes:
			return head
		return "\n".join([head, *(f"  note: {n}" for n in self.notes)])


class DiagnosticReporter:
	"""
	Accumulates diagnostics for one unit of work.

	Reporters are not shared between tasks: each literal expansion gets its own
	and the driver merges them with `merge`, which orders by source position so
	output does not depend on completion order.
	"""

	def __init__(self, *, file: str | None = None) -> None:
		self.file = file
		self._diagnostics: list[Diagnostic] = []

	def report(self, diag: Diagnostic) -> None:
		if self.file is not None and diag.span.file is None:
			diag.span = Span.from_loc(diag.span, file=self.file)
		self._diagnostics.append(diag)

	def error(
		self,
		message: str,
		*,
		code: str | None = None,
		phase: str | None = None,
		loc: object = None,
		notes: Iterable[str] = (),
	) -> Diagnostic:
		diag = Diagnostic(
			message=message,
			code=code,
			phase=phase,
			severity="error",
			span=Span.from_loc(loc, file=self.file),
			notes=list(notes),
		)
		self._diagnostics.append(diag)
		return diag

	def extend(self, diags: Iterable[Diagnostic]) -> None:
		for d in diags:
			self.report(d)

	@property
	def diagnostics(self) -> list[Diagnostic]:
		return list(self._diagnostics)

	def has_errors(self) -> bool:
		return any(d.severity == "error" for d in self._diagnostics)

	def __len__(self) -> int:
		return len(self._diagnostics)

	@staticmethod
	def merge(parts: Iterable[Iterable[Diagnostic]]) -> list[Diagnostic]:
		"""Deterministic reduction of per-task diagnostics (sorted by position)."""
		merged = [d for part in parts for d in part]
		# `sorted` is stable: diagnostics at the same position keep their task order.
		return sorted(merged, key=lambda d: d.span.sort_key())


__all__ = ["Diagnostic", "DiagnosticReporter"]
