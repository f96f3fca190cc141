# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Capture analysis and rewriting: scopes, free variables, capture decisions and
the clone desugaring.
"""

from __future__ import annotations

from .capture_errors import CaptureError, InternalHygieneError, NotClonable, UnknownCapture
from .capture_expand import LiteralOutcome, expand_capture_literal
from .capture_resolve import resolve_capture_set
from .capture_sites import CaptureSite, collect_capture_sites
from .captures import CaptureDecision, CaptureItem, CaptureMode, FreeVariable
from .clonability import CloneOracle, TraitTableOracle
from .clone_desugar import ExpansionResult, apply_expansions, emit_clone_expansion
from .free_vars import analyze_free_variables

__all__ = [
	"CaptureError",
	"InternalHygieneError",
	"NotClonable",
	"UnknownCapture",
	"LiteralOutcome",
	"expand_capture_literal",
	"resolve_capture_set",
	"CaptureSite",
	"collect_capture_sites",
	"CaptureDecision",
	"CaptureItem",
	"CaptureMode",
	"FreeVariable",
	"CloneOracle",
	"TraitTableOracle",
	"ExpansionResult",
	"apply_expansions",
	"emit_clone_expansion",
	"analyze_free_variables",
]
