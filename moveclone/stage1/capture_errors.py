# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Semantic capture errors.

`CaptureError`s are user-facing: the driver turns them into diagnostics and
leaves the literal unexpanded. `InternalHygieneError` is a compiler bug and is
never converted into a diagnostic.
"""

from __future__ import annotations

from typing import Optional

from moveclone.parser.ast import Located


class CaptureError(ValueError):
	code = "E-CAPTURE"

	def __init__(self, message: str, *, name: str, loc: Optional[Located]) -> None:
		super().__init__(f"{self.code}: {message}")
		self.name = name
		self.loc = loc


class UnknownCapture(CaptureError):
	code = "E-CAPTURE-UNKNOWN"

	def __init__(self, name: str, *, loc: Optional[Located]) -> None:
		super().__init__(
			f"`{name}` is listed in the clone capture list but the literal does not capture it",
			name=name,
			loc=loc,
		)


class NotClonable(CaptureError):
	code = "E-CAPTURE-NOT-CLONABLE"

	def __init__(self, name: str, *, loc: Optional[Located], reason: str) -> None:
		super().__init__(f"cannot clone `{name}` into the literal: {reason}", name=name, loc=loc)
		self.reason = reason


class InternalHygieneError(AssertionError):
	"""Synthesized shadow bindings would collide; the expansion is inconsistent."""


__all__ = ["CaptureError", "UnknownCapture", "NotClonable", "InternalHygieneError"]
