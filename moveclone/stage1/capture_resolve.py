# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import Optional, Sequence

from moveclone.parser.ast import CaptureSpecifier, ExplicitClone, ImplicitClone
from moveclone.stage1.capture_errors import UnknownCapture
from moveclone.stage1.captures import CaptureDecision, FreeVariable


def resolve_capture_set(spec: Optional[CaptureSpecifier], free_vars: Sequence[FreeVariable]) -> CaptureDecision:
	"""
	Partition `free_vars` into clone and move captures.

	- `None` (plain `move`): passthrough, everything is moved.
	- `ImplicitClone`: everything is cloned, in first-use order.
	- `ExplicitClone`: listed names are cloned in list order; every listed name
	  must be free (`UnknownCapture` otherwise); the rest are moved.
	"""
	names = [fv.name for fv in free_vars]
	if spec is None:
		return CaptureDecision.from_modes(clones=(), moves=names)
	if isinstance(spec, ImplicitClone):
		return CaptureDecision.from_modes(clones=names, moves=())
	if isinstance(spec, ExplicitClone):
		free = set(names)
		for item in spec.names:
			if item.name not in free:
				raise UnknownCapture(item.name, loc=item.loc)
		listed = set(spec.name_list)
		return CaptureDecision.from_modes(
			clones=spec.name_list,
			moves=[n for n in names if n not in listed],
		)
	raise TypeError(f"Unsupported capture specifier: {type(spec).__name__}")


__all__ = ["resolve_capture_set"]
