# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional, Tuple

from moveclone.parser.ast import Located
from moveclone.stage1.scopes import Binding


class CaptureMode(Enum):
	"""How a free variable enters a `move` literal."""

	CLONE = auto()
	MOVE = auto()


@dataclass(frozen=True)
class FreeVariable:
	"""
	A name referenced in a literal body that resolves outside the literal.

	`loc` is the first use (traversal order is source order), which fixes the
	implicit clone order.
	"""

	name: str
	loc: Located
	binding: Binding


@dataclass(frozen=True)
class CaptureItem:
	"""
	One captured variable.

	`rename` and `mutable` are reserved for capture-list renaming and
	mutability markers; nothing sets them yet.
	"""

	source_name: str
	mode: CaptureMode
	rename: Optional[str] = None
	mutable: Optional[bool] = None

	@property
	def binding_name(self) -> str:
		return self.rename or self.source_name


@dataclass(frozen=True)
class CaptureDecision:
	"""
	Clone/move partition of a literal's free variables.

	`items` holds the clone items first, in emission order, then the moved ones
	in first-use order. Its names are exactly the free-variable names.
	"""

	items: Tuple[CaptureItem, ...]

	@property
	def clones(self) -> Tuple[CaptureItem, ...]:
		return tuple(i for i in self.items if i.mode is CaptureMode.CLONE)

	@property
	def moves(self) -> Tuple[CaptureItem, ...]:
		return tuple(i for i in self.items if i.mode is CaptureMode.MOVE)

	@property
	def clone_names(self) -> list[str]:
		return [i.source_name for i in self.clones]

	@property
	def move_names(self) -> list[str]:
		return [i.source_name for i in self.moves]

	def mode_of(self, name: str) -> Optional[CaptureMode]:
		for item in self.items:
			if item.source_name == name:
				return item.mode
		return None

	@classmethod
	def from_modes(cls, clones: Iterable[str], moves: Iterable[str]) -> "CaptureDecision":
		items = [CaptureItem(source_name=n, mode=CaptureMode.CLONE) for n in clones]
		items.extend(CaptureItem(source_name=n, mode=CaptureMode.MOVE) for n in moves)
		return cls(items=tuple(items))


__all__ = ["CaptureMode", "FreeVariable", "CaptureItem", "CaptureDecision"]
