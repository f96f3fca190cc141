# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Clonability queries (the type/trait collaborator).

The emitter only asks one question: does the static type of this captured
binding support `.clone()`? Answers are `True`, `False`, or `None` when the
oracle cannot tell. What an inconclusive answer means is the oracle's policy,
not the emitter's: `TraitTableOracle(assume_clone=True)` turns it into `True`.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from moveclone.parser import ast as A
from moveclone.stage1.captures import FreeVariable

CLONE_TRAIT = "Clone"

# Builtin types that implement Clone when all their type arguments do.
BUILTIN_CLONE_TYPES = frozenset(
	{
		"Int",
		"Float",
		"Bool",
		"String",
		"Array",
		"Vec",
		"Option",
		"Rc",
		"Arc",
		A.TUPLE_TYPE_NAME,
	}
)


class CloneOracle(Protocol):
	def supports_clone(self, var: FreeVariable) -> Optional[bool]:
		...


class TraitTableOracle:
	"""
	Answers from declared types: builtins, user structs, `impl Clone for T {}`.

	A declared struct without a Clone impl is a definite `False`; a binding
	with no known type, or a type name nobody declared, is `None`.
	"""

	def __init__(
		self,
		*,
		clone_types: Iterable[str] = BUILTIN_CLONE_TYPES,
		known_types: Iterable[str] = (),
		assume_clone: bool = False,
	) -> None:
		self.clone_types = set(clone_types)
		self.known_types = set(known_types) | self.clone_types
		self.assume_clone = assume_clone

	@classmethod
	def from_program(cls, prog: A.Program, *, assume_clone: bool = False) -> "TraitTableOracle":
		oracle = cls(known_types=[s.name for s in prog.structs], assume_clone=assume_clone)
		for impl in prog.impls:
			if impl.trait_name == CLONE_TRAIT:
				oracle.clone_types.add(impl.target.name)
				oracle.known_types.add(impl.target.name)
		return oracle

	def type_supports_clone(self, ty: A.TypeExpr) -> Optional[bool]:
		if ty.name not in self.known_types:
			return None
		if ty.name not in self.clone_types:
			return False
		answer: Optional[bool] = True
		for arg in ty.args:
			sub = self.type_supports_clone(arg)
			if sub is False:
				return False
			if sub is None:
				answer = None
		return answer

	def supports_clone(self, var: FreeVariable) -> Optional[bool]:
		ty = var.binding.type_expr
		answer = self.type_supports_clone(ty) if ty is not None else None
		if answer is None and self.assume_clone:
			return True
		return answer


__all__ = ["CLONE_TRAIT", "BUILTIN_CLONE_TYPES", "CloneOracle", "TraitTableOracle"]
