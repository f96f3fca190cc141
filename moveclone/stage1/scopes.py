# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Arena of lexical scopes with parent links.

The arena stands in for the host's scope/binding resolver. Scopes are plain
records addressed by integer id; a `ScopeView` is a read-only handle on one
scope and its ancestors, which is what the free-variable analyzer queries.

Each `let` opens a fresh child scope holding only the names it binds, so a
view taken at some program point never sees bindings introduced later in the
same block, and shadowing resolves to the nearest earlier declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional

from moveclone.parser.ast import Located, TypeExpr


class ScopeKind(Enum):
	MODULE = auto()
	FUNCTION = auto()
	BLOCK = auto()
	LET = auto()
	CLOSURE = auto()
	ARM = auto()
	LOOP = auto()


class BindingKind(Enum):
	"""What introduced a name. Only locals and params are capturable."""

	ITEM = auto()
	PARAM = auto()
	LOCAL = auto()


ScopeId = int


@dataclass(frozen=True)
class Binding:
	name: str
	kind: BindingKind
	scope_id: ScopeId
	loc: Optional[Located] = None
	type_expr: Optional[TypeExpr] = None
	mutable: bool = False

	@property
	def capturable(self) -> bool:
		return self.kind is not BindingKind.ITEM


@dataclass
class Scope:
	scope_id: ScopeId
	kind: ScopeKind
	parent: Optional[ScopeId] = None
	bindings: Dict[str, Binding] = field(default_factory=dict)


class ScopeArena:
	"""Owns every scope record of one compilation unit."""

	def __init__(self) -> None:
		self._scopes: List[Scope] = []

	def new_scope(self, kind: ScopeKind, parent: Optional[ScopeId] = None) -> ScopeId:
		sid = len(self._scopes)
		self._scopes.append(Scope(scope_id=sid, kind=kind, parent=parent))
		return sid

	def declare(
		self,
		sid: ScopeId,
		name: str,
		kind: BindingKind,
		*,
		loc: Optional[Located] = None,
		type_expr: Optional[TypeExpr] = None,
		mutable: bool = False,
	) -> Binding:
		binding = Binding(name=name, kind=kind, scope_id=sid, loc=loc, type_expr=type_expr, mutable=mutable)
		self._scopes[sid].bindings[name] = binding
		return binding

	def chain(self, sid: Optional[ScopeId]) -> Iterator[Scope]:
		"""Yield `sid` and its ancestors, innermost first."""
		while sid is not None:
			scope = self._scopes[sid]
			yield scope
			sid = scope.parent

	def lookup(self, sid: ScopeId, name: str) -> Optional[Binding]:
		for scope in self.chain(sid):
			binding = scope.bindings.get(name)
			if binding is not None:
				return binding
		return None

	def view(self, sid: ScopeId) -> "ScopeView":
		return ScopeView(arena=self, scope_id=sid)


@dataclass(frozen=True)
class ScopeView:
	"""Read-only handle: the scope chain visible at one program point."""

	arena: ScopeArena
	scope_id: ScopeId

	def lookup(self, name: str) -> Optional[Binding]:
		return self.arena.lookup(self.scope_id, name)


__all__ = [
	"ScopeKind",
	"BindingKind",
	"ScopeId",
	"Binding",
	"Scope",
	"ScopeArena",
	"ScopeView",
]
