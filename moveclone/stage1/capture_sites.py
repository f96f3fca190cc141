# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Locate every `move clone` literal in a program and the scope it sits in.

This plays the host resolver's part: one walk over the unit builds the scope
arena (module items, function params, `let` / `for` / `match` bindings,
closure params) and records, for each literal carrying a capture specifier or
a specifier error, a `ScopeView` of the bindings visible where the literal
is written. Sites are independent of each other afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from moveclone.parser import ast as A
from moveclone.stage1.scopes import BindingKind, ScopeArena, ScopeId, ScopeKind, ScopeView


@dataclass(frozen=True)
class CaptureSite:
	literal: A.CaptureLiteral
	enclosing: ScopeView
	# Position in source order; breaks ties when two sites share a location.
	ordinal: int


@dataclass
class CaptureSiteIndex:
	arena: ScopeArena
	sites: List[CaptureSite]


def needs_expansion(node: object) -> bool:
	return A.is_capture_literal(node) and (node.capture is not None or node.capture_error is not None)


def collect_capture_sites(prog: A.Program) -> CaptureSiteIndex:
	arena = ScopeArena()
	sites: List[CaptureSite] = []
	module = arena.new_scope(ScopeKind.MODULE)
	for item in prog.items:
		if isinstance(item, A.FunctionDef):
			arena.declare(module, item.name, BindingKind.ITEM, loc=item.loc)
		elif isinstance(item, A.StructDef):
			arena.declare(module, item.name, BindingKind.ITEM, loc=item.loc)

	def _declare_pattern(
		sid: ScopeId,
		pat: A.Pattern,
		ty: Optional[A.TypeExpr],
		kind: BindingKind = BindingKind.LOCAL,
	) -> None:
		if isinstance(pat, A.BindingPat):
			arena.declare(sid, pat.name, kind, loc=pat.loc, type_expr=ty, mutable=pat.mutable)
		elif isinstance(pat, A.TuplePat):
			elem_types: list[Optional[A.TypeExpr]] = [None] * len(pat.items)
			if ty is not None and ty.name == A.TUPLE_TYPE_NAME and len(ty.args) == len(pat.items):
				elem_types = list(ty.args)
			for sub, sub_ty in zip(pat.items, elem_types):
				_declare_pattern(sid, sub, sub_ty, kind)
		elif isinstance(pat, A.CtorPat):
			for sub in pat.items:
				_declare_pattern(sid, sub, None, kind)

	def _declare_params(sid: ScopeId, params: List[A.Param]) -> None:
		for p in params:
			arena.declare(sid, p.name, BindingKind.PARAM, loc=p.loc, type_expr=p.type_expr, mutable=p.mutable)

	def _walk_block(block: A.Block, parent: ScopeId) -> None:
		sid = arena.new_scope(ScopeKind.BLOCK, parent)
		sid = _walk_statements(block.statements, sid)
		if block.tail is not None:
			_walk_expr(block.tail, sid)

	def _walk_statements(stmts: List[A.Stmt], sid: ScopeId) -> ScopeId:
		"""Walk statements in order; returns the scope visible after the last one."""
		for stmt in stmts:
			if isinstance(stmt, A.LetStmt):
				_walk_expr(stmt.value, sid)
				ty = stmt.type_expr or infer_type(stmt.value, arena.view(sid))
				sid = arena.new_scope(ScopeKind.LET, sid)
				_declare_pattern(sid, stmt.pattern, ty)
			elif isinstance(stmt, A.ExprStmt):
				_walk_expr(stmt.value, sid)
			elif isinstance(stmt, A.ReturnStmt):
				if stmt.value is not None:
					_walk_expr(stmt.value, sid)
			elif isinstance(stmt, A.ForStmt):
				_walk_expr(stmt.iterable, sid)
				loop = arena.new_scope(ScopeKind.LOOP, sid)
				_declare_pattern(loop, stmt.pattern, None)
				_walk_block(stmt.body, loop)
			else:
				raise TypeError(f"Unsupported statement: {type(stmt).__name__}")
		return sid

	def _walk_expr(e: A.Expr, sid: ScopeId) -> None:
		if needs_expansion(e):
			sites.append(CaptureSite(literal=e, enclosing=arena.view(sid), ordinal=len(sites)))
		if isinstance(e, A.Closure):
			inner = arena.new_scope(ScopeKind.CLOSURE, sid)
			_declare_params(inner, e.params)
			_walk_expr(e.body, inner)
		elif isinstance(e, A.AsyncBlock):
			_walk_block(e.body, arena.new_scope(ScopeKind.CLOSURE, sid))
		elif isinstance(e, A.Block):
			_walk_block(e, sid)
		elif isinstance(e, A.MatchExpr):
			_walk_expr(e.subject, sid)
			for arm in e.arms:
				arm_sid = arena.new_scope(ScopeKind.ARM, sid)
				_declare_pattern(arm_sid, arm.pattern, None)
				_walk_expr(arm.body, arm_sid)
		elif isinstance(e, A.IfExpr):
			_walk_expr(e.cond, sid)
			_walk_block(e.then_block, sid)
			if e.else_branch is not None:
				_walk_expr(e.else_branch, sid)
		else:
			for child in _expr_children(e):
				_walk_expr(child, sid)

	for item in prog.items:
		if isinstance(item, A.FunctionDef):
			fn_sid = arena.new_scope(ScopeKind.FUNCTION, module)
			_declare_params(fn_sid, item.params)
			_walk_block(item.body, fn_sid)

	# Top-level statements form one implicit script body.
	script = arena.new_scope(ScopeKind.FUNCTION, module)
	_walk_statements(prog.statements, script)

	sites.sort(key=lambda s: (s.literal.loc.line, s.literal.loc.column, s.ordinal))
	return CaptureSiteIndex(arena=arena, sites=sites)


def _expr_children(e: A.Expr) -> list[A.Expr]:
	if isinstance(e, A.Binary):
		return [e.left, e.right]
	if isinstance(e, A.Unary):
		return [e.operand]
	if isinstance(e, A.Call):
		return [e.func, *e.args]
	if isinstance(e, (A.Attr, A.Await)):
		return [e.value]
	if isinstance(e, A.Index):
		return [e.value, e.index]
	if isinstance(e, A.Assign):
		return [e.target, e.value]
	if isinstance(e, (A.TupleExpr, A.ArrayLiteral)):
		return list(e.elements)
	return []


def infer_type(value: A.Expr, scope: ScopeView) -> Optional[A.TypeExpr]:
	"""
	Best-effort static type of an unannotated `let` initializer.

	Covers literals, tuples/arrays of them, plain copies (`x`) and `x.clone()`.
	Anything else is unknown.
	"""
	if isinstance(value, A.Literal):
		if isinstance(value.value, bool):
			return A.TypeExpr(name="Bool")
		if isinstance(value.value, int):
			return A.TypeExpr(name="Int")
		if isinstance(value.value, float):
			return A.TypeExpr(name="Float")
		if isinstance(value.value, str):
			return A.TypeExpr(name="String")
	if isinstance(value, A.TupleExpr):
		elems = [infer_type(x, scope) for x in value.elements]
		if any(t is None for t in elems):
			return None
		return A.TypeExpr(name=A.TUPLE_TYPE_NAME, args=elems)
	if isinstance(value, A.ArrayLiteral):
		if not value.elements:
			return None
		elem = infer_type(value.elements[0], scope)
		return A.TypeExpr(name="Array", args=[elem]) if elem is not None else None
	if isinstance(value, A.Name):
		binding = scope.lookup(value.ident)
		return binding.type_expr if binding is not None else None
	if (
		isinstance(value, A.Call)
		and not value.args
		and isinstance(value.func, A.Attr)
		and value.func.attr == "clone"
	):
		return infer_type(value.func.value, scope)
	return None


__all__ = ["CaptureSite", "CaptureSiteIndex", "collect_capture_sites", "needs_expansion", "infer_type"]
