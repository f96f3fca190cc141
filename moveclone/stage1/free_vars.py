# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import List, Set

from moveclone.parser import ast as A
from moveclone.stage1.captures import FreeVariable
from moveclone.stage1.scopes import ScopeView


def literal_params(literal: A.CaptureLiteral) -> list[str]:
	if isinstance(literal, A.Closure):
		return [p.name for p in literal.params]
	return []


def analyze_free_variables(literal: A.CaptureLiteral, enclosing: ScopeView) -> list[FreeVariable]:
	"""
	Free variables of a closure / async-block literal, in first-use order.

	Walks the body depth-first in source order with a stack of bound-name sets:
	the literal's parameters seed the bottom set; blocks, `let` bindings,
	nested closure params, `for` patterns and `match` arms push their own.
	A name not bound on the stack is free iff `enclosing` resolves it to a
	local or parameter; items are never captured and unresolved names are
	left for the host to report.

	Nested closures and async blocks are walked like any other expression:
	what they reference counts as referenced by this literal unless a binding
	inside this literal shadows it.
	"""
	stack: List[Set[str]] = [set(literal_params(literal))]
	found: dict[str, FreeVariable] = {}

	def _is_local(name: str) -> bool:
		return any(name in frame for frame in reversed(stack))

	def _reference(name: str, loc: A.Located) -> None:
		if name in found or _is_local(name):
			return
		binding = enclosing.lookup(name)
		if binding is None or not binding.capturable:
			return
		found[name] = FreeVariable(name=name, loc=loc, binding=binding)

	def _walk_block(block: A.Block) -> None:
		stack.append(set())
		for stmt in block.statements:
			_walk_stmt(stmt)
		if block.tail is not None:
			_walk_expr(block.tail)
		stack.pop()

	def _walk_stmt(stmt: A.Stmt) -> None:
		if isinstance(stmt, A.LetStmt):
			# Initializer first: `let a = a;` reads the outer `a`.
			_walk_expr(stmt.value)
			stack[-1].update(A.pattern_names(stmt.pattern))
		elif isinstance(stmt, A.ExprStmt):
			_walk_expr(stmt.value)
		elif isinstance(stmt, A.ReturnStmt):
			if stmt.value is not None:
				_walk_expr(stmt.value)
		elif isinstance(stmt, A.ForStmt):
			_walk_expr(stmt.iterable)
			stack.append(set(A.pattern_names(stmt.pattern)))
			_walk_block(stmt.body)
			stack.pop()
		else:
			raise TypeError(f"Unsupported statement: {type(stmt).__name__}")

	def _walk_expr(e: A.Expr) -> None:
		if isinstance(e, A.Name):
			_reference(e.ident, e.loc)
		elif isinstance(e, A.Literal):
			return
		elif isinstance(e, A.Block):
			_walk_block(e)
		elif isinstance(e, A.Closure):
			stack.append({p.name for p in e.params})
			_walk_expr(e.body)
			stack.pop()
		elif isinstance(e, A.AsyncBlock):
			_walk_block(e.body)
		elif isinstance(e, A.MatchExpr):
			_walk_expr(e.subject)
			for arm in e.arms:
				stack.append(set(A.pattern_names(arm.pattern)))
				_walk_expr(arm.body)
				stack.pop()
		elif isinstance(e, A.IfExpr):
			_walk_expr(e.cond)
			_walk_block(e.then_block)
			if e.else_branch is not None:
				_walk_expr(e.else_branch)
		elif isinstance(e, A.Attr):
			# Field names are not references; only the receiver is.
			_walk_expr(e.value)
		else:
			for child in _iter_expr_children(e):
				_walk_expr(child)

	if isinstance(literal, A.Closure):
		_walk_expr(literal.body)
	else:
		_walk_block(literal.body)
	return list(found.values())


def _iter_expr_children(e: A.Expr) -> list[A.Expr]:
	"""Direct sub-expressions in field (= source) order."""
	children: list[A.Expr] = []
	for field_name in getattr(e, "__dataclass_fields__", {}) or {}:
		val = getattr(e, field_name, None)
		if isinstance(val, A.Expr):
			children.append(val)
		elif isinstance(val, list):
			for item in val:
				if isinstance(item, A.Expr):
					children.append(item)
	return children


__all__ = ["analyze_free_variables", "literal_params"]
