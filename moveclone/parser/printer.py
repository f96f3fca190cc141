# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Render parser AST back to canonical source text.

This is the downstream consumer of expanded programs: the driver prints the
rewritten unit with it, and tests compare an expansion against the rendering
of the hand-written equivalent. Output is canonical (fixed spacing, one
statement per line, tab indentation); comments are not preserved.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import List

from .ast import (
	ArrayLiteral,
	AsyncBlock,
	Assign,
	Attr,
	Await,
	Binary,
	BindingPat,
	Block,
	Call,
	CaptureSpecifier,
	Closure,
	CtorPat,
	ExplicitClone,
	Expr,
	ExprStmt,
	ForStmt,
	FunctionDef,
	IfExpr,
	ImplDef,
	ImplicitClone,
	Index,
	LetStmt,
	Literal,
	LiteralPat,
	MatchExpr,
	Name,
	Param,
	Pattern,
	Program,
	ReturnStmt,
	Stmt,
	StructDef,
	TupleExpr,
	TuplePat,
	TUPLE_TYPE_NAME,
	TypeExpr,
	Unary,
	WildcardPat,
)

# Binding strength of binary operators; larger binds tighter.
_BINARY_PREC = {
	"||": 1,
	"&&": 2,
	"==": 3,
	"!=": 3,
	"<": 4,
	">": 4,
	"<=": 4,
	">=": 4,
	"+": 5,
	"-": 5,
	"*": 6,
	"/": 6,
	"%": 6,
}
_PREC_EXPR = 0  # closures, async blocks, assignment
_PREC_UNARY = 7
_PREC_POSTFIX = 8


def render_program(prog: Program) -> str:
	lines: List[str] = []
	for item in prog.items:
		if isinstance(item, FunctionDef):
			lines.append(_render_fn(item))
		elif isinstance(item, StructDef):
			fields = ", ".join(f"{f.name}: {render_type(f.type_expr)}" for f in item.fields)
			lines.append(f"struct {item.name} {{ {fields} }}" if fields else f"struct {item.name} {{}}")
		elif isinstance(item, ImplDef):
			lines.append(f"impl {item.trait_name} for {render_type(item.target)} {{}}")
		else:
			lines.append(render_stmt(item, 0))
	return "\n".join(lines) + "\n" if lines else ""


def _render_fn(fn: FunctionDef) -> str:
	ret = f" -> {render_type(fn.ret_type)}" if fn.ret_type is not None else ""
	return f"fn {fn.name}({_render_params(fn.params)}){ret} {_render_block(fn.body, 0)}"


def _render_params(params: List[Param]) -> str:
	out = []
	for p in params:
		text = f"mut {p.name}" if p.mutable else p.name
		if p.type_expr is not None:
			text += f": {render_type(p.type_expr)}"
		out.append(text)
	return ", ".join(out)


def render_type(ty: TypeExpr) -> str:
	if ty.name == TUPLE_TYPE_NAME:
		inner = ", ".join(render_type(a) for a in ty.args)
		return f"({inner},)" if len(ty.args) == 1 else f"({inner})"
	if not ty.args:
		return ty.name
	return f"{ty.name}<{', '.join(render_type(a) for a in ty.args)}>"


def render_pattern(pat: Pattern) -> str:
	if isinstance(pat, BindingPat):
		return f"mut {pat.name}" if pat.mutable else pat.name
	if isinstance(pat, TuplePat):
		inner = ", ".join(render_pattern(p) for p in pat.items)
		return f"({inner},)" if len(pat.items) == 1 else f"({inner})"
	if isinstance(pat, CtorPat):
		return f"{pat.ctor}({', '.join(render_pattern(p) for p in pat.items)})"
	if isinstance(pat, WildcardPat):
		return "_"
	if isinstance(pat, LiteralPat):
		return _render_literal(pat.value)
	raise TypeError(f"Unsupported pattern: {type(pat).__name__}")


def render_stmt(stmt: Stmt, depth: int) -> str:
	if isinstance(stmt, LetStmt):
		ty = f": {render_type(stmt.type_expr)}" if stmt.type_expr is not None else ""
		return f"let {render_pattern(stmt.pattern)}{ty} = {_expr(stmt.value, depth, _PREC_EXPR)};"
	if isinstance(stmt, ExprStmt):
		return f"{_expr(stmt.value, depth, _PREC_EXPR)};"
	if isinstance(stmt, ReturnStmt):
		if stmt.value is None:
			return "return;"
		return f"return {_expr(stmt.value, depth, _PREC_EXPR)};"
	if isinstance(stmt, ForStmt):
		return (
			f"for {render_pattern(stmt.pattern)} in {_expr(stmt.iterable, depth, _PREC_EXPR)} "
			f"{_render_block(stmt.body, depth)}"
		)
	raise TypeError(f"Unsupported statement: {type(stmt).__name__}")


def render_capture_prefix(is_move: bool, capture: CaptureSpecifier | None) -> str:
	if not is_move:
		return ""
	if isinstance(capture, ImplicitClone):
		return "move clone "
	if isinstance(capture, ExplicitClone):
		return f"move clone({', '.join(capture.name_list)}) "
	return "move "


def render_expr(expr: Expr) -> str:
	return _expr(expr, 0, _PREC_EXPR)


def _render_block(block: Block, depth: int) -> str:
	if not block.statements and block.tail is None:
		return "{}"
	pad = "\t" * (depth + 1)
	lines = ["{"]
	for stmt in block.statements:
		lines.append(pad + render_stmt(stmt, depth + 1))
	if block.tail is not None:
		lines.append(pad + _expr(block.tail, depth + 1, _PREC_EXPR))
	lines.append("\t" * depth + "}")
	return "\n".join(lines)


_NAMED_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}


def _escape_char(ch: str) -> str:
	named = _NAMED_ESCAPES.get(ch)
	if named is not None:
		return named
	if ord(ch) < 0x20 or ord(ch) == 0x7F:
		return f"\\x{ord(ch):02x}"
	return ch


def _render_float(value: float) -> str:
	# FLOAT only lexes `digits.digits`: no exponent, sign or inf/nan.
	if not math.isfinite(value):
		raise ValueError(f"float literal {value!r} has no source form")
	text = format(Decimal(repr(value)), "f")
	if "." not in text:
		text += ".0"
	return text


def _render_literal(value: object) -> str:
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, str):
		return '"' + "".join(_escape_char(ch) for ch in value) + '"'
	if isinstance(value, float):
		return _render_float(value)
	return repr(value)


def _expr(e: Expr, depth: int, min_prec: int) -> str:
	text, prec = _expr_with_prec(e, depth)
	if prec < min_prec:
		return f"({text})"
	return text


def _expr_with_prec(e: Expr, depth: int) -> tuple[str, int]:
	if isinstance(e, Name):
		return e.ident, _PREC_POSTFIX
	if isinstance(e, Literal):
		return _render_literal(e.value), _PREC_POSTFIX
	if isinstance(e, TupleExpr):
		inner = ", ".join(_expr(x, depth, _PREC_EXPR) for x in e.elements)
		if len(e.elements) == 1:
			return f"({inner},)", _PREC_POSTFIX
		return f"({inner})", _PREC_POSTFIX
	if isinstance(e, ArrayLiteral):
		return f"[{', '.join(_expr(x, depth, _PREC_EXPR) for x in e.elements)}]", _PREC_POSTFIX
	if isinstance(e, Binary):
		prec = _BINARY_PREC[e.op]
		left = _expr(e.left, depth, prec)
		right = _expr(e.right, depth, prec + 1)
		return f"{left} {e.op} {right}", prec
	if isinstance(e, Unary):
		op = "&mut " if e.op == "&mut" else e.op
		operand = _expr(e.operand, depth, _PREC_UNARY)
		if op == "&" and operand.startswith("&"):
			# `&&` would lex as the logical-and operator.
			op = "& "
		return f"{op}{operand}", _PREC_UNARY
	if isinstance(e, Call):
		args = ", ".join(_expr(a, depth, _PREC_EXPR) for a in e.args)
		return f"{_expr(e.func, depth, _PREC_POSTFIX)}({args})", _PREC_POSTFIX
	if isinstance(e, Attr):
		return f"{_expr(e.value, depth, _PREC_POSTFIX)}.{e.attr}", _PREC_POSTFIX
	if isinstance(e, Await):
		return f"{_expr(e.value, depth, _PREC_POSTFIX)}.await", _PREC_POSTFIX
	if isinstance(e, Index):
		return f"{_expr(e.value, depth, _PREC_POSTFIX)}[{_expr(e.index, depth, _PREC_EXPR)}]", _PREC_POSTFIX
	if isinstance(e, Assign):
		# The target is a `logic_or` in the grammar, so anything looser needs parens.
		return f"{_expr(e.target, depth, 1)} = {_expr(e.value, depth, _PREC_EXPR)}", _PREC_EXPR
	if isinstance(e, Block):
		return _render_block(e, depth), _PREC_POSTFIX
	if isinstance(e, IfExpr):
		return _render_if(e, depth), _PREC_POSTFIX
	if isinstance(e, MatchExpr):
		pad = "\t" * (depth + 1)
		lines = [f"match {_expr(e.subject, depth, _PREC_EXPR)} {{"]
		for arm in e.arms:
			lines.append(f"{pad}{render_pattern(arm.pattern)} => {_expr(arm.body, depth + 1, _PREC_EXPR)},")
		lines.append("\t" * depth + "}")
		return "\n".join(lines), _PREC_POSTFIX
	if isinstance(e, Closure):
		prefix = render_capture_prefix(e.is_move, e.capture)
		params = f"|{_render_params(e.params)}|" if e.params else "||"
		if e.ret_type is not None:
			body = f"-> {render_type(e.ret_type)} {_expr(e.body, depth, _PREC_EXPR)}"
		else:
			body = _expr(e.body, depth, _PREC_EXPR)
		return f"{prefix}{params} {body}", _PREC_EXPR
	if isinstance(e, AsyncBlock):
		prefix = render_capture_prefix(e.is_move, e.capture)
		return f"async {prefix}{_render_block(e.body, depth)}", _PREC_EXPR
	raise TypeError(f"Unsupported expression: {type(e).__name__}")


def _render_if(e: IfExpr, depth: int) -> str:
	text = f"if {_expr(e.cond, depth, _PREC_EXPR)} {_render_block(e.then_block, depth)}"
	if isinstance(e.else_branch, IfExpr):
		text += f" else {_render_if(e.else_branch, depth)}"
	elif isinstance(e.else_branch, Block):
		text += f" else {_render_block(e.else_branch, depth)}"
	return text


__all__ = [
	"render_program",
	"render_stmt",
	"render_expr",
	"render_type",
	"render_pattern",
	"render_capture_prefix",
]
