# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import codecs
from pathlib import Path
from typing import List

from lark import Lark, Token, Tree

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
	Expr,
	ExprStmt,
	ForStmt,
	FunctionDef,
	IfExpr,
	ImplDef,
	Index,
	LetStmt,
	Literal,
	LiteralPat,
	Located,
	MatchArm,
	MatchExpr,
	Name,
	Param,
	Pattern,
	Program,
	ReturnStmt,
	Stmt,
	StructDef,
	StructField,
	TupleExpr,
	TuplePat,
	TUPLE_TYPE_NAME,
	TypeExpr,
	Unary,
	WildcardPat,
)
from .capture_spec import CAPTURE_SPEC, CaptureParseError, CaptureSpecLexer

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
	postlex=CaptureSpecLexer(),
)

_EXPR_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="expr",
	propagate_positions=True,
	maybe_placeholders=False,
	postlex=CaptureSpecLexer(),
)

_STMT_KINDS = {"let_stmt", "for_stmt", "return_stmt", "expr_stmt"}


def parse_program(source: str) -> Program:
	"""
	Parse a whole compilation unit.

	Host syntax errors propagate as `lark.exceptions.UnexpectedInput`. Malformed
	capture specifiers do not: they are attached to their literal as
	`capture_error` and the literal is parsed as plain `move`.
	"""
	tree = _PARSER.parse(source)
	return _build_program(tree)


def parse_expr(source: str) -> Expr:
	"""Parse a single expression (tests and tooling)."""
	tree = _EXPR_PARSER.parse(source)
	return _build_expr(tree)


def _name(node: Tree) -> str:
	return node.data if isinstance(node.data, str) else node.data.value


def _loc(node: Tree | Token) -> Located:
	if isinstance(node, Token):
		return Located(line=node.line or 0, column=node.column or 0)
	meta = node.meta
	return Located(line=getattr(meta, "line", 0), column=getattr(meta, "column", 0))


def _trees(node: Tree) -> List[Tree]:
	return [c for c in node.children if isinstance(c, Tree)]


def _tokens(node: Tree, *types: str) -> List[Token]:
	return [c for c in node.children if isinstance(c, Token) and (not types or c.type in types)]


def _build_program(tree: Tree) -> Program:
	prog = Program()
	for child in _trees(tree):
		kind = _name(child)
		if kind == "fn_def":
			prog.items.append(_build_fn_def(child))
		elif kind == "struct_def":
			prog.items.append(_build_struct_def(child))
		elif kind == "impl_def":
			trait_tok = _tokens(child, "NAME")[0]
			target = _build_type_expr(_trees(child)[0])
			prog.items.append(ImplDef(trait_name=trait_tok.value, target=target, loc=_loc(child)))
		elif kind in _STMT_KINDS:
			prog.items.append(_build_stmt(child))
		else:
			raise TypeError(f"Unexpected top-level node: {kind}")
	return prog


def _build_fn_def(tree: Tree) -> FunctionDef:
	name_tok = _tokens(tree, "NAME")[0]
	params: list[Param] = []
	ret_type: TypeExpr | None = None
	body: Block | None = None
	for child in _trees(tree):
		kind = _name(child)
		if kind == "params":
			params = _build_params(child)
		elif kind == "return_type":
			ret_type = _build_type_expr(_trees(child)[0])
		elif kind == "block":
			body = _build_block(child)
	if body is None:
		raise ValueError("fn_def missing body")
	return FunctionDef(name=name_tok.value, params=params, ret_type=ret_type, body=body, loc=_loc(tree))


def _build_struct_def(tree: Tree) -> StructDef:
	name_tok = _tokens(tree, "NAME")[0]
	fields: list[StructField] = []
	for fields_node in _trees(tree):
		for field_node in _trees(fields_node):
			field_name = _tokens(field_node, "NAME")[0]
			fields.append(StructField(name=field_name.value, type_expr=_build_type_expr(_trees(field_node)[0])))
	return StructDef(name=name_tok.value, fields=fields, loc=_loc(tree))


def _build_params(tree: Tree) -> list[Param]:
	params: list[Param] = []
	for param_node in _trees(tree):
		name_tok = _tokens(param_node, "NAME")[0]
		type_node = next(iter(_trees(param_node)), None)
		params.append(
			Param(
				name=name_tok.value,
				type_expr=_build_type_expr(type_node) if type_node is not None else None,
				mutable=bool(_tokens(param_node, "MUT")),
				loc=_loc(param_node),
			)
		)
	return params


def _build_type_expr(tree: Tree) -> TypeExpr:
	args = [_build_type_expr(c) for c in _trees(tree)]
	if _name(tree) == "tuple_type":
		return TypeExpr(name=TUPLE_TYPE_NAME, args=args)
	return TypeExpr(name=_tokens(tree, "NAME")[0].value, args=args)


def _build_stmt(tree: Tree) -> Stmt:
	kind = _name(tree)
	children = _trees(tree)
	if kind == "let_stmt":
		# pattern [type_expr] value
		pattern = _build_pattern(children[0])
		type_expr = _build_type_expr(children[1]) if len(children) == 3 else None
		return LetStmt(loc=_loc(tree), pattern=pattern, type_expr=type_expr, value=_build_expr(children[-1]))
	if kind == "for_stmt":
		return ForStmt(
			loc=_loc(tree),
			pattern=_build_pattern(children[0]),
			iterable=_build_expr(children[1]),
			body=_build_block(children[2]),
		)
	if kind == "return_stmt":
		return ReturnStmt(loc=_loc(tree), value=_build_expr(children[0]) if children else None)
	if kind == "expr_stmt":
		return ExprStmt(loc=_loc(tree), value=_build_expr(children[0]))
	raise TypeError(f"Unexpected statement node: {kind}")


def _build_block(tree: Tree) -> Block:
	statements: list[Stmt] = []
	tail: Expr | None = None
	for child in _trees(tree):
		if _name(child) in _STMT_KINDS:
			statements.append(_build_stmt(child))
		else:
			# The grammar only allows a non-statement as the final child.
			tail = _build_expr(child)
	return Block(loc=_loc(tree), statements=statements, tail=tail)


def _build_pattern(tree: Tree) -> Pattern:
	kind = _name(tree)
	loc = _loc(tree)
	if kind == "binding_pat":
		return BindingPat(loc=loc, name=_tokens(tree, "NAME")[0].value, mutable=bool(_tokens(tree, "MUT")))
	if kind == "tuple_pat":
		return TuplePat(loc=loc, items=[_build_pattern(c) for c in _trees(tree)])
	if kind == "ctor_pat":
		return CtorPat(loc=loc, ctor=_tokens(tree, "NAME")[0].value, items=[_build_pattern(c) for c in _trees(tree)])
	if kind == "wildcard_pat":
		return WildcardPat(loc=loc)
	if kind == "literal_pat":
		toks = _tokens(tree)
		tok = toks[-1]
		if tok.type == "INT":
			value = int(tok.value)
			return LiteralPat(loc=loc, value=-value if toks[0].type == "MINUS" else value)
		if tok.type == "STRING":
			return LiteralPat(loc=loc, value=_decode_string_token(tok))
		return LiteralPat(loc=loc, value=tok.type == "TRUE")
	raise TypeError(f"Unexpected pattern node: {kind}")


def _decode_string_token(tok: Token) -> str:
	"""
	Decode STRING tokens. Python-style escapes (including `\\xHH`) are
	interpreted first, then the resulting code points are reread as raw bytes
	(latin-1) and decoded as UTF-8 so non-ASCII source text survives.
	"""
	content = tok.value[1:-1]
	unescaped = codecs.decode(content, "unicode_escape")
	return unescaped.encode("latin-1").decode("utf-8")


def _build_closure(tree: Tree) -> Closure:
	is_move = bool(_tokens(tree, "MOVE"))
	capture, capture_error = _capture_from_tokens(tree)
	params: list[Param] = []
	ret_type: TypeExpr | None = None
	body: Expr | None = None
	for child in _trees(tree):
		kind = _name(child)
		if kind == "closure_params":
			params_node = next(iter(_trees(child)), None)
			params = _build_params(params_node) if params_node is not None else []
		elif kind == "return_type":
			ret_type = _build_type_expr(_trees(child)[0])
		else:
			body = _build_expr(child)
	if body is None:
		raise ValueError("closure missing body")
	return Closure(
		loc=_loc(tree),
		params=params,
		body=body,
		ret_type=ret_type,
		is_move=is_move,
		capture=capture,
		capture_error=capture_error,
	)


def _build_async_block(tree: Tree) -> AsyncBlock:
	capture, capture_error = _capture_from_tokens(tree)
	return AsyncBlock(
		loc=_loc(tree),
		body=_build_block(_trees(tree)[0]),
		is_move=bool(_tokens(tree, "MOVE")),
		capture=capture,
		capture_error=capture_error,
	)


def _capture_from_tokens(tree: Tree) -> tuple[CaptureSpecifier | None, CaptureParseError | None]:
	spec_tok = next(iter(_tokens(tree, CAPTURE_SPEC)), None)
	if spec_tok is None:
		return None, None
	value = spec_tok.value
	if isinstance(value, CaptureParseError):
		return None, value
	if isinstance(value, CaptureSpecifier):
		return value, None
	raise TypeError(f"CAPTURE_SPEC token carries {type(value).__name__}")


def _build_expr(node) -> Expr:
	if not isinstance(node, Tree):
		raise TypeError(f"Unexpected node type: {type(node)}")
	name = _name(node)
	loc = _loc(node)
	children = _trees(node)

	if name == "closure":
		return _build_closure(node)
	if name == "async_block":
		return _build_async_block(node)
	if name == "assign":
		return Assign(loc=loc, target=_build_expr(children[0]), value=_build_expr(children[1]))
	if name == "binary":
		op_tok = _tokens(node)[0]
		return Binary(loc=loc, op=op_tok.value, left=_build_expr(children[0]), right=_build_expr(children[1]))
	if name == "unary_op":
		op_tok = _tokens(node)[0]
		return Unary(loc=loc, op=op_tok.value, operand=_build_expr(children[0]))
	if name == "borrow":
		op = "&mut" if _tokens(node, "MUT") else "&"
		return Unary(loc=loc, op=op, operand=_build_expr(children[0]))
	if name == "call":
		args_node = children[1] if len(children) > 1 else None
		args = [_build_expr(a) for a in _trees(args_node)] if args_node is not None else []
		return Call(loc=loc, func=_build_expr(children[0]), args=args)
	if name == "field":
		return Attr(loc=loc, value=_build_expr(children[0]), attr=_tokens(node, "NAME")[0].value)
	if name == "await_expr":
		return Await(loc=loc, value=_build_expr(children[0]))
	if name == "index":
		return Index(loc=loc, value=_build_expr(children[0]), index=_build_expr(children[1]))
	if name == "name":
		return Name(loc=loc, ident=_tokens(node, "NAME")[0].value)
	if name == "int_lit":
		return Literal(loc=loc, value=int(_tokens(node)[0].value))
	if name == "float_lit":
		return Literal(loc=loc, value=float(_tokens(node)[0].value))
	if name == "string_lit":
		return Literal(loc=loc, value=_decode_string_token(_tokens(node)[0]))
	if name == "true_lit":
		return Literal(loc=loc, value=True)
	if name == "false_lit":
		return Literal(loc=loc, value=False)
	if name == "unit":
		return TupleExpr(loc=loc, elements=[])
	if name == "tuple":
		return TupleExpr(loc=loc, elements=[_build_expr(c) for c in children])
	if name == "array":
		elements = [_build_expr(a) for a in _trees(children[0])] if children else []
		return ArrayLiteral(loc=loc, elements=elements)
	if name == "block":
		return _build_block(node)
	if name == "if_expr":
		return _build_if(node)
	if name == "match_expr":
		arms: list[MatchArm] = []
		if len(children) > 1:
			for arm_node in _trees(children[1]):
				pat_node, body_node = _trees(arm_node)
				arms.append(MatchArm(loc=_loc(arm_node), pattern=_build_pattern(pat_node), body=_build_expr(body_node)))
		return MatchExpr(loc=loc, subject=_build_expr(children[0]), arms=arms)
	raise TypeError(f"Unsupported expression node: {name}")


def _build_if(tree: Tree) -> IfExpr:
	children = _trees(tree)
	else_branch: Block | IfExpr | None = None
	if len(children) == 3:
		else_node = children[2]
		else_branch = _build_block(else_node) if _name(else_node) == "block" else _build_if(else_node)
	return IfExpr(
		loc=_loc(tree),
		cond=_build_expr(children[0]),
		then_block=_build_block(children[1]),
		else_branch=else_branch,
	)


__all__ = ["parse_program", "parse_expr"]
