# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

if TYPE_CHECKING:
	from .capture_spec import CaptureParseError


@dataclass(frozen=True)
class Located:
	line: int
	column: int


@dataclass
class TypeExpr:
	name: str
	args: List["TypeExpr"] = field(default_factory=list)


TUPLE_TYPE_NAME = "()"


@dataclass
class Param:
	name: str
	type_expr: Optional[TypeExpr] = None
	mutable: bool = False
	loc: Optional[Located] = None


# ---- capture specifiers ----------------------------------------------------


@dataclass(frozen=True)
class CaptureName:
	"""One identifier from an explicit `clone(...)` list."""

	name: str
	loc: Located


class CaptureSpecifier:
	"""
	Base of the `move clone` annotations.

	A literal without `clone` carries `None` rather than an instance, so the
	three cases are: `None` (plain move), `ImplicitClone`, `ExplicitClone`.
	"""

	loc: Located


@dataclass(frozen=True)
class ImplicitClone(CaptureSpecifier):
	"""`move clone ||`: clone every captured variable."""

	loc: Located


@dataclass(frozen=True)
class ExplicitClone(CaptureSpecifier):
	"""
	`move clone(a, b) ||`: clone the listed variables, move the rest.

	`names` is non-empty and duplicate-free; the specifier parser rejects the
	other shapes before an instance is built.
	"""

	loc: Located
	names: Tuple[CaptureName, ...]

	def __post_init__(self) -> None:
		if not self.names:
			raise ValueError("ExplicitClone requires at least one name")
		seen = [n.name for n in self.names]
		if len(set(seen)) != len(seen):
			raise ValueError("ExplicitClone names must be distinct")

	@property
	def name_list(self) -> list[str]:
		return [n.name for n in self.names]


# ---- patterns --------------------------------------------------------------


class Pattern:
	loc: Located


@dataclass
class BindingPat(Pattern):
	loc: Located
	name: str
	mutable: bool = False


@dataclass
class TuplePat(Pattern):
	loc: Located
	items: List[Pattern] = field(default_factory=list)


@dataclass
class CtorPat(Pattern):
	loc: Located
	ctor: str
	items: List[Pattern] = field(default_factory=list)


@dataclass
class WildcardPat(Pattern):
	loc: Located


@dataclass
class LiteralPat(Pattern):
	loc: Located
	value: Union[int, str, bool]


def pattern_names(pat: Pattern) -> list[str]:
	"""Names bound by `pat`, in source order."""
	if isinstance(pat, BindingPat):
		return [pat.name]
	if isinstance(pat, (TuplePat, CtorPat)):
		out: list[str] = []
		for item in pat.items:
			out.extend(pattern_names(item))
		return out
	return []


# ---- expressions -----------------------------------------------------------


class Expr:
	loc: Located


@dataclass
class Name(Expr):
	loc: Located
	ident: str


@dataclass
class Literal(Expr):
	loc: Located
	value: Union[int, float, str, bool]


@dataclass
class TupleExpr(Expr):
	"""Tuple literal; `()` is the empty tuple (unit)."""

	loc: Located
	elements: List[Expr] = field(default_factory=list)


@dataclass
class ArrayLiteral(Expr):
	loc: Located
	elements: List[Expr] = field(default_factory=list)


@dataclass
class Binary(Expr):
	loc: Located
	op: str
	left: Expr
	right: Expr


@dataclass
class Unary(Expr):
	"""Prefix operator: `!`, `-`, `&`, `&mut`."""

	loc: Located
	op: str
	operand: Expr


@dataclass
class Call(Expr):
	loc: Located
	func: Expr
	args: List[Expr] = field(default_factory=list)


@dataclass
class Attr(Expr):
	"""Field access `value.attr`; method calls are `Call(func=Attr(...))`."""

	loc: Located
	value: Expr
	attr: str


@dataclass
class Index(Expr):
	loc: Located
	value: Expr
	index: Expr


@dataclass
class Await(Expr):
	loc: Located
	value: Expr


@dataclass
class Assign(Expr):
	loc: Located
	target: Expr
	value: Expr


@dataclass
class Block(Expr):
	"""
	Brace block. `tail` is the trailing expression (the block's value); a block
	without a tail evaluates to unit.
	"""

	loc: Located
	statements: List["Stmt"] = field(default_factory=list)
	tail: Optional[Expr] = None


@dataclass
class IfExpr(Expr):
	loc: Located
	cond: Expr
	then_block: Block
	else_branch: Optional[Union[Block, "IfExpr"]] = None


@dataclass
class MatchArm:
	loc: Located
	pattern: Pattern
	body: Expr


@dataclass
class MatchExpr(Expr):
	loc: Located
	subject: Expr
	arms: List[MatchArm] = field(default_factory=list)


@dataclass
class Closure(Expr):
	"""
	Closure literal `[move [clone[(...)]]] |params| body`.

	`capture` is the parsed capture specifier (`None` for plain `move` or a
	non-move closure). When the specifier was malformed the literal is parsed
	as plain `move`, `capture` stays `None` and `capture_error` holds the
	parse error so the driver can report it.
	"""

	loc: Located
	params: List[Param]
	body: Expr
	ret_type: Optional[TypeExpr] = None
	is_move: bool = False
	capture: Optional[CaptureSpecifier] = None
	capture_error: Optional["CaptureParseError"] = None


@dataclass
class AsyncBlock(Expr):
	"""`async [move [clone[(...)]]] { ... }`; same capture fields as `Closure`."""

	loc: Located
	body: Block
	is_move: bool = False
	capture: Optional[CaptureSpecifier] = None
	capture_error: Optional["CaptureParseError"] = None


CaptureLiteral = Union[Closure, AsyncBlock]


def is_capture_literal(node: object) -> bool:
	return isinstance(node, (Closure, AsyncBlock))


# ---- statements / items ----------------------------------------------------


class Stmt:
	loc: Located


@dataclass
class LetStmt(Stmt):
	loc: Located
	pattern: Pattern
	type_expr: Optional[TypeExpr]
	value: Expr


@dataclass
class ExprStmt(Stmt):
	loc: Located
	value: Expr


@dataclass
class ReturnStmt(Stmt):
	loc: Located
	value: Optional[Expr] = None


@dataclass
class ForStmt(Stmt):
	loc: Located
	pattern: Pattern
	iterable: Expr
	body: Block


@dataclass
class FunctionDef:
	name: str
	params: List[Param]
	ret_type: Optional[TypeExpr]
	body: Block
	loc: Located


@dataclass
class StructField:
	name: str
	type_expr: TypeExpr


@dataclass
class StructDef:
	name: str
	fields: List[StructField]
	loc: Located


@dataclass
class ImplDef:
	"""`impl Trait for Type {}`: a marker the clonability oracle reads."""

	trait_name: str
	target: TypeExpr
	loc: Located


Item = Union[FunctionDef, StructDef, ImplDef, Stmt]


@dataclass
class Program:
	"""
	Parsed compilation unit. `items` keeps source order (the printer relies on
	it); the typed views below are derived from it.
	"""

	items: List[Item] = field(default_factory=list)

	@property
	def structs(self) -> List[StructDef]:
		return [i for i in self.items if isinstance(i, StructDef)]

	@property
	def impls(self) -> List[ImplDef]:
		return [i for i in self.items if isinstance(i, ImplDef)]

	@property
	def statements(self) -> List[Stmt]:
		return [i for i in self.items if isinstance(i, Stmt)]


__all__ = [
	"Located",
	"TypeExpr",
	"TUPLE_TYPE_NAME",
	"Param",
	"CaptureName",
	"CaptureSpecifier",
	"ImplicitClone",
	"ExplicitClone",
	"Pattern",
	"BindingPat",
	"TuplePat",
	"CtorPat",
	"WildcardPat",
	"LiteralPat",
	"pattern_names",
	"Expr",
	"Name",
	"Literal",
	"TupleExpr",
	"ArrayLiteral",
	"Binary",
	"Unary",
	"Call",
	"Attr",
	"Index",
	"Await",
	"Assign",
	"Block",
	"IfExpr",
	"MatchArm",
	"MatchExpr",
	"Closure",
	"AsyncBlock",
	"CaptureLiteral",
	"is_capture_literal",
	"Stmt",
	"LetStmt",
	"ExprStmt",
	"ReturnStmt",
	"ForStmt",
	"FunctionDef",
	"StructField",
	"StructDef",
	"ImplDef",
	"Item",
	"Program",
]
