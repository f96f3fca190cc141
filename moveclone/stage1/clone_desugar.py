# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Desugar `move clone` literals into explicit clone bindings.

    move clone(b) || use(a, b)

becomes the expression block

    {
        let b = b.clone();
        move || use(a, b)
    }

The clones run eagerly, in decision order, before the literal is built. Each
shadow binding reuses the outer name and lives only inside the block, so the
literal's references to cloned names hit the copies, references to moved
names still hit the outer bindings, and code after the block sees the outer
bindings unchanged.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Collection, Mapping, Sequence, Tuple

from moveclone.parser import ast as A
from moveclone.parser.printer import render_type
from moveclone.stage1.capture_errors import InternalHygieneError, NotClonable
from moveclone.stage1.captures import CaptureDecision, FreeVariable
from moveclone.stage1.clonability import CloneOracle

CLONE_METHOD = "clone"


@dataclass(frozen=True)
class ExpansionResult:
	"""Clone bindings (in evaluation order) plus the plain-`move` literal."""

	clone_bindings: Tuple[A.LetStmt, ...]
	literal: A.CaptureLiteral
	decision: CaptureDecision

	def to_block(self, literal: A.CaptureLiteral | None = None) -> A.Block:
		"""
		Replacement node for the original literal.

		`literal` substitutes a rebuilt literal (e.g. one whose nested literals
		were expanded too); it is normalized to plain `move` as well.
		"""
		lit = self.literal if literal is None else as_plain_move(literal)
		return A.Block(loc=lit.loc, statements=list(self.clone_bindings), tail=lit)


def as_plain_move(literal: A.CaptureLiteral) -> A.CaptureLiteral:
	return dataclasses.replace(literal, is_move=True, capture=None, capture_error=None)


def _clone_binding(name: str, loc: A.Located) -> A.LetStmt:
	receiver = A.Name(loc=loc, ident=name)
	call = A.Call(loc=loc, func=A.Attr(loc=loc, value=receiver, attr=CLONE_METHOD), args=[])
	return A.LetStmt(loc=loc, pattern=A.BindingPat(loc=loc, name=name), type_expr=None, value=call)


def _check_hygiene(decision: CaptureDecision, free_vars: Sequence[FreeVariable]) -> None:
	names = [item.source_name for item in decision.items]
	if len(set(names)) != len(names):
		raise InternalHygieneError(f"capture decision names a variable twice: {names}")
	free = {fv.name for fv in free_vars}
	if set(names) != free:
		raise InternalHygieneError(
			f"capture decision {sorted(names)} does not match the literal's free variables {sorted(free)}"
		)
	moved = set(decision.move_names)
	for item in decision.clones:
		if item.binding_name in moved:
			raise InternalHygieneError(f"clone binding `{item.binding_name}` would shadow moved capture `{item.binding_name}`")


def emit_clone_expansion(
	literal: A.CaptureLiteral,
	decision: CaptureDecision,
	free_vars: Sequence[FreeVariable],
	oracle: CloneOracle,
) -> ExpansionResult:
	"""
	Build the expansion of one literal.

	Every clone capture is checked with `oracle` first, in emission order; the
	first negative or inconclusive answer raises `NotClonable` and nothing is
	emitted for this literal.
	"""
	_check_hygiene(decision, free_vars)
	by_name = {fv.name: fv for fv in free_vars}
	bindings: list[A.LetStmt] = []
	for item in decision.clones:
		var = by_name[item.source_name]
		answer = oracle.supports_clone(var)
		if answer is not True:
			ty = var.binding.type_expr
			if answer is False and ty is not None:
				reason = f"type `{render_type(ty)}` does not implement Clone"
			else:
				reason = "its type is not known to implement Clone"
			raise NotClonable(item.source_name, loc=var.loc, reason=reason)
		bindings.append(_clone_binding(item.binding_name, literal.loc))
	return ExpansionResult(clone_bindings=tuple(bindings), literal=as_plain_move(literal), decision=decision)


def apply_expansions(
	prog: A.Program,
	expansions: Mapping[int, ExpansionResult],
	*,
	rejected: Collection[int] = (),
) -> A.Program:
	"""
	Return a copy of `prog` with every literal in `expansions` replaced.

	`expansions` and `rejected` are keyed by `id()` of the original literal
	nodes. Rejected literals are kept as plain `move` literals. Children are
	rebuilt before their parent, so an expanded literal nested in another
	expanded literal appears expanded inside the outer replacement block.
	Untouched subtrees are shared with the input.
	"""
	rejected = set(rejected)

	def _rebuild(node):
		if isinstance(node, list):
			items = [_rebuild(x) for x in node]
			return items if any(a is not b for a, b in zip(items, node)) else node
		if not isinstance(node, (A.Expr, A.Stmt, A.MatchArm, A.FunctionDef)):
			return node
		changes = {}
		for f in dataclasses.fields(node):
			val = getattr(node, f.name)
			new_val = _rebuild(val)
			if new_val is not val:
				changes[f.name] = new_val
		rebuilt = dataclasses.replace(node, **changes) if changes else node
		expansion = expansions.get(id(node))
		if expansion is not None:
			return expansion.to_block(rebuilt)
		if id(node) in rejected:
			return as_plain_move(rebuilt)
		return rebuilt

	return A.Program(items=_rebuild(prog.items))


__all__ = ["CLONE_METHOD", "ExpansionResult", "as_plain_move", "emit_clone_expansion", "apply_expansions"]
