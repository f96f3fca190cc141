# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Capture specifier parsing: the `clone` / `clone(a, b)` prefix after `move`.

`clone` is a contextual keyword. It is recognized only when it immediately
follows `move` and immediately precedes either `(` or the token that opens the
literal (`|` / `||` for closures, `{` for `async move` blocks). Everywhere else
it is an ordinary identifier, so `let clone = false; clone || true` keeps its
meaning.

The automaton runs on the token stream (`CaptureSpecLexer` is a lark
post-lexer), which keeps the decision local to the three tokens around `clone`
instead of reserving the word in the grammar:

    AfterMove ──(not `clone`)──────────────▶ PlainMove
        │
        └─(`clone`)─▶ ExpectOpenOrParen ──(opener)──▶ ImplicitClone
                            │         └──(other)───▶ PlainMove (cursor unmoved)
                            └─(`(`)─▶ InCaptureList ──(`)`)──▶ ExplicitClone

A recognized specifier is forwarded to the AST builder as one synthetic
`CAPTURE_SPEC` token whose value is the `CaptureSpecifier`. A malformed one is
forwarded the same way with the `CaptureParseError` as value; its tokens are
dropped so the literal parses as plain `move` and the rest of the file is
unaffected.
"""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from lark import Token

from .ast import CaptureName, CaptureSpecifier, ExplicitClone, ImplicitClone, Located

CLONE_KEYWORD = "clone"
CAPTURE_SPEC = "CAPTURE_SPEC"

CLOSURE_OPENERS = frozenset({"BAR", "OROR"})
ASYNC_OPENERS = frozenset({"_LBRACE"})

# Tokens that can never appear inside a capture list. Reaching one of them
# before `)` means the list was left open.
_LIST_BOUNDARY = frozenset({"BAR", "OROR", "_LBRACE", "_RBRACE", "_SEMI"})


class CaptureParseError(ValueError):
	"""
	Syntax error in a `clone(...)` capture specifier.

	`loc` points at the offending token, `end` is the cursor index (relative to
	the token window handed to `parse_capture_specifier`) where parsing resumes
	after dropping the malformed specifier.
	"""

	code = "E-CAPTURE-PARSE"

	def __init__(self, message: str, *, loc: Optional[Located], end: int) -> None:
		super().__init__(f"{self.code}: {message}")
		self.loc = loc
		self.end = end


class UnterminatedCaptureList(CaptureParseError):
	code = "E-CAPTURE-UNTERMINATED"

	def __init__(self, *, loc: Optional[Located], end: int) -> None:
		super().__init__("unterminated clone capture list; expected `)`", loc=loc, end=end)


class DuplicateCapture(CaptureParseError):
	code = "E-CAPTURE-DUPLICATE"

	def __init__(self, name: str, *, loc: Optional[Located], end: int) -> None:
		super().__init__(f"`{name}` appears more than once in the clone capture list", loc=loc, end=end)
		self.name = name


class EmptyCaptureList(CaptureParseError):
	code = "E-CAPTURE-EMPTY"

	def __init__(self, *, loc: Optional[Located], end: int) -> None:
		super().__init__(
			"empty clone capture list; write `move clone` to clone every capture or drop `clone` to move them",
			loc=loc,
			end=end,
		)


class InvalidCaptureItem(CaptureParseError):
	code = "E-CAPTURE-INVALID-ITEM"

	def __init__(self, text: str, *, loc: Optional[Located], end: int) -> None:
		super().__init__(f"clone capture list entries must be identifiers, found `{text}`", loc=loc, end=end)
		self.text = text


def _tok_loc(tok: Token) -> Located:
	return Located(line=getattr(tok, "line", None) or 0, column=getattr(tok, "column", None) or 0)


def _is_clone_ident(tok: Token) -> bool:
	return tok.type == "NAME" and tok.value == CLONE_KEYWORD


def parse_capture_specifier(
	tokens: Sequence[Token],
	pos: int,
	*,
	openers: frozenset[str] = CLOSURE_OPENERS,
) -> Tuple[Optional[CaptureSpecifier], int]:
	"""
	Parse a capture specifier from `tokens[pos:]` (the tokens right after `move`).

	Returns `(specifier, cursor)`. When there is no specifier the result is
	`(None, pos)`. Raises a `CaptureParseError` subclass for malformed lists;
	the error's `end` is the cursor past the dropped tokens.
	"""
	if pos >= len(tokens) or not _is_clone_ident(tokens[pos]):
		return None, pos
	clone_tok = tokens[pos]
	clone_loc = _tok_loc(clone_tok)
	if pos + 1 >= len(tokens):
		return None, pos
	nxt = tokens[pos + 1]
	if nxt.type in openers:
		return ImplicitClone(loc=clone_loc), pos + 1
	if nxt.type != "_LPAR":
		return None, pos

	names: List[CaptureName] = []
	duplicate: Optional[CaptureName] = None
	expect_item = True
	i = pos + 2
	while True:
		if i >= len(tokens):
			raise UnterminatedCaptureList(loc=clone_loc, end=i)
		tok = tokens[i]
		ttype = tok.type
		if ttype == "_RPAR":
			i += 1
			break
		if ttype in _LIST_BOUNDARY:
			# Resume at the boundary token: it most likely opens the literal.
			raise UnterminatedCaptureList(loc=clone_loc, end=i)
		if expect_item and ttype == "NAME":
			item = CaptureName(name=tok.value, loc=_tok_loc(tok))
			if duplicate is None and any(n.name == item.name for n in names):
				duplicate = item
			else:
				names.append(item)
			expect_item = False
			i += 1
			continue
		if not expect_item and ttype == "_COMMA":
			expect_item = True
			i += 1
			continue
		raise InvalidCaptureItem(str(tok.value), loc=_tok_loc(tok), end=_skip_list(tokens, i))

	if not names:
		raise EmptyCaptureList(loc=clone_loc, end=i)
	if duplicate is not None:
		raise DuplicateCapture(duplicate.name, loc=duplicate.loc, end=i)
	return ExplicitClone(loc=clone_loc, names=tuple(names)), i


def _skip_list(tokens: Sequence[Token], i: int) -> int:
	"""Cursor after the `)` closing the list at `tokens[i]`, or at the boundary that ends it."""
	depth = 0
	while i < len(tokens):
		ttype = tokens[i].type
		if ttype == "_LPAR":
			depth += 1
		elif ttype == "_RPAR":
			if depth == 0:
				return i + 1
			depth -= 1
		elif ttype in _LIST_BOUNDARY:
			return i
		i += 1
	return i


def _pull_window(next_token: Callable[[], Optional[Token]]) -> List[Token]:
	"""
	Buffer just enough tokens after `move` to decide on a specifier.

	One token when it is not `clone`, two when `clone` is not followed by `(`,
	otherwise everything up to the list's closing `)` (or a boundary token).
	"""
	window: List[Token] = []
	tok = next_token()
	if tok is None:
		return window
	window.append(tok)
	if not _is_clone_ident(tok):
		return window
	tok = next_token()
	if tok is None:
		return window
	window.append(tok)
	if tok.type != "_LPAR":
		return window
	depth = 0
	while True:
		tok = next_token()
		if tok is None:
			return window
		window.append(tok)
		if tok.type == "_LPAR":
			depth += 1
		elif tok.type == "_RPAR":
			if depth == 0:
				return window
			depth -= 1
		elif tok.type in _LIST_BOUNDARY:
			return window


class CaptureSpecLexer:
	"""Post-lexer that folds `clone` / `clone(...)` after `move` into a CAPTURE_SPEC token."""

	always_accept = ()

	def process(self, stream) -> Iterator[Token]:
		it = iter(stream)
		pending: List[Token] = []

		def _next() -> Optional[Token]:
			if pending:
				return pending.pop(0)
			return next(it, None)

		prev_type: Optional[str] = None
		while True:
			token = _next()
			if token is None:
				break
			yield token
			if token.type != "MOVE":
				prev_type = token.type
				continue

			openers = ASYNC_OPENERS if prev_type == "ASYNC" else CLOSURE_OPENERS
			prev_type = token.type
			window = _pull_window(_next)
			spec: object
			try:
				spec, end = parse_capture_specifier(window, 0, openers=openers)
			except CaptureParseError as err:
				spec, end = err, err.end
			if spec is not None:
				yield Token.new_borrow_pos(CAPTURE_SPEC, spec, window[0])
				prev_type = CAPTURE_SPEC
			# Unconsumed tokens go back through the loop (one may be another `move`).
			pending[:0] = window[end:]


__all__ = [
	"CLONE_KEYWORD",
	"CAPTURE_SPEC",
	"CLOSURE_OPENERS",
	"ASYNC_OPENERS",
	"CaptureParseError",
	"UnterminatedCaptureList",
	"DuplicateCapture",
	"EmptyCaptureList",
	"InvalidCaptureItem",
	"parse_capture_specifier",
	"CaptureSpecLexer",
]
