# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from moveclone.parser.ast import CaptureName, ExplicitClone, ImplicitClone, Located
from moveclone.stage1.capture_errors import UnknownCapture
from moveclone.stage1.capture_resolve import resolve_capture_set
from moveclone.stage1.captures import CaptureMode, FreeVariable
from moveclone.stage1.scopes import Binding, BindingKind

LOC = Located(line=1, column=1)


def _fv(*names: str) -> list[FreeVariable]:
	return [
		FreeVariable(name=n, loc=Located(line=1, column=i + 1), binding=Binding(name=n, kind=BindingKind.LOCAL, scope_id=0))
		for i, n in enumerate(names)
	]


def _explicit(*names: str) -> ExplicitClone:
	return ExplicitClone(loc=LOC, names=tuple(CaptureName(name=n, loc=LOC) for n in names))


def test_plain_move_moves_everything() -> None:
	decision = resolve_capture_set(None, _fv("a", "b"))
	assert decision.clone_names == []
	assert decision.move_names == ["a", "b"]


def test_implicit_clone_clones_in_first_use_order() -> None:
	decision = resolve_capture_set(ImplicitClone(loc=LOC), _fv("c", "a", "b"))
	assert decision.clone_names == ["c", "a", "b"]
	assert decision.move_names == []


def test_explicit_clone_list_order_and_partition() -> None:
	free = _fv("a", "b", "c")
	decision = resolve_capture_set(_explicit("c", "a"), free)
	assert decision.clone_names == ["c", "a"]
	assert decision.move_names == ["b"]
	clones, moves = set(decision.clone_names), set(decision.move_names)
	assert clones | moves == {fv.name for fv in free}
	assert not clones & moves
	assert decision.mode_of("b") is CaptureMode.MOVE
	assert decision.mode_of("a") is CaptureMode.CLONE
	assert decision.mode_of("zzz") is None


def test_explicit_clone_of_unused_name_is_rejected() -> None:
	with pytest.raises(UnknownCapture) as excinfo:
		resolve_capture_set(_explicit("a", "z"), _fv("a"))
	assert excinfo.value.name == "z"
	assert excinfo.value.code == "E-CAPTURE-UNKNOWN"
	assert "E-CAPTURE-UNKNOWN" in str(excinfo.value)


def test_implicit_clone_without_free_variables() -> None:
	decision = resolve_capture_set(ImplicitClone(loc=LOC), [])
	assert decision.items == ()
