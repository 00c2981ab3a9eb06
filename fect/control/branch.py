"""
Branch combinators
==================

Условное выражение поверх (возможно заражённого) условия.

    if_(is_admin, then=lambda: "full", else_=lambda: "read-only")
    if_(is_admin).then("full").else_("read-only")
    if_(is_admin).with_(then="full", else_="read-only")

The condition goes through wrap(): a plain condition gives the plain branch
result, a carrier / awaitable condition gives a carrier, a Lazy condition
gives a Lazy. A branch producing ``Fail`` or a carrier is flattened.
"""

from __future__ import annotations

import typing
from collections.abc import Callable
from dataclasses import dataclass

from ..fn import wrap

_MISSING: typing.Final = object()


@dataclass(frozen=True, slots=True)
class Deferred[T]:
    """Branch value computed only when its branch is taken."""

    thunk: Callable[[], T]

    def __post_init__(self) -> None:
        if not callable(self.thunk):
            raise ValueError("defer() takes a zero-argument callable")


def defer[T](thunk: Callable[[], T], /) -> Deferred[T]:
    """
    Mark a branch as computed on demand.

    Example:
        if_(flag).then(defer(load_config)).else_(DEFAULTS)
    """
    return Deferred(thunk)


def _realize(branch: typing.Any, *, call_callables: bool) -> typing.Any:
    if isinstance(branch, Deferred):
        return branch.thunk()
    if call_callables and callable(branch):
        return branch()
    return branch


def _select(condition: typing.Any, then: typing.Any, else_: typing.Any, *, call_callables: bool) -> typing.Any:
    def choose(flag: typing.Any) -> typing.Any:
        return _realize(then if flag else else_, call_callables=call_callables)

    return wrap(choose, plain=True)(condition)


class IfElse:
    """Builder after ``if_(cond).then(x)``."""

    __slots__ = ("_condition", "_then")

    def __init__(self, condition: typing.Any, then: typing.Any) -> None:
        self._condition = condition
        self._then = then

    def else_(self, value: typing.Any, /) -> typing.Any:
        return _select(self._condition, self._then, value, call_callables=False)


class If:
    """Builder returned by ``if_(cond)``."""

    __slots__ = ("_condition",)

    def __init__(self, condition: typing.Any) -> None:
        self._condition = condition

    def then(self, value: typing.Any, /) -> IfElse:
        return IfElse(self._condition, value)

    def with_(self, *, then: typing.Any, else_: typing.Any) -> typing.Any:
        return _select(self._condition, then, else_, call_callables=False)


def if_(condition: typing.Any, then: typing.Any = _MISSING, else_: typing.Any = _MISSING) -> typing.Any:
    """
    Conditional expression over a value, carrier, awaitable or Lazy.

    Three forms:
    - ``if_(cond, then, else_)``: callable branches are invoked
    - ``if_(cond).then(x).else_(y)``: branches are values (use defer())
    - ``if_(cond).with_(then=x, else_=y)``: same, by name

    Example:
        if_(ok(True), lambda: NotAllowed.err(), lambda: 123)
        # error carrier declaring NotAllowed

        await try_(if_(fetch_flag(), "on", "off"))   # "on" / "off"
    """
    if then is _MISSING and else_ is _MISSING:
        return If(condition)
    if then is _MISSING or else_ is _MISSING:
        raise TypeError("if_() takes both then and else_, or neither")
    return _select(condition, then, else_, call_callables=True)


__all__ = (
    "Deferred",
    "If",
    "IfElse",
    "defer",
    "if_",
)
