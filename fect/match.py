"""
Match
=====

Discharge: turn a carrier (or a plain value) into a concrete result.

    match(carrier).with_(
        ok=lambda user: user.name,
        err={
            "NotFound": lambda e: "guest",
            "Unauthorized": lambda e: "denied",
        },
    )

- ``match(carrier).with_(ok=..., err=...)``: ``err`` is one catch-all
  callable or a mapping keyed by error tag. A pending carrier returns a
  coroutine that dispatches once settled.
- ``match(carrier).exhaustive(...)``: same, but a tag mapping must cover
  every declared error variant up front.
- ``match(value).with_({...})``: plain values dispatch by ``_tag``, then by
  literal key, then by type name (along the MRO), then the ``"_"`` key.
- ``partial(carrier).with_(err={...})``: recover selected tags into
  successes and drop them from the declared error set.
- ``try_(carrier)``: the value, or raise the error.
"""

from __future__ import annotations

import typing
from collections.abc import Callable, Coroutine, Mapping

from kungfu import Error, Ok, Result

from ._errors import CarrierError, MissingHandlerError, UnhandledMatchError
from ._types import ErrorHandlers
from .carrier import Carrier, Pending, ok, tag_of
from .lazy import force

# Fallback key for plain-value matching (как `case _:`)
DEFAULT: typing.Final = "_"

_LITERAL_TYPES: typing.Final = (str, bytes, int, float, bool, type(None))
_MISSING: typing.Final = object()

type Handler = Callable[[typing.Any], typing.Any]
type ErrBranch = Handler | ErrorHandlers[typing.Any]


def _table(
    handlers: Mapping[typing.Any, Handler] | None,
    named: Mapping[str, Handler],
) -> dict[typing.Any, Handler]:
    table: dict[typing.Any, Handler] = dict(handlers or {})
    table.update(named)
    return table


# ============================================================================
# Carrier dispatch
# ============================================================================


def _dispatch[R](result: Result[typing.Any, typing.Any], on_ok: Handler, on_err: ErrBranch | None) -> R:
    match result:
        case Ok(value):
            return on_ok(value)
        case Error(error):
            if on_err is None:
                raise MissingHandlerError("err", f"Missing error handler for {tag_of(error)!r}")
            if isinstance(on_err, Mapping):
                tag = tag_of(error)
                handler = on_err.get(tag)
                if handler is None:
                    raise MissingHandlerError("err", f"Missing error handler for {tag!r}")
                return handler(error)
            return on_err(error)
        case _ as unreachable:
            raise AssertionError(f"not a settled payload: {unreachable!r}")


async def _dispatch_pending[R](carrier: Carrier[typing.Any, typing.Any], on_ok: Handler, on_err: ErrBranch | None) -> R:
    result = await carrier.resolve()
    return _dispatch(result, on_ok, on_err)


class CarrierMatch[T, E]:
    """Result of match() on a carrier."""

    __slots__ = ("_carrier",)

    def __init__(self, carrier: Carrier[T, E], /) -> None:
        self._carrier = carrier

    def with_(
        self,
        handlers: Mapping[str, typing.Any] | None = None,
        /,
        **named: typing.Any,
    ) -> typing.Any:
        """
        Dispatch to ``ok`` or ``err``.

        Returns the handler's result, or a coroutine of it when the
        carrier is pending.
        """
        table = _table(handlers, named)
        on_ok = table.get("ok")
        if not callable(on_ok):
            raise MissingHandlerError("ok")
        on_err = table.get("err")
        if on_err is None and self._carrier.effects.errors:
            raise MissingHandlerError("err", f"Missing error handler for {sorted(self._carrier.effects.errors)}")
        if on_err is not None and not (callable(on_err) or isinstance(on_err, Mapping)):
            raise TypeError("err must be a callable or a mapping of tag -> callable")

        payload = self._carrier.payload
        if isinstance(payload, Pending):
            return _dispatch_pending(self._carrier, on_ok, on_err)
        return _dispatch(payload, on_ok, on_err)

    def exhaustive(
        self,
        handlers: Mapping[str, typing.Any] | None = None,
        /,
        **named: typing.Any,
    ) -> typing.Any:
        """with_() that first checks every declared error tag is handled."""
        table = _table(handlers, named)
        declared = self._carrier.effects.errors
        on_err = table.get("err")
        if isinstance(on_err, Mapping):
            missing = declared - on_err.keys()
            if missing:
                raise MissingHandlerError("err", f"Missing error handlers for {sorted(missing)}")
        return self.with_(table)


# ============================================================================
# Plain value dispatch
# ============================================================================


def _dispatch_plain(value: typing.Any, table: Mapping[typing.Any, Handler]) -> typing.Any:
    # 1. tagged discriminant
    tag = getattr(value, "_tag", None)
    if isinstance(tag, str):
        handler = table.get(tag)
        if callable(handler):
            bound = getattr(value, "value", _MISSING)
            return handler(value if bound is _MISSING else bound)

    # 2. exact literal (same type, equal value: True does not match 1)
    if isinstance(value, _LITERAL_TYPES):
        for key, handler in table.items():
            if type(key) is type(value) and key == value:
                return handler(value)

    # 3. type name, most specific first
    for cls in type(value).__mro__:
        handler = table.get(cls.__name__)
        if callable(handler):
            return handler(value)

    # 4. fallback
    handler = table.get(DEFAULT)
    if callable(handler):
        return handler(value)

    raise UnhandledMatchError(value)


class ValueMatch[T]:
    """Result of match() on a plain value."""

    __slots__ = ("_value",)

    def __init__(self, value: T, /) -> None:
        self._value = value

    def with_(
        self,
        handlers: Mapping[typing.Any, Handler] | None = None,
        /,
        **named: Handler,
    ) -> typing.Any:
        return _dispatch_plain(self._value, _table(handlers, named))


@typing.overload
def match[T, E](input: Carrier[T, E], /) -> CarrierMatch[T, E]: ...


@typing.overload
def match[T](input: T, /) -> ValueMatch[T] | CarrierMatch[typing.Any, typing.Any]: ...


def match(input: typing.Any, /) -> CarrierMatch[typing.Any, typing.Any] | ValueMatch[typing.Any]:
    """
    Start a discharge.

    Lazy inputs are forced first; what they yield decides carrier vs
    plain dispatch.

    **Grammar:** `match(x).with_(...)` reads as "match x with handlers"
    """
    value = force(input)
    if isinstance(value, Carrier):
        return CarrierMatch(value)
    return ValueMatch(value)


# ============================================================================
# Partial discharge
# ============================================================================


class PartialMatch[T, E]:
    """Result of partial(): narrows the declared error set."""

    __slots__ = ("_carrier",)

    def __init__(self, carrier: Carrier[T, E], /) -> None:
        self._carrier = carrier

    def with_(
        self,
        handlers: Mapping[str, typing.Any] | None = None,
        /,
        **named: typing.Any,
    ) -> Carrier[typing.Any, typing.Any]:
        """Recover the selected tags: ``with_(err={"NotFound": lambda e: fallback})``."""
        table = _table(handlers, named)
        selected = table.get("err")
        if selected is None:
            raise MissingHandlerError("err")
        if not isinstance(selected, Mapping):
            raise TypeError("partial() takes a mapping of tag -> callable for err")

        carrier = self._carrier
        effects = carrier.effects.without(selected.keys())
        payload = carrier.payload

        if isinstance(payload, Pending):

            async def run() -> Result[typing.Any, typing.Any]:
                result = await carrier.resolve()
                recovered = _recover(result, selected)
                if isinstance(recovered, Carrier):
                    return await recovered.resolve()
                return recovered

            return Carrier(Pending(run), effects)

        recovered = _recover(payload, selected)
        if isinstance(recovered, Carrier):
            return Carrier(recovered.payload, effects.combine(recovered.effects))
        return Carrier(recovered, effects)


def _recover(
    result: Result[typing.Any, typing.Any],
    selected: ErrorHandlers[typing.Any],
) -> Result[typing.Any, typing.Any] | Carrier[typing.Any, typing.Any]:
    match result:
        case Error(error):
            handler = selected.get(tag_of(error))
            if handler is None:
                return result
            replacement = handler(error)
            if isinstance(replacement, Carrier):
                return replacement
            return Ok(replacement)
        case _:
            return result


def partial[T, E](input: Carrier[T, E] | T, /) -> PartialMatch[typing.Any, typing.Any]:
    """
    Start a partial discharge.

    Example:
        narrowed = partial(carrier).with_(err={"NotFound": lambda e: "guest"})
        narrowed.effects.errors   # declared tags without "NotFound"
    """
    value = force(input)
    return PartialMatch(ok(value))


# ============================================================================
# Throwing extraction
# ============================================================================


def _unwrap(result: Result[typing.Any, typing.Any]) -> typing.Any:
    match result:
        case Ok(value):
            return value
        case Error(error):
            if isinstance(error, BaseException):
                raise error
            cause = getattr(error, "cause", None)
            raise CarrierError(error) from (cause if isinstance(cause, BaseException) else None)
        case _ as unreachable:
            raise AssertionError(f"not a settled payload: {unreachable!r}")


async def _unwrap_pending(carrier: Carrier[typing.Any, typing.Any]) -> typing.Any:
    return _unwrap(await carrier.resolve())


def try_[T](input: Carrier[T, typing.Any] | T, /) -> T | Coroutine[typing.Any, typing.Any, T]:
    """
    Extract the value or raise the error.

    **When to use:** at a program boundary where failure should become an
    exception. Exceptions are raised as-is; other error values are raised
    as CarrierError (``.error`` holds the value).

    Returns a coroutine for pending carriers:

        value = try_(sync_carrier)
        value = await try_(async_carrier)
    """
    value = force(input)
    if not isinstance(value, Carrier):
        return value
    payload = value.payload
    if isinstance(payload, Pending):
        return _unwrap_pending(value)
    return _unwrap(payload)


__all__ = (
    "DEFAULT",
    "CarrierMatch",
    "PartialMatch",
    "ValueMatch",
    "match",
    "partial",
    "try_",
)
