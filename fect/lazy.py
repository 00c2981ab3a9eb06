"""
Lazy
====

Memoized suspension of a computation.

The thunk runs on first use only: an explicit ``force()`` / ``.value``,
or any implicit coercion (arithmetic, comparison, ``str()``, ``int()``,
``bool()``, ``len()``, iteration, indexing). A Lazy handed to a function
that never touches it is never forced.

    counter = 0

    def expensive() -> int:
        global counter
        counter += 1
        return 21

    answer = lazy(expensive)
    answer * 2   # 42, counter == 1
    answer * 2   # 42, counter == 1 (memoized)
"""

from __future__ import annotations

import functools
import operator
import typing
from collections.abc import Callable, Iterator

from ._errors import LazyCycleError
from ._types import Thunk

_UNFORCED: typing.Final = object()
_FORCING: typing.Final = object()


class Lazy[T]:
    """Memoized, implicitly-coercible thunk."""

    __slots__ = ("_thunk", "_value", "_exception")

    def __init__(self, thunk: Thunk[T], /) -> None:
        self._thunk: Thunk[T] | None = thunk
        self._value: typing.Any = _UNFORCED
        self._exception: Exception | None = None

    @property
    def is_forced(self) -> bool:
        return self._value is not _UNFORCED and self._value is not _FORCING

    @property
    def value(self) -> T:
        """Explicit read-through accessor; same as force()."""
        return self.force()

    def force(self) -> T:
        """
        Run the thunk once and cache the outcome.

        Nested Lazy results are forced until a non-lazy value is reached.
        A raised exception is cached too and re-raised on later forces.
        """
        if self._exception is not None:
            raise self._exception
        if self._value is _FORCING:
            raise LazyCycleError()
        if self._value is not _UNFORCED:
            return self._value

        thunk = self._thunk
        assert thunk is not None
        self._value = _FORCING
        try:
            result: typing.Any = thunk()
            while isinstance(result, Lazy):
                result = result.force()
        except Exception as exc:
            self._value = _UNFORCED
            self._exception = exc
            self._thunk = None
            raise
        except BaseException:
            self._value = _UNFORCED
            raise

        self._value = result
        self._thunk = None
        return result

    # Implicit coercions

    def __bool__(self) -> bool:
        return bool(self.force())

    def __int__(self) -> int:
        return int(self.force())  # type: ignore[call-overload]

    def __float__(self) -> float:
        return float(self.force())  # type: ignore[arg-type]

    def __complex__(self) -> complex:
        return complex(self.force())  # type: ignore[arg-type]

    def __index__(self) -> int:
        return operator.index(self.force())  # type: ignore[arg-type]

    def __str__(self) -> str:
        return str(self.force())

    def __format__(self, format_spec: str) -> str:
        return format(self.force(), format_spec)

    def __hash__(self) -> int:
        return hash(self.force())

    def __len__(self) -> int:
        return len(self.force())  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[typing.Any]:
        return iter(self.force())  # type: ignore[call-overload]

    def __getitem__(self, key: typing.Any) -> typing.Any:
        return self.force()[key]  # type: ignore[index]

    def __contains__(self, item: object) -> bool:
        return item in self.force()  # type: ignore[operator]

    def __neg__(self) -> typing.Any:
        return -self.force()  # type: ignore[operator]

    def __pos__(self) -> typing.Any:
        return +self.force()  # type: ignore[operator]

    def __abs__(self) -> typing.Any:
        return abs(self.force())  # type: ignore[arg-type]

    def __invert__(self) -> typing.Any:
        return ~self.force()  # type: ignore[operator]

    def __round__(self, ndigits: int | None = None) -> typing.Any:
        return round(self.force(), ndigits)  # type: ignore[call-overload]

    def __eq__(self, other: object) -> bool:
        return self.force() == force(other)

    def __ne__(self, other: object) -> bool:
        return self.force() != force(other)

    def __lt__(self, other: typing.Any) -> bool:
        return self.force() < force(other)  # type: ignore[operator]

    def __le__(self, other: typing.Any) -> bool:
        return self.force() <= force(other)  # type: ignore[operator]

    def __gt__(self, other: typing.Any) -> bool:
        return self.force() > force(other)  # type: ignore[operator]

    def __ge__(self, other: typing.Any) -> bool:
        return self.force() >= force(other)  # type: ignore[operator]

    def __repr__(self) -> str:
        if self.is_forced:
            return f"Lazy({self._value!r})"
        return "Lazy(<unforced>)"


def _binary(op: Callable[[typing.Any, typing.Any], typing.Any]) -> Callable[..., typing.Any]:
    def method(self: Lazy[typing.Any], other: typing.Any) -> typing.Any:
        return op(self.force(), force(other))

    return method


def _reflected(op: Callable[[typing.Any, typing.Any], typing.Any]) -> Callable[..., typing.Any]:
    def method(self: Lazy[typing.Any], other: typing.Any) -> typing.Any:
        return op(force(other), self.force())

    return method


# Arithmetic / bitwise operators force both operands
_OPERATORS: typing.Final = {
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
    "matmul": operator.matmul,
    "truediv": operator.truediv,
    "floordiv": operator.floordiv,
    "mod": operator.mod,
    "divmod": divmod,
    "pow": operator.pow,
    "lshift": operator.lshift,
    "rshift": operator.rshift,
    "and": operator.and_,
    "xor": operator.xor,
    "or": operator.or_,
}

for _name, _op in _OPERATORS.items():
    setattr(Lazy, f"__{_name}__", _binary(_op))
    setattr(Lazy, f"__r{_name}__", _reflected(_op))
del _name, _op


def lazy[T](thunk: Callable[..., T], /, *args: typing.Any, **kwargs: typing.Any) -> Lazy[T]:
    """
    Defer a computation.

    **When to use:** an argument that is expensive (or failing) and may not
    be needed by the handler that receives it.

    Example:
        total = lazy(sum_slowly, numbers)      # nothing runs yet
        first = wrap(lambda a, b: a)
        force(first(10, total))                # carrier holding 10, sum_slowly never ran

    **Grammar:** `lazy(handler, *args)` reads as "lazily call handler with args"
    """
    if args or kwargs:
        return Lazy(functools.partial(thunk, *args, **kwargs))
    return Lazy(thunk)


def force[T](value: Lazy[T] | T) -> T:
    """Force a Lazy (and any Lazy it yields); other values pass through."""
    if isinstance(value, Lazy):
        return value.force()
    return value


def is_lazy(value: object) -> typing.TypeGuard[Lazy[typing.Any]]:
    return isinstance(value, Lazy)


__all__ = ("Lazy", "force", "is_lazy", "lazy")
