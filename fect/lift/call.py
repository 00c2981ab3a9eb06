"""
Вызов функций с автоматическим лифтингом.

Декоратор и функция вызова поверх wrap(): аргументы могут быть
значениями, Carrier, Lazy или awaitable.
"""

from __future__ import annotations

import typing
from collections.abc import Callable

from ..fn import WrapOptions, wrap


@typing.overload
def lifted[**P](func: Callable[P, typing.Any], /) -> Callable[..., typing.Any]: ...


@typing.overload
def lifted(
    func: None = None,
    /,
    options: WrapOptions | None = None,
    **overrides: typing.Any,
) -> Callable[[Callable[..., typing.Any]], Callable[..., typing.Any]]: ...


def lifted(
    func: Callable[..., typing.Any] | None = None,
    /,
    options: WrapOptions | None = None,
    **overrides: typing.Any,
) -> typing.Any:
    """
    Decorator form of wrap().

    **When to use:** For frequently-used functions that should always take
    part in carrier chains. Prefer `call()` at call site for locality.

    Example:
        from fect import lift as L

        @L.lifted
        def add(a: int, b: int) -> int:
            return a + b

        @L.lifted(errors=(NotFound,), map_thrown=Crashed)
        async def fetch_user(user_id: int) -> User | Fail[NotFound]:
            ...

        add(ok(1), 2)           # Carrier(Ok(3))
        await fetch_user(42)    # Ok(User(...)) or Error(NotFound(...))

    **Grammar:** `@L.lifted` reads as "lifted function"
    """
    if func is not None:
        return wrap(func, options, **overrides)

    def decorator(inner: Callable[..., typing.Any]) -> Callable[..., typing.Any]:
        return wrap(inner, options, **overrides)

    return decorator


def call(
    func: Callable[..., typing.Any],
    /,
    *args: typing.Any,
    **kwargs: typing.Any,
) -> typing.Any:
    """
    Call a plain function with wrap() semantics, at the call site.

    **Design philosophy:**
    - Pure functions (no carrier dependency) are easier to test
    - Lift at call site keeps the intent local

    Example:
        async def fetch_user_impl(user_id: int) -> User: ...

        result = await L.down.to_result(L.call(fetch_user_impl, ok(42)))

    **Grammar:** `L.call(func, *args, **kwargs)` reads as "call function with args"
    """
    return wrap(func)(*args, **kwargs)


__all__ = (
    "call",
    "lifted",
)
