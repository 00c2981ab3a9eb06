"""
Опускание носителя в значение.

Функции для ожидания Carrier и извлечения результата в виде Result или значения.
"""

from __future__ import annotations

import typing

from kungfu import Error, Ok, Result

from ..carrier import Carrier, ok
from ..match import try_


async def to_result[T, E](carrier: Carrier[T, E] | T) -> Result[T, E]:
    """
    Settle carrier and return its kungfu Result.

    **When to use:** Standard way to leave the carrier world and keep
    working with Result (``.map``, ``.unwrap_or``...).

    Example:
        from fect import lift as L

        result = await L.down.to_result(wrap(fetch_user)(ok(42)))
        # result: Ok(User(id=42))

    **Grammar:** `await L.down.to_result(carrier)` reads as "run down to result"
    """
    return await ok(carrier).resolve()


async def unsafe[T, E](carrier: Carrier[T, E] | T) -> T:
    """
    Settle and unwrap, raises on Error.

    Exceptions are raised as they are; other error values as CarrierError.

    Example:
        user = await L.down.unsafe(fetch_user(42))
        # Returns User(id=42) or raises

    **Grammar:** `await L.down.unsafe(carrier)` reads as "run down unsafe (may raise)"
    """
    result = await to_result(carrier)
    return typing.cast(T, try_(Carrier(result)))


async def or_else[T, E](carrier: Carrier[T, E] | T, default: T) -> T:
    """
    Settle and return value or default.

    Example:
        user = await L.down.or_else(
            fetch_user(42),
            default=User(id=0, name="Guest"),
        )

    **Grammar:** `await L.down.or_else(carrier, default=...)` reads as "run down or else default"
    """
    result = await to_result(carrier)
    match result:
        case Ok(v):
            return v
        case Error(_):
            return default


__all__ = (
    "to_result",
    "unsafe",
    "or_else",
)
