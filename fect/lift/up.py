"""
Подъем значений в носитель (Carrier).

Функции для преобразования обычных значений, Result, Optional, awaitable и
exception-based кода в Carrier.
"""

from __future__ import annotations

import typing
from collections.abc import Awaitable, Callable
from typing import Never

from kungfu import Error, Ok, Result

from .._types import DefectMapper, Source
from ..carrier import Carrier, declared_tag, err, ok, tag_of
from ..effects import EMPTY, Effects
from ..fn import wrap


def pure[T](value: T) -> Carrier[T, Never]:
    """
    Lift pure value into always-succeeding Carrier.

    **When to use:** When you have a plain value and need to start a chain.

    Example:
        from fect import lift as L

        user = L.up.pure(User(id=42))
        await L.down.to_result(user)  # Ok(User(id=42))

    **Grammar:** `L.up.pure(value)` reads as "lift up pure value"
    """
    return ok(value)


def fail[E](error: E) -> Carrier[Never, E]:
    """
    Create always-failing Carrier. Dual of pure().

    Unlike ``fect.fail`` (a marker returned from a handler body), this is
    a finished error carrier declaring the error's tag.

    Example:
        error = L.up.fail(NotFound.of(resource="user"))
        error.effects.errors  # frozenset({"NotFound"})

    **Grammar:** `L.up.fail(error)` reads as "lift up fail with error"
    """
    return err(error)


def from_result[T, E](value: Result[T, E]) -> Carrier[T, E]:
    """
    Lift already-computed kungfu Result into a Carrier.

    **When to use:** When you have a sync function returning Result and need
    to feed it into wrapped handlers.

    Example:
        def validate_score(user: User) -> Result[User, LowScore]: ...

        rank = wrap(rank_user)
        rank(L.up.from_result(validate_score(user)))

    **Grammar:** `L.up.from_result(result)` reads as "lift up from result"
    """
    match value:
        case Error(error):
            return Carrier(value, Effects.with_errors(tag_of(error)))
        case _:
            return Carrier(value, EMPTY)


def from_awaitable[T](source: Source[T]) -> Carrier[T, typing.Any]:
    """
    Lift an awaitable (coroutine, Future, RemoteValue) into a pending Carrier.

    A raising awaitable settles into ``PromiseRejected``.

    Example:
        reply = L.up.from_awaitable(remote_value(timeout=1.0))
    """
    return _identity(source)


def optional[T, E](
    value: T | None,
    *,
    error: Callable[[], E],
) -> Carrier[T, E]:
    """
    Convert Optional to Carrier. None becomes an error carrier of error().

    **When to use:** Lookups that return None for a miss, where the miss
    should travel on as an error.

    Example:
        def get_user(user_id: int) -> Carrier[User, NotFound]:
            user = db.find(user_id)  # returns User | None
            return L.up.optional(user, error=lambda: NotFound.of(resource="user"))

    **Grammar:** `L.up.optional(value, error=...)` reads as "lift up optional value"

    NOTE: error is a thunk (zero-arg callable) to avoid computing
          error when value is present.
    """
    if value is None:
        return err(error())
    return ok(value)


def _handler_tags(on_error: DefectMapper[typing.Any]) -> Effects:
    if isinstance(on_error, type):
        return Effects.with_errors(declared_tag(on_error))
    return EMPTY


def catching[T, E](
    thunk: Callable[[], T],
    *,
    on_error: DefectMapper[E],
) -> Carrier[T, E]:
    """
    Execute sync thunk, catch exceptions and convert to an error carrier.

    **When to use:** Bridge between exception-based code and carriers.

    Example:
        import json

        def parse_json(raw: str) -> Carrier[dict, ParseFailed]:
            return L.up.catching(
                lambda: json.loads(raw),
                on_error=lambda e: ParseFailed.of(reason=str(e)),
            )

    **Grammar:** `L.up.catching(thunk, on_error=...)` reads as "lift up catching exceptions"

    NOTE: Catches all Exception subclasses. For specific exceptions,
          filter in on_error or use try/except manually.
    """
    try:
        return Carrier(Ok(thunk()), _handler_tags(on_error))
    except Exception as exc:
        error = on_error(exc)
        return Carrier(Error(error), _handler_tags(on_error).combine(Effects.with_errors(tag_of(error))))


def catching_async[T, E](
    thunk: Callable[[], Awaitable[T]],
    *,
    on_error: DefectMapper[E],
) -> Carrier[T, E]:
    """
    Execute async thunk lazily, catch exceptions and convert to Error.

    The thunk runs when the carrier is first awaited.

    Example:
        import httpx

        def fetch_external(url: str) -> Carrier[Response, FetchFailed]:
            return L.up.catching_async(
                lambda: httpx.AsyncClient().get(url),
                on_error=lambda e: FetchFailed.of(url=url),
            )

    **Grammar:** `L.up.catching_async(thunk, on_error=...)` reads as "lift up catching async"
    """

    async def run() -> Result[T, E]:
        try:
            return Ok(await thunk())
        except Exception as exc:
            return Error(on_error(exc))

    return Carrier.pending(run, _handler_tags(on_error))


_identity: typing.Final = wrap(lambda value: value)


__all__ = (
    "pure",
    "fail",
    "from_result",
    "from_awaitable",
    "optional",
    "catching",
    "catching_async",
)
