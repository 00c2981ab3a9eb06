"""
Carrier
=======

Единый носитель: success / failure / asynchrony в одном значении.

A carrier pairs a payload with its effect metadata. The payload is in one
of two explicit states:

- settled: a kungfu ``Result`` (``Ok(value)`` or ``Error(error)``)
- pending: a ``Pending`` handle that resolves exactly once into a ``Result``

Consumers always branch on the state; a pending payload is never treated
as a settled one.
"""

from __future__ import annotations

import asyncio
import typing
from collections.abc import Callable, Coroutine, Generator
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from ._errors import PendingCarrierError
from .effects import EMPTY, Effects


class Pending[T, E]:
    """
    Not-yet-settled payload.

    Wraps a zero-arg coroutine factory. The coroutine runs once, as a task
    created on the first await; every awaiter observes the same Result.
    """

    __slots__ = ("_factory", "_task")

    def __init__(
        self,
        factory: Callable[[], Coroutine[typing.Any, typing.Any, Result[T, E]]],
        /,
    ) -> None:
        self._factory = factory
        self._task: asyncio.Future[Result[T, E]] | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def resolve(self) -> Result[T, E]:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        # A cancelled awaiter must not cancel the shared task
        return await asyncio.shield(self._task)

    def __await__(self) -> Generator[typing.Any, None, Result[T, E]]:
        return self.resolve().__await__()

    def __repr__(self) -> str:
        if self.done:
            assert self._task is not None
            return f"Pending({self._task.result()!r})"
        return "Pending(<unsettled>)"


type Payload[T, E] = Result[T, E] | Pending[T, E]


class Carrier[T, E]:
    """
    Success/failure payload plus its Effects.

    Invariant: the success value is never itself a Carrier.

    Awaiting a carrier yields its settled Result:

        match await carrier:
            case Ok(value): ...
            case Error(error): ...
    """

    __slots__ = ("_payload", "_effects")

    def __init__(self, payload: Payload[T, E], effects: Effects = EMPTY, /) -> None:
        self._payload = payload
        self._effects = effects

    @staticmethod
    def pending[V, Err](
        factory: Callable[[], Coroutine[typing.Any, typing.Any, Result[V, Err]]],
        effects: Effects = EMPTY,
        /,
    ) -> Carrier[V, Err]:
        """Build a carrier whose payload settles when the coroutine completes."""
        return Carrier(Pending(factory), effects.combine(Effects(is_async=True)))

    @property
    def payload(self) -> Payload[T, E]:
        return self._payload

    @property
    def effects(self) -> Effects:
        return self._effects

    @property
    def is_pending(self) -> bool:
        return isinstance(self._payload, Pending)

    def with_effects(self, effects: Effects, /) -> Carrier[T, E]:
        """Same payload, effects merged with the given record."""
        merged = self._effects.combine(effects)
        if merged is self._effects:
            return self
        return Carrier(self._payload, merged)

    async def resolve(self) -> Result[T, E]:
        """Settle the payload (no-op for settled carriers)."""
        payload = self._payload
        if isinstance(payload, Pending):
            return await payload
        return payload

    def __await__(self) -> Generator[typing.Any, None, Result[T, E]]:
        return self.resolve().__await__()

    def __repr__(self) -> str:
        return f"Carrier({self._payload!r}, {self._effects!r})"


@dataclass(frozen=True, slots=True)
class Fail[E]:
    """
    Transient failure marker returned from a handler body.

    Not a carrier: wrap() converts it into an error carrier at the
    boundary where it is produced. Usable in annotations:

        def parse(raw: str) -> int | Fail[ParseFailed]: ...
    """

    error: E


# ============================================================================
# Tags
# ============================================================================


def tag_of(error: typing.Any) -> str:
    """Discriminant of an error value: its ``_tag`` or its class name."""
    tag = getattr(error, "_tag", None)
    if isinstance(tag, str):
        return tag
    return type(error).__name__


def declared_tag(declared: str | type) -> str:
    """Discriminant of a declared error variant (a tag or an error type)."""
    if isinstance(declared, str):
        return declared
    tag = getattr(declared, "_tag", None)
    if isinstance(tag, str):
        return tag
    return declared.__name__


# ============================================================================
# Constructors
# ============================================================================


def ok[T](value: T) -> Carrier[T, typing.Never]:
    """
    Wrap a plain value in a success carrier with empty effects.

    A carrier passed in is returned unchanged, so ok() never nests.
    """
    if isinstance(value, Carrier):
        return value
    return Carrier(Ok(value), EMPTY)


def err[E](error: E) -> Carrier[typing.Never, E]:
    """Build a failure carrier declaring the error's tag."""
    return Carrier(Error(error), Effects.with_errors(tag_of(error)))


def fail[E](error: E) -> Fail[E]:
    """
    Build a Fail marker for use inside a handler body.

    Example:
        @lifted
        def parse(raw: str) -> int | Fail[str]:
            if not raw.isdigit():
                return fail("not a number")
            return int(raw)
    """
    return Fail(error)


# ============================================================================
# Predicates
# ============================================================================


def is_carrier(value: object) -> typing.TypeGuard[Carrier[typing.Any, typing.Any]]:
    return isinstance(value, Carrier)


def is_fail(value: object) -> typing.TypeGuard[Fail[typing.Any]]:
    return isinstance(value, Fail)


def is_pending(carrier: Carrier[typing.Any, typing.Any]) -> bool:
    return carrier.is_pending


def is_ok(carrier: Carrier[typing.Any, typing.Any]) -> bool:
    """Is a settled carrier in the ok state? Pending carriers raise."""
    match carrier.payload:
        case Pending():
            raise PendingCarrierError("is_ok")
        case Ok(_):
            return True
        case _:
            return False


def is_err(carrier: Carrier[typing.Any, typing.Any]) -> bool:
    """Is a settled carrier in the error state? Pending carriers raise."""
    match carrier.payload:
        case Pending():
            raise PendingCarrierError("is_err")
        case Error(_):
            return True
        case _:
            return False


__all__ = (
    "Carrier",
    "Fail",
    "Payload",
    "Pending",
    "declared_tag",
    "err",
    "fail",
    "is_carrier",
    "is_err",
    "is_fail",
    "is_ok",
    "is_pending",
    "ok",
    "tag_of",
)
